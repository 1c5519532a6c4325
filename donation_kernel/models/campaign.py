"""
Module: donation_kernel.models.campaign
Responsibility: ORM persistence for fundraising campaigns and their running
    total.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - current_amount == sum(amount) over this campaign's COMPLETED financial
      donations.  Only the Ledger Reconciler mutates current_amount, and only
      with a SQL-side increment inside the transaction that completes the
      donation (or with a recomputation during a reconciliation pass).
    - goal_amount > 0 and current_amount >= 0 (check constraints).
    - status is admin-controlled; campaigns are never deleted.
"""

from decimal import Decimal
from enum import Enum
from uuid import UUID

from sqlalchemy import JSON, CheckConstraint, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from donation_kernel.db.base import MONEY, TimestampedBase, UUIDString


class CampaignStatus(str, Enum):
    """Moderation status of a campaign."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Campaign(TimestampedBase):
    """
    A fundraising effort owned by the user that created it.

    Contract:
        Created PENDING with current_amount 0.  Accumulates only through the
        Ledger Reconciler.  Moderated by admins.
    """

    __tablename__ = "campaigns"

    __table_args__ = (
        CheckConstraint("goal_amount > 0", name="ck_campaigns_positive_goal"),
        CheckConstraint(
            "current_amount >= 0", name="ck_campaigns_nonnegative_total"
        ),
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')",
            name="ck_campaigns_valid_status",
        ),
        Index("idx_campaigns_status_created", "status", "created_at"),
        Index("idx_campaigns_user", "user_id"),
    )

    user_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("users.id"),
        nullable=False,
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    goal_amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)

    # Running total of completed donations
    current_amount: Mapped[Decimal] = mapped_column(
        MONEY,
        default=Decimal("0.00"),
        nullable=False,
    )

    status: Mapped[CampaignStatus] = mapped_column(
        String(20),
        default=CampaignStatus.PENDING,
        nullable=False,
    )

    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    image_urls: Mapped[list | None] = mapped_column(JSON, nullable=True)

    def __repr__(self) -> str:
        return f"<Campaign {self.title}: {self.status} {self.current_amount}/{self.goal_amount}>"

    @property
    def is_accepting_donations(self) -> bool:
        return self.status == CampaignStatus.APPROVED
