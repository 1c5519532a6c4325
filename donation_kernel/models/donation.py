"""
Module: donation_kernel.models.donation
Responsibility: ORM persistence for monetary donations and their payment
    status.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - operator_transaction_id is unique when present: it is the idempotency
      key of inbound payment callbacks.
    - amount > 0 (check constraint).
    - status moves PENDING -> COMPLETED | FAILED exactly once; both targets
      are terminal.  The transition is a compare-and-set performed by the
      Ledger Reconciler.

Failure modes:
    - IntegrityError on a duplicate operator_transaction_id.
"""

from decimal import Decimal
from enum import Enum
from uuid import UUID

from sqlalchemy import CheckConstraint, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from donation_kernel.db.base import MONEY, TimestampedBase, UUIDString


class DonationStatus(str, Enum):
    """Payment status of a financial donation."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_DONATION_STATUSES: frozenset[DonationStatus] = frozenset(
    {DonationStatus.COMPLETED, DonationStatus.FAILED}
)


class FinancialDonation(TimestampedBase):
    """
    A monetary pledge tied to a payment-operator transaction.

    Contract:
        user_id is nullable: anonymous donations are allowed.  The amount
        reaches the campaign total only when the status becomes COMPLETED.
    """

    __tablename__ = "financial_donations"

    __table_args__ = (
        UniqueConstraint(
            "operator_transaction_id",
            name="uq_financial_donations_operator_tx",
        ),
        CheckConstraint("amount > 0", name="ck_financial_donations_positive"),
        CheckConstraint(
            "status IN ('pending', 'completed', 'failed')",
            name="ck_financial_donations_valid_status",
        ),
        Index("idx_financial_donations_campaign_status", "campaign_id", "status"),
    )

    campaign_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("campaigns.id"),
        nullable=False,
    )

    user_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("users.id"),
        nullable=True,
    )

    donor_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)

    # Mobile-money / card operator handling the payment (e.g. "orange_money")
    payment_operator: Mapped[str] = mapped_column(String(50), nullable=False)

    operator_transaction_id: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )

    status: Mapped[DonationStatus] = mapped_column(
        String(20),
        default=DonationStatus.PENDING,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<FinancialDonation {self.operator_transaction_id}: {self.status} {self.amount}>"

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_DONATION_STATUSES
