"""
Module: donation_kernel.models.boutique
Responsibility: ORM persistence for published boutique items and the
    beneficiary orders that request them.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - An item is derived from at most one material donation, and a material
      donation yields at most one item (unique source_donation_id).
    - Item status moves AVAILABLE -> ALLOCATED | UNAVAILABLE; both targets
      are terminal.
    - Order status moves PENDING_APPROVAL -> APPROVED | REJECTED; both
      targets are terminal.
    - At most one order per item ever reaches APPROVED.  The Allocation
      Workflow approves an order only in the same transaction that flips the
      item AVAILABLE -> ALLOCATED via compare-and-set.
"""

from datetime import datetime
from enum import Enum
from uuid import UUID

from sqlalchemy import (
    JSON,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from donation_kernel.db.base import TimestampedBase, UUIDString, utcnow


class ItemStatus(str, Enum):
    AVAILABLE = "available"
    ALLOCATED = "allocated"
    UNAVAILABLE = "unavailable"


class OrderStatus(str, Enum):
    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"
    REJECTED = "rejected"


class BoutiqueItem(TimestampedBase):
    """A requestable good published by an admin."""

    __tablename__ = "boutique_items"

    __table_args__ = (
        UniqueConstraint(
            "source_donation_id", name="uq_boutique_items_source_donation"
        ),
        CheckConstraint(
            "status IN ('available', 'allocated', 'unavailable')",
            name="ck_boutique_items_valid_status",
        ),
        Index("idx_boutique_items_status_category", "status", "category"),
    )

    source_donation_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("material_donations.id"),
        nullable=True,
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    image_urls: Mapped[list | None] = mapped_column(JSON, nullable=True)

    status: Mapped[ItemStatus] = mapped_column(
        String(50),
        default=ItemStatus.AVAILABLE,
        nullable=False,
    )

    published_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )

    published_by_admin_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("users.id"),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<BoutiqueItem {self.title}: {self.status}>"

    @property
    def is_available(self) -> bool:
        return self.status == ItemStatus.AVAILABLE


class BoutiqueOrder(TimestampedBase):
    """A beneficiary's request to receive one boutique item."""

    __tablename__ = "boutique_orders"

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending_approval', 'approved', 'rejected')",
            name="ck_boutique_orders_valid_status",
        ),
        Index("idx_boutique_orders_item_status", "item_id", "status"),
        Index("idx_boutique_orders_user", "user_id"),
    )

    user_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("users.id"),
        nullable=False,
    )

    item_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("boutique_items.id"),
        nullable=False,
    )

    motivation_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    status: Mapped[OrderStatus] = mapped_column(
        String(50),
        default=OrderStatus.PENDING_APPROVAL,
        nullable=False,
    )

    # Null until an admin decides the order
    handled_by_admin_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("users.id"),
        nullable=True,
    )
    handled_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<BoutiqueOrder item={self.item_id}: {self.status}>"

    @property
    def is_decided(self) -> bool:
        return self.status != OrderStatus.PENDING_APPROVAL
