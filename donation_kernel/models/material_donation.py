"""
Module: donation_kernel.models.material_donation
Responsibility: ORM persistence for donated physical goods awaiting
    verification.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - status moves PENDING_VERIFICATION -> PUBLISHED_IN_STORE | REJECTED
      exactly once (compare-and-set in the Allocation Workflow).
    - Publication produces exactly one BoutiqueItem (unique
      boutique_items.source_donation_id).
"""

from enum import Enum

from sqlalchemy import JSON, CheckConstraint, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from donation_kernel.db.base import TimestampedBase


class MaterialDonationStatus(str, Enum):
    PENDING_VERIFICATION = "pending_verification"
    PUBLISHED_IN_STORE = "published_in_store"
    REJECTED = "rejected"


class MaterialDonation(TimestampedBase):
    """A donor-supplied physical item.  Donors need not hold an account."""

    __tablename__ = "material_donations"

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending_verification', 'published_in_store', 'rejected')",
            name="ck_material_donations_valid_status",
        ),
        Index("idx_material_donations_status_created", "status", "created_at"),
    )

    donor_name: Mapped[str] = mapped_column(String(255), nullable=False)
    donor_contact: Mapped[str] = mapped_column(String(255), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    pickup_location: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    image_urls: Mapped[list | None] = mapped_column(JSON, nullable=True)

    status: Mapped[MaterialDonationStatus] = mapped_column(
        String(50),
        default=MaterialDonationStatus.PENDING_VERIFICATION,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<MaterialDonation {self.title}: {self.status}>"
