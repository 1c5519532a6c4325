"""SQLAlchemy ORM models for the donation kernel."""

from donation_kernel.models.boutique import (
    BoutiqueItem,
    BoutiqueOrder,
    ItemStatus,
    OrderStatus,
)
from donation_kernel.models.campaign import Campaign, CampaignStatus
from donation_kernel.models.donation import (
    TERMINAL_DONATION_STATUSES,
    DonationStatus,
    FinancialDonation,
)
from donation_kernel.models.material_donation import (
    MaterialDonation,
    MaterialDonationStatus,
)
from donation_kernel.models.user import User, UserRole

__all__ = [
    "User",
    "UserRole",
    "Campaign",
    "CampaignStatus",
    "FinancialDonation",
    "DonationStatus",
    "TERMINAL_DONATION_STATUSES",
    "MaterialDonation",
    "MaterialDonationStatus",
    "BoutiqueItem",
    "ItemStatus",
    "BoutiqueOrder",
    "OrderStatus",
]
