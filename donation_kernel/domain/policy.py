"""
Policy -- behavior switches for the kernel services.

The kernel never reads configuration itself.  ``donation_config.bridges``
translates the loaded configuration into these values; callers that do not
care get the defaults.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class LedgerPolicy:
    # Reject donations to campaigns that are pending or rejected
    require_approved_campaign: bool = True
    # Reject callbacks whose amount or operator disagrees with the donation
    verify_callback_amount: bool = True


@dataclass(frozen=True)
class AllocationPolicy:
    # On approval, reject every other pending order for the same item
    auto_reject_sibling_orders: bool = True
