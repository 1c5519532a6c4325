"""Kernel services.  Each flushes within the caller's transaction."""

from donation_kernel.services.allocation_workflow import AllocationWorkflow
from donation_kernel.services.base import BaseService
from donation_kernel.services.campaign_service import CampaignService
from donation_kernel.services.ledger_reconciler import LedgerReconciler

__all__ = [
    "BaseService",
    "LedgerReconciler",
    "AllocationWorkflow",
    "CampaignService",
]
