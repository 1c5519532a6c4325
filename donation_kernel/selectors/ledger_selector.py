"""
Module: donation_kernel.selectors.ledger_selector
Responsibility: Aggregate reads over financial donations -- the derived
    campaign totals that ``Campaign.current_amount`` must agree with.
Architecture position: Kernel > Selectors.  May import from db/ and models/.

Audit relevance:
    ``completed_total`` is the authoritative definition of a campaign's
    raised amount.  The reconciliation pass compares the stored accumulator
    against it.
"""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select

from donation_kernel.domain.commands import CENT
from donation_kernel.models import Campaign, DonationStatus, FinancialDonation
from donation_kernel.selectors.base import BaseSelector


def _as_money(value) -> Decimal:
    return Decimal(str(value or 0)).quantize(CENT)


class LedgerSelector(BaseSelector):
    """Derived totals per campaign."""

    def completed_total(self, campaign_id: UUID) -> Decimal:
        """Sum of amounts over the campaign's COMPLETED donations."""
        value = self.session.execute(
            select(func.coalesce(func.sum(FinancialDonation.amount), 0)).where(
                FinancialDonation.campaign_id == campaign_id,
                FinancialDonation.status == DonationStatus.COMPLETED.value,
            )
        ).scalar_one()
        return _as_money(value)

    def completed_totals(self) -> dict[UUID, Decimal]:
        """Completed totals for every campaign (0 for campaigns without any)."""
        rows = self.session.execute(
            select(FinancialDonation.campaign_id, func.sum(FinancialDonation.amount))
            .where(FinancialDonation.status == DonationStatus.COMPLETED.value)
            .group_by(FinancialDonation.campaign_id)
        ).all()
        totals = {campaign_id: _as_money(total) for campaign_id, total in rows}

        for campaign_id in self.session.execute(select(Campaign.id)).scalars():
            totals.setdefault(campaign_id, _as_money(0))
        return totals

    def status_counts(self, campaign_id: UUID) -> dict[str, int]:
        """Number of donations per status for one campaign."""
        rows = self.session.execute(
            select(FinancialDonation.status, func.count(FinancialDonation.id))
            .where(FinancialDonation.campaign_id == campaign_id)
            .group_by(FinancialDonation.status)
        ).all()
        counts = {status.value: 0 for status in DonationStatus}
        counts.update({str(status): count for status, count in rows})
        return counts
