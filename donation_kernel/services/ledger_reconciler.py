"""
LedgerReconciler -- payment callbacks and campaign running totals.

Responsibility:
    Opens pending financial donations, applies payment-operator callbacks to
    them exactly once, and keeps ``Campaign.current_amount`` equal to the sum
    of the campaign's COMPLETED donations.

Architecture position:
    Kernel > Services -- imperative shell.  Uses the Repository for CRUD and
    the LedgerSelector for derived totals.

Invariants enforced:
    - A donation leaves PENDING at most once.  The transition is a
      compare-and-set ``UPDATE ... WHERE status = 'pending'``; of N concurrent
      callbacks for one transaction id exactly one sees rowcount == 1.
    - The campaign total is incremented with a SQL-side expression
      (``current_amount = current_amount + :amount``) in the same transaction
      as the donation transition.  Never read-modify-write in Python.
    - Duplicate callbacks are a normal outcome: ``CallbackResult.duplicate``
      and no mutation.

Failure modes:
    - DonationNotFoundError: callback for an unknown transaction id.
    - ValidationError: callback amount/operator disagrees with the recorded
      donation (policy ``verify_callback_amount``).  Nothing is mutated.
    - CampaignNotFoundError / CampaignNotAcceptingDonationsError /
      DuplicateTransactionError on initiation.

Audit relevance:
    Every applied callback, duplicate and detected drift is logged with the
    operator transaction id bound into the log context.
"""

from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from donation_kernel.domain.clock import Clock, SystemClock
from donation_kernel.domain.commands import InitiateDonation, PaymentCallback, PaymentOutcome
from donation_kernel.domain.policy import LedgerPolicy
from donation_kernel.domain.results import CallbackResult, ReconciliationReport
from donation_kernel.exceptions import (
    CampaignNotAcceptingDonationsError,
    CampaignNotFoundError,
    DonationNotFoundError,
    DuplicateTransactionError,
    UserNotFoundError,
    ValidationError,
)
from donation_kernel.logging_config import LogContext, get_logger
from donation_kernel.models import (
    Campaign,
    CampaignStatus,
    DonationStatus,
    FinancialDonation,
)
from donation_kernel.selectors.ledger_selector import LedgerSelector
from donation_kernel.services.base import BaseService

logger = get_logger("services.ledger")

_OUTCOME_TO_STATUS = {
    PaymentOutcome.SUCCESS: DonationStatus.COMPLETED,
    PaymentOutcome.FAILURE: DonationStatus.FAILED,
}


def _value(status) -> str:
    return getattr(status, "value", status)


class LedgerReconciler(BaseService):
    """
    Applies payment outcomes to donations and campaign totals.

    Contract:
        All methods flush but never commit.  On any exception the caller
        rolls back.
    """

    def __init__(
        self,
        session: Session,
        policy: LedgerPolicy | None = None,
        clock: Clock | None = None,
    ):
        super().__init__(session)
        self._policy = policy or LedgerPolicy()
        self._clock = clock or SystemClock()
        self._selector = LedgerSelector(session)

    # ------------------------------------------------------------------
    # Initiation
    # ------------------------------------------------------------------

    def initiate_donation(self, command: InitiateDonation) -> FinancialDonation:
        """
        Record a PENDING donation awaiting its payment callback.

        When the command carries no operator transaction id, one is minted as
        ``<payment_operator>-<hex uuid>``.
        """
        campaign = self.repository.get_campaign(command.campaign_id)
        if campaign is None:
            raise CampaignNotFoundError(str(command.campaign_id))

        if self._policy.require_approved_campaign and not campaign.is_accepting_donations:
            raise CampaignNotAcceptingDonationsError(campaign.id, _value(campaign.status))

        if command.user_id is not None and self.repository.get_user(command.user_id) is None:
            raise UserNotFoundError(str(command.user_id))

        transaction_id = command.operator_transaction_id or (
            f"{command.payment_operator}-{uuid4().hex}"
        )
        if self.repository.get_donation_by_operator_tx_id(transaction_id) is not None:
            raise DuplicateTransactionError(transaction_id)

        try:
            donation = self.repository.create_donation(
                FinancialDonation(
                    campaign_id=campaign.id,
                    user_id=command.user_id,
                    donor_name=command.donor_name,
                    amount=command.amount,
                    payment_operator=command.payment_operator,
                    operator_transaction_id=transaction_id,
                    status=DonationStatus.PENDING.value,
                )
            )
        except IntegrityError as exc:
            # Lost the race against a concurrent initiation with the same id
            raise DuplicateTransactionError(transaction_id) from exc

        with LogContext.bind(operator_transaction_id=transaction_id):
            logger.info(
                "donation_initiated",
                extra={
                    "donation_id": str(donation.id),
                    "campaign_id": str(campaign.id),
                    "amount": str(donation.amount),
                    "payment_operator": donation.payment_operator,
                },
            )
        return donation

    # ------------------------------------------------------------------
    # Callbacks
    # ------------------------------------------------------------------

    def apply_payment_callback(self, callback: PaymentCallback) -> CallbackResult:
        """
        Apply one payment-operator callback.

        Preconditions:
            A donation with ``callback.operator_transaction_id`` exists.

        Postconditions:
            APPLIED: the donation moved PENDING -> COMPLETED/FAILED and, for
            COMPLETED, the campaign total grew by the donation amount.
            DUPLICATE: nothing changed.
        """
        with LogContext.bind(operator_transaction_id=callback.operator_transaction_id):
            donation = self.repository.get_donation_by_operator_tx_id(
                callback.operator_transaction_id, for_update=True
            )
            if donation is None:
                logger.warning("payment_callback_unknown_transaction")
                raise DonationNotFoundError(callback.operator_transaction_id)

            if donation.is_terminal:
                return self._duplicate(donation, callback)

            self._verify(donation, callback)

            target = _OUTCOME_TO_STATUS[callback.outcome]
            result = self.session.execute(
                update(FinancialDonation)
                .where(
                    FinancialDonation.id == donation.id,
                    FinancialDonation.status == DonationStatus.PENDING.value,
                )
                .values(status=target.value, updated_at=self._clock.now())
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                # Another callback won between our read and the update
                self.session.refresh(donation)
                return self._duplicate(donation, callback)

            applied = Decimal("0.00")
            if target is DonationStatus.COMPLETED:
                self.session.execute(
                    update(Campaign)
                    .where(Campaign.id == donation.campaign_id)
                    .values(current_amount=Campaign.current_amount + donation.amount)
                    .execution_options(synchronize_session=False)
                )
                applied = donation.amount

            self.session.flush()
            self.session.expire_all()

            logger.info(
                "payment_callback_applied",
                extra={
                    "donation_id": str(donation.id),
                    "campaign_id": str(donation.campaign_id),
                    "status": target.value,
                    "amount": str(applied),
                },
            )
            return CallbackResult.applied(
                donation_id=donation.id,
                donation_status=target.value,
                campaign_id=donation.campaign_id,
                applied_amount=applied,
            )

    def _verify(self, donation: FinancialDonation, callback: PaymentCallback) -> None:
        if not self._policy.verify_callback_amount:
            return
        if callback.amount != donation.amount:
            logger.warning(
                "payment_callback_mismatch",
                extra={
                    "field": "amount",
                    "expected": str(donation.amount),
                    "received": str(callback.amount),
                },
            )
            raise ValidationError(
                "amount",
                f"callback amount {callback.amount} does not match "
                f"recorded amount {donation.amount}",
            )
        if (
            callback.operator is not None
            and callback.operator.lower() != donation.payment_operator.lower()
        ):
            logger.warning(
                "payment_callback_mismatch",
                extra={
                    "field": "operator",
                    "expected": donation.payment_operator,
                    "received": callback.operator,
                },
            )
            raise ValidationError(
                "operator",
                f"callback operator {callback.operator} does not match "
                f"recorded operator {donation.payment_operator}",
            )

    def _duplicate(
        self, donation: FinancialDonation, callback: PaymentCallback
    ) -> CallbackResult:
        logger.info(
            "payment_callback_duplicate",
            extra={
                "donation_id": str(donation.id),
                "status": _value(donation.status),
                "reported_outcome": callback.outcome.value,
            },
        )
        return CallbackResult.duplicate(
            donation_id=donation.id,
            donation_status=_value(donation.status),
            campaign_id=donation.campaign_id,
        )

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    def reconcile_campaign(self, campaign_id: UUID) -> ReconciliationReport:
        """
        Compare a campaign's stored total with the sum of its completed
        donations and, on drift, overwrite the stored total.

        The correction is a single UPDATE with a correlated subquery so that
        callbacks committing concurrently are never lost.
        """
        campaign = self.session.execute(
            select(Campaign)
            .where(Campaign.id == campaign_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if campaign is None:
            raise CampaignNotFoundError(str(campaign_id))

        recorded = campaign.current_amount
        expected = self._selector.completed_total(campaign_id)

        if recorded == expected:
            return ReconciliationReport(
                campaign_id=campaign_id,
                recorded_amount=recorded,
                expected_amount=expected,
                corrected=False,
            )

        logger.warning(
            "campaign_total_drift",
            extra={
                "campaign_id": str(campaign_id),
                "recorded_amount": str(recorded),
                "expected_amount": str(expected),
            },
        )

        completed_sum = (
            select(func.coalesce(func.sum(FinancialDonation.amount), 0))
            .where(
                FinancialDonation.campaign_id == Campaign.id,
                FinancialDonation.status == DonationStatus.COMPLETED.value,
            )
            .scalar_subquery()
        )
        self.session.execute(
            update(Campaign)
            .where(Campaign.id == campaign_id)
            .values(current_amount=completed_sum, updated_at=self._clock.now())
            .execution_options(synchronize_session=False)
        )
        self.session.flush()
        self.session.expire(campaign)

        return ReconciliationReport(
            campaign_id=campaign_id,
            recorded_amount=recorded,
            expected_amount=expected,
            corrected=True,
        )

    def reconcile_all(self, status: CampaignStatus | str | None = None) -> list[ReconciliationReport]:
        """Reconcile every campaign (optionally only those in ``status``)."""
        stmt = select(Campaign.id).order_by(Campaign.created_at)
        if status is not None:
            stmt = stmt.where(Campaign.status == _value(status))
        campaign_ids = list(self.session.execute(stmt).scalars())

        reports = [self.reconcile_campaign(campaign_id) for campaign_id in campaign_ids]
        drifted = sum(1 for report in reports if report.corrected)
        logger.info(
            "reconciliation_completed",
            extra={"campaigns": len(reports), "corrected": drifted},
        )
        return reports
