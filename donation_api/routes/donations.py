from __future__ import annotations

from fastapi import APIRouter, Depends, status

from donation_api.dependencies import get_ledger, get_optional_user
from donation_api.schemas import (
    DonationInitiateRequest,
    DonationInitiateResponse,
    DonationOut,
    PaymentCallbackRequest,
    PaymentCallbackResponse,
)
from donation_kernel.domain.commands import InitiateDonation, PaymentCallback, PaymentOutcome
from donation_kernel.models import User
from donation_kernel.services import LedgerReconciler

router = APIRouter(prefix="/api/donations", tags=["Donations"])


@router.post(
    "/initiate",
    response_model=DonationInitiateResponse,
    status_code=status.HTTP_201_CREATED,
)
def initiate_donation(
    body: DonationInitiateRequest,
    user: User | None = Depends(get_optional_user),
    ledger: LedgerReconciler = Depends(get_ledger),
) -> DonationInitiateResponse:
    donation = ledger.initiate_donation(
        InitiateDonation(
            campaign_id=body.campaign_id,
            amount=body.amount,
            payment_operator=body.payment_operator,
            donor_name=body.donor_name,
            user_id=user.id if user is not None else None,
            operator_transaction_id=body.operator_transaction_id,
        )
    )
    return DonationInitiateResponse(
        donation=DonationOut.model_validate(donation),
        message="Donation initiated. You will receive SMS/notification to complete payment.",
    )


@router.post("/callback/{operator}", response_model=PaymentCallbackResponse)
def payment_callback(
    operator: str,
    body: PaymentCallbackRequest,
    ledger: LedgerReconciler = Depends(get_ledger),
) -> PaymentCallbackResponse:
    """Operator webhook.  Unrecognised status words are rejected with 400."""
    outcome = PaymentOutcome.from_operator_status(body.status)
    result = ledger.apply_payment_callback(
        PaymentCallback(
            operator_transaction_id=body.transaction_id,
            outcome=outcome,
            amount=body.amount,
            operator=operator,
        )
    )
    return PaymentCallbackResponse(
        result=result.status.value,
        donation_id=result.donation_id,
        donation_status=result.donation_status,
    )
