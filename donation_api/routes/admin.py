"""
Admin routes.

Every endpoint depends on ``require_admin``: the role check happens here,
once, and the kernel only receives the admin's id.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from donation_api.dependencies import (
    get_account_service,
    get_allocation,
    get_campaign_service,
    get_db_session,
    get_ledger,
    require_admin,
)
from donation_api.schemas import (
    BoutiqueItemOut,
    CampaignOut,
    CampaignStatusRequest,
    DecisionOut,
    MaterialDonationOut,
    OrderDecisionRequest,
    OrderOut,
    PublishRequest,
    ReconciliationOut,
    UserOut,
    VerificationUpdateRequest,
)
from donation_kernel.models import CampaignStatus, MaterialDonationStatus, OrderStatus, User
from donation_kernel.repository import Repository
from donation_kernel.services import AllocationWorkflow, CampaignService, LedgerReconciler
from donation_services import AccountService

router = APIRouter(prefix="/api/admin", tags=["Admin"])


# Campaigns


@router.get("/campaigns/pending", response_model=list[CampaignOut])
def pending_campaigns(
    admin: User = Depends(require_admin),
    session: Session = Depends(get_db_session),
) -> list[CampaignOut]:
    campaigns = Repository(session).get_campaigns(status=CampaignStatus.PENDING.value)
    return [CampaignOut.model_validate(c) for c in campaigns]


@router.put("/campaigns/{campaign_id}/status", response_model=CampaignOut)
def set_campaign_status(
    campaign_id: UUID,
    body: CampaignStatusRequest,
    admin: User = Depends(require_admin),
    campaigns: CampaignService = Depends(get_campaign_service),
) -> CampaignOut:
    campaign = campaigns.set_campaign_status(campaign_id, body.status, admin.id)
    return CampaignOut.model_validate(campaign)


@router.post("/campaigns/reconcile", response_model=list[ReconciliationOut])
def reconcile_campaigns(
    campaign_id: UUID | None = None,
    admin: User = Depends(require_admin),
    ledger: LedgerReconciler = Depends(get_ledger),
) -> list[ReconciliationOut]:
    if campaign_id is not None:
        reports = [ledger.reconcile_campaign(campaign_id)]
    else:
        reports = ledger.reconcile_all()
    return [
        ReconciliationOut(
            campaign_id=r.campaign_id,
            recorded_amount=r.recorded_amount,
            expected_amount=r.expected_amount,
            drift=r.drift,
            corrected=r.corrected,
        )
        for r in reports
    ]


# Material donations


@router.get("/material-donations/pending", response_model=list[MaterialDonationOut])
def pending_material_donations(
    admin: User = Depends(require_admin),
    session: Session = Depends(get_db_session),
) -> list[MaterialDonationOut]:
    donations = Repository(session).get_material_donations(
        status=MaterialDonationStatus.PENDING_VERIFICATION.value
    )
    return [MaterialDonationOut.model_validate(d) for d in donations]


@router.post("/material-donations/{material_donation_id}/publish", response_model=BoutiqueItemOut)
def publish_material_donation(
    material_donation_id: UUID,
    body: PublishRequest,
    admin: User = Depends(require_admin),
    allocation: AllocationWorkflow = Depends(get_allocation),
) -> BoutiqueItemOut:
    item = allocation.publish(
        material_donation_id,
        title=body.title,
        description=body.description,
        category=body.category,
        admin_id=admin.id,
    )
    return BoutiqueItemOut.model_validate(item)


@router.post("/material-donations/{material_donation_id}/reject", response_model=MaterialDonationOut)
def reject_material_donation(
    material_donation_id: UUID,
    admin: User = Depends(require_admin),
    allocation: AllocationWorkflow = Depends(get_allocation),
) -> MaterialDonationOut:
    donation = allocation.reject_material_donation(material_donation_id, admin.id)
    return MaterialDonationOut.model_validate(donation)


# Boutique


@router.get("/boutique/orders/pending", response_model=list[OrderOut])
def pending_orders(
    admin: User = Depends(require_admin),
    session: Session = Depends(get_db_session),
) -> list[OrderOut]:
    orders = Repository(session).get_boutique_orders(status=OrderStatus.PENDING_APPROVAL.value)
    return [OrderOut.model_validate(o) for o in orders]


@router.put("/boutique/orders/{order_id}/status", response_model=DecisionOut)
def decide_order(
    order_id: UUID,
    body: OrderDecisionRequest,
    admin: User = Depends(require_admin),
    allocation: AllocationWorkflow = Depends(get_allocation),
) -> DecisionOut:
    result = allocation.decide(order_id, admin.id, body.status)
    return DecisionOut(
        order_id=result.order_id,
        item_id=result.item_id,
        order_status=result.order_status,
        item_status=result.item_status,
        auto_rejected_order_ids=list(result.auto_rejected_order_ids),
    )


@router.post("/boutique/items/{item_id}/withdraw", response_model=BoutiqueItemOut)
def withdraw_item(
    item_id: UUID,
    admin: User = Depends(require_admin),
    allocation: AllocationWorkflow = Depends(get_allocation),
) -> BoutiqueItemOut:
    return BoutiqueItemOut.model_validate(allocation.withdraw_item(item_id, admin.id))


# Users


@router.get("/users", response_model=list[UserOut])
def list_users(
    admin: User = Depends(require_admin),
    session: Session = Depends(get_db_session),
) -> list[UserOut]:
    return [UserOut.model_validate(u) for u in Repository(session).list_users()]


@router.put("/users/{user_id}/verification", response_model=UserOut)
def set_user_verification(
    user_id: UUID,
    body: VerificationUpdateRequest,
    admin: User = Depends(require_admin),
    accounts: AccountService = Depends(get_account_service),
) -> UserOut:
    return UserOut.model_validate(accounts.set_user_verified(user_id, body.is_verified, admin.id))
