from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from donation_api.dependencies import get_campaign_service, get_current_user, get_db_session
from donation_api.schemas import CampaignCreateRequest, CampaignOut
from donation_kernel.domain.commands import CreateCampaign
from donation_kernel.exceptions import CampaignNotFoundError
from donation_kernel.models import CampaignStatus, User
from donation_kernel.repository import Repository
from donation_kernel.services import CampaignService

router = APIRouter(prefix="/api/campaigns", tags=["Campaigns"])


@router.get("", response_model=list[CampaignOut])
def list_campaigns(
    status_filter: str = Query(CampaignStatus.APPROVED.value, alias="status"),
    limit: int | None = Query(None, ge=1, le=500),
    session: Session = Depends(get_db_session),
) -> list[CampaignOut]:
    campaigns = Repository(session).get_campaigns(status=status_filter, limit=limit)
    return [CampaignOut.model_validate(c) for c in campaigns]


@router.get("/{campaign_id}", response_model=CampaignOut)
def get_campaign(
    campaign_id: UUID,
    session: Session = Depends(get_db_session),
) -> CampaignOut:
    campaign = Repository(session).get_campaign(campaign_id)
    if campaign is None:
        raise CampaignNotFoundError(str(campaign_id))
    return CampaignOut.model_validate(campaign)


@router.post("", response_model=CampaignOut, status_code=status.HTTP_201_CREATED)
def create_campaign(
    body: CampaignCreateRequest,
    user: User = Depends(get_current_user),
    campaigns: CampaignService = Depends(get_campaign_service),
) -> CampaignOut:
    command = CreateCampaign(
        title=body.title,
        description=body.description,
        goal_amount=body.goal_amount,
        category=body.category,
        image_urls=tuple(body.image_urls),
    )
    return CampaignOut.model_validate(campaigns.create_campaign(command, user.id))
