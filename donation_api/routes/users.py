from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from donation_api.dependencies import get_account_service, get_current_user, get_db_session
from donation_api.schemas import CampaignOut, OrderOut, ProfileUpdateRequest, UserOut
from donation_kernel.models import User
from donation_kernel.repository import Repository
from donation_services import AccountService

router = APIRouter(prefix="/api/users/me", tags=["Users"])


@router.get("/campaigns", response_model=list[CampaignOut])
def my_campaigns(
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
) -> list[CampaignOut]:
    return [CampaignOut.model_validate(c) for c in Repository(session).get_user_campaigns(user.id)]


@router.get("/orders", response_model=list[OrderOut])
def my_orders(
    user: User = Depends(get_current_user),
    session: Session = Depends(get_db_session),
) -> list[OrderOut]:
    return [OrderOut.model_validate(o) for o in Repository(session).get_user_orders(user.id)]


@router.put("")
def update_me(
    body: ProfileUpdateRequest,
    user: User = Depends(get_current_user),
    accounts: AccountService = Depends(get_account_service),
) -> dict[str, UserOut]:
    updated = accounts.update_profile(
        user.id,
        first_name=body.first_name,
        last_name=body.last_name,
        password=body.password,
    )
    return {"user": UserOut.model_validate(updated)}
