from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from donation_api.dependencies import get_allocation, get_current_user, get_db_session
from donation_api.schemas import BoutiqueItemOut, OrderOut, OrderRequest
from donation_kernel.exceptions import BoutiqueItemNotFoundError
from donation_kernel.models import ItemStatus, User
from donation_kernel.repository import Repository
from donation_kernel.services import AllocationWorkflow

router = APIRouter(prefix="/api/boutique", tags=["Boutique"])


@router.get("/items", response_model=list[BoutiqueItemOut])
def list_items(
    status_filter: str = Query(ItemStatus.AVAILABLE.value, alias="status"),
    category: str | None = None,
    session: Session = Depends(get_db_session),
) -> list[BoutiqueItemOut]:
    items = Repository(session).get_boutique_items(status=status_filter, category=category)
    return [BoutiqueItemOut.model_validate(item) for item in items]


@router.get("/items/{item_id}", response_model=BoutiqueItemOut)
def get_item(item_id: UUID, session: Session = Depends(get_db_session)) -> BoutiqueItemOut:
    item = Repository(session).get_boutique_item(item_id)
    if item is None:
        raise BoutiqueItemNotFoundError(str(item_id))
    return BoutiqueItemOut.model_validate(item)


@router.post("/orders", response_model=OrderOut, status_code=status.HTTP_201_CREATED)
def request_item(
    body: OrderRequest,
    user: User = Depends(get_current_user),
    allocation: AllocationWorkflow = Depends(get_allocation),
) -> OrderOut:
    order = allocation.request_item(body.item_id, user.id, body.motivation_message)
    return OrderOut.model_validate(order)
