"""
Repository -- CRUD persistence for the six entity types.

Responsibility:
    Thin, session-bound data access used by the kernel services, the
    identity layer and the API surface.  Every create flushes and returns the
    persisted entity with its generated id and timestamps; every update is a
    partial-field merge that returns the merged entity, or ``None`` when the
    row does not exist.

Architecture position:
    Kernel > Repository.  May import from db/ and models/.

Invariants enforced:
    - The repository never commits or rolls back.  The caller owns the
      transaction (``session_scope`` or the API request scope).
    - Status-transition atomicity is NOT provided here.  Contended state
      changes (payment callbacks, order approval) go through the services,
      which use row locks and compare-and-set updates.

Failure modes:
    - ValidationError when an update names a field that is not a column.
    - IntegrityError propagates from flush on unique / check violations.
"""

from __future__ import annotations

from typing import Any, Mapping, TypeVar
from uuid import UUID

from sqlalchemy import inspect, select
from sqlalchemy.orm import Session

from donation_kernel.db.base import Base
from donation_kernel.exceptions import ValidationError
from donation_kernel.models import (
    BoutiqueItem,
    BoutiqueOrder,
    Campaign,
    FinancialDonation,
    MaterialDonation,
    User,
)

ModelType = TypeVar("ModelType", bound=Base)

# Columns that a partial update may never touch
_IMMUTABLE_COLUMNS = frozenset({"id", "created_at"})


class Repository:
    """Session-bound CRUD access for users, campaigns, donations and boutique."""

    def __init__(self, session: Session):
        self.session = session

    # ------------------------------------------------------------------
    # Generic helpers
    # ------------------------------------------------------------------

    def _create(self, entity: ModelType) -> ModelType:
        self.session.add(entity)
        self.session.flush()
        # Pull server-side defaults (created_at, updated_at)
        self.session.refresh(entity)
        return entity

    def _get(self, model: type[ModelType], entity_id: UUID) -> ModelType | None:
        return self.session.get(model, entity_id)

    def _update(
        self,
        model: type[ModelType],
        entity_id: UUID,
        updates: Mapping[str, Any],
    ) -> ModelType | None:
        entity = self.session.get(model, entity_id)
        if entity is None:
            return None

        columns = {attr.key for attr in inspect(model).column_attrs}
        for key, value in updates.items():
            if key not in columns or key in _IMMUTABLE_COLUMNS:
                raise ValidationError(key, f"not an updatable field of {model.__name__}")
            setattr(entity, key, value)

        self.session.flush()
        return entity

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    def get_user(self, user_id: UUID) -> User | None:
        return self._get(User, user_id)

    def get_user_by_email(self, email: str) -> User | None:
        return self.session.execute(
            select(User).where(User.email == email.strip().lower())
        ).scalar_one_or_none()

    def list_users(self) -> list[User]:
        return list(
            self.session.execute(select(User).order_by(User.created_at.desc()))
            .scalars()
            .all()
        )

    def create_user(self, user: User) -> User:
        user.email = user.email.strip().lower()
        return self._create(user)

    def update_user(self, user_id: UUID, updates: Mapping[str, Any]) -> User | None:
        return self._update(User, user_id, updates)

    # ------------------------------------------------------------------
    # Campaigns
    # ------------------------------------------------------------------

    def get_campaign(self, campaign_id: UUID) -> Campaign | None:
        return self._get(Campaign, campaign_id)

    def get_campaigns(
        self,
        status: str | None = None,
        limit: int | None = None,
    ) -> list[Campaign]:
        stmt = select(Campaign)
        if status:
            stmt = stmt.where(Campaign.status == status)
        stmt = stmt.order_by(Campaign.created_at.desc())
        if limit:
            stmt = stmt.limit(limit)
        return list(self.session.execute(stmt).scalars().all())

    def get_user_campaigns(self, user_id: UUID) -> list[Campaign]:
        return list(
            self.session.execute(
                select(Campaign)
                .where(Campaign.user_id == user_id)
                .order_by(Campaign.created_at.desc())
            )
            .scalars()
            .all()
        )

    def create_campaign(self, campaign: Campaign) -> Campaign:
        return self._create(campaign)

    def update_campaign(
        self, campaign_id: UUID, updates: Mapping[str, Any]
    ) -> Campaign | None:
        return self._update(Campaign, campaign_id, updates)

    # ------------------------------------------------------------------
    # Financial donations
    # ------------------------------------------------------------------

    def create_donation(self, donation: FinancialDonation) -> FinancialDonation:
        return self._create(donation)

    def update_donation(
        self, donation_id: UUID, updates: Mapping[str, Any]
    ) -> FinancialDonation | None:
        return self._update(FinancialDonation, donation_id, updates)

    def get_donation(self, donation_id: UUID) -> FinancialDonation | None:
        return self._get(FinancialDonation, donation_id)

    def get_donation_by_operator_tx_id(
        self,
        operator_transaction_id: str,
        for_update: bool = False,
    ) -> FinancialDonation | None:
        stmt = select(FinancialDonation).where(
            FinancialDonation.operator_transaction_id == operator_transaction_id
        )
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        return self.session.execute(stmt).scalar_one_or_none()

    def get_campaign_donations(
        self, campaign_id: UUID, status: str | None = None
    ) -> list[FinancialDonation]:
        stmt = select(FinancialDonation).where(
            FinancialDonation.campaign_id == campaign_id
        )
        if status:
            stmt = stmt.where(FinancialDonation.status == status)
        stmt = stmt.order_by(FinancialDonation.created_at.desc())
        return list(self.session.execute(stmt).scalars().all())

    # ------------------------------------------------------------------
    # Material donations
    # ------------------------------------------------------------------

    def create_material_donation(self, donation: MaterialDonation) -> MaterialDonation:
        return self._create(donation)

    def update_material_donation(
        self, donation_id: UUID, updates: Mapping[str, Any]
    ) -> MaterialDonation | None:
        return self._update(MaterialDonation, donation_id, updates)

    def get_material_donation(self, donation_id: UUID) -> MaterialDonation | None:
        return self._get(MaterialDonation, donation_id)

    def get_material_donations(self, status: str | None = None) -> list[MaterialDonation]:
        stmt = select(MaterialDonation)
        if status:
            stmt = stmt.where(MaterialDonation.status == status)
        stmt = stmt.order_by(MaterialDonation.created_at.desc())
        return list(self.session.execute(stmt).scalars().all())

    # ------------------------------------------------------------------
    # Boutique items
    # ------------------------------------------------------------------

    def create_boutique_item(self, item: BoutiqueItem) -> BoutiqueItem:
        return self._create(item)

    def update_boutique_item(
        self, item_id: UUID, updates: Mapping[str, Any]
    ) -> BoutiqueItem | None:
        return self._update(BoutiqueItem, item_id, updates)

    def get_boutique_item(self, item_id: UUID) -> BoutiqueItem | None:
        return self._get(BoutiqueItem, item_id)

    def get_boutique_items(
        self,
        status: str | None = None,
        category: str | None = None,
    ) -> list[BoutiqueItem]:
        stmt = select(BoutiqueItem)
        if status:
            stmt = stmt.where(BoutiqueItem.status == status)
        if category:
            stmt = stmt.where(BoutiqueItem.category == category)
        stmt = stmt.order_by(BoutiqueItem.published_at.desc())
        return list(self.session.execute(stmt).scalars().all())

    # ------------------------------------------------------------------
    # Boutique orders
    # ------------------------------------------------------------------

    def create_boutique_order(self, order: BoutiqueOrder) -> BoutiqueOrder:
        return self._create(order)

    def update_boutique_order(
        self, order_id: UUID, updates: Mapping[str, Any]
    ) -> BoutiqueOrder | None:
        return self._update(BoutiqueOrder, order_id, updates)

    def get_boutique_order(
        self, order_id: UUID, for_update: bool = False
    ) -> BoutiqueOrder | None:
        if not for_update:
            return self._get(BoutiqueOrder, order_id)
        return self.session.execute(
            select(BoutiqueOrder)
            .where(BoutiqueOrder.id == order_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def get_boutique_orders(
        self,
        status: str | None = None,
        user_id: UUID | None = None,
        item_id: UUID | None = None,
    ) -> list[BoutiqueOrder]:
        stmt = select(BoutiqueOrder)
        if status:
            stmt = stmt.where(BoutiqueOrder.status == status)
        if user_id:
            stmt = stmt.where(BoutiqueOrder.user_id == user_id)
        if item_id:
            stmt = stmt.where(BoutiqueOrder.item_id == item_id)
        stmt = stmt.order_by(BoutiqueOrder.created_at.desc())
        return list(self.session.execute(stmt).scalars().all())

    def get_user_orders(self, user_id: UUID) -> list[BoutiqueOrder]:
        return self.get_boutique_orders(user_id=user_id)
