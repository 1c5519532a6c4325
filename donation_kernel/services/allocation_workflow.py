"""
AllocationWorkflow -- material donations into boutique items into orders.

Responsibility:
    Drives the two state machines of the in-kind side of the platform:

        MaterialDonation  pending_verification -> published_in_store | rejected
        BoutiqueItem      available -> allocated | unavailable
        BoutiqueOrder     pending_approval -> approved | rejected

Architecture position:
    Kernel > Services -- imperative shell over the Repository.

Invariants enforced:
    - A material donation is published at most once and yields exactly one
      boutique item.
    - An item is allocated to at most one order.  Approval flips the item
      AVAILABLE -> ALLOCATED with a compare-and-set UPDATE; the loser of a
      concurrent approval sees rowcount == 0 and gets ItemUnavailableError.
    - An order is decided at most once (compare-and-set on its status).
    - With ``auto_reject_sibling_orders`` the other pending orders for an
      allocated or withdrawn item are rejected in the same transaction.
    - Row locks are always taken item first, then orders.

Failure modes:
    - *NotFoundError for unknown ids.
    - MaterialDonationAlreadyDecidedError (AlreadyPublishedError when the
      donation is published), ItemUnavailableError, OrderAlreadyDecidedError
      on state-machine violations.  The caller rolls back.
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from donation_kernel.domain.clock import Clock, SystemClock
from donation_kernel.domain.commands import (
    DecisionOutcome,
    PublishItem,
    SubmitMaterialDonation,
    parse_enum,
)
from donation_kernel.domain.policy import AllocationPolicy
from donation_kernel.domain.results import DecisionResult
from donation_kernel.exceptions import (
    AlreadyPublishedError,
    BoutiqueItemNotFoundError,
    BoutiqueOrderNotFoundError,
    ItemUnavailableError,
    MaterialDonationAlreadyDecidedError,
    MaterialDonationNotFoundError,
    OrderAlreadyDecidedError,
    UserNotFoundError,
    ValidationError,
)
from donation_kernel.logging_config import get_logger
from donation_kernel.models import (
    BoutiqueItem,
    BoutiqueOrder,
    ItemStatus,
    MaterialDonation,
    MaterialDonationStatus,
    OrderStatus,
)
from donation_kernel.services.base import BaseService

logger = get_logger("services.allocation")


def _value(status) -> str:
    return getattr(status, "value", status)


def _already_decided(donation: MaterialDonation) -> MaterialDonationAlreadyDecidedError:
    status = _value(donation.status)
    if status == MaterialDonationStatus.PUBLISHED_IN_STORE.value:
        return AlreadyPublishedError(donation.id)
    return MaterialDonationAlreadyDecidedError(donation.id, status)


class AllocationWorkflow(BaseService):
    """Publication, request and decision steps for in-kind donations."""

    def __init__(
        self,
        session: Session,
        policy: AllocationPolicy | None = None,
        clock: Clock | None = None,
    ):
        super().__init__(session)
        self._policy = policy or AllocationPolicy()
        self._clock = clock or SystemClock()

    # ------------------------------------------------------------------
    # Material donations
    # ------------------------------------------------------------------

    def submit_material_donation(self, command: SubmitMaterialDonation) -> MaterialDonation:
        donation = self.repository.create_material_donation(
            MaterialDonation(
                donor_name=command.donor_name,
                donor_contact=command.donor_contact,
                title=command.title,
                description=command.description,
                pickup_location=command.pickup_location,
                category=command.category,
                image_urls=list(command.image_urls) or None,
                status=MaterialDonationStatus.PENDING_VERIFICATION.value,
            )
        )
        logger.info(
            "material_donation_submitted",
            extra={"material_donation_id": str(donation.id)},
        )
        return donation

    def publish(
        self,
        material_donation_id: UUID,
        title: str | None,
        description: str | None,
        category: str | None,
        admin_id: UUID,
    ) -> BoutiqueItem:
        """
        Verify a material donation and publish it as an AVAILABLE item.

        Empty title/description/category fall back to the material
        donation's own values.  The item category is required: a donation
        without a category must be published with one.
        """
        command = PublishItem(
            material_donation_id=material_donation_id,
            title=title,
            description=description,
            category=category,
        )
        donation = self.repository.get_material_donation(command.material_donation_id)
        if donation is None:
            raise MaterialDonationNotFoundError(str(command.material_donation_id))
        if donation.status != MaterialDonationStatus.PENDING_VERIFICATION:
            raise _already_decided(donation)

        item_category = command.category or donation.category
        if not item_category:
            raise ValidationError("category", "is required to publish an item")

        if not self._transition_material_donation(
            donation.id, MaterialDonationStatus.PUBLISHED_IN_STORE
        ):
            self.session.refresh(donation)
            raise _already_decided(donation)

        try:
            item = self.repository.create_boutique_item(
                BoutiqueItem(
                    source_donation_id=donation.id,
                    title=command.title or donation.title,
                    description=command.description or donation.description,
                    category=item_category,
                    image_urls=donation.image_urls,
                    status=ItemStatus.AVAILABLE.value,
                    published_at=self._clock.now(),
                    published_by_admin_id=admin_id,
                )
            )
        except IntegrityError as exc:
            raise AlreadyPublishedError(donation.id) from exc

        self.session.expire(donation)
        logger.info(
            "item_published",
            extra={
                "material_donation_id": str(donation.id),
                "item_id": str(item.id),
                "admin_id": str(admin_id),
            },
        )
        return item

    def reject_material_donation(
        self, material_donation_id: UUID, admin_id: UUID
    ) -> MaterialDonation:
        donation = self.repository.get_material_donation(material_donation_id)
        if donation is None:
            raise MaterialDonationNotFoundError(str(material_donation_id))

        if not self._transition_material_donation(
            donation.id, MaterialDonationStatus.REJECTED
        ):
            self.session.refresh(donation)
            raise _already_decided(donation)

        self.session.refresh(donation)
        logger.info(
            "material_donation_rejected",
            extra={
                "material_donation_id": str(donation.id),
                "admin_id": str(admin_id),
            },
        )
        return donation

    def _transition_material_donation(
        self, donation_id: UUID, target: MaterialDonationStatus
    ) -> bool:
        result = self.session.execute(
            update(MaterialDonation)
            .where(
                MaterialDonation.id == donation_id,
                MaterialDonation.status
                == MaterialDonationStatus.PENDING_VERIFICATION.value,
            )
            .values(status=target.value, updated_at=self._clock.now())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------

    def request_item(
        self,
        item_id: UUID,
        user_id: UUID,
        motivation_message: str | None = None,
    ) -> BoutiqueOrder:
        """Open a PENDING_APPROVAL order for an AVAILABLE item."""
        item = self.session.execute(
            select(BoutiqueItem)
            .where(BoutiqueItem.id == item_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if item is None:
            raise BoutiqueItemNotFoundError(str(item_id))
        if not item.is_available:
            raise ItemUnavailableError(item.id, _value(item.status))
        if self.repository.get_user(user_id) is None:
            raise UserNotFoundError(str(user_id))

        message = (motivation_message or "").strip() or None
        order = self.repository.create_boutique_order(
            BoutiqueOrder(
                user_id=user_id,
                item_id=item.id,
                motivation_message=message,
                status=OrderStatus.PENDING_APPROVAL.value,
            )
        )

        # Re-read under the write lock held by the insert
        self.session.refresh(item)
        if not item.is_available:
            raise ItemUnavailableError(item.id, _value(item.status))

        logger.info(
            "order_requested",
            extra={
                "order_id": str(order.id),
                "item_id": str(item.id),
                "user_id": str(user_id),
            },
        )
        return order

    def decide(
        self,
        order_id: UUID,
        admin_id: UUID,
        outcome: DecisionOutcome | str,
    ) -> DecisionResult:
        """
        Approve or reject a pending order.

        Approval allocates the item.  If the item was allocated or withdrawn
        in the meantime, ItemUnavailableError is raised and nothing is
        written.
        """
        outcome = parse_enum(DecisionOutcome, outcome, "outcome")

        order = self.repository.get_boutique_order(order_id)
        if order is None:
            raise BoutiqueOrderNotFoundError(str(order_id))

        # Lock order: item row, then order row
        self.session.execute(
            select(BoutiqueItem.id).where(BoutiqueItem.id == order.item_id).with_for_update()
        )
        order = self.repository.get_boutique_order(order_id, for_update=True)
        if order.is_decided:
            raise OrderAlreadyDecidedError(order.id, _value(order.status))

        now = self._clock.now()

        if outcome is DecisionOutcome.REJECTED:
            if not self._transition_order(order.id, OrderStatus.REJECTED, admin_id, now):
                self.session.refresh(order)
                raise OrderAlreadyDecidedError(order.id, _value(order.status))
            item = self.repository.get_boutique_item(order.item_id)
            logger.info(
                "order_rejected",
                extra={"order_id": str(order.id), "admin_id": str(admin_id)},
            )
            return DecisionResult(
                order_id=order.id,
                item_id=order.item_id,
                order_status=OrderStatus.REJECTED.value,
                item_status=_value(item.status),
            )

        allocated = self.session.execute(
            update(BoutiqueItem)
            .where(
                BoutiqueItem.id == order.item_id,
                BoutiqueItem.status == ItemStatus.AVAILABLE.value,
            )
            .values(status=ItemStatus.ALLOCATED.value, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        if allocated.rowcount != 1:
            self.session.refresh(order)
            if order.is_decided:
                raise OrderAlreadyDecidedError(order.id, _value(order.status))
            item = self.repository.get_boutique_item(order.item_id)
            self.session.refresh(item)
            logger.warning(
                "allocation_conflict",
                extra={
                    "order_id": str(order.id),
                    "item_id": str(order.item_id),
                    "item_status": _value(item.status),
                },
            )
            raise ItemUnavailableError(order.item_id, _value(item.status))

        if not self._transition_order(order.id, OrderStatus.APPROVED, admin_id, now):
            # Item allocation above is undone by the caller's rollback
            self.session.refresh(order)
            raise OrderAlreadyDecidedError(order.id, _value(order.status))

        rejected: tuple[UUID, ...] = ()
        if self._policy.auto_reject_sibling_orders:
            rejected = self._reject_pending_orders(order.item_id, admin_id, now, exclude=order.id)

        self.session.flush()
        self.session.expire_all()

        logger.info(
            "order_approved",
            extra={
                "order_id": str(order_id),
                "item_id": str(order.item_id),
                "admin_id": str(admin_id),
                "auto_rejected": len(rejected),
            },
        )
        return DecisionResult(
            order_id=order_id,
            item_id=order.item_id,
            order_status=OrderStatus.APPROVED.value,
            item_status=ItemStatus.ALLOCATED.value,
            auto_rejected_order_ids=rejected,
        )

    def withdraw_item(self, item_id: UUID, admin_id: UUID) -> BoutiqueItem:
        """Take an AVAILABLE item out of the boutique (AVAILABLE -> UNAVAILABLE)."""
        item = self.repository.get_boutique_item(item_id)
        if item is None:
            raise BoutiqueItemNotFoundError(str(item_id))

        now = self._clock.now()
        result = self.session.execute(
            update(BoutiqueItem)
            .where(
                BoutiqueItem.id == item.id,
                BoutiqueItem.status == ItemStatus.AVAILABLE.value,
            )
            .values(status=ItemStatus.UNAVAILABLE.value, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            self.session.refresh(item)
            raise ItemUnavailableError(item.id, _value(item.status))

        rejected: tuple[UUID, ...] = ()
        if self._policy.auto_reject_sibling_orders:
            rejected = self._reject_pending_orders(item.id, admin_id, now)

        self.session.flush()
        self.session.expire_all()
        logger.info(
            "item_withdrawn",
            extra={
                "item_id": str(item_id),
                "admin_id": str(admin_id),
                "auto_rejected": len(rejected),
            },
        )
        return self.repository.get_boutique_item(item_id)

    def _transition_order(
        self,
        order_id: UUID,
        target: OrderStatus,
        admin_id: UUID,
        now: datetime,
    ) -> bool:
        result = self.session.execute(
            update(BoutiqueOrder)
            .where(
                BoutiqueOrder.id == order_id,
                BoutiqueOrder.status == OrderStatus.PENDING_APPROVAL.value,
            )
            .values(
                status=target.value,
                handled_by_admin_id=admin_id,
                handled_at=now,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def _reject_pending_orders(
        self,
        item_id: UUID,
        admin_id: UUID,
        now: datetime,
        exclude: UUID | None = None,
    ) -> tuple[UUID, ...]:
        stmt = select(BoutiqueOrder.id).where(
            BoutiqueOrder.item_id == item_id,
            BoutiqueOrder.status == OrderStatus.PENDING_APPROVAL.value,
        )
        if exclude is not None:
            stmt = stmt.where(BoutiqueOrder.id != exclude)
        order_ids = tuple(self.session.execute(stmt).scalars())
        if not order_ids:
            return ()

        self.session.execute(
            update(BoutiqueOrder)
            .where(
                BoutiqueOrder.id.in_(order_ids),
                BoutiqueOrder.status == OrderStatus.PENDING_APPROVAL.value,
            )
            .values(
                status=OrderStatus.REJECTED.value,
                handled_by_admin_id=admin_id,
                handled_at=now,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        return order_ids
