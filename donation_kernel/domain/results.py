"""
Results -- frozen return values of the reconciliation and allocation
operations.

Duplicate payment callbacks are reported here, as a status, never as an
exception: payment gateways retry, and a retry is a normal outcome.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from uuid import UUID


class CallbackStatus(str, Enum):
    """How a payment callback was handled."""

    APPLIED = "applied"
    DUPLICATE = "duplicate"


@dataclass(frozen=True)
class CallbackResult:
    status: CallbackStatus
    donation_id: UUID
    donation_status: str
    campaign_id: UUID
    applied_amount: Decimal = Decimal("0.00")

    @classmethod
    def applied(
        cls,
        donation_id: UUID,
        donation_status: str,
        campaign_id: UUID,
        applied_amount: Decimal,
    ) -> "CallbackResult":
        return cls(
            status=CallbackStatus.APPLIED,
            donation_id=donation_id,
            donation_status=donation_status,
            campaign_id=campaign_id,
            applied_amount=applied_amount,
        )

    @classmethod
    def duplicate(
        cls, donation_id: UUID, donation_status: str, campaign_id: UUID
    ) -> "CallbackResult":
        return cls(
            status=CallbackStatus.DUPLICATE,
            donation_id=donation_id,
            donation_status=donation_status,
            campaign_id=campaign_id,
        )

    @property
    def is_duplicate(self) -> bool:
        return self.status == CallbackStatus.DUPLICATE


@dataclass(frozen=True)
class ReconciliationReport:
    """Outcome of recomputing one campaign's running total."""

    campaign_id: UUID
    recorded_amount: Decimal
    expected_amount: Decimal
    corrected: bool

    @property
    def drift(self) -> Decimal:
        return self.recorded_amount - self.expected_amount

    @property
    def is_consistent(self) -> bool:
        return self.drift == 0


@dataclass(frozen=True)
class DecisionResult:
    """Outcome of an admin decision on a boutique order."""

    order_id: UUID
    item_id: UUID
    order_status: str
    item_status: str
    auto_rejected_order_ids: tuple[UUID, ...] = field(default_factory=tuple)
