"""
Commands -- validated input structs for kernel operations.

Responsibility:
    Each write operation of the kernel takes one frozen dataclass with
    explicit required and optional fields.  Construction validates field
    constraints and raises ``ValidationError``; a command that exists is a
    command that is well-formed.  Referential checks (does the campaign
    exist?) and state checks (is it approved?) stay in the services.

Architecture position:
    Kernel > Domain -- pure, zero I/O.  The API surface translates request
    bodies into these commands; tests build them directly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from uuid import UUID

from donation_kernel.exceptions import ValidationError

CENT = Decimal("0.01")

# Largest value a MONEY column (Numeric(12, 2)) can hold.
MAX_AMOUNT = Decimal("9999999999.99")


def parse_amount(value: object, field_name: str = "amount") -> Decimal:
    """
    Convert ``value`` into a strictly positive two-decimal ``Decimal``.

    Floats are accepted only through their string form so that 0.1 stays 0.1.

    Raises:
        ValidationError: not a number, not finite, not positive, above
            MAX_AMOUNT, or more than two decimal places.
    """
    if isinstance(value, bool):
        raise ValidationError(field_name, "must be a number")
    try:
        amount = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(field_name, f"not a number: {value!r}") from None
    if not amount.is_finite():
        raise ValidationError(field_name, "must be finite")
    if amount <= 0:
        raise ValidationError(field_name, "must be greater than zero")
    if amount > MAX_AMOUNT:
        raise ValidationError(field_name, f"must not exceed {MAX_AMOUNT}")
    if amount != amount.quantize(CENT):
        raise ValidationError(field_name, "at most two decimal places")
    return amount.quantize(CENT)


def _require_text(value: str | None, field_name: str, max_length: int = 255) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(field_name, "is required")
    text = str(value).strip()
    if len(text) > max_length:
        raise ValidationError(field_name, f"longer than {max_length} characters")
    return text


def _optional_text(value: str | None, field_name: str, max_length: int = 255) -> str | None:
    if value is None or not str(value).strip():
        return None
    return _require_text(value, field_name, max_length)


class PaymentOutcome(str, Enum):
    """Outcome reported by a payment operator callback."""

    SUCCESS = "success"
    FAILURE = "failure"

    @classmethod
    def from_operator_status(cls, status: str | None) -> "PaymentOutcome":
        """
        Map an operator's free-form status word onto an outcome.

        Matching ignores case and surrounding whitespace.  A word that is in
        neither vocabulary raises ``ValidationError`` so the donation stays
        pending instead of being failed by a status nobody understood.
        """
        word = (status or "").strip().lower()
        if word in _SUCCESS_STATUSES:
            return cls.SUCCESS
        if word in _FAILURE_STATUSES:
            return cls.FAILURE
        raise ValidationError("status", f"unrecognised payment status: {status!r}")


_SUCCESS_STATUSES = frozenset({"success", "successful", "succeeded", "completed", "paid"})
_FAILURE_STATUSES = frozenset(
    {"failure", "failed", "cancelled", "canceled", "declined", "expired", "rejected", "error"}
)


class DecisionOutcome(str, Enum):
    """Admin decision on a boutique order."""

    APPROVED = "approved"
    REJECTED = "rejected"


def parse_enum(enum_type: type[Enum], value: object, field_name: str):
    try:
        return enum_type(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_type)
        raise ValidationError(field_name, f"{value!r} not one of: {allowed}") from None


@dataclass(frozen=True)
class InitiateDonation:
    """
    Request to open a pending financial donation.

    operator_transaction_id may be omitted; the Ledger Reconciler then mints
    one so that every donation can be matched by a callback.
    """

    campaign_id: UUID
    amount: Decimal
    payment_operator: str
    donor_name: str | None = None
    user_id: UUID | None = None
    operator_transaction_id: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", parse_amount(self.amount))
        object.__setattr__(
            self,
            "payment_operator",
            _require_text(self.payment_operator, "payment_operator", 50),
        )
        object.__setattr__(self, "donor_name", _optional_text(self.donor_name, "donor_name"))
        object.__setattr__(
            self,
            "operator_transaction_id",
            _optional_text(self.operator_transaction_id, "operator_transaction_id"),
        )


@dataclass(frozen=True)
class PaymentCallback:
    """Inbound webhook payload from a payment operator."""

    operator_transaction_id: str
    outcome: PaymentOutcome
    amount: Decimal
    operator: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "operator_transaction_id",
            _require_text(self.operator_transaction_id, "operator_transaction_id"),
        )
        object.__setattr__(
            self, "outcome", parse_enum(PaymentOutcome, self.outcome, "outcome")
        )
        object.__setattr__(self, "amount", parse_amount(self.amount))
        object.__setattr__(self, "operator", _optional_text(self.operator, "operator", 50))


@dataclass(frozen=True)
class CreateCampaign:
    title: str
    description: str
    goal_amount: Decimal
    category: str | None = None
    image_urls: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "title", _require_text(self.title, "title"))
        object.__setattr__(
            self, "description", _require_text(self.description, "description", 10_000)
        )
        object.__setattr__(self, "goal_amount", parse_amount(self.goal_amount, "goal_amount"))
        object.__setattr__(self, "category", _optional_text(self.category, "category", 100))
        object.__setattr__(self, "image_urls", tuple(self.image_urls or ()))


@dataclass(frozen=True)
class SubmitMaterialDonation:
    donor_name: str
    donor_contact: str
    title: str
    description: str
    pickup_location: str
    category: str | None = None
    image_urls: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        for name in ("donor_name", "donor_contact", "title", "pickup_location"):
            object.__setattr__(self, name, _require_text(getattr(self, name), name))
        object.__setattr__(
            self, "description", _require_text(self.description, "description", 10_000)
        )
        object.__setattr__(self, "category", _optional_text(self.category, "category", 100))
        object.__setattr__(self, "image_urls", tuple(self.image_urls or ()))


@dataclass(frozen=True)
class PublishItem:
    """
    Admin publication of a material donation.

    Empty fields fall back to the material donation's own values.
    """

    material_donation_id: UUID
    title: str | None = None
    description: str | None = None
    category: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "title", _optional_text(self.title, "title"))
        object.__setattr__(
            self, "description", _optional_text(self.description, "description", 10_000)
        )
        object.__setattr__(self, "category", _optional_text(self.category, "category", 100))
