"""
Typed Exception Hierarchy for the Donation Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers (the API surface, operator scripts, tests) must react to failures by
type, never by parsing messages.  Every exception carries:
  1. A typed class (catch by type, not message)
  2. A CODE class attribute (machine-readable, API-safe)
  3. Structured DATA as attributes (not just a message string)

Example - WRONG way to handle errors:
    try:
        workflow.decide(order_id, admin_id, "approved")
    except Exception as e:
        if "no longer available" in str(e):
            ...

Example - RIGHT way:
    try:
        workflow.decide(order_id, admin_id, "approved")
    except ItemUnavailableError as e:
        api_response(code=e.code, item=e.item_id)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    DonationKernelError (base)
    |
    +-- ValidationError
    |
    +-- NotFoundError
    |   +-- UserNotFoundError
    |   +-- CampaignNotFoundError
    |   +-- DonationNotFoundError
    |   +-- MaterialDonationNotFoundError
    |   +-- BoutiqueItemNotFoundError
    |   +-- BoutiqueOrderNotFoundError
    |
    +-- ConflictError
    |   +-- CampaignNotAcceptingDonationsError
    |   +-- DuplicateTransactionError
    |   +-- MaterialDonationAlreadyDecidedError
    |   |   +-- AlreadyPublishedError
    |   +-- ItemUnavailableError
    |   +-- OrderAlreadyDecidedError
    |   +-- EmailAlreadyRegisteredError
    |
    +-- AuthError
        +-- InvalidCredentialsError
        +-- InvalidOrExpiredTokenError
        +-- InsufficientRoleError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category    | Code                          | When Raised
------------|-------------------------------|--------------------------------------
Validation  | VALIDATION_ERROR              | Malformed / out-of-constraint input
------------|-------------------------------|--------------------------------------
Not found   | USER_NOT_FOUND                | User id / email doesn't exist
            | CAMPAIGN_NOT_FOUND            | Campaign id doesn't exist
            | DONATION_NOT_FOUND            | Unknown operator transaction id
            | MATERIAL_DONATION_NOT_FOUND   | Material donation id doesn't exist
            | BOUTIQUE_ITEM_NOT_FOUND       | Boutique item id doesn't exist
            | BOUTIQUE_ORDER_NOT_FOUND      | Boutique order id doesn't exist
------------|-------------------------------|--------------------------------------
Conflict    | CAMPAIGN_NOT_ACCEPTING        | Donation to a non-approved campaign
            | DUPLICATE_TRANSACTION         | operator_transaction_id already used
            | MATERIAL_DONATION_ALREADY_DECIDED | Material donation already rejected
            | ALREADY_PUBLISHED             | Second publish of a material donation
            | ITEM_UNAVAILABLE              | Item already allocated / withdrawn
            | ORDER_ALREADY_DECIDED         | Order no longer pending_approval
            | EMAIL_ALREADY_REGISTERED      | Registration with a taken email
------------|-------------------------------|--------------------------------------
Auth        | INVALID_CREDENTIALS           | Wrong email or password
            | INVALID_OR_EXPIRED_TOKEN      | Token bad signature / expired / purpose
            | INSUFFICIENT_ROLE             | Admin capability required

===============================================================================
HANDLING PATTERNS
===============================================================================

1. DUPLICATE PAYMENT CALLBACKS ARE NOT ERRORS.  The Ledger Reconciler
   returns a CallbackResult with status DUPLICATE; nothing is raised.

2. The kernel never retries.  A ConflictError reports a lost race or a
   state-machine violation; retrying the same request cannot succeed.

3. Category base classes map onto transport status codes in one place
   (donation_api.errors).
"""


class DonationKernelError(Exception):
    """
    Base exception for all donation kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "DONATION_KERNEL_ERROR"


# Validation


class ValidationError(DonationKernelError):
    """Input is malformed or violates a field constraint."""

    code: str = "VALIDATION_ERROR"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid {field}: {reason}")


# Not found


class NotFoundError(DonationKernelError):
    """Base exception for references to absent entities."""

    code: str = "NOT_FOUND"

    entity_type: str = "entity"

    def __init__(self, entity_id: str):
        self.entity_id = str(entity_id)
        super().__init__(f"{self.entity_type} not found: {entity_id}")


class UserNotFoundError(NotFoundError):
    code: str = "USER_NOT_FOUND"
    entity_type = "User"


class CampaignNotFoundError(NotFoundError):
    code: str = "CAMPAIGN_NOT_FOUND"
    entity_type = "Campaign"


class DonationNotFoundError(NotFoundError):
    """No financial donation carries the given operator transaction id."""

    code: str = "DONATION_NOT_FOUND"
    entity_type = "Donation"


class MaterialDonationNotFoundError(NotFoundError):
    code: str = "MATERIAL_DONATION_NOT_FOUND"
    entity_type = "Material donation"


class BoutiqueItemNotFoundError(NotFoundError):
    code: str = "BOUTIQUE_ITEM_NOT_FOUND"
    entity_type = "Boutique item"


class BoutiqueOrderNotFoundError(NotFoundError):
    code: str = "BOUTIQUE_ORDER_NOT_FOUND"
    entity_type = "Boutique order"


# Conflicts (state-machine violations and lost races)


class ConflictError(DonationKernelError):
    """Base exception for state-machine violations."""

    code: str = "CONFLICT"


class CampaignNotAcceptingDonationsError(ConflictError):
    """Donation targeted a campaign that is not approved."""

    code: str = "CAMPAIGN_NOT_ACCEPTING"

    def __init__(self, campaign_id: str, status: str):
        self.campaign_id = str(campaign_id)
        self.status = status
        super().__init__(
            f"Campaign {campaign_id} is {status} and does not accept donations"
        )


class DuplicateTransactionError(ConflictError):
    """operator_transaction_id is already attached to another donation."""

    code: str = "DUPLICATE_TRANSACTION"

    def __init__(self, operator_transaction_id: str):
        self.operator_transaction_id = operator_transaction_id
        super().__init__(
            f"Operator transaction id already in use: {operator_transaction_id}"
        )


class MaterialDonationAlreadyDecidedError(ConflictError):
    """Material donation has left pending_verification."""

    code: str = "MATERIAL_DONATION_ALREADY_DECIDED"

    def __init__(self, material_donation_id: str, status: str):
        self.material_donation_id = str(material_donation_id)
        self.status = status
        super().__init__(
            f"Material donation {material_donation_id} is {status}, "
            "expected pending_verification"
        )


class AlreadyPublishedError(MaterialDonationAlreadyDecidedError):
    """Material donation is already published_in_store."""

    code: str = "ALREADY_PUBLISHED"

    def __init__(self, material_donation_id: str):
        super().__init__(material_donation_id, "published_in_store")


class ItemUnavailableError(ConflictError):
    """Boutique item is no longer available for request or allocation."""

    code: str = "ITEM_UNAVAILABLE"

    def __init__(self, item_id: str, status: str | None = None):
        self.item_id = str(item_id)
        self.status = status
        super().__init__(f"Item {item_id} no longer available")


class OrderAlreadyDecidedError(ConflictError):
    """Boutique order has already been approved or rejected."""

    code: str = "ORDER_ALREADY_DECIDED"

    def __init__(self, order_id: str, status: str):
        self.order_id = str(order_id)
        self.status = status
        super().__init__(f"Order {order_id} already {status}")


class EmailAlreadyRegisteredError(ConflictError):
    code: str = "EMAIL_ALREADY_REGISTERED"

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"User already exists: {email}")


# Authentication / authorization


class AuthError(DonationKernelError):
    """Base exception for identity failures."""

    code: str = "AUTH_ERROR"


class InvalidCredentialsError(AuthError):
    code: str = "INVALID_CREDENTIALS"

    def __init__(self) -> None:
        super().__init__("Invalid credentials")


class InvalidOrExpiredTokenError(AuthError):
    code: str = "INVALID_OR_EXPIRED_TOKEN"

    def __init__(self, reason: str = "invalid token"):
        self.reason = reason
        super().__init__(f"Invalid or expired token: {reason}")


class InsufficientRoleError(AuthError):
    """Caller lacks the role required for the operation."""

    code: str = "INSUFFICIENT_ROLE"

    def __init__(self, required_role: str, actual_role: str):
        self.required_role = required_role
        self.actual_role = actual_role
        super().__init__(f"{required_role} access required")
