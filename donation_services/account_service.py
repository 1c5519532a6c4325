"""
donation_services.account_service -- registration and account lifecycle.

Responsibility:
    Registration with an email-verification token, email verification,
    password reset, profile updates and admin verification of users.
    Delivery of the tokens (email) is outside this service: the tokens are
    returned to the caller and stored on the user row, where verification
    checks them.
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.orm import Session

from donation_config.schema import AuthConfig
from donation_kernel.domain.clock import Clock
from donation_kernel.exceptions import (
    EmailAlreadyRegisteredError,
    InvalidOrExpiredTokenError,
    UserNotFoundError,
    ValidationError,
)
from donation_kernel.logging_config import get_logger
from donation_kernel.models import User, UserRole
from donation_kernel.repository import Repository
from donation_services.identity_gateway import IdentityGateway, TokenPurpose

logger = get_logger("services.accounts")


@dataclass(frozen=True)
class Registration:
    user: User
    verification_token: str


def _require(value: str | None, field_name: str, max_length: int = 255) -> str:
    text = (value or "").strip()
    if not text:
        raise ValidationError(field_name, "is required")
    if len(text) > max_length:
        raise ValidationError(field_name, f"longer than {max_length} characters")
    return text


def _validate_email(email: str | None) -> str:
    address = _require(email, "email").lower()
    local, _, domain = address.partition("@")
    if not local or "." not in domain:
        raise ValidationError("email", "not a valid email address")
    return address


class AccountService:
    def __init__(
        self,
        session: Session,
        config: AuthConfig,
        clock: Clock | None = None,
    ):
        self._repository = Repository(session)
        self._config = config
        self._gateway = IdentityGateway(session, config, clock)

    def _validate_password(self, password: str | None) -> str:
        if not password or len(password) < self._config.min_password_length:
            raise ValidationError(
                "password",
                f"must be at least {self._config.min_password_length} characters",
            )
        return password

    def register(
        self,
        email: str,
        password: str,
        first_name: str,
        last_name: str,
    ) -> Registration:
        """Create an unverified beneficiary account."""
        address = _validate_email(email)
        password = self._validate_password(password)
        if self._repository.get_user_by_email(address) is not None:
            raise EmailAlreadyRegisteredError(address)

        user = self._repository.create_user(
            User(
                email=address,
                first_name=_require(first_name, "first_name", 100),
                last_name=_require(last_name, "last_name", 100),
                password_hash=self._gateway.hash_password(password),
                role=UserRole.BENEFICIARY.value,
                is_verified=False,
            )
        )
        token = self._gateway.issue_token(user, TokenPurpose.EMAIL_VERIFICATION)
        self._repository.update_user(user.id, {"email_verification_token": token})

        logger.info("user_registered", extra={"user_id": str(user.id)})
        return Registration(user=user, verification_token=token)

    def verify_email(self, token: str) -> User:
        principal = self._gateway.verify_token(token, TokenPurpose.EMAIL_VERIFICATION)
        user = self._repository.get_user(principal.subject_id)
        if user is None or user.email_verification_token != token:
            raise InvalidOrExpiredTokenError("verification token not recognised")

        user = self._repository.update_user(
            user.id, {"is_verified": True, "email_verification_token": None}
        )
        logger.info("email_verified", extra={"user_id": str(user.id)})
        return user

    def request_password_reset(self, email: str) -> str:
        """Store and return a fresh password-reset token for ``email``."""
        user = self._repository.get_user_by_email(email or "")
        if user is None:
            raise UserNotFoundError(email)

        token = self._gateway.issue_token(user, TokenPurpose.PASSWORD_RESET)
        self._repository.update_user(user.id, {"password_reset_token": token})
        logger.info("password_reset_requested", extra={"user_id": str(user.id)})
        return token

    def reset_password(self, token: str, new_password: str) -> User:
        """Set a new password.  Only the most recently issued token works."""
        principal = self._gateway.verify_token(token, TokenPurpose.PASSWORD_RESET)
        user = self._repository.get_user(principal.subject_id)
        if user is None or user.password_reset_token != token:
            raise InvalidOrExpiredTokenError("reset token not recognised")

        user = self._repository.update_user(
            user.id,
            {
                "password_hash": self._gateway.hash_password(
                    self._validate_password(new_password)
                ),
                "password_reset_token": None,
            },
        )
        logger.info("password_reset_completed", extra={"user_id": str(user.id)})
        return user

    def update_profile(
        self,
        user_id: UUID,
        first_name: str | None = None,
        last_name: str | None = None,
        password: str | None = None,
    ) -> User:
        """Partial profile update.  Role, email and verification are not editable here."""
        updates: dict[str, object] = {}
        if first_name is not None:
            updates["first_name"] = _require(first_name, "first_name", 100)
        if last_name is not None:
            updates["last_name"] = _require(last_name, "last_name", 100)
        if password is not None:
            updates["password_hash"] = self._gateway.hash_password(
                self._validate_password(password)
            )

        user = self._repository.update_user(user_id, updates)
        if user is None:
            raise UserNotFoundError(str(user_id))
        return user

    def set_user_verified(self, user_id: UUID, verified: bool, admin_id: UUID) -> User:
        user = self._repository.update_user(user_id, {"is_verified": verified})
        if user is None:
            raise UserNotFoundError(str(user_id))
        logger.info(
            "user_verification_changed",
            extra={
                "user_id": str(user_id),
                "is_verified": verified,
                "admin_id": str(admin_id),
            },
        )
        return user
