"""
donation_services.identity_gateway -- credentials, tokens and principals.

Responsibility:
    Hashes and verifies passwords, issues and verifies signed tokens, and
    turns a verified access token into a ``Principal`` that the API layer
    hands to the kernel as ``admin_id`` / ``user_id``.

Architecture position:
    Services layer.  Consumes ``AuthConfig`` from donation_config and the
    Repository from the kernel.  The kernel stays identity-agnostic: it
    receives ids, never tokens.

Invariants:
    - Passwords are stored as ``pbkdf2:sha256:<iterations>$<salt>$<hex>``
      and compared in constant time.
    - Every token carries a ``purpose`` claim; a token issued for one
      purpose never verifies for another.
    - Unknown email and wrong password are indistinguishable to the caller.
"""

from __future__ import annotations

import hashlib
import secrets
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from uuid import UUID

import jwt
from sqlalchemy.orm import Session

from donation_config.schema import AuthConfig
from donation_kernel.domain.clock import Clock, SystemClock
from donation_kernel.exceptions import (
    InsufficientRoleError,
    InvalidCredentialsError,
    InvalidOrExpiredTokenError,
)
from donation_kernel.logging_config import get_logger
from donation_kernel.models import User, UserRole
from donation_kernel.repository import Repository

logger = get_logger("services.identity")

_HASH_PREFIX = "pbkdf2:sha256:"


class TokenPurpose(str, Enum):
    ACCESS = "access"
    EMAIL_VERIFICATION = "email_verification"
    PASSWORD_RESET = "password_reset"


def hash_password(password: str, iterations: int = 260_000) -> str:
    """Hash a password using PBKDF2-SHA256 with a random salt."""
    salt = secrets.token_hex(16)
    dk = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), iterations)
    return f"{_HASH_PREFIX}{iterations}${salt}${dk.hex()}"


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against a PBKDF2 hash.  Malformed hashes never match."""
    if not password_hash or not password_hash.startswith(_HASH_PREFIX):
        return False
    parts = password_hash.split("$")
    if len(parts) != 3:
        return False
    header, salt, stored_hash = parts
    try:
        iterations = int(header[len(_HASH_PREFIX):])
    except ValueError:
        return False
    dk = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), iterations)
    return secrets.compare_digest(dk.hex(), stored_hash)


@dataclass(frozen=True)
class Principal:
    """The authenticated caller of one request."""

    subject_id: UUID
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    def require_admin(self) -> Principal:
        if not self.is_admin:
            raise InsufficientRoleError(UserRole.ADMIN.value, self.role)
        return self


@dataclass(frozen=True)
class AccessGrant:
    token: str
    user: User


class IdentityGateway:
    """Authentication and token handling bound to one session."""

    def __init__(
        self,
        session: Session,
        config: AuthConfig,
        clock: Clock | None = None,
    ):
        self._repository = Repository(session)
        self._config = config
        self._clock = clock or SystemClock()

    # ------------------------------------------------------------------
    # Passwords
    # ------------------------------------------------------------------

    def hash_password(self, password: str) -> str:
        return hash_password(password, self._config.password_hash_iterations)

    def authenticate(self, email: str, password: str) -> AccessGrant:
        """Exchange credentials for an access token."""
        user = self._repository.get_user_by_email(email or "")
        if user is None or not verify_password(password or "", user.password_hash):
            logger.info("login_failed")
            raise InvalidCredentialsError()

        logger.info("login_succeeded", extra={"user_id": str(user.id)})
        return AccessGrant(token=self.issue_token(user, TokenPurpose.ACCESS), user=user)

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------

    def _lifetime(self, purpose: TokenPurpose) -> timedelta:
        if purpose is TokenPurpose.ACCESS:
            return timedelta(hours=self._config.access_token_ttl_hours)
        if purpose is TokenPurpose.EMAIL_VERIFICATION:
            return timedelta(hours=self._config.verification_token_ttl_hours)
        return timedelta(minutes=self._config.reset_token_ttl_minutes)

    def issue_token(self, user: User, purpose: TokenPurpose) -> str:
        now = self._clock.now()
        payload = {
            "sub": str(user.id),
            "role": getattr(user.role, "value", user.role),
            "purpose": purpose.value,
            "iat": int(now.timestamp()),
            "exp": int((now + self._lifetime(purpose)).timestamp()),
            # Distinguishes tokens issued within the same second
            "jti": secrets.token_hex(8),
        }
        return jwt.encode(payload, self._config.jwt_secret, algorithm=self._config.jwt_algorithm)

    def verify_token(
        self, token: str, purpose: TokenPurpose = TokenPurpose.ACCESS
    ) -> Principal:
        """
        Verify signature, expiry and purpose of ``token``.

        Raises:
            InvalidOrExpiredTokenError: for any defect; the reason is kept on
                the exception but never reveals more than its category.
        """
        try:
            payload = jwt.decode(
                token,
                self._config.jwt_secret,
                algorithms=[self._config.jwt_algorithm],
                options={"require": ["sub", "exp", "purpose"]},
            )
        except jwt.ExpiredSignatureError:
            raise InvalidOrExpiredTokenError("expired") from None
        except jwt.InvalidTokenError:
            raise InvalidOrExpiredTokenError("invalid token") from None

        if payload.get("purpose") != purpose.value:
            raise InvalidOrExpiredTokenError("wrong purpose")
        try:
            subject_id = UUID(str(payload["sub"]))
        except ValueError:
            raise InvalidOrExpiredTokenError("invalid subject") from None
        return Principal(subject_id=subject_id, role=str(payload.get("role", "")))

    def resolve_user(self, token: str) -> User:
        """Verify an access token and load its user (who must still exist)."""
        principal = self.verify_token(token, TokenPurpose.ACCESS)
        user = self._repository.get_user(principal.subject_id)
        if user is None:
            raise InvalidOrExpiredTokenError("unknown subject")
        return user
