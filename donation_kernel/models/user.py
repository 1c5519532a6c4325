"""
Module: donation_kernel.models.user
Responsibility: ORM persistence for platform users and their role.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - email is unique (uq_users_email).
    - role is one of the two supported roles (ck_users_valid_role).

Audit relevance:
    role is consumed once, at the API boundary, to grant the admin
    capability.  The kernel itself receives only verified actor ids.
"""

from enum import Enum

from sqlalchemy import Boolean, CheckConstraint, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from donation_kernel.db.base import TimestampedBase


class UserRole(str, Enum):
    """Authorization role.  Donors and beneficiaries share the default role."""

    BENEFICIARY = "beneficiary"
    ADMIN = "admin"


class User(TimestampedBase):
    """A registered account."""

    __tablename__ = "users"

    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        CheckConstraint(
            "role IN ('beneficiary', 'admin')",
            name="ck_users_valid_role",
        ),
    )

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    role: Mapped[UserRole] = mapped_column(
        String(20),
        default=UserRole.BENEFICIARY,
        nullable=False,
    )

    is_verified: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    # Outstanding single-use tokens (cleared once consumed)
    email_verification_token: Mapped[str | None] = mapped_column(
        String(1024),
        nullable=True,
    )
    password_reset_token: Mapped[str | None] = mapped_column(
        String(1024),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<User {self.email}: {self.role}>"

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
