"""
donation_services -- identity and account services above the kernel.

The kernel receives ids; this package turns credentials and tokens into
those ids.
"""

from donation_services.account_service import AccountService, Registration
from donation_services.identity_gateway import (
    AccessGrant,
    IdentityGateway,
    Principal,
    TokenPurpose,
    hash_password,
    verify_password,
)

__all__ = [
    "AccessGrant",
    "AccountService",
    "IdentityGateway",
    "Principal",
    "Registration",
    "TokenPurpose",
    "hash_password",
    "verify_password",
]
