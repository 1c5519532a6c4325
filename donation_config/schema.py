"""
PlatformConfig schema.

Typed, frozen view of one configuration set.  YAML files are parsed into
these types by the loader; nothing else in the platform reads YAML or
environment variables.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DatabaseConfig:
    url: str = "sqlite:///./donation_platform.db"
    echo: bool = False
    pool_size: int = 20
    max_overflow: int = 10
    pool_timeout: int = 30


@dataclass(frozen=True)
class AuthConfig:
    """Token signing and password hashing parameters."""

    jwt_secret: str
    jwt_algorithm: str = "HS256"
    access_token_ttl_hours: int = 24
    verification_token_ttl_hours: int = 24
    reset_token_ttl_minutes: int = 60
    password_hash_iterations: int = 260_000
    min_password_length: int = 8


@dataclass(frozen=True)
class LedgerConfig:
    require_approved_campaign: bool = True
    verify_callback_amount: bool = True


@dataclass(frozen=True)
class AllocationConfig:
    auto_reject_sibling_orders: bool = True


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PlatformConfig:
    """
    One complete configuration set.

    ``checksum`` identifies the parsed content (after environment
    overrides) and is logged on every load.
    """

    config_id: str
    version: int
    auth: AuthConfig
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    ledger: LedgerConfig = field(default_factory=LedgerConfig)
    allocation: AllocationConfig = field(default_factory=AllocationConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    checksum: str = ""
