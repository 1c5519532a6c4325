"""
Configuration Loader (``donation_config.loader``).

Responsibility
--------------
Loads a YAML configuration file and parses it into the typed
``donation_config.schema`` dataclasses.  Runtime callers go through
``donation_config.get_active_config()``.

Invariants enforced
-------------------
* Unknown keys and wrongly-typed values raise ``ValueError`` naming the
  offending ``section.key``; nothing is silently ignored.
* Every parsed object is a frozen dataclass from ``schema.py``.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the parsed
  content.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import MISSING, asdict, fields, replace
from pathlib import Path
from typing import Any, Mapping

import yaml

from donation_config.schema import (
    AllocationConfig,
    AuthConfig,
    DatabaseConfig,
    LedgerConfig,
    LoggingConfig,
    PlatformConfig,
)

_SECTIONS = {
    "database": DatabaseConfig,
    "auth": AuthConfig,
    "ledger": LedgerConfig,
    "allocation": AllocationConfig,
    "logging": LoggingConfig,
}

_ROOT_KEYS = frozenset({"config_id", "version", *_SECTIONS})

_VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top-level YAML must be a mapping")
    return data


def _check_type(section: str, key: str, value: Any, expected: type) -> Any:
    # bool is an int subclass; keep the two apart
    if expected is int and isinstance(value, bool):
        raise ValueError(f"{section}.{key}: expected int, got bool")
    if not isinstance(value, expected):
        raise ValueError(
            f"{section}.{key}: expected {expected.__name__}, got {type(value).__name__}"
        )
    return value


def parse_section(section: str, cls: type, data: Mapping[str, Any] | None):
    """Parse one section mapping into its frozen dataclass."""
    data = data or {}
    if not isinstance(data, Mapping):
        raise ValueError(f"{section}: expected a mapping")

    known = {f.name: f for f in fields(cls)}
    unknown = set(data) - set(known)
    if unknown:
        raise ValueError(f"{section}: unknown keys {sorted(unknown)}")

    kwargs: dict[str, Any] = {}
    for name, f in known.items():
        if name in data:
            expected = type(f.default) if f.default is not MISSING else str
            kwargs[name] = _check_type(section, name, data[name], expected)
        elif f.default is MISSING:
            raise ValueError(f"{section}.{name}: required")
    return cls(**kwargs)


def parse_config(data: Mapping[str, Any]) -> PlatformConfig:
    """
    Parse a whole configuration document.

    Postconditions:
        - Returns a ``PlatformConfig`` with its checksum filled in.
    """
    unknown = set(data) - _ROOT_KEYS
    if unknown:
        raise ValueError(f"unknown top-level keys {sorted(unknown)}")
    if "config_id" not in data:
        raise ValueError("config_id: required")

    sections = {
        name: parse_section(name, cls, data.get(name))
        for name, cls in _SECTIONS.items()
    }
    if not sections["auth"].jwt_secret:
        raise ValueError("auth.jwt_secret: must not be empty")
    if sections["auth"].min_password_length < 1:
        raise ValueError("auth.min_password_length: must be positive")
    level = sections["logging"].level.upper()
    if level not in _VALID_LOG_LEVELS:
        raise ValueError(f"logging.level: {sections['logging'].level!r} is not a log level")
    sections["logging"] = LoggingConfig(level=level)

    config = PlatformConfig(
        config_id=_check_type("root", "config_id", data["config_id"], str),
        version=_check_type("root", "version", data.get("version", 1), int),
        **sections,
    )
    return replace(config, checksum=compute_checksum(asdict(config)))


def apply_env_overrides(
    data: dict[str, Any], environ: Mapping[str, str]
) -> dict[str, Any]:
    """Overlay secrets taken from the environment onto a raw document."""
    data = {key: dict(value) if isinstance(value, dict) else value for key, value in data.items()}
    if environ.get("DONATION_DATABASE_URL"):
        data.setdefault("database", {})["url"] = environ["DONATION_DATABASE_URL"]
    if environ.get("DONATION_JWT_SECRET"):
        data.setdefault("auth", {})["jwt_secret"] = environ["DONATION_JWT_SECRET"]
    return data


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
