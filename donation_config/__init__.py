"""
donation_config -- single public entrypoint for platform configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  No other component reads configuration files
    or environment variables directly.

Architecture position:
    Configuration sits above ``donation_kernel`` and below
    ``donation_services`` / ``donation_api``.  The kernel MUST NEVER import
    from ``donation_config``; ``bridges`` translates the loaded config into
    kernel policies and engine settings.

Failure modes:
    - ``FileNotFoundError`` -- the selected configuration file is missing.
    - ``ValueError`` -- unknown keys, wrong types or missing required keys.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Mapping

from donation_config.loader import apply_env_overrides, load_yaml_file, parse_config
from donation_config.schema import (
    AllocationConfig,
    AuthConfig,
    DatabaseConfig,
    LedgerConfig,
    LoggingConfig,
    PlatformConfig,
)

_logger = logging.getLogger("donation_kernel.config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "default.yaml"


def get_active_config(
    path: Path | str | None = None,
    environ: Mapping[str, str] | None = None,
) -> PlatformConfig:
    """The ONLY public configuration entrypoint.

    Resolution order for the file: ``path`` argument, then the
    ``DONATION_CONFIG`` environment variable, then the bundled default set.
    ``DONATION_DATABASE_URL`` and ``DONATION_JWT_SECRET`` override the
    corresponding values of whichever file is loaded.
    """
    environ = os.environ if environ is None else environ
    config_path = Path(path or environ.get("DONATION_CONFIG") or DEFAULT_CONFIG_PATH)

    raw = apply_env_overrides(load_yaml_file(config_path), environ)
    config = parse_config(raw)

    _logger.info(
        "DONATION_CONFIG_TRACE",
        extra={
            "config_id": config.config_id,
            "config_version": config.version,
            "config_checksum": config.checksum,
            "config_path": str(config_path),
        },
    )
    return config


__all__ = [
    "get_active_config",
    "DEFAULT_CONFIG_PATH",
    "PlatformConfig",
    "DatabaseConfig",
    "AuthConfig",
    "LedgerConfig",
    "AllocationConfig",
    "LoggingConfig",
]
