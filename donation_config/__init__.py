"""
donation_config -- single public entrypoint for configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  Returns a frozen ``DonationConfig``.  YAML
    loading is internal and never exposed to callers.

Architecture position:
    Configuration.  This package sits beside ``donation_kernel``; the
    kernel never imports from ``donation_config`` at runtime.  The
    composition root (``donation_kernel.bootstrap.build_kernel``) accepts
    the returned object.

Invariants enforced:
    - Single entrypoint: all runtime config flows through ``get_active_config()``.
    - The only environment variable consulted is ``DATABASE_URL``, which
      replaces ``store.database_url``.
    - Same YAML always produces the same checksum.

Failure modes:
    - ``FileNotFoundError`` -- no configuration set with the requested name.
    - ``ValueError`` / ``KeyError`` -- missing or invalid values.

Audit relevance:
    Every successful call emits a ``DONATION_CONFIG_TRACE`` log entry
    carrying the config id, version, checksum, and cap table.
"""

from __future__ import annotations

import dataclasses
import logging
import os
from collections.abc import Mapping
from pathlib import Path

from donation_config.loader import load_yaml_file, parse_config
from donation_config.schema import (
    AllocationConfig,
    DonationConfig,
    LoggingConfig,
    StoreConfig,
)

_logger = logging.getLogger("donation_kernel.config")

# Default configuration sets directory
_DEFAULT_CONFIG_DIR = Path(__file__).parent / "sets"

DATABASE_URL_ENV = "DATABASE_URL"


def get_active_config(
    config_dir: Path | None = None,
    set_name: str = "default",
    environ: Mapping[str, str] | None = None,
) -> DonationConfig:
    """The ONLY public configuration entrypoint.

    Args:
        config_dir: Override path to configuration sets directory.
            Defaults to donation_config/sets/.
        set_name: Configuration set to load (``<set_name>.yaml``).
        environ: Environment mapping for overrides.  Defaults to os.environ.

    Returns:
        DonationConfig with checksum populated.

    Raises:
        FileNotFoundError: If the configuration set does not exist.
        ValueError: If configuration validation fails.
    """
    sets_dir = Path(config_dir) if config_dir is not None else _DEFAULT_CONFIG_DIR
    path = sets_dir / f"{set_name}.yaml"
    if not path.is_file():
        raise FileNotFoundError(f"Configuration set {set_name!r} not found in {sets_dir}")

    config = parse_config(load_yaml_file(path))

    env = os.environ if environ is None else environ
    override_url = env.get(DATABASE_URL_ENV)
    if override_url:
        config = dataclasses.replace(
            config,
            store=dataclasses.replace(config.store, database_url=override_url),
        )

    _logger.info(
        "DONATION_CONFIG_TRACE",
        extra={
            "trace_type": "DONATION_CONFIG_TRACE",
            "config_set_id": config.config_id,
            "config_set_version": config.version,
            "checksum": config.checksum,
            "database_url_overridden": bool(override_url),
            "caps": dict(config.allocation.caps),
            "item_cap_count": len(config.allocation.item_caps),
        },
    )
    return config


__all__ = [
    "get_active_config",
    "DonationConfig",
    "StoreConfig",
    "AllocationConfig",
    "LoggingConfig",
]
