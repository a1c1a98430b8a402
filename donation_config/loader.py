"""
Configuration Loader (``donation_config.loader``).

Responsibility
--------------
Loads a YAML configuration set and parses it into typed
``donation_config.schema`` dataclass instances.  The single public entry
point for runtime config is ``donation_config.get_active_config()``.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Out-of-range or mistyped values  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml

from donation_config.schema import (
    AllocationConfig,
    DonationConfig,
    LoggingConfig,
    StoreConfig,
)

_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _non_negative_int(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"{name} must be a non-negative integer, got {value!r}")
    return value


def parse_store(data: dict[str, Any]) -> StoreConfig:
    """Parse a StoreConfig from a dict."""
    url = data["database_url"]
    if not isinstance(url, str) or not url.strip():
        raise ValueError("store.database_url must be a non-empty string")
    return StoreConfig(
        database_url=url.strip(),
        echo=bool(data.get("echo", False)),
        pool_size=_non_negative_int(data.get("pool_size", 10), "store.pool_size"),
        max_overflow=_non_negative_int(data.get("max_overflow", 5), "store.max_overflow"),
        pool_timeout=_non_negative_int(data.get("pool_timeout", 30), "store.pool_timeout"),
        sqlite_busy_timeout=float(data.get("sqlite_busy_timeout", 5.0)),
    )


def parse_allocation(data: dict[str, Any]) -> AllocationConfig:
    """
    Parse the cap table.

    Recipient class tags are lower-cased; every cap must be an int >= 0.
    """
    raw_caps = data["caps"]
    if not isinstance(raw_caps, dict) or not raw_caps:
        raise ValueError("allocation.caps must be a non-empty mapping")
    caps = {
        str(recipient_class).strip().lower(): _non_negative_int(
            cap, f"allocation.caps.{recipient_class}"
        )
        for recipient_class, cap in raw_caps.items()
    }

    raw_item_caps = data.get("item_caps") or {}
    if not isinstance(raw_item_caps, dict):
        raise ValueError("allocation.item_caps must be a mapping of item id to cap")
    item_caps = {
        int(item_id): _non_negative_int(cap, f"allocation.item_caps.{item_id}")
        for item_id, cap in raw_item_caps.items()
    }

    return AllocationConfig(
        caps=MappingProxyType(caps),
        item_caps=MappingProxyType(item_caps),
    )


def parse_logging(data: dict[str, Any]) -> LoggingConfig:
    level = str(data.get("level", "INFO")).upper()
    if level not in _LOG_LEVELS:
        raise ValueError(f"logging.level must be one of {sorted(_LOG_LEVELS)}, got {level!r}")
    return LoggingConfig(level=level)


def parse_config(data: dict[str, Any]) -> DonationConfig:
    """Parse a complete DonationConfig from a loaded YAML dict."""
    return DonationConfig(
        config_id=str(data["config_id"]),
        version=_non_negative_int(data.get("version", 1), "version"),
        store=parse_store(data["store"]),
        allocation=parse_allocation(data["allocation"]),
        logging=parse_logging(data.get("logging") or {}),
        checksum=compute_checksum(data),
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
