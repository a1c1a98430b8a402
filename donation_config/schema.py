"""
DonationConfig schema.

Typed, frozen view of a configuration set.  YAML files are parsed into
these types by the loader; nothing else in the system reads YAML.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StoreConfig:
    """Database connection settings."""

    database_url: str
    echo: bool = False
    pool_size: int = 10
    max_overflow: int = 5
    pool_timeout: int = 30
    sqlite_busy_timeout: float = 5.0


# ---------------------------------------------------------------------------
# Allocation
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AllocationConfig:
    """
    The canonical cap table.

    caps maps a recipient class tag to the largest quantity one assignment
    may grant.  item_caps narrows the cap for specific item ids across all
    recipient classes.
    """

    caps: Mapping[str, int]
    item_caps: Mapping[int, int] = field(default_factory=lambda: MappingProxyType({}))


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DonationConfig:
    """A complete, validated configuration set."""

    config_id: str
    version: int
    store: StoreConfig
    allocation: AllocationConfig
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    checksum: str = ""
