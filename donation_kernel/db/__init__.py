"""Database layer - engine, base classes, and error translation."""

from donation_kernel.db.base import Base, TrackedBase
from donation_kernel.db.engine import (
    build_engine,
    create_tables,
    drop_tables,
    is_memory_database,
    is_postgres,
    session_scope,
)
from donation_kernel.db.errors import translate_store_error

__all__ = [
    "Base",
    "TrackedBase",
    "build_engine",
    "create_tables",
    "drop_tables",
    "is_memory_database",
    "is_postgres",
    "session_scope",
    "translate_store_error",
]
