"""
Module: donation_kernel.db.errors
Responsibility: Translate SQLAlchemy / DBAPI failures into the kernel's typed
    exceptions so that no driver-specific error escapes a service boundary.

Mapping:
    StaleDataError (version counter mismatch)       -> ConcurrentModificationError
    IntegrityError (unique / check race)            -> ConcurrentModificationError
    OperationalError with a lock / serialization /
        deadlock signature                          -> ConcurrentModificationError
    Any other OperationalError, InterfaceError,
        invalidated connection, other DBAPIError    -> StoreUnavailableError
"""

from psycopg2 import errorcodes
from sqlalchemy.exc import (
    DBAPIError,
    DisconnectionError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
)
from sqlalchemy.orm.exc import StaleDataError

from donation_kernel.exceptions import (
    ConcurrentModificationError,
    DonationKernelError,
    StoreUnavailableError,
)

_PG_CONFLICT_CODES = frozenset({
    errorcodes.SERIALIZATION_FAILURE,
    errorcodes.DEADLOCK_DETECTED,
    errorcodes.LOCK_NOT_AVAILABLE,
})

_CONFLICT_MARKERS = (
    "database is locked",
    "database table is locked",
    "database schema is locked",
    "deadlock",
    "could not serialize",
    "lock timeout",
    "could not obtain lock",
)


def _is_conflict(exc: DBAPIError) -> bool:
    pgcode = getattr(exc.orig, "pgcode", None) or getattr(exc.orig, "sqlstate", None)
    if pgcode in _PG_CONFLICT_CODES:
        return True
    message = str(exc.orig).lower()
    return any(marker in message for marker in _CONFLICT_MARKERS)


def translate_store_error(
    exc: SQLAlchemyError,
    entity_type: str = "item",
    entity_id: object = None,
) -> DonationKernelError:
    """Map a SQLAlchemy error to ConcurrentModificationError or StoreUnavailableError."""
    if isinstance(exc, StaleDataError):
        return ConcurrentModificationError(entity_type, entity_id, detail=str(exc))

    if isinstance(exc, IntegrityError):
        return ConcurrentModificationError(entity_type, entity_id, detail=str(exc.orig))

    if isinstance(exc, DBAPIError):
        if exc.connection_invalidated or isinstance(exc, InterfaceError):
            return StoreUnavailableError(str(exc.orig))
        if isinstance(exc, OperationalError) and _is_conflict(exc):
            return ConcurrentModificationError(entity_type, entity_id, detail=str(exc.orig))
        return StoreUnavailableError(str(exc.orig))

    if isinstance(exc, DisconnectionError):
        return StoreUnavailableError(str(exc))

    return StoreUnavailableError(str(exc))
