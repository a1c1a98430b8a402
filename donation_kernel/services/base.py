"""
BaseService -- abstract base for all kernel services.

Responsibility:
    Provides the common constructor and session-handling contract for
    every catalog and directory service.  Concrete services receive a
    SQLAlchemy ``Session`` and use ``session.flush()``, never
    ``session.commit()``.

Architecture position:
    Kernel > Services -- imperative shell infrastructure.

Invariants enforced:
    Transaction boundaries: services flush within the caller's transaction
    and never commit or rollback themselves.  The caller (a unit of work,
    a script, or the test harness) owns commit/rollback.  The
    DistributionLedger is the one exception: it owns one short transaction
    per call and does not extend this class.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from donation_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    """
    Abstract base class for session-bound services.

    Non-goals:
        - Does NOT manage transaction lifecycle (commit/rollback).
        - Does NOT provide reporting queries; those belong in
          ``donation_kernel/selectors/``.
    """

    def __init__(self, session: Session):
        """
        Args:
            session: SQLAlchemy session for database operations.
        """
        self.session = session
