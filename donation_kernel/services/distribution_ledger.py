"""
DistributionLedger -- assigns item stock to recipients and reverses it.

Responsibility:
    The only writer of Item.stock during normal operation.  ``assign``
    validates a request, checks the recipient's allocation cap and the
    item's stock, then inserts a Distribution row and decrements stock in
    one transaction.  ``reverse`` deletes the row and restores exactly the
    stored quantity.

Architecture position:
    Kernel > Services -- imperative shell.  Unlike the flush-only services,
    the ledger owns its transactions: every call opens a session from the
    injected factory, commits on success, rolls back on rejection, and
    closes the session before returning.

Invariants enforced:
    - Item.stock >= 0 after every call.
    - assign then reverse of the same pair restores stock and removes the row.
    - Nothing is written unless every check passes.
    - Concurrent calls on one item are serialized: SELECT ... FOR UPDATE on
      PostgreSQL, plus the Item.version compare-and-swap on every backend.
      A lost race surfaces as CONCURRENT_MODIFICATION; the ledger does not
      retry.

Assign check order (first failure wins):
    1. quantity is a positive int            -> INVALID_QUANTITY
    2. recipient exists                      -> RECIPIENT_NOT_FOUND
    3. item exists (row locked)              -> ITEM_NOT_FOUND
    4. donation exists                       -> DONATION_NOT_FOUND
    5. quantity <= recipient class cap       -> POLICY_CAP_EXCEEDED
    6. quantity <= item stock                -> INSUFFICIENT_STOCK
    7. no active record for the pair         -> ASSIGNMENT_EXISTS

Failure modes:
    - Every DonationKernelError becomes a REJECTED LedgerResult.
    - SQLAlchemy errors are translated (see db/errors.py) into
      CONCURRENT_MODIFICATION or STORE_UNAVAILABLE results.
    - Any other exception is logged, the transaction rolled back, and the
      exception re-raised.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import TypeVar
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from donation_kernel.db.errors import translate_store_error
from donation_kernel.domain.allocation_policy import AllocationPolicyRegistry
from donation_kernel.domain.clock import Clock, SystemClock
from donation_kernel.domain.dtos import DistributionInfo, DistributionView
from donation_kernel.exceptions import (
    AssignmentExistsError,
    AssignmentNotFoundError,
    DonationKernelError,
    DonationNotFoundError,
    ErrorKind,
    InsufficientStockError,
    InvalidQuantityError,
    ItemNotFoundError,
    PolicyCapExceededError,
    RecipientNotFoundError,
)
from donation_kernel.logging_config import LogContext, get_logger
from donation_kernel.models.distribution import Distribution
from donation_kernel.models.donation import Donation
from donation_kernel.models.item import Item
from donation_kernel.models.recipient import Recipient
from donation_kernel.selectors.distribution_selector import DistributionSelector

logger = get_logger("services.distribution_ledger")

T = TypeVar("T")


class LedgerStatus(str, Enum):
    """Outcome of a ledger write."""

    ASSIGNED = "assigned"
    REVERSED = "reversed"
    REJECTED = "rejected"


@dataclass(frozen=True)
class LedgerResult:
    """Result of ``assign`` or ``reverse``."""

    status: LedgerStatus
    distribution: DistributionInfo | None = None
    stock_after: int | None = None
    error: DonationKernelError | None = None
    message: str | None = None

    @property
    def is_success(self) -> bool:
        return self.status in (LedgerStatus.ASSIGNED, LedgerStatus.REVERSED)

    @property
    def error_kind(self) -> ErrorKind | None:
        return self.error.kind if self.error is not None else None

    @property
    def is_retryable(self) -> bool:
        return self.error is not None and self.error.retryable

    @classmethod
    def rejected(cls, error: DonationKernelError) -> LedgerResult:
        return cls(status=LedgerStatus.REJECTED, error=error, message=str(error))


def _rollback(session: Session) -> None:
    try:
        session.rollback()
    except SQLAlchemyError:
        logger.warning("rollback_failed", exc_info=True)


class DistributionLedger:
    """
    Records item-to-recipient assignments and keeps stock consistent.

    Contract:
        ``assign`` and ``reverse`` never raise for domain or store failures;
        they return a LedgerResult.  The list methods are pure reads and
        raise StoreUnavailableError if the store cannot be reached.

    Usage:
        ledger = DistributionLedger(session_factory, AllocationPolicyRegistry.default())
        result = ledger.assign(item_id=1, recipient_id=1, donation_id=1, quantity=5)
        if not result.is_success:
            print(result.error_kind, result.message)
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        policies: AllocationPolicyRegistry,
        clock: Clock | None = None,
    ):
        self._session_factory = session_factory
        self._policies = policies
        self._clock = clock or SystemClock()

    @property
    def policies(self) -> AllocationPolicyRegistry:
        return self._policies

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def assign(
        self,
        item_id: int,
        recipient_id: int,
        donation_id: int,
        quantity: int,
    ) -> LedgerResult:
        """
        Grant ``quantity`` units of an item to a recipient under a donation.

        Postconditions:
            - On ASSIGNED the Distribution row exists, stock has dropped by
              ``quantity``, and the transaction is committed.
            - On REJECTED nothing was written.

        Raises:
            Exception: Re-raises any unexpected non-database exception
                after rollback.
        """
        with LogContext.bind(
            correlation_id=str(uuid4()),
            operation="assign",
            item_id=str(item_id),
            recipient_id=str(recipient_id),
            donation_id=str(donation_id),
        ):
            logger.info("allocation_started", extra={"quantity": quantity})
            return self._run(
                "allocation",
                item_id,
                lambda session: self._do_assign(
                    session, item_id, recipient_id, donation_id, quantity
                ),
            )

    def reverse(self, item_id: int, recipient_id: int) -> LedgerResult:
        """
        Remove the active record for (item, recipient) and restore stock.

        The restored amount is the quantity stored on the record.  There is
        no upper bound on the resulting stock.
        """
        with LogContext.bind(
            correlation_id=str(uuid4()),
            operation="reverse",
            item_id=str(item_id),
            recipient_id=str(recipient_id),
        ):
            logger.info("reversal_started")
            return self._run(
                "reversal",
                item_id,
                lambda session: self._do_reverse(session, item_id, recipient_id),
            )

    def _run(
        self,
        event: str,
        item_id: int,
        work: Callable[[Session], LedgerResult],
    ) -> LedgerResult:
        """Run ``work`` in one transaction and turn failures into results."""
        t0 = time.monotonic()
        session = self._session_factory()
        try:
            try:
                result = work(session)
                session.commit()
            except DonationKernelError as exc:
                _rollback(session)
                result = LedgerResult.rejected(exc)
            except SQLAlchemyError as exc:
                _rollback(session)
                result = LedgerResult.rejected(
                    translate_store_error(exc, entity_type="item", entity_id=item_id)
                )
            except Exception:
                _rollback(session)
                logger.error(
                    f"{event}_failed",
                    extra={"duration_ms": round((time.monotonic() - t0) * 1000, 2)},
                    exc_info=True,
                )
                raise
        finally:
            session.close()

        duration_ms = round((time.monotonic() - t0) * 1000, 2)
        if result.is_success:
            logger.info(
                f"{event}_completed",
                extra={
                    "status": result.status.value,
                    "quantity": result.distribution.quantity,
                    "stock_after": result.stock_after,
                    "duration_ms": duration_ms,
                },
            )
        else:
            logger.warning(
                f"{event}_rejected",
                extra={
                    "error_code": result.error.code,
                    "retryable": result.is_retryable,
                    "reason": result.message,
                    "duration_ms": duration_ms,
                },
            )
        return result

    def _lock_item(self, session: Session, item_id: int) -> Item | None:
        stmt = select(Item).where(Item.id == item_id).with_for_update()
        return session.execute(stmt).scalar_one_or_none()

    def _find_record(
        self,
        session: Session,
        item_id: int,
        recipient_id: int,
    ) -> Distribution | None:
        stmt = select(Distribution).where(
            Distribution.item_id == item_id,
            Distribution.recipient_id == recipient_id,
        )
        return session.execute(stmt).scalar_one_or_none()

    def _do_assign(
        self,
        session: Session,
        item_id: int,
        recipient_id: int,
        donation_id: int,
        quantity: int,
    ) -> LedgerResult:
        """Internal assign logic (without transaction management)."""
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            raise InvalidQuantityError(quantity)

        recipient = session.get(Recipient, recipient_id)
        if recipient is None:
            raise RecipientNotFoundError(recipient_id)

        item = self._lock_item(session, item_id)
        if item is None:
            raise ItemNotFoundError(item_id)

        if session.get(Donation, donation_id) is None:
            raise DonationNotFoundError(donation_id)

        policy = self._policies.policy_for(recipient.recipient_class)
        cap = policy.max_per_assignment(item_id, recipient_id)
        if quantity > cap:
            raise PolicyCapExceededError(item_id, recipient_id, quantity, cap, policy.name)

        if quantity > item.stock:
            raise InsufficientStockError(item_id, quantity, item.stock)

        existing = self._find_record(session, item_id, recipient_id)
        if existing is not None:
            raise AssignmentExistsError(item_id, recipient_id, existing.quantity)

        record = Distribution(
            item_id=item_id,
            recipient_id=recipient_id,
            donation_id=donation_id,
            quantity=quantity,
            distribution_date=self._clock.today(),
        )
        session.add(record)
        item.stock -= quantity
        session.flush()

        return LedgerResult(
            status=LedgerStatus.ASSIGNED,
            distribution=DistributionInfo.from_model(record),
            stock_after=item.stock,
        )

    def _do_reverse(
        self,
        session: Session,
        item_id: int,
        recipient_id: int,
    ) -> LedgerResult:
        """Internal reverse logic (without transaction management)."""
        # Item row first, so a concurrent reversal waits and then sees no record
        item = self._lock_item(session, item_id)
        record = self._find_record(session, item_id, recipient_id) if item else None
        if record is None:
            raise AssignmentNotFoundError(item_id, recipient_id)

        removed = DistributionInfo.from_model(record)
        session.delete(record)
        item.stock += removed.quantity
        session.flush()

        return LedgerResult(
            status=LedgerStatus.REVERSED,
            distribution=removed,
            stock_after=item.stock,
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _read(self, query: Callable[[DistributionSelector], T]) -> T:
        session = self._session_factory()
        try:
            return query(DistributionSelector(session))
        except SQLAlchemyError as exc:
            raise translate_store_error(exc, entity_type="distribution") from exc
        finally:
            session.close()

    def list_by_recipient(self, recipient_id: int) -> list[DistributionView]:
        return self._read(lambda selector: selector.list_by_recipient(recipient_id))

    def list_by_item(
        self,
        item_id: int,
        donation_id: int | None = None,
    ) -> list[DistributionView]:
        return self._read(lambda selector: selector.list_by_item(item_id, donation_id))

    def list_all(self, donation_id: int | None = None) -> list[DistributionView]:
        return self._read(lambda selector: selector.list_all(donation_id))

    def get_active(self, item_id: int, recipient_id: int) -> DistributionInfo | None:
        return self._read(lambda selector: selector.get_active(item_id, recipient_id))
