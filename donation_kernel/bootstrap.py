"""
donation_kernel.bootstrap -- composition root.

Responsibility:
    Builds the engine, session factory, policy registry, clock, and ledger
    exactly once from a configuration object and hands them to callers as
    a ``DonationKernel``.  Nothing in the kernel holds a module-level store
    handle; scripts and tests obtain one here.

Usage:
    from donation_config import get_active_config
    from donation_kernel.bootstrap import build_kernel

    kernel = build_kernel(get_active_config())
    kernel.create_schema()
    with kernel.unit_of_work() as ws:
        item = ws.catalog.create_item("Apples", "fruit", stock=10)
    result = kernel.ledger.assign(item.id, recipient_id=1, donation_id=1, quantity=3)
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from donation_kernel.db.engine import (
    build_engine,
    create_tables,
    drop_tables,
    is_memory_database,
    session_scope,
)
from donation_kernel.db.errors import translate_store_error
from donation_kernel.domain.allocation_policy import AllocationPolicyRegistry
from donation_kernel.domain.clock import Clock, SystemClock
from donation_kernel.logging_config import configure_logging, get_logger
from donation_kernel.selectors.distribution_selector import DistributionSelector
from donation_kernel.services.distribution_ledger import DistributionLedger
from donation_kernel.services.donation_service import DonationService
from donation_kernel.services.item_catalog_service import ItemCatalogService
from donation_kernel.services.recipient_service import RecipientService

if TYPE_CHECKING:
    from donation_config.schema import DonationConfig

logger = get_logger("bootstrap")


@dataclass(frozen=True)
class Workspace:
    """Flush-only services sharing one session and one transaction."""

    session: Session
    catalog: ItemCatalogService
    recipients: RecipientService
    donations: DonationService
    distributions: DistributionSelector


class DonationKernel:
    """
    Holds the store handle and the long-lived collaborators.

    Contract:
        ``ledger`` owns its own transactions.  ``unit_of_work`` yields a
        Workspace whose services share one session; it commits on normal
        exit and rolls back on exception.

    An in-memory store is held open by one idle connection until
    ``dispose``, since the shared-cache database vanishes with its last
    connection.
    """

    def __init__(
        self,
        engine: Engine,
        policies: AllocationPolicyRegistry,
        clock: Clock | None = None,
    ):
        self.engine = engine
        self.session_factory: sessionmaker[Session] = sessionmaker(
            bind=engine, expire_on_commit=False
        )
        self.policies = policies
        self.clock = clock or SystemClock()
        self.ledger = DistributionLedger(self.session_factory, policies, self.clock)
        self._keepalive: Connection | None = (
            engine.connect() if is_memory_database(engine) else None
        )

    def create_schema(self) -> None:
        create_tables(self.engine)

    def drop_schema(self) -> None:
        drop_tables(self.engine)

    @contextmanager
    def unit_of_work(self) -> Iterator[Workspace]:
        """
        Transactional scope for catalog and directory work.

        Database errors raised inside the block are translated into
        ConcurrentModificationError or StoreUnavailableError after rollback.
        """
        try:
            with session_scope(self.session_factory) as session:
                yield Workspace(
                    session=session,
                    catalog=ItemCatalogService(session),
                    recipients=RecipientService(session),
                    donations=DonationService(session),
                    distributions=DistributionSelector(session),
                )
        except SQLAlchemyError as exc:
            raise translate_store_error(exc) from exc

    def dispose(self) -> None:
        if self._keepalive is not None:
            self._keepalive.close()
            self._keepalive = None
        self.engine.dispose()


def build_kernel(
    config: DonationConfig,
    clock: Clock | None = None,
    configure_logs: bool = True,
) -> DonationKernel:
    """
    Wire a DonationKernel from configuration.

    Args:
        config: Result of ``donation_config.get_active_config()``.
        clock: Override clock (tests pass a DeterministicClock).
        configure_logs: Install the structured log handler at the
            configured level.
    """
    if configure_logs:
        configure_logging(level=config.logging.level)

    store = config.store
    engine = build_engine(
        store.database_url,
        echo=store.echo,
        pool_size=store.pool_size,
        max_overflow=store.max_overflow,
        pool_timeout=store.pool_timeout,
        sqlite_busy_timeout=store.sqlite_busy_timeout,
    )
    policies = AllocationPolicyRegistry.from_caps(
        config.allocation.caps,
        item_caps=config.allocation.item_caps,
    )

    logger.info(
        "kernel_built",
        extra={
            "config_set_id": config.config_id,
            "dialect": engine.dialect.name,
            "recipient_classes": list(policies.registered_classes()),
        },
    )
    return DonationKernel(engine, policies, clock)
