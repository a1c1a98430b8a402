"""Tests for translate_store_error."""

import pytest
from sqlalchemy.exc import (
    DBAPIError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
)
from sqlalchemy.orm.exc import StaleDataError

from donation_kernel.db.errors import translate_store_error
from donation_kernel.exceptions import (
    ConcurrentModificationError,
    ErrorKind,
    StoreUnavailableError,
)


class _PgError(Exception):
    def __init__(self, message, pgcode=None):
        super().__init__(message)
        self.pgcode = pgcode


class TestConflicts:
    def test_stale_version(self):
        err = translate_store_error(StaleDataError("expected 1 row"), entity_id=7)
        assert isinstance(err, ConcurrentModificationError)
        assert err.entity_type == "item"
        assert err.entity_id == 7
        assert err.retryable

    def test_integrity_race(self):
        exc = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))
        err = translate_store_error(exc, entity_type="distribution")
        assert err.kind is ErrorKind.CONCURRENT_MODIFICATION
        assert err.entity_type == "distribution"

    @pytest.mark.parametrize("pgcode", ["40001", "40P01", "55P03"])
    def test_postgres_conflict_codes(self, pgcode):
        exc = OperationalError("UPDATE", {}, _PgError("conflict", pgcode))
        assert isinstance(translate_store_error(exc), ConcurrentModificationError)

    @pytest.mark.parametrize("message", [
        "database is locked",
        "database table is locked",
        "database schema is locked: main",
    ])
    def test_sqlite_locked(self, message):
        exc = OperationalError("UPDATE", {}, Exception(message))
        assert isinstance(translate_store_error(exc), ConcurrentModificationError)


class TestUnavailable:
    def test_cannot_open(self):
        exc = OperationalError("SELECT", {}, Exception("unable to open database file"))
        err = translate_store_error(exc)
        assert isinstance(err, StoreUnavailableError)
        assert err.retryable
        assert "unable to open" in err.detail

    def test_interface_error(self):
        exc = InterfaceError("SELECT", {}, Exception("connection already closed"))
        assert isinstance(translate_store_error(exc), StoreUnavailableError)

    def test_invalidated_connection(self):
        exc = DBAPIError("SELECT", {}, Exception("server closed"), connection_invalidated=True)
        assert isinstance(translate_store_error(exc), StoreUnavailableError)

    def test_other_sqlalchemy_error(self):
        err = translate_store_error(SQLAlchemyError("mapper misconfigured"))
        assert err.kind is ErrorKind.STORE_UNAVAILABLE
