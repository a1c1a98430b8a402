"""
Property-based tests for the distribution ledger.

Random sequences of assign and reverse calls are replayed against the
ledger and against a small in-memory model of the expected behaviour.
After every step the ledger must agree with the model and stock must
never be negative.
"""

from uuid import uuid4

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from donation_kernel.domain.allocation_policy import (
    FixedCapPolicy,
    IndividualPolicy,
    PerItemCapPolicy,
)
from donation_kernel.exceptions import ErrorKind
from donation_kernel.models.item import ItemCategory
from donation_kernel.services.item_catalog_service import ItemCatalogService

CAPS = (5, 20)  # individual, organisation

operation = st.one_of(
    st.tuples(st.just("assign"), st.integers(0, 1), st.integers(-2, 25)),
    st.tuples(st.just("reverse"), st.integers(0, 1), st.just(0)),
)

ledger_settings = settings(
    max_examples=25,
    deadline=None,
    suppress_health_check=[HealthCheck.function_scoped_fixture, HealthCheck.too_slow],
)


def _fresh_item(session_factory, stock: int) -> int:
    with session_factory() as s, s.begin():
        item = ItemCatalogService(s).create_item(
            f"Fuzz {uuid4().hex[:10]}", ItemCategory.FRUIT, stock=stock
        )
    return item.id


def _expected_assign(stock, active, who, quantity):
    if quantity <= 0:
        return ErrorKind.INVALID_QUANTITY
    if quantity > CAPS[who]:
        return ErrorKind.POLICY_CAP_EXCEEDED
    if quantity > stock:
        return ErrorKind.INSUFFICIENT_STOCK
    if who in active:
        return ErrorKind.ASSIGNMENT_EXISTS
    return None


class TestLedgerMatchesModel:
    @ledger_settings
    @given(initial=st.integers(0, 40), ops=st.lists(operation, min_size=1, max_size=12))
    def test_random_sequences(self, seed, ledger, session_factory, read_stock, initial, ops):
        item_id = _fresh_item(session_factory, initial)
        recipients = (seed.individual_id, seed.organisation_id)
        stock = initial
        active: dict[int, int] = {}

        for kind, who, quantity in ops:
            if kind == "assign":
                expected = _expected_assign(stock, active, who, quantity)
                result = ledger.assign(item_id, recipients[who], seed.donation_id, quantity)
                assert result.error_kind is expected
                if expected is None:
                    stock -= quantity
                    active[who] = quantity
            else:
                result = ledger.reverse(item_id, recipients[who])
                if who in active:
                    assert result.is_success
                    stock += active.pop(who)
                else:
                    assert result.error_kind is ErrorKind.ASSIGNMENT_NOT_FOUND

            assert read_stock(item_id) == stock
            assert stock >= 0
            if result.is_success:
                assert result.stock_after == stock

        assert read_stock(item_id) + sum(active.values()) == initial

    @ledger_settings
    @given(initial=st.integers(0, 20), quantity=st.integers(1, 5))
    def test_assign_then_reverse_is_identity(
        self, seed, ledger, session_factory, read_stock, count_distributions, initial, quantity
    ):
        item_id = _fresh_item(session_factory, initial)
        result = ledger.assign(item_id, seed.individual_id, seed.donation_id, quantity)
        if quantity > initial:
            assert result.error_kind is ErrorKind.INSUFFICIENT_STOCK
        else:
            assert result.is_success
            assert ledger.reverse(item_id, seed.individual_id).is_success
        assert read_stock(item_id) == initial
        assert count_distributions(item_id) == 0


class TestPolicyProperties:
    @given(
        cap=st.integers(0, 100),
        override=st.integers(0, 100),
        item_id=st.integers(1, 10),
    )
    def test_per_item_cap_never_exceeds_base(self, cap, override, item_id):
        policy = PerItemCapPolicy(FixedCapPolicy(cap), {1: override})
        allowed = policy.max_per_assignment(item_id, recipient_id=1)
        assert allowed <= cap
        if item_id == 1:
            assert allowed == min(cap, override)
        else:
            assert allowed == cap

    @given(cap=st.one_of(st.integers(max_value=-1), st.floats(allow_nan=True), st.booleans()))
    def test_rejects_bad_caps(self, cap):
        with pytest.raises(ValueError):
            IndividualPolicy(cap)
