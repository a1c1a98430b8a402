"""
Tests for DistributionSelector and the ledger's read methods.

Two days of activity are recorded through the ledger with a deterministic
clock so that ordering by date can be observed.
"""

from datetime import date

import pytest

from donation_kernel.domain.dtos import DistributionInfo, DistributionView

DAY_ONE = date(2024, 6, 1)
DAY_TWO = date(2024, 6, 2)


@pytest.fixture
def history(seed, ledger, deterministic_clock):
    """
    Day one: Apples -> Alice (aid, 2), Water -> Shelter (centre, 10).
    Day two: Water -> Alice (centre, 3), Apples -> Shelter (aid, 4).
    """
    ledger.assign(seed.item_id, seed.individual_id, seed.donation_id, 2)
    ledger.assign(seed.second_item_id, seed.organisation_id, seed.other_donation_id, 10)
    deterministic_clock.advance_days(1)
    ledger.assign(seed.second_item_id, seed.individual_id, seed.other_donation_id, 3)
    ledger.assign(seed.item_id, seed.organisation_id, seed.donation_id, 4)
    return seed


def _keys(rows: list[DistributionView]) -> list[tuple[int, int]]:
    return [(r.item_id, r.recipient_id) for r in rows]


class TestListByRecipient:
    def test_newest_first(self, history, selector):
        rows = selector.list_by_recipient(history.individual_id)
        assert _keys(rows) == [
            (history.second_item_id, history.individual_id),
            (history.item_id, history.individual_id),
        ]
        assert [r.distribution_date for r in rows] == [DAY_TWO, DAY_ONE]

    def test_denormalized_names(self, history, selector):
        row = selector.list_by_recipient(history.individual_id)[-1]
        assert row.item_name == "Apples"
        assert row.recipient_name == "Alice Murphy"
        assert row.donation_name == "Emergency Food Aid"
        assert row.quantity == 2

    def test_unknown_recipient_is_empty(self, history, selector):
        assert selector.list_by_recipient(999) == []


class TestListByItem:
    def test_newest_first(self, history, selector):
        rows = selector.list_by_item(history.item_id)
        assert _keys(rows) == [
            (history.item_id, history.organisation_id),
            (history.item_id, history.individual_id),
        ]

    def test_donation_filter(self, history, selector):
        water = selector.list_by_item(history.second_item_id, history.other_donation_id)
        assert len(water) == 2
        assert {r.donation_name for r in water} == {"Community Centre Collection"}

        assert selector.list_by_item(history.item_id, history.other_donation_id) == []

    def test_same_day_ordered_by_recipient(self, seed, ledger, selector):
        ledger.assign(seed.item_id, seed.organisation_id, seed.donation_id, 1)
        ledger.assign(seed.item_id, seed.individual_id, seed.donation_id, 1)
        rows = selector.list_by_item(seed.item_id)
        assert [r.recipient_id for r in rows] == sorted([seed.individual_id, seed.organisation_id])


class TestListAll:
    def test_ordering(self, history, selector):
        h = history
        assert _keys(selector.list_all()) == [
            (h.item_id, h.organisation_id),
            (h.second_item_id, h.individual_id),
            (h.item_id, h.individual_id),
            (h.second_item_id, h.organisation_id),
        ]

    def test_donation_filter(self, history, selector):
        rows = selector.list_all(history.donation_id)
        assert _keys(rows) == [
            (history.item_id, history.organisation_id),
            (history.item_id, history.individual_id),
        ]

    def test_empty_ledger(self, seed, selector):
        assert selector.list_all() == []

    def test_reversed_rows_disappear(self, history, ledger, selector):
        ledger.reverse(history.item_id, history.organisation_id)
        assert len(selector.list_all()) == 3
        assert selector.get_active(history.item_id, history.organisation_id) is None


class TestPointQueries:
    def test_get_active(self, history, selector):
        record = selector.get_active(history.second_item_id, history.organisation_id)
        assert isinstance(record, DistributionInfo)
        assert record.quantity == 10
        assert record.donation_id == history.other_donation_id
        assert record.distribution_date == DAY_ONE

    def test_get_active_missing(self, seed, selector):
        assert selector.get_active(seed.item_id, seed.individual_id) is None

    def test_distributed_quantity(self, history, selector):
        assert selector.distributed_quantity(history.item_id) == 6
        assert selector.distributed_quantity(history.second_item_id) == 13
        assert selector.distributed_quantity(999) == 0

    def test_stock_plus_distributed_is_conserved(self, history, selector, read_stock):
        # Apples started at 10, water at 30
        assert read_stock(history.item_id) + selector.distributed_quantity(history.item_id) == 10
        assert (
            read_stock(history.second_item_id)
            + selector.distributed_quantity(history.second_item_id)
        ) == 30


class TestLedgerReads:
    """The ledger's read methods open their own sessions."""

    def test_match_selector(self, history, ledger, selector):
        assert ledger.list_all() == selector.list_all()
        assert ledger.list_by_recipient(history.individual_id) == selector.list_by_recipient(
            history.individual_id
        )
        assert ledger.list_by_item(history.item_id, history.donation_id) == selector.list_by_item(
            history.item_id, history.donation_id
        )
