"""Tests for the composition root: build_kernel and DonationKernel.unit_of_work."""

import dataclasses

import pytest

from donation_config import get_active_config
from donation_kernel.bootstrap import DonationKernel, Workspace, build_kernel
from donation_kernel.domain.allocation_policy import PerItemCapPolicy
from donation_kernel.domain.clock import DeterministicClock
from donation_kernel.exceptions import (
    ConcurrentModificationError,
    ErrorKind,
    InvalidItemError,
)
from donation_kernel.models.item import Item


@pytest.fixture
def kernel(tmp_path, deterministic_clock):
    config = get_active_config(environ={"DATABASE_URL": f"sqlite:///{tmp_path / 'kernel.db'}"})
    k = build_kernel(config, clock=deterministic_clock, configure_logs=False)
    k.create_schema()
    yield k
    k.drop_schema()
    k.dispose()


class TestBuildKernel:
    def test_wires_default_caps(self, kernel):
        assert isinstance(kernel, DonationKernel)
        assert kernel.policies.registered_classes() == ("individual", "organisation")
        assert kernel.policies.policy_for("individual").max_per_assignment(1, 1) == 5
        assert kernel.policies.policy_for("organisation").max_per_assignment(1, 1) == 20
        assert isinstance(kernel.clock, DeterministicClock)

    def test_item_caps_wrap_policies(self, tmp_path):
        config = get_active_config(environ={"DATABASE_URL": f"sqlite:///{tmp_path / 'caps.db'}"})
        config = dataclasses.replace(
            config,
            allocation=dataclasses.replace(config.allocation, item_caps={3: 2}),
        )
        k = build_kernel(config, configure_logs=False)
        try:
            policy = k.policies.policy_for("individual")
            assert isinstance(policy, PerItemCapPolicy)
            assert policy.max_per_assignment(3, 1) == 2
            assert policy.max_per_assignment(4, 1) == 5
        finally:
            k.dispose()

    def test_logs_kernel_built(self, tmp_path, captured_logs):
        config = get_active_config(environ={"DATABASE_URL": f"sqlite:///{tmp_path / 'log.db'}"})
        build_kernel(config, configure_logs=False).dispose()
        built = next(r for r in captured_logs() if r["message"] == "kernel_built")
        assert built["dialect"] == "sqlite"
        assert built["config_set_id"] == "default"


class TestUnitOfWork:
    def test_commits_on_exit(self, kernel):
        with kernel.unit_of_work() as ws:
            assert isinstance(ws, Workspace)
            item = ws.catalog.create_item("Apples", "fruit", stock=10)

        with kernel.unit_of_work() as ws:
            assert ws.catalog.get_item(item.id).stock == 10

    def test_rolls_back_on_domain_error(self, kernel):
        with pytest.raises(InvalidItemError):
            with kernel.unit_of_work() as ws:
                ws.catalog.create_item("Apples", "fruit", stock=10)
                ws.catalog.create_item("Pears", "vegetable")

        with kernel.unit_of_work() as ws:
            assert ws.catalog.list_items() == []

    def test_translates_store_errors(self, kernel):
        with kernel.unit_of_work() as ws:
            ws.catalog.create_item("Apples", "fruit")

        with pytest.raises(ConcurrentModificationError) as exc_info:
            with kernel.unit_of_work() as ws:
                ws.session.add(Item(name="Apples", category="fruit", stock=0))
        assert exc_info.value.kind is ErrorKind.CONCURRENT_MODIFICATION
        assert exc_info.value.retryable

    def test_rollback_is_logged(self, kernel, captured_logs):
        with pytest.raises(InvalidItemError):
            with kernel.unit_of_work() as ws:
                ws.catalog.create_item("Pears", "vegetable")
        assert any(r["message"] == "transaction_rolled_back" for r in captured_logs())

    def test_end_to_end(self, kernel, deterministic_clock):
        with kernel.unit_of_work() as ws:
            ws.donations.seed_default_donations()
            item = ws.catalog.create_item("Orange Juice", "beverage", stock=8)
            alice = ws.recipients.create_recipient("Alice Murphy")

        result = kernel.ledger.assign(item.id, alice.id, 1, 5)
        assert result.is_success
        assert result.distribution.distribution_date == deterministic_clock.today()

        with kernel.unit_of_work() as ws:
            views = ws.distributions.list_by_recipient(alice.id)
        assert [v.item_name for v in views] == ["Orange Juice"]
        assert views[0].donation_name == "Emergency Food Aid"


class TestMemoryStore:
    @pytest.fixture
    def memory_kernel(self, deterministic_clock):
        config = get_active_config(environ={"DATABASE_URL": "sqlite://"})
        k = build_kernel(config, clock=deterministic_clock, configure_logs=False)
        k.create_schema()
        yield k
        k.dispose()

    def test_data_survives_between_units_of_work(self, memory_kernel):
        with memory_kernel.unit_of_work() as ws:
            ws.donations.seed_default_donations()
            item = ws.catalog.create_item("Apples", "fruit", stock=10)
            alice = ws.recipients.create_recipient("Alice Murphy")

        assert memory_kernel.ledger.assign(item.id, alice.id, 1, 4).is_success

        with memory_kernel.unit_of_work() as ws:
            assert ws.catalog.get_item(item.id).stock == 6
            assert len(ws.distributions.list_by_item(item.id)) == 1

    def test_each_kernel_gets_its_own_database(self, memory_kernel, deterministic_clock):
        with memory_kernel.unit_of_work() as ws:
            ws.catalog.create_item("Apples", "fruit", stock=10)

        config = get_active_config(environ={"DATABASE_URL": "sqlite://"})
        other = build_kernel(config, clock=deterministic_clock, configure_logs=False)
        try:
            other.create_schema()
            with other.unit_of_work() as ws:
                assert ws.catalog.list_items() == []
        finally:
            other.dispose()

    def test_dispose_releases_keepalive(self, memory_kernel):
        memory_kernel.dispose()
        assert memory_kernel._keepalive is None
