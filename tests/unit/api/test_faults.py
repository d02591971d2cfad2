"""Tests for the simulator's latency and failure injection."""

import pytest

from api.faults import FaultInjector
from core.middleware.error_handling import SimulatedFault


class TestFaultInjector:
    def test_no_faults_by_default(self):
        faults = FaultInjector()

        assert faults.latency_seconds() == 0.0
        assert not any(faults.should_fail("jobs.list") for _ in range(100))

    def test_always_failing_endpoint(self):
        faults = FaultInjector(error_rates={"jobs.reorder": 1.0})

        assert faults.should_fail("jobs.reorder")
        assert not faults.should_fail("jobs.list")

    def test_default_rate_applies_to_unlisted_endpoints(self):
        faults = FaultInjector(error_rates={"default": 1.0, "jobs.list": 0.0})

        assert faults.should_fail("candidates.update")
        assert not faults.should_fail("jobs.list")

    def test_seeded_runs_are_reproducible(self):
        first = FaultInjector(error_rates={"default": 0.5}, seed=7)
        second = FaultInjector(error_rates={"default": 0.5}, seed=7)

        assert [first.should_fail("x") for _ in range(50)] == [
            second.should_fail("x") for _ in range(50)
        ]

    def test_latency_within_bounds(self):
        faults = FaultInjector(min_latency_ms=200, max_latency_ms=1200, seed=1)

        for _ in range(50):
            assert 0.2 <= faults.latency_seconds() <= 1.2

    def test_fail_next_is_consumed(self):
        faults = FaultInjector()
        faults.fail_next("candidates.update", times=2)

        assert faults.should_fail("candidates.update")
        assert faults.should_fail("candidates.update")
        assert not faults.should_fail("candidates.update")

    def test_from_settings(self, test_settings):
        settings = test_settings.model_copy(
            update={"simulator_error_rate": 0.05, "simulator_reorder_error_rate": 0.3}
        )

        faults = FaultInjector.from_settings(settings)

        assert faults.error_rate("jobs.reorder") == 0.3
        assert faults.error_rate("candidates.list") == 0.05
        assert faults.error_rate("jobs.create") == 0.0

    @pytest.mark.asyncio
    async def test_simulate_raises_reorder_message(self):
        faults = FaultInjector()
        faults.fail_next("jobs.reorder")

        with pytest.raises(SimulatedFault, match="Reorder operation failed - please retry"):
            await faults.simulate("jobs.reorder")

    @pytest.mark.asyncio
    async def test_simulate_passes(self):
        await FaultInjector().simulate("jobs.list")
