"""Tests for network readiness polling."""

import pytest

from lxdimage.errors import NetworkTimeoutError, RuntimeInvocationError
from lxdimage.network import wait_for_network


class FakeClock:
    """Clock advanced only by sleeping."""

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self):
        return self.now

    async def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def clock():
    """Create a fake clock."""
    return FakeClock()


@pytest.mark.asyncio
class TestWaitForNetwork:
    """Test the network readiness poller."""

    async def test_ready_immediately(self, fake_runtime, clock):
        """Test that a ready container needs a single query."""
        status = await wait_for_network(fake_runtime, "c1", clock=clock, sleep=clock.sleep)

        assert status.is_network_ready()
        assert fake_runtime.calls == [("status", "c1")]
        assert clock.sleeps == []

    async def test_ready_on_nth_query(self, fake_runtime, status_factory, clock):
        """Test that readiness is declared exactly at the first ready status."""
        fake_runtime.statuses = [
            status_factory(ready=False),
            status_factory(ready=False),
            status_factory(ready=False),
            status_factory(ready=True),
            status_factory(ready=False),
        ]

        await wait_for_network(fake_runtime, "c1", timeout=60, interval=1, clock=clock, sleep=clock.sleep)

        assert len(fake_runtime.calls_to("status")) == 4
        assert clock.sleeps == [1, 1, 1]

    async def test_times_out(self, fake_runtime, status_factory, clock):
        """Test that polling stops at the deadline."""
        fake_runtime.statuses = [status_factory(ready=False)]

        with pytest.raises(NetworkTimeoutError) as exc_info:
            await wait_for_network(fake_runtime, "c1", timeout=5, interval=1, clock=clock, sleep=clock.sleep)

        # Queries at t=0..5, none after the deadline.
        assert len(fake_runtime.calls_to("status")) == 6
        assert clock.now == 5
        assert exc_info.value.container == "c1"
        assert isinstance(exc_info.value, TimeoutError)

    async def test_fixed_interval(self, fake_runtime, status_factory, clock):
        """Test that the interval does not back off."""
        fake_runtime.statuses = [status_factory(ready=False)]

        with pytest.raises(NetworkTimeoutError):
            await wait_for_network(fake_runtime, "c1", timeout=2, interval=0.5, clock=clock, sleep=clock.sleep)

        assert clock.sleeps == [0.5, 0.5, 0.5, 0.5]

    async def test_status_error_propagates(self, fake_runtime, clock):
        """Test that a failing status query is not retried."""
        fake_runtime.failures["status"] = RuntimeInvocationError("lxc list failed")

        with pytest.raises(RuntimeInvocationError):
            await wait_for_network(fake_runtime, "c1", clock=clock, sleep=clock.sleep)

        assert len(fake_runtime.calls_to("status")) == 1
