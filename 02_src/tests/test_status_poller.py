"""Tests for StatusPoller."""

import asyncio

import pytest

from clapp.gateway import StatusPoller
from clapp.models import GatewayPhase


@pytest.fixture
def poller(controller, gateway_process):
    """Create StatusPoller with a short interval."""
    return StatusPoller(controller, gateway_process, interval=0.01)


class TestStatusPollerPoll:
    """Tests for StatusPoller.poll_once()."""

    async def test_poll_applies_status(self, poller, controller, gateway_process):
        """Test that a successful query is fed to the controller."""
        gateway_process.status.return_value = "running"
        await poller.poll_once()
        assert controller.phase is GatewayPhase.RUNNING

    async def test_poll_failure_leaves_state(self, poller, controller, gateway_process):
        """Test that a failing query is skipped for this cycle."""
        controller.apply_status("running")
        gateway_process.status.side_effect = RuntimeError("cli missing")

        await poller.poll_once()

        assert controller.phase is GatewayPhase.RUNNING


class TestStatusPollerLifecycle:
    """Tests for start()/stop()."""

    async def test_start_polls_in_background(self, poller, controller, gateway_process):
        """Test that the loop keeps querying status."""
        gateway_process.status.return_value = "running"

        await poller.start()
        await asyncio.sleep(0.05)
        await poller.stop()

        assert gateway_process.status.await_count >= 2
        assert controller.phase is GatewayPhase.RUNNING

    async def test_stop_leaves_no_task(self, poller):
        """Test that stop cancels and awaits the loop."""
        await poller.start()
        task = poller._task

        await poller.stop()

        assert not poller.running
        assert poller._task is None
        assert task.done()

    async def test_no_polls_after_stop(self, poller, gateway_process):
        """Test that results stop arriving after stop()."""
        await poller.start()
        await asyncio.sleep(0.02)
        await poller.stop()

        count = gateway_process.status.await_count
        await asyncio.sleep(0.05)
        assert gateway_process.status.await_count == count

    async def test_start_is_idempotent(self, poller):
        """Test that a second start keeps the same task."""
        await poller.start()
        task = poller._task
        await poller.start()
        assert poller._task is task
        await poller.stop()

    async def test_stop_without_start(self, poller):
        """Test that stopping an idle poller is harmless."""
        await poller.stop()
        assert not poller.running

    async def test_loop_survives_failures(self, poller, gateway_process):
        """Test that a failing query does not kill the loop."""
        gateway_process.status.side_effect = RuntimeError("flaky")

        await poller.start()
        await asyncio.sleep(0.05)
        assert poller.running
        await poller.stop()
