"""Tests for the offline action queue."""

import asyncio
import unittest
from unittest.mock import AsyncMock, patch

from merchant_sync.errors import APIError, NetworkError
from merchant_sync.offline_queue import OfflineQueue, perform_or_defer


class TestOfflineQueue(unittest.IsolatedAsyncioTestCase):
    """Test queue bookkeeping and draining."""

    def setUp(self):
        self.queue = OfflineQueue()

    async def test_add_does_not_run_action(self):
        """add() returns an ID immediately and leaves the action pending."""
        operation = AsyncMock()

        action_id = self.queue.add(operation, "Create campaign")

        self.assertTrue(action_id.startswith("action_"))
        status = self.queue.get_status()
        self.assertEqual(status.count, 1)
        self.assertFalse(status.is_processing)
        operation.assert_not_called()

    async def test_ids_are_unique(self):
        """Actions added back to back get distinct IDs."""
        ids = {self.queue.add(AsyncMock(), f"action {i}") for i in range(50)}
        self.assertEqual(len(ids), 50)

    async def test_partial_failure_keeps_failed_action(self):
        """Successful actions are removed and the failing one is kept."""
        first = AsyncMock(return_value="ok")
        second = AsyncMock(side_effect=NetworkError("Network request failed"))
        third = AsyncMock(return_value="ok")
        self.queue.add(first, "first")
        second_id = self.queue.add(second, "second")
        self.queue.add(third, "third")

        await self.queue.process_queue()

        pending = self.queue.pending()
        self.assertEqual([a.id for a in pending], [second_id])
        self.assertFalse(self.queue.get_status().is_processing)
        for operation in (first, second, third):
            operation.assert_awaited_once()

    async def test_failed_actions_keep_relative_order(self):
        """Retained actions stay in their original order."""
        failing = [AsyncMock(side_effect=RuntimeError(str(i))) for i in range(4)]
        ids = []
        for i, operation in enumerate(failing):
            ids.append(self.queue.add(operation, f"failing {i}"))
            self.queue.add(AsyncMock(), f"passing {i}")

        await self.queue.process_queue()

        self.assertEqual([a.id for a in self.queue.pending()], ids)

    async def test_succeeded_action_is_not_retried(self):
        """A second drain only re-attempts actions that failed before."""
        succeeded = AsyncMock()
        flaky = AsyncMock(side_effect=[RuntimeError("offline"), "ok"])
        self.queue.add(succeeded, "succeeded")
        self.queue.add(flaky, "flaky")

        await self.queue.process_queue()
        await self.queue.process_queue()

        succeeded.assert_awaited_once()
        self.assertEqual(flaky.await_count, 2)
        self.assertEqual(len(self.queue), 0)

    async def test_empty_queue_is_noop(self):
        """Processing an empty queue does nothing."""
        await self.queue.process_queue()
        self.assertEqual(self.queue.get_status().count, 0)
        self.assertFalse(self.queue.get_status().is_processing)

    async def test_concurrent_drain_is_noop(self):
        """A drain started while another runs returns without attempting anything."""
        release = asyncio.Event()
        calls = []

        async def slow_action():
            calls.append("slow")
            await release.wait()

        self.queue.add(slow_action, "slow")

        first_drain = asyncio.create_task(self.queue.process_queue())
        await asyncio.sleep(0)
        await asyncio.sleep(0)

        self.assertTrue(self.queue.get_status().is_processing)
        await self.queue.process_queue()
        self.assertEqual(calls, ["slow"])

        release.set()
        await first_drain

        self.assertEqual(calls, ["slow"])
        self.assertEqual(self.queue.get_status().count, 0)
        self.assertFalse(self.queue.get_status().is_processing)

    async def test_action_added_during_drain_is_kept(self):
        """Actions queued mid-drain wait for the next drain."""
        late = AsyncMock()

        async def first_action():
            self.queue.add(late, "late")

        self.queue.add(first_action, "first")

        await self.queue.process_queue()

        self.assertEqual([a.description for a in self.queue.pending()], ["late"])
        late.assert_not_awaited()

    async def test_clear_during_drain(self):
        """clear() during a drain leaves the queue empty afterwards."""
        async def failing_action():
            self.queue.clear()
            raise RuntimeError("offline")

        self.queue.add(failing_action, "clears")

        await self.queue.process_queue()

        self.assertEqual(len(self.queue), 0)

    async def test_settlement_failure_releases_flag(self):
        """An exception outside the actions never leaves the queue stuck."""
        operation = AsyncMock()
        self.queue.add(operation, "action")

        def broken_gather(*aws, **kwargs):
            for aw in aws:
                aw.close()
            raise RuntimeError("settlement failed")

        with patch("merchant_sync.offline_queue.asyncio.gather", side_effect=broken_gather):
            with self.assertRaises(RuntimeError):
                await self.queue.process_queue()

        self.assertFalse(self.queue.get_status().is_processing)
        self.assertEqual(len(self.queue), 1)

        await self.queue.process_queue()
        operation.assert_awaited_once()
        self.assertEqual(len(self.queue), 0)

    async def test_clear(self):
        """clear() drops every queued action."""
        self.queue.add(AsyncMock(), "one")
        self.queue.add(AsyncMock(), "two")
        self.queue.clear()
        self.assertEqual(self.queue.get_status().count, 0)


class TestPerformOrDefer(unittest.IsolatedAsyncioTestCase):
    """Test running actions with offline fallback."""

    def setUp(self):
        self.queue = OfflineQueue()

    async def test_success_is_returned(self):
        """Successful actions are not queued."""
        result = await perform_or_defer(self.queue, AsyncMock(return_value="done"), "save")
        self.assertEqual(result, "done")
        self.assertEqual(len(self.queue), 0)

    async def test_network_failure_is_queued(self):
        """Actions failing for lack of connectivity are deferred."""
        operation = AsyncMock(side_effect=NetworkError("Network request failed"))

        result = await perform_or_defer(self.queue, operation, "save customer")

        self.assertIsNone(result)
        self.assertEqual([a.description for a in self.queue.pending()], ["save customer"])
        self.assertIs(self.queue.pending()[0].operation, operation)

    async def test_other_failures_propagate(self):
        """Non-network failures are raised to the caller and not queued."""
        operation = AsyncMock(side_effect=APIError("Name is required", status_code=422))

        with self.assertRaises(APIError):
            await perform_or_defer(self.queue, operation, "save")

        self.assertEqual(len(self.queue), 0)


if __name__ == "__main__":
    unittest.main()
