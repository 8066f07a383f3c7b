"""Polling sync service keeping merchant resources fresh."""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .errors import FailureRecord, classify


# Polling intervals in seconds
POLLING_INTERVALS = {
    "campaigns": 30.0,
    "crm": 120.0,
    "analytics": 60.0,
}

REFRESH_TYPES = ("campaigns", "crm", "analytics", "all")


@dataclass
class SyncState:
    """Polling state of one resource."""

    resource_name: str
    interval: float
    timer: Optional[asyncio.Task] = None
    last_synced_at: Optional[datetime] = None
    last_error: Optional[FailureRecord] = None

    @property
    def is_polling(self) -> bool:
        return self.timer is not None


class SyncService:
    """Coordinates periodic polling of merchant resources.

    Syncing requires a merchant session. Each resource polls on its own
    interval, and a failed sync of one resource never affects another.
    """

    def __init__(
        self,
        session,
        stores: dict,
        intervals: Optional[dict] = None,
        poll_analytics: bool = False,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize sync service.

        Args:
            session: Session provider exposing session_id
            stores: Resource stores keyed by resource name
            intervals: Optional polling intervals in seconds keyed by resource name
            poll_analytics: If True, start() also polls analytics
            logger: Optional logger
        """
        self.session = session
        self.stores = stores
        self.poll_analytics = poll_analytics
        self.logger = logger or logging.getLogger(__name__)

        merged = dict(POLLING_INTERVALS)
        merged.update(intervals or {})
        self.states = {
            name: SyncState(resource_name=name, interval=interval)
            for name, interval in merged.items()
        }

        self.is_running = False
        self.session_id: Optional[str] = None
        self._inflight: set[asyncio.Task] = set()

    def get_state(self, resource_name: str) -> SyncState:
        """Get polling state for a resource."""
        return self.states[resource_name]

    async def start(self) -> bool:
        """Start all sync polling and sync everything once.

        Returns:
            True if polling started, False if already running or logged out
        """
        if self.is_running:
            self.logger.info("SyncService already running")
            return False

        session_id = self.session.session_id
        if not session_id:
            self.logger.warning("Cannot start sync: no merchant logged in")
            return False

        self.session_id = session_id
        self.is_running = True
        self.logger.info(f"SyncService started for merchant: {session_id}")

        self._arm("campaigns", self.sync_campaigns)
        self._arm("crm", self.sync_crm)
        if self.poll_analytics and "analytics" in self.stores:
            self._arm("analytics", self.sync_analytics)

        await self.sync_all(session_id)
        # stop() may have run while the initial sync was in flight
        return self.is_running

    def stop(self) -> None:
        """Stop all sync polling.

        Syncs already dispatched by a poll tick are left to finish.
        """
        for state in self.states.values():
            if state.timer is not None:
                state.timer.cancel()
                state.timer = None

        was_running = self.is_running
        self.is_running = False
        self.session_id = None
        if was_running:
            self.logger.info("SyncService stopped")

    def _arm(self, resource_name: str, sync) -> None:
        state = self.states[resource_name]
        if state.timer is not None:
            self.logger.debug(f"Timer for {resource_name} already armed")
            return

        state.timer = asyncio.get_running_loop().create_task(
            self._poll(state, sync, self.session_id)
        )

    async def _poll(self, state: SyncState, sync, session_id: str) -> None:
        """Dispatch a sync every interval until the timer is cancelled."""
        while True:
            await asyncio.sleep(state.interval)
            task = asyncio.get_running_loop().create_task(sync(session_id))
            self._inflight.add(task)
            task.add_done_callback(self._inflight.discard)

    async def sync_all(self, session_id: str) -> bool:
        """Sync campaigns and CRM concurrently.

        Args:
            session_id: Merchant ID of the current session

        Returns:
            True if every resource synced
        """
        self.logger.info("Syncing all data...")
        results = await asyncio.gather(
            self.sync_campaigns(session_id),
            self.sync_crm(session_id),
        )
        if all(results):
            self.logger.info("All data synced")
        return all(results)

    async def sync_campaigns(self, session_id: str) -> bool:
        """Sync campaigns from the backend."""
        return await self._sync_resource("campaigns", session_id)

    async def sync_crm(self, session_id: str) -> bool:
        """Sync CRM customers from the backend."""
        return await self._sync_resource("crm", session_id)

    async def sync_analytics(self, session_id: str) -> bool:
        """Sync the analytics summary from the backend."""
        return await self._sync_resource("analytics", session_id)

    async def _sync_resource(self, resource_name: str, session_id: str) -> bool:
        """Refresh one store, logging instead of raising on failure.

        Returns:
            True if the store was refreshed
        """
        state = self.states[resource_name]
        store = self.stores.get(resource_name)
        if store is None:
            self.logger.debug(f"No store registered for {resource_name}")
            return False

        try:
            await store.initialize(session_id)
        except Exception as e:
            failure = classify(e)
            state.last_error = failure
            self.logger.error(
                "%s sync failed (%s): %s", resource_name, failure.kind.value, e
            )
            self.logger.debug(f"{resource_name} sync failure details", exc_info=True)
            return False

        state.last_synced_at = datetime.now()
        state.last_error = None
        self.logger.info(f"{resource_name} synced")
        return True

    async def refresh(self, kind: str) -> bool:
        """Force refresh a specific data type.

        Args:
            kind: One of 'campaigns', 'crm', 'analytics' or 'all'

        Returns:
            True if the refresh succeeded, False if it failed or no merchant is logged in

        Raises:
            ValueError: If kind is not supported
        """
        if kind not in REFRESH_TYPES:
            raise ValueError(
                f"Unknown refresh type: {kind}. Supported types: {', '.join(REFRESH_TYPES)}"
            )

        session_id = self.session.session_id
        if not session_id:
            self.logger.warning(f"Cannot refresh {kind}: no merchant logged in")
            return False

        if kind == "campaigns":
            return await self.sync_campaigns(session_id)
        elif kind == "crm":
            return await self.sync_crm(session_id)
        elif kind == "analytics":
            return await self.sync_analytics(session_id)
        else:
            return await self.sync_all(session_id)
