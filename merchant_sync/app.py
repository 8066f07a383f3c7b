"""Composition root wiring the sync services together."""

import logging
from typing import Any, Awaitable, Callable, Optional

from .api_client import BackendClient
from .config import Config
from .offline_queue import OfflineQueue, perform_or_defer
from .session import SessionStorage
from .stores import create_store
from .sync_service import SyncService


RESOURCES = ("campaigns", "crm", "analytics")


class MerchantApp:
    """Owns one instance of each service for the running process."""

    def __init__(
        self,
        session,
        stores: dict,
        sync_service: SyncService,
        offline_queue: OfflineQueue,
        logger: Optional[logging.Logger] = None,
    ):
        self.session = session
        self.stores = stores
        self.sync_service = sync_service
        self.offline_queue = offline_queue
        self.logger = logger or logging.getLogger(__name__)

    async def submit(
        self, operation: Callable[[], Awaitable[Any]], description: str
    ) -> Any:
        """Run a user action now, deferring it if the device is offline.

        Returns:
            Operation result, or None if the action was queued
        """
        return await perform_or_defer(self.offline_queue, operation, description)

    async def on_connectivity_restored(self) -> None:
        """Drain deferred actions once the network is back."""
        self.logger.info("Connectivity restored")
        await self.offline_queue.process_queue()

    async def login(self, merchant_id: str, access_token: str, expires_in: Optional[int] = None) -> bool:
        """Store a new session and start syncing for it.

        Returns:
            True if syncing started
        """
        self.sync_service.stop()
        self.session.save_session(merchant_id, access_token, expires_in=expires_in)
        return await self.sync_service.start()

    def logout(self) -> None:
        """Stop syncing and discard the session and any deferred actions."""
        self.sync_service.stop()
        self.offline_queue.clear()
        self.session.clear_session()
        self.logger.info("Logged out")


def build_app(config: Config, logger: Optional[logging.Logger] = None) -> MerchantApp:
    """Build the application services from configuration.

    Args:
        config: Validated configuration
        logger: Optional logger shared by all services

    Returns:
        MerchantApp instance
    """
    session = SessionStorage(config.session_dir, logger=logger)
    client = BackendClient(config.api_url, session, timeout=config.api_timeout, logger=logger)
    stores = {name: create_store(name, client, config, logger=logger) for name in RESOURCES}

    sync_service = SyncService(
        session,
        stores,
        intervals=config.intervals,
        poll_analytics=config.poll_analytics,
        logger=logger,
    )

    return MerchantApp(
        session=session,
        stores=stores,
        sync_service=sync_service,
        offline_queue=OfflineQueue(logger=logger),
        logger=logger,
    )
