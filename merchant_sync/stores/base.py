"""Base class for locally cached backend resources."""

import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Optional

from ..errors import with_retry


class ResourceStore(ABC):
    """Local copy of one backend resource.

    Each call to initialize() fetches the resource and replaces the local
    state wholesale; the latest successful fetch wins.
    """

    def __init__(
        self,
        client,
        retry_attempts: int = 3,
        retry_delay: float = 1.0,
        retry_max_delay: Optional[float] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize resource store.

        Args:
            client: BackendClient used to fetch the resource
            retry_attempts: Attempts per fetch
            retry_delay: Base backoff delay in seconds
            retry_max_delay: Optional backoff ceiling in seconds
            logger: Optional logger
        """
        self.client = client
        self.retry_attempts = retry_attempts
        self.retry_delay = retry_delay
        self.retry_max_delay = retry_max_delay
        self.logger = logger or logging.getLogger(__name__)
        self.last_updated: Optional[datetime] = None

    @property
    @abstractmethod
    def resource_name(self) -> str:
        """Return the resource name (e.g., 'campaigns', 'crm')."""
        pass

    @abstractmethod
    def _fetch(self, session_id: str) -> Any:
        """Fetch the resource from the backend (blocking).

        Args:
            session_id: Merchant ID of the current session

        Returns:
            Raw resource data
        """
        pass

    @abstractmethod
    def _replace(self, data: Any) -> None:
        """Replace local state with freshly fetched data."""
        pass

    async def initialize(self, session_id: str) -> None:
        """Fetch the resource and replace local state.

        Args:
            session_id: Merchant ID of the current session

        Raises:
            The last fetch error once retries are exhausted
        """
        data = await with_retry(
            lambda: asyncio.to_thread(self._fetch, session_id),
            max_attempts=self.retry_attempts,
            delay=self.retry_delay,
            max_delay=self.retry_max_delay,
            on_retry=self._on_retry,
        )
        self._replace(data)
        self.last_updated = datetime.now()

    def _on_retry(self, attempt: int, error: Exception) -> None:
        self.logger.warning(
            "Fetching %s failed (attempt %d/%d): %s",
            self.resource_name, attempt, self.retry_attempts, error,
        )
