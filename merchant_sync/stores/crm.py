"""CRM customer store."""

import asyncio
from typing import Optional

from .base import ResourceStore


class CRMStore(ResourceStore):
    """Merchant customers cached from the backend."""

    @property
    def resource_name(self) -> str:
        return "crm"

    def __init__(self, client, **kwargs):
        super().__init__(client, **kwargs)
        self.items: list[dict] = []

    def _fetch(self, session_id: str) -> list[dict]:
        return self.client.get_customers(session_id)

    def _replace(self, data: list[dict]) -> None:
        self.items = list(data)
        self.logger.debug(f"Loaded {len(self.items)} customers")

    def get(self, customer_id: str) -> Optional[dict]:
        """Get a cached customer by ID."""
        for customer in self.items:
            if customer.get("id") == customer_id:
                return customer
        return None

    async def update_customer(self, session_id: str, customer_id: str, changes: dict) -> dict:
        """Update a customer on the backend and in the local cache.

        Args:
            session_id: Merchant ID of the current session
            customer_id: Customer to update
            changes: Fields to change

        Returns:
            Updated customer
        """
        updated = await asyncio.to_thread(
            self.client.update_customer, session_id, customer_id, changes
        )
        self.items = [updated if c.get("id") == customer_id else c for c in self.items]
        return updated
