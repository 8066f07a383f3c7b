"""Campaign store."""

import asyncio
from typing import Optional

from .base import ResourceStore


class CampaignStore(ResourceStore):
    """Merchant campaigns cached from the backend."""

    @property
    def resource_name(self) -> str:
        return "campaigns"

    def __init__(self, client, **kwargs):
        super().__init__(client, **kwargs)
        self.items: list[dict] = []

    def _fetch(self, session_id: str) -> list[dict]:
        return self.client.get_campaigns(session_id)

    def _replace(self, data: list[dict]) -> None:
        self.items = list(data)
        self.logger.debug(f"Loaded {len(self.items)} campaigns")

    def get(self, campaign_id: str) -> Optional[dict]:
        """Get a cached campaign by ID."""
        for campaign in self.items:
            if campaign.get("id") == campaign_id:
                return campaign
        return None

    async def create_campaign(self, session_id: str, campaign: dict) -> dict:
        """Create a campaign on the backend and cache it.

        Args:
            session_id: Merchant ID of the current session
            campaign: Campaign fields

        Returns:
            Created campaign
        """
        created = await asyncio.to_thread(self.client.create_campaign, session_id, campaign)
        self.items.append(created)
        self.logger.info(f"Created campaign: {created.get('name', created.get('id'))}")
        return created
