"""Analytics summary store."""

from .base import ResourceStore


class AnalyticsStore(ResourceStore):
    """Merchant analytics summary cached from the backend."""

    @property
    def resource_name(self) -> str:
        return "analytics"

    def __init__(self, client, **kwargs):
        super().__init__(client, **kwargs)
        self.summary: dict = {}

    def _fetch(self, session_id: str) -> dict:
        return self.client.get_analytics(session_id)

    def _replace(self, data: dict) -> None:
        self.summary = dict(data or {})
