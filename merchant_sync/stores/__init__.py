"""Resource store implementations and factory."""

from .base import ResourceStore


def create_store(resource_name: str, client, config, logger=None) -> ResourceStore:
    """Factory function to create the store for a resource.

    Args:
        resource_name: Resource to store ('campaigns', 'crm' or 'analytics')
        client: BackendClient instance
        config: Configuration object with retry settings
        logger: Optional logger

    Returns:
        ResourceStore implementation instance

    Raises:
        ValueError: If resource_name is not supported
    """
    options = dict(
        retry_attempts=config.retry_attempts,
        retry_delay=config.retry_delay,
        retry_max_delay=config.retry_max_delay,
        logger=logger,
    )

    if resource_name == "campaigns":
        from .campaigns import CampaignStore
        return CampaignStore(client, **options)
    elif resource_name == "crm":
        from .crm import CRMStore
        return CRMStore(client, **options)
    elif resource_name == "analytics":
        from .analytics import AnalyticsStore
        return AnalyticsStore(client, **options)
    else:
        raise ValueError(
            f"Unknown resource: {resource_name}. "
            f"Supported resources: 'campaigns', 'crm', 'analytics'"
        )


__all__ = ["ResourceStore", "create_store"]
