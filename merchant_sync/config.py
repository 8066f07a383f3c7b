"""Configuration management for merchant sync."""

import os
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


TRUE_VALUES = ("1", "true", "yes", "on")


class Config:
    """Configuration holder for sync operations."""

    def __init__(
        self,
        api_url: str,
        api_timeout: float = 30,
        session_dir: str = ".session",
        campaigns_interval: float = 30,
        crm_interval: float = 120,
        analytics_interval: float = 60,
        poll_analytics: bool = False,
        retry_attempts: int = 3,
        retry_delay: float = 1.0,
        retry_max_delay: Optional[float] = None,
        log_file: Optional[str] = None,
    ):
        """Initialize configuration.

        Args:
            api_url: Merchant backend base URL
            api_timeout: HTTP request timeout in seconds
            session_dir: Directory holding the stored session
            campaigns_interval: Campaign polling interval in seconds
            crm_interval: CRM polling interval in seconds
            analytics_interval: Analytics polling interval in seconds
            poll_analytics: If True, poll analytics on its interval
            retry_attempts: Attempts per fetch before giving up
            retry_delay: Base backoff delay in seconds
            retry_max_delay: Optional ceiling for a single backoff wait
            log_file: Optional log file path
        """
        self.api_url = api_url
        self.api_timeout = api_timeout
        self.session_dir = Path(session_dir).expanduser()
        self.campaigns_interval = campaigns_interval
        self.crm_interval = crm_interval
        self.analytics_interval = analytics_interval
        self.poll_analytics = poll_analytics
        self.retry_attempts = retry_attempts
        self.retry_delay = retry_delay
        self.retry_max_delay = retry_max_delay
        self.log_file = log_file

    @property
    def intervals(self) -> dict:
        """Polling intervals keyed by resource name."""
        return {
            "campaigns": self.campaigns_interval,
            "crm": self.crm_interval,
            "analytics": self.analytics_interval,
        }

    def validate(self) -> list[str]:
        """Validate configuration and return list of errors.

        Returns:
            List of error messages (empty if valid)
        """
        errors = []

        if not self.api_url:
            errors.append("Merchant API URL is required")
        elif not self.api_url.startswith(("http://", "https://")):
            errors.append(f"Merchant API URL must start with http:// or https://: {self.api_url}")

        if self.api_timeout <= 0:
            errors.append(f"API timeout must be positive: {self.api_timeout}")

        for name, interval in self.intervals.items():
            if interval <= 0:
                errors.append(f"Polling interval for {name} must be positive: {interval}")

        if self.retry_attempts < 1:
            errors.append(f"Retry attempts must be at least 1: {self.retry_attempts}")
        if self.retry_delay < 0:
            errors.append(f"Retry delay cannot be negative: {self.retry_delay}")
        if self.retry_max_delay is not None and self.retry_max_delay < 0:
            errors.append(f"Retry max delay cannot be negative: {self.retry_max_delay}")

        if self.session_dir.exists() and not self.session_dir.is_dir():
            errors.append(f"Session directory is not a directory: {self.session_dir}")

        return errors


def _env_number(name: str, cast):
    value = os.getenv(name)
    if value is None or value == "":
        return None
    try:
        return cast(value)
    except ValueError:
        print(f"Ignoring invalid {name}: {value}", file=sys.stderr)
        return None


def load_config_from_env() -> dict:
    """Load configuration from environment variables and .env file.

    Returns:
        Dictionary of configuration values (None for unset values)
    """
    load_dotenv()

    poll_analytics = os.getenv("SYNC_POLL_ANALYTICS")

    return {
        "api_url": os.getenv("MERCHANT_API_URL"),
        "api_timeout": _env_number("API_TIMEOUT", float),
        "session_dir": os.getenv("SESSION_DIR"),
        "campaigns_interval": _env_number("SYNC_CAMPAIGNS_INTERVAL", float),
        "crm_interval": _env_number("SYNC_CRM_INTERVAL", float),
        "analytics_interval": _env_number("SYNC_ANALYTICS_INTERVAL", float),
        "poll_analytics": (
            poll_analytics.lower() in TRUE_VALUES if poll_analytics is not None else None
        ),
        "retry_attempts": _env_number("RETRY_MAX_ATTEMPTS", int),
        "retry_delay": _env_number("RETRY_DELAY", float),
        "retry_max_delay": _env_number("RETRY_MAX_DELAY", float),
        "log_file": os.getenv("LOG_FILE"),
    }


def create_config_from_args(args) -> Config:
    """Create Config object from parsed CLI arguments.

    Args:
        args: Parsed arguments from argparse

    Returns:
        Config object

    Raises:
        SystemExit: If configuration is invalid
    """
    env_config = load_config_from_env()

    # CLI args override environment variables, which override defaults
    values = {key: value for key, value in env_config.items() if value is not None}
    if args.api_url:
        values["api_url"] = args.api_url
    if args.session_dir:
        values["session_dir"] = args.session_dir
    if args.poll_analytics:
        values["poll_analytics"] = True
    if args.log_file:
        values["log_file"] = args.log_file

    config = Config(
        api_url=values.pop("api_url", None),
        **values,
    )

    errors = config.validate()
    if errors:
        print("Configuration errors:", file=sys.stderr)
        for error in errors:
            print(f"  - {error}", file=sys.stderr)
        sys.exit(1)

    return config
