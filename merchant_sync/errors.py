"""Error handling and retry logic for merchant data sync."""

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, TypeVar

import requests


T = TypeVar("T")


class SyncError(Exception):
    """Base exception for sync errors."""

    pass


class ConfigurationError(SyncError):
    """Raised when configuration is invalid."""

    pass


class APIError(SyncError):
    """Raised when API call fails."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class NetworkError(APIError):
    """Raised when network operation fails."""

    pass


class AuthenticationError(APIError):
    """Raised when the session is missing or rejected by the backend."""

    def __init__(self, message: str, status_code: Optional[int] = 401):
        super().__init__(message, status_code=status_code)


class FailureKind(str, Enum):
    """Category of a classified failure."""

    NETWORK = "network"
    AUTH = "auth"
    VALIDATION = "validation"
    SERVER = "server"
    UNKNOWN = "unknown"


# User-facing messages, one per failure kind
ERROR_MESSAGES = {
    FailureKind.NETWORK: "Unable to connect. Please check your internet connection.",
    FailureKind.AUTH: "Session expired. Please log in again.",
    FailureKind.VALIDATION: "Please check your input and try again.",
    FailureKind.SERVER: "Something went wrong. Please try again later.",
    FailureKind.UNKNOWN: "An unexpected error occurred.",
}

NETWORK_MARKERS = ("network request failed", "network error")

CONNECTIVITY_ERRORS = (
    NetworkError,
    requests.exceptions.ConnectionError,
    requests.exceptions.Timeout,
    ConnectionError,
)


@dataclass(frozen=True)
class FailureRecord:
    """A failure classified for display and retry decisions."""

    kind: FailureKind
    message: str
    retryable: bool
    cause: Any = None


def _error_message(error: Any) -> Optional[str]:
    if error is None:
        return None
    if isinstance(error, str):
        return error or None
    try:
        if isinstance(error, Mapping):
            message = error.get("message")
        else:
            message = getattr(error, "message", None)
            if message is None and isinstance(error, BaseException):
                message = str(error)
        if message is None:
            return None
        return str(message) or None
    except Exception:
        # Errors whose message cannot be rendered fall back to the default text
        return None


def _error_status(error: Any) -> Optional[int]:
    try:
        if isinstance(error, Mapping):
            status = error.get("status_code")
            if status is None:
                status = error.get("status")
        else:
            status = getattr(error, "status_code", None)
            if status is None:
                status = getattr(error, "status", None)
            if status is None:
                response = getattr(error, "response", None)
                status = getattr(response, "status_code", None)
        return int(status) if status is not None else None
    except Exception:
        # Includes statuses int() rejects, such as inf or arbitrary objects
        return None


def classify(error: Any) -> FailureRecord:
    """Classify a raw failure into a FailureRecord.

    Rules are checked in order and the first match wins: network failure,
    unauthorized (401), validation (400/422), server (5xx), unknown.
    Never raises.

    Args:
        error: Exception, mapping with message/status keys, string or None

    Returns:
        FailureRecord describing the failure
    """
    message = _error_message(error)
    status = _error_status(error)
    lowered = (message or "").lower()

    if isinstance(error, CONNECTIVITY_ERRORS) or any(
        marker in lowered for marker in NETWORK_MARKERS
    ):
        return FailureRecord(
            kind=FailureKind.NETWORK,
            message=ERROR_MESSAGES[FailureKind.NETWORK],
            retryable=True,
            cause=error,
        )

    if status == 401 or "unauthorized" in lowered:
        return FailureRecord(
            kind=FailureKind.AUTH,
            message=ERROR_MESSAGES[FailureKind.AUTH],
            retryable=False,
            cause=error,
        )

    if status in (400, 422):
        return FailureRecord(
            kind=FailureKind.VALIDATION,
            message=message or ERROR_MESSAGES[FailureKind.VALIDATION],
            retryable=False,
            cause=error,
        )

    if status is not None and status >= 500:
        return FailureRecord(
            kind=FailureKind.SERVER,
            message=ERROR_MESSAGES[FailureKind.SERVER],
            retryable=True,
            cause=error,
        )

    return FailureRecord(
        kind=FailureKind.UNKNOWN,
        message=message or ERROR_MESSAGES[FailureKind.UNKNOWN],
        retryable=True,
        cause=error,
    )


@dataclass(frozen=True)
class AlertButton:
    """A button offered by an error alert."""

    text: str
    style: Optional[str] = None
    on_press: Optional[Callable[[], Any]] = None


def show_error(
    failure: FailureRecord,
    alert: Callable[[str, str, list[AlertButton]], Any],
    on_retry: Optional[Callable[[], Any]] = None,
) -> list[AlertButton]:
    """Present a classified failure through an alert collaborator.

    A "Retry" button is only offered for retryable failures when a retry
    callback was supplied.

    Args:
        failure: Classified failure
        alert: Callable receiving (title, message, buttons)
        on_retry: Optional callback for the retry button

    Returns:
        Buttons passed to the alert
    """
    buttons = [AlertButton(text="OK", style="cancel")]

    if failure.retryable and on_retry is not None:
        buttons.append(AlertButton(text="Retry", on_press=on_retry))

    alert("Error", failure.message, buttons)
    return buttons


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    delay: float = 1.0,
    on_retry: Optional[Callable[[int, Exception], Any]] = None,
    max_delay: Optional[float] = None,
    logger: Optional[logging.Logger] = None,
) -> T:
    """Retry an async operation on failure with exponential backoff.

    Attempt k (1-indexed) that fails is followed by a wait of
    delay * 2 ** (k - 1) seconds, optionally capped at max_delay.

    Args:
        operation: Zero-argument callable returning an awaitable
        max_attempts: Total number of attempts (must be >= 1)
        delay: Base delay in seconds
        on_retry: Optional callback invoked with (attempt, error) before each wait
        max_delay: Optional ceiling for a single wait
        logger: Optional logger for retry messages

    Returns:
        Operation result

    Raises:
        ConfigurationError: If max_attempts is less than 1
        Last exception if all attempts fail
    """
    if max_attempts < 1:
        raise ConfigurationError(f"max_attempts must be at least 1, got {max_attempts}")

    for attempt in range(1, max_attempts + 1):
        try:
            return await operation()
        except Exception as e:
            if attempt >= max_attempts:
                if logger:
                    logger.error(f"All {max_attempts} attempts failed")
                raise

            wait = delay * 2 ** (attempt - 1)
            if max_delay is not None:
                wait = min(wait, max_delay)

            if on_retry:
                on_retry(attempt, e)
            if logger:
                logger.warning(
                    f"Attempt {attempt}/{max_attempts} failed: {e}. "
                    f"Retrying in {wait:.1f}s..."
                )
            await asyncio.sleep(wait)
