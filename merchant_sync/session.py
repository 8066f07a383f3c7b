"""Secure storage for the authenticated merchant session."""

import json
import os
import time
from pathlib import Path
from typing import Optional
import logging


class SessionStorage:
    """Manages storage and retrieval of the merchant session.

    The session identifier used to gate syncing is the merchant ID of a
    stored, unexpired session.
    """

    def __init__(
        self, storage_path: Optional[Path] = None, logger: Optional[logging.Logger] = None
    ):
        """Initialize session storage.

        Args:
            storage_path: Path to session storage directory (default: .session/ in cwd)
            logger: Optional logger
        """
        self.logger = logger or logging.getLogger(__name__)

        if storage_path is None:
            storage_path = Path.cwd() / ".session"

        self.storage_path = Path(storage_path)
        self.session_file = self.storage_path / "session.json"

        self._ensure_storage_directory()

    def _ensure_storage_directory(self):
        """Create storage directory with secure permissions."""
        if not self.storage_path.exists():
            self.storage_path.mkdir(mode=0o700, parents=True)
            self.logger.debug(f"Created session storage directory: {self.storage_path}")

        # Owner only
        try:
            os.chmod(self.storage_path, 0o700)
        except OSError as e:
            self.logger.warning(f"Could not set secure permissions on {self.storage_path}: {e}")

    def save_session(
        self,
        merchant_id: str,
        access_token: str,
        expires_in: Optional[int] = None,
    ):
        """Save a session to storage.

        Args:
            merchant_id: Identifier of the logged-in merchant
            access_token: Bearer token for the backend API
            expires_in: Token lifetime in seconds (optional)
        """
        session_data = {
            "merchant_id": merchant_id,
            "access_token": access_token,
            "expires_at": time.time() + expires_in if expires_in else None,
        }

        try:
            with open(self.session_file, "w") as f:
                json.dump(session_data, f, indent=2)

            os.chmod(self.session_file, 0o600)

            self.logger.debug(f"Saved session to {self.session_file}")
        except OSError as e:
            self.logger.error(f"Failed to save session: {e}")
            raise

    def load_session(self) -> Optional[dict]:
        """Load the session if present and unexpired.

        Returns:
            Dictionary with session data or None
        """
        if not self.session_file.exists():
            self.logger.debug("No session file found")
            return None

        try:
            with open(self.session_file, "r") as f:
                session_data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            self.logger.error(f"Failed to load session: {e}")
            return None

        expires_at = session_data.get("expires_at")
        if expires_at and time.time() >= expires_at:
            self.logger.debug("Session expired")
            return None

        return session_data

    @property
    def session_id(self) -> Optional[str]:
        """Merchant ID of the current session, or None if logged out."""
        session_data = self.load_session()
        if not session_data:
            return None
        return session_data.get("merchant_id") or None

    def get_access_token(self) -> Optional[str]:
        """Get current access token if valid.

        Returns:
            Access token or None if expired/missing
        """
        session_data = self.load_session()
        if not session_data:
            return None
        return session_data.get("access_token")

    def clear_session(self):
        """Remove the stored session."""
        if self.session_file.exists():
            try:
                self.session_file.unlink()
                self.logger.info("Cleared stored session")
            except OSError as e:
                self.logger.error(f"Failed to clear session: {e}")
                raise

    def has_session(self) -> bool:
        """Check if a valid session exists."""
        return self.session_id is not None
