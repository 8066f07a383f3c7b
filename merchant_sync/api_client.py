"""Merchant backend client over HTTP."""

import logging
from typing import Optional

import requests

from .errors import APIError, AuthenticationError, NetworkError


class BackendClient:
    """Client for the merchant backend REST API.

    Calls are blocking; async callers run them in a worker thread.
    """

    def __init__(
        self,
        base_url: str,
        session,
        timeout: float = 30,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize backend client.

        Args:
            base_url: Backend base URL
            session: Session provider exposing get_access_token()
            timeout: Request timeout in seconds
            logger: Optional logger
        """
        self.base_url = base_url.rstrip("/")
        self.session = session
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)

    def _get_headers(self) -> dict:
        """Get HTTP headers for API requests."""
        access_token = self.session.get_access_token()
        if not access_token:
            raise AuthenticationError("Unauthorized: no active session")

        return {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json",
        }

    def _make_request(
        self, method: str, endpoint: str, json_data: Optional[dict] = None
    ):
        """Make HTTP request to the backend.

        Args:
            method: HTTP method (GET, POST, PATCH, DELETE)
            endpoint: API endpoint (without base URL)
            json_data: Optional JSON data for request body

        Returns:
            Decoded JSON response (empty dict for empty bodies)

        Raises:
            NetworkError: If the backend could not be reached
            AuthenticationError: If the backend rejects the session
            APIError: For any other error status
        """
        url = f"{self.base_url}{endpoint}"
        self.logger.debug(f"{method} {url}")
        try:
            response = requests.request(
                method=method,
                url=url,
                headers=self._get_headers(),
                json=json_data,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            raise NetworkError(f"Network request failed: timed out ({e})")
        except requests.exceptions.ConnectionError as e:
            raise NetworkError(f"Network request failed: {e}")
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Network error: {e}")

        if response.status_code == 401:
            raise AuthenticationError(f"Unauthorized: {self._error_detail(response)}")
        elif response.status_code >= 400:
            raise APIError(self._error_detail(response), status_code=response.status_code)

        return response.json() if response.content else {}

    @staticmethod
    def _error_detail(response) -> str:
        """Extract the server's error message from a failed response."""
        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
        return f"API request failed: {response.status_code}"

    @staticmethod
    def _as_list(result) -> list:
        if isinstance(result, dict):
            return result.get("data", [])
        return result or []

    def get_campaigns(self, merchant_id: str) -> list[dict]:
        """Get all campaigns for a merchant."""
        return self._as_list(self._make_request("GET", f"/merchants/{merchant_id}/campaigns"))

    def get_customers(self, merchant_id: str) -> list[dict]:
        """Get all CRM customers for a merchant."""
        return self._as_list(self._make_request("GET", f"/merchants/{merchant_id}/customers"))

    def get_analytics(self, merchant_id: str) -> dict:
        """Get the analytics summary for a merchant."""
        return self._make_request("GET", f"/merchants/{merchant_id}/analytics")

    def create_campaign(self, merchant_id: str, campaign: dict) -> dict:
        """Create a campaign.

        Args:
            merchant_id: Merchant owning the campaign
            campaign: Campaign fields

        Returns:
            Created campaign
        """
        return self._make_request("POST", f"/merchants/{merchant_id}/campaigns", campaign)

    def update_customer(self, merchant_id: str, customer_id: str, changes: dict) -> dict:
        """Update fields of a CRM customer.

        Args:
            merchant_id: Merchant owning the customer
            customer_id: Customer to update
            changes: Fields to change

        Returns:
            Updated customer
        """
        return self._make_request(
            "PATCH", f"/merchants/{merchant_id}/customers/{customer_id}", changes
        )
