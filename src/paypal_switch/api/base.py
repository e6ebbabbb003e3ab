"""Base API client with common functionality."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

from paypal_switch.exceptions import PayPalAPIError

if TYPE_CHECKING:
    from paypal_switch.config import PayPalSwitchConfig

logger = logging.getLogger(__name__)

API_VERSION = "2018-05-10"


def error_message_from_body(error_body: dict[str, Any] | None) -> str | None:
    """Pick the human-readable message out of an error body.

    ``error.message`` wins; otherwise the first ``paymentResource.errorDetails``
    issue is promoted.
    """
    if not isinstance(error_body, dict):
        return None

    error = error_body.get("error")
    if isinstance(error, dict) and isinstance(error.get("message"), str):
        return error["message"]

    payment_resource = error_body.get("paymentResource")
    if isinstance(payment_resource, dict):
        details = payment_resource.get("errorDetails")
        if isinstance(details, list) and details and isinstance(details[0], dict):
            issue = details[0].get("issue")
            if isinstance(issue, str):
                return issue

    return None


class BaseAPI:
    """Base class for client API endpoints.

    Provides common HTTP functionality with authorization headers,
    error handling, and response parsing.
    """

    def __init__(
        self,
        config: PayPalSwitchConfig,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config
        self._http_client = http_client

    def set_http_client(self, http_client: httpx.AsyncClient | None) -> None:
        """Set the shared HTTP client for connection pooling."""
        self._http_client = http_client

    async def _request(
        self,
        method: str,
        endpoint: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Make an authorized API request.

        Args:
            method: HTTP method
            endpoint: API endpoint (e.g., "v1/configuration")
            params: Query parameters
            json_body: JSON request body

        Returns:
            Parsed JSON response

        Raises:
            PayPalAPIError: On API error
        """
        url = f"{self.config.client_api_url}/{endpoint.lstrip('/')}"

        query_params: dict[str, str] = {}
        if params:
            query_params = {k: str(v) for k, v in params.items() if v is not None}

        headers = {
            "Authorization": f"Bearer {self.config.authorization}",
            "Braintree-Version": API_VERSION,
            "Accept": "application/json",
        }

        if json_body:
            headers["Content-Type"] = "application/json"

        logger.debug("Request: %s %s", method, url)
        logger.debug("Params: %s", query_params)

        if self._http_client is not None:
            # Use shared connection pool
            response = await self._http_client.request(
                method,
                url,
                params=query_params if query_params else None,
                json=json_body,
                headers=headers,
            )
        else:
            # Fallback: create per-request client (no pooling)
            async with httpx.AsyncClient(timeout=30.0) as client:
                response = await client.request(
                    method,
                    url,
                    params=query_params if query_params else None,
                    json=json_body,
                    headers=headers,
                )

        return self._handle_response(response)

    def _handle_response(self, response: httpx.Response) -> dict[str, Any]:
        """Handle API response, raising appropriate errors."""
        if response.status_code >= 400:
            try:
                error_body = response.json()
            except ValueError:
                error_body = None

            error_msg = error_message_from_body(error_body) or f"API error: {response.status_code}"
            logger.debug("API error %s: %s", response.status_code, error_msg)

            raise PayPalAPIError(
                error_msg,
                status_code=response.status_code,
                response_body=error_body if isinstance(error_body, dict) else None,
            )

        if response.status_code == 204:
            return {}

        result: dict[str, Any] = response.json()
        return result

    async def _get(
        self,
        endpoint: str,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Make a GET request."""
        return await self._request("GET", endpoint, params=params)

    async def _post(
        self,
        endpoint: str,
        json_body: dict[str, Any],
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Make a POST request."""
        return await self._request("POST", endpoint, params=params, json_body=json_body)
