"""Merchant configuration endpoint."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from paypal_switch.api.base import BaseAPI
from paypal_switch.models.configuration import RemoteConfiguration

if TYPE_CHECKING:
    import httpx

    from paypal_switch.config import PayPalSwitchConfig

logger = logging.getLogger(__name__)


class ConfigurationAPI(BaseAPI):
    """Fetches the merchant configuration once and reuses it."""

    def __init__(
        self,
        config: PayPalSwitchConfig,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(config, http_client)
        self._cached: RemoteConfiguration | None = None

    async def fetch(self, *, refresh: bool = False) -> RemoteConfiguration:
        """Fetch the configuration, or return the cached copy."""
        if self._cached is None or refresh:
            data = await self._get("v1/configuration", params={"configVersion": 3})
            self._cached = RemoteConfiguration.from_api_response(data)
            logger.debug("Fetched remote configuration (paypal_enabled=%s)", self._cached.paypal_enabled)
        return self._cached

    def clear_cache(self) -> None:
        self._cached = None
