"""Client factory for CLI commands."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from paypal_switch.analytics import RecordingAnalytics
from paypal_switch.client import PayPalClient

if TYPE_CHECKING:
    from paypal_switch.cli.config import CLIConfig


@asynccontextmanager
async def get_client(
    config: CLIConfig,
    analytics: RecordingAnalytics | None = None,
) -> AsyncGenerator[PayPalClient]:
    """Create a PayPalClient for CLI use.

    Settings come from the environment-specific settings file, with
    environment variables overriding individual values.

    Usage:
        async with get_client(cli_config) as client:
            nonce = await client.request_one_time_payment(request, handler=handler)
    """
    client = PayPalClient(
        config.load_switch_config(),
        analytics=analytics or RecordingAnalytics(),
    )
    async with client:
        yield client
