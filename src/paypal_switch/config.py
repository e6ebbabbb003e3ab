"""Configuration management for the PayPal browser-switch client."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path


def _get_config_dir() -> Path:
    """Get XDG-compliant config directory."""
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config) / "paypal-switch"
    return Path.home() / ".config" / "paypal-switch"


@dataclass(frozen=True, slots=True)
class PayPalSwitchConfig:
    """Client configuration.

    ``return_url_scheme`` is the custom URL scheme the external surface redirects
    back to; it must start with ``app_identifier``. When ``registered_url_schemes``
    is given, the scheme must also be one of the schemes the host declares.
    """

    authorization: str
    merchant_id: str
    return_url_scheme: str | None = None
    app_identifier: str = ""
    registered_url_schemes: tuple[str, ...] | None = None
    sandbox: bool = True
    disable_ephemeral_session: bool = False
    integration: str = "custom"

    # Gateway URLs
    _sandbox_base_url: str = field(default="https://api.sandbox.braintreegateway.com", repr=False)
    _production_base_url: str = field(default="https://api.braintreegateway.com", repr=False)

    @property
    def base_url(self) -> str:
        """Get the gateway base URL for the selected environment."""
        return self._sandbox_base_url if self.sandbox else self._production_base_url

    @property
    def client_api_url(self) -> str:
        """Get the merchant's client API base URL."""
        return f"{self.base_url}/merchants/{self.merchant_id}/client_api"

    @classmethod
    def from_env(cls, *, sandbox: bool = True) -> PayPalSwitchConfig:
        """Create config from environment variables.

        Expected env vars:
        - PAYPAL_SWITCH_AUTHORIZATION
        - PAYPAL_SWITCH_MERCHANT_ID
        - PAYPAL_SWITCH_RETURN_URL_SCHEME (optional)
        - PAYPAL_SWITCH_APP_IDENTIFIER (optional)
        """
        authorization = os.environ.get("PAYPAL_SWITCH_AUTHORIZATION")
        merchant_id = os.environ.get("PAYPAL_SWITCH_MERCHANT_ID")

        if not authorization or not merchant_id:
            msg = (
                "Missing required environment variables: "
                "PAYPAL_SWITCH_AUTHORIZATION and PAYPAL_SWITCH_MERCHANT_ID"
            )
            raise ValueError(msg)

        return cls(
            authorization=authorization,
            merchant_id=merchant_id,
            return_url_scheme=os.environ.get("PAYPAL_SWITCH_RETURN_URL_SCHEME"),
            app_identifier=os.environ.get("PAYPAL_SWITCH_APP_IDENTIFIER", ""),
            sandbox=sandbox,
        )

    @classmethod
    def from_file(cls, path: Path | None = None, *, sandbox: bool = True) -> PayPalSwitchConfig:
        """Load config from JSON file.

        Default path: ~/.config/paypal-switch/config.json

        Expected format:
        {
            "authorization": "...",
            "merchant_id": "...",
            "return_url_scheme": "com.example.app.payments",
            "app_identifier": "com.example.app"
        }
        """
        if path is None:
            path = _get_config_dir() / "config.json"

        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)

        with path.open() as f:
            data = json.load(f)

        schemes = data.get("registered_url_schemes")
        return cls(
            authorization=data["authorization"],
            merchant_id=data["merchant_id"],
            return_url_scheme=data.get("return_url_scheme"),
            app_identifier=data.get("app_identifier", ""),
            registered_url_schemes=tuple(schemes) if schemes is not None else None,
            sandbox=sandbox,
            disable_ephemeral_session=bool(data.get("disable_ephemeral_session", False)),
        )

    @classmethod
    def load(cls, *, sandbox: bool = True) -> PayPalSwitchConfig:
        """Load config from environment or file (env takes precedence)."""
        try:
            return cls.from_env(sandbox=sandbox)
        except ValueError:
            return cls.from_file(sandbox=sandbox)
