"""Remote merchant configuration models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class PayPalConfiguration(BaseModel):
    """The ``paypal`` section of the merchant configuration."""

    display_name: str | None = Field(default=None, alias="displayName")
    client_id: str | None = Field(default=None, alias="clientId")
    currency_iso_code: str | None = Field(default=None, alias="currencyIsoCode")
    environment: str | None = Field(default=None)

    model_config = {"populate_by_name": True}


class RemoteConfiguration(BaseModel):
    """Merchant configuration fetched from the gateway."""

    paypal_enabled: bool = Field(default=False, alias="paypalEnabled")
    ephemeral_session_disabled: bool = Field(default=False, alias="sfAuthenticationSessionDisabled")
    paypal: PayPalConfiguration = Field(default_factory=PayPalConfiguration)

    model_config = {"populate_by_name": True}

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> RemoteConfiguration:
        """Parse from raw API response.

        Only a literal ``true`` enables a flag; anything else reads as off.
        """
        paypal = data.get("paypal")
        return cls(
            paypal_enabled=data.get("paypalEnabled") is True,
            ephemeral_session_disabled=data.get("sfAuthenticationSessionDisabled") is True,
            paypal=PayPalConfiguration.model_validate(paypal if isinstance(paypal, dict) else {}),
        )
