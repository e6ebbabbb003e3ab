"""Payment method tokenization endpoints."""

from typing import Any

from paypal_switch.api.base import BaseAPI
from paypal_switch.models.nonce import PayPalAccountNonce


class PaymentMethodsAPI(BaseAPI):
    """Exchanges an approved browser-switch payload for a nonce."""

    async def tokenize_paypal_account(self, payload: dict[str, Any]) -> PayPalAccountNonce:
        """Tokenize a PayPal account.

        Args:
            payload: ``paypal_account`` payload built from the return URL

        Returns:
            The tokenized account
        """
        data = await self._post("/v1/payment_methods/paypal_accounts", payload)
        return PayPalAccountNonce.from_api_response(data)
