"""Payment resource and billing agreement endpoints."""

from typing import Any

from paypal_switch.api.base import BaseAPI


class HermesAPI(BaseAPI):
    """Creates the provider-side resources a user approves in the browser."""

    async def create_payment_resource(self, parameters: dict[str, Any]) -> dict[str, Any]:
        """Create a one-time payment resource.

        Returns:
            Raw response carrying ``paymentResource.redirectUrl``
        """
        return await self._post("v1/paypal_hermes/create_payment_resource", parameters)

    async def setup_billing_agreement(self, parameters: dict[str, Any]) -> dict[str, Any]:
        """Set up a billing agreement.

        Returns:
            Raw response carrying ``agreementSetup.approvalUrl``
        """
        return await self._post("v1/paypal_hermes/setup_billing_agreement", parameters)
