"""Backend parameter builder for payment resource and billing agreement requests."""

from typing import Any

from paypal_switch.exceptions import PayPalInvalidRequestError, PayPalReturnURLSchemeError
from paypal_switch.models.configuration import RemoteConfiguration
from paypal_switch.models.request import LandingPageType, PayPalRequest, PostalAddress
from paypal_switch.return_url import is_callback_url_scheme_valid, redirect_urls_for_scheme

__all__ = ["RequestParameterBuilder", "validate_request"]


def validate_request(request: PayPalRequest | None, *, is_billing_agreement: bool) -> PayPalRequest:
    """Reject requests that can never be submitted.

    Raises:
        PayPalInvalidRequestError: If the request is missing, or is a one-time
            payment without an amount
    """
    if request is None:
        raise PayPalInvalidRequestError("A PayPal request is required", field="request")
    if not is_billing_agreement and request.amount is None:
        raise PayPalInvalidRequestError("One-time payments require an amount", field="amount")
    return request


def _address_fields(address: PostalAddress) -> dict[str, Any]:
    return {
        "line1": address.street_address,
        "line2": address.extended_address,
        "city": address.locality,
        "state": address.region,
        "postal_code": address.postal_code,
        "country_code": address.country_code_alpha2,
        "recipient_name": address.recipient_name,
    }


class RequestParameterBuilder:
    """Maps a PayPal request plus merchant configuration into backend parameters.

    Example:
        builder = RequestParameterBuilder(
            "com.example.app.payments",
            app_identifier="com.example.app",
        )
        params = builder.build(request, configuration, is_billing_agreement=False)
        body = await client.hermes.create_payment_resource(params)
    """

    def __init__(
        self,
        return_url_scheme: str | None,
        *,
        app_identifier: str,
        registered_url_schemes: tuple[str, ...] | None = None,
    ) -> None:
        """Initialize builder.

        Args:
            return_url_scheme: Scheme the approval surface redirects back to
            app_identifier: Host application identifier the scheme must start with
            registered_url_schemes: Schemes the host declares, if known
        """
        self._return_url_scheme = return_url_scheme
        self._scheme_is_valid = is_callback_url_scheme_valid(
            return_url_scheme, app_identifier, registered_url_schemes
        )

    def build(
        self,
        request: PayPalRequest | None,
        configuration: RemoteConfiguration,
        *,
        is_billing_agreement: bool,
    ) -> dict[str, Any]:
        """Build the parameter map.

        Returns:
            Parameters for ``create_payment_resource`` or ``setup_billing_agreement``

        Raises:
            PayPalInvalidRequestError: If the request is missing or has no amount
            PayPalReturnURLSchemeError: If no redirect URLs can be built
        """
        request = validate_request(request, is_billing_agreement=is_billing_agreement)

        parameters: dict[str, Any] = {}
        experience_profile: dict[str, Any] = {}

        if not is_billing_agreement:
            parameters["intent"] = request.intent.value
            parameters["amount"] = request.amount
            # Currency applies to one-time payments only
            currency_code = request.currency_code or configuration.paypal.currency_iso_code
            if currency_code:
                parameters["currency_iso_code"] = currency_code
        elif request.billing_agreement_description:
            parameters["description"] = request.billing_agreement_description

        parameters["offer_paypal_credit"] = request.offer_credit

        experience_profile["no_shipping"] = not request.is_shipping_address_required
        experience_profile["brand_name"] = request.display_name or configuration.paypal.display_name

        if request.landing_page_type is not LandingPageType.DEFAULT:
            experience_profile["landing_page_type"] = request.landing_page_type.value

        if request.locale_code is not None:
            experience_profile["locale_code"] = request.locale_code

        if request.merchant_account_id is not None:
            parameters["merchant_account_id"] = request.merchant_account_id

        if request.shipping_address_override is not None:
            experience_profile["address_override"] = not request.is_shipping_address_editable
            address = _address_fields(request.shipping_address_override)
            if is_billing_agreement:
                parameters["shipping_address"] = address
            else:
                parameters.update(address)
        else:
            experience_profile["address_override"] = False

        if request.line_items:
            parameters["line_items"] = [item.request_parameters() for item in request.line_items]

        if not self._return_url_scheme or not self._scheme_is_valid:
            raise PayPalReturnURLSchemeError(
                "Application may not support One Touch callback URL scheme",
                recovery_suggestion="Check the return URL scheme",
            )

        redirect_urls = redirect_urls_for_scheme(self._return_url_scheme)
        parameters["return_url"] = redirect_urls.return_url
        parameters["cancel_url"] = redirect_urls.cancel_url
        parameters["experience_profile"] = experience_profile

        return parameters
