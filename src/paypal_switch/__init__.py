"""PayPal browser-switch client library.

Obtain a PayPal payment nonce by sending the user to PayPal's approval page and
exchanging the redirect back into the application for a tokenized account.

Example:
    from paypal_switch import PayPalClient, PayPalRequest, PayPalSwitchConfig

    config = PayPalSwitchConfig(
        authorization="your_client_token_or_key",
        merchant_id="your_merchant_id",
        return_url_scheme="com.example.app.payments",
        app_identifier="com.example.app",
    )

    async with PayPalClient(config, authentication_session=session) as client:
        nonce = await client.request_one_time_payment(PayPalRequest(amount="10.00"))
        if nonce is None:
            print("User canceled")
        else:
            print(nonce.nonce, nonce.email)

    # Forward URLs opened into the application
    await client.handle_open_url(url, source_application)
"""

from paypal_switch.approval import ApprovalResolver
from paypal_switch.builders import RequestParameterBuilder
from paypal_switch.client import PayPalClient
from paypal_switch.config import PayPalSwitchConfig
from paypal_switch.coordinator import BrowserSwitchCoordinator, CoordinatorState, SwitchSession
from paypal_switch.events import EventChannel, SwitchEvent, SwitchEventType
from paypal_switch.exceptions import (
    AuthenticationSessionError,
    PayPalAPIError,
    PayPalCanceledError,
    PayPalDisabledError,
    PayPalError,
    PayPalErrorCode,
    PayPalIntegrationError,
    PayPalInvalidRequestError,
    PayPalReturnURLSchemeError,
    PayPalUnexpectedResponseError,
)
from paypal_switch.models import (
    ApprovalContext,
    LandingPageType,
    LineItem,
    LineItemKind,
    PaymentType,
    PayPalAccountNonce,
    PayPalEnvironment,
    PayPalIntent,
    PayPalRequest,
    PostalAddress,
    UserAction,
)
from paypal_switch.return_url import ReturnURLValidator
from paypal_switch.tokenization import TokenizationCompleter
from paypal_switch.transports import TransportKind

__version__ = "0.1.0"

__all__ = [
    # Main client
    "PayPalClient",
    "PayPalSwitchConfig",
    # Flow components
    "ApprovalResolver",
    "BrowserSwitchCoordinator",
    "CoordinatorState",
    "RequestParameterBuilder",
    "ReturnURLValidator",
    "SwitchSession",
    "TokenizationCompleter",
    "TransportKind",
    # Events
    "EventChannel",
    "SwitchEvent",
    "SwitchEventType",
    # Models
    "ApprovalContext",
    "LandingPageType",
    "LineItem",
    "LineItemKind",
    "PaymentType",
    "PayPalAccountNonce",
    "PayPalEnvironment",
    "PayPalIntent",
    "PayPalRequest",
    "PostalAddress",
    "UserAction",
    # Exceptions
    "AuthenticationSessionError",
    "PayPalAPIError",
    "PayPalCanceledError",
    "PayPalDisabledError",
    "PayPalError",
    "PayPalErrorCode",
    "PayPalIntegrationError",
    "PayPalInvalidRequestError",
    "PayPalReturnURLSchemeError",
    "PayPalUnexpectedResponseError",
]
