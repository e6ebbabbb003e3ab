"""Main PayPal browser-switch client."""

from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING

import httpx

from paypal_switch.analytics import PREFLIGHT_DISABLED, AnalyticsSink, LoggingAnalytics
from paypal_switch.api.configuration import ConfigurationAPI
from paypal_switch.api.hermes import HermesAPI
from paypal_switch.api.payment_methods import PaymentMethodsAPI
from paypal_switch.approval import ApprovalResolver
from paypal_switch.builders import RequestParameterBuilder, validate_request
from paypal_switch.config import PayPalSwitchConfig
from paypal_switch.coordinator import BrowserSwitchCoordinator
from paypal_switch.events import EventChannel
from paypal_switch.exceptions import PayPalDisabledError
from paypal_switch.models.approval import PaymentType
from paypal_switch.tokenization import ClientMetadata, TokenizationCompleter
from paypal_switch.transports import TransportKind

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from paypal_switch.models.approval import ApprovalContext
    from paypal_switch.models.configuration import RemoteConfiguration
    from paypal_switch.models.nonce import PayPalAccountNonce
    from paypal_switch.models.request import PayPalRequest
    from paypal_switch.transports import ApprovalHandler, AuthenticationSession, SurfacePresenter

logger = logging.getLogger(__name__)


def _default_correlation_id(pairing_token: str | None) -> str:
    return pairing_token or uuid.uuid4().hex


class PayPalClient:
    """PayPal browser-switch client.

    Creates the payment resource, sends the user to approve it, and exchanges
    the redirect back into the app for a nonce.

    Usage (context manager - recommended for connection pooling):
        async with PayPalClient(config, authentication_session=session) as client:
            nonce = await client.request_one_time_payment(PayPalRequest(amount="10.00"))
            if nonce is None:
                ...  # user canceled

    Usage (custom approval handler):
        nonce = await client.request_billing_agreement(request, handler=my_handler)

    The host forwards URLs opened into the app:
        if client.can_handle_open_url(url, source_application):
            await client.handle_open_url(url, source_application)
    """

    def __init__(
        self,
        config: PayPalSwitchConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
        analytics: AnalyticsSink | None = None,
        authentication_session: AuthenticationSession | None = None,
        presenter: SurfacePresenter | None = None,
        events: EventChannel | None = None,
        correlation_id_provider: Callable[[str | None], str] | None = None,
        sdk_version: str | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Client configuration
            http_client: Optional httpx.AsyncClient for connection pooling.
                        If provided, the client will use this pool and NOT close it.
            analytics: Analytics sink (logs events if not provided)
            authentication_session: Platform ephemeral authentication session
            presenter: Presenter for the embedded browser surface
            events: Lifecycle event channel shared with the host
            correlation_id_provider: Device-fingerprinting hook mapping the
                pairing token to a correlation id
            sdk_version: Version reported with tokenization requests
        """
        if sdk_version is None:
            from paypal_switch import __version__

            sdk_version = __version__

        self.config = config
        self.analytics = analytics or LoggingAnalytics()
        self.events = events or EventChannel()
        self.correlation_id_provider = correlation_id_provider or _default_correlation_id

        # HTTP client management
        self._http_client = http_client
        self._owns_http_client = http_client is None

        # Initialize API modules
        self.configuration = ConfigurationAPI(config, http_client)
        self.hermes = HermesAPI(config, http_client)
        self.payment_methods = PaymentMethodsAPI(config, http_client)

        self.metadata = ClientMetadata(integration=config.integration)
        self.completer = TokenizationCompleter(
            self.payment_methods,
            self.analytics,
            self.metadata,
            sdk_version=sdk_version,
        )
        self.coordinator = BrowserSwitchCoordinator(
            config,
            self.completer,
            self.analytics,
            events=self.events,
            authentication_session=authentication_session,
            presenter=presenter,
        )

    def _set_http_client(self, http_client: httpx.AsyncClient | None) -> None:
        """Update HTTP client on all API modules."""
        self._http_client = http_client
        self.configuration.set_http_client(http_client)
        self.hermes.set_http_client(http_client)
        self.payment_methods.set_http_client(http_client)

    async def open(self) -> None:
        """Open connection pool for HTTP requests."""
        if self._http_client is None and self._owns_http_client:
            self._set_http_client(httpx.AsyncClient(timeout=30.0))

    async def close(self) -> None:
        """Close connection pool (only if this client owns it)."""
        if self._owns_http_client and self._http_client is not None:
            await self._http_client.aclose()
            self._set_http_client(None)

    async def __aenter__(self) -> PayPalClient:
        """Async context manager entry - opens connection pool."""
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Async context manager exit - closes connection pool."""
        await self.close()

    @classmethod
    def from_env(cls, *, sandbox: bool = True) -> PayPalClient:
        """Create client from environment variables (see PayPalSwitchConfig.from_env)."""
        return cls(PayPalSwitchConfig.from_env(sandbox=sandbox))

    # Flows

    async def request_one_time_payment(
        self,
        request: PayPalRequest | None,
        *,
        handler: ApprovalHandler | None = None,
        transport_preference: TransportKind | None = None,
    ) -> PayPalAccountNonce | None:
        """Run a one-time payment flow.

        Returns:
            The tokenized account, or None if the user canceled

        Raises:
            PayPalInvalidRequestError: If the request has no amount
            PayPalDisabledError: If PayPal is disabled for the merchant
            PayPalReturnURLSchemeError: If the return URL scheme is unusable
            PayPalAPIError: On backend failure
        """
        return await self._request_express_checkout(
            request,
            PaymentType.CHECKOUT,
            handler=handler,
            transport_preference=transport_preference,
        )

    async def request_billing_agreement(
        self,
        request: PayPalRequest | None,
        *,
        handler: ApprovalHandler | None = None,
        transport_preference: TransportKind | None = None,
    ) -> PayPalAccountNonce | None:
        """Run a billing agreement (vault) flow.

        Returns:
            The tokenized account, or None if the user canceled
        """
        return await self._request_express_checkout(
            request,
            PaymentType.BILLING_AGREEMENT,
            handler=handler,
            transport_preference=transport_preference,
        )

    async def create_approval_context(
        self,
        request: PayPalRequest | None,
        payment_type: PaymentType,
    ) -> tuple[ApprovalContext, RemoteConfiguration]:
        """Create the provider-side resource and resolve its approval context.

        Raises:
            PayPalInvalidRequestError: Before any network call for invalid requests
            PayPalDisabledError: If PayPal is disabled for the merchant
            PayPalReturnURLSchemeError: If the return URL scheme is unusable
            PayPalAPIError: On backend failure
            PayPalError: If the response carries no approval URL
        """
        is_billing_agreement = payment_type is PaymentType.BILLING_AGREEMENT
        request = validate_request(request, is_billing_agreement=is_billing_agreement)

        configuration = await self.configuration.fetch()
        self._verify_enabled(configuration)
        self.coordinator.verify_return_url_scheme()

        builder = RequestParameterBuilder(
            self.config.return_url_scheme,
            app_identifier=self.config.app_identifier,
            registered_url_schemes=self.config.registered_url_schemes,
        )
        parameters = builder.build(request, configuration, is_billing_agreement=is_billing_agreement)

        if is_billing_agreement:
            body = await self.hermes.setup_billing_agreement(parameters)
        else:
            body = await self.hermes.create_payment_resource(parameters)

        resolver = ApprovalResolver(self.config.return_url_scheme or "")
        return resolver.resolve(body, request, configuration), configuration

    async def _request_express_checkout(
        self,
        request: PayPalRequest | None,
        payment_type: PaymentType,
        *,
        handler: ApprovalHandler | None,
        transport_preference: TransportKind | None,
    ) -> PayPalAccountNonce | None:
        context, configuration = await self.create_approval_context(request, payment_type)

        correlation_id: str | None = None
        if handler is None:
            correlation_id = self.correlation_id_provider(context.pairing_token)
            self._send_initiate_events(payment_type, request)

        if configuration.ephemeral_session_disabled and transport_preference is None and handler is None:
            transport_preference = TransportKind.EMBEDDED_SURFACE

        session = await self.coordinator.launch(
            context,
            payment_type,
            request=request,
            correlation_id=correlation_id,
            handler=handler,
            transport_preference=transport_preference,
        )
        return await session.result()

    def _verify_enabled(self, configuration: RemoteConfiguration) -> None:
        if not configuration.paypal_enabled:
            self.analytics.send_event(PREFLIGHT_DISABLED)
            raise PayPalDisabledError(
                "PayPal is not enabled for this merchant",
                recovery_suggestion="Enable PayPal for this merchant in the Control Panel",
            )

    def _send_initiate_events(self, payment_type: PaymentType, request: PayPalRequest | None) -> None:
        flow = payment_type.event_name
        self.analytics.send_event(f"{flow}.webswitch.initiate.started")
        if request is not None and request.offer_credit:
            self.analytics.send_event(f"{flow}.webswitch.credit.offered.started")

    # Return URL hand-off

    def can_handle_open_url(self, url: str, source_application: str | None) -> bool:
        """Check whether a URL opened into the app is a PayPal return."""
        return self.coordinator.can_handle_return_url(url, source_application)

    async def handle_open_url(self, url: str, source_application: str | None) -> bool:
        """Dispatch a URL opened into the app, if it is addressed to the pending flow.

        Returns:
            True if the URL was accepted and the pending flow resolved
        """
        if not self.can_handle_open_url(url, source_application):
            logger.debug("Ignoring open URL from %s", source_application)
            return False
        return await self.coordinator.dispatch_return(url)

    def application_did_become_active(self) -> None:
        """Forward the host's foreground notification."""
        self.coordinator.application_did_become_active()
