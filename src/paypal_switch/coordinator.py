"""Browser-switch coordinator.

Owns the single pending flow: launches a transport, waits for the return URL
(which may arrive much later, or never), validates it, and resolves the flow
exactly once.

Only one flow can be pending. Launching a new flow while one is pending
replaces it, and the replaced flow fails with ``PayPalCanceledError``.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import uuid
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING
from urllib.parse import urlsplit

from paypal_switch import analytics as analytics_events
from paypal_switch.events import EventChannel, SwitchEvent, SwitchEventType
from paypal_switch.exceptions import (
    PayPalCanceledError,
    PayPalError,
    PayPalErrorCode,
    PayPalIntegrationError,
    PayPalReturnURLSchemeError,
)
from paypal_switch.return_url import (
    VIEWER_FINISHED_URL,
    ReturnAction,
    ReturnURLValidator,
    SourceApplicationPolicy,
    is_callback_url_scheme_valid,
)
from paypal_switch.tokenization import PendingRequestContext
from paypal_switch.transports import (
    ApprovalTransport,
    EmbeddedSurfaceTransport,
    EphemeralSessionTransport,
    HandlerDelegatedTransport,
    ReturnChannel,
    TransportKind,
)

if TYPE_CHECKING:
    from paypal_switch.analytics import AnalyticsSink
    from paypal_switch.config import PayPalSwitchConfig
    from paypal_switch.models.approval import ApprovalContext, PaymentType
    from paypal_switch.models.nonce import PayPalAccountNonce
    from paypal_switch.models.request import PayPalRequest
    from paypal_switch.tokenization import TokenizationCompleter
    from paypal_switch.transports import ApprovalHandler, AuthenticationSession, SurfacePresenter

logger = logging.getLogger(__name__)


class CoordinatorState(StrEnum):
    """Coordinator lifecycle."""

    IDLE = "idle"
    AWAITING_APPROVAL = "awaiting_approval"
    DISPATCHING = "dispatching"


@dataclass
class SwitchSession:
    """Handle for one launched flow.

    Await :meth:`result` for the outcome: a nonce, ``None`` when the user
    canceled, or a raised ``PayPalError``.
    """

    session_id: str
    payment_type: PaymentType
    transport_kind: TransportKind
    future: asyncio.Future[PayPalAccountNonce | None] = field(repr=False)

    @property
    def done(self) -> bool:
        return self.future.done()

    async def result(self) -> PayPalAccountNonce | None:
        return await self.future


@dataclass
class PendingReturn:
    """The one flow currently awaiting a return."""

    session: SwitchSession
    transport: ApprovalTransport
    context: PendingRequestContext


def _settle(
    session: SwitchSession,
    *,
    result: PayPalAccountNonce | None = None,
    error: BaseException | None = None,
) -> None:
    if session.future.done():
        return
    if error is not None:
        session.future.set_exception(error)
    else:
        session.future.set_result(result)


class BrowserSwitchCoordinator:
    """Single-slot state machine for the browser-switch round trip.

    States: idle -> awaiting_approval -> dispatching -> idle. The slot is
    replaced or cleared under a lock and is cleared on every dispatch.
    """

    def __init__(
        self,
        config: PayPalSwitchConfig,
        completer: TokenizationCompleter,
        analytics: AnalyticsSink,
        *,
        events: EventChannel | None = None,
        authentication_session: AuthenticationSession | None = None,
        presenter: SurfacePresenter | None = None,
        validator: ReturnURLValidator | None = None,
        source_policy: SourceApplicationPolicy | None = None,
    ) -> None:
        self.config = config
        self.completer = completer
        self.analytics = analytics
        self.events = events or EventChannel()
        self.authentication_session = authentication_session
        self.presenter = presenter
        self.validator = validator or ReturnURLValidator()
        self.source_policy = source_policy or SourceApplicationPolicy()

        self._lock = threading.Lock()
        self._pending: PendingReturn | None = None
        self._dispatching: SwitchSession | None = None

    @property
    def state(self) -> CoordinatorState:
        with self._lock:
            if self._dispatching is not None:
                return CoordinatorState.DISPATCHING
            if self._pending is not None:
                return CoordinatorState.AWAITING_APPROVAL
            return CoordinatorState.IDLE

    @property
    def pending_session(self) -> SwitchSession | None:
        """Session of the flow awaiting a return, if any."""
        with self._lock:
            return self._pending.session if self._pending is not None else None

    # Preflight

    def verify_return_url_scheme(self) -> None:
        """Check the return URL scheme belongs to the host application.

        Raises:
            PayPalReturnURLSchemeError: If the scheme is missing or invalid
        """
        scheme = self.config.return_url_scheme
        if not scheme:
            suggestion = (
                "PayPal requires a return URL scheme to be configured. "
                "This custom URL scheme must also be registered with your app."
            )
            logger.critical(suggestion)
            self.analytics.send_event(analytics_events.PREFLIGHT_NIL_RETURN_URL_SCHEME)
            raise PayPalReturnURLSchemeError(
                "Missing returnURLScheme", recovery_suggestion=suggestion
            )

        if not is_callback_url_scheme_valid(
            scheme, self.config.app_identifier, self.config.registered_url_schemes
        ):
            suggestion = (
                f"PayPal requires the return URL scheme to begin with your app's identifier "
                f"({self.config.app_identifier}). Currently, it is set to ({scheme})."
            )
            logger.critical(suggestion)
            self.analytics.send_event(analytics_events.PREFLIGHT_INVALID_RETURN_URL_SCHEME)
            raise PayPalReturnURLSchemeError(
                "Application does not support One Touch callback URL scheme",
                recovery_suggestion=suggestion,
            )

    def select_transport(
        self,
        handler: ApprovalHandler | None = None,
        preference: TransportKind | None = None,
    ) -> ApprovalTransport:
        """Pick the transport for a new flow.

        A handler always wins. Otherwise the ephemeral session is the default,
        and the embedded surface is used when ephemeral sessions are disabled
        or no session provider is available.

        Raises:
            PayPalIntegrationError: If no transport can be built
        """
        if handler is not None or preference is TransportKind.HANDLER_DELEGATED:
            if handler is None:
                raise PayPalIntegrationError("Handler-delegated approval requires a handler")
            return HandlerDelegatedTransport(handler)

        if preference is TransportKind.EMBEDDED_SURFACE or self.config.disable_ephemeral_session:
            return EmbeddedSurfaceTransport(self.presenter)

        if self.authentication_session is not None:
            return EphemeralSessionTransport(self.authentication_session, self.analytics)

        if self.presenter is not None:
            return EmbeddedSurfaceTransport(self.presenter)

        raise PayPalIntegrationError(
            "No approval transport available",
            recovery_suggestion="Configure an AuthenticationSession or a SurfacePresenter",
        )

    # Launch

    async def launch(
        self,
        context: ApprovalContext,
        payment_type: PaymentType,
        *,
        request: PayPalRequest | None = None,
        correlation_id: str | None = None,
        handler: ApprovalHandler | None = None,
        transport_preference: TransportKind | None = None,
    ) -> SwitchSession:
        """Launch a flow and register it as the pending one.

        Returns:
            The session handle; await ``session.result()`` for the outcome

        Raises:
            PayPalReturnURLSchemeError: If the return URL scheme is unusable
            PayPalIntegrationError: If no transport can be built
            PayPalError: If the approval URL is not an http(s) URL
        """
        self.verify_return_url_scheme()
        transport = self.select_transport(handler, transport_preference)

        if transport.kind is not TransportKind.HANDLER_DELEGATED:
            self._verify_approval_url(context.approval_url, payment_type)

        session = SwitchSession(
            session_id=uuid.uuid4().hex,
            payment_type=payment_type,
            transport_kind=transport.kind,
            future=asyncio.get_running_loop().create_future(),
        )
        pending = PendingReturn(
            session=session,
            transport=transport,
            context=PendingRequestContext(request=request, correlation_id=correlation_id),
        )

        with self._lock:
            superseded = self._pending
            self._pending = pending

        if superseded is not None:
            logger.warning(
                "Flow %s superseded by %s before it returned",
                superseded.session.session_id,
                session.session_id,
            )
            superseded.transport.cancel()
            _settle(
                superseded.session,
                error=PayPalCanceledError("PayPal flow was replaced by a newer flow"),
            )

        logger.info("Launching %s flow %s via %s", payment_type, session.session_id, transport.kind)

        if transport.kind is not TransportKind.HANDLER_DELEGATED:
            self.events.publish(SwitchEvent(SwitchEventType.APP_CONTEXT_WILL_SWITCH, session.session_id))

        try:
            await transport.launch(context, ReturnChannel(self.dispatch_return, session.session_id))
        except BaseException:
            with self._lock:
                if self._pending is pending:
                    self._pending = None
            raise

        return session

    def _verify_approval_url(self, approval_url: str, payment_type: PaymentType) -> None:
        scheme = urlsplit(approval_url).scheme
        if not scheme.lower().startswith("http"):
            self.analytics.send_event(
                f"{payment_type.event_name}.webswitch.error.badscheme.{scheme}"
            )
            raise PayPalError(
                f"Attempted to open an invalid URL in the approval surface: {scheme}://",
                code=PayPalErrorCode.UNKNOWN,
                recovery_suggestion="Try again or contact support.",
            )

    # Return handling

    def can_handle_return_url(self, url: str, source_application: str | None) -> bool:
        """Check whether an inbound URL is a return addressed to the pending flow."""
        with self._lock:
            has_pending = self._pending is not None
        return (
            has_pending
            and self.source_policy.allows(source_application)
            and self.validator.is_valid(url)
        )

    async def dispatch_return(self, url: str, *, session_id: str | None = None) -> bool:
        """Resolve the pending flow with a returned URL.

        A no-op when nothing is pending, or when ``session_id`` names a flow
        that is no longer the pending one.

        Returns:
            True if a pending flow was resolved
        """
        with self._lock:
            pending = self._pending
            if pending is None:
                logger.debug("Return URL received with no pending flow; ignoring")
                return False
            if session_id is not None and pending.session.session_id != session_id:
                logger.debug("Return for stale flow %s ignored", session_id)
                return False
            self._pending = None
            self._dispatching = pending.session

        session = pending.session
        try:
            self.events.publish(SwitchEvent(SwitchEventType.APP_CONTEXT_DID_RETURN, session.session_id))
            pending.transport.on_return(self.events, session.session_id)

            try:
                nonce = await self._resolve_return(url, pending)
            except Exception as exc:
                logger.info("Flow %s failed: %s", session.session_id, exc)
                _settle(session, error=exc)
            else:
                _settle(session, result=nonce)
        finally:
            with self._lock:
                if self._dispatching is session:
                    self._dispatching = None

        return True

    async def _resolve_return(self, url: str, pending: PendingReturn) -> PayPalAccountNonce | None:
        if url == VIEWER_FINISHED_URL:
            logger.info("Flow %s canceled by user", pending.session.session_id)
            return None

        validated = self.validator.validate(url)
        if validated.action is ReturnAction.CANCEL:
            logger.info("Flow %s canceled on approval page", pending.session.session_id)
            return None

        return await self.completer.complete(validated, pending.session.payment_type, pending.context)

    async def cancel(self) -> bool:
        """Cancel the pending flow, resolving it as a user cancellation."""
        with self._lock:
            pending = self._pending
        if pending is None:
            return False
        pending.transport.cancel()
        return await self.dispatch_return(VIEWER_FINISHED_URL, session_id=pending.session.session_id)

    async def surface_did_finish(self) -> bool:
        """The embedded surface was closed by the user."""
        return await self.dispatch_return(VIEWER_FINISHED_URL)

    def application_did_become_active(self) -> None:
        """The host application came back to the foreground."""
        with self._lock:
            pending = self._pending
        if pending is not None:
            pending.transport.application_did_become_active()
