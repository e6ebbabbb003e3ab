"""Approval transports: the ways a user can be sent to the approval page.

All three report back through a :class:`ReturnChannel`, which feeds the
coordinator's single dispatch path.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from enum import StrEnum
from typing import TYPE_CHECKING, ClassVar, Protocol
from urllib.parse import urlsplit, urlunsplit

from paypal_switch import analytics as analytics_events
from paypal_switch.events import SwitchEvent, SwitchEventType
from paypal_switch.exceptions import AuthenticationSessionError
from paypal_switch.return_url import VIEWER_FINISHED_URL

if TYPE_CHECKING:
    from paypal_switch.analytics import AnalyticsSink
    from paypal_switch.events import EventChannel
    from paypal_switch.models.approval import ApprovalContext

logger = logging.getLogger(__name__)


class TransportKind(StrEnum):
    """Which transport carried a flow."""

    HANDLER_DELEGATED = "handler_delegated"
    EPHEMERAL_SESSION = "ephemeral_session"
    EMBEDDED_SURFACE = "embedded_surface"


SessionCompletion = Callable[[str | None, BaseException | None], Awaitable[None]]


class Dispatcher(Protocol):
    def __call__(self, url: str, *, session_id: str | None = None) -> Awaitable[bool]: ...


class ReturnChannel:
    """Reports the outcome of one flow back to the coordinator.

    Bound to a session id, so a late report from a superseded flow is ignored.
    """

    def __init__(self, dispatch: Dispatcher, session_id: str) -> None:
        self._dispatch = dispatch
        self.session_id = session_id

    async def deliver(self, url: str) -> bool:
        """Report "approval completed with URL"."""
        return await self._dispatch(url, session_id=self.session_id)

    async def deliver_finished(self) -> bool:
        """Report "closed without a URL" (a user cancellation)."""
        return await self._dispatch(VIEWER_FINISHED_URL, session_id=self.session_id)

    # Names used by custom approval handlers
    async def on_approval_complete(self, url: str) -> bool:
        return await self.deliver(url)

    async def on_approval_cancel(self) -> bool:
        return await self.deliver_finished()


class ApprovalHandler(Protocol):
    """Host-supplied handler that takes over the approval step entirely.

    It must eventually call ``delegate.on_approval_complete(url)`` or
    ``delegate.on_approval_cancel()``.
    """

    async def handle_approval(self, context: ApprovalContext, delegate: ReturnChannel) -> None: ...


class AuthenticationSession(Protocol):
    """Platform-provided ephemeral web authentication session.

    ``start`` returns whether the session started; ``completion`` is awaited
    with the callback URL, or with an error (``AuthenticationSessionError``
    with ``canceled_login`` set when the user dismissed it).
    """

    def start(self, url: str, callback_url_scheme: str, completion: SessionCompletion) -> bool: ...

    def cancel(self) -> None: ...


class SurfacePresenter(Protocol):
    """Displays and dismisses an embedded browser surface."""

    def present(self, url: str) -> None: ...

    def dismiss(self) -> None: ...


def with_transport_tag(url: str, transport_type: str) -> str:
    """Append ``bt_int_type=<n>`` so the backend can tell transports apart."""
    parts = urlsplit(url)
    delimiter = "&" if parts.query else ""
    return urlunsplit(parts._replace(query=f"{parts.query}{delimiter}bt_int_type={transport_type}"))


class ApprovalTransport(ABC):
    """One way of taking the user to the approval page."""

    kind: ClassVar[TransportKind]

    @abstractmethod
    async def launch(self, context: ApprovalContext, channel: ReturnChannel) -> None:
        """Start the approval step; the outcome arrives later via ``channel``."""

    def cancel(self) -> None:
        """Tear down whatever ``launch`` started."""

    def on_return(self, events: EventChannel, session_id: str) -> None:
        """Called by the coordinator when a return is dispatched."""

    def application_did_become_active(self) -> None:
        """Called when the host application returns to the foreground."""


class HandlerDelegatedTransport(ApprovalTransport):
    """Hands the approval step to a host-supplied handler."""

    kind = TransportKind.HANDLER_DELEGATED

    def __init__(self, handler: ApprovalHandler) -> None:
        self.handler = handler

    async def launch(self, context: ApprovalContext, channel: ReturnChannel) -> None:
        logger.info("Delegating approval to %s", type(self.handler).__name__)
        await self.handler.handle_approval(context, channel)

    def on_return(self, events: EventChannel, session_id: str) -> None:
        events.publish(SwitchEvent(SwitchEventType.WILL_PROCESS_PAYMENT_INFO, session_id))


class EphemeralSessionTransport(ApprovalTransport):
    """Runs the approval page in a platform authentication session.

    A user cancellation and any other session error both end the flow as a
    cancellation; other errors are logged separately so they can be diagnosed.
    """

    kind = TransportKind.EPHEMERAL_SESSION
    transport_type = "2"

    def __init__(self, session: AuthenticationSession, analytics: AnalyticsSink) -> None:
        self.session = session
        self.analytics = analytics
        self.started = False
        self.became_active_after_start = False

    async def launch(self, context: ApprovalContext, channel: ReturnChannel) -> None:
        url = with_transport_tag(context.approval_url, self.transport_type)

        async def completion(callback_url: str | None, error: BaseException | None) -> None:
            if error is not None:
                if isinstance(error, AuthenticationSessionError) and error.canceled_login:
                    self.analytics.send_event(
                        analytics_events.AUTH_SESSION_CANCEL_WEB
                        if self.became_active_after_start
                        else analytics_events.AUTH_SESSION_CANCEL_MODAL
                    )
                else:
                    logger.warning("Authentication session failed; treating as cancel: %r", error)
                await channel.deliver_finished()
                return

            if callback_url is None:
                await channel.deliver_finished()
                return

            await channel.deliver(callback_url)

        self.became_active_after_start = False
        self.started = self.session.start(url, context.callback_url_scheme, completion)

        if self.started:
            self.analytics.send_event(analytics_events.AUTH_SESSION_START_SUCCEEDED)
        else:
            self.analytics.send_event(analytics_events.AUTH_SESSION_START_FAILED)
            logger.warning("Authentication session did not start; treating as cancel")
            await channel.deliver_finished()

    def cancel(self) -> None:
        if self.started:
            self.session.cancel()

    def application_did_become_active(self) -> None:
        if self.started:
            self.became_active_after_start = True


class EmbeddedSurfaceTransport(ApprovalTransport):
    """Shows the approval page in an embedded browser surface.

    Without a presenter the flow cannot be shown; that is logged as critical
    and the flow stays pending.
    """

    kind = TransportKind.EMBEDDED_SURFACE
    transport_type = "1"

    def __init__(self, presenter: SurfacePresenter | None) -> None:
        self.presenter = presenter
        self.presented = False

    async def launch(self, context: ApprovalContext, channel: ReturnChannel) -> None:
        url = with_transport_tag(context.approval_url, self.transport_type)
        if self.presenter is None:
            logger.critical(
                "Unable to display the approval surface. A SurfacePresenter must be "
                "configured to continue the PayPal flow."
            )
            return
        self.presenter.present(url)
        self.presented = True

    def on_return(self, events: EventChannel, session_id: str) -> None:
        self.cancel()

    def cancel(self) -> None:
        if self.presenter is None:
            logger.critical(
                "Unable to dismiss the approval surface. A SurfacePresenter must be "
                "configured to end the PayPal flow."
            )
            return
        if self.presented:
            self.presenter.dismiss()
            self.presented = False
