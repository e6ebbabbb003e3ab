"""Tests for the browser-switch coordinator."""

import dataclasses
import logging

import pytest

from paypal_switch import analytics as analytics_events
from paypal_switch.analytics import RecordingAnalytics
from paypal_switch.config import PayPalSwitchConfig
from paypal_switch.coordinator import BrowserSwitchCoordinator, CoordinatorState
from paypal_switch.events import EventChannel, SwitchEvent, SwitchEventType
from paypal_switch.exceptions import (
    AuthenticationSessionError,
    PayPalAPIError,
    PayPalCanceledError,
    PayPalError,
    PayPalErrorCode,
    PayPalIntegrationError,
    PayPalReturnURLSchemeError,
    PayPalUnexpectedResponseError,
)
from paypal_switch.models import ApprovalContext, PaymentType, PayPalIntent, PayPalRequest
from paypal_switch.return_url import SYSTEM_BROWSER_SOURCE, VIEWER_FINISHED_URL, ReturnAction
from paypal_switch.transports import TransportKind
from tests.fakes import (
    CANCEL_URL,
    RETURN_SCHEME,
    SUCCESS_URL,
    FakeAuthenticationSession,
    FakeCompleter,
    FakePresenter,
    ImmediateHandler,
    RecordingHandler,
)


@pytest.fixture
def completer() -> FakeCompleter:
    return FakeCompleter()


@pytest.fixture
def session() -> FakeAuthenticationSession:
    return FakeAuthenticationSession()


@pytest.fixture
def presenter() -> FakePresenter:
    return FakePresenter()


@pytest.fixture
def events() -> list[SwitchEvent]:
    return []


@pytest.fixture
def coordinator(
    config: PayPalSwitchConfig,
    completer: FakeCompleter,
    analytics: RecordingAnalytics,
    session: FakeAuthenticationSession,
    presenter: FakePresenter,
    events: list[SwitchEvent],
) -> BrowserSwitchCoordinator:
    channel = EventChannel()
    channel.subscribe(events.append)
    return BrowserSwitchCoordinator(
        config,
        completer,
        analytics,
        events=channel,
        authentication_session=session,
        presenter=presenter,
    )


class TestStateMachine:
    """Tests for the single pending slot."""

    async def test_starts_idle(self, coordinator: BrowserSwitchCoordinator) -> None:
        assert coordinator.state is CoordinatorState.IDLE
        assert coordinator.pending_session is None

    async def test_launch_awaits_approval(
        self, coordinator: BrowserSwitchCoordinator, approval_context: ApprovalContext
    ) -> None:
        switch = await coordinator.launch(approval_context, PaymentType.CHECKOUT)

        assert coordinator.state is CoordinatorState.AWAITING_APPROVAL
        assert coordinator.pending_session is switch
        assert switch.transport_kind is TransportKind.EPHEMERAL_SESSION
        assert switch.done is False

    async def test_dispatch_resolves_and_returns_to_idle(
        self,
        coordinator: BrowserSwitchCoordinator,
        completer: FakeCompleter,
        approval_context: ApprovalContext,
    ) -> None:
        request = PayPalRequest(amount="1", intent=PayPalIntent.SALE)
        switch = await coordinator.launch(
            approval_context, PaymentType.CHECKOUT, request=request, correlation_id="corr-1"
        )

        assert await coordinator.dispatch_return(SUCCESS_URL) is True

        nonce = await switch.result()
        assert nonce is not None
        assert nonce.nonce == "fake-nonce"
        assert coordinator.state is CoordinatorState.IDLE

        validated, payment_type, context = completer.calls[0]
        assert validated.action is ReturnAction.SUCCESS
        assert validated.query_params["token"] == "EC-123"
        assert payment_type is PaymentType.CHECKOUT
        assert context.request is request
        assert context.correlation_id == "corr-1"

    async def test_second_dispatch_is_a_no_op(
        self,
        coordinator: BrowserSwitchCoordinator,
        completer: FakeCompleter,
        approval_context: ApprovalContext,
    ) -> None:
        """A flow resolves exactly once."""
        await coordinator.launch(approval_context, PaymentType.CHECKOUT)

        assert await coordinator.dispatch_return(SUCCESS_URL) is True
        assert await coordinator.dispatch_return(SUCCESS_URL) is False
        assert len(completer.calls) == 1

    async def test_dispatch_without_pending_flow(self, coordinator: BrowserSwitchCoordinator) -> None:
        assert await coordinator.dispatch_return(SUCCESS_URL) is False

    async def test_dispatch_for_stale_session_id(
        self, coordinator: BrowserSwitchCoordinator, approval_context: ApprovalContext
    ) -> None:
        switch = await coordinator.launch(approval_context, PaymentType.CHECKOUT)

        assert await coordinator.dispatch_return(SUCCESS_URL, session_id="someone-else") is False
        assert coordinator.pending_session is switch


class TestReturnOutcomes:
    """Tests for how returned URLs resolve a flow."""

    async def test_viewer_finished_is_cancel(
        self,
        coordinator: BrowserSwitchCoordinator,
        completer: FakeCompleter,
        approval_context: ApprovalContext,
    ) -> None:
        switch = await coordinator.launch(approval_context, PaymentType.CHECKOUT)

        await coordinator.dispatch_return(VIEWER_FINISHED_URL)

        assert await switch.result() is None
        assert completer.calls == []

    async def test_cancel_action_is_cancel(
        self,
        coordinator: BrowserSwitchCoordinator,
        completer: FakeCompleter,
        approval_context: ApprovalContext,
    ) -> None:
        switch = await coordinator.launch(approval_context, PaymentType.BILLING_AGREEMENT)

        await coordinator.dispatch_return(CANCEL_URL)

        assert await switch.result() is None
        assert completer.calls == []

    async def test_malformed_url_fails_the_flow(
        self,
        coordinator: BrowserSwitchCoordinator,
        completer: FakeCompleter,
        approval_context: ApprovalContext,
    ) -> None:
        switch = await coordinator.launch(approval_context, PaymentType.CHECKOUT)

        await coordinator.dispatch_return(f"{RETURN_SCHEME}://onetouch/v1/success")

        with pytest.raises(PayPalUnexpectedResponseError):
            await switch.result()
        assert completer.calls == []
        assert coordinator.state is CoordinatorState.IDLE

    async def test_tokenization_error_fails_the_flow(
        self,
        config: PayPalSwitchConfig,
        analytics: RecordingAnalytics,
        session: FakeAuthenticationSession,
        approval_context: ApprovalContext,
    ) -> None:
        error = PayPalAPIError("Declined", status_code=422)
        coordinator = BrowserSwitchCoordinator(
            config, FakeCompleter(error), analytics, authentication_session=session
        )
        switch = await coordinator.launch(approval_context, PaymentType.CHECKOUT)

        await coordinator.dispatch_return(SUCCESS_URL)

        with pytest.raises(PayPalAPIError) as exc_info:
            await switch.result()
        assert exc_info.value is error

    async def test_cancel(
        self,
        coordinator: BrowserSwitchCoordinator,
        session: FakeAuthenticationSession,
        approval_context: ApprovalContext,
    ) -> None:
        switch = await coordinator.launch(approval_context, PaymentType.CHECKOUT)

        assert await coordinator.cancel() is True

        assert await switch.result() is None
        assert session.canceled is True
        assert await coordinator.cancel() is False


class TestSupersede:
    """Tests for launching while a flow is pending."""

    async def test_new_flow_replaces_pending_one(
        self,
        coordinator: BrowserSwitchCoordinator,
        session: FakeAuthenticationSession,
        completer: FakeCompleter,
        approval_context: ApprovalContext,
    ) -> None:
        """The replaced flow fails with a cancellation error and its session is torn down."""
        first = await coordinator.launch(approval_context, PaymentType.CHECKOUT)
        first_completion = session.completion
        second = await coordinator.launch(approval_context, PaymentType.BILLING_AGREEMENT)

        with pytest.raises(PayPalCanceledError) as exc_info:
            await first.result()
        assert exc_info.value.code is PayPalErrorCode.CANCELED
        assert session.canceled is True
        assert coordinator.pending_session is second

        # A late report from the replaced session is ignored
        assert first_completion is not None
        await first_completion(SUCCESS_URL, None)
        assert second.done is False
        assert completer.calls == []

        await coordinator.dispatch_return(SUCCESS_URL)
        assert await second.result() is not None
        assert completer.calls[0][1] is PaymentType.BILLING_AGREEMENT


class TestPreflight:
    """Tests for launch-time checks."""

    async def test_missing_return_url_scheme(
        self,
        config: PayPalSwitchConfig,
        analytics: RecordingAnalytics,
        approval_context: ApprovalContext,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        coordinator = BrowserSwitchCoordinator(
            dataclasses.replace(config, return_url_scheme=None),
            FakeCompleter(),
            analytics,
            authentication_session=FakeAuthenticationSession(),
        )

        with caplog.at_level(logging.CRITICAL), pytest.raises(PayPalReturnURLSchemeError) as exc_info:
            await coordinator.launch(approval_context, PaymentType.CHECKOUT)

        assert exc_info.value.message == "Missing returnURLScheme"
        assert analytics.events == [analytics_events.PREFLIGHT_NIL_RETURN_URL_SCHEME]
        assert "return URL scheme" in caplog.text
        assert coordinator.state is CoordinatorState.IDLE

    async def test_invalid_return_url_scheme(
        self,
        config: PayPalSwitchConfig,
        analytics: RecordingAnalytics,
        approval_context: ApprovalContext,
    ) -> None:
        coordinator = BrowserSwitchCoordinator(
            dataclasses.replace(config, return_url_scheme="com.other.app.payments"),
            FakeCompleter(),
            analytics,
            authentication_session=FakeAuthenticationSession(),
        )

        with pytest.raises(PayPalReturnURLSchemeError) as exc_info:
            await coordinator.launch(approval_context, PaymentType.CHECKOUT)

        assert exc_info.value.message == "Application does not support One Touch callback URL scheme"
        assert analytics.events == [analytics_events.PREFLIGHT_INVALID_RETURN_URL_SCHEME]

    async def test_non_http_approval_url(
        self,
        coordinator: BrowserSwitchCoordinator,
        analytics: RecordingAnalytics,
        session: FakeAuthenticationSession,
        approval_context: ApprovalContext,
    ) -> None:
        context = approval_context.model_copy(update={"approval_url": "ftp://paypal.com/checkout"})

        with pytest.raises(PayPalError) as exc_info:
            await coordinator.launch(context, PaymentType.CHECKOUT)

        assert exc_info.value.code is PayPalErrorCode.UNKNOWN
        assert analytics.events == ["paypal-single-payment.webswitch.error.badscheme.ftp"]
        assert session.started_urls == []
        assert coordinator.state is CoordinatorState.IDLE

    async def test_no_transport_available(
        self,
        config: PayPalSwitchConfig,
        analytics: RecordingAnalytics,
        approval_context: ApprovalContext,
    ) -> None:
        coordinator = BrowserSwitchCoordinator(config, FakeCompleter(), analytics)

        with pytest.raises(PayPalIntegrationError):
            await coordinator.launch(approval_context, PaymentType.CHECKOUT)

    async def test_handler_preference_without_handler(
        self, coordinator: BrowserSwitchCoordinator
    ) -> None:
        with pytest.raises(PayPalIntegrationError):
            coordinator.select_transport(None, TransportKind.HANDLER_DELEGATED)


class TestEphemeralSessionTransport:
    """Tests for the ephemeral authentication session transport."""

    async def test_starts_tagged_session(
        self,
        coordinator: BrowserSwitchCoordinator,
        session: FakeAuthenticationSession,
        analytics: RecordingAnalytics,
        approval_context: ApprovalContext,
    ) -> None:
        await coordinator.launch(approval_context, PaymentType.CHECKOUT)

        assert session.started_urls == [
            "https://www.sandbox.paypal.com/checkoutnow?token=EC-123&bt_int_type=2"
        ]
        assert session.callback_url_schemes == [RETURN_SCHEME]
        assert analytics.events == [analytics_events.AUTH_SESSION_START_SUCCEEDED]

    async def test_callback_url_resolves_flow(
        self,
        coordinator: BrowserSwitchCoordinator,
        session: FakeAuthenticationSession,
        approval_context: ApprovalContext,
    ) -> None:
        switch = await coordinator.launch(approval_context, PaymentType.CHECKOUT)

        assert session.completion is not None
        await session.completion(SUCCESS_URL, None)

        nonce = await switch.result()
        assert nonce is not None

    async def test_user_cancel_in_modal(
        self,
        coordinator: BrowserSwitchCoordinator,
        session: FakeAuthenticationSession,
        analytics: RecordingAnalytics,
        approval_context: ApprovalContext,
    ) -> None:
        switch = await coordinator.launch(approval_context, PaymentType.CHECKOUT)

        assert session.completion is not None
        await session.completion(None, AuthenticationSessionError("Canceled", canceled_login=True))

        assert await switch.result() is None
        assert analytics.events[-1] == analytics_events.AUTH_SESSION_CANCEL_MODAL

    async def test_user_cancel_after_returning_to_app(
        self,
        coordinator: BrowserSwitchCoordinator,
        session: FakeAuthenticationSession,
        analytics: RecordingAnalytics,
        approval_context: ApprovalContext,
    ) -> None:
        switch = await coordinator.launch(approval_context, PaymentType.CHECKOUT)
        coordinator.application_did_become_active()

        assert session.completion is not None
        await session.completion(None, AuthenticationSessionError("Canceled", canceled_login=True))

        assert await switch.result() is None
        assert analytics.events[-1] == analytics_events.AUTH_SESSION_CANCEL_WEB

    async def test_other_session_error_is_cancel(
        self,
        coordinator: BrowserSwitchCoordinator,
        session: FakeAuthenticationSession,
        analytics: RecordingAnalytics,
        approval_context: ApprovalContext,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Non-cancel session errors end the flow as a cancellation and are logged."""
        switch = await coordinator.launch(approval_context, PaymentType.CHECKOUT)

        assert session.completion is not None
        with caplog.at_level(logging.WARNING, logger="paypal_switch.transports"):
            await session.completion(None, RuntimeError("presentation failed"))

        assert await switch.result() is None
        assert "presentation failed" in caplog.text
        assert analytics.events == [analytics_events.AUTH_SESSION_START_SUCCEEDED]

    async def test_start_failure_is_cancel(
        self,
        config: PayPalSwitchConfig,
        analytics: RecordingAnalytics,
        approval_context: ApprovalContext,
    ) -> None:
        coordinator = BrowserSwitchCoordinator(
            config,
            FakeCompleter(),
            analytics,
            authentication_session=FakeAuthenticationSession(start_result=False),
        )

        switch = await coordinator.launch(approval_context, PaymentType.CHECKOUT)

        assert await switch.result() is None
        assert analytics.events == [analytics_events.AUTH_SESSION_START_FAILED]
        assert coordinator.state is CoordinatorState.IDLE


class TestEmbeddedSurfaceTransport:
    """Tests for the embedded browser surface transport."""

    async def test_presents_when_ephemeral_disabled(
        self,
        config: PayPalSwitchConfig,
        analytics: RecordingAnalytics,
        approval_context: ApprovalContext,
    ) -> None:
        presenter = FakePresenter()
        session = FakeAuthenticationSession()
        coordinator = BrowserSwitchCoordinator(
            dataclasses.replace(config, disable_ephemeral_session=True),
            FakeCompleter(),
            analytics,
            authentication_session=session,
            presenter=presenter,
        )

        switch = await coordinator.launch(approval_context, PaymentType.CHECKOUT)

        assert switch.transport_kind is TransportKind.EMBEDDED_SURFACE
        assert presenter.presented == [
            "https://www.sandbox.paypal.com/checkoutnow?token=EC-123&bt_int_type=1"
        ]
        assert session.started_urls == []

    async def test_dismissed_on_return(
        self,
        coordinator: BrowserSwitchCoordinator,
        presenter: FakePresenter,
        approval_context: ApprovalContext,
    ) -> None:
        switch = await coordinator.launch(
            approval_context,
            PaymentType.CHECKOUT,
            transport_preference=TransportKind.EMBEDDED_SURFACE,
        )

        await coordinator.dispatch_return(SUCCESS_URL)

        assert presenter.dismissed == 1
        assert await switch.result() is not None

    async def test_surface_closed_by_user(
        self,
        coordinator: BrowserSwitchCoordinator,
        approval_context: ApprovalContext,
    ) -> None:
        switch = await coordinator.launch(
            approval_context,
            PaymentType.CHECKOUT,
            transport_preference=TransportKind.EMBEDDED_SURFACE,
        )

        assert await coordinator.surface_did_finish() is True
        assert await switch.result() is None

    async def test_missing_presenter_leaves_flow_pending(
        self,
        config: PayPalSwitchConfig,
        analytics: RecordingAnalytics,
        approval_context: ApprovalContext,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        coordinator = BrowserSwitchCoordinator(
            dataclasses.replace(config, disable_ephemeral_session=True),
            FakeCompleter(),
            analytics,
        )

        with caplog.at_level(logging.CRITICAL, logger="paypal_switch.transports"):
            switch = await coordinator.launch(approval_context, PaymentType.CHECKOUT)

        assert "SurfacePresenter" in caplog.text
        assert switch.done is False
        assert coordinator.state is CoordinatorState.AWAITING_APPROVAL

    async def test_falls_back_to_presenter_without_session(
        self,
        config: PayPalSwitchConfig,
        analytics: RecordingAnalytics,
        approval_context: ApprovalContext,
    ) -> None:
        presenter = FakePresenter()
        coordinator = BrowserSwitchCoordinator(config, FakeCompleter(), analytics, presenter=presenter)

        switch = await coordinator.launch(approval_context, PaymentType.CHECKOUT)

        assert switch.transport_kind is TransportKind.EMBEDDED_SURFACE
        assert len(presenter.presented) == 1


class TestHandlerDelegatedTransport:
    """Tests for host-supplied approval handlers."""

    async def test_handler_receives_context(
        self,
        coordinator: BrowserSwitchCoordinator,
        session: FakeAuthenticationSession,
        approval_context: ApprovalContext,
        events: list[SwitchEvent],
    ) -> None:
        handler = RecordingHandler()

        switch = await coordinator.launch(approval_context, PaymentType.CHECKOUT, handler=handler)

        assert switch.transport_kind is TransportKind.HANDLER_DELEGATED
        assert handler.contexts == [approval_context]
        assert session.started_urls == []
        # No app switch happens before a handler-delegated flow
        assert events == []

    async def test_handler_completion(
        self,
        coordinator: BrowserSwitchCoordinator,
        approval_context: ApprovalContext,
        events: list[SwitchEvent],
    ) -> None:
        handler = RecordingHandler()
        switch = await coordinator.launch(approval_context, PaymentType.CHECKOUT, handler=handler)

        assert handler.delegate is not None
        assert await handler.delegate.on_approval_complete(SUCCESS_URL) is True

        assert await switch.result() is not None
        assert [event.type for event in events] == [
            SwitchEventType.APP_CONTEXT_DID_RETURN,
            SwitchEventType.WILL_PROCESS_PAYMENT_INFO,
        ]
        assert all(event.session_id == switch.session_id for event in events)

    async def test_handler_cancel(
        self, coordinator: BrowserSwitchCoordinator, approval_context: ApprovalContext
    ) -> None:
        switch = await coordinator.launch(
            approval_context, PaymentType.CHECKOUT, handler=ImmediateHandler(None)
        )

        assert switch.done is True
        assert await switch.result() is None

    async def test_handler_skips_approval_url_check(
        self, coordinator: BrowserSwitchCoordinator, approval_context: ApprovalContext
    ) -> None:
        context = approval_context.model_copy(update={"approval_url": "my-url.com"})

        switch = await coordinator.launch(
            context, PaymentType.CHECKOUT, handler=ImmediateHandler(SUCCESS_URL)
        )

        assert await switch.result() is not None


class TestLifecycleEvents:
    """Tests for published lifecycle events."""

    async def test_switch_and_return_events(
        self,
        config: PayPalSwitchConfig,
        analytics: RecordingAnalytics,
        session: FakeAuthenticationSession,
        approval_context: ApprovalContext,
    ) -> None:
        """DID_RETURN is published before the payload is processed."""
        order: list[str] = []

        class OrderedCompleter(FakeCompleter):
            async def complete(self, validated, payment_type, context):
                order.append("complete")
                return await super().complete(validated, payment_type, context)

        channel = EventChannel()
        channel.subscribe(lambda event: order.append(event.type.value))
        coordinator = BrowserSwitchCoordinator(
            config, OrderedCompleter(), analytics, events=channel, authentication_session=session
        )

        switch = await coordinator.launch(approval_context, PaymentType.CHECKOUT)
        await coordinator.dispatch_return(SUCCESS_URL)
        await switch.result()

        assert order == ["app_context_will_switch", "app_context_did_return", "complete"]


class TestCanHandleReturnURL:
    """Tests for the inbound URL gate."""

    async def test_accepts_pending_return_from_browser(
        self, coordinator: BrowserSwitchCoordinator, approval_context: ApprovalContext
    ) -> None:
        await coordinator.launch(approval_context, PaymentType.CHECKOUT)

        assert coordinator.can_handle_return_url(SUCCESS_URL, SYSTEM_BROWSER_SOURCE) is True

    async def test_rejects_without_pending_flow(self, coordinator: BrowserSwitchCoordinator) -> None:
        assert coordinator.can_handle_return_url(SUCCESS_URL, SYSTEM_BROWSER_SOURCE) is False

    async def test_rejects_other_sources_and_malformed_urls(
        self, coordinator: BrowserSwitchCoordinator, approval_context: ApprovalContext
    ) -> None:
        await coordinator.launch(approval_context, PaymentType.CHECKOUT)

        assert coordinator.can_handle_return_url(SUCCESS_URL, "com.evil.app") is False
        assert coordinator.can_handle_return_url(SUCCESS_URL, None) is False
        assert coordinator.can_handle_return_url("https://example.com/", SYSTEM_BROWSER_SOURCE) is False
        assert (
            coordinator.can_handle_return_url(f"{RETURN_SCHEME}:onetouch/v1/success?token=EC-1", SYSTEM_BROWSER_SOURCE)
            is False
        )
