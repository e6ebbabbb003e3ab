"""Analytics event boundary."""

import logging
from typing import Protocol

logger = logging.getLogger(__name__)

PREFLIGHT_DISABLED = "paypal-otc.preflight.disabled"
PREFLIGHT_NIL_RETURN_URL_SCHEME = "paypal-otc.preflight.nil-return-url-scheme"
PREFLIGHT_INVALID_RETURN_URL_SCHEME = "paypal-otc.preflight.invalid-return-url-scheme"

AUTH_SESSION_START_SUCCEEDED = "authsession.start.succeeded"
AUTH_SESSION_START_FAILED = "authsession.start.failed"
AUTH_SESSION_CANCEL_WEB = "authsession.cancel.web"
AUTH_SESSION_CANCEL_MODAL = "authsession.cancel.modal"


class AnalyticsSink(Protocol):
    """Receives analytics event names."""

    def send_event(self, name: str) -> None: ...


class LoggingAnalytics:
    """Default sink: logs each event."""

    def send_event(self, name: str) -> None:
        logger.info("Analytics event: %s", name)


class RecordingAnalytics:
    """Keeps events in memory, in order."""

    def __init__(self) -> None:
        self.events: list[str] = []

    def send_event(self, name: str) -> None:
        self.events.append(name)
