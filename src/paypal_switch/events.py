"""App-switch lifecycle event channel."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

logger = logging.getLogger(__name__)


class SwitchEventType(StrEnum):
    """Lifecycle points published around a browser switch."""

    APP_CONTEXT_WILL_SWITCH = "app_context_will_switch"
    APP_CONTEXT_DID_RETURN = "app_context_did_return"
    WILL_PROCESS_PAYMENT_INFO = "will_process_payment_info"


@dataclass(frozen=True, slots=True)
class SwitchEvent:
    """A published lifecycle event."""

    type: SwitchEventType
    session_id: str | None = None


Subscriber = Callable[[SwitchEvent], None]


class EventChannel:
    """Fan-out of lifecycle events to zero or more subscribers.

    Publishing never affects how a pending flow is resolved: a failing
    subscriber is logged and the remaining subscribers still run.
    """

    def __init__(self) -> None:
        self._subscribers: list[Subscriber] = []

    def subscribe(self, subscriber: Subscriber) -> Callable[[], None]:
        """Register a subscriber; returns a callable that unsubscribes it."""
        self._subscribers.append(subscriber)

        def unsubscribe() -> None:
            if subscriber in self._subscribers:
                self._subscribers.remove(subscriber)

        return unsubscribe

    def publish(self, event: SwitchEvent) -> None:
        logger.debug("Publishing %s", event.type)
        for subscriber in list(self._subscribers):
            try:
                subscriber(event)
            except Exception:
                logger.exception("Subscriber failed handling %s", event.type)
