"""Exchange of a validated return payload for a tokenized PayPal account."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from paypal_switch.models.approval import PaymentType

if TYPE_CHECKING:
    from paypal_switch.analytics import AnalyticsSink
    from paypal_switch.api.payment_methods import PaymentMethodsAPI
    from paypal_switch.models.nonce import PayPalAccountNonce
    from paypal_switch.models.request import PayPalRequest
    from paypal_switch.return_url import ValidatedReturn

logger = logging.getLogger(__name__)

METADATA_SOURCE = "paypal-browser"


@dataclass(frozen=True, slots=True)
class ClientMetadata:
    """Origin metadata attached to tokenization calls."""

    integration: str = "custom"
    source: str = METADATA_SOURCE
    session_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def as_params(self) -> dict[str, str]:
        return {
            "source": self.source,
            "integration": self.integration,
            "sessionId": self.session_id,
        }


@dataclass(frozen=True, slots=True)
class PendingRequestContext:
    """What the completer needs to know about the flow that launched."""

    request: PayPalRequest | None = None
    correlation_id: str | None = None


class TokenizationCompleter:
    """Builds the tokenization call for an approved flow and maps its response."""

    def __init__(
        self,
        payment_methods: PaymentMethodsAPI,
        analytics: AnalyticsSink,
        metadata: ClientMetadata,
        *,
        sdk_version: str,
    ) -> None:
        self.payment_methods = payment_methods
        self.analytics = analytics
        self.metadata = metadata
        self.sdk_version = sdk_version

    def build_payload(
        self,
        validated: ValidatedReturn,
        payment_type: PaymentType,
        context: PendingRequestContext,
    ) -> dict[str, Any]:
        """Build the ``paypal_accounts`` request body."""
        paypal_account: dict[str, Any] = {
            "client": {
                "platform": "python",
                "product_name": "PayPal",
                "paypal_sdk_version": self.sdk_version,
            },
            "response": {"webURL": validated.url},
            "response_type": "web",
        }

        if payment_type is PaymentType.CHECKOUT:
            paypal_account["options"] = {"validate": False}
            if context.request is not None:
                paypal_account["intent"] = context.request.intent.value

        if context.correlation_id:
            paypal_account["correlation_id"] = context.correlation_id

        payload: dict[str, Any] = {"paypal_account": paypal_account}

        if context.request is not None and context.request.merchant_account_id is not None:
            payload["merchant_account_id"] = context.request.merchant_account_id

        payload["_meta"] = self.metadata.as_params()
        return payload

    async def complete(
        self,
        validated: ValidatedReturn,
        payment_type: PaymentType,
        context: PendingRequestContext,
    ) -> PayPalAccountNonce:
        """Tokenize the approved account.

        Raises:
            PayPalAPIError: If the backend rejects the tokenization
        """
        payload = self.build_payload(validated, payment_type, context)
        flow = payment_type.event_name

        try:
            nonce = await self.payment_methods.tokenize_paypal_account(payload)
        except Exception:
            self.analytics.send_event(f"{flow}.tokenize.failed")
            raise

        self.analytics.send_event(f"{flow}.tokenize.succeeded")
        if nonce.credit_financing is not None:
            self.analytics.send_event(f"{flow}.credit.accepted")

        logger.info("Tokenized PayPal account for %s flow", payment_type)
        return nonce
