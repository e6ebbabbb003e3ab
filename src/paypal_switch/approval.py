"""Approval URL resolution from payment resource responses."""

import logging
from typing import Any
from urllib.parse import urlsplit, urlunsplit

from paypal_switch.exceptions import PayPalError, PayPalErrorCode
from paypal_switch.models.approval import ApprovalContext, PayPalEnvironment
from paypal_switch.models.configuration import RemoteConfiguration
from paypal_switch.models.request import PayPalRequest, UserAction
from paypal_switch.return_url import parse_query_string

logger = logging.getLogger(__name__)

MOCK_CLIENT_ID = "FAKE-PAYPAL-CLIENT-ID"


def decorate_approval_url(approval_url: str, request: PayPalRequest) -> str:
    """Append ``useraction=<value>`` for non-default user actions."""
    if request.user_action is UserAction.DEFAULT:
        return approval_url

    parts = urlsplit(approval_url)
    delimiter = "&" if parts.query else ""
    query = f"{parts.query}{delimiter}useraction={request.user_action.value}"
    return urlunsplit(parts._replace(query=query))


def token_from_approval_url(approval_url: str) -> str | None:
    """Extract the pairing token (``token``, falling back to ``ba_token``)."""
    query = parse_query_string(urlsplit(approval_url).query)
    return query.get("token") or query.get("ba_token")


def environment_for_configuration(configuration: RemoteConfiguration) -> PayPalEnvironment:
    """Map the merchant's configured environment name.

    Unsupported values (e.g. ``custom``) fall back to mock rather than being echoed.
    """
    name = configuration.paypal.environment
    if name == "offline":
        return PayPalEnvironment.MOCK
    if name == "live":
        return PayPalEnvironment.PRODUCTION
    return PayPalEnvironment.MOCK


class ApprovalResolver:
    """Builds the approval context for one submitted request."""

    def __init__(self, callback_url_scheme: str) -> None:
        self.callback_url_scheme = callback_url_scheme

    @staticmethod
    def approval_url_from_response(data: dict[str, Any]) -> str | None:
        """Read ``paymentResource.redirectUrl`` or ``agreementSetup.approvalUrl``."""
        for section, key in (("paymentResource", "redirectUrl"), ("agreementSetup", "approvalUrl")):
            container = data.get(section)
            if isinstance(container, dict):
                url = container.get(key)
                if isinstance(url, str) and url:
                    return url
        return None

    def resolve(
        self,
        data: dict[str, Any],
        request: PayPalRequest,
        configuration: RemoteConfiguration,
    ) -> ApprovalContext:
        """Resolve the approval context from a backend response.

        Raises:
            PayPalError: With code ``unknown`` if the response carries no approval URL
        """
        approval_url = self.approval_url_from_response(data)
        if approval_url is None:
            logger.debug("No approval URL in response keys: %s", sorted(data))
            raise PayPalError("Failed to fetch PayPal approvalURL.", code=PayPalErrorCode.UNKNOWN)

        approval_url = decorate_approval_url(approval_url, request)
        environment = environment_for_configuration(configuration)

        client_id = configuration.paypal.client_id
        if not client_id:
            client_id = MOCK_CLIENT_ID if environment is PayPalEnvironment.MOCK else ""

        return ApprovalContext(
            approval_url=approval_url,
            pairing_token=token_from_approval_url(approval_url),
            client_id=client_id,
            environment=environment,
            callback_url_scheme=self.callback_url_scheme,
        )
