"""Typed exceptions for the PayPal browser-switch client."""

from enum import StrEnum
from typing import Any


class PayPalErrorCode(StrEnum):
    """Stable error codes exposed to callers."""

    UNKNOWN = "unknown"
    DISABLED = "disabled"
    INVALID_REQUEST = "invalid_request"
    INTEGRATION = "integration"
    INTEGRATION_RETURN_URL_SCHEME = "integration_return_url_scheme"
    CANCELED = "canceled"


class PayPalError(Exception):
    """Base exception for all PayPal client errors."""

    code: PayPalErrorCode = PayPalErrorCode.UNKNOWN

    def __init__(
        self,
        message: str,
        *,
        code: PayPalErrorCode | None = None,
        recovery_suggestion: str | None = None,
    ) -> None:
        self.message = message
        if code is not None:
            self.code = code
        self.recovery_suggestion = recovery_suggestion
        super().__init__(message)


class PayPalDisabledError(PayPalError):
    """PayPal is switched off for the merchant in the remote configuration."""

    code = PayPalErrorCode.DISABLED


class PayPalInvalidRequestError(PayPalError):
    """Request validation error before anything is sent to the backend."""

    code = PayPalErrorCode.INVALID_REQUEST

    def __init__(self, message: str, *, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class PayPalIntegrationError(PayPalError):
    """The host application is misconfigured."""

    code = PayPalErrorCode.INTEGRATION


class PayPalReturnURLSchemeError(PayPalIntegrationError):
    """Return URL scheme is missing or does not belong to the host application."""

    code = PayPalErrorCode.INTEGRATION_RETURN_URL_SCHEME


class PayPalCanceledError(PayPalError):
    """A pending flow was abandoned without a user decision (e.g. superseded)."""

    code = PayPalErrorCode.CANCELED


class PayPalUnexpectedResponseError(PayPalError):
    """A returned URL failed structural validation."""

    def __init__(self, message: str = "Unexpected response", *, url: str | None = None) -> None:
        self.url = url
        super().__init__(message)


class PayPalAPIError(PayPalError):
    """Backend request error with status code and response details."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        response_body: dict[str, Any] | None = None,
    ) -> None:
        self.status_code = status_code
        self.response_body = response_body
        super().__init__(message)


class AuthenticationSessionError(PayPalError):
    """Error reported by a platform authentication session.

    ``canceled_login`` is set when the user dismissed the session themselves.
    """

    def __init__(self, message: str, *, canceled_login: bool = False) -> None:
        self.canceled_login = canceled_login
        super().__init__(message)
