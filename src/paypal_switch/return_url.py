"""Redirect URL construction and validation of URLs returned by the approval surface.

Return URLs have the fixed shape ``{scheme}://onetouch/v1/{action}?{payload}``.
The scheme is chosen per installation; everything after it is checked here
before any field is read from the URL.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import NamedTuple
from urllib.parse import SplitResult, unquote, urlsplit

from paypal_switch.exceptions import PayPalUnexpectedResponseError

REDIRECT_HOST_AND_PATH = "onetouch/v1/"

# Dispatched when the viewer is closed without producing a URL; treated as a user cancel.
VIEWER_FINISHED_URL = "browser-switch://finished"

SYSTEM_BROWSER_SOURCE = "com.apple.mobilesafari"
AUTHENTICATION_SESSION_SOURCE = "com.apple.safariviewservice"


class ReturnAction(StrEnum):
    """Actions a return URL may carry."""

    SUCCESS = "success"
    CANCEL = "cancel"
    AUTHENTICATE = "authenticate"


class RedirectURLs(NamedTuple):
    """Return and cancel URLs sent with the payment resource request."""

    return_url: str
    cancel_url: str


@dataclass(frozen=True, slots=True)
class ValidatedReturn:
    """A return URL that passed structural validation."""

    url: str
    action: ReturnAction
    query_params: dict[str, str] = field(default_factory=dict)


def redirect_urls_for_scheme(callback_url_scheme: str) -> RedirectURLs:
    """Build ``{scheme}://onetouch/v1/success`` and ``.../cancel``."""
    prefix = f"{callback_url_scheme}://{REDIRECT_HOST_AND_PATH}"
    return RedirectURLs(
        return_url=f"{prefix}{ReturnAction.SUCCESS.value}",
        cancel_url=f"{prefix}{ReturnAction.CANCEL.value}",
    )


def is_callback_url_scheme_valid(
    callback_url_scheme: str | None,
    app_identifier: str,
    registered_url_schemes: tuple[str, ...] | None = None,
) -> bool:
    """Check that a callback scheme plausibly belongs to the host application.

    The scheme must start with the app identifier (case-insensitive). Schemes
    cannot start with characters like ``-``, so an identifier with a leading
    non-alphanumeric character is also matched with that character removed.
    """
    if not callback_url_scheme:
        return False

    identifier = app_identifier.lower()
    scheme = callback_url_scheme.lower()

    if len(identifier) <= 1:
        return False
    if not identifier[0].isalnum() and not scheme.startswith(identifier):
        identifier = identifier[1:]

    if not scheme.startswith(identifier):
        return False

    if registered_url_schemes is not None:
        return callback_url_scheme in registered_url_schemes

    return True


def parse_query_string(query: str | None) -> dict[str, str]:
    """Parse ``k=v&k2=v2`` keeping only pairs with a non-empty key and value."""
    result: dict[str, str] = {}
    if not query:
        return result
    for pair in query.split("&"):
        elements = pair.split("=")
        if len(elements) > 1:
            key = unquote(elements[0])
            value = unquote(elements[1])
            if key and value:
                result[key] = value
    return result


def _host(parts: SplitResult) -> str:
    netloc = parts.netloc.rpartition("@")[2]
    if netloc.startswith("["):
        return netloc
    return netloc.partition(":")[0]


def action_from_url(url: str) -> str:
    """Return the last path component, or the host when the path is empty."""
    parts = urlsplit(url)
    path = parts.path.rstrip("/")
    action = path.rsplit("/", 1)[-1] if path else ""
    return action or _host(parts)


class ReturnURLValidator:
    """Validates the structure of URLs delivered back to the application."""

    valid_actions: frozenset[str] = frozenset(action.value for action in ReturnAction)

    def validate(self, url: str) -> ValidatedReturn:
        """Validate ``url`` and extract its action and query.

        Raises:
            PayPalUnexpectedResponseError: If any structural check fails
        """
        parts = urlsplit(url)

        if not parts.scheme:
            raise PayPalUnexpectedResponseError(url=url)

        host = _host(parts)
        if not host:
            raise PayPalUnexpectedResponseError(url=url)

        components = f"{host}{parts.path}".split("/")
        host_and_path = "/".join(components[:-1])
        if host_and_path:
            host_and_path += "/"
        if host_and_path != REDIRECT_HOST_AND_PATH:
            raise PayPalUnexpectedResponseError(url=url)

        action = action_from_url(url)
        if not action or action not in self.valid_actions:
            raise PayPalUnexpectedResponseError(url=url)

        # Even a cancel carries a payload or at least a token
        if not parts.query:
            raise PayPalUnexpectedResponseError(url=url)

        return ValidatedReturn(
            url=url,
            action=ReturnAction(action),
            query_params=parse_query_string(parts.query),
        )

    def is_valid(self, url: str) -> bool:
        """Check ``url`` without raising."""
        try:
            self.validate(url)
        except PayPalUnexpectedResponseError:
            return False
        return True


class SourceApplicationPolicy:
    """Allow-list of applications that may hand a return URL back to us."""

    def __init__(self, allowed: frozenset[str] | None = None) -> None:
        if allowed is None:
            allowed = frozenset({SYSTEM_BROWSER_SOURCE, AUTHENTICATION_SESSION_SOURCE})
        self.allowed = frozenset(source.lower() for source in allowed)

    def allows(self, source_application: str | None) -> bool:
        if not source_application:
            return False
        return source_application.lower() in self.allowed
