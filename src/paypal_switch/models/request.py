"""Tokenization request models."""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field


class PayPalIntent(StrEnum):
    """Payment intent for one-time payments."""

    AUTHORIZE = "authorize"
    SALE = "sale"
    ORDER = "order"


class LandingPageType(StrEnum):
    """Page shown first in the PayPal flow."""

    DEFAULT = "default"  # PayPal decides; not sent
    LOGIN = "login"
    BILLING = "billing"


class UserAction(StrEnum):
    """Label of the final button on the approval page."""

    DEFAULT = "default"  # "Continue"; not sent
    COMMIT = "commit"  # "Pay Now"


class LineItemKind(StrEnum):
    """Whether a line item adds to or subtracts from the total."""

    DEBIT = "debit"
    CREDIT = "credit"


class PostalAddress(BaseModel):
    """Postal address, used both for shipping overrides and for returned payer addresses."""

    recipient_name: str | None = None
    street_address: str | None = None
    extended_address: str | None = None
    locality: str | None = None
    region: str | None = None
    postal_code: str | None = None
    country_code_alpha2: str | None = None

    model_config = {"frozen": True}


class LineItem(BaseModel):
    """A single line item shown on the approval page."""

    quantity: str
    unit_amount: str
    name: str
    kind: LineItemKind
    unit_tax_amount: str | None = None
    description: str | None = None
    product_code: str | None = None
    url: str | None = None

    model_config = {"frozen": True}

    def request_parameters(self) -> dict[str, Any]:
        """Serialize for the payment resource request."""
        return self.model_dump(mode="json", exclude_none=True)


class PayPalRequest(BaseModel):
    """Immutable description of a one-time payment or billing agreement.

    ``amount`` is required for one-time payments and ignored for billing
    agreements, which use ``billing_agreement_description`` instead.
    """

    amount: str | None = None
    currency_code: str | None = None
    intent: PayPalIntent = PayPalIntent.AUTHORIZE
    billing_agreement_description: str | None = None
    offer_credit: bool = False
    is_shipping_address_required: bool = False
    is_shipping_address_editable: bool = False
    shipping_address_override: PostalAddress | None = None
    display_name: str | None = None
    locale_code: str | None = None
    merchant_account_id: str | None = None
    landing_page_type: LandingPageType = LandingPageType.DEFAULT
    user_action: UserAction = UserAction.DEFAULT
    line_items: list[LineItem] = Field(default_factory=list)

    model_config = {"frozen": True}
