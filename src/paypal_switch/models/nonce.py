"""Tokenized PayPal account models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from paypal_switch.models.request import PostalAddress


def _string(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _object(value: Any) -> dict[str, Any] | None:
    return value if isinstance(value, dict) else None


class CreditFinancingAmount(BaseModel):
    """Currency/value pair of a financing term."""

    currency: str | None = None
    value: str | None = None

    @classmethod
    def from_json(cls, data: Any) -> CreditFinancingAmount | None:
        amount = _object(data)
        if amount is None:
            return None
        return cls(currency=_string(amount.get("currency")), value=_string(amount.get("value")))


class CreditFinancing(BaseModel):
    """Installment terms the payer accepted."""

    card_amount_immutable: bool = False
    monthly_payment: CreditFinancingAmount | None = None
    payer_acceptance: bool = False
    term: int = 0
    total_cost: CreditFinancingAmount | None = None
    total_interest: CreditFinancingAmount | None = None

    @classmethod
    def from_json(cls, data: Any) -> CreditFinancing | None:
        """Parse ``creditFinancingOffered``; absent or non-object yields None."""
        offered = _object(data)
        if offered is None:
            return None

        term = offered.get("term")
        try:
            term_value = int(term) if term is not None and not isinstance(term, bool) else 0
        except (TypeError, ValueError):
            term_value = 0

        return cls(
            card_amount_immutable=offered.get("cardAmountImmutable") is True,
            monthly_payment=CreditFinancingAmount.from_json(offered.get("monthlyPayment")),
            payer_acceptance=offered.get("payerAcceptance") is True,
            term=term_value,
            total_cost=CreditFinancingAmount.from_json(offered.get("totalCost")),
            total_interest=CreditFinancingAmount.from_json(offered.get("totalInterest")),
        )


def _shipping_or_billing_address(data: Any) -> PostalAddress | None:
    address = _object(data)
    if address is None:
        return None
    return PostalAddress(
        recipient_name=_string(address.get("recipientName")),
        street_address=_string(address.get("line1")),
        extended_address=_string(address.get("line2")),
        locality=_string(address.get("city")),
        region=_string(address.get("state")),
        postal_code=_string(address.get("postalCode")),
        country_code_alpha2=_string(address.get("countryCode")),
    )


def _account_address(data: Any) -> PostalAddress | None:
    # Account addresses use a different key set than shipping/billing
    address = _object(data)
    if address is None:
        return None
    return PostalAddress(
        recipient_name=_string(address.get("recipientName")),
        street_address=_string(address.get("street1")),
        extended_address=_string(address.get("street2")),
        locality=_string(address.get("city")),
        region=_string(address.get("state")),
        postal_code=_string(address.get("postalCode")),
        country_code_alpha2=_string(address.get("country")),
    )


class PayPalAccountNonce(BaseModel):
    """Tokenized PayPal account returned to the caller."""

    nonce: str = Field(description="Single-use payment method nonce")
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    payer_id: str | None = None
    client_metadata_id: str | None = None
    is_default: bool = False
    billing_address: PostalAddress | None = None
    shipping_address: PostalAddress | None = None
    credit_financing: CreditFinancing | None = None

    @classmethod
    def from_account_json(cls, account: dict[str, Any]) -> PayPalAccountNonce:
        """Parse one ``paypalAccounts`` entry."""
        details = _object(account.get("details")) or {}
        payer_info = _object(details.get("payerInfo")) or {}

        email = _string(details.get("email"))
        # payerInfo.email wins when present
        if isinstance(payer_info.get("email"), str):
            email = payer_info["email"]

        shipping_address = _shipping_or_billing_address(payer_info.get("shippingAddress"))
        if shipping_address is None:
            shipping_address = _account_address(payer_info.get("accountAddress"))

        return cls(
            nonce=_string(account.get("nonce")) or "",
            email=email,
            first_name=_string(payer_info.get("firstName")),
            last_name=_string(payer_info.get("lastName")),
            phone=_string(payer_info.get("phone")),
            payer_id=_string(payer_info.get("payerId")),
            client_metadata_id=_string(details.get("correlationId")),
            is_default=account.get("default") is True,
            billing_address=_shipping_or_billing_address(payer_info.get("billingAddress")),
            shipping_address=shipping_address,
            credit_financing=CreditFinancing.from_json(details.get("creditFinancingOffered")),
        )

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> PayPalAccountNonce:
        """Parse from raw tokenization response (first ``paypalAccounts`` entry)."""
        accounts = data.get("paypalAccounts", [])
        # Handle single-item-as-dict responses
        if isinstance(accounts, dict):
            accounts = [accounts]
        account = accounts[0] if accounts and isinstance(accounts[0], dict) else {}
        return cls.from_account_json(account)
