"""Approval flow models."""

from enum import StrEnum

from pydantic import BaseModel, Field


class PayPalEnvironment(StrEnum):
    """PayPal environment handed to the approval surface."""

    PRODUCTION = "live"  # required for production submissions
    SANDBOX = "sandbox"
    MOCK = "mock"  # no real transaction, canned success


class PaymentType(StrEnum):
    """Flow variant; shapes the follow-up tokenization call."""

    CHECKOUT = "checkout"
    BILLING_AGREEMENT = "billing_agreement"

    @property
    def event_name(self) -> str:
        """Analytics name of the flow."""
        if self is PaymentType.BILLING_AGREEMENT:
            return "paypal-ba"
        return "paypal-single-payment"


class ApprovalContext(BaseModel):
    """Everything an approval surface needs to run one flow."""

    approval_url: str = Field(description="Provider-hosted URL the user must visit")
    pairing_token: str | None = Field(default=None, description="`token` or `ba_token` from the approval URL")
    client_id: str = Field(default="")
    environment: PayPalEnvironment = PayPalEnvironment.MOCK
    callback_url_scheme: str

    model_config = {"frozen": True}
