"""Pydantic models for requests, merchant configuration, and tokenized accounts."""

from paypal_switch.models.approval import ApprovalContext, PaymentType, PayPalEnvironment
from paypal_switch.models.configuration import PayPalConfiguration, RemoteConfiguration
from paypal_switch.models.nonce import CreditFinancing, CreditFinancingAmount, PayPalAccountNonce
from paypal_switch.models.request import (
    LandingPageType,
    LineItem,
    LineItemKind,
    PayPalIntent,
    PayPalRequest,
    PostalAddress,
    UserAction,
)

__all__ = [
    # Approval
    "ApprovalContext",
    "PaymentType",
    "PayPalEnvironment",
    # Configuration
    "PayPalConfiguration",
    "RemoteConfiguration",
    # Nonce
    "CreditFinancing",
    "CreditFinancingAmount",
    "PayPalAccountNonce",
    # Request
    "LandingPageType",
    "LineItem",
    "LineItemKind",
    "PayPalIntent",
    "PayPalRequest",
    "PostalAddress",
    "UserAction",
]
