"""Shared fixtures."""

import pytest

from paypal_switch.analytics import RecordingAnalytics
from paypal_switch.config import PayPalSwitchConfig
from paypal_switch.models.approval import ApprovalContext, PayPalEnvironment
from tests.fakes import RETURN_SCHEME


@pytest.fixture
def config() -> PayPalSwitchConfig:
    """Create a test configuration."""
    return PayPalSwitchConfig(
        authorization="test_authorization",
        merchant_id="test_merchant",
        return_url_scheme=RETURN_SCHEME,
        app_identifier="com.example.app",
    )


@pytest.fixture
def analytics() -> RecordingAnalytics:
    return RecordingAnalytics()


@pytest.fixture
def approval_context() -> ApprovalContext:
    return ApprovalContext(
        approval_url="https://www.sandbox.paypal.com/checkoutnow?token=EC-123",
        pairing_token="EC-123",
        client_id="client-id",
        environment=PayPalEnvironment.SANDBOX,
        callback_url_scheme=RETURN_SCHEME,
    )
