"""Client API modules."""

from paypal_switch.api.configuration import ConfigurationAPI
from paypal_switch.api.hermes import HermesAPI
from paypal_switch.api.payment_methods import PaymentMethodsAPI

__all__ = ["ConfigurationAPI", "HermesAPI", "PaymentMethodsAPI"]
