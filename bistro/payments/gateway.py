"""
Payment gateway - Stripe integration.

Wraps the Stripe SDK so routes depend on a small interface that tests can
replace with a fake.
"""

import logging
from typing import Any

import stripe

from bistro.core import config

logger = logging.getLogger(__name__)


class PaymentGatewayError(Exception):
    """Error reported by the payment provider."""

    def __init__(self, message: str, code: str | None = None, http_status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.http_status = http_status


class StripePaymentGateway:
    """Creates payment intents through the Stripe API."""

    def __init__(self, api_key: str) -> None:
        self.api_key = api_key

    def create_payment_intent(
        self,
        amount: int,
        currency: str,
        payment_method_types: list[str],
        metadata: dict[str, Any] | None = None,
    ) -> str:
        """
        Create a Stripe PaymentIntent and return its client secret.

        Args:
            amount: Amount in minor units (cents for USD)
            currency: Currency code
            payment_method_types: Payment methods the intent accepts
            metadata: Additional metadata to attach to the payment

        Returns:
            The client secret the frontend uses to confirm the payment

        Raises:
            PaymentGatewayError: If the Stripe API call fails
        """
        try:
            intent = stripe.PaymentIntent.create(
                amount=amount,
                currency=currency,
                payment_method_types=payment_method_types,
                metadata=metadata or {},
                api_key=self.api_key,
            )
        except stripe.StripeError as e:
            logger.warning("Stripe rejected payment intent for %s %s: %s", amount, currency, e)
            raise PaymentGatewayError(
                message=str(e.user_message or e),
                code=getattr(e, "code", None),
                http_status=getattr(e, "http_status", None),
            ) from e

        return intent.client_secret


_gateway = StripePaymentGateway(api_key=config.STRIPE_SECRET_KEY)


def get_payment_gateway() -> StripePaymentGateway:
    return _gateway
