# -*- coding: utf-8 -*-
"""
Stripe payment processor adapter.

Creates PaymentIntents for storefront purchases. The Stripe SDK is blocking,
so calls are dispatched with ``asyncio.to_thread``.
"""
import asyncio
import os
from typing import Dict, Optional

import stripe

from storefront.infra.log import get_logger

logger = get_logger('storefront.payments')


class PaymentServiceError(Exception):
    """Raised when the payment processor cannot be used at all."""


class PaymentService:
    """Thin wrapper over ``stripe.PaymentIntent``."""

    def __init__(self, api_key: Optional[str] = None, currency: str = "usd"):
        self.api_key = (api_key or os.getenv("STRIPE_SECRET_KEY", "")).strip()
        self.currency = currency.lower()

        if not self.api_key:
            logger.warning("STRIPE_SECRET_KEY not set - payment intents cannot be created")

    def _create(self, amount: int, metadata: Dict[str, str]):
        if not self.api_key:
            raise PaymentServiceError("STRIPE_SECRET_KEY missing")

        try:
            intent = stripe.PaymentIntent.create(
                amount=amount,
                currency=self.currency,
                metadata=metadata,
                api_key=self.api_key,
            )
        except stripe.StripeError as e:
            msg = getattr(e, "user_message", None) or str(e)
            logger.log_payment_event('intent_create', success=False,
                                     amount=amount, reason=msg)
            raise

        logger.log_payment_event('intent_create', success=True, amount=amount,
                                 payment_intent_id=getattr(intent, "id", None))
        return intent

    async def create_payment_intent(self, amount: int, metadata: Dict[str, str]):
        """
        Create a PaymentIntent for ``amount`` (smallest currency unit).

        Args:
            amount: Amount to charge
            metadata: Opaque key/value pairs stored on the intent for reconciliation

        Returns:
            The Stripe PaymentIntent object; its ``client_secret`` may be missing
            on a malformed response.

        Raises:
            PaymentServiceError: Stripe is not configured
            stripe.StripeError: The processor rejected the request
        """
        return await asyncio.to_thread(self._create, amount, metadata)
