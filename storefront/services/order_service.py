# -*- coding: utf-8 -*-
"""
Order fulfillment handlers.

- ``email_order_history``: mint fresh download links for every past order of a
  customer and email them. Unknown addresses get the same success message as
  known ones so the form cannot be used to probe for accounts.
- ``create_payment_intent``: record an order at the (possibly discounted)
  price and open a Stripe PaymentIntent for it.

The order row is committed before the processor is called; reconciling orders
whose payment never completes happens outside this service.

Each handler runs under ``asyncio.wait_for``. Cancellation only lands at real
suspension points (the SendGrid and Stripe calls run in threads), so a database
statement that hangs has to be bounded by the database's own statement timeout.
"""
import asyncio
from datetime import timedelta
from typing import Any, Optional

from flask import Flask, current_app
from pydantic import ValidationError

from storefront.errors import (
    EMAIL_SEND_FAILED_MESSAGE,
    ORDER_HISTORY_SENT_MESSAGE,
    UNEXPECTED_ERROR_MESSAGE,
    CouponExpiredError,
    EmailDeliveryError,
    ErrorCode,
    InvalidEmailError,
    OrderError,
    PaymentIntentCreationError,
    ProductNotFoundError,
)
from storefront.infra.log import get_logger
from storefront.schemas.orders import (
    CustomerEmail,
    OrderHistoryEntry,
    OrderHistoryRequest,
    OrderHistoryResult,
    PaymentIntentResult,
    ProductSummary,
)
from storefront.services.discount_codes import get_discounted_amount
from storefront.services.email_service import EmailService
from storefront.services.metrics import get_metrics_service
from storefront.services.order_store import OrderStore
from storefront.services.payment_service import PaymentService
from storefront.services.request_context import bind_log_context
from storefront.utils.clock import utcnow

logger = get_logger('storefront.orders')


class OrderService:
    """Runs the order history and payment intent flows against its collaborators."""

    def __init__(
        self,
        store: Optional[OrderStore] = None,
        email_service: Optional[EmailService] = None,
        payment_service: Optional[PaymentService] = None,
        download_ttl: timedelta = timedelta(hours=24),
        timeout_seconds: Optional[float] = 30.0,
        clock=utcnow,
    ):
        self.store = store or OrderStore()
        self.email_service = email_service or EmailService()
        self.payment_service = payment_service or PaymentService()
        self.download_ttl = download_ttl
        self.timeout_seconds = timeout_seconds
        self.clock = clock

    # --- order history ---

    async def email_order_history(self, prev_state: Any, email: Any) -> OrderHistoryResult:
        """
        Email a customer their order history with fresh download links.

        Args:
            prev_state: Previous form state; ignored
            email: Raw email value submitted by the caller

        Returns:
            OrderHistoryResult with either ``message`` or ``error`` set
        """
        try:
            request = OrderHistoryRequest(email=email)
        except ValidationError:
            self._record_history('invalid_email')
            error = InvalidEmailError()
            return OrderHistoryResult(error=error.message, error_code=error.code)

        try:
            return await asyncio.wait_for(
                self._send_order_history(request.email), timeout=self.timeout_seconds)
        except OrderError as e:
            self._record_history('email_failed')
            return OrderHistoryResult(error=e.message, error_code=e.code)
        except Exception:
            logger.exception("Order history request failed")
            await self._rollback_quietly()
            self._record_history('error')
            return OrderHistoryResult(error=EMAIL_SEND_FAILED_MESSAGE,
                                      error_code=ErrorCode.UNEXPECTED_FAULT)

    async def _send_order_history(self, email: str) -> OrderHistoryResult:
        user = await self.store.find_user_with_orders(email)
        if user is None:
            logger.log_order_event('history_requested', known_customer=False)
            self._record_history('unknown_customer')
            return OrderHistoryResult(message=ORDER_HISTORY_SENT_MESSAGE)

        bind_log_context(user_id=user.id)

        # wait for the whole batch before failing so the rollback covers every mint
        results = await asyncio.gather(
            *(self._history_entry(order) for order in user.orders),
            return_exceptions=True)
        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            raise failures[0]
        entries = list(results)

        await self.store.commit()
        logger.log_order_event('history_requested', known_customer=True,
                               verifications_issued=len(entries))

        result = await self.email_service.send_order_history(
            user.email, entries,
            expires_in_hours=int(self.download_ttl.total_seconds() // 3600))
        if not result.ok:
            raise EmailDeliveryError()

        self._record_history('sent', verifications_issued=len(entries))
        return OrderHistoryResult(message=ORDER_HISTORY_SENT_MESSAGE)

    async def _history_entry(self, order) -> OrderHistoryEntry:
        verification = await self.store.create_download_verification(
            product_id=order.product.id,
            expires_at=self.clock() + self.download_ttl,
        )
        return OrderHistoryEntry(
            id=order.id,
            price_paid_in_cents=order.price_paid_in_cents,
            created_at=order.created_at,
            product=ProductSummary.model_validate(order.product),
            download_verification_id=verification.id,
        )

    # --- payment intent ---

    async def create_payment_intent(self, email: str, product_id: str,
                                    discount_code_id: Optional[str] = None) -> PaymentIntentResult:
        """
        Record an order and open a PaymentIntent for it.

        Args:
            email: Customer email; the customer is created if missing
            product_id: Product being purchased
            discount_code_id: Optional discount code to apply

        Returns:
            PaymentIntentResult with ``client_secret`` on success, otherwise
            ``error`` and ``error_code``
        """
        try:
            customer = CustomerEmail(email=email)
        except ValidationError:
            self._record_payment(ErrorCode.VALIDATION_ERROR.value)
            error = InvalidEmailError()
            return PaymentIntentResult(error=error.message, error_code=error.code)

        try:
            return await asyncio.wait_for(
                self._create_payment_intent(customer.email, product_id, discount_code_id),
                timeout=self.timeout_seconds)
        except OrderError as e:
            await self._rollback_quietly()
            self._record_payment(e.code.value)
            return PaymentIntentResult(error=e.message, error_code=e.code)
        except Exception:
            logger.exception("An unexpected error occurred creating a payment intent",
                             product_id=product_id)
            await self._rollback_quietly()
            self._record_payment(ErrorCode.UNEXPECTED_FAULT.value)
            return PaymentIntentResult(error=UNEXPECTED_ERROR_MESSAGE,
                                       error_code=ErrorCode.UNEXPECTED_FAULT)

    async def _create_payment_intent(self, email: str, product_id: str,
                                     discount_code_id: Optional[str]) -> PaymentIntentResult:
        bind_log_context(product_id=product_id)
        product = await self.store.get_product(product_id)
        if product is None:
            raise ProductNotFoundError()

        discount_code = None
        if discount_code_id is not None:
            discount_code = await self.store.find_usable_discount_code(
                discount_code_id, product.id, self.clock())
            if discount_code is None:
                raise CouponExpiredError()

        user, created = await self.store.find_or_create_user(email)
        bind_log_context(user_id=user.id)
        if created:
            logger.log_order_event('customer_created')

        if discount_code is None:
            amount = product.price_in_cents
        else:
            amount = get_discounted_amount(discount_code, product.price_in_cents)
        applied_code_id = discount_code.id if discount_code is not None else None

        order = await self.store.create_order(
            user_id=user.id,
            product_id=product.id,
            price_paid_in_cents=amount,
            discount_code_id=applied_code_id,
        )
        order_id = order.id
        await self.store.commit()
        bind_log_context(order_id=order_id, discount_code_id=applied_code_id)
        logger.log_order_event('created', amount=amount)

        intent = await self.payment_service.create_payment_intent(
            amount,
            metadata={
                "product_id": product_id,
                # Stripe metadata values are strings; empty means no code
                "discount_code_id": applied_code_id or "",
            },
        )
        client_secret = getattr(intent, "client_secret", None)
        if not client_secret:
            logger.log_payment_event('intent_create', success=False,
                                     reason='missing_client_secret')
            raise PaymentIntentCreationError()

        self._record_payment('created')
        return PaymentIntentResult(client_secret=client_secret, order_id=order_id)

    # --- helpers ---

    async def _rollback_quietly(self):
        try:
            await self.store.rollback()
        except Exception:
            logger.exception("Rollback failed")

    def _record_history(self, outcome: str, verifications_issued: int = 0):
        metrics = get_metrics_service()
        if metrics:
            metrics.record_order_history(outcome, verifications_issued)

    def _record_payment(self, outcome: str):
        metrics = get_metrics_service()
        if metrics:
            metrics.record_payment_intent(outcome)


def init_order_service(app: Flask) -> OrderService:
    """Build the app's OrderService from its config."""
    service = OrderService(
        store=OrderStore(),
        email_service=EmailService(
            api_key=app.config.get('SENDGRID_API_KEY'),
            from_email=app.config.get('SENDER_EMAIL'),
            from_name=app.config.get('SENDER_NAME'),
            base_url=app.config.get('STOREFRONT_BASE_URL'),
        ),
        payment_service=PaymentService(
            api_key=app.config.get('STRIPE_SECRET_KEY'),
            currency=app.config.get('PAYMENT_CURRENCY', 'usd'),
        ),
        download_ttl=timedelta(hours=app.config.get('DOWNLOAD_VERIFICATION_TTL_HOURS', 24)),
        timeout_seconds=app.config.get('ORDER_REQUEST_TIMEOUT_SECONDS', 30.0),
    )
    app.extensions['order_service'] = service
    return service


def get_order_service() -> OrderService:
    """OrderService bound to the current app."""
    return current_app.extensions['order_service']


async def email_order_history(prev_state: Any, email: Any) -> OrderHistoryResult:
    return await get_order_service().email_order_history(prev_state, email)


async def create_payment_intent(email: str, product_id: str,
                                discount_code_id: Optional[str] = None) -> PaymentIntentResult:
    return await get_order_service().create_payment_intent(email, product_id, discount_code_id)
