# -*- coding: utf-8 -*-
"""Error taxonomy for the order handlers.

Handlers raise these internally and convert them into result values at their
boundary, so callers only ever see a user-safe message and an error code.
"""
import enum


class ErrorCode(str, enum.Enum):
    VALIDATION_ERROR = "validation_error"
    ENTITY_NOT_FOUND = "entity_not_found"
    BUSINESS_RULE_VIOLATION = "business_rule_violation"
    EXTERNAL_SERVICE_FAILURE = "external_service_failure"
    UNEXPECTED_FAULT = "unexpected_fault"


INVALID_EMAIL_MESSAGE = "Invalid email address"
ORDER_HISTORY_SENT_MESSAGE = (
    "Check your email to view your order history and download your products."
)
EMAIL_SEND_FAILED_MESSAGE = "There was an error sending your email. Please try again."
PRODUCT_NOT_FOUND_MESSAGE = "Product not found"
COUPON_EXPIRED_MESSAGE = "Coupon has expired"
PAYMENT_INTENT_FAILED_MESSAGE = "Failed to create payment intent"
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred. Please try again later."


class OrderError(Exception):
    """Base class for recoverable order-flow errors."""

    code = ErrorCode.UNEXPECTED_FAULT
    message = UNEXPECTED_ERROR_MESSAGE

    def __init__(self, message: str = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class InvalidEmailError(OrderError):
    code = ErrorCode.VALIDATION_ERROR
    message = INVALID_EMAIL_MESSAGE


class ProductNotFoundError(OrderError):
    code = ErrorCode.ENTITY_NOT_FOUND
    message = PRODUCT_NOT_FOUND_MESSAGE


class CouponExpiredError(OrderError):
    code = ErrorCode.BUSINESS_RULE_VIOLATION
    message = COUPON_EXPIRED_MESSAGE


class PaymentIntentCreationError(OrderError):
    code = ErrorCode.EXTERNAL_SERVICE_FAILURE
    message = PAYMENT_INTENT_FAILED_MESSAGE


class EmailDeliveryError(OrderError):
    code = ErrorCode.EXTERNAL_SERVICE_FAILURE
    message = EMAIL_SEND_FAILED_MESSAGE
