# -*- coding: utf-8 -*-
"""
Request and result schemas for the order handlers.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from storefront.errors import ErrorCode


class CustomerEmail(BaseModel):
    """
    A customer identity.

    Both order handlers key customers on this normalized form (surrounding
    whitespace stripped, domain lowercased).
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    email: EmailStr


class OrderHistoryRequest(CustomerEmail):
    """Email submitted to the order history form."""


class CreatePaymentIntentRequest(CustomerEmail):
    """Body of POST /api/orders/payment-intent."""
    model_config = ConfigDict(extra='forbid', str_strip_whitespace=True)

    product_id: str = Field(..., min_length=1, max_length=36)
    discount_code_id: Optional[str] = Field(None, min_length=1, max_length=36)


class ProductSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    image_path: str
    description: str


class OrderHistoryEntry(BaseModel):
    """One past order, enriched with a freshly minted download authorization."""
    id: str
    price_paid_in_cents: int
    created_at: datetime
    product: ProductSummary
    download_verification_id: str


class OrderHistoryResult(BaseModel):
    """Outcome of the order history notifier: a message or an error, never both."""
    message: Optional[str] = None
    error: Optional[str] = None
    error_code: Optional[ErrorCode] = None

    @model_validator(mode='after')
    def _exactly_one_outcome(self):
        if (self.message is None) == (self.error is None):
            raise ValueError('exactly one of message or error must be set')
        return self


class PaymentIntentResult(BaseModel):
    """Outcome of the payment intent creator."""
    client_secret: Optional[str] = None
    order_id: Optional[str] = None
    error: Optional[str] = None
    error_code: Optional[ErrorCode] = None

    @model_validator(mode='after')
    def _exactly_one_outcome(self):
        if (self.client_secret is None) == (self.error is None):
            raise ValueError('exactly one of client_secret or error must be set')
        return self

    @property
    def ok(self) -> bool:
        return self.error is None
