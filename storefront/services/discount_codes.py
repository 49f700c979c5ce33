# -*- coding: utf-8 -*-
"""
Discount code pricing helpers.

``usable_discount_code_filter`` is a SQL expression used as a query filter;
``get_discounted_amount`` is a pure function of a code and a base price.
"""
import math
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import and_, or_

from storefront.models import DiscountCode, DiscountCodeType, Product
from storefront.utils.clock import utcnow


def usable_discount_code_filter(product_id: str, now: Optional[datetime] = None):
    """
    Build the "usable for this product" predicate.

    A code is usable when it is active, applies to the product (directly or via
    ``all_products``), has uses left and has not expired.
    """
    now = now or utcnow()
    return and_(
        DiscountCode.is_active.is_(True),
        or_(
            DiscountCode.all_products.is_(True),
            DiscountCode.products.any(Product.id == product_id),
        ),
        or_(DiscountCode.limit.is_(None), DiscountCode.limit > DiscountCode.uses),
        or_(DiscountCode.expires_at.is_(None), DiscountCode.expires_at > now),
    )


def get_discounted_amount(discount_code, price_in_cents: int) -> int:
    """
    Price after applying a discount code, in the smallest currency unit.

    Args:
        discount_code: object with ``discount_type`` and ``discount_amount``
        price_in_cents: product base price

    Returns:
        Discounted price, never above the base price and at least 1 for a
        non-free product.
    """
    price = Decimal(price_in_cents)
    amount = Decimal(discount_code.discount_amount)

    # raises ValueError for unknown types
    discount_type = DiscountCodeType(discount_code.discount_type)
    if discount_type is DiscountCodeType.PERCENTAGE:
        discounted = price - price * amount / Decimal(100)
    else:
        discounted = price - amount * Decimal(100)

    floor = min(1, price_in_cents)
    return min(price_in_cents, max(floor, math.ceil(discounted)))
