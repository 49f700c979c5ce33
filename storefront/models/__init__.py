# -*- coding: utf-8 -*-
"""SQLAlchemy models for customers, products, discount codes, orders and downloads."""
from storefront.infra.db import db

from .user import User
from .product import Product
from .discount_code import DiscountCode, DiscountCodeType, discount_code_products
from .order import Order
from .download_verification import DownloadVerification

__all__ = [
    "db",
    "User",
    "Product",
    "DiscountCode",
    "DiscountCodeType",
    "discount_code_products",
    "Order",
    "DownloadVerification",
]
