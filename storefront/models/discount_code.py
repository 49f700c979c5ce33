# -*- coding: utf-8 -*-
"""
Discount code models.

A code either applies to every product (``all_products``) or to the products
linked through ``discount_code_products``. Usage limits and expiry are checked
by ``storefront.services.discount_codes.usable_discount_code_filter``.
"""
import enum
import uuid

from storefront.infra.db import db
from storefront.utils.clock import utcnow


class DiscountCodeType(str, enum.Enum):
    PERCENTAGE = "PERCENTAGE"
    FIXED = "FIXED"


discount_code_products = db.Table(
    "discount_code_products",
    db.Column("discount_code_id", db.String(36),
              db.ForeignKey("discount_codes.id", ondelete="CASCADE"), primary_key=True),
    db.Column("product_id", db.String(36),
              db.ForeignKey("products.id", ondelete="CASCADE"), primary_key=True),
)


class DiscountCode(db.Model):
    __tablename__ = "discount_codes"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    code = db.Column(db.String(64), unique=True, nullable=False, index=True)

    # PERCENTAGE: whole percent off; FIXED: whole currency units off
    discount_amount = db.Column(db.Integer, nullable=False)
    discount_type = db.Column(db.Enum(DiscountCodeType, native_enum=False), nullable=False)

    uses = db.Column(db.Integer, nullable=False, default=0)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    all_products = db.Column(db.Boolean, nullable=False, default=False)
    limit = db.Column(db.Integer, nullable=True)
    expires_at = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    products = db.relationship("Product", secondary=discount_code_products, lazy="selectin")
    orders = db.relationship("Order", back_populates="discount_code")

    def __repr__(self):
        return f"<DiscountCode {self.code} {self.discount_type.value}:{self.discount_amount}>"
