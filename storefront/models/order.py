# -*- coding: utf-8 -*-
"""Order model."""
import uuid

from storefront.infra.db import db
from storefront.utils.clock import utcnow


class Order(db.Model):
    __tablename__ = "orders"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    price_paid_in_cents = db.Column(db.Integer, nullable=False)

    user_id = db.Column(db.String(36), db.ForeignKey("users.id", ondelete="CASCADE"),
                        nullable=False, index=True)
    product_id = db.Column(db.String(36), db.ForeignKey("products.id", ondelete="RESTRICT"),
                           nullable=False, index=True)
    discount_code_id = db.Column(db.String(36),
                                 db.ForeignKey("discount_codes.id", ondelete="RESTRICT"),
                                 nullable=True)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = db.relationship("User", back_populates="orders")
    product = db.relationship("Product", back_populates="orders")
    discount_code = db.relationship("DiscountCode", back_populates="orders")
