# -*- coding: utf-8 -*-
"""Customer model; the email address is the customer identity."""
import uuid

from storefront.infra.db import db
from storefront.utils.clock import utcnow


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    orders = db.relationship("Order", back_populates="user", order_by="Order.created_at")
