# -*- coding: utf-8 -*-
"""Product model."""
import uuid

from storefront.infra.db import db
from storefront.utils.clock import utcnow


class Product(db.Model):
    __tablename__ = "products"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = db.Column(db.String(255), nullable=False)
    price_in_cents = db.Column(db.Integer, nullable=False)  # smallest currency unit
    file_path = db.Column(db.Text, nullable=False)
    image_path = db.Column(db.Text, nullable=False)
    description = db.Column(db.Text, nullable=False)
    is_available_for_purchase = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    orders = db.relationship("Order", back_populates="product")
    download_verifications = db.relationship(
        "DownloadVerification", back_populates="product", cascade="all, delete-orphan"
    )
