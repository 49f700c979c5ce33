# -*- coding: utf-8 -*-
"""Download verification model."""
import uuid

from storefront.infra.db import db
from storefront.utils.clock import utcnow


class DownloadVerification(db.Model):
    """Short-lived authorization to download a purchased product's file."""
    __tablename__ = "download_verifications"

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    expires_at = db.Column(db.DateTime, nullable=False)
    product_id = db.Column(db.String(36), db.ForeignKey("products.id", ondelete="CASCADE"),
                           nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    product = db.relationship("Product", back_populates="download_verifications")
