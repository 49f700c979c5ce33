# -*- coding: utf-8 -*-
"""Environment-driven configuration for the storefront app."""
import os


def _normalize_db_url(url: str) -> str:
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+psycopg://", 1)
    if url.startswith("postgresql://") and "+psycopg://" not in url:
        return url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url


def default_database_url() -> str:
    db_url = os.environ.get("DATABASE_URL")
    if db_url:
        return _normalize_db_url(db_url)
    db_path = os.path.join(os.path.dirname(__file__), "..", "instance", "storefront.db")
    os.makedirs(os.path.dirname(db_path), exist_ok=True)
    return f"sqlite:///{db_path}"


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    STRIPE_SECRET_KEY = os.getenv("STRIPE_SECRET_KEY", "").strip()
    PAYMENT_CURRENCY = os.getenv("PAYMENT_CURRENCY", "usd").lower()

    SENDGRID_API_KEY = os.getenv("SENDGRID_API_KEY")
    SENDER_EMAIL = os.getenv("SENDER_EMAIL", "support@example.com")
    SENDER_NAME = os.getenv("SENDER_NAME", "Support")

    STOREFRONT_BASE_URL = os.getenv("STOREFRONT_BASE_URL", "http://localhost:3000")
    DOWNLOAD_VERIFICATION_TTL_HOURS = int(os.getenv("DOWNLOAD_VERIFICATION_TTL_HOURS", 24))
    ORDER_REQUEST_TIMEOUT_SECONDS = float(os.getenv("ORDER_REQUEST_TIMEOUT_SECONDS", 30))

    CORS_ALLOWED_ORIGINS = os.getenv("CORS_ALLOWED_ORIGINS", "http://localhost:3000")
    STOREFRONT_DB_AUTOCREATE = os.getenv("STOREFRONT_DB_AUTOCREATE", "false").lower() == "true"

