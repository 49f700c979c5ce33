# -*- coding: utf-8 -*-
import os
import tempfile
from datetime import datetime, timedelta
from types import SimpleNamespace

import pytest

# Set test environment variables
os.environ["TESTING"] = "true"
os.environ["STOREFRONT_LOG_JSON"] = "true"

from storefront.services.email_service import EmailSendResult  # noqa: E402

FIXED_NOW = datetime(2026, 10, 19, 12, 0, 0)


class FakeEmailService:
    """Records order history emails instead of calling SendGrid."""

    def __init__(self, error=None):
        self.error = error
        self.sent = []

    async def send_order_history(self, to_email, entries, expires_in_hours=24):
        self.sent.append(SimpleNamespace(
            to_email=to_email,
            entries=list(entries),
            expires_in_hours=expires_in_hours,
        ))
        return EmailSendResult(error=self.error, status_code=None if self.error else 202)


class FakePaymentService:
    """Returns canned PaymentIntents instead of calling Stripe."""

    def __init__(self, client_secret="pi_test_123_secret_abc", error=None):
        self.client_secret = client_secret
        self.error = error
        self.calls = []

    async def create_payment_intent(self, amount, metadata):
        self.calls.append({"amount": amount, "metadata": metadata})
        if self.error is not None:
            raise self.error
        return SimpleNamespace(id="pi_test_123", client_secret=self.client_secret)


@pytest.fixture
def app():
    """Create and configure a new app instance for each test."""
    db_fd, db_path = tempfile.mkstemp()
    from storefront.factory import create_app
    from storefront.database import db
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{db_path}",
        "STRIPE_SECRET_KEY": "sk_test_dummy_key_for_testing",
        "SENDGRID_API_KEY": None,
    })
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()
    os.close(db_fd)
    os.unlink(db_path)


@pytest.fixture
def client(app):
    """A test client for the app."""
    return app.test_client()


@pytest.fixture
def db_session(app):
    from storefront.database import db
    return db.session


@pytest.fixture
def email_service():
    return FakeEmailService()


@pytest.fixture
def payment_service():
    return FakePaymentService()


@pytest.fixture
def order_service(app, email_service, payment_service):
    """OrderService wired to fakes and a fixed clock, installed on the app."""
    from storefront.services.order_service import OrderService
    from storefront.services.order_store import OrderStore
    service = OrderService(
        store=OrderStore(),
        email_service=email_service,
        payment_service=payment_service,
        download_ttl=timedelta(hours=24),
        timeout_seconds=5.0,
        clock=lambda: FIXED_NOW,
    )
    app.extensions["order_service"] = service
    return service


@pytest.fixture
def make_product(db_session):
    from storefront.models import Product

    def _make(**overrides):
        data = {
            "name": "Python Patterns Handbook",
            "price_in_cents": 2999,
            "file_path": "products/handbook.pdf",
            "image_path": "/products/handbook.jpg",
            "description": "A field guide to idiomatic Python.",
        }
        data.update(overrides)
        product = Product(**data)
        db_session.add(product)
        db_session.commit()
        return product
    return _make


@pytest.fixture
def make_discount_code(db_session):
    from storefront.models import DiscountCode, DiscountCodeType

    def _make(products=(), **overrides):
        data = {
            "code": f"CODE{DiscountCode.query.count() + 1}",
            "discount_amount": 10,
            "discount_type": DiscountCodeType.PERCENTAGE,
            "all_products": False,
        }
        data.update(overrides)
        code = DiscountCode(**data)
        code.products = list(products)
        db_session.add(code)
        db_session.commit()
        return code
    return _make


@pytest.fixture
def make_user(db_session):
    from storefront.models import User

    def _make(email="buyer@example.com"):
        user = User(email=email)
        db_session.add(user)
        db_session.commit()
        return user
    return _make


@pytest.fixture
def make_order(db_session):
    from storefront.models import Order

    def _make(user, product, price_paid_in_cents=None, discount_code=None):
        order = Order(
            user_id=user.id,
            product_id=product.id,
            price_paid_in_cents=(product.price_in_cents
                                 if price_paid_in_cents is None else price_paid_in_cents),
            discount_code_id=discount_code.id if discount_code else None,
        )
        db_session.add(order)
        db_session.commit()
        return order
    return _make


@pytest.fixture
def past_expiry():
    return FIXED_NOW - timedelta(days=1)


@pytest.fixture
def future_expiry():
    return FIXED_NOW + timedelta(days=30)
