# -*- coding: utf-8 -*-
"""
Tests for the order history notifier.
"""
import asyncio
from datetime import timedelta
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from storefront.errors import (
    EMAIL_SEND_FAILED_MESSAGE,
    INVALID_EMAIL_MESSAGE,
    ORDER_HISTORY_SENT_MESSAGE,
    ErrorCode,
)
from storefront.models import DownloadVerification
from storefront.services.order_store import OrderStore
from tests.conftest import FIXED_NOW, FakeEmailService


def _request_history(order_service, email):
    return asyncio.run(order_service.email_order_history(None, email))


@pytest.fixture
def customer_with_orders(make_user, make_product, make_order):
    user = make_user("buyer@example.com")
    handbook = make_product()
    icons = make_product(name="Icon Pack", price_in_cents=1500)
    orders = [
        make_order(user, handbook),
        make_order(user, icons),
        make_order(user, handbook, price_paid_in_cents=2499),
    ]
    return user, orders


class TestInvalidEmail:

    @pytest.mark.parametrize("email", [None, "", "   ", "not-an-email", "buyer@", "@example.com", 42])
    def test_rejected_without_touching_store(self, order_service, email_service, email):
        store = MagicMock(spec=OrderStore)
        order_service.store = store

        result = _request_history(order_service, email)

        assert result.error == INVALID_EMAIL_MESSAGE
        assert result.error_code == ErrorCode.VALIDATION_ERROR
        assert result.message is None
        assert store.method_calls == []
        assert email_service.sent == []


class TestUnknownCustomer:

    def test_returns_generic_success(self, order_service, email_service):
        result = _request_history(order_service, "nobody@example.com")

        assert result.message == ORDER_HISTORY_SENT_MESSAGE
        assert result.error is None
        assert email_service.sent == []
        assert DownloadVerification.query.count() == 0

    def test_indistinguishable_from_known_customer(self, order_service, customer_with_orders):
        known = _request_history(order_service, "buyer@example.com")
        unknown = _request_history(order_service, "nobody@example.com")

        assert known.model_dump() == unknown.model_dump()


class TestKnownCustomer:

    def test_mints_one_verification_per_order(self, order_service, email_service,
                                              customer_with_orders):
        user, orders = customer_with_orders

        result = _request_history(order_service, "buyer@example.com")

        assert result.message == ORDER_HISTORY_SENT_MESSAGE
        verifications = DownloadVerification.query.all()
        assert len(verifications) == len(orders)
        assert all(v.expires_at == FIXED_NOW + timedelta(hours=24) for v in verifications)
        assert sorted(v.product_id for v in verifications) == \
            sorted(order.product_id for order in orders)

    def test_email_lists_every_order_with_its_verification(self, order_service, email_service,
                                                           customer_with_orders):
        user, orders = customer_with_orders

        _request_history(order_service, "buyer@example.com")

        assert len(email_service.sent) == 1
        sent = email_service.sent[0]
        assert sent.to_email == "buyer@example.com"
        assert sent.expires_in_hours == 24
        assert {entry.id for entry in sent.entries} == {order.id for order in orders}
        assert {entry.download_verification_id for entry in sent.entries} == \
            {v.id for v in DownloadVerification.query.all()}
        handbook_entry = next(e for e in sent.entries if e.price_paid_in_cents == 2499)
        assert handbook_entry.product.name == "Python Patterns Handbook"

    def test_repeated_requests_mint_fresh_verifications(self, order_service, email_service,
                                                       customer_with_orders):
        user, orders = customer_with_orders

        _request_history(order_service, "buyer@example.com")
        _request_history(order_service, "buyer@example.com")

        assert DownloadVerification.query.count() == 2 * len(orders)
        first, second = email_service.sent
        assert not ({e.download_verification_id for e in first.entries}
                    & {e.download_verification_id for e in second.entries})

    def test_customer_without_orders_gets_empty_history(self, order_service, email_service,
                                                         make_user):
        make_user("new@example.com")

        result = _request_history(order_service, "new@example.com")

        assert result.message == ORDER_HISTORY_SENT_MESSAGE
        assert email_service.sent[0].entries == []
        assert DownloadVerification.query.count() == 0

    def test_surrounding_whitespace_is_ignored(self, order_service, email_service,
                                               customer_with_orders):
        _request_history(order_service, "  buyer@example.com ")

        assert email_service.sent[0].to_email == "buyer@example.com"

    def test_ttl_follows_service_setting(self, order_service, email_service,
                                         customer_with_orders):
        order_service.download_ttl = timedelta(hours=2)

        _request_history(order_service, "buyer@example.com")

        assert email_service.sent[0].expires_in_hours == 2
        assert {v.expires_at for v in DownloadVerification.query.all()} == \
            {FIXED_NOW + timedelta(hours=2)}


class TestFailures:

    def test_provider_error(self, order_service, customer_with_orders):
        order_service.email_service = FakeEmailService(error="HTTP Error 403: Forbidden")

        result = _request_history(order_service, "buyer@example.com")

        assert result.error == EMAIL_SEND_FAILED_MESSAGE
        assert result.error_code == ErrorCode.EXTERNAL_SERVICE_FAILURE
        assert result.message is None

    def test_store_fault_is_masked(self, order_service, email_service):
        store = MagicMock(spec=OrderStore)
        store.find_user_with_orders.side_effect = OperationalError(
            "SELECT users", {}, Exception("password authentication failed"))
        order_service.store = store

        result = _request_history(order_service, "buyer@example.com")

        assert result.error == EMAIL_SEND_FAILED_MESSAGE
        assert result.error_code == ErrorCode.UNEXPECTED_FAULT
        assert "password" not in result.error
        store.rollback.assert_awaited_once()
        assert email_service.sent == []

    def test_partial_minting_failure_rolls_back_batch(self, order_service, email_service,
                                                      customer_with_orders):
        class FlakyStore(OrderStore):
            minted = 0

            async def create_download_verification(self, product_id, expires_at):
                self.minted += 1
                if self.minted == 2:
                    raise OperationalError("INSERT INTO download_verifications", {},
                                           Exception("disk I/O error"))
                return await super().create_download_verification(product_id, expires_at)

        store = FlakyStore()
        order_service.store = store

        result = _request_history(order_service, "buyer@example.com")

        assert result.error == EMAIL_SEND_FAILED_MESSAGE
        assert result.error_code == ErrorCode.UNEXPECTED_FAULT
        assert "disk" not in result.error
        assert store.minted == 3
        assert DownloadVerification.query.count() == 0
        assert email_service.sent == []

    def test_timeout(self, order_service, customer_with_orders):
        class SlowEmailService(FakeEmailService):
            async def send_order_history(self, *args, **kwargs):
                await asyncio.sleep(1)
                return await super().send_order_history(*args, **kwargs)

        order_service.email_service = SlowEmailService()
        order_service.timeout_seconds = 0.01

        result = _request_history(order_service, "buyer@example.com")

        assert result.error == EMAIL_SEND_FAILED_MESSAGE
        assert result.error_code == ErrorCode.UNEXPECTED_FAULT


def test_module_level_handler_uses_app_service(app, order_service, email_service,
                                               customer_with_orders):
    from storefront.services.order_service import email_order_history

    result = asyncio.run(email_order_history({"message": "stale"}, "buyer@example.com"))

    assert result.message == ORDER_HISTORY_SENT_MESSAGE
    assert len(email_service.sent) == 1
