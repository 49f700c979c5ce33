# -*- coding: utf-8 -*-
"""
Data store for the order handlers.

Every method is a coroutine so the handlers treat store access as a
suspension point; the work itself runs on the request's SQLAlchemy session.
"""
from datetime import datetime
from typing import Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from storefront.infra.db import db
from storefront.models import DiscountCode, DownloadVerification, Order, Product, User
from storefront.services.discount_codes import usable_discount_code_filter


class OrderStore:
    """Customer, product, discount code, order and download verification access."""

    def __init__(self, session=None):
        self._session = session

    @property
    def session(self):
        return self._session if self._session is not None else db.session

    async def find_user_with_orders(self, email: str) -> Optional[User]:
        """Load a user by exact email with orders and their products eagerly."""
        stmt = (
            select(User)
            .where(User.email == email)
            .options(selectinload(User.orders).selectinload(Order.product))
        )
        return self.session.execute(stmt).scalar_one_or_none()

    async def get_product(self, product_id: str) -> Optional[Product]:
        return self.session.get(Product, product_id)

    async def find_usable_discount_code(self, discount_code_id: str, product_id: str,
                                        now: Optional[datetime] = None) -> Optional[DiscountCode]:
        stmt = select(DiscountCode).where(
            DiscountCode.id == discount_code_id,
            usable_discount_code_filter(product_id, now),
        )
        return self.session.execute(stmt).scalar_one_or_none()

    async def find_or_create_user(self, email: str) -> Tuple[User, bool]:
        """
        Ensure a user exists for ``email``.

        Returns:
            (user, created). An existing user is returned untouched.
        """
        user = self.session.execute(
            select(User).where(User.email == email)
        ).scalar_one_or_none()
        if user is not None:
            return user, False

        user = User(email=email)
        self.session.add(user)
        try:
            self.session.flush()
        except IntegrityError:
            # lost a concurrent insert race on the unique email; nothing else
            # has been written in this transaction yet
            self.session.rollback()
            user = self.session.execute(
                select(User).where(User.email == email)
            ).scalar_one()
            return user, False
        return user, True

    async def create_order(self, user_id: str, product_id: str, price_paid_in_cents: int,
                           discount_code_id: Optional[str] = None) -> Order:
        order = Order(
            user_id=user_id,
            product_id=product_id,
            discount_code_id=discount_code_id,
            price_paid_in_cents=price_paid_in_cents,
        )
        self.session.add(order)
        self.session.flush()
        return order

    async def create_download_verification(self, product_id: str,
                                           expires_at: datetime) -> DownloadVerification:
        verification = DownloadVerification(product_id=product_id, expires_at=expires_at)
        self.session.add(verification)
        self.session.flush()
        return verification

    async def commit(self):
        self.session.commit()

    async def rollback(self):
        self.session.rollback()
