# -*- coding: utf-8 -*-
"""Sample catalog for local development (flask seed-catalog)."""
from storefront.database.db import db
from storefront.models import DiscountCode, DiscountCodeType, Product

SAMPLE_PRODUCTS = [
    {
        "name": "Python Patterns Handbook",
        "price_in_cents": 2999,
        "file_path": "products/python-patterns-handbook.pdf",
        "image_path": "/products/python-patterns-handbook.jpg",
        "description": "A field guide to idiomatic Python.",
    },
    {
        "name": "SQL Cheat Sheet",
        "price_in_cents": 499,
        "file_path": "products/sql-cheat-sheet.pdf",
        "image_path": "/products/sql-cheat-sheet.jpg",
        "description": "Every query you keep looking up, on two pages.",
    },
    {
        "name": "Icon Pack",
        "price_in_cents": 1500,
        "file_path": "products/icon-pack.zip",
        "image_path": "/products/icon-pack.jpg",
        "description": "400 line icons in SVG and PNG.",
    },
]


def seed_catalog() -> int:
    """Seeds an empty catalog with sample products and discount codes.

    Returns the number of products created (0 when the catalog is not empty).
    """
    if Product.query.first() is not None:
        return 0

    products = [Product(**data) for data in SAMPLE_PRODUCTS]
    db.session.add_all(products)

    db.session.add(DiscountCode(
        code="WELCOME10",
        discount_amount=10,
        discount_type=DiscountCodeType.PERCENTAGE,
        all_products=True,
    ))
    db.session.add(DiscountCode(
        code="HANDBOOK5",
        discount_amount=5,
        discount_type=DiscountCodeType.FIXED,
        limit=100,
        products=[products[0]],
    ))

    db.session.commit()
    return len(products)
