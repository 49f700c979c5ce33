# -*- coding: utf-8 -*-
"""Application factory for the storefront API."""
import os
from typing import Optional

import click
from flask import Flask
from flask_cors import CORS

from storefront.config import Config, default_database_url
from storefront.database import db

# Observability imports
from storefront.services.metrics import init_metrics
from storefront.services.request_context import init_request_context
from storefront.services.structured_logging import init_logging


def _register_cli(app: Flask) -> None:
    @app.cli.command("seed-catalog")
    def seed_catalog_command():
        """Insert sample products and discount codes into an empty catalog."""
        from storefront.database.seed import seed_catalog
        created = seed_catalog()
        if created:
            click.echo(f"Seeded {created} products")
        else:
            click.echo("Catalog already populated, nothing to seed")


def create_app(config: Optional[dict] = None) -> Flask:
    app = Flask(__name__)
    app.url_map.strict_slashes = False

    # --- Core config ---
    app.config.from_object(Config)
    if config:
        app.config.update(config)
    if not app.config.get("SQLALCHEMY_DATABASE_URI"):
        app.config["SQLALCHEMY_DATABASE_URI"] = default_database_url()

    # --- DB config ---
    db.init_app(app)

    # --- CORS ---
    cors_origins = [
        origin.strip()
        for origin in app.config["CORS_ALLOWED_ORIGINS"].split(",")
        if origin.strip()
    ]
    CORS(app, resources={
        r"/api/*": {
            "origins": cors_origins,
            "methods": ["GET", "POST", "OPTIONS"],
            "allow_headers": ["Content-Type", "X-Request-ID"],
            "supports_credentials": False,
            "max_age": 600,
        }}
    )

    # --- Initialize observability ---
    init_request_context(app)
    init_logging(app)
    init_metrics(app)

    # --- Error handlers ---
    from storefront.middleware.errors import register_error_handlers
    register_error_handlers(app)

    # --- Order handlers and their collaborators ---
    from storefront.services.order_service import init_order_service
    init_order_service(app)

    # --- Mount blueprints ---
    from storefront.routes import health, orders
    app.register_blueprint(health.health_bp)
    app.register_blueprint(orders.orders_bp, url_prefix="/api")

    _register_cli(app)

    # --- DB init ---
    with app.app_context():
        # Only auto-create tables in testing or if explicitly enabled
        is_testing = app.config.get("TESTING") or os.getenv("TESTING", "false").lower() == "true"
        if is_testing or app.config.get("STOREFRONT_DB_AUTOCREATE"):
            import storefront.models  # noqa: F401  registers tables on db.metadata
            db.create_all()

    return app
