# -*- coding: utf-8 -*-
"""Database package: the shared SQLAlchemy instance and catalog seeding."""
from storefront.database.db import db

__all__ = ["db"]
