# -*- coding: utf-8 -*-
"""
Unified database infrastructure module.

All models and services import the SQLAlchemy instance from here.
"""

from storefront.database import db

__all__ = ["db"]
