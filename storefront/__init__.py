# -*- coding: utf-8 -*-
"""Storefront order fulfillment service."""

__version__ = "0.1.0"
