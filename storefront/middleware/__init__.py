# -*- coding: utf-8 -*-
"""
Middleware package for the storefront API
"""

from .errors import register_error_handlers, create_validation_error_response

__all__ = [
    'register_error_handlers',
    'create_validation_error_response',
]
