# -*- coding: utf-8 -*-
"""
Unified logging infrastructure module.
"""

from storefront.services.structured_logging import (
    configure_logging,
    init_logging,
    get_logger,
)

__all__ = ["configure_logging", "init_logging", "get_logger"]
