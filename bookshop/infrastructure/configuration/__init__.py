"""
Configuration package
"""

from .config import ConfigValidator, CouponRule, Settings, get_config, reset_config

__all__ = ["ConfigValidator", "CouponRule", "Settings", "get_config", "reset_config"]
