"""
Logging Infrastructure

Structured JSON logging, structlog loggers and operation timing.
"""

from .logging_config import (
    CheckoutJsonFormatter,
    PerformanceLogger,
    ProductionLogger,
    get_structured_logger,
)

__all__ = [
    "CheckoutJsonFormatter",
    "PerformanceLogger",
    "ProductionLogger",
    "get_structured_logger",
]
