"""
Application constants for the bookshop checkout

Centralizes magic numbers and hard-coded values used across layers.
"""

from typing import Final


# Database configuration constants
class DatabaseSettings:
    """Database connection and pool configuration"""

    POOL_RECYCLE_SECONDS: Final[int] = 3600  # 1 hour
    CONNECTION_TIMEOUT_SECONDS: Final[int] = 30

    # Production settings
    PRODUCTION_POOL_SIZE: Final[int] = 20
    PRODUCTION_MAX_OVERFLOW: Final[int] = 30

    # Development settings
    DEVELOPMENT_POOL_SIZE: Final[int] = 5
    DEVELOPMENT_MAX_OVERFLOW: Final[int] = 10


# Logging configuration constants
class LoggingSettings:
    """Logging file sizes and rotation settings"""

    MAX_LOG_FILE_SIZE: Final[int] = 10 * 1024 * 1024  # 10MB
    MAIN_LOG_BACKUP_COUNT: Final[int] = 10
    ERROR_LOG_BACKUP_COUNT: Final[int] = 10
    SLOW_OPERATION_THRESHOLD_MS: Final[int] = 2000


# Pricing defaults, all amounts in minor units (paise)
class PricingSettings:
    """Default pricing policy values"""

    FREE_SHIPPING_THRESHOLD: Final[int] = 50000
    SHIPPING_CHARGE: Final[int] = 4000
    COD_SURCHARGE: Final[int] = 4000
    TAX_RATE: Final[str] = "0.05"
    CURRENCY: Final[str] = "INR"
    CURRENCY_SYMBOL: Final[str] = "₹"


# Validation constants
class ValidationSettings:
    """Input validation limits and constraints"""

    PHONE_PATTERN: Final[str] = r"^[6-9]\d{9}$"
    ZIP_CODE_PATTERN: Final[str] = r"^\d{6}$"
    UPI_PATTERN: Final[str] = r"^[\w.\-]{2,256}@[a-zA-Z]{2,64}$"
    MIN_CARD_DIGITS: Final[int] = 12
    MAX_CARD_DIGITS: Final[int] = 19
    MAX_CART_ITEM_QUANTITY: Final[int] = 99
    MAX_NAME_LENGTH: Final[int] = 100
    MAX_STREET_LENGTH: Final[int] = 500
    MAX_SAVED_ADDRESSES: Final[int] = 5


# Payment method option tables
class PaymentSettings:
    """Accepted banks and wallets"""

    NETBANKING_BANKS: Final[dict] = {
        "sbi": "State Bank of India",
        "hdfc": "HDFC Bank",
        "icici": "ICICI Bank",
        "axis": "Axis Bank",
        "kotak": "Kotak Mahindra Bank",
        "pnb": "Punjab National Bank",
    }
    WALLETS: Final[dict] = {
        "paytm": "Paytm",
        "phonepe": "PhonePe",
        "amazonpay": "Amazon Pay",
    }


# Error codes and messages
class ErrorCodes:
    """Standardized error codes and messages"""

    GENERAL_ERROR: Final[str] = "GENERAL_ERROR"
    DATABASE_ERROR: Final[str] = "DATABASE_ERROR"
    VALIDATION_ERROR: Final[str] = "VALIDATION_ERROR"
    BUSINESS_ERROR: Final[str] = "BUSINESS_ERROR"
    SUBMISSION_ERROR: Final[str] = "SUBMISSION_ERROR"

    # User-friendly messages
    GENERIC_ERROR_MESSAGE: Final[str] = "An error occurred. Please try again."
    DATABASE_ERROR_MESSAGE: Final[
        str
    ] = "Sorry, there was a problem with our system. Please try again in a moment."
    SUBMISSION_ERROR_MESSAGE: Final[
        str
    ] = "We couldn't place your order. Please try again."


# File and directory constants
class FileSettings:
    """File paths and directory settings"""

    LOGS_DIRECTORY: Final[str] = "logs"
    DEFAULT_DATABASE_URL: Final[str] = "sqlite:///data/bookshop.db"

    # Log file names
    MAIN_LOG_FILE: Final[str] = "bookshop.json.log"
    ERROR_LOG_FILE: Final[str] = "errors.json.log"


# Configuration validation constants
class ConfigValidation:
    """Allowed values checked by the configuration validator"""

    VALID_ENVIRONMENTS: Final[tuple] = ("development", "test", "staging", "production")
    VALID_CURRENCIES: Final[tuple] = ("INR",)
    MIN_BOT_TOKEN_LENGTH: Final[int] = 20
