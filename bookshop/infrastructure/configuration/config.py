"""
Configuration management for the bookshop checkout
"""

import logging
import threading
from decimal import Decimal
from pathlib import Path
from typing import Dict, Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from bookshop.infrastructure.utilities.constants import (
    ConfigValidation,
    FileSettings,
    PricingSettings,
)

logger = logging.getLogger(__name__)

_DEFAULT_PINCODE_DATA = Path(__file__).resolve().parent.parent / "data" / "pincodes.json"


class CouponRule(BaseModel):
    """A coupon entry from configuration"""

    kind: Literal["percent", "flat"]
    value: int = Field(gt=0)
    min_subtotal: int = Field(default=0, ge=0)


def _default_coupons() -> Dict[str, CouponRule]:
    return {
        "FIRST10": CouponRule(kind="percent", value=10),
        "READ50": CouponRule(kind="flat", value=5000, min_subtotal=30000),
    }


class Settings(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Bot configuration
    bot_token: str = Field(description="Telegram bot token", min_length=1)

    # Database configuration
    database_url: str = Field(
        default=FileSettings.DEFAULT_DATABASE_URL, description="Database connection URL"
    )

    # Order API
    order_api_url: str = Field(
        default="", description="Base URL of the order API; empty uses the in-memory store"
    )
    order_api_timeout: float = Field(default=30.0, gt=0, description="Order API timeout in seconds")

    # Application settings
    log_level: str = Field(default="INFO", description="Logging level")
    environment: str = Field(default="development", description="Application environment")

    # Pricing policy (minor units)
    free_shipping_threshold: int = Field(default=PricingSettings.FREE_SHIPPING_THRESHOLD)
    shipping_charge: int = Field(default=PricingSettings.SHIPPING_CHARGE)
    cod_surcharge: int = Field(default=PricingSettings.COD_SURCHARGE)
    tax_rate: Decimal = Field(default=Decimal(PricingSettings.TAX_RATE))
    currency: str = Field(default=PricingSettings.CURRENCY, description="Currency code")

    coupons: Dict[str, CouponRule] = Field(default_factory=_default_coupons)

    pincode_data_path: Path = Field(
        default=_DEFAULT_PINCODE_DATA, description="Pincode lookup and delivery region table"
    )


_settings_instance: Settings | None = None
_settings_lock = threading.Lock()


def get_config() -> Settings:
    """Get the global settings instance, ensuring thread safety."""
    global _settings_instance
    if _settings_instance is None:
        with _settings_lock:
            if _settings_instance is None:
                _settings_instance = Settings()
    return _settings_instance


def reset_config() -> None:
    """Drop the cached settings so the next get_config() re-reads the environment"""
    global _settings_instance
    with _settings_lock:
        _settings_instance = None


class ConfigValidator:
    """Validates configuration for production readiness"""

    def __init__(self, config: Settings | None = None):
        self.errors: list[str] = []
        self.warnings: list[str] = []
        self.config = config

    def validate_all(self) -> bool:
        """Run all validation checks and collect results"""
        if self.config is None:
            try:
                self.config = get_config()
            except ValueError as exc:
                self.errors.append(f"Failed to load configuration: {exc}")
                return False

        self._validate_bot_configuration()
        self._validate_environment_settings()
        self._validate_pricing_rules()
        self._validate_data_files()

        self._log_validation_results()
        return not self.errors

    def get_validation_report(self) -> dict[str, object]:
        """Return detailed report after running `validate_all()`."""
        return {
            "valid": not self.errors,
            "errors": self.errors,
            "warnings": self.warnings,
            "config_summary": {
                "environment": self.config.environment if self.config else None,
                "order_api": (
                    "http" if self.config and self.config.order_api_url else "in-memory"
                ),
                "bot_configured": bool(self.config and self.config.bot_token),
            },
        }

    def _validate_bot_configuration(self):
        if len(self.config.bot_token) < ConfigValidation.MIN_BOT_TOKEN_LENGTH:
            self.errors.append("BOT_TOKEN appears too short")

    def _validate_environment_settings(self):
        if self.config.environment not in ConfigValidation.VALID_ENVIRONMENTS:
            self.warnings.append(f"Unknown environment: {self.config.environment}")
        if self.config.environment == "production":
            if self.config.log_level.upper() == "DEBUG":
                self.warnings.append("DEBUG logging in production may impact performance")
            if not self.config.order_api_url:
                self.errors.append("ORDER_API_URL is required in production")

    def _validate_pricing_rules(self):
        if self.config.shipping_charge < 0:
            self.errors.append("Shipping charge cannot be negative")
        if self.config.cod_surcharge < 0:
            self.errors.append("COD surcharge cannot be negative")
        if self.config.free_shipping_threshold < 0:
            self.errors.append("Free shipping threshold cannot be negative")
        if not Decimal("0") <= self.config.tax_rate < Decimal("1"):
            self.errors.append("Tax rate must be between 0 and 1")
        if self.config.currency not in ConfigValidation.VALID_CURRENCIES:
            self.warnings.append(f"Unusual currency: {self.config.currency}")

    def _validate_data_files(self):
        if not Path(self.config.pincode_data_path).exists():
            self.errors.append(f"Pincode data file not found: {self.config.pincode_data_path}")

    def _log_validation_results(self):
        if self.errors:
            logger.error(
                "Configuration validation failed",
                extra={"errors": self.errors, "warnings": self.warnings},
            )
        elif self.warnings:
            logger.warning(
                "Configuration validation passed with warnings",
                extra={"warnings": self.warnings},
            )
        else:
            logger.info("Configuration validation passed successfully")
