"""
Dependency Injection Container

Manages the instantiation and lifecycle of dependencies for Clean Architecture.
"""

import logging
from typing import Any, Dict, Optional

from bookshop.application.use_cases.cart_management_use_case import CartManagementUseCase
from bookshop.application.use_cases.checkout_flow_use_case import CheckoutFlowUseCase
from bookshop.application.use_cases.delivery_estimate_use_case import DeliveryEstimateUseCase
from bookshop.application.use_cases.order_submission_use_case import OrderSubmissionUseCase
from bookshop.domain.repositories.book_repository import BookRepository
from bookshop.domain.repositories.cart_repository import CartRepository
from bookshop.domain.repositories.coupon_repository import CouponRepository
from bookshop.domain.repositories.identity_provider import IdentityProvider
from bookshop.domain.repositories.order_repository import OrderRepository
from bookshop.domain.services.delivery import DeliveryEstimator, PincodeDirectory
from bookshop.domain.services.pricing import PricingPolicy
from bookshop.infrastructure.configuration.config import Settings, get_config
from bookshop.infrastructure.database.operations import DatabaseManager
from bookshop.infrastructure.repositories.http_order_repository import HttpOrderRepository
from bookshop.infrastructure.repositories.in_memory_coupon_repository import (
    InMemoryCouponRepository,
)
from bookshop.infrastructure.repositories.in_memory_identity_provider import (
    InMemoryIdentityProvider,
)
from bookshop.infrastructure.repositories.in_memory_order_repository import (
    InMemoryOrderRepository,
)
from bookshop.infrastructure.repositories.sqlalchemy_book_repository import (
    SQLAlchemyBookRepository,
)
from bookshop.infrastructure.repositories.sqlalchemy_cart_repository import (
    SQLAlchemyCartRepository,
)

logger = logging.getLogger(__name__)


class DependencyContainer:
    """
    Dependency injection container for Clean Architecture

    Manages the instantiation and lifecycle of:
    - Repositories and collaborators (Infrastructure layer)
    - Domain services (pricing policy, pincode directory, delivery estimator)
    - Use Cases (Application layer)

    ``overrides`` replaces any registered instance by name before the use
    cases are wired, e.g. ``{"cart_repository": InMemoryCartRepository()}``.
    """

    def __init__(
        self,
        config: Optional[Settings] = None,
        db_manager: Optional[DatabaseManager] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ):
        self._instances: Dict[str, Any] = {}
        self._config = config or get_config()
        self._db_manager = db_manager
        self._overrides = overrides or {}
        self._logger = logging.getLogger(self.__class__.__name__)
        self._setup_dependencies()

    def _setup_dependencies(self):
        """Setup all dependencies and their relationships"""
        self._logger.info("Setting up dependency injection container...")

        self._register_services()
        self._register_repositories()
        self._instances.update(self._overrides)
        self._register_use_cases()

        self._logger.info("Dependency injection container setup complete")

    def _register_services(self):
        """Register domain services built from configuration"""
        directory = PincodeDirectory.from_file(self._config.pincode_data_path)
        self._instances["pricing_policy"] = PricingPolicy.from_settings(self._config)
        self._instances["pincode_directory"] = directory
        self._instances["delivery_estimator"] = DeliveryEstimator(directory)

    def _register_repositories(self):
        """Register repository implementations"""
        if "cart_repository" not in self._overrides or "book_repository" not in self._overrides:
            db_manager = self._db_manager or DatabaseManager(self._config)
            self._instances["db_manager"] = db_manager
            self._instances["cart_repository"] = SQLAlchemyCartRepository(db_manager)
            self._instances["book_repository"] = SQLAlchemyBookRepository(db_manager)

        if self._config.order_api_url:
            self._instances["order_repository"] = HttpOrderRepository(
                self._config.order_api_url, timeout=self._config.order_api_timeout
            )
        else:
            self._logger.warning("ORDER_API_URL not set, orders are kept in memory")
            self._instances["order_repository"] = InMemoryOrderRepository()

        self._instances["identity_provider"] = InMemoryIdentityProvider()
        self._instances["coupon_repository"] = InMemoryCouponRepository(self._config.coupons)

        self._logger.debug("Repositories registered successfully")

    def _register_use_cases(self):
        """Register use case implementations with their dependencies"""
        self._instances["cart_management_use_case"] = CartManagementUseCase(
            cart_repository=self.get_cart_repository(),
            book_repository=self.get_book_repository(),
            pricing_policy=self.get_pricing_policy(),
        )

        self._instances["checkout_flow_use_case"] = CheckoutFlowUseCase(
            cart_repository=self.get_cart_repository(),
            identity_provider=self.get_identity_provider(),
            coupon_repository=self.get_coupon_repository(),
            pincode_directory=self.get_pincode_directory(),
            pricing_policy=self.get_pricing_policy(),
        )

        self._instances["order_submission_use_case"] = OrderSubmissionUseCase(
            cart_repository=self.get_cart_repository(),
            order_repository=self.get_order_repository(),
            coupon_repository=self.get_coupon_repository(),
            delivery_estimator=self.get_delivery_estimator(),
            pricing_policy=self.get_pricing_policy(),
        )

        self._instances["delivery_estimate_use_case"] = DeliveryEstimateUseCase(
            delivery_estimator=self.get_delivery_estimator()
        )

        self._logger.debug("Use cases registered successfully")

    # Service getters
    def get_config(self) -> Settings:
        return self._config

    def get_db_manager(self) -> Optional[DatabaseManager]:
        return self._instances.get("db_manager")

    def get_pricing_policy(self) -> PricingPolicy:
        return self._instances["pricing_policy"]

    def get_pincode_directory(self) -> PincodeDirectory:
        return self._instances["pincode_directory"]

    def get_delivery_estimator(self) -> DeliveryEstimator:
        return self._instances["delivery_estimator"]

    # Repository getters
    def get_cart_repository(self) -> CartRepository:
        """Get cart repository instance"""
        return self._instances["cart_repository"]

    def get_book_repository(self) -> BookRepository:
        """Get book repository instance"""
        return self._instances["book_repository"]

    def get_order_repository(self) -> OrderRepository:
        """Get order repository instance"""
        return self._instances["order_repository"]

    def get_identity_provider(self) -> IdentityProvider:
        return self._instances["identity_provider"]

    def get_coupon_repository(self) -> CouponRepository:
        return self._instances["coupon_repository"]

    # Use Case getters
    def get_cart_management_use_case(self) -> CartManagementUseCase:
        """Get cart management use case instance"""
        return self._instances["cart_management_use_case"]

    def get_checkout_flow_use_case(self) -> CheckoutFlowUseCase:
        """Get checkout flow use case instance"""
        return self._instances["checkout_flow_use_case"]

    def get_order_submission_use_case(self) -> OrderSubmissionUseCase:
        """Get order submission use case instance"""
        return self._instances["order_submission_use_case"]

    def get_delivery_estimate_use_case(self) -> DeliveryEstimateUseCase:
        return self._instances["delivery_estimate_use_case"]

    def cleanup(self):
        """Cleanup resources when shutting down"""
        self._logger.info("Cleaning up dependency container...")
        db_manager = self._instances.get("db_manager")
        if db_manager is not None and db_manager is not self._db_manager:
            db_manager.close()
        self._instances.clear()


# Global container instance
_container: Optional[DependencyContainer] = None


def get_container() -> DependencyContainer:
    """Get the global dependency container instance"""
    global _container
    if _container is None:
        _container = DependencyContainer()
    return _container


def initialize_container(**kwargs) -> DependencyContainer:
    """Initialize the global dependency container"""
    global _container
    if _container:
        _container.cleanup()
    _container = DependencyContainer(**kwargs)
    return _container


def reset_container():
    """Reset the global container (useful for testing)"""
    global _container
    if _container:
        _container.cleanup()
    _container = None
