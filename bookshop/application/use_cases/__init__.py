"""
Use Cases

Contains the business use cases of the application.
Each use case represents a single business operation.
"""

from .cart_management_use_case import CartManagementUseCase
from .checkout_flow_use_case import CheckoutFlowUseCase
from .delivery_estimate_use_case import DeliveryEstimateUseCase
from .order_submission_use_case import OrderSubmissionUseCase

__all__ = [
    "CartManagementUseCase",
    "CheckoutFlowUseCase",
    "DeliveryEstimateUseCase",
    "OrderSubmissionUseCase",
]
