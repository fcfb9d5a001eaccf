"""
Domain services
"""

from .delivery import DeliveryEstimate, DeliveryEstimator, DeliveryRegion, PincodeDirectory
from .pricing import DEFAULT_POLICY, PriceBreakdown, PricingPolicy, calculate_pricing

__all__ = [
    "DEFAULT_POLICY",
    "DeliveryEstimate",
    "DeliveryEstimator",
    "DeliveryRegion",
    "PincodeDirectory",
    "PriceBreakdown",
    "PricingPolicy",
    "calculate_pricing",
]
