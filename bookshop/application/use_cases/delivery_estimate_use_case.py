"""
Delivery estimate use case

Pincode check offered from the cart view and the /pincode command.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from bookshop.domain.services.delivery import DeliveryEstimate, DeliveryEstimator
from bookshop.infrastructure.utilities.exceptions import ValidationError


@dataclass
class DeliveryEstimateResponse:
    success: bool
    estimate: Optional[DeliveryEstimate] = None
    error_message: Optional[str] = None


class DeliveryEstimateUseCase:
    """Estimate delivery time for a pincode"""

    def __init__(self, delivery_estimator: DeliveryEstimator):
        self._delivery_estimator = delivery_estimator
        self._logger = logging.getLogger(self.__class__.__name__)

    def check_pincode(self, zip_code: str, today: Optional[date] = None) -> DeliveryEstimateResponse:
        try:
            estimate = self._delivery_estimator.estimate(zip_code, today)
        except ValidationError as e:
            return DeliveryEstimateResponse(success=False, error_message=e.user_message)
        self._logger.info(
            "🚚 DELIVERY ESTIMATE: %s -> %s days", estimate.zip_code, estimate.delivery_days
        )
        return DeliveryEstimateResponse(success=True, estimate=estimate)
