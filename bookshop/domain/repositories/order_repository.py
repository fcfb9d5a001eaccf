"""
Order repository interface

Contract for the remote order API.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict


class OrderRepository(ABC):
    """Repository interface for order submission"""

    @abstractmethod
    async def create_order(
        self, payload: Dict[str, Any], idempotency_key: str
    ) -> Dict[str, Any]:
        """
        Submit an order

        Returns the API response, which holds at least ``orderId`` and may
        hold ``estimatedDelivery`` (ISO date). Repeating a call with the same
        idempotency key must not create a second order. Raises
        SubmissionError on any failure.
        """
