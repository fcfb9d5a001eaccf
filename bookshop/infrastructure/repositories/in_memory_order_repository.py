"""
In-memory order repository

Local stand-in for the order API. Repeated idempotency keys return the
first result instead of creating another order.
"""

import asyncio
import copy
import logging
import uuid
from typing import Any, Dict, List

from bookshop.domain.repositories.order_repository import OrderRepository


class InMemoryOrderRepository(OrderRepository):
    """Orders kept in process memory"""

    def __init__(self):
        self._orders: List[Dict[str, Any]] = []
        self._by_key: Dict[str, Dict[str, Any]] = {}
        self._lock = asyncio.Lock()
        self._logger = logging.getLogger(self.__class__.__name__)

    async def create_order(
        self, payload: Dict[str, Any], idempotency_key: str
    ) -> Dict[str, Any]:
        async with self._lock:
            if idempotency_key in self._by_key:
                self._logger.info("♻️ DUPLICATE ORDER KEY: %s", idempotency_key)
                return dict(self._by_key[idempotency_key])

            order_id = f"ORD-{uuid.uuid4().hex[:10].upper()}"
            self._orders.append({"orderId": order_id, **copy.deepcopy(payload)})
            result = {"orderId": order_id, "estimatedDelivery": None}
            self._by_key[idempotency_key] = result
            self._logger.info("📋 ORDER STORED: %s", order_id)
            return dict(result)

    @property
    def orders(self) -> List[Dict[str, Any]]:
        return list(self._orders)
