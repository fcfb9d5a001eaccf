"""
HTTP Order Repository

Sends orders to the remote order API with httpx.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from bookshop.domain.repositories.order_repository import OrderRepository
from bookshop.infrastructure.utilities.exceptions import SubmissionError


class HttpOrderRepository(OrderRepository):
    """POSTs orders to ``{base_url}/orders``"""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._logger = logging.getLogger(self.__class__.__name__)

    async def create_order(
        self, payload: Dict[str, Any], idempotency_key: str
    ) -> Dict[str, Any]:
        headers = {"Idempotency-Key": idempotency_key}
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url, timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.post("/orders", json=payload, headers=headers)
                response.raise_for_status()
                body = response.json()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            self._logger.error("💥 ORDER API returned %s", status)
            raise SubmissionError(f"order API returned {status}", status_code=status) from e
        except httpx.RequestError as e:
            self._logger.error("💥 ORDER API unreachable: %s", e)
            raise SubmissionError(f"order API unreachable: {e}") from e
        except ValueError as e:
            raise SubmissionError("order API returned an invalid body") from e

        return self._normalize(body)

    @staticmethod
    def _normalize(body: Dict[str, Any]) -> Dict[str, Any]:
        """Accept both a flat body and the ``{success, data: order}`` envelope"""
        data = body.get("data") if isinstance(body.get("data"), dict) else body
        order_id = body.get("orderId") or data.get("orderId") or data.get("_id") or data.get("id")
        if not order_id:
            raise SubmissionError("order API response has no order id")
        return {
            "orderId": str(order_id),
            "estimatedDelivery": body.get("estimatedDelivery") or data.get("estimatedDelivery"),
        }
