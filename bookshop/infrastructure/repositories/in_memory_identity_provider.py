"""
In-memory identity provider

Remembers who signed in or chose guest checkout, per customer.
"""

import logging
from typing import Dict, Optional

from bookshop.domain.entities.identity_entity import Identity
from bookshop.domain.repositories.identity_provider import IdentityProvider


class InMemoryIdentityProvider(IdentityProvider):
    """Identity store in process memory"""

    def __init__(self):
        self._identities: Dict[int, Identity] = {}
        self._logger = logging.getLogger(self.__class__.__name__)

    async def get_identity(self, customer_id: int) -> Optional[Identity]:
        return self._identities.get(customer_id)

    async def sign_in(self, customer_id: int, name: str, email: Optional[str] = None) -> Identity:
        previous = self._identities.get(customer_id)
        identity = Identity(
            name=(name or "").strip() or "Reader",
            email=email,
            is_guest=False,
            default_address=previous.default_address if previous else None,
        )
        self._identities[customer_id] = identity
        self._logger.info("🔐 SIGN IN: user %s", customer_id)
        return identity

    async def continue_as_guest(self, customer_id: int) -> Identity:
        identity = Identity.guest()
        self._identities[customer_id] = identity
        return identity

    async def sign_out(self, customer_id: int) -> None:
        self._identities.pop(customer_id, None)
