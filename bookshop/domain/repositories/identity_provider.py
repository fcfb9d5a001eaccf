"""Identity provider interface"""

from abc import ABC, abstractmethod
from typing import Optional

from bookshop.domain.entities.identity_entity import Identity


class IdentityProvider(ABC):
    """Who is checking out"""

    @abstractmethod
    async def get_identity(self, customer_id: int) -> Optional[Identity]:
        """Current identity, or None when the shopper has not chosen one"""

    @abstractmethod
    async def sign_in(self, customer_id: int, name: str, email: Optional[str] = None) -> Identity:
        """Sign the shopper in"""

    @abstractmethod
    async def continue_as_guest(self, customer_id: int) -> Identity:
        """Establish a guest identity"""

    @abstractmethod
    async def sign_out(self, customer_id: int) -> None:
        """Forget the shopper's identity"""
