"""Identity of the shopper going through checkout"""

from dataclasses import dataclass
from typing import Optional

from bookshop.domain.value_objects.address import Address


@dataclass(frozen=True)
class Identity:
    """Signed-in customer or guest"""

    name: str
    email: Optional[str] = None
    is_guest: bool = False
    default_address: Optional[Address] = None

    @classmethod
    def guest(cls) -> "Identity":
        return cls(name="Guest", is_guest=True)

    @property
    def display_name(self) -> str:
        return "Guest" if self.is_guest else self.name
