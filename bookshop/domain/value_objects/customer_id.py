"""Customer ID value object"""

from dataclasses import dataclass


@dataclass(frozen=True)
class CustomerId:
    """Customer identifier (the Telegram user id of the shopper)"""

    value: int

    def __post_init__(self):
        if isinstance(self.value, bool) or not isinstance(self.value, int) or self.value <= 0:
            raise ValueError("Customer ID must be a positive integer")

    def __str__(self) -> str:
        return str(self.value)
