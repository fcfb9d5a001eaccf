"""
Checkout session entity

Linear checkout state machine: Login -> Address -> Payment -> Review.
Forward moves are guarded by the data each step must collect; an unmet guard
leaves the session untouched. Backward moves are free and keep all data.
"""

import copy
import uuid
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import List, Optional

from bookshop.domain.entities.cart_entity import CartItem
from bookshop.domain.entities.identity_entity import Identity
from bookshop.domain.value_objects.address import Address
from bookshop.domain.value_objects.payment import PaymentSelection
from bookshop.infrastructure.utilities.exceptions import (
    GuardViolationError,
    SubmissionInProgressError,
)


class CheckoutStep(IntEnum):
    """Checkout steps in order"""

    LOGIN = 1
    ADDRESS = 2
    PAYMENT = 3
    REVIEW = 4

    @property
    def title(self) -> str:
        return self.name.capitalize()


class SubmissionState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"


@dataclass
class CheckoutSession:
    """State of one shopper's checkout"""

    customer_id: int
    current_step: CheckoutStep = CheckoutStep.LOGIN
    items: List[CartItem] = field(default_factory=list)
    identity: Optional[Identity] = None
    address: Optional[Address] = None
    payment: Optional[PaymentSelection] = None
    saved_addresses: List[Address] = field(default_factory=list)
    coupon_code: str = ""
    discount: int = 0
    idempotency_key: str = field(default_factory=lambda: str(uuid.uuid4()))
    submission_state: SubmissionState = SubmissionState.IDLE

    @classmethod
    def start(
        cls,
        customer_id: int,
        items: List[CartItem],
        identity: Optional[Identity] = None,
    ) -> "CheckoutSession":
        """Open a session; known shoppers skip the login step"""
        session = cls(
            customer_id=customer_id,
            current_step=CheckoutStep.ADDRESS if identity else CheckoutStep.LOGIN,
            identity=identity,
        )
        session.refresh_items(items)
        if identity and identity.default_address:
            session.saved_addresses.append(identity.default_address)
        return session

    # -- data collection ---------------------------------------------------

    def establish_identity(self, identity: Identity) -> None:
        self.identity = identity
        if identity.default_address and identity.default_address not in self.saved_addresses:
            self.saved_addresses.append(identity.default_address)

    def select_address(self, address: Address) -> None:
        if address not in self.saved_addresses:
            self.saved_addresses.append(address)
        self.address = address

    def select_saved_address(self, index: int) -> bool:
        if not 0 <= index < len(self.saved_addresses):
            return False
        self.address = self.saved_addresses[index]
        return True

    def select_payment(self, payment: PaymentSelection) -> None:
        self.payment = payment

    def apply_discount(self, coupon_code: str, discount: int) -> None:
        self.coupon_code = coupon_code
        self.discount = max(0, discount)

    def remove_coupon(self) -> None:
        self.coupon_code = ""
        self.discount = 0

    def refresh_items(self, items: List[CartItem]) -> None:
        """Replace the item snapshot with the cart store's current lines"""
        self.items = [copy.copy(item) for item in items]

    @property
    def subtotal(self) -> int:
        return sum(item.line_total for item in self.items)

    @property
    def has_items(self) -> bool:
        return bool(self.items)

    # -- transitions -------------------------------------------------------

    def can_advance(self) -> bool:
        """Whether the forward action is available from the current step"""
        if self.current_step == CheckoutStep.LOGIN:
            return self.identity is not None
        if self.current_step == CheckoutStep.ADDRESS:
            return self.address is not None
        if self.current_step == CheckoutStep.PAYMENT:
            return self.payment is not None
        # Review is left only by a successful order submission
        return False

    def advance(self) -> bool:
        """Move one step forward if the current step's guard holds"""
        if not self.can_advance():
            return False
        self.current_step = CheckoutStep(self.current_step + 1)
        return True

    def go_to_step(self, step: int) -> bool:
        """Jump back to an earlier step; forward jumps are ignored"""
        try:
            target = CheckoutStep(step)
        except ValueError:
            return False
        if target >= self.current_step:
            return False
        self.current_step = target
        return True

    def completed_steps(self) -> List[CheckoutStep]:
        return [step for step in CheckoutStep if step < self.current_step]

    # -- explicit guards ---------------------------------------------------

    def require_identity(self) -> Identity:
        if self.identity is None:
            raise GuardViolationError("login", "sign-in option")
        return self.identity

    def require_address(self) -> Address:
        if self.address is None:
            raise GuardViolationError("address", "delivery address")
        return self.address

    def require_payment(self) -> PaymentSelection:
        if self.payment is None:
            raise GuardViolationError("payment", "payment method")
        return self.payment

    # -- submission --------------------------------------------------------

    @property
    def is_pending(self) -> bool:
        return self.submission_state == SubmissionState.PENDING

    def mark_pending(self) -> None:
        if self.is_pending:
            raise SubmissionInProgressError()
        self.submission_state = SubmissionState.PENDING

    def mark_idle(self) -> None:
        self.submission_state = SubmissionState.IDLE
