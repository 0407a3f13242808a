"""Order status transitions enforced before any store update."""

from enum import Enum


class OrderStatus(str, Enum):
    CREATED = "created"
    PAID = "paid"


ALLOWED_TRANSITIONS: dict[OrderStatus, set[OrderStatus]] = {
    OrderStatus.CREATED: {OrderStatus.PAID},
    OrderStatus.PAID: set(),
}


class InvalidTransition(ValueError):
    """Raised for a status change the order lifecycle does not permit."""

    def __init__(self, current: str, new: str) -> None:
        self.current = current
        self.new = new
        super().__init__(f"Invalid transition: {current} -> {new}")


def validate_transition(current: str, new: str) -> None:
    """Raise when a transition is not allowed by the state machine.

    Unknown status strings (e.g. a hand-edited document) are never allowed
    to move.
    """

    try:
        allowed = ALLOWED_TRANSITIONS[OrderStatus(current)]
        target = OrderStatus(new)
    except ValueError as exc:
        raise InvalidTransition(current, new) from exc
    if target not in allowed:
        raise InvalidTransition(current, new)
