"""
Transition table for the order lifecycle

This is the only place that decides whether an order may move from one status
to another. Normal progression is strictly one step forward; DECLINED is
reachable from every non-terminal status; COMPLETED and DECLINED are terminal.
"""

from typing import Dict, FrozenSet, Union

from order_tracker.utils.enums import OrderStatus
from order_tracker.utils.error_handler import InvalidTransitionError, ValidationError

NORMAL_PROGRESSION = (
    OrderStatus.REQUESTED,
    OrderStatus.PURCHASED,
    OrderStatus.IN_WAREHOUSE,
    OrderStatus.IN_TRANSIT,
    OrderStatus.ARRIVED,
    OrderStatus.COMPLETED,
)

INITIAL_STATUS = OrderStatus.REQUESTED

TERMINAL_STATUSES: FrozenSet[OrderStatus] = frozenset([
    OrderStatus.COMPLETED,
    OrderStatus.DECLINED,
])

def _build_transitions() -> Dict[OrderStatus, FrozenSet[OrderStatus]]:
    table = {status: frozenset() for status in OrderStatus}
    for current, following in zip(NORMAL_PROGRESSION, NORMAL_PROGRESSION[1:]):
        table[current] = frozenset([following, OrderStatus.DECLINED])
    return table

ALLOWED_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = _build_transitions()

def parse_status(value: Union[str, OrderStatus]) -> OrderStatus:
    """Coerce a raw value into an OrderStatus, rejecting anything outside the enum"""
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in OrderStatus)
        raise ValidationError(f"Status must be one of: {allowed}", field="status")

def allowed_next_statuses(current: OrderStatus) -> FrozenSet[OrderStatus]:
    return ALLOWED_TRANSITIONS[parse_status(current)]

def is_terminal(status: OrderStatus) -> bool:
    return parse_status(status) in TERMINAL_STATUSES

def can_transition(current: OrderStatus, requested: OrderStatus) -> bool:
    return parse_status(requested) in allowed_next_statuses(current)

def validate_transition(current: OrderStatus, requested: OrderStatus) -> OrderStatus:
    """Return the requested status if the move is allowed, else raise InvalidTransitionError"""
    current = parse_status(current)
    requested = parse_status(requested)
    if requested not in ALLOWED_TRANSITIONS[current]:
        raise InvalidTransitionError(current, requested)
    return requested
