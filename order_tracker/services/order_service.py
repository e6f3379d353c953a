"""
Order lifecycle service

The single authority for creating orders and moving them between statuses.
Every status change updates the order row and appends a ledger entry in one
transaction; nothing else in the codebase writes either.
"""

from datetime import datetime
from typing import Any, Callable, List, Mapping, Optional, Tuple, Union
import logging

from sqlalchemy.orm import Session

from order_tracker.models.order import Order
from order_tracker.models.order_status_history import OrderStatusHistory
from order_tracker.services.order_events import OrderEventHub, OrderStatusEvent, order_events
from order_tracker.services.order_state_machine import INITIAL_STATUS, parse_status, validate_transition
from order_tracker.services.order_store import OrderStore
from order_tracker.services.user_service import UserService
from order_tracker.utils.enums import OrderStatus
from order_tracker.utils.error_handler import InvalidTransitionError, NotFoundError, ValidationError, transaction

logger = logging.getLogger(__name__)

OPTIONAL_TEXT_FIELDS = ("variation", "specifications", "notes", "screenshot_ref")

def _required_text(details: Mapping[str, Any], field: str) -> str:
    value = details.get(field)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} is required and must be a non-empty string", field=field)
    return value.strip()

def _positive_quantity(details: Mapping[str, Any]) -> int:
    value = details.get("quantity")
    # bool is an int subclass; True is not a quantity
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValidationError("quantity must be a positive integer", field="quantity")
    return value

def _actor_id(actor: Optional[Mapping[str, Any]]) -> Optional[str]:
    if not actor:
        return None
    user_id = actor.get("user_id")
    return str(user_id) if user_id is not None else None

class OrderLifecycleService:
    """Service for order creation, status transitions and timeline reads"""

    def __init__(
        self,
        db: Session,
        user_lookup: Optional[Callable[[str], bool]] = None,
        events: OrderEventHub = order_events,
    ):
        self.db = db
        self.store = OrderStore(db)
        self.user_exists = user_lookup or UserService(db).user_exists
        self.events = events

    def create_order(self, owner_id: str, details: Mapping[str, Any]) -> Order:
        """Create an order in REQUESTED state with its single initial ledger entry"""
        if not owner_id:
            raise ValidationError("ownerId is required", field="owner_id")

        product_url = _required_text(details, "product_url")
        product_name = _required_text(details, "product_name")
        quantity = _positive_quantity(details)

        if not self.user_exists(owner_id):
            raise NotFoundError(f"User {owner_id} not found", {"owner_id": owner_id})

        order = Order(
            owner_id=owner_id,
            product_url=product_url,
            product_name=product_name,
            quantity=quantity,
            status=INITIAL_STATUS,
            **{field: details.get(field) for field in OPTIONAL_TEXT_FIELDS},
        )
        now = datetime.utcnow()

        with transaction(self.db):
            self.store.insert_order(order, timestamp=now, actor_id=owner_id)
        self.db.refresh(order)

        logger.info(f"Created order {order.id} for user {owner_id}")
        self.events.publish(OrderStatusEvent(
            order_id=order.id,
            status=INITIAL_STATUS,
            previous_status=None,
            timestamp=now,
            actor_id=owner_id,
        ))
        return order

    def advance_status(
        self,
        order_id: str,
        new_status: Union[str, OrderStatus],
        actor: Optional[Mapping[str, Any]] = None,
        note: Optional[str] = None,
    ) -> Order:
        """Move an order to `new_status` if the transition table allows it"""
        requested = parse_status(new_status)
        actor_id = _actor_id(actor)

        with transaction(self.db):
            order = self.store.find_order_by_id(order_id, for_update=True)
            if not order:
                raise NotFoundError(f"Order {order_id} not found")

            current = order.status
            try:
                validate_transition(current, requested)
            except InvalidTransitionError:
                logger.warning(
                    f"Rejected transition for order {order_id}: {current.value} -> {requested.value}"
                )
                raise

            # taken under the row lock so ledger timestamps follow commit order
            now = datetime.utcnow()
            self.store.apply_status_change(
                order,
                expected_status=current,
                new_status=requested,
                timestamp=now,
                actor_id=actor_id,
                note=note,
            )
        self.db.refresh(order)

        logger.info(f"Order {order_id} moved {current.value} -> {requested.value} by {actor_id or 'system'}")
        self.events.publish(OrderStatusEvent(
            order_id=order_id,
            status=requested,
            previous_status=current,
            timestamp=now,
            actor_id=actor_id,
        ))
        return order

    def get_order(self, order_id: str) -> Order:
        order = self.store.find_order_by_id(order_id)
        if not order:
            raise NotFoundError(f"Order {order_id} not found")
        return order

    def get_order_timeline(self, order_id: str) -> Tuple[Order, List[OrderStatusHistory]]:
        """Return the order and its full ledger, oldest entry first"""
        order = self.get_order(order_id)
        return order, self.store.list_history_for_order(order_id)

    def list_orders(
        self,
        page: int = 1,
        page_size: int = 10,
        status: Optional[Union[str, OrderStatus]] = None,
    ) -> Tuple[List[Order], int]:
        return self.store.list_orders(page, page_size, parse_status(status) if status else None)

    def list_orders_for_user(self, user_id: str) -> List[Order]:
        if not self.user_exists(user_id):
            raise NotFoundError(f"User {user_id} not found")
        return self.store.list_orders_for_owner(user_id)

