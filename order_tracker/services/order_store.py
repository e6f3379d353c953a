"""
Persistence for orders and their status ledger

The store never commits on its own; callers wrap its writes in
`transaction(db)` so the status update and the history insert land together.
"""

from datetime import datetime
from typing import List, Optional, Tuple
import logging

from sqlalchemy import update
from sqlalchemy.orm import Session

from order_tracker.models.order import Order
from order_tracker.models.order_status_history import OrderStatusHistory
from order_tracker.utils.enums import OrderStatus
from order_tracker.utils.error_handler import StatusConflictError

logger = logging.getLogger(__name__)

class OrderStore:
    """Data access for Order and OrderStatusHistory rows"""

    def __init__(self, db: Session):
        self.db = db

    def insert_order(self, order: Order, timestamp: datetime, actor_id: Optional[str] = None) -> Order:
        """Stage a new order together with its initial ledger entry"""
        order.created_at = timestamp
        order.updated_at = timestamp
        order.status_history.append(
            OrderStatusHistory(status=order.status, timestamp=timestamp, changed_by=actor_id)
        )
        self.db.add(order)
        self.db.flush()
        return order

    def apply_status_change(
        self,
        order: Order,
        expected_status: OrderStatus,
        new_status: OrderStatus,
        timestamp: datetime,
        actor_id: Optional[str] = None,
        note: Optional[str] = None,
    ) -> OrderStatusHistory:
        """Compare-and-set the order status, then append the matching ledger entry.

        The UPDATE only matches while the row still holds `expected_status`; if
        another writer got there first nothing is written and
        StatusConflictError is raised.
        """
        result = self.db.execute(
            update(Order)
            .where(Order.id == order.id, Order.status == expected_status)
            .values(status=new_status, updated_at=timestamp)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            logger.warning(
                f"Status of order {order.id} changed concurrently; expected {expected_status.value}"
            )
            raise StatusConflictError(
                f"Order {order.id} was modified by another request; reload and try again",
                {"expected": expected_status.value, "requested": new_status.value},
            )

        entry = OrderStatusHistory(
            order_id=order.id,
            status=new_status,
            timestamp=timestamp,
            changed_by=actor_id,
            note=note,
        )
        self.db.add(entry)
        self.db.flush()
        return entry

    def find_order_by_id(self, order_id: str, for_update: bool = False) -> Optional[Order]:
        query = self.db.query(Order).filter(Order.id == order_id)
        if for_update:
            # row lock where supported, and never trust a stale identity-map copy
            query = query.with_for_update().populate_existing()
        return query.first()

    def list_history_for_order(self, order_id: str) -> List[OrderStatusHistory]:
        return (
            self.db.query(OrderStatusHistory)
            .filter(OrderStatusHistory.order_id == order_id)
            .order_by(OrderStatusHistory.timestamp.asc(), OrderStatusHistory.id.asc())
            .all()
        )

    def list_orders(
        self,
        page: int = 1,
        page_size: int = 10,
        status: Optional[OrderStatus] = None,
    ) -> Tuple[List[Order], int]:
        query = self.db.query(Order)
        if status:
            query = query.filter(Order.status == status)

        total = query.count()
        offset = (page - 1) * page_size
        orders = query.order_by(Order.created_at.desc()).offset(offset).limit(page_size).all()
        return orders, total

    def list_orders_for_owner(self, owner_id: str) -> List[Order]:
        return (
            self.db.query(Order)
            .filter(Order.owner_id == owner_id)
            .order_by(Order.created_at.desc())
            .all()
        )
