"""
In-process subscription over committed order status changes
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional

from order_tracker.utils.enums import OrderStatus

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class OrderStatusEvent:
    """A ledger append that has been committed"""
    order_id: str
    status: OrderStatus
    previous_status: Optional[OrderStatus]
    timestamp: datetime
    actor_id: Optional[str] = None

Subscriber = Callable[[OrderStatusEvent], None]

class OrderEventHub:
    """Fan-out of status events to registered observers.

    Publishing happens after commit, so a failing subscriber is logged and
    skipped; it cannot affect the write that produced the event.
    """

    def __init__(self):
        self._subscribers: List[Subscriber] = []
        self._lock = threading.Lock()

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a callback; returns a function that removes it again"""
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe():
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, event: OrderStatusEvent) -> None:
        with self._lock:
            subscribers = list(self._subscribers)
        for callback in subscribers:
            try:
                callback(event)
            except Exception:
                logger.exception(f"Order event subscriber failed for order {event.order_id}")

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

order_events = OrderEventHub()
