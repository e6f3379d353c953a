"""
Order model for database operations
"""

import uuid
from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey, Enum
from sqlalchemy.orm import relationship
from order_tracker.database import Base
from order_tracker.utils.enums import OrderStatus

class Order(Base):
    """A customer's overseas purchase request tracked through fulfillment.

    `status` is only ever written by the lifecycle service together with a new
    OrderStatusHistory row, so it always mirrors the latest ledger entry.
    """
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    owner_id = Column(String(36), ForeignKey("users.id"), index=True, nullable=False)
    product_url = Column(Text, nullable=False)
    product_name = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False)
    variation = Column(String(255), nullable=True)
    specifications = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    screenshot_ref = Column(String(500), nullable=True)
    status = Column(
        Enum(OrderStatus, name="order_status", native_enum=False, values_callable=lambda e: [m.value for m in e]),
        default=OrderStatus.REQUESTED,
        index=True,
        nullable=False,
    )
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    owner = relationship("User", back_populates="orders")
    status_history = relationship(
        "OrderStatusHistory",
        back_populates="order",
        order_by="(OrderStatusHistory.timestamp, OrderStatusHistory.id)",
        cascade="save-update, merge",
    )

    def __repr__(self):
        return f"<Order(id='{self.id}', product_name='{self.product_name}', status='{self.status}')>"
