"""
Append-only ledger of the states an order has entered
"""

from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from order_tracker.database import Base
from order_tracker.utils.enums import OrderStatus

class OrderStatusHistory(Base):
    """One entry per state entered; rows are inserted, never updated or deleted"""
    __tablename__ = "order_status_history"

    # autoincrement id doubles as the insertion-order tie-break for equal timestamps
    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(String(36), ForeignKey("orders.id"), index=True, nullable=False)
    status = Column(
        Enum(OrderStatus, name="order_status", native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    # naive UTC, written by the lifecycle service
    timestamp = Column(DateTime, default=datetime.utcnow, nullable=False)
    changed_by = Column(String(36), nullable=True)
    note = Column(String(500), nullable=True)

    order = relationship("Order", back_populates="status_history")

    def __repr__(self):
        return f"<OrderStatusHistory(id={self.id}, order_id='{self.order_id}', status='{self.status}')>"
