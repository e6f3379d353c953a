from enum import Enum


class Role(str, Enum):
    CUSTOMER = "customer"
    ORDER_PROCESSOR = "order_processor"
    WAREHOUSE_MANAGER = "warehouse_manager"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


STAFF_ROLES = [
    Role.ORDER_PROCESSOR.value,
    Role.WAREHOUSE_MANAGER.value,
    Role.ADMIN.value,
    Role.SUPER_ADMIN.value,
]
ADMIN_ROLES = [Role.ADMIN.value, Role.SUPER_ADMIN.value]


class OrderStatus(str, Enum):
    """Lifecycle states of an order, in normal progression order"""

    REQUESTED = "REQUESTED"
    PURCHASED = "PURCHASED"
    IN_WAREHOUSE = "IN_WAREHOUSE"
    IN_TRANSIT = "IN_TRANSIT"
    ARRIVED = "ARRIVED"
    COMPLETED = "COMPLETED"
    DECLINED = "DECLINED"

    @property
    def label(self) -> str:
        return STATUS_LABELS[self]


STATUS_LABELS = {
    OrderStatus.REQUESTED: "Requested",
    OrderStatus.PURCHASED: "Purchased in China",
    OrderStatus.IN_WAREHOUSE: "In Warehouse",
    OrderStatus.IN_TRANSIT: "In Ship/Airplane",
    OrderStatus.ARRIVED: "Arrived in Rwanda",
    OrderStatus.COMPLETED: "Delivered / Completed",
    OrderStatus.DECLINED: "Declined",
}
