"""
Order lifecycle endpoints
"""

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session
from slowapi import Limiter
from slowapi.util import get_remote_address
from typing import Optional
import logging
import math

from order_tracker import config
from order_tracker.database import get_db
from order_tracker.models.order import Order
from order_tracker.schemas.order import (
    OrderCreate, StatusUpdate, OrderResponse, OrderWithHistoryResponse,
    OrderTimelineResponse, OrderListResponse, StatusHistoryResponse, StatusInfo
)
from order_tracker.services.order_service import OrderLifecycleService
from order_tracker.services.order_state_machine import allowed_next_statuses, is_terminal
from order_tracker.auth.auth_handler import is_staff, staff_required, user_required
from order_tracker.utils.enums import OrderStatus
from order_tracker.utils.error_handler import PermissionDeniedError

logger = logging.getLogger(__name__)
limiter = Limiter(key_func=get_remote_address, enabled=config.RATE_LIMIT_ENABLED)

router = APIRouter()

def ensure_can_view(order: Order, current_user: dict):
    """Customers only see their own orders; staff see all"""
    if not is_staff(current_user) and order.owner_id != current_user["user_id"]:
        raise PermissionDeniedError("You can only access your own orders")

@router.post("/", response_model=OrderWithHistoryResponse, status_code=201)
@limiter.limit("10/minute")
async def create_order(
    request: Request,
    order: OrderCreate,
    current_user: dict = Depends(user_required),
    db: Session = Depends(get_db)
):
    """Create a new order in REQUESTED state"""
    owner_id = order.owner_id or current_user["user_id"]
    if owner_id != current_user["user_id"] and not is_staff(current_user):
        raise PermissionDeniedError("Customers can only create orders for themselves")

    service = OrderLifecycleService(db)
    return service.create_order(owner_id, order.dict(exclude={"owner_id"}))

@router.get("/", response_model=OrderListResponse)
@limiter.limit("30/minute")
async def get_orders(
    request: Request,
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(10, ge=1, le=100, description="Items per page"),
    status: Optional[OrderStatus] = Query(None, description="Filter by status"),
    current_user: dict = Depends(staff_required),
    db: Session = Depends(get_db)
):
    """Get paginated list of all orders (staff only)"""
    service = OrderLifecycleService(db)
    orders, total = service.list_orders(page, page_size, status)

    return OrderListResponse(
        orders=[OrderResponse.from_orm(o) for o in orders],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=math.ceil(total / page_size)
    )

@router.get("/statuses", response_model=list[StatusInfo])
@limiter.limit("60/minute")
async def get_statuses(request: Request):
    """Describe every status and its allowed successors"""
    return [
        StatusInfo(
            status=status,
            label=status.label,
            next_statuses=sorted(allowed_next_statuses(status), key=list(OrderStatus).index),
            terminal=is_terminal(status),
        )
        for status in OrderStatus
    ]

@router.get("/user/{user_id}", response_model=list[OrderWithHistoryResponse])
@limiter.limit("30/minute")
async def get_orders_for_user(
    request: Request,
    user_id: str,
    current_user: dict = Depends(user_required),
    db: Session = Depends(get_db)
):
    """Get all orders placed by a user, newest first"""
    if user_id != current_user["user_id"] and not is_staff(current_user):
        raise PermissionDeniedError("You can only access your own orders")

    service = OrderLifecycleService(db)
    return service.list_orders_for_user(user_id)

@router.get("/{order_id}", response_model=OrderWithHistoryResponse)
@limiter.limit("30/minute")
async def get_order(
    request: Request,
    order_id: str,
    current_user: dict = Depends(user_required),
    db: Session = Depends(get_db)
):
    """Get a specific order with its status history"""
    service = OrderLifecycleService(db)
    order = service.get_order(order_id)
    ensure_can_view(order, current_user)
    return order

@router.get("/{order_id}/timeline", response_model=OrderTimelineResponse)
@limiter.limit("30/minute")
async def get_order_timeline(
    request: Request,
    order_id: str,
    current_user: dict = Depends(user_required),
    db: Session = Depends(get_db)
):
    """Get an order and its full status ledger, oldest entry first"""
    service = OrderLifecycleService(db)
    order, history = service.get_order_timeline(order_id)
    ensure_can_view(order, current_user)

    return OrderTimelineResponse(
        order=OrderResponse.from_orm(order),
        history=[StatusHistoryResponse.from_orm(entry) for entry in history]
    )

@router.put("/{order_id}/status", response_model=OrderWithHistoryResponse)
@limiter.limit("30/minute")
async def advance_order_status(
    request: Request,
    order_id: str,
    status_update: StatusUpdate,
    current_user: dict = Depends(staff_required),
    db: Session = Depends(get_db)
):
    """Move an order to its next status (staff only)"""
    service = OrderLifecycleService(db)
    return service.advance_status(
        order_id,
        status_update.status,
        actor=current_user,
        note=status_update.note
    )
