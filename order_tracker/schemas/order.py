"""
Pydantic schemas for Order operations
JSON payloads use camelCase (productUrl, statusHistory, ...); snake_case is accepted on input too
"""

from pydantic import BaseModel, Field, validator
from pydantic.alias_generators import to_camel
from typing import Optional
from datetime import datetime

from order_tracker.utils.enums import OrderStatus

class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True

class OrderBase(CamelModel):
    """Descriptive fields of an order"""
    product_url: str = Field(..., min_length=1, description="Link to the product page")
    product_name: str = Field(..., min_length=1, max_length=255, description="Product name")
    quantity: int = Field(..., gt=0, description="Number of units (positive integer)")
    variation: Optional[str] = Field(None, max_length=255, description="Colour, size or other variation")
    specifications: Optional[str] = Field(None, description="Detailed specifications")
    notes: Optional[str] = Field(None, description="Additional notes")
    screenshot_ref: Optional[str] = Field(None, max_length=500, description="Reference to the evidence image")

    @validator('product_url', 'product_name')
    def validate_not_blank(cls, v):
        if not v.strip():
            raise ValueError('Must not be blank')
        return v.strip()

    @validator('quantity', pre=True)
    def validate_quantity(cls, v):
        # no coercion from bool, str or float
        if isinstance(v, bool) or not isinstance(v, int):
            raise ValueError('Quantity must be a positive integer')
        return v

class OrderCreate(OrderBase):
    """Schema for creating a new order; ownerId defaults to the caller"""
    owner_id: Optional[str] = Field(None, description="Id of the requesting customer")

class StatusUpdate(CamelModel):
    """Schema for advancing an order's status"""
    status: OrderStatus = Field(..., description="Status to move the order into")
    note: Optional[str] = Field(None, max_length=500, description="Optional note recorded with the change")

class StatusHistoryResponse(CamelModel):
    """One ledger entry"""
    status: OrderStatus
    timestamp: datetime
    changed_by: Optional[str] = None
    note: Optional[str] = None

class OrderResponse(OrderBase):
    """Schema for order responses"""
    id: str
    owner_id: str
    status: OrderStatus
    created_at: datetime
    updated_at: datetime

class OrderWithHistoryResponse(OrderResponse):
    """Order together with its ledger, oldest entry first"""
    status_history: list[StatusHistoryResponse]

class OrderTimelineResponse(CamelModel):
    order: OrderResponse
    history: list[StatusHistoryResponse]

class OrderListResponse(CamelModel):
    """Schema for paginated order list responses"""
    orders: list[OrderResponse]
    total: int
    page: int
    page_size: int
    total_pages: int

class StatusInfo(CamelModel):
    """A status, its display label and where it may go next"""
    status: OrderStatus
    label: str
    next_statuses: list[OrderStatus]
    terminal: bool
