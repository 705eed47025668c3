from __future__ import annotations

from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

DeliveryTime = Literal["morning", "evening"]
OrderStatus = Literal["pending", "delivered", "cancelled"]


def parse_order_date(value):
    if isinstance(value, date):
        return value
    text = str(value or "").strip()
    if not text:
        raise ValueError("order_date is required")
    try:
        # accepts full ISO timestamps too, only the calendar date is kept
        return date.fromisoformat(text[:10])
    except ValueError as exc:
        raise ValueError("order_date must be an ISO date (YYYY-MM-DD)") from exc


class OrderCreate(BaseModel):
    customer_id: int = Field(..., gt=0)
    delivery_time: DeliveryTime
    order_date: date
    status: OrderStatus = "pending"
    quantity: int = Field(default=1, gt=0)

    @field_validator("order_date", mode="before")
    @classmethod
    def validate_order_date(cls, value):
        return parse_order_date(value)


class OrderUpdate(BaseModel):
    customer_id: Optional[int] = Field(default=None, gt=0)
    delivery_time: Optional[DeliveryTime] = None
    order_date: Optional[date] = None
    status: Optional[OrderStatus] = None
    quantity: Optional[int] = Field(default=None, gt=0)

    @field_validator("order_date", mode="before")
    @classmethod
    def validate_order_date(cls, value):
        if value is None:
            return None
        return parse_order_date(value)


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class OrderOut(BaseModel):
    id: int
    customer_id: int
    delivery_time: str
    order_date: str
    status: str
    quantity: int
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_address: Optional[str] = None
    customer_location: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
