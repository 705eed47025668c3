from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class CustomerCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    phone: str = Field(..., min_length=10, max_length=30)
    address: Optional[str] = None
    location: Optional[str] = Field(default=None, max_length=64)


class CustomerUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    phone: Optional[str] = Field(default=None, min_length=10, max_length=30)
    address: Optional[str] = None
    location: Optional[str] = Field(default=None, max_length=64)


class CustomerOut(BaseModel):
    id: int
    name: str
    phone: str
    address: Optional[str] = None
    location: Optional[str] = None
    maps_url: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class CustomerAnalytics(BaseModel):
    total_orders: int
    total_quantity: int
    first_order_date: Optional[str] = None
    last_order_date: Optional[str] = None
    days_since_last_order: Optional[int] = None
    avg_days_between_orders: Optional[float] = None
    morning_orders: int
    evening_orders: int
    delivered_orders: int
    pending_orders: int
    cancelled_orders: int


class CustomerAnalyticsResponse(BaseModel):
    customer: CustomerOut
    analytics: CustomerAnalytics
