from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from dairy_app.models.subscription import WEEKDAYS
from dairy_app.schemas.order import DeliveryTime, OrderOut


def normalize_weekdays(values):
    if values is None:
        return None
    normalized = []
    for value in values:
        name = str(value).strip().lower()
        if name not in WEEKDAYS:
            raise ValueError(f"unknown weekday '{value}'")
        if name not in normalized:
            normalized.append(name)
    return normalized


class SubscriptionCreate(BaseModel):
    customer_id: int = Field(..., gt=0)
    days: List[str]
    delivery_time: DeliveryTime
    quantity: int = Field(default=1, ge=1)
    is_active: bool = True

    @field_validator("days")
    @classmethod
    def validate_days(cls, value):
        return normalize_weekdays(value)


class SubscriptionUpdate(BaseModel):
    customer_id: Optional[int] = Field(default=None, gt=0)
    days: Optional[List[str]] = None
    delivery_time: Optional[DeliveryTime] = None
    quantity: Optional[int] = Field(default=None, ge=1)
    is_active: Optional[bool] = None

    @field_validator("days")
    @classmethod
    def validate_days(cls, value):
        return normalize_weekdays(value)


class SubscriptionOut(BaseModel):
    id: int
    customer_id: int
    days: List[str]
    delivery_time: str
    quantity: int
    is_active: bool
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class GenerateOrdersRequest(BaseModel):
    days: int = Field(default=7, ge=1, le=365)


class GenerateOrdersResponse(BaseModel):
    message: str
    created_count: int
    skipped_count: int
    failed_count: int
    orders: List[OrderOut]
