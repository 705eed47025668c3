from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import desc
from sqlalchemy.orm import Session

from dairy_app.core.database import get_db
from dairy_app.deps import get_today
from dairy_app.models.customer import Customer
from dairy_app.models.subscription import Subscription
from dairy_app.routers.customers import get_customer_or_404
from dairy_app.routers.orders import order_to_dict
from dairy_app.schemas.subscription import (
    GenerateOrdersRequest,
    GenerateOrdersResponse,
    SubscriptionCreate,
    SubscriptionOut,
    SubscriptionUpdate,
)
from dairy_app.services.subscription_orders import generate_subscription_orders

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/subscriptions", tags=["subscriptions"])

SUBSCRIPTION_NOT_FOUND = "Subscription not found"


def _subscription_to_dict(subscription: Subscription, customer: Customer | None = None) -> Dict[str, Any]:
    customer = customer or subscription.customer
    return {
        "id": subscription.id,
        "customer_id": subscription.customer_id,
        "days": subscription.days,
        "delivery_time": subscription.delivery_time,
        "quantity": subscription.quantity,
        "is_active": bool(subscription.is_active),
        "customer_name": customer.name if customer else None,
        "customer_phone": customer.phone if customer else None,
        "created_at": subscription.created_at.isoformat() if subscription.created_at else None,
        "updated_at": subscription.updated_at.isoformat() if subscription.updated_at else None,
    }


def _get_subscription_or_404(db: Session, subscription_id: int) -> Subscription:
    subscription = db.query(Subscription).filter(Subscription.id == subscription_id).first()
    if subscription is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=SUBSCRIPTION_NOT_FOUND)
    return subscription


@router.get("", response_model=List[SubscriptionOut])
def list_subscriptions(db: Session = Depends(get_db)):
    rows = (
        db.query(Subscription, Customer)
        .join(Customer, Customer.id == Subscription.customer_id)
        .order_by(Customer.name.asc(), Subscription.id.asc())
        .all()
    )
    return [_subscription_to_dict(subscription, customer) for subscription, customer in rows]


@router.get("/customer/{customer_id}", response_model=List[SubscriptionOut])
def list_customer_subscriptions(customer_id: int, db: Session = Depends(get_db)):
    subscriptions = (
        db.query(Subscription)
        .filter(Subscription.customer_id == customer_id)
        .order_by(desc(Subscription.created_at), desc(Subscription.id))
        .all()
    )
    return [_subscription_to_dict(subscription) for subscription in subscriptions]


@router.post("/generate-orders", response_model=GenerateOrdersResponse)
def generate_orders(
    body: Optional[GenerateOrdersRequest] = None,
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    body = body or GenerateOrdersRequest()
    result = generate_subscription_orders(db, horizon_days=body.days, today=today)
    return {
        "message": f"{result.created_count} new orders created",
        "created_count": result.created_count,
        "skipped_count": result.skipped,
        "failed_count": result.failed,
        "orders": [order_to_dict(order) for order in result.created],
    }


@router.get("/{subscription_id}", response_model=SubscriptionOut)
def get_subscription(subscription_id: int, db: Session = Depends(get_db)):
    return _subscription_to_dict(_get_subscription_or_404(db, subscription_id))


@router.post("", response_model=SubscriptionOut, status_code=status.HTTP_201_CREATED)
def create_subscription(payload: SubscriptionCreate, db: Session = Depends(get_db)):
    customer = get_customer_or_404(db, payload.customer_id)

    subscription = Subscription(
        customer_id=customer.id,
        delivery_time=payload.delivery_time,
        quantity=payload.quantity,
        is_active=payload.is_active,
    )
    subscription.days = payload.days
    db.add(subscription)
    db.commit()
    db.refresh(subscription)
    logger.info(
        "subscription created id=%s customer_id=%s days=%s",
        subscription.id,
        subscription.customer_id,
        ",".join(subscription.days),
    )
    return _subscription_to_dict(subscription, customer)


@router.put("/{subscription_id}", response_model=SubscriptionOut)
def update_subscription(subscription_id: int, payload: SubscriptionUpdate, db: Session = Depends(get_db)):
    subscription = _get_subscription_or_404(db, subscription_id)
    changes = {field: value for field, value in payload.model_dump(exclude_unset=True).items() if value is not None}

    if "customer_id" in changes:
        get_customer_or_404(db, changes["customer_id"])

    for field, value in changes.items():
        setattr(subscription, field, value)

    db.commit()
    db.refresh(subscription)
    return _subscription_to_dict(subscription)


@router.delete("/{subscription_id}")
def delete_subscription(subscription_id: int, db: Session = Depends(get_db)):
    subscription = _get_subscription_or_404(db, subscription_id)
    db.delete(subscription)
    db.commit()
    return {"message": "Subscription deleted", "id": subscription_id}
