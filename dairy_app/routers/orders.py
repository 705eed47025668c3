from __future__ import annotations

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import case, desc
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from dairy_app.core.database import get_db
from dairy_app.models.customer import Customer
from dairy_app.models.order import Order
from dairy_app.routers.customers import get_customer_or_404
from dairy_app.schemas.order import OrderCreate, OrderOut, OrderStatusUpdate, OrderUpdate, parse_order_date

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/orders", tags=["orders"])

ORDER_NOT_FOUND = "Order not found"
DUPLICATE_ORDER = "Order already exists for this customer, date and delivery time"


def order_to_dict(order: Order, customer: Customer | None = None) -> Dict[str, Any]:
    customer = customer or order.customer
    return {
        "id": order.id,
        "customer_id": order.customer_id,
        "delivery_time": order.delivery_time,
        "order_date": order.order_date.isoformat() if order.order_date else None,
        "status": order.status,
        "quantity": order.quantity,
        "customer_name": customer.name if customer else None,
        "customer_phone": customer.phone if customer else None,
        "customer_address": customer.address if customer else None,
        "customer_location": customer.location if customer else None,
        "created_at": order.created_at.isoformat() if order.created_at else None,
        "updated_at": order.updated_at.isoformat() if order.updated_at else None,
    }


def _orders_with_customer(db: Session):
    return db.query(Order, Customer).join(Customer, Customer.id == Order.customer_id)


def _get_order_or_404(db: Session, order_id: int) -> Order:
    order = db.query(Order).filter(Order.id == order_id).first()
    if order is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=ORDER_NOT_FOUND)
    return order


def _commit_order(db: Session, order: Order) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=DUPLICATE_ORDER) from exc
    db.refresh(order)


@router.get("", response_model=List[OrderOut])
def list_orders(db: Session = Depends(get_db)):
    rows = _orders_with_customer(db).order_by(desc(Order.order_date), desc(Order.id)).all()
    return [order_to_dict(order, customer) for order, customer in rows]


@router.get("/daily/{order_date}", response_model=List[OrderOut])
def list_daily_orders(order_date: str, db: Session = Depends(get_db)):
    try:
        day = parse_order_date(order_date)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    slot_order = case((Order.delivery_time == "morning", 0), else_=1)
    rows = (
        _orders_with_customer(db)
        .filter(Order.order_date == day)
        .order_by(slot_order, Customer.name.asc(), Order.id.asc())
        .all()
    )
    return [order_to_dict(order, customer) for order, customer in rows]


@router.get("/{order_id}", response_model=OrderOut)
def get_order(order_id: int, db: Session = Depends(get_db)):
    return order_to_dict(_get_order_or_404(db, order_id))


@router.post("", response_model=OrderOut, status_code=status.HTTP_201_CREATED)
def create_order(payload: OrderCreate, db: Session = Depends(get_db)):
    customer = get_customer_or_404(db, payload.customer_id)

    order = Order(
        customer_id=customer.id,
        delivery_time=payload.delivery_time,
        order_date=payload.order_date,
        status=payload.status,
        quantity=payload.quantity,
    )
    db.add(order)
    _commit_order(db, order)
    logger.info(
        "order created id=%s customer_id=%s date=%s delivery_time=%s",
        order.id,
        order.customer_id,
        order.order_date.isoformat(),
        order.delivery_time,
    )
    return order_to_dict(order, customer)


@router.put("/{order_id}", response_model=OrderOut)
def update_order(order_id: int, payload: OrderUpdate, db: Session = Depends(get_db)):
    order = _get_order_or_404(db, order_id)
    changes = {field: value for field, value in payload.model_dump(exclude_unset=True).items() if value is not None}

    if "customer_id" in changes:
        get_customer_or_404(db, changes["customer_id"])

    for field, value in changes.items():
        setattr(order, field, value)

    _commit_order(db, order)
    return order_to_dict(order)


@router.patch("/{order_id}/status", response_model=OrderOut)
def update_order_status(order_id: int, body: OrderStatusUpdate, db: Session = Depends(get_db)):
    order = _get_order_or_404(db, order_id)
    previous = order.status
    order.status = body.status
    _commit_order(db, order)
    logger.info("order status changed id=%s from=%s to=%s", order.id, previous, order.status)
    return order_to_dict(order)


@router.delete("/{order_id}")
def delete_order(order_id: int, db: Session = Depends(get_db)):
    order = _get_order_or_404(db, order_id)
    db.delete(order)
    db.commit()
    return {"message": "Order deleted", "id": order_id}
