from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from dairy_app.core.database import get_db
from dairy_app.deps import get_today
from dairy_app.models.customer import Customer
from dairy_app.schemas.customer import (
    CustomerAnalyticsResponse,
    CustomerCreate,
    CustomerOut,
    CustomerUpdate,
)
from dairy_app.services.locations import maps_url
from dairy_app.services.reports import customer_analytics

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/customers", tags=["customers"])

CUSTOMER_NOT_FOUND = "Customer not found"
PHONE_TAKEN = "Phone number already registered"


def _customer_to_dict(customer: Customer) -> Dict[str, Any]:
    return {
        "id": customer.id,
        "name": customer.name,
        "phone": customer.phone,
        "address": customer.address,
        "location": customer.location,
        "maps_url": maps_url(customer.location),
        "created_at": customer.created_at.isoformat() if customer.created_at else None,
        "updated_at": customer.updated_at.isoformat() if customer.updated_at else None,
    }


def get_customer_or_404(db: Session, customer_id: int) -> Customer:
    customer = db.query(Customer).filter(Customer.id == customer_id).first()
    if customer is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=CUSTOMER_NOT_FOUND)
    return customer


def _phone_taken(db: Session, phone: str, exclude_id: Optional[int] = None) -> bool:
    query = db.query(Customer.id).filter(Customer.phone == phone)
    if exclude_id is not None:
        query = query.filter(Customer.id != exclude_id)
    return query.first() is not None


def _commit_customer(db: Session, customer: Customer) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        # a concurrent write took the phone between the check and the commit
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=PHONE_TAKEN) from exc
    db.refresh(customer)


@router.get("", response_model=List[CustomerOut])
def list_customers(db: Session = Depends(get_db)):
    customers = db.query(Customer).order_by(Customer.name.asc(), Customer.id.asc()).all()
    return [_customer_to_dict(customer) for customer in customers]


@router.get("/{customer_id}", response_model=CustomerOut)
def get_customer(customer_id: int, db: Session = Depends(get_db)):
    return _customer_to_dict(get_customer_or_404(db, customer_id))


@router.post("", response_model=CustomerOut, status_code=status.HTTP_201_CREATED)
def create_customer(payload: CustomerCreate, db: Session = Depends(get_db)):
    if _phone_taken(db, payload.phone):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=PHONE_TAKEN)

    customer = Customer(
        name=payload.name,
        phone=payload.phone,
        address=payload.address or None,
        location=payload.location or None,
    )
    db.add(customer)
    _commit_customer(db, customer)
    logger.info("customer created id=%s", customer.id)
    return _customer_to_dict(customer)


@router.put("/{customer_id}", response_model=CustomerOut)
def update_customer(customer_id: int, payload: CustomerUpdate, db: Session = Depends(get_db)):
    changes = {
        field: value
        for field, value in payload.model_dump(exclude_unset=True).items()
        if value not in (None, "")
    }
    if not changes:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields to update")

    customer = get_customer_or_404(db, customer_id)

    new_phone = changes.get("phone")
    if new_phone and new_phone != customer.phone and _phone_taken(db, new_phone, exclude_id=customer.id):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=PHONE_TAKEN)

    for field, value in changes.items():
        setattr(customer, field, value)

    _commit_customer(db, customer)
    return _customer_to_dict(customer)


@router.delete("/{customer_id}")
def delete_customer(customer_id: int, db: Session = Depends(get_db)):
    customer = get_customer_or_404(db, customer_id)
    orders_count = len(customer.orders)
    subscriptions_count = len(customer.subscriptions)
    db.delete(customer)
    db.commit()
    logger.info(
        "customer deleted id=%s orders=%s subscriptions=%s",
        customer_id,
        orders_count,
        subscriptions_count,
    )
    return {"message": "Customer deleted", "id": customer_id}


@router.get("/{customer_id}/analytics", response_model=CustomerAnalyticsResponse)
def get_customer_analytics(
    customer_id: int,
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    customer = get_customer_or_404(db, customer_id)
    return {
        "customer": _customer_to_dict(customer),
        "analytics": customer_analytics(db, customer, today),
    }
