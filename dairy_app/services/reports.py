"""Read-only reporting queries over orders and customers.

Every function takes the reference date explicitly so results are reproducible. Windows are
calendar-day windows ending "open" (orders already generated for upcoming days are counted),
except :func:`daily_distribution` which covers exactly the last seven days.
"""

from __future__ import annotations

from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from dairy_app.models.customer import Customer
from dairy_app.models.order import Order

INACTIVE_AFTER_DAYS = 7
TOP_CUSTOMERS_LIMIT = 10
TOP_CUSTOMERS_WINDOW_DAYS = 30
DAILY_AVERAGE_WINDOW_DAYS = 30
WEEKLY_TREND_WINDOW_DAYS = 56
WEEKLY_TREND_BUCKETS = 8
MONTHLY_TREND_WINDOW_DAYS = 365
MONTHLY_TREND_BUCKETS = 12
DAILY_DISTRIBUTION_DAYS = 7


def round1(value: float | int | None) -> float | None:
    """Round half-up to one decimal place, the way the dashboard displays figures."""
    if value is None:
        return None
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def _count_where(condition) -> Any:
    return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)


def _slot_counts() -> tuple[Any, Any]:
    return (
        _count_where(Order.delivery_time == "morning").label("morning_orders"),
        _count_where(Order.delivery_time == "evening").label("evening_orders"),
    )


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


def days_between(start: Optional[date], end: Optional[date]) -> Optional[int]:
    if start is None or end is None:
        return None
    return (end - start).days


def average_days_between_orders(first: Optional[date], last: Optional[date], count: int) -> Optional[float]:
    if count < 2 or first is None or last is None:
        return None
    return round1((last - first).days / (count - 1))


def customer_analysis(db: Session, today: date) -> List[Dict[str, Any]]:
    total_orders = func.count(Order.id).label("total_orders")
    last_order_date = func.max(Order.order_date).label("last_order_date")
    rows = (
        db.query(
            Customer.id,
            Customer.name,
            Customer.phone,
            total_orders,
            _count_where(Order.status == "delivered").label("delivered_orders"),
            _count_where(Order.status == "pending").label("pending_orders"),
            func.min(Order.order_date).label("first_order_date"),
            last_order_date,
        )
        .outerjoin(Order, Order.customer_id == Customer.id)
        .group_by(Customer.id, Customer.name, Customer.phone)
        .all()
    )

    rows = sorted(
        rows,
        key=lambda row: (
            -int(row.total_orders or 0),
            -(row.last_order_date.toordinal() if row.last_order_date else 0),
            row.id,
        ),
    )

    return [
        {
            "id": row.id,
            "name": row.name,
            "phone": row.phone,
            "total_orders": int(row.total_orders or 0),
            "delivered_orders": int(row.delivered_orders or 0),
            "pending_orders": int(row.pending_orders or 0),
            "first_order_date": _iso(row.first_order_date),
            "last_order_date": _iso(row.last_order_date),
            "avg_days_between_orders": average_days_between_orders(
                row.first_order_date, row.last_order_date, int(row.total_orders or 0)
            ),
            "days_since_last_order": days_between(row.last_order_date, today),
        }
        for row in rows
    ]


def top_customers_30days(db: Session, today: date) -> List[Dict[str, Any]]:
    since = today - timedelta(days=TOP_CUSTOMERS_WINDOW_DAYS)
    morning, evening = _slot_counts()
    order_count = func.count(Order.id).label("order_count")
    rows = (
        db.query(Customer.id, Customer.name, Customer.phone, order_count, morning, evening)
        .join(Order, Order.customer_id == Customer.id)
        .filter(Order.order_date >= since)
        .group_by(Customer.id, Customer.name, Customer.phone)
        .order_by(order_count.desc(), Customer.name.asc())
        .limit(TOP_CUSTOMERS_LIMIT)
        .all()
    )
    return [
        {
            "id": row.id,
            "name": row.name,
            "phone": row.phone,
            "order_count": int(row.order_count or 0),
            "morning_orders": int(row.morning_orders or 0),
            "evening_orders": int(row.evening_orders or 0),
        }
        for row in rows
    ]


def daily_average(db: Session, today: date) -> Dict[str, Any]:
    since = today - timedelta(days=DAILY_AVERAGE_WINDOW_DAYS)
    morning, evening = _slot_counts()
    row = (
        db.query(
            func.count(Order.id).label("total_orders"),
            morning,
            evening,
            _count_where(Order.status == "delivered").label("delivered_orders"),
            _count_where(Order.status == "pending").label("pending_orders"),
        )
        .filter(Order.order_date >= since)
        .one()
    )
    total = int(row.total_orders or 0)
    return {
        "total_orders_30days": total,
        "daily_average": round1(total / DAILY_AVERAGE_WINDOW_DAYS),
        "morning_orders": int(row.morning_orders or 0),
        "evening_orders": int(row.evening_orders or 0),
        "delivered_orders": int(row.delivered_orders or 0),
        "pending_orders": int(row.pending_orders or 0),
    }


def _iso_week_label(value: date) -> str:
    year, week, _ = value.isocalendar()
    return f"{year}-W{week:02d}"


def _month_label(value: date) -> str:
    return f"{value.year}-{value.month:02d}"


def _bucket_daily_counts(db: Session, since: date, key: str, label_for, limit: int) -> List[Dict[str, Any]]:
    morning, evening = _slot_counts()
    rows = (
        db.query(Order.order_date, func.count(Order.id).label("order_count"), morning, evening)
        .filter(Order.order_date >= since)
        .group_by(Order.order_date)
        .all()
    )

    # calendar buckets have no portable SQL expression, group the per-day rows here
    buckets: Dict[str, Dict[str, Any]] = {}
    for row in rows:
        label = label_for(row.order_date)
        bucket = buckets.setdefault(
            label,
            {key: label, "order_count": 0, "morning_orders": 0, "evening_orders": 0},
        )
        bucket["order_count"] += int(row.order_count or 0)
        bucket["morning_orders"] += int(row.morning_orders or 0)
        bucket["evening_orders"] += int(row.evening_orders or 0)

    ordered = sorted(buckets.values(), key=lambda bucket: bucket[key], reverse=True)
    return ordered[:limit]


def weekly_trend(db: Session, today: date) -> List[Dict[str, Any]]:
    since = today - timedelta(days=WEEKLY_TREND_WINDOW_DAYS)
    return _bucket_daily_counts(db, since, "week", _iso_week_label, WEEKLY_TREND_BUCKETS)


def monthly_trend(db: Session, today: date) -> List[Dict[str, Any]]:
    since = today - timedelta(days=MONTHLY_TREND_WINDOW_DAYS)
    return _bucket_daily_counts(db, since, "month", _month_label, MONTHLY_TREND_BUCKETS)


def inactive_customers(db: Session, today: date) -> List[Dict[str, Any]]:
    rows = (
        db.query(
            Customer.id,
            Customer.name,
            Customer.phone,
            func.max(Order.order_date).label("last_order_date"),
            func.count(Order.id).label("total_orders"),
        )
        .outerjoin(Order, Order.customer_id == Customer.id)
        .group_by(Customer.id, Customer.name, Customer.phone)
        .all()
    )

    items = []
    for row in rows:
        days_inactive = days_between(row.last_order_date, today)
        if days_inactive is not None and days_inactive <= INACTIVE_AFTER_DAYS:
            continue
        items.append(
            {
                "id": row.id,
                "name": row.name,
                "phone": row.phone,
                "last_order_date": _iso(row.last_order_date),
                "days_inactive": days_inactive,
                "total_orders": int(row.total_orders or 0),
            }
        )

    # never ordered counts as the most inactive
    items.sort(
        key=lambda item: (
            item["days_inactive"] is not None,
            -(item["days_inactive"] or 0),
            item["name"],
        )
    )
    return items


def delivery_time_analysis(db: Session) -> List[Dict[str, Any]]:
    total = db.query(func.count(Order.id)).scalar() or 0
    if not total:
        return []

    order_count = func.count(Order.id).label("order_count")
    rows = (
        db.query(Order.delivery_time, order_count)
        .group_by(Order.delivery_time)
        .order_by(order_count.desc(), Order.delivery_time.asc())
        .all()
    )
    return [
        {
            "delivery_time": row.delivery_time,
            "order_count": int(row.order_count or 0),
            "percentage": round1(int(row.order_count or 0) * 100 / total),
        }
        for row in rows
    ]


def daily_distribution(db: Session, today: date) -> List[Dict[str, Any]]:
    since = today - timedelta(days=DAILY_DISTRIBUTION_DAYS - 1)
    morning, evening = _slot_counts()
    rows = (
        db.query(Order.order_date, func.count(Order.id).label("order_count"), morning, evening)
        .filter(Order.order_date >= since, Order.order_date <= today)
        .group_by(Order.order_date)
        .order_by(Order.order_date.desc())
        .all()
    )
    return [
        {
            "order_date": _iso(row.order_date),
            "order_count": int(row.order_count or 0),
            "morning_orders": int(row.morning_orders or 0),
            "evening_orders": int(row.evening_orders or 0),
        }
        for row in rows
    ]


def dashboard_stats(db: Session) -> Dict[str, int]:
    row = db.query(
        func.count(Order.id).label("total_orders"),
        _count_where(Order.status == "pending").label("pending_orders"),
        _count_where(Order.status == "delivered").label("delivered_orders"),
    ).one()
    total_customers = db.query(func.count(Customer.id)).scalar() or 0
    return {
        "total_orders": int(row.total_orders or 0),
        "pending_orders": int(row.pending_orders or 0),
        "delivered_orders": int(row.delivered_orders or 0),
        "total_customers": int(total_customers),
    }


def customer_analytics(db: Session, customer: Customer, today: date) -> Dict[str, Any]:
    orders = (
        db.query(Order)
        .filter(Order.customer_id == customer.id)
        .order_by(Order.order_date.asc(), Order.id.asc())
        .all()
    )
    if not orders:
        return {
            "total_orders": 0,
            "total_quantity": 0,
            "first_order_date": None,
            "last_order_date": None,
            "days_since_last_order": None,
            "avg_days_between_orders": None,
            "morning_orders": 0,
            "evening_orders": 0,
            "delivered_orders": 0,
            "pending_orders": 0,
            "cancelled_orders": 0,
        }

    first_order_date = orders[0].order_date
    last_order_date = orders[-1].order_date
    by_status = {"delivered": 0, "pending": 0, "cancelled": 0}
    by_slot = {"morning": 0, "evening": 0}
    for order in orders:
        if order.status in by_status:
            by_status[order.status] += 1
        if order.delivery_time in by_slot:
            by_slot[order.delivery_time] += 1

    return {
        "total_orders": len(orders),
        "total_quantity": sum(int(order.quantity or 0) for order in orders),
        "first_order_date": _iso(first_order_date),
        "last_order_date": _iso(last_order_date),
        "days_since_last_order": days_between(last_order_date, today),
        "avg_days_between_orders": average_days_between_orders(first_order_date, last_order_date, len(orders)),
        "morning_orders": by_slot["morning"],
        "evening_orders": by_slot["evening"],
        "delivered_orders": by_status["delivered"],
        "pending_orders": by_status["pending"],
        "cancelled_orders": by_status["cancelled"],
    }
