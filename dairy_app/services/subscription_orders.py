from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from dairy_app.core import clock
from dairy_app.models.customer import Customer
from dairy_app.models.order import Order
from dairy_app.models.subscription import WEEKDAYS, Subscription

logger = logging.getLogger(__name__)
GENERATION_PREFIX = "[ORDER_GENERATION]"


@dataclass(frozen=True)
class _SubscriptionPlan:
    subscription_id: int
    customer_id: int
    weekdays: frozenset
    delivery_time: str
    quantity: int


@dataclass
class GenerationResult:
    created: list = field(default_factory=list)
    skipped: int = 0
    failed: int = 0

    @property
    def created_count(self) -> int:
        return len(self.created)


def weekday_name(value: date) -> str:
    return WEEKDAYS[value.weekday()]


def _load_active_plans(db: Session) -> list[_SubscriptionPlan]:
    rows = (
        db.query(Subscription)
        .join(Customer, Customer.id == Subscription.customer_id)
        .filter(Subscription.is_active.is_(True))
        .order_by(Subscription.id.asc())
        .all()
    )
    # detached snapshot; the per-order commits/rollbacks below expire ORM state
    return [
        _SubscriptionPlan(
            subscription_id=subscription.id,
            customer_id=subscription.customer_id,
            weekdays=frozenset(subscription.days),
            delivery_time=subscription.delivery_time,
            quantity=int(subscription.quantity or 1),
        )
        for subscription in rows
    ]


def _order_exists(db: Session, customer_id: int, order_date: date, delivery_time: str) -> bool:
    return (
        db.query(Order.id)
        .filter(
            Order.customer_id == customer_id,
            Order.order_date == order_date,
            Order.delivery_time == delivery_time,
        )
        .first()
        is not None
    )


def generate_subscription_orders(
    db: Session,
    horizon_days: int = 7,
    today: date | None = None,
) -> GenerationResult:
    """Materialize pending orders for active subscriptions over the next ``horizon_days`` days.

    The window starts at ``today`` (inclusive). A (customer, date, delivery time) triple that
    already has an order is skipped, so overlapping calls never duplicate orders. Each insert is
    committed on its own: a duplicate reported by the unique constraint counts as skipped, any
    other storage error is logged and counted as failed and generation moves on to the next
    triple.
    """
    if isinstance(horizon_days, bool) or not isinstance(horizon_days, int) or horizon_days < 1:
        raise ValueError("horizon_days must be a positive integer")

    start = today or clock.today()
    plans = _load_active_plans(db)
    result = GenerationResult()

    logger.info(
        "%s start from=%s horizon_days=%s active_subscriptions=%s",
        GENERATION_PREFIX,
        start.isoformat(),
        horizon_days,
        len(plans),
    )

    for offset in range(horizon_days):
        target_date = start + timedelta(days=offset)
        day_name = weekday_name(target_date)

        for plan in plans:
            if day_name not in plan.weekdays:
                continue

            if _order_exists(db, plan.customer_id, target_date, plan.delivery_time):
                result.skipped += 1
                continue

            order = Order(
                customer_id=plan.customer_id,
                order_date=target_date,
                delivery_time=plan.delivery_time,
                quantity=plan.quantity,
                status="pending",
            )
            try:
                db.add(order)
                db.commit()
            except IntegrityError:
                db.rollback()
                # only a row written by a concurrent run counts as a skip
                if _order_exists(db, plan.customer_id, target_date, plan.delivery_time):
                    result.skipped += 1
                    logger.info(
                        "%s already exists customer_id=%s date=%s delivery_time=%s",
                        GENERATION_PREFIX,
                        plan.customer_id,
                        target_date.isoformat(),
                        plan.delivery_time,
                    )
                else:
                    result.failed += 1
                    logger.exception(
                        "%s insert rejected subscription_id=%s customer_id=%s date=%s",
                        GENERATION_PREFIX,
                        plan.subscription_id,
                        plan.customer_id,
                        target_date.isoformat(),
                    )
                continue
            except SQLAlchemyError:
                db.rollback()
                result.failed += 1
                logger.exception(
                    "%s insert failed subscription_id=%s customer_id=%s date=%s",
                    GENERATION_PREFIX,
                    plan.subscription_id,
                    plan.customer_id,
                    target_date.isoformat(),
                )
                continue

            db.refresh(order)
            result.created.append(order)

    logger.info(
        "%s done created=%s skipped=%s failed=%s",
        GENERATION_PREFIX,
        result.created_count,
        result.skipped,
        result.failed,
    )
    return result
