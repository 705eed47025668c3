from datetime import date, timedelta

import pytest
from sqlalchemy.exc import OperationalError

from dairy_app.models.order import Order
from dairy_app.services import subscription_orders
from dairy_app.services.subscription_orders import generate_subscription_orders, weekday_name
from tests.factories import TODAY, make_customer, make_order, make_subscription


def _orders(db):
    return db.query(Order).order_by(Order.order_date.asc(), Order.delivery_time.asc()).all()


def test_weekday_name_is_locale_independent():
    assert weekday_name(TODAY) == "sunday"
    assert weekday_name(TODAY + timedelta(days=1)) == "monday"


def test_generation_from_sunday_creates_monday_and_wednesday(db_session):
    customer = make_customer(db_session)
    make_subscription(db_session, customer, ["monday", "wednesday"], quantity=2)

    result = generate_subscription_orders(db_session, horizon_days=7, today=TODAY)

    assert result.created_count == 2
    assert result.skipped == 0
    assert result.failed == 0
    orders = _orders(db_session)
    assert [order.order_date for order in orders] == [date(2024, 6, 10), date(2024, 6, 12)]
    assert all(order.quantity == 2 for order in orders)
    assert all(order.status == "pending" for order in orders)
    assert all(order.delivery_time == "morning" for order in orders)


def test_generation_is_idempotent(db_session):
    customer = make_customer(db_session)
    make_subscription(db_session, customer, ["monday", "wednesday"], quantity=2)

    generate_subscription_orders(db_session, horizon_days=7, today=TODAY)
    second = generate_subscription_orders(db_session, horizon_days=7, today=TODAY)

    assert second.created_count == 0
    assert second.skipped == 2
    assert len(_orders(db_session)) == 2


def test_horizon_window_includes_today_and_excludes_last_day(db_session):
    customer = make_customer(db_session)
    make_subscription(db_session, customer, ["sunday"])

    result = generate_subscription_orders(db_session, horizon_days=7, today=TODAY)

    assert [order.order_date for order in result.created] == [TODAY]


def test_fourteen_day_horizon_covers_two_weeks(db_session):
    customer = make_customer(db_session)
    make_subscription(db_session, customer, ["monday", "wednesday"])

    result = generate_subscription_orders(db_session, horizon_days=14, today=TODAY)

    assert result.created_count == 4


def test_inactive_subscriptions_and_empty_days_are_ignored(db_session):
    customer = make_customer(db_session)
    make_subscription(db_session, customer, ["monday"], is_active=False)
    make_subscription(db_session, customer, [], delivery_time="evening")

    result = generate_subscription_orders(db_session, horizon_days=7, today=TODAY)

    assert result.created_count == 0
    assert _orders(db_session) == []


def test_existing_manual_order_is_skipped(db_session):
    customer = make_customer(db_session)
    make_order(db_session, customer, date(2024, 6, 10), status="delivered", quantity=5)
    make_subscription(db_session, customer, ["monday", "wednesday"])

    result = generate_subscription_orders(db_session, horizon_days=7, today=TODAY)

    assert result.created_count == 1
    assert result.skipped == 1
    monday = db_session.query(Order).filter(Order.order_date == date(2024, 6, 10)).one()
    assert monday.quantity == 5
    assert monday.status == "delivered"


def test_slots_are_independent(db_session):
    customer = make_customer(db_session)
    make_subscription(db_session, customer, ["monday"], delivery_time="morning")
    make_subscription(db_session, customer, ["monday"], delivery_time="evening")

    result = generate_subscription_orders(db_session, horizon_days=7, today=TODAY)

    assert result.created_count == 2
    assert {order.delivery_time for order in result.created} == {"morning", "evening"}


def test_overlapping_subscriptions_produce_one_order_per_slot(db_session):
    customer = make_customer(db_session)
    make_subscription(db_session, customer, ["monday"], quantity=1)
    make_subscription(db_session, customer, ["monday"], quantity=3)

    result = generate_subscription_orders(db_session, horizon_days=7, today=TODAY)

    assert result.created_count == 1
    assert result.skipped == 1
    assert result.created[0].quantity == 1


def test_orders_for_several_customers(db_session):
    first = make_customer(db_session, name="Ayse")
    second = make_customer(db_session, name="Mehmet")
    make_subscription(db_session, first, ["tuesday"])
    make_subscription(db_session, second, ["tuesday", "friday"], delivery_time="evening")

    result = generate_subscription_orders(db_session, horizon_days=7, today=TODAY)

    assert result.created_count == 3
    assert {order.customer_id for order in result.created} == {first.id, second.id}


@pytest.mark.parametrize("horizon", [0, -3, True])
def test_invalid_horizon_is_rejected(db_session, horizon):
    with pytest.raises(ValueError):
        generate_subscription_orders(db_session, horizon_days=horizon, today=TODAY)


def test_storage_error_on_one_insert_does_not_stop_generation(db_session, monkeypatch):
    customer = make_customer(db_session)
    make_subscription(db_session, customer, ["monday", "wednesday"])
    real_commit = db_session.commit
    calls = []

    def flaky_commit():
        calls.append(1)
        if len(calls) == 1:
            raise OperationalError("INSERT INTO orders", {}, Exception("disk I/O error"))
        return real_commit()

    monkeypatch.setattr(db_session, "commit", flaky_commit)

    result = generate_subscription_orders(db_session, horizon_days=7, today=TODAY)

    assert result.failed == 1
    assert result.created_count == 1
    assert result.skipped == 0
    assert [order.order_date for order in _orders(db_session)] == [date(2024, 6, 12)]


def test_concurrent_insert_of_same_slot_counts_as_skipped(db_session, monkeypatch):
    customer = make_customer(db_session)
    make_subscription(db_session, customer, ["monday"])
    make_order(db_session, customer, date(2024, 6, 10))
    real_exists = subscription_orders._order_exists
    checks = []

    def exists_after_first_check(*args):
        # the first check runs before the other writer commits
        checks.append(args)
        if len(checks) == 1:
            return False
        return real_exists(*args)

    monkeypatch.setattr(subscription_orders, "_order_exists", exists_after_first_check)

    result = generate_subscription_orders(db_session, horizon_days=7, today=TODAY)

    assert result.skipped == 1
    assert result.failed == 0
    assert result.created_count == 0
    assert len(_orders(db_session)) == 1


def test_rejected_insert_for_missing_customer_counts_as_failed(db_session, monkeypatch):
    plan = subscription_orders._SubscriptionPlan(
        subscription_id=1,
        customer_id=9999,
        weekdays=frozenset({"monday"}),
        delivery_time="morning",
        quantity=1,
    )
    monkeypatch.setattr(subscription_orders, "_load_active_plans", lambda _db: [plan])

    result = generate_subscription_orders(db_session, horizon_days=7, today=TODAY)

    assert result.failed == 1
    assert result.skipped == 0
    assert result.created_count == 0
    assert _orders(db_session) == []
