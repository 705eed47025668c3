from datetime import date

from dairy_app.models.order import Order
from dairy_app.models.subscription import Subscription, SubscriptionDay
from tests.factories import make_customer, make_order, make_subscription

CUSTOMER_PAYLOAD = {
    "name": "Ayse Yilmaz",
    "phone": "05321234567",
    "address": "Bagdat Cd. 12",
    "location": "40.9631,29.0631",
}


def test_create_and_get_customer(client):
    response = client.post("/api/customers", json=CUSTOMER_PAYLOAD)

    assert response.status_code == 201
    body = response.json()
    assert body["name"] == "Ayse Yilmaz"
    assert body["maps_url"] == "https://maps.apple.com/?q=40.9631,29.0631"

    fetched = client.get(f"/api/customers/{body['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["phone"] == "05321234567"


def test_list_customers_sorted_by_name(client, db_session):
    make_customer(db_session, name="Zeynep")
    make_customer(db_session, name="Ali")

    response = client.get("/api/customers")

    assert [item["name"] for item in response.json()] == ["Ali", "Zeynep"]


def test_duplicate_phone_is_rejected(client):
    assert client.post("/api/customers", json=CUSTOMER_PAYLOAD).status_code == 201

    response = client.post("/api/customers", json={**CUSTOMER_PAYLOAD, "name": "Other"})

    assert response.status_code == 409
    assert response.json() == {"detail": "Phone number already registered"}


def test_update_to_taken_phone_is_rejected(client, db_session):
    make_customer(db_session, name="First", phone="05320000001")
    second = make_customer(db_session, name="Second", phone="05320000002")

    response = client.put(f"/api/customers/{second.id}", json={"phone": "05320000001"})

    assert response.status_code == 409


def test_update_keeps_own_phone_and_changes_fields(client, db_session):
    customer = make_customer(db_session, name="First", phone="05320000001")

    response = client.put(
        f"/api/customers/{customer.id}",
        json={"phone": "05320000001", "address": "New street 5", "location": ""},
    )

    assert response.status_code == 200
    assert response.json()["address"] == "New street 5"
    assert response.json()["maps_url"] is None


def test_update_without_fields_is_rejected(client, db_session):
    customer = make_customer(db_session)

    response = client.put(f"/api/customers/{customer.id}", json={})

    assert response.status_code == 400
    assert response.json() == {"detail": "No fields to update"}


def test_missing_name_reports_first_validation_error(client):
    response = client.post("/api/customers", json={"phone": "05321234567"})

    assert response.status_code == 400
    assert response.json()["detail"].startswith("name:")


def test_short_phone_is_rejected(client):
    response = client.post("/api/customers", json={**CUSTOMER_PAYLOAD, "phone": "123"})

    assert response.status_code == 400
    assert response.json()["detail"].startswith("phone:")


def test_unknown_customer_returns_404(client):
    response = client.get("/api/customers/999")

    assert response.status_code == 404
    assert response.json() == {"detail": "Customer not found"}


def test_delete_customer_cascades(client, db_session):
    customer = make_customer(db_session)
    make_order(db_session, customer, date(2024, 6, 1))
    make_subscription(db_session, customer, ["monday", "friday"])

    response = client.delete(f"/api/customers/{customer.id}")

    assert response.status_code == 200
    assert response.json() == {"message": "Customer deleted", "id": customer.id}
    assert db_session.query(Order).count() == 0
    assert db_session.query(Subscription).count() == 0
    assert db_session.query(SubscriptionDay).count() == 0
    assert client.get(f"/api/customers/{customer.id}").status_code == 404


def test_customer_analytics_endpoint(client, db_session):
    customer = make_customer(db_session)
    make_order(db_session, customer, date(2024, 6, 1))
    make_order(db_session, customer, date(2024, 6, 5), status="delivered")

    response = client.get(f"/api/customers/{customer.id}/analytics")

    assert response.status_code == 200
    body = response.json()
    assert body["customer"]["id"] == customer.id
    assert body["analytics"]["total_orders"] == 2
    assert body["analytics"]["avg_days_between_orders"] == 4.0
    assert body["analytics"]["days_since_last_order"] == 4
