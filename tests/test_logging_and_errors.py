import json
import logging

from sqlalchemy.exc import OperationalError

from dairy_app.core.database import get_db
from dairy_app.core.logging_setup import JsonFormatter
from dairy_app.core.request_context import clear_request_context, set_request_id
from dairy_app.services.locations import maps_url, parse_location


def _record(message, *args, **extra):
    record = logging.LogRecord("dairy_app.test", logging.INFO, __file__, 1, message, args, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_request_id_and_extras():
    set_request_id("abc")
    try:
        payload = json.loads(JsonFormatter("%(message)s").format(_record("hello %s", "world", status_code=201)))
    finally:
        clear_request_context()

    assert payload["message"] == "hello world"
    assert payload["request_id"] == "abc"
    assert payload["level"] == "INFO"
    assert payload["module"] == "dairy_app.test"
    assert payload["status_code"] == 201
    assert "endpoint" not in payload


def test_json_formatter_masks_secrets():
    payload = json.loads(JsonFormatter("%(message)s").format(_record("login password=hunter2")))

    assert "hunter2" not in payload["message"]
    assert payload["message"] == "login password=***"


def test_storage_errors_become_generic_500(client):
    from dairy_app.main import app

    class BrokenSession:
        def query(self, *_args, **_kwargs):
            raise OperationalError("SELECT 1", {}, Exception("database is locked"))

    app.dependency_overrides[get_db] = lambda: BrokenSession()

    response = client.get("/api/customers")

    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error"}


def test_parse_location_and_maps_url():
    assert parse_location("41.0082, 28.9784") == (41.0082, 28.9784)
    assert parse_location("91,10") is None
    assert parse_location("somewhere") is None
    assert maps_url(None) is None
    assert maps_url("41.0082,28.9784") == "https://maps.apple.com/?q=41.0082,28.9784"
