"""Unit tests for core.wide_event module.

RequestTimingMiddleware opens the event with request context, services
record the entities they touched, and every recorder is a no-op when no
event is open.
"""

import pytest

from core.wide_event import (
    clear_wide_event,
    get_wide_event,
    init_wide_event,
    record_entity,
    record_fields,
)


@pytest.fixture
def request_event() -> dict:
    """Mimic what RequestTimingMiddleware does."""
    return init_wide_event(service_name="test-api", request_id="test-req-1")


@pytest.mark.unit
class TestWideEventLifecycle:
    def test_init_returns_given_fields(self, request_event: dict):
        assert request_event == {"service_name": "test-api", "request_id": "test-req-1"}

    def test_record_fields(self, request_event: dict):
        record_fields(http_status_code=201, outcome="success")
        assert get_wide_event()["http_status_code"] == 201
        assert get_wide_event()["outcome"] == "success"

    def test_record_entity_nests_under_family(self, request_event: dict):
        record_entity("product", 7, action="created", sku="SKU-1A2B3C4D")
        assert get_wide_event()["product"] == {
            "id": 7,
            "action": "created",
            "sku": "SKU-1A2B3C4D",
        }

    def test_record_entity_merges_repeated_calls(self, request_event: dict):
        record_entity("order", 3, action="updated")
        record_entity("order", None, status="SHIPPED")
        assert get_wide_event()["order"] == {
            "id": 3,
            "action": "updated",
            "status": "SHIPPED",
        }

    def test_families_are_kept_apart(self, request_event: dict):
        record_entity("department", 1, action="deleted")
        record_entity("employee", 2, action="deleted")
        assert get_wide_event()["department"]["id"] == 1
        assert get_wide_event()["employee"]["id"] == 2

    def test_init_with_no_fields_still_opens_event(self):
        init_wide_event()
        record_fields(http_method="POST")
        assert get_wide_event() == {"http_method": "POST"}

    def test_direct_dict_mutation_reflected_in_get(self, request_event: dict):
        request_event["http_route"] = "/api/orders/{order_id}"
        assert get_wide_event()["http_route"] == "/api/orders/{order_id}"


@pytest.mark.unit
class TestWideEventClosed:
    def test_recorders_noop_when_closed(self):
        clear_wide_event()
        record_fields(should_not="stick")
        record_entity("product", 1, action="created")
        assert get_wide_event() == {}

    def test_get_returns_throwaway_dict_when_closed(self):
        clear_wide_event()
        get_wide_event()["leak"] = True
        assert get_wide_event() == {}

    def test_next_request_starts_clean(self, request_event: dict):
        record_entity("order", 1, action="created")
        clear_wide_event()

        init_wide_event(request_id="test-req-2")
        assert get_wide_event() == {"request_id": "test-req-2"}
