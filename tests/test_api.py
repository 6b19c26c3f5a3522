import pytest
from prometheus_client import REGISTRY

from hotelcatalog.api import server


def test_catalog_kl_for_two(client, kl_suite):
    r = client.get(
        "/rooms/catalog",
        params={"search_term": "Kuala Lumpur, Malaysia", "check_in": "2024-06-10", "guests": 2},
    )
    j = r.json()
    assert r.status_code == 200
    assert j["total_count"] == 1
    assert j["items"][0]["name"] == "Deluxe Suite"
    assert j["items"][0]["base_price"] == 150
    assert j["available_rooms"][str(kl_suite.room_type_id)] == 2
    assert j["meta"]["destinations"] == ["Kuala Lumpur, Malaysia"]


def test_catalog_short_term(client, kl_suite):
    j = client.get("/rooms/catalog", params={"search_term": "a"}).json()
    assert j["items"] == []
    assert "at least 2 characters" in j["search_error"]


def test_catalog_rejects_malformed_date(client):
    r = client.get("/rooms/catalog", params={"check_in": "10/06/2024"})
    assert r.status_code == 400
    assert "check_in" in r.json()["detail"]


def test_search_returns_summaries(client, kl_suite):
    j = client.get("/rooms/search", params={"term": "deluxe", "guests": 2}).json()
    assert len(j) == 1
    assert j[0]["location"] == "Kuala Lumpur, Malaysia"
    assert j[0]["available_rooms"] == 2


def test_check_availability(client, kl_suite):
    body = {"room_type_id": kl_suite.room_type_id, "check_in": "2024-06-10", "check_out": "2024-06-12"}
    j = client.post("/rooms/check-availability", json=body).json()
    assert j == {"available": True, "count": 2, "message": None}

    body["check_out"] = "2024-06-09"
    j = client.post("/rooms/check-availability", json=body).json()
    assert j["available"] is False
    assert j["message"] == "Check-out date must be after check-in date."


def test_details_and_not_found(client, kl_suite):
    j = client.get(f"/rooms/{kl_suite.room_type_id}").json()
    assert j["room_type"]["name"] == "Deluxe Suite"
    assert j["available_rooms"] == 2
    assert j["reviews"] == []

    r = client.get("/rooms/9999")
    assert r.status_code == 404
    assert r.json()["detail"] == "Room type not found"


def _sample(name, op):
    return REGISTRY.get_sample_value(name, {"op": op}) or 0


@pytest.mark.skipif(not server.OBS_ON, reason="metrics disabled")
def test_check_availability_is_counted(client, kl_suite):
    before = _sample("catalog_requests_total", "check_availability")
    body = {"room_type_id": kl_suite.room_type_id, "check_in": "2024-06-10", "check_out": "2024-06-12"}
    client.post("/rooms/check-availability", json=body)
    assert _sample("catalog_requests_total", "check_availability") == before + 1


@pytest.mark.skipif(not server.OBS_ON, reason="metrics disabled")
def test_details_failure_is_counted(client, svc, monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("store down")

    monkeypatch.setattr(svc, "room_type_details", boom)
    before = _sample("catalog_request_fail_total", "details")
    with pytest.raises(RuntimeError):
        client.get("/rooms/1")
    assert _sample("catalog_request_fail_total", "details") == before + 1
    # not-found is an answer, not a failure
    monkeypatch.setattr(svc, "room_type_details", lambda *a, **kw: None)
    assert client.get("/rooms/1").status_code == 404
    assert _sample("catalog_request_fail_total", "details") == before + 1
