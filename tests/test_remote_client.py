import json

import httpx
import pytest

from src.gfa.schemas.allocation import GFARequest
from src.gfa.services.allocation import remote
from src.gfa.services.allocation.remote import RemoteAllocatorClient, reconcile_remote_payload, run_with_fallback


def _request() -> GFARequest:
    return GFARequest.model_validate(
        {
            "data": {
                "customers": [{"id": "C1", "name": "One", "latitude": 21.5, "longitude": 39.2, "demand": {"P1": 10}}],
                "facilities": [{"id": "F1", "name": "Hub", "latitude": 21.6, "longitude": 39.3, "capacity": {"P1": 50}}],
                "products": [{"id": "P1", "name": "Widget"}],
            },
            "settings": {"transportCostPerKm": 2.0, "fixedCostPerFacility": 100},
        }
    )


REMOTE_PAYLOAD = {
    "success": True,
    "allocation": [
        {
            "customerId": "C1",
            "customerName": "One",
            "facilityId": "F1",
            "facilityName": "Hub",
            "productId": "P1",
            "productName": "Widget",
            "quantity": 10,
            "distance": 15.0,
        }
    ],
    "kpis": {
        "totalCost": 400,
        "transportCost": 300,
        "fixedCost": 100,
        "totalDistance": 150,
        "avgDistance": 15,
        "facilitiesUsed": 1,
        "serviceLevel": 100,
        "totalDemand": 10,
        "totalFulfilled": 10,
        "unmetDemand": 0,
    },
    "summary": {"totalAllocations": 1},
}


def test_reconcile_remote_payload_maps_names():
    payload = reconcile_remote_payload(REMOTE_PAYLOAD, _request())

    assert payload["kpis"]["allocatedDemand"] == 10
    assert "totalFulfilled" not in payload["kpis"]
    assert payload["allocation"][0]["transportCost"] == 15.0 * 2.0 * 10
    assert payload["facilityUsage"] == []
    assert payload["mode"] == "greedy"


def test_remote_client_posts_camel_case_payload():
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=REMOTE_PAYLOAD)

    client = RemoteAllocatorClient(base_url="http://remote.test", transport=httpx.MockTransport(handler))
    response = client.optimize(_request())

    assert seen["path"] == "/api/optimize-gfa"
    assert seen["body"]["settings"] == {"transportCostPerKm": 2.0, "fixedCostPerFacility": 100.0}
    assert seen["body"]["data"]["customers"][0]["demand"] == {"P1": 10.0}
    assert response.kpis.allocated_demand == 10
    assert response.allocation[0].facility_id == "F1"


def test_remote_client_retries_network_errors(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(remote.time, "sleep", lambda seconds: None)
    calls = {"count": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["count"] += 1
        if calls["count"] < 3:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(200, json=REMOTE_PAYLOAD)

    client = RemoteAllocatorClient(
        base_url="http://remote.test", max_retries=2, transport=httpx.MockTransport(handler)
    )
    response = client.optimize(_request())

    assert calls["count"] == 3
    assert response.success


def test_remote_client_requires_base_url(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(remote.settings, "remote_base_url", None)
    with pytest.raises(ValueError):
        RemoteAllocatorClient()


def test_fallback_to_local_when_remote_fails(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(remote.time, "sleep", lambda seconds: None)

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, json={"error": "unavailable"})

    client = RemoteAllocatorClient(base_url="http://remote.test", transport=httpx.MockTransport(handler))
    response, used_remote = run_with_fallback(_request(), client)

    assert used_remote is False
    assert response.success
    assert response.allocation[0].customer_id == "C1"


def test_local_when_remote_not_configured(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(remote.settings, "remote_base_url", None)

    response, used_remote = run_with_fallback(_request())

    assert used_remote is False
    assert response.kpis.service_level == 100.0


def test_remote_used_when_available():
    client = RemoteAllocatorClient(
        base_url="http://remote.test",
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json=REMOTE_PAYLOAD)),
    )

    response, used_remote = run_with_fallback(_request(), client)

    assert used_remote is True
    assert response.kpis.total_cost == 400
