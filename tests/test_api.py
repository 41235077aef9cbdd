"""HTTP and WebSocket surface, wired to in-memory repositories."""

from __future__ import annotations

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from trolleyseal import main
from trolleyseal.controllers.dependencies import (
    get_current_user,
    get_flight_store,
    get_rate_limiter,
    get_seal_scan_repository,
)
from trolleyseal.main import app
from trolleyseal.models.flight import FlightStatus
from trolleyseal.services import account_requests
from trolleyseal.services.account_requests import RateLimiter
from trolleyseal.services.change_feed import get_change_feed
from trolleyseal.services.email import EmailServiceError
from trolleyseal.services.flights import FlightStore
from trolleyseal.utils import create_access_token

from conftest import (
    FakeFlightRepository,
    FakeProfileRepository,
    FakeRateLimitRepository,
    FakeSealScanRepository,
)


@pytest.fixture
def repos():
    feed = get_change_feed()
    return SimpleNamespace(
        scans=FakeSealScanRepository(feed),
        flights=FakeFlightRepository(feed),
        profiles=FakeProfileRepository(),
        rate_limits=FakeRateLimitRepository(),
    )


@pytest.fixture
def client(repos, current_user, monkeypatch):
    async def fake_get_current_user():
        return current_user

    async def noop():
        return None

    app.dependency_overrides[get_current_user] = fake_get_current_user
    app.dependency_overrides[get_seal_scan_repository] = lambda: repos.scans
    app.dependency_overrides[get_flight_store] = lambda: FlightStore(
        repos.flights, repos.profiles, repos.scans, flight_number_prefix="TR"
    )
    app.dependency_overrides[get_rate_limiter] = lambda: RateLimiter(
        repos.rate_limits, limit=2
    )
    monkeypatch.setattr(main, "init_models", noop)
    monkeypatch.setattr(main, "dispose_engine", noop)

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def test_health_reports_connectivity(client, monkeypatch):
    async def fake_ping():
        return False

    monkeypatch.setattr(main, "ping", fake_ping)

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "degraded"
    assert response.json()["connected"] is False


def test_equipment_catalog(client):
    response = client.get("/equipment")

    assert response.status_code == 200
    assert [item["id"] for item in response.json()] == [
        "full-trolley",
        "half-trolley",
        "food-container",
        "service-container",
    ]
    assert response.json()[0]["sealCount"] == 2


def test_create_and_list_flights(client, repos):
    created = client.post("/flights/", json={"flightNumber": "tr123"})
    assert created.status_code == 201
    assert created.json()["flightNumber"] == "TR123"
    assert created.json()["destination"] == "TBD"

    listing = client.get("/flights/")

    assert listing.status_code == 200
    body = listing.json()
    assert [item["flightNumber"] for item in body] == ["TR123"]
    assert body[0]["createdByName"] == "alice"
    assert body[0]["sealCount"] == 0


def test_create_flight_rejects_bad_number(client, repos):
    response = client.post("/flights/", json={"flightNumber": "12AB"})

    assert response.status_code == 422
    assert response.json()["code"] == "invalid_format"
    assert repos.flights.writes == 0


def test_unknown_flight_is_404(client):
    response = client.get("/flights/999")

    assert response.status_code == 404
    assert response.json()["code"] == "not_found"


def test_seal_lifecycle(client, repos):
    flight = repos.flights.seed("TR123")

    first = client.post(
        f"/flights/{flight.id}/seals",
        json={"equipmentType": "full-trolley", "sealNumber": " 12345 "},
    )
    second = client.post(
        f"/flights/{flight.id}/seals",
        json={"equipmentType": "half-trolley", "sealNumber": "67890"},
    )
    assert first.status_code == second.status_code == 201
    assert first.json()["sealNumber"] == "12345"

    filtered = client.get(f"/flights/{flight.id}/seals", params={"equipment": "half-trolley"})
    assert [scan["sealNumber"] for scan in filtered.json()["scans"]] == ["67890"]

    removed = client.delete(f"/flights/{flight.id}/seals/{first.json()['id']}")
    assert removed.status_code == 204
    removed_again = client.delete(f"/flights/{flight.id}/seals/{first.json()['id']}")
    assert removed_again.status_code == 204

    remaining = client.get(f"/flights/{flight.id}/seals")
    assert remaining.json()["total"] == 1
    assert client.get("/flights/seal-counts").json()["counts"] == {str(flight.id): 1}


def test_seal_delete_is_scoped_to_its_flight(client, repos):
    other = repos.flights.seed("TR100")
    owner = repos.flights.seed("TR200")
    seal = client.post(
        f"/flights/{owner.id}/seals",
        json={"equipmentType": "half-trolley", "sealNumber": "B1"},
    ).json()

    wrong_flight = client.delete(f"/flights/{other.id}/seals/{seal['id']}")
    missing_flight = client.delete(f"/flights/9999/seals/{seal['id']}")

    assert wrong_flight.status_code == 204
    assert missing_flight.status_code == 404
    assert client.get(f"/flights/{owner.id}/seals").json()["total"] == 1


def test_blank_seal_is_ignored(client, repos):
    flight = repos.flights.seed("TR123")

    response = client.post(
        f"/flights/{flight.id}/seals",
        json={"equipmentType": "food-container", "sealNumber": "   "},
    )

    assert response.status_code == 204
    assert "insert" not in repos.scans.calls


def test_store_outage_maps_to_503(client, repos):
    flight = repos.flights.seed("TR123")
    repos.scans.fail_reads = True

    response = client.get(f"/flights/{flight.id}/seals")

    assert response.status_code == 503
    assert response.json()["code"] == "remote_unavailable"


def test_failed_write_maps_to_502(client, repos):
    flight = repos.flights.seed("TR123")
    repos.scans.fail_writes = True

    response = client.post(
        f"/flights/{flight.id}/seals",
        json={"equipmentType": "food-container", "sealNumber": "111"},
    )

    assert response.status_code == 502
    assert response.json()["code"] == "persist_failed"


def test_archive_and_print(client, repos):
    printable = repos.flights.seed("TR100")
    archived = repos.flights.seed("TR200")

    assert client.post(f"/flights/{archived.id}/archive").json()["status"] == "deleted"
    assert client.post(f"/flights/{archived.id}/archive").status_code == 200

    printed = client.post(f"/flights/{printable.id}/printed")
    assert printed.status_code == 202
    assert printed.json() == {"printed": True}
    assert repos.flights.rows[printable.id].status == FlightStatus.PRINTED

    assert [item["id"] for item in client.get("/flights/").json()] == [printable.id]


def test_auxiliary_update(client, repos):
    flight = repos.flights.seed("TR123")

    response = client.patch(
        f"/flights/{flight.id}/auxiliary",
        json={"hiLift1Number": "HL-7", "hiLift1FrontSeal": "S1", "padlockTotal": 4},
    )

    assert response.status_code == 200
    assert response.json()["hiLifts"][0] == {"number": "HL-7", "frontSeal": "S1", "rearSeal": None}
    assert response.json()["padlockTotal"] == 4


def test_auxiliary_update_keeps_omitted_fields(client, repos):
    flight = repos.flights.seed("TR123", driver_name="Lee", driver_id="D7", padlock_total=3)

    response = client.patch(
        f"/flights/{flight.id}/auxiliary",
        json={"driverId": None, "padlockTotal": 5},
    )

    body = response.json()
    assert response.status_code == 200
    assert (body["driverName"], body["driverId"], body["padlockTotal"]) == ("Lee", None, 5)


def test_auxiliary_update_rejects_unknown_fields(client, repos):
    flight = repos.flights.seed("TR123")

    response = client.patch(f"/flights/{flight.id}/auxiliary", json={"status": "printed"})

    assert response.status_code == 422


def test_report_json_and_text(client, repos):
    flight = repos.flights.seed("TR123", driver_name="Lee", driver_id="D7", padlock_total=3)
    for kind, seal in (("full-trolley", "A1"), ("full-trolley", "A2"), ("food-container", "F1")):
        client.post(
            f"/flights/{flight.id}/seals",
            json={"equipmentType": kind, "sealNumber": seal},
        )

    report = client.get(f"/flights/{flight.id}/report").json()

    assert [group["displayCount"] for group in report["groups"]] == [1, 1]
    assert report["preparedBy"] == "alice"
    assert report["targetRows"] == 25
    assert len(report["rows"]) >= report["targetRows"]
    assert report["trailer"][1]["value"] == "Lee / D7"

    text = client.get(f"/flights/{flight.id}/report.txt")
    assert text.status_code == 200
    assert text.headers["content-type"].startswith("text/plain")
    assert "TR123" in text.text
    assert "A1, A2" in text.text


def test_account_request_rate_limited(client, monkeypatch):
    async def fake_send_email(**kwargs):
        return {"id": "msg"}

    monkeypatch.setattr(account_requests, "send_email", fake_send_email)
    payload = {"username": "crew", "email": "crew@example.com", "staffNumber": "S-1"}

    assert client.post("/account-requests/", json=payload).status_code == 200
    assert client.post("/account-requests/", json=payload).status_code == 200
    limited = client.post("/account-requests/", json=payload)

    assert limited.status_code == 429
    assert limited.json()["code"] == "rate_limited"
    assert int(limited.headers["Retry-After"]) == limited.json()["retryAfter"] > 0


def test_account_request_email_failure_is_502(client, monkeypatch):
    async def failing_send_email(**kwargs):
        raise EmailServiceError("Failed to send email.")

    monkeypatch.setattr(account_requests, "send_email", failing_send_email)

    response = client.post(
        "/account-requests/",
        json={"username": "crew", "email": "crew@example.com", "staffNumber": "S-1"},
    )

    assert response.status_code == 502


def test_account_request_validation_is_422(client):
    response = client.post(
        "/account-requests/",
        json={"username": "crew", "email": "nope", "staffNumber": "S-1"},
    )

    assert response.status_code == 422


def test_profile_is_served_from_token_user(client):
    response = client.get("/profile/")

    assert response.status_code == 200
    assert response.json()["staffNumber"] == "S-100"


def test_change_stream_pushes_invalidations(client, repos):
    flight = repos.flights.seed("TR123")
    token = create_access_token("1", name="alice")

    with client.websocket_connect(f"/flights/{flight.id}/changes?token={token}") as websocket:
        client.post(
            f"/flights/{flight.id}/seals",
            json={"equipmentType": "half-trolley", "sealNumber": "999"},
        )
        message = websocket.receive_json()

    assert message["table"] == "seal_scans"
    assert message["flightId"] == flight.id
    assert message["action"] == "insert"


def test_change_stream_rejects_bad_token(client):
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect("/flights/1/changes?token=bogus") as websocket:
            websocket.receive_json()


def test_dashboard_stream_covers_all_flights(client, repos):
    first = repos.flights.seed("TR100")
    token = create_access_token("1", name="alice")

    with client.websocket_connect(f"/flights/changes?token={token}") as websocket:
        created = client.post("/flights/", json={"flightNumber": "TR200"}).json()
        client.post(
            f"/flights/{first.id}/seals",
            json={"equipmentType": "food-container", "sealNumber": "F1"},
        )
        messages = [websocket.receive_json(), websocket.receive_json()]

    assert [(m["table"], m["flightId"]) for m in messages] == [
        ("flights", created["id"]),
        ("seal_scans", first.id),
    ]


def test_dashboard_stream_rejects_missing_token(client):
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect("/flights/changes") as websocket:
            websocket.receive_json()
