"""Tests for the HTTP and WebSocket surface.

The app fixture's policy runs on a FrozenClock set five hours before
DEPARTURE, and its timers are slowed to an hour so WebSocket tests only
receive the pushes they cause.
"""

from datetime import timedelta

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from lobby_reveal.foundation.timestamps import to_iso

from tests.conftest import DEPARTURE

ADMIN = "alice"
MEMBER = "bob"


@pytest.fixture
def client(app: FastAPI):
    with TestClient(app) as c:
        yield c


def _create_trip(client: TestClient, **kw) -> dict:
    body = {
        "name": "Mystery Weekend",
        "admin_id": ADMIN,
        "departure_time": to_iso(DEPARTURE),
        "destination": "Lisbon",
        "weather_summary": "Sunny, 24°C",
        "lobby_code": "LISB0N",
    }
    body.update(kw)
    resp = client.post("/api/trips", json=body)
    assert resp.status_code == 201
    return resp.json()


@pytest.fixture
def trip(client: TestClient) -> dict:
    trip = _create_trip(client)
    client.post(f"/api/lobbies/{trip['lobby_code']}/join", json={"user_id": MEMBER})
    client.post(
        f"/api/trips/{trip['id']}/tickets",
        params={"user_id": ADMIN},
        json={
            "member_id": MEMBER,
            "type": "flight",
            "carrier": "TP",
            "departure_location": "Amsterdam",
            "arrival_location": "Lisbon",
            "seat_number": "14C",
            "qr_code_url": "https://cdn.invalid/qr.png",
        },
    )
    return trip


def _add_activity(client: TestClient, trip_id: str, start_offset: timedelta) -> dict:
    resp = client.post(
        f"/api/trips/{trip_id}/schedule",
        params={"user_id": ADMIN},
        json={"title": "Sunset boat tour", "start_time": to_iso(DEPARTURE + start_offset)},
    )
    assert resp.status_code == 201
    return resp.json()


class TestTrips:
    def test_create_trip(self, client: TestClient) -> None:
        trip = _create_trip(client)
        assert trip["lobby_code"] == "LISB0N"
        assert trip["status"] == "planning"

    def test_generated_lobby_code(self, client: TestClient) -> None:
        trip = _create_trip(client, lobby_code=None)
        assert len(trip["lobby_code"]) == 6

    def test_bad_departure_rejected(self, client: TestClient) -> None:
        resp = client.post("/api/trips", json={"name": "x", "admin_id": ADMIN, "departure_time": "soonish"})
        assert resp.status_code == 422

    @pytest.mark.parametrize("departure", ["9999-12-31T23:00:00-05:00", "0001-01-01T00:30:00+01:00"])
    def test_departure_outside_utc_range_rejected(self, client: TestClient, departure: str) -> None:
        resp = client.post("/api/trips", json={"name": "x", "admin_id": ADMIN, "departure_time": departure})
        assert resp.status_code == 422

    def test_duplicate_lobby_code_conflicts(self, client: TestClient) -> None:
        first = _create_trip(client)
        resp = client.post(
            "/api/trips",
            json={"name": "Copycat", "admin_id": "carol", "lobby_code": first["lobby_code"].lower()},
        )
        assert resp.status_code == 409

        joined = client.post(f"/api/lobbies/{first['lobby_code']}/join", json={"user_id": MEMBER}).json()
        assert joined["trip_id"] == first["id"]

    def test_generated_code_collision_is_retried(self, client: TestClient, monkeypatch) -> None:
        first = _create_trip(client)
        codes = iter([first["lobby_code"], "FRESH2"])
        monkeypatch.setattr("lobby_reveal.api.lobby.new_lobby_code", lambda: next(codes))

        trip = _create_trip(client, lobby_code=None)
        assert trip["lobby_code"] == "FRESH2"

    def test_join_with_unknown_code(self, client: TestClient) -> None:
        resp = client.post("/api/lobbies/NOPE99/join", json={"user_id": MEMBER})
        assert resp.status_code == 404

    def test_join_returns_role(self, client: TestClient, trip: dict) -> None:
        resp = client.post(f"/api/lobbies/{trip['lobby_code'].lower()}/join", json={"user_id": ADMIN})
        assert resp.json() == {"trip_id": trip["id"], "role": "admin"}


class TestLobby:
    def test_member_sees_hidden_ticket(self, client: TestClient, trip: dict) -> None:
        data = client.get(f"/api/trips/{trip['id']}/lobby", params={"user_id": MEMBER}).json()
        assert data["viewer_role"] == "member"
        assert data["ticket_decision"]["state"] == "hidden"
        assert data["ticket_countdown_label"] == "QR code available in:"
        assert data["tickets"][0]["qr_code_url"] is None
        assert data["destination"]["destination"] is None

    def test_admin_sees_full(self, client: TestClient, trip: dict) -> None:
        data = client.get(f"/api/trips/{trip['id']}/lobby", params={"user_id": ADMIN}).json()
        assert data["ticket_decision"]["state"] == "full"
        assert data["destination"]["destination"] == "Lisbon"
        assert data["tickets"] == []

    def test_outsider_forbidden(self, client: TestClient, trip: dict) -> None:
        resp = client.get(f"/api/trips/{trip['id']}/lobby", params={"user_id": "mallory"})
        assert resp.status_code == 403

    def test_unknown_trip(self, client: TestClient) -> None:
        resp = client.get("/api/trips/missing/lobby", params={"user_id": MEMBER})
        assert resp.status_code == 404

    def test_reveal_lists_activities(self, client: TestClient, trip: dict) -> None:
        item = _add_activity(client, trip["id"], timedelta(hours=-4, minutes=-30))
        data = client.get(f"/api/trips/{trip['id']}/reveal", params={"user_id": MEMBER}).json()
        assert data["departure"]["state"] == "hidden"
        assert data["destination"]["state"] == "hidden"
        assert data["activities"][item["id"]]["state"] == "revealed"


class TestAdminWrites:
    def test_member_cannot_add_ticket(self, client: TestClient, trip: dict) -> None:
        resp = client.post(
            f"/api/trips/{trip['id']}/tickets",
            params={"user_id": MEMBER},
            json={"member_id": MEMBER, "departure_location": "A", "arrival_location": "B"},
        )
        assert resp.status_code == 403

    def test_ticket_for_non_member_rejected(self, client: TestClient, trip: dict) -> None:
        resp = client.post(
            f"/api/trips/{trip['id']}/tickets",
            params={"user_id": ADMIN},
            json={"member_id": "mallory", "departure_location": "A", "arrival_location": "B"},
        )
        assert resp.status_code == 404

    def test_move_departure_out_of_utc_range_rejected(self, client: TestClient, trip: dict) -> None:
        resp = client.patch(
            f"/api/trips/{trip['id']}/departure",
            params={"user_id": ADMIN},
            json={"departure_time": "9999-12-31T23:00:00-05:00"},
        )
        assert resp.status_code == 422

    def test_move_departure_changes_member_view(self, client: TestClient, trip: dict) -> None:
        resp = client.patch(
            f"/api/trips/{trip['id']}/departure",
            params={"user_id": ADMIN},
            json={"departure_time": to_iso(DEPARTURE - timedelta(hours=3))},
        )
        assert resp.status_code == 200
        assert resp.json()["retargeted"] == 0

        data = client.get(f"/api/trips/{trip['id']}/lobby", params={"user_id": MEMBER}).json()
        assert data["ticket_decision"]["state"] == "qr_only"
        assert data["tickets"][0]["arrival_location"] == "???"

    def test_clearing_departure_gives_unknown(self, client: TestClient, trip: dict) -> None:
        client.patch(f"/api/trips/{trip['id']}/departure", params={"user_id": ADMIN}, json={"departure_time": None})
        data = client.get(f"/api/trips/{trip['id']}/lobby", params={"user_id": MEMBER}).json()
        assert data["ticket_decision"]["state"] == "unknown"
        assert data["phase"] == "unscheduled"

    def test_move_unknown_schedule_item(self, client: TestClient, trip: dict) -> None:
        resp = client.patch(
            f"/api/trips/{trip['id']}/schedule/missing",
            params={"user_id": ADMIN},
            json={"start_time": to_iso(DEPARTURE)},
        )
        assert resp.status_code == 404


class TestRevealStream:
    def test_snapshot_on_connect(self, client: TestClient, trip: dict) -> None:
        item = _add_activity(client, trip["id"], timedelta(hours=2))
        with client.websocket_connect(f"/ws/trips/{trip['id']}/reveal?user_id={MEMBER}") as ws:
            msg = ws.receive_json()
        assert msg["type"] == "snapshot"
        decisions = msg["decisions"]
        assert decisions[f"{trip['id']}:departure"]["state"] == "hidden"
        assert decisions[f"{trip['id']}:destination"]["state"] == "hidden"
        assert decisions[f"{trip['id']}:activity:{item['id']}"]["state"] == "hidden"

    def test_ping_pong(self, client: TestClient, trip: dict) -> None:
        with client.websocket_connect(f"/ws/trips/{trip['id']}/reveal?user_id={MEMBER}") as ws:
            ws.receive_json()
            ws.send_text("ping")
            assert ws.receive_text() == "pong"

    def test_departure_edit_pushes_transitions(self, client: TestClient, trip: dict, app: FastAPI) -> None:
        with client.websocket_connect(f"/ws/trips/{trip['id']}/reveal?user_id={MEMBER}") as ws:
            ws.receive_json()
            assert app.state.scheduler.active_count == 2

            resp = client.patch(
                f"/api/trips/{trip['id']}/departure",
                params={"user_id": ADMIN},
                json={"departure_time": to_iso(DEPARTURE - timedelta(hours=3))},
            )
            assert resp.json()["retargeted"] == 2

            changed = ws.receive_json()
            assert changed["type"] == "reveal_changed"
            assert changed["key"] == f"{trip['id']}:departure"
            assert changed["decision"]["state"] == "qr_only"

            tick = ws.receive_json()
            assert tick["type"] == "countdown"
            assert tick["label"] == "Full reveal in:"
            assert tick["countdown"] == "1h 0m 0s"

            dest = ws.receive_json()
            assert dest["key"] == f"{trip['id']}:destination"
            assert dest["decision"]["state"] == "approximate"

    def test_subscriptions_released_on_disconnect(self, client: TestClient, trip: dict, app: FastAPI) -> None:
        with client.websocket_connect(f"/ws/trips/{trip['id']}/reveal?user_id={MEMBER}") as ws:
            ws.receive_json()
            ws.send_text("ping")
            ws.receive_text()
            assert app.state.scheduler.active_count == 2
        assert app.state.scheduler.active_count == 0

    def test_outsider_rejected(self, client: TestClient, trip: dict) -> None:
        with pytest.raises(WebSocketDisconnect) as exc:
            with client.websocket_connect(f"/ws/trips/{trip['id']}/reveal?user_id=mallory") as ws:
                ws.receive_json()
        assert exc.value.code == 4403

    def test_unknown_trip_rejected(self, client: TestClient) -> None:
        with pytest.raises(WebSocketDisconnect) as exc:
            with client.websocket_connect(f"/ws/trips/missing/reveal?user_id={MEMBER}") as ws:
                ws.receive_json()
        assert exc.value.code == 4404


class TestHealth:
    def test_health_reports_thresholds(self) -> None:
        from lobby_reveal.main import app as main_app

        with TestClient(main_app) as c:
            data = c.get("/health").json()
        assert data["status"] == "ok"
        assert data["active_subscriptions"] == 0
        assert data["thresholds_minutes"] == {"qr_only": 180.0, "full": 60.0, "activity": 60.0}
