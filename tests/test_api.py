"""Tests for the HTTP and WebSocket surface."""

import asyncio
import json

import pytest
from fastapi.testclient import TestClient

from safe_amr.api.ws_simulator import SnapshotBroadcaster
from safe_amr.config import Settings
from safe_amr.core.simulator import AdaptiveRateSimulator
from safe_amr.main import create_app


@pytest.fixture
def client():
    app = create_app(Settings(autostart_driver=False))
    with TestClient(app) as c:
        yield c


def _simulator(client: TestClient) -> AdaptiveRateSimulator:
    return client.app.state.simulator


class TestHttp:
    def test_health(self, client: TestClient) -> None:
        body = client.get("/health").json()
        assert body["status"] == "ok"
        assert body["mode"] == "moderate"
        assert body["tick"] == 0
        assert body["interval"] == 1.5
        assert body["driver_running"] is False

    def test_snapshot(self, client: TestClient) -> None:
        _simulator(client).advance(2)
        body = client.get("/api/simulator").json()
        assert body["tick"] == 2
        assert [s["tick"] for s in body["history"]] == [1, 2]
        assert body["interval_label"].endswith("s")

    def test_set_mode_does_not_tick(self, client: TestClient) -> None:
        resp = client.post("/api/simulator/mode", json={"mode": "catastrophic"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["mode"] == "catastrophic"
        assert body["tick"] == 0
        assert body["interval"] == 1.5

    def test_invalid_mode_rejected(self, client: TestClient) -> None:
        resp = client.post("/api/simulator/mode", json={"mode": "apocalyptic"})
        assert resp.status_code == 422
        assert _simulator(client).mode.value == "moderate"

    def test_economics(self, client: TestClient) -> None:
        body = client.get("/api/economics").json()
        assert body["baseline"]["vcpu_seconds"] == 245998
        assert body["adaptive"]["vcpu_seconds"] == 58967
        assert body["vcpu_savings_percent"] == pytest.approx(76.03)

    def test_apps_do_not_share_state(self) -> None:
        settings = Settings(autostart_driver=False)
        a, b = create_app(settings), create_app(settings)
        a.state.simulator.advance(3)
        assert b.state.simulator.tick_count == 0


class TestDriverLifespan:
    def test_driver_runs_while_app_is_up(self) -> None:
        app = create_app(Settings(autostart_driver=True, tick_period_seconds=0.01))
        with TestClient(app) as c:
            assert c.get("/health").json()["driver_running"] is True
        assert app.state.driver.running is False


class TestWebSocket:
    def test_initial_snapshot_on_connect(self, client: TestClient) -> None:
        with client.websocket_connect("/ws/simulator") as ws:
            data = ws.receive_json()
            assert data["type"] == "snapshot"
            assert data["tick"] == 0
            assert data["mode"] == "moderate"

    def test_ping_pong(self, client: TestClient) -> None:
        with client.websocket_connect("/ws/simulator") as ws:
            ws.receive_json()
            ws.send_text("ping")
            assert ws.receive_text() == "pong"

    def test_mode_change_acknowledged(self, client: TestClient) -> None:
        with client.websocket_connect("/ws/simulator") as ws:
            ws.receive_json()
            ws.send_text(json.dumps({"mode": "critical"}))
            ack = ws.receive_json()
            assert ack == {"status": "accepted", "mode": "critical", "tick": 0}
        assert _simulator(client).mode.value == "critical"

    def test_invalid_message_keeps_socket_open(self, client: TestClient) -> None:
        with client.websocket_connect("/ws/simulator") as ws:
            ws.receive_json()
            ws.send_text(json.dumps({"mode": "apocalyptic"}))
            assert ws.receive_json()["status"] == "error"
            ws.send_text("not json")
            assert ws.receive_json()["status"] == "error"
            ws.send_text("ping")
            assert ws.receive_text() == "pong"


class _FakeSocket:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.sent: list[str] = []

    async def accept(self) -> None:
        pass

    async def send_text(self, message: str) -> None:
        if self.fail:
            raise RuntimeError("connection closed")
        self.sent.append(message)


class TestSnapshotBroadcaster:
    @pytest.mark.asyncio
    async def test_tick_is_pushed_to_clients(self) -> None:
        sim = AdaptiveRateSimulator()
        broadcaster = SnapshotBroadcaster(sim)
        ws = _FakeSocket()
        await broadcaster.connect(ws)  # type: ignore[arg-type]
        sim.tick()
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        assert len(ws.sent) == 1
        message = json.loads(ws.sent[0])
        assert message["type"] == "snapshot"
        assert message["tick"] == 1
        broadcaster.close()

    @pytest.mark.asyncio
    async def test_dead_clients_dropped(self) -> None:
        sim = AdaptiveRateSimulator()
        broadcaster = SnapshotBroadcaster(sim)
        await broadcaster.connect(_FakeSocket(fail=True))  # type: ignore[arg-type]
        await broadcaster.connect(_FakeSocket())  # type: ignore[arg-type]
        await broadcaster.broadcast({"type": "snapshot"})
        assert broadcaster.client_count == 1

    def test_no_clients_no_broadcast(self) -> None:
        sim = AdaptiveRateSimulator()
        broadcaster = SnapshotBroadcaster(sim)
        sim.tick()  # no running loop needed when nobody listens
        assert broadcaster.client_count == 0

    def test_close_detaches_from_simulator(self) -> None:
        sim = AdaptiveRateSimulator()
        broadcaster = SnapshotBroadcaster(sim)
        broadcaster.close()
        assert broadcaster.on_snapshot not in sim._observers
