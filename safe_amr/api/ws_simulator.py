"""Simulator WebSocket — streams live snapshots to connected frontends.

Architecture:
    TickDriver  →  simulator.tick()  →  SnapshotBroadcaster.on_snapshot()
                                              ↓
    FE  ←  /ws/simulator  ←  one "snapshot" message per tick

    FE  →  /ws/simulator  →  {"mode": "..."}  →  simulator.set_mode()

The broadcaster subscribes to a single simulator and pushes every snapshot
to all connected clients.  Frontends never mutate state except through
mode requests.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import BaseModel, ValidationError

from safe_amr.core.simulator import AdaptiveRateSimulator
from safe_amr.domain.enums import SeverityMode
from safe_amr.domain.snapshot import SimulationSnapshot

logger = logging.getLogger(__name__)


class ModeRequest(BaseModel):
    """A user's severity selection, validated at the boundary."""

    mode: SeverityMode

    model_config = {"extra": "ignore"}


def snapshot_message(snapshot: SimulationSnapshot) -> dict[str, Any]:
    return {"type": "snapshot", **snapshot.model_dump(mode="json")}


class SnapshotBroadcaster:
    """Tracks connected frontend WebSocket clients and broadcasts snapshots."""

    def __init__(self, simulator: AdaptiveRateSimulator) -> None:
        self._simulator = simulator
        self._clients: set[WebSocket] = set()
        self._lock = asyncio.Lock()
        self._pending: set[asyncio.Task[None]] = set()
        self._unsubscribe = simulator.subscribe(self.on_snapshot)

    # ── Client management ────────────────────────────────────────────

    async def connect(self, ws: WebSocket) -> None:
        await ws.accept()
        async with self._lock:
            self._clients.add(ws)
        logger.info("Simulator client connected (%d total)", len(self._clients))

    async def disconnect(self, ws: WebSocket) -> None:
        async with self._lock:
            self._clients.discard(ws)
        logger.info("Simulator client disconnected (%d remaining)", len(self._clients))

    @property
    def client_count(self) -> int:
        return len(self._clients)

    def close(self) -> None:
        """Detach from the simulator and drop any in-flight broadcasts."""
        self._unsubscribe()
        for task in list(self._pending):
            task.cancel()

    # ── Broadcast ────────────────────────────────────────────────────

    def on_snapshot(self, snapshot: SimulationSnapshot) -> None:
        """Simulator observer.  Schedules a broadcast without blocking the tick."""
        if not self._clients:
            return  # No frontends connected, skip

        task = asyncio.get_running_loop().create_task(
            self.broadcast(snapshot_message(snapshot))
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def broadcast(self, payload: dict[str, Any]) -> None:
        """Send payload to all connected clients, dropping dead ones."""
        message = json.dumps(payload, default=str)
        dead: set[WebSocket] = set()

        async with self._lock:
            clients = set(self._clients)

        for ws in clients:
            try:
                await ws.send_text(message)
            except Exception:
                dead.add(ws)

        if dead:
            async with self._lock:
                self._clients -= dead
            logger.info("Removed %d dead simulator client(s)", len(dead))


# ── WebSocket endpoint ───────────────────────────────────────────────────


def create_simulator_ws_router(
    simulator: AdaptiveRateSimulator,
    broadcaster: SnapshotBroadcaster,
) -> APIRouter:
    """Factory that creates the simulator WebSocket endpoint."""

    router = APIRouter()

    @router.websocket("/ws/simulator")
    async def simulator_ws(websocket: WebSocket) -> None:
        await broadcaster.connect(websocket)
        try:
            await websocket.send_json(snapshot_message(simulator.snapshot()))
            while True:
                data = await websocket.receive_text()
                if data.strip().lower() == "ping":
                    await websocket.send_text("pong")
                    continue

                # ── Validate at the boundary ─────────────────────────────
                try:
                    request = ModeRequest.model_validate_json(data)
                except ValidationError as exc:
                    logger.debug("Rejected mode request: %s", exc)
                    await websocket.send_json({
                        "status": "error",
                        "detail": "Expected {\"mode\": one of "
                                  + ", ".join(m.value for m in SeverityMode) + "}",
                    })
                    continue

                simulator.set_mode(request.mode)
                await websocket.send_json({
                    "status": "accepted",
                    "mode": request.mode.value,
                    "tick": simulator.tick_count,
                })
        except WebSocketDisconnect:
            await broadcaster.disconnect(websocket)

    return router
