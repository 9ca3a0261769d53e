"""safe-amr — Adaptive Monitoring Rate simulator service.

This is the application entry point.  It wires one AdaptiveRateSimulator,
its TickDriver, the snapshot broadcaster and the HTTP / WebSocket endpoints
together.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from safe_amr.api.simulator import create_simulator_router
from safe_amr.api.ws_simulator import SnapshotBroadcaster, create_simulator_ws_router
from safe_amr.config import Settings, settings
from safe_amr.core.driver import TickDriver
from safe_amr.core.simulator import AdaptiveRateSimulator

# ── Logging ──────────────────────────────────────────────────────────────────

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)

logger = logging.getLogger(__name__)


def create_app(app_settings: Settings = settings) -> FastAPI:
    """Build an app that owns its own simulator instance."""

    # ── State ────────────────────────────────────────────────────────────
    simulator = AdaptiveRateSimulator(config=app_settings.simulator_config())
    driver = TickDriver(simulator, period_seconds=app_settings.tick_period_seconds)
    broadcaster = SnapshotBroadcaster(simulator)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if app_settings.autostart_driver:
            driver.start()
        try:
            yield
        finally:
            await driver.aclose()
            broadcaster.close()

    # ── App ──────────────────────────────────────────────────────────────
    app = FastAPI(
        title=app_settings.app_name,
        description="Adaptive Monitoring Rate simulator for SAFE",
        version="0.1.0",
        debug=app_settings.debug,
        lifespan=lifespan,
    )
    app.state.simulator = simulator
    app.state.driver = driver
    app.state.broadcaster = broadcaster

    # ── Routes ───────────────────────────────────────────────────────────
    app.include_router(create_simulator_router(simulator))
    app.include_router(create_simulator_ws_router(simulator, broadcaster))

    # ── Health ───────────────────────────────────────────────────────────
    @app.get("/health")
    async def health() -> dict:
        return {
            "status": "ok",
            "mode": simulator.mode.value,
            "tick": simulator.tick_count,
            "interval": round(simulator.current_interval, 4),
            "driver_running": driver.running,
            "skipped_ticks": driver.skipped_ticks,
            "stream_clients": broadcaster.client_count,
        }

    return app


app = create_app()


def run() -> None:
    """Serve the app with uvicorn (``safe-amr`` console script)."""
    import uvicorn

    uvicorn.run("safe_amr.main:app", host="0.0.0.0", port=8000, log_level=settings.log_level.lower())
