"""REST endpoints for the AMR simulator and the resource comparison chart.

Paths:
    GET  /api/simulator        current snapshot
    POST /api/simulator/mode   declare a severity mode (no tick)
    GET  /api/economics        fixed resource-comparison payload
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter

from safe_amr.api.ws_simulator import ModeRequest
from safe_amr.core.simulator import AdaptiveRateSimulator
from safe_amr.domain.economics import RESOURCE_COMPARISON

logger = logging.getLogger(__name__)


def create_simulator_router(simulator: AdaptiveRateSimulator) -> APIRouter:
    """Factory that wires the REST endpoints to a concrete simulator."""

    router = APIRouter(prefix="/api", tags=["simulator"])

    @router.get("/simulator")
    async def get_snapshot() -> dict[str, Any]:
        return simulator.snapshot().model_dump(mode="json")

    @router.post("/simulator/mode")
    async def set_mode(request: ModeRequest) -> dict[str, Any]:
        """Declare a severity mode.  Invalid modes are rejected with 422."""
        simulator.set_mode(request.mode)
        return simulator.snapshot().model_dump(mode="json")

    @router.get("/economics")
    async def get_economics() -> dict[str, Any]:
        return RESOURCE_COMPARISON.model_dump(mode="json")

    return router
