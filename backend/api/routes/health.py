# backend/api/routes/health.py
from __future__ import annotations

import logging
from fastapi import APIRouter, Request

from backend.api.schemas import HealthResponse

router = APIRouter(tags=["health"])
log = logging.getLogger("realai.routes.health")


@router.get("/health", response_model=HealthResponse)
async def health(request: Request) -> HealthResponse:
    """
    Liveness probe. Never touches the upstream service.
    """
    return HealthResponse(**request.app.state.gateway.health_check())
