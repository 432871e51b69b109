# backend/api/routes/generate.py
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Request

from backend.api.schemas import ErrorResponse, GenerateRequest, GenerateResponse
from backend.core.gateway import GenerationRequest, HistoryTurn

log = logging.getLogger("realai.routes.generate")
router = APIRouter(tags=["generate"])

_ERRORS = {400: {"model": ErrorResponse}, 401: {"model": ErrorResponse},
           429: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}


@router.post("/generate", response_model=GenerateResponse, responses=_ERRORS)
async def generate_endpoint(request: Request, payload: Optional[GenerateRequest] = None) -> GenerateResponse:
    """
    Text generation. Prior turns, if any, come from the caller on every request.
    An absent body is treated like `{}` so it fails with "Prompt is required".
    """
    payload = payload or GenerateRequest()
    history = tuple(
        HistoryTurn(role=h.role, content=h.content) for h in (payload.conversation_history or [])
    )
    result = await request.app.state.gateway.generate_text(
        GenerationRequest(prompt=payload.prompt, conversation_history=history)
    )
    return GenerateResponse(generatedText=result.text)
