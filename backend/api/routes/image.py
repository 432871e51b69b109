# backend/api/routes/image.py
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Request

from backend.api.schemas import AnalyzeImageRequest, AnalyzeImageResponse, ErrorResponse
from backend.core.gateway import ImageAnalysisRequest

log = logging.getLogger("realai.routes.image")
router = APIRouter(tags=["image"])

_ERRORS = {400: {"model": ErrorResponse}, 401: {"model": ErrorResponse},
           413: {"model": ErrorResponse}, 429: {"model": ErrorResponse},
           500: {"model": ErrorResponse}}


@router.post("/analyze-image", response_model=AnalyzeImageResponse, responses=_ERRORS)
async def analyze_image_endpoint(
    request: Request, payload: Optional[AnalyzeImageRequest] = None
) -> AnalyzeImageResponse:
    payload = payload or AnalyzeImageRequest()
    result = await request.app.state.gateway.analyze_image(
        ImageAnalysisRequest(image=payload.image, question=payload.question)
    )
    return AnalyzeImageResponse(analysis=result.text)
