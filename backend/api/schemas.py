# backend/api/schemas.py
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _StrictModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


class _RequestModel(BaseModel):
    # Clients send camelCase; unknown keys are ignored rather than rejected
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class HistoryEntry(_RequestModel):
    role: str
    content: str


class GenerateRequest(_RequestModel):
    prompt: Optional[str] = None
    conversation_history: Optional[List[HistoryEntry]] = Field(default=None, alias="conversationHistory")


class AnalyzeImageRequest(_RequestModel):
    image: Optional[str] = None
    question: Optional[str] = None


class GenerateResponse(_StrictModel):
    generatedText: str


class AnalyzeImageResponse(_StrictModel):
    analysis: str


class ErrorResponse(_StrictModel):
    error: str
    code: Optional[str] = None
    details: Optional[str] = None


class HealthResponse(_StrictModel):
    status: str
    timestamp: str
    uptime: float
