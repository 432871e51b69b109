# backend/core/ports.py
from __future__ import annotations

from typing import Protocol, Sequence

from backend.core.results import InputPart, UpstreamResult


class GenerationBackend(Protocol):
    async def generate(self, model: str, parts: Sequence[InputPart]) -> UpstreamResult: ...
