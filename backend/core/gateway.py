# backend/core/gateway.py
"""
Prompt relay gateway.

Every call runs the same stateless pipeline:
    validate -> normalize -> one upstream call -> map Success/Failure

Validation failures raise before the backend is touched. Upstream failures
are classified by `classify_failure`; nothing is retried. The only instance
state is configuration plus the start time reported by `health_check`.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional, Sequence

from backend.core.context import linearize_history
from backend.core.data_url import DataUrl, parse_data_url
from backend.core.errors import (
    MALFORMED_MESSAGE,
    UpstreamError,
    ValidationError,
    classify_failure,
)
from backend.core.ports import GenerationBackend
from backend.core.results import Failure, ImagePart, InputPart, Success, TextPart, UpstreamResult

log = logging.getLogger("realai.gateway")

DEFAULT_IMAGE_QUESTION = "Describe this image in detail"


@dataclass(frozen=True)
class HistoryTurn:
    role: str
    content: str


@dataclass(frozen=True)
class GenerationRequest:
    prompt: Optional[str]
    conversation_history: Sequence[HistoryTurn] = field(default_factory=tuple)


@dataclass(frozen=True)
class ImageAnalysisRequest:
    image: Optional[str]
    question: Optional[str] = None


@dataclass(frozen=True)
class GenerationResult:
    text: str


class PromptGateway:
    def __init__(
        self,
        backend: GenerationBackend,
        *,
        text_model: str,
        vision_model: str,
        default_question: str = DEFAULT_IMAGE_QUESTION,
        secrets: Iterable[str] = (),
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._backend = backend
        self._text_model = text_model
        self._vision_model = vision_model
        self._default_question = default_question
        self._secrets = tuple(s for s in secrets if s)
        self._clock = clock
        self._started = clock()

    # --- operations ---------------------------------------------------------

    async def generate_text(self, request: GenerationRequest) -> GenerationResult:
        prompt = request.prompt if isinstance(request.prompt, str) else ""
        # Blank check only; the caller's text is forwarded byte-for-byte
        if not prompt.strip():
            raise ValidationError("Prompt is required")

        context = linearize_history(request.conversation_history, prompt)
        log.info(
            "generate: model=%s prompt_chars=%d history_turns=%d",
            self._text_model, len(prompt), len(request.conversation_history or ()),
        )
        result = await self._backend.generate(self._text_model, [TextPart(context)])
        return self._unwrap(result, op="generate")

    async def analyze_image(self, request: ImageAnalysisRequest) -> GenerationResult:
        if not request.image:
            raise ValidationError("Image data is required")

        parsed = parse_data_url(request.image)
        if not isinstance(parsed, DataUrl):
            log.info("analyze-image rejected: %s", parsed.reason)
            raise ValidationError("Invalid image data format")

        question = request.question if (request.question or "").strip() else self._default_question
        parts: List[InputPart] = [
            TextPart(question),
            ImagePart(mime_type=parsed.mime_type, data=parsed.data),
        ]
        log.info(
            "analyze-image: model=%s mime=%s image_bytes=%d",
            self._vision_model, parsed.mime_type, len(parsed.data),
        )
        result = await self._backend.generate(self._vision_model, parts)
        return self._unwrap(result, op="analyze-image")

    def health_check(self) -> dict:
        return {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime": round(max(0.0, self._clock() - self._started), 3),
        }

    # --- helpers ------------------------------------------------------------

    def _unwrap(self, result: UpstreamResult, *, op: str) -> GenerationResult:
        if isinstance(result, Success):
            if not result.text:
                raise UpstreamError(MALFORMED_MESSAGE)
            return GenerationResult(text=result.text)

        if isinstance(result, Failure):
            err = classify_failure(result, secrets=self._secrets)
            log.warning("%s failed: %s (%s)", op, err.category, err.details or err.message)
            raise err

        raise UpstreamError(MALFORMED_MESSAGE)
