# backend/llm/gemini.py
from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence

from google import genai
from google.genai import errors, types

from backend.core.results import (
    Failure,
    FailureKind,
    ImagePart,
    InputPart,
    Success,
    TextPart,
    UpstreamResult,
)

log = logging.getLogger("realai.gemini")


def to_sdk_parts(parts: Sequence[InputPart]) -> List[types.Part]:
    out: List[types.Part] = []
    for p in parts:
        if isinstance(p, TextPart):
            out.append(types.Part.from_text(text=p.text))
        elif isinstance(p, ImagePart):
            out.append(types.Part.from_bytes(data=p.data, mime_type=p.mime_type))
        else:
            raise TypeError(f"unsupported input part: {type(p).__name__}")
    return out


def _extract_text(response: Any) -> Optional[str]:
    # `.text` raises or returns None when the candidate was blocked or empty
    try:
        text = getattr(response, "text", None)
    except (ValueError, AttributeError):
        return None
    if isinstance(text, str) and text.strip():
        return text
    return None


class GeminiBackend:
    """
    GenerationBackend over google-genai's async client.
    Exceptions never escape `generate`; they come back as Failure values.
    """

    def __init__(self, api_key: str, *, client: Any = None) -> None:
        self._client = client if client is not None else genai.Client(api_key=api_key)

    async def generate(self, model: str, parts: Sequence[InputPart]) -> UpstreamResult:
        contents = to_sdk_parts(parts)
        try:
            response = await self._client.aio.models.generate_content(
                model=model,
                contents=contents,
            )
        except errors.APIError as e:
            log.debug("Gemini API error: code=%s status=%s", e.code, e.status)
            return Failure(
                reason=str(e.message or e),
                kind=FailureKind.CALL_FAILED,
                status_code=e.code if isinstance(e.code, int) else None,
            )
        except Exception as e:
            log.exception("Gemini call failed: %s", e)
            return Failure(reason=str(e), kind=FailureKind.CALL_FAILED)

        text = _extract_text(response)
        if text is None:
            return Failure(reason="response contained no text", kind=FailureKind.MALFORMED_RESULT)
        return Success(text=text)

    async def aclose(self) -> None:
        """Release the SDK's async HTTP session. Called once from the app lifespan."""
        await self._client.aio.aclose()
        log.debug("Gemini client closed.")
