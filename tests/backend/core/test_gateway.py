# tests/backend/core/test_gateway.py
from __future__ import annotations

import base64

import pytest

from conftest import FakeBackend
from backend.core.context import HISTORY_SEPARATOR
from backend.core.errors import UpstreamAuthError, UpstreamError, UpstreamQuotaError, ValidationError
from backend.core.gateway import (
    DEFAULT_IMAGE_QUESTION,
    GenerationRequest,
    HistoryTurn,
    ImageAnalysisRequest,
    PromptGateway,
)
from backend.core.results import Failure, FailureKind, ImagePart, Success, TextPart

JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x01" * 32
JPEG_B64 = base64.b64encode(JPEG_BYTES).decode("ascii")


def _gateway(backend, **kw) -> PromptGateway:
    return PromptGateway(backend, text_model="text-m", vision_model="vision-m", **kw)


@pytest.mark.asyncio
async def test_generate_text_returns_upstream_text():
    backend = FakeBackend(Success("4"))
    result = await _gateway(backend).generate_text(GenerationRequest(prompt="2+2"))

    assert result.text == "4"
    assert backend.calls == [("text-m", [TextPart("2+2")])]


@pytest.mark.asyncio
@pytest.mark.parametrize("prompt", [None, "", "   ", "\n\t"])
async def test_generate_text_rejects_missing_prompt_without_calling_upstream(prompt):
    backend = FakeBackend()
    with pytest.raises(ValidationError) as ei:
        await _gateway(backend).generate_text(GenerationRequest(prompt=prompt))

    assert ei.value.message == "Prompt is required"
    assert ei.value.http_status == 400
    assert backend.calls == []


@pytest.mark.asyncio
async def test_generate_text_linearizes_history_before_prompt():
    backend = FakeBackend(Success("fine"))
    req = GenerationRequest(
        prompt="how are you?",
        conversation_history=(HistoryTurn("user", "hi"), HistoryTurn("assistant", "hello!")),
    )
    await _gateway(backend).generate_text(req)

    (_, parts), = backend.calls
    assert parts == [TextPart("user: hi\nassistant: hello!" + HISTORY_SEPARATOR + "how are you?")]


@pytest.mark.asyncio
async def test_empty_success_text_is_treated_as_malformed():
    backend = FakeBackend(Success(""))
    with pytest.raises(UpstreamError) as ei:
        await _gateway(backend).generate_text(GenerationRequest(prompt="x"))
    assert ei.value.message == "Failed to generate content"


@pytest.mark.asyncio
async def test_malformed_failure_maps_to_failed_to_generate():
    backend = FakeBackend(Failure("no text", kind=FailureKind.MALFORMED_RESULT))
    with pytest.raises(UpstreamError) as ei:
        await _gateway(backend).generate_text(GenerationRequest(prompt="x"))
    assert ei.value.message == "Failed to generate content"
    assert ei.value.http_status == 500


@pytest.mark.asyncio
async def test_quota_failure_surfaces_as_quota_error():
    backend = FakeBackend(Failure("Quota exceeded for requests"))
    with pytest.raises(UpstreamQuotaError):
        await _gateway(backend).generate_text(GenerationRequest(prompt="x"))
    # single attempt, no retry
    assert len(backend.calls) == 1


@pytest.mark.asyncio
async def test_failure_details_are_redacted():
    backend = FakeBackend(Failure("API key KEY123 not valid"))
    with pytest.raises(UpstreamAuthError) as ei:
        await _gateway(backend, secrets=["KEY123"]).generate_text(GenerationRequest(prompt="x"))
    assert "KEY123" not in ei.value.details


@pytest.mark.asyncio
async def test_analyze_image_sends_question_and_image_parts():
    backend = FakeBackend(Success("a cat"))
    req = ImageAnalysisRequest(image=f"data:image/png;base64,{JPEG_B64}", question="What animal?")
    result = await _gateway(backend).analyze_image(req)

    assert result.text == "a cat"
    (model, parts), = backend.calls
    assert model == "vision-m"
    assert parts == [TextPart("What animal?"), ImagePart(mime_type="image/png", data=JPEG_BYTES)]


@pytest.mark.asyncio
@pytest.mark.parametrize("question", [None, "", "   "])
async def test_analyze_image_uses_default_question(question):
    backend = FakeBackend(Success("desc"))
    req = ImageAnalysisRequest(image=f"data:image/jpeg;base64,{JPEG_B64}", question=question)
    await _gateway(backend).analyze_image(req)

    (_, parts), = backend.calls
    assert parts[0] == TextPart(DEFAULT_IMAGE_QUESTION)


@pytest.mark.asyncio
async def test_analyze_image_uses_configured_default_question():
    backend = FakeBackend(Success("desc"))
    gw = _gateway(backend, default_question="Caption this")
    await gw.analyze_image(ImageAnalysisRequest(image=f"data:image/jpeg;base64,{JPEG_B64}"))
    assert backend.calls[0][1][0] == TextPart("Caption this")


@pytest.mark.asyncio
async def test_analyze_image_defaults_mime_to_jpeg():
    backend = FakeBackend(Success("desc"))
    await _gateway(backend).analyze_image(ImageAnalysisRequest(image=f"data:;base64,{JPEG_B64}"))
    assert backend.calls[0][1][1].mime_type == "image/jpeg"


@pytest.mark.asyncio
@pytest.mark.parametrize("image", [None, ""])
async def test_analyze_image_requires_image(image):
    backend = FakeBackend()
    with pytest.raises(ValidationError) as ei:
        await _gateway(backend).analyze_image(ImageAnalysisRequest(image=image))
    assert ei.value.message == "Image data is required"
    assert backend.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("image", ["not-a-data-url", "data:image/png;base64,%%%"])
async def test_analyze_image_rejects_bad_format_before_upstream(image):
    backend = FakeBackend()
    with pytest.raises(ValidationError) as ei:
        await _gateway(backend).analyze_image(ImageAnalysisRequest(image=image))
    assert ei.value.message == "Invalid image data format"
    assert backend.calls == []


def test_health_check_is_repeatable_and_uses_clock():
    ticks = iter([100.0, 102.5, 105.0])
    gw = _gateway(FakeBackend(), clock=lambda: next(ticks))

    first = gw.health_check()
    second = gw.health_check()

    assert first["status"] == "ok" and second["status"] == "ok"
    assert first["uptime"] == 2.5
    assert second["uptime"] == 5.0
    assert first["timestamp"].endswith("+00:00")


@pytest.mark.asyncio
async def test_prompt_whitespace_is_forwarded_unchanged():
    backend = FakeBackend(Success("ok"))
    prompt = "    def f():\n        pass\n"

    await _gateway(backend).generate_text(GenerationRequest(prompt=prompt))

    assert backend.calls[0][1] == [TextPart(prompt)]


@pytest.mark.asyncio
async def test_history_content_whitespace_is_forwarded_unchanged():
    backend = FakeBackend(Success("ok"))
    req = GenerationRequest(
        prompt="and now?",
        conversation_history=(HistoryTurn(" user ", "  indented\n"),),
    )
    await _gateway(backend).generate_text(req)

    assert backend.calls[0][1][0].text == "user:   indented\n" + HISTORY_SEPARATOR + "and now?"


@pytest.mark.asyncio
async def test_question_is_forwarded_unchanged():
    backend = FakeBackend(Success("desc"))
    req = ImageAnalysisRequest(image=f"data:image/jpeg;base64,{JPEG_B64}", question="  What is\nthis?  ")
    await _gateway(backend).analyze_image(req)
    assert backend.calls[0][1][0] == TextPart("  What is\nthis?  ")
