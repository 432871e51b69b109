# tests/conftest.py
from __future__ import annotations

import os
import sys
from typing import List, Optional, Sequence, Tuple

import pytest

# --- FORCE PROJECT ROOT ONTO sys.path ----------------------------------------

# Project root = parent of the "tests" directory
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

# -----------------------------------------------------------------------------

from backend.core.results import InputPart, Success, UpstreamResult  # noqa: E402

TEST_API_KEY = "test-key-0123456789"


class FakeBackend:
    """GenerationBackend double: returns a canned result and records every call."""

    def __init__(self, result: Optional[UpstreamResult] = None) -> None:
        self.result: UpstreamResult = result if result is not None else Success("ok")
        self.calls: List[Tuple[str, Sequence[InputPart]]] = []

    async def generate(self, model: str, parts: Sequence[InputPart]) -> UpstreamResult:
        self.calls.append((model, list(parts)))
        return self.result


@pytest.fixture(autouse=True)
def _test_env_isolation(monkeypatch):
    """
    Per-test: a dummy credential, no .env leakage, and no real Gemini client.
    """
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    monkeypatch.setenv("REALAI_GOOGLE_API_KEY", TEST_API_KEY)
    for name in list(os.environ):
        if name.upper().startswith("REALAI_") and name.upper() != "REALAI_GOOGLE_API_KEY":
            monkeypatch.delenv(name, raising=False)

    # An accidental real client construction fails fast and loudly
    try:
        from backend.llm import gemini

        def _no_client(*a, **k):
            raise RuntimeError("genai.Client constructed in tests; inject a fake")

        monkeypatch.setattr(gemini.genai, "Client", _no_client, raising=True)
    except ImportError:
        pass


@pytest.fixture
def settings():
    from config import Settings

    return Settings(_env_file=None)


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def app(settings, fake_backend):
    from backend.api.app import create_app

    return create_app(settings, backend=fake_backend)


@pytest.fixture
def client(app):
    from fastapi.testclient import TestClient

    with TestClient(app) as c:
        yield c
