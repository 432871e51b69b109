# backend/core/results.py
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class TextPart:
    text: str


@dataclass(frozen=True)
class ImagePart:
    mime_type: str
    data: bytes


InputPart = Union[TextPart, ImagePart]


class FailureKind(str, enum.Enum):
    CALL_FAILED = "call_failed"
    MALFORMED_RESULT = "malformed_result"


@dataclass(frozen=True)
class Success:
    text: str


@dataclass(frozen=True)
class Failure:
    """
    An upstream call that produced no usable text.
    `status_code` is set only when the SDK reports a structured HTTP code.
    """
    reason: str
    kind: FailureKind = FailureKind.CALL_FAILED
    status_code: Optional[int] = None


UpstreamResult = Union[Success, Failure]
