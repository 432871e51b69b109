# backend/core/data_url.py
"""
Single home for data-URL handling: `data:<mime-type>;base64,<payload>`.

Unparsable input yields a `DataUrlError` value instead of raising, so callers
decide how to surface it. An empty or malformed mime section falls back to
image/jpeg; the payload must always be strict base64.
"""
from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass, field
from typing import Union

FALLBACK_MIME_TYPE = "image/jpeg"

_DATA_URL = re.compile(r"data:(?P<mime>[^;,]*);base64,(?P<payload>.+)")
_MIME_TOKEN = re.compile(r"[A-Za-z0-9][\w!#$&^.+-]*/[A-Za-z0-9][\w!#$&^.+-]*")


@dataclass(frozen=True)
class DataUrl:
    mime_type: str
    payload: str
    data: bytes = field(repr=False)


@dataclass(frozen=True)
class DataUrlError:
    reason: str


def parse_data_url(value: str) -> Union[DataUrl, DataUrlError]:
    m = _DATA_URL.fullmatch((value or "").strip())
    if not m:
        return DataUrlError("not a base64 data URL")

    mime = m.group("mime").strip().lower()
    if not _MIME_TOKEN.fullmatch(mime):
        mime = FALLBACK_MIME_TYPE

    payload = m.group("payload")
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        return DataUrlError("payload is not valid base64")
    if not data:
        return DataUrlError("payload is empty")

    return DataUrl(mime_type=mime, payload=payload, data=data)
