# backend/core/context.py
from __future__ import annotations

from collections.abc import Mapping
from typing import Iterable, Union

from pydantic import BaseModel

HISTORY_SEPARATOR = "\n\nCurrent prompt:\n"

Turn = Union[Mapping[str, str], BaseModel]


def _field(entry: Turn, name: str) -> str:
    if isinstance(entry, Mapping):
        value = entry.get(name)
    else:
        value = getattr(entry, name, None)
    return str(value if value is not None else "")


def linearize_history(history: Iterable[Turn] | None, prompt: str) -> str:
    """
    Flatten caller-supplied turns into one context string.
    Order is preserved; each turn renders as "<role>: <content>".
    """
    lines = [f"{_field(e, 'role').strip()}: {_field(e, 'content')}" for e in (history or [])]
    if not lines:
        return prompt
    return "\n".join(lines) + HISTORY_SEPARATOR + prompt
