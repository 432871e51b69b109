# backend/util/logging_setup.py
from __future__ import annotations

import logging
import sys
from typing import Iterable, Optional

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


class RedactingFormatter(logging.Formatter):
    """Masks credentials in the fully rendered line, tracebacks included."""

    def __init__(self, fmt: str = LOG_FORMAT, secrets: Iterable[str] = ()) -> None:
        super().__init__(fmt)
        self._secrets = tuple(s for s in secrets if s)

    def format(self, record: logging.LogRecord) -> str:
        out = super().format(record)
        for s in self._secrets:
            out = out.replace(s, "***")
        return out


def init_logging(level: Optional[str] = None, secrets: Iterable[str] = ()) -> None:
    lvl_name = (level or "info").lower()
    lvl = _LEVELS.get(lvl_name, logging.INFO)

    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(RedactingFormatter(LOG_FORMAT, secrets=secrets))
    root.addHandler(handler)
    root.setLevel(lvl)
