# backend/middleware/body_limit.py
from __future__ import annotations

import json
import logging
from typing import Optional

from fastapi import HTTPException
from starlette.types import ASGIApp, Message, Receive, Scope, Send

log = logging.getLogger("realai.middleware")

TOO_LARGE_MESSAGE = "Request body too large"


class BodyTooLarge(HTTPException):
    def __init__(self) -> None:
        super().__init__(status_code=413, detail=TOO_LARGE_MESSAGE)


def _declared_length(scope: Scope) -> Optional[int]:
    for name, value in scope.get("headers") or []:
        if name == b"content-length":
            try:
                return int(value)
            except ValueError:
                return None
    return None


class BodyLimitMiddleware:
    """
    Rejects request bodies above `max_bytes` with 413.

    A declared Content-Length is checked up front and answered here without
    calling the app. Chunked bodies are counted as they stream: the overflow
    raises `BodyTooLarge`, which must be an HTTPException because FastAPI turns
    any other error during body parsing into a 400. Inside a FastAPI route the
    app's HTTPException handler therefore renders the 413 (same body shape);
    the `except` below only answers reads that happen outside a route.
    """
    def __init__(self, app: ASGIApp, max_bytes: int) -> None:
        self.app = app
        self.max_bytes = max_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        declared = _declared_length(scope)
        if declared is not None and declared > self.max_bytes:
            log.info("Rejected %s %s: declared body %d > %d", scope.get("method"), scope.get("path"), declared, self.max_bytes)
            await self._reject(send)
            return

        received = 0
        started = False

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_bytes:
                    raise BodyTooLarge()
            return message

        async def tracking_send(message: Message) -> None:
            nonlocal started
            if message["type"] == "http.response.start":
                started = True
            await send(message)

        try:
            await self.app(scope, limited_receive, tracking_send)
        except BodyTooLarge:
            if started:
                raise
            await self._reject(send)

    async def _reject(self, send: Send) -> None:
        body = json.dumps({"error": TOO_LARGE_MESSAGE, "code": "ValidationError"}).encode("utf-8")
        await send({
            "type": "http.response.start",
            "status": 413,
            "headers": [
                (b"content-type", b"application/json"),
                (b"content-length", str(len(body)).encode("ascii")),
            ],
        })
        await send({"type": "http.response.body", "body": body})
