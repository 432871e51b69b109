# backend/middleware/catch_all.py
from __future__ import annotations

import json
import logging

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from backend.core.errors import InternalError

log = logging.getLogger("realai.middleware")


class CatchAllMiddleware:
    """
    Renders any unhandled exception as a 500 InternalError body.
    Must sit inside CORSMiddleware so the response keeps its CORS headers.
    """
    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        started = False

        async def tracking_send(message: Message) -> None:
            nonlocal started
            if message["type"] == "http.response.start":
                started = True
            await send(message)

        try:
            await self.app(scope, receive, tracking_send)
        except Exception as e:
            log.exception("Unhandled error on %s %s: %s", scope.get("method"), scope.get("path"), e)
            if started:
                raise
            err = InternalError("Internal server error")
            body = json.dumps(err.to_payload(include_details=False)).encode("utf-8")
            await send({
                "type": "http.response.start",
                "status": err.http_status,
                "headers": [
                    (b"content-type", b"application/json"),
                    (b"content-length", str(len(body)).encode("ascii")),
                ],
            })
            await send({"type": "http.response.body", "body": body})
