# backend/middleware/graceful_cancel.py
from __future__ import annotations

import asyncio
import logging

from starlette.types import ASGIApp, Receive, Scope, Send

log = logging.getLogger("realai.middleware")


class GracefulCancelMiddleware:
    """
    Swallows asyncio.CancelledError raised when a client disconnects mid-request
    or the server shuts down. The upstream call is not cancelled on our side;
    the response is simply dropped.
    """
    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            await self.app(scope, receive, send)
        except asyncio.CancelledError:
            log.debug("Request cancelled (%s %s); response dropped.", scope.get("method"), scope.get("path"))
            return
