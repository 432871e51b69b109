# backend/api/app.py
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import Settings
from backend.api.routes.generate import router as generate_router
from backend.api.routes.health import router as health_router
from backend.api.routes.image import router as image_router
from backend.core.errors import GatewayError, ValidationError
from backend.core.gateway import PromptGateway
from backend.core.ports import GenerationBackend
from backend.middleware.body_limit import BodyLimitMiddleware
from backend.middleware.catch_all import CatchAllMiddleware
from backend.middleware.graceful_cancel import GracefulCancelMiddleware

log = logging.getLogger("realai")


@asynccontextmanager
async def _lifespan(app: FastAPI):
    s: Settings = app.state.settings
    log.info(
        "Relay ready: text_model=%s vision_model=%s origins=%s max_body=%d",
        s.text_model, s.vision_model, s.cors_allow_origins, s.max_body_bytes,
    )
    try:
        yield
    finally:
        # Only the client this app built is ours to close; injected ones belong to the caller
        owned = getattr(app.state, "owned_backend", None)
        if owned is not None:
            await owned.aclose()
        log.info("Relay shut down.")


def _build_backend(settings: Settings):
    from backend.llm.gemini import GeminiBackend

    return GeminiBackend(settings.google_api_key.get_secret_value())


def _install_error_handlers(app: FastAPI, settings: Settings) -> None:
    include_details = settings.expose_error_details

    @app.exception_handler(GatewayError)
    async def _gateway_error(request: Request, exc: GatewayError) -> JSONResponse:
        return JSONResponse(status_code=exc.http_status, content=exc.to_payload(include_details=include_details))

    @app.exception_handler(RequestValidationError)
    async def _invalid_body(request: Request, exc: RequestValidationError) -> JSONResponse:
        errs = exc.errors()
        detail = None
        if errs:
            first = errs[0]
            loc = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
            detail = f"{loc}: {first.get('msg')}" if loc else str(first.get("msg"))
        err = ValidationError("Invalid request body", details=detail)
        return JSONResponse(status_code=400, content=err.to_payload(include_details=include_details))

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        body = {"error": str(exc.detail)}
        if 400 <= exc.status_code < 500:
            body["code"] = ValidationError.category
        return JSONResponse(status_code=exc.status_code, content=body, headers=getattr(exc, "headers", None))


def create_app(settings: Settings, backend: Optional[GenerationBackend] = None) -> FastAPI:
    s = settings
    app = FastAPI(title="RealAI Prompt Relay", lifespan=_lifespan)
    app.state.settings = s
    app.state.owned_backend = None
    if backend is None:
        backend = app.state.owned_backend = _build_backend(s)

    app.state.gateway = PromptGateway(
        backend,
        text_model=s.text_model,
        vision_model=s.vision_model,
        default_question=s.default_image_question,
        secrets=(s.google_api_key.get_secret_value(),),
    )

    # Client disconnects should not show up as server errors
    app.add_middleware(GracefulCancelMiddleware)
    # Unhandled faults become InternalError inside the CORS layer
    app.add_middleware(CatchAllMiddleware)
    app.add_middleware(BodyLimitMiddleware, max_bytes=s.max_body_bytes)

    # Outermost, so every response above carries CORS headers
    app.add_middleware(
        CORSMiddleware,
        allow_origins=s.cors_allow_origins,
        allow_credentials=not s.allow_any_origin,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    _install_error_handlers(app, s)

    app.include_router(health_router)
    app.include_router(generate_router)
    app.include_router(image_router)

    return app
