# server.py
from __future__ import annotations

import logging
import sys

import uvicorn
from pydantic import ValidationError

from config import load_settings
from backend.util.logging_setup import init_logging
from backend.api.app import create_app

log = logging.getLogger("realai.server")


def main() -> int:
    try:
        s = load_settings()
    except ValidationError as e:
        init_logging("info")
        log.error("Invalid configuration, refusing to start:\n%s", e)
        return 1

    init_logging(s.log_level, secrets=(s.google_api_key.get_secret_value(),))

    app = create_app(s)

    config = uvicorn.Config(
        app=app,
        host=s.server_host,
        port=int(s.server_port),
        log_level=s.log_level,
        access_log=s.uvicorn_access_log,
        log_config=None,              # keep our root handler (and its redaction)
        timeout_graceful_shutdown=3,
    )
    server = uvicorn.Server(config)
    log.info("Server is running at http://%s:%d", s.server_host, s.server_port)

    try:
        server.run()
        return 0
    except KeyboardInterrupt:
        return 0


if __name__ == "__main__":
    sys.exit(main())
