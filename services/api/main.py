import os
from pathlib import Path
from urllib.parse import urlparse

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.auth import SessionAuthenticator
from core.exceptions import MajelisError
from core.logging_config import setup_logging
from core.settings import Settings
from core.storage import ObjectStorage
from services.api.exception_handlers import (
    http_exception_handler,
    majelis_exception_handler,
    unhandled_exception_handler,
)
from services.api.middleware import SecurityHeadersMiddleware
from services.api.routers.uploads import router as uploads_router
from services.api.schemas import HealthResponse


def _cors_origins(ui_origin: str) -> list[str]:
    origins: set[str] = {ui_origin}
    parsed = urlparse(ui_origin)
    # localhost and 127.0.0.1 are interchangeable for the dev UI
    if parsed.scheme and parsed.hostname in {"localhost", "127.0.0.1"}:
        port = f":{parsed.port}" if parsed.port else ""
        for host in ("localhost", "127.0.0.1"):
            origins.add(f"{parsed.scheme}://{host}{port}")
    return sorted(origins)


def create_app(
    settings: Settings | None = None,
    storage: ObjectStorage | None = None,
    authenticator: SessionAuthenticator | None = None,
) -> FastAPI:
    json_logging = os.getenv("JSON_LOGGING", "false").lower() in {"true", "1", "yes"}
    log_level = os.getenv("LOG_LEVEL", "INFO")
    log_file = os.getenv("LOG_FILE")
    setup_logging(
        level=log_level,
        json_format=json_logging,
        log_file=Path(log_file) if log_file else None,
    )

    app = FastAPI(
        title="Majelis Digital Uploads API",
        version="0.1.0",
        description="Silaturahim proof photo upload and retrieval",
    )
    app.state.settings = settings
    app.state.storage = storage
    app.state.authenticator = authenticator

    cors_origins = _cors_origins(os.getenv("UI_ORIGIN", "http://localhost:3000"))
    logger.info(f"CORS allowed origins: {cors_origins}")

    app.add_middleware(SecurityHeadersMiddleware)
    # Added last so it runs first
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
        expose_headers=["ETag", "Last-Modified", "Content-Length"],
    )

    @app.get("/healthz", tags=["meta"], response_model=HealthResponse)
    async def healthcheck() -> HealthResponse:
        return HealthResponse()

    app.add_exception_handler(MajelisError, majelis_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.include_router(uploads_router)

    return app


app = create_app()


__all__ = ["app", "create_app"]
