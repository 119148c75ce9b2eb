import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from src.api.routes import router
from src.config.settings import Settings, cors_origins_from_env
from src.utils.error_handlers import (
    ReportError,
    create_correlation_id,
    error_response_body,
    error_status_code,
    log_structured_error,
)

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


async def report_error_handler(request: Request, exc: ReportError) -> PlainTextResponse:
    correlation_id = create_correlation_id()
    log_structured_error(
        exc,
        {"path": request.url.path, "method": request.method},
        correlation_id=correlation_id,
    )
    return PlainTextResponse(
        error_response_body(exc),
        status_code=error_status_code(exc),
        headers={"X-Correlation-ID": correlation_id},
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the report service.

    Args:
        settings: Pre-built settings; when omitted they are loaded from the
            environment during startup, which aborts if configuration is missing.
    """
    configure_logging(settings.log_level if settings else "INFO")

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if getattr(app.state, "settings", None) is None:
            app.state.settings = Settings.from_env()
            logging.getLogger().setLevel(getattr(logging, app.state.settings.log_level, logging.INFO))
        logger.info(
            f"Report service starting (env={app.state.settings.env}, "
            f"source={app.state.settings.data_source.value}, mode={app.state.settings.container_mode.value})"
        )
        yield

    app = FastAPI(
        title="Missing Contacts Report",
        description="PDF report of clients missing phone or email details",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Empty CORS_ORIGINS (production default) disables cross-origin access
    cors_origins = list(settings.cors_origins if settings else cors_origins_from_env())
    if cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_credentials=cors_origins != ["*"],
            allow_methods=["GET"],
            allow_headers=["Content-Type", "Authorization"],
        )

    app.add_exception_handler(ReportError, report_error_handler)
    app.include_router(router)
    return app


app = create_app()


def run() -> None:
    """Serve the app with uvicorn; settings are validated during startup."""
    import uvicorn

    uvicorn.run(
        "src.api.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "3000")),
        log_level="info",
    )
