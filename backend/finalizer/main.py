"""
Finalizer: Demo Server / FastAPI Application Factory
======================================================

What:  Wires FinalizerMiddleware and the structured access log into a FastAPI
       app. Doubles as the reference for embedding the package in a host.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   uvicorn finalizer.main:app
When:  Once at server startup.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ FinalizerMiddleware → HTTPLogger (access log)│   │
    │  └──────────────────────────────────────────────┘   │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────┐                                   │
    │  │ GET /health  │                                   │
    │  └──────────────┘                                   │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ Exception (fallback) → 500 JSON              │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from finalizer import __version__
from finalizer.config import settings
from finalizer.logutil import HTTPLogger
from finalizer.middleware import FinalizerMiddleware
from finalizer.routes import health

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure stdlib logging for the whole process.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s

    Access records carry their fields both in the message (key=value) and
    as LogRecord attributes, so a JSON formatter can be swapped in without
    touching the access logger.
    """
    log_format = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
        force=True,
    )

    # Replaced by the finalizer access log
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("%s %s starting up...", settings.app_name, __version__)
    logger.info("Access log: logger=%s excluded=%s",
                settings.access_logger_name,
                settings.access_log_exclude_paths_list or "none")
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    logger.info("%s shutting down...", settings.app_name)


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Register the catch-all handler.

    Starlette runs the Exception handler in its outermost ServerErrorMiddleware,
    i.e. *outside* FinalizerMiddleware. The finalizer therefore sees the
    exception unwind (and reports the default status if nothing was sent);
    the 500 written here is not counted.
    """

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("Unexpected error: %s", str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred.",
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        lifespan=lifespan,
    )

    http_logger = HTTPLogger(
        logging.getLogger(settings.access_logger_name),
        exclude_paths=settings.access_log_exclude_paths_list,
    )
    app.add_middleware(FinalizerMiddleware, finalizer=http_logger.logging_finalizer)

    register_exception_handlers(app)

    app.include_router(health.router)

    return app


app = create_app()
