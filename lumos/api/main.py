import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from lumos.adapters.sqlite.migrator import SQLiteMigrator
from lumos.api.deps import get_settings
from lumos.api.errors import envelope_error, error_response, validation_message
from lumos.app_shell.config import validate_settings
from lumos.domain.errors import upstream
from lumos.ports.repo import StoreError
from lumos.rules.loader import load_rules

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Validate settings and rules, then bring the schema up to date (fail-fast)."""
    settings = get_settings()

    try:
        validate_settings(settings)
        load_rules(settings.rules_path)
        logger.info(f"Rules loaded from {settings.rules_path}")
        applied = SQLiteMigrator(settings.db_path).run_migrations()
        logger.info(f"Database ready at {settings.db_path} ({len(applied)} migrations applied)")
    except (FileNotFoundError, ValueError) as e:
        logger.critical(f"Startup failed: {e}")
        raise

    yield


app = FastAPI(
    title="Lumos API",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed requests get the same envelope as every other 400."""
    return envelope_error(validation_message(exc.errors()), status.HTTP_400_BAD_REQUEST)


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    """A store failure the component did not handle. The request's work has been rolled back."""
    logger.error(f"Store failure on {request.method} {request.url.path}: {exc}")
    return error_response(upstream("Internal server error"))


# --- Routers ---
from lumos.api.routes import (  # noqa: E402
    email_subscribe,
    email_unsubscribe,
    posts,
    publications,
    subscriptions,
)

app.include_router(email_unsubscribe.router, prefix="/api/email", tags=["Email"])
app.include_router(email_subscribe.router, prefix="/api/email", tags=["Email"])
app.include_router(posts.router, prefix="/api/posts", tags=["Posts"])
app.include_router(publications.router, prefix="/api/publications", tags=["Publications"])
app.include_router(subscriptions.router, prefix="/api/subscriptions", tags=["Subscriptions"])


# CORS (Allow Frontend)
origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health_check() -> dict[str, Any]:
    """Health check endpoint."""
    return {"status": "ok", "service": "api"}
