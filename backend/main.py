"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api import accounts, dashboard, token, transactions
from config import Settings, get_settings
from database import dispose_engine, init_db
from logging_config import setup_logging
from services.session_service import SessionService
from services.token_vault import ConfigurationError, TokenVault

logger = logging.getLogger(__name__)


def configure_app(app: FastAPI, settings: Settings) -> None:
    """Build process-wide services from validated settings.

    Raises:
        ConfigurationError: If the encryption key or session secret is
            missing or malformed.  The app must not start.
    """
    app.state.vault = TokenVault(settings.UP_TOKEN_ENCRYPTION_KEY)
    if not settings.SESSION_SECRET:
        raise ConfigurationError("SESSION_SECRET is not set.")
    app.state.session_service = SessionService(settings.SESSION_SECRET)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Validate configuration and prepare the database before serving."""
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL)
    try:
        configure_app(app, settings)
    except ConfigurationError as e:
        logger.critical("Refusing to start: %s", e)
        raise
    init_db()
    logger.info("Up dashboard API started (%s)", settings.ENVIRONMENT)
    try:
        yield
    finally:
        dispose_engine()


app = FastAPI(
    title="Up Dashboard",
    description="Personal finance dashboard for Up Banking",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS configuration for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Return errors as ``{"error": message}``."""
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed JSON or query parameters are a plain 400."""
    errors = exc.errors()
    if errors and errors[0].get("type") == "json_invalid":
        message = "Bad Request: Invalid JSON format."
    else:
        fields = ", ".join(
            ".".join(str(p) for p in e.get("loc", ()) if p not in ("body", "query")) for e in errors
        )
        message = f"Bad Request: Invalid or missing parameters ({fields})."
    return JSONResponse(status_code=400, content={"error": message})


# Include API routers
app.include_router(accounts.router)
app.include_router(dashboard.router)
app.include_router(token.router)
app.include_router(transactions.router)


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "ok"}
