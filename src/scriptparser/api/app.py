"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from scriptparser import __version__
from scriptparser.api.endpoints import scripts
from scriptparser.config import ScriptParserSettings, get_logger, get_settings
from scriptparser.database import ScriptDataStore
from scriptparser.exceptions import NotFoundError, ScriptParserError, ValidationError

logger = get_logger(__name__)


def _error_body(message: str, **extra: Any) -> dict[str, Any]:
    body: dict[str, Any] = {"success": False, "message": message}
    body.update({k: v for k, v in extra.items() if v is not None})
    return body


async def _handle_validation_error(
    request: Request, exc: ValidationError
) -> JSONResponse:
    logger.info("Rejected request", path=request.url.path, error=exc.message)
    return JSONResponse(
        status_code=400, content=_error_body(exc.message, field=exc.field)
    )


async def _handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    # Drop the "body"/"path" prefix so the field reads like an argument name
    loc = [str(part) for part in first.get("loc", ())[1:]]
    message = first.get("msg", "Invalid request")
    logger.info("Rejected request", path=request.url.path, error=message)
    return JSONResponse(
        status_code=400,
        content=_error_body(message, field=".".join(loc) or None),
    )


async def _handle_not_found(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content=_error_body(exc.message))


async def _handle_service_error(
    request: Request, exc: ScriptParserError
) -> JSONResponse:
    logger.error("Request failed", path=request.url.path, error=exc.message)
    return JSONResponse(
        status_code=500,
        content=_error_body(exc.message, error=type(exc).__name__),
    )


async def _handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", path=request.url.path)
    return JSONResponse(
        status_code=500,
        content=_error_body("Internal server error", error=str(exc)),
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    The store is opened before the first request is accepted, so an
    unusable database fails startup instead of the first call.
    """
    logger.info("Starting script service")
    store: ScriptDataStore = app.state.store
    store.initialize()

    yield

    logger.info("Shutting down script service")
    if app.state.owns_store:
        store.close()


def create_app(
    settings: ScriptParserSettings | None = None,
    store: ScriptDataStore | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to use (defaults to the global settings)
        store: Pre-built data store; the app creates and owns one if omitted

    Returns:
        Configured application
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Script Parser API",
        description="Storage service for script analysis results",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store or ScriptDataStore(settings)
    app.state.owns_store = store is None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Handlers take the concrete exception type, narrower than Starlette declares
    app.add_exception_handler(
        ValidationError, _handle_validation_error  # type: ignore[arg-type]
    )
    app.add_exception_handler(
        RequestValidationError,
        _handle_request_validation_error,  # type: ignore[arg-type]
    )
    app.add_exception_handler(
        NotFoundError, _handle_not_found  # type: ignore[arg-type]
    )
    app.add_exception_handler(
        ScriptParserError, _handle_service_error  # type: ignore[arg-type]
    )
    app.add_exception_handler(Exception, _handle_unexpected)

    app.include_router(scripts.router, prefix="/api/scripts", tags=["scripts"])

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy"}

    return app
