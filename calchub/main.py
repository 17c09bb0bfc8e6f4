import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api import calculators, favorites, history, suggestions
from .calculators.base import CalculationValidationError
from .calculators.catalog import get_registry
from .calculators.registry import CalculatorNotFoundError
from .schemas.error import ErrorType, ValidationErrorDetail
from .settings import AppSettings, get_settings
from .storage import close_storage, get_storage
from .utils.error_responses import (
    build_error_response,
    build_validation_error_response,
)
from .utils.request_context import get_request_id, set_request_id

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level_numeric,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def validate_environment(active_settings: AppSettings | None = None) -> None:
    """Log warnings for optional configuration that is missing."""

    warnings = (active_settings or get_settings()).optional_config_warnings()
    if warnings:
        logger.warning("=" * 60)
        logger.warning("Environment Configuration Warnings:")
        for warning in warnings:
            logger.warning("  • %s", warning)
        logger.warning("=" * 60)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Assemble the registry and storage before serving requests."""
    validate_environment()

    # A duplicated calculator id raises here and aborts start-up.
    registry = get_registry()
    storage = get_storage(get_settings())

    logger.info("=" * 60)
    logger.info("CalcHub API - Startup")
    logger.info("=" * 60)
    logger.info("Calculators registered: %d", len(registry))
    logger.info("Categories: %s", ", ".join(c.value for c in registry.categories()))
    logger.info("Storage backend: %s", type(storage.backend).__name__)
    logger.info("=" * 60)

    yield

    logger.info("Shutting down CalcHub API")
    await close_storage()


app = FastAPI(
    title="CalcHub API",
    version="0.1.0",
    description="Calculator catalog with favorites, history and exports.",
    lifespan=lifespan,
    redirect_slashes=False,
)


def _default_origins() -> list[str]:
    ports = list(range(3000, 3011)) + [5173, 9002]
    origins = []
    for host in ("localhost", "127.0.0.1"):
        origins.extend([f"http://{host}:{port}" for port in ports])
    return origins


def _combine_origins(*origin_groups: list[str]) -> list[str]:
    """Merge origins preserving order and removing duplicates."""
    seen: set[str] = set()
    combined: list[str] = []
    for group in origin_groups:
        for origin in group:
            normalized = origin.rstrip("/")
            if normalized and normalized not in seen:
                seen.add(normalized)
                combined.append(normalized)
    return combined


allow_origins = _combine_origins(_default_origins(), settings.cors_allow_origins)
logger.info("Configured CORS allow_origins: %s", ", ".join(allow_origins))

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition", "X-Request-ID"],
)


# Middleware to add request ID to each request
@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Add unique request ID to each request for tracking."""
    request_id = str(uuid.uuid4())
    set_request_id(request_id)
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


# Exception handlers
@app.exception_handler(CalculationValidationError)
async def calculation_validation_exception_handler(
    request: Request, exc: CalculationValidationError
):
    """Report every offending calculator input field."""
    logger.info(
        "Calculator input rejected for request %s to %s: %s",
        get_request_id(),
        request.url.path,
        ", ".join(exc.fields),
    )

    error_response = build_validation_error_response(
        message="Calculator input validation failed",
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        path=str(request.url.path),
        errors=exc.errors,
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_response.model_dump(mode="json"),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle FastAPI request validation errors."""
    errors = [
        ValidationErrorDetail(
            field=".".join(str(loc) for loc in error["loc"]),
            message=error["msg"],
            value=error.get("input"),
        )
        for error in exc.errors()
    ]

    logger.warning(
        "Validation error for request %s to %s: %s errors",
        get_request_id(),
        request.url.path,
        len(errors),
    )

    error_response = build_validation_error_response(
        message="Request validation failed",
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        path=str(request.url.path),
        errors=errors,
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_response.model_dump(mode="json"),
    )


@app.exception_handler(CalculatorNotFoundError)
async def calculator_not_found_exception_handler(
    request: Request, exc: CalculatorNotFoundError
):
    """Map unknown calculator ids onto 404 responses."""
    error_response = build_error_response(
        error_type=ErrorType.NOT_FOUND,
        message="Calculator not found",
        detail=str(exc),
        status_code=status.HTTP_404_NOT_FOUND,
        path=str(request.url.path),
    )

    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content=error_response.model_dump(mode="json"),
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    """Handle all other unhandled exceptions."""
    logger.exception(
        "Unhandled exception for request %s to %s: %s",
        get_request_id(),
        request.url.path,
        type(exc).__name__,
    )

    error_response = build_error_response(
        error_type=ErrorType.INTERNAL_ERROR,
        message="Internal server error",
        detail=f"An unexpected error occurred: {type(exc).__name__}",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        path=str(request.url.path),
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_response.model_dump(mode="json"),
    )


@app.get("/health", tags=["system"])
async def healthcheck() -> dict[str, str]:
    """Simple health endpoint for readiness checks."""
    return {"status": "ok"}


app.include_router(calculators.router, prefix="/calculators", tags=["calculators"])
app.include_router(favorites.router, prefix="/favorites", tags=["favorites"])
app.include_router(history.router, prefix="/history", tags=["history"])
app.include_router(suggestions.router, prefix="/suggestions", tags=["suggestions"])
