import time
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette import status
from scalar_fastapi import get_scalar_api_reference
from vdesk.schemas.response import ApiError, ErrorDetail
from vdesk.utils.api_response import JSONResponse
from vdesk.configs.settings import settings
from vdesk.core.exceptions import AppError, InternalError, ValidationError
from vdesk.utils import setup_logging, get_logger
from vdesk.middlewares import init_sentry, SecurityHeadersMiddleware
from vdesk.databases import init_store, close_store
from vdesk.api import item_router, health_router

logger = get_logger(__name__)


async def _setup_logging() -> None:
    """Setup application logging configuration"""
    setup_logging(
        level="DEBUG" if settings.APP_DEBUG else "INFO",
        app_name=settings.APP_NAME,
        enable_json=settings.APP_ENV == "prod",
        log_file="logs/app.log" if settings.APP_ENV == "prod" else None
    )
    logger.info("Logging configuration initialized")


async def _setup_sentry() -> None:
    """Setup Sentry monitoring for production environment"""
    if not settings.SENTRY_DSN:
        logger.warning("Sentry DSN not configured - monitoring disabled")
        return

    if settings.APP_ENV != "prod":
        logger.info("Sentry monitoring disabled - not in production environment")
        return

    try:
        init_sentry(
            dsn=settings.SENTRY_DSN,
            environment=settings.APP_ENV,
            release=settings.RELEASE,
            traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
            profiles_sample_rate=settings.SENTRY_PROFILES_SAMPLE_RATE,
            send_default_pii=settings.SENTRY_SEND_DEFAULT_PII
        )
        logger.info("Sentry monitoring initialized for production environment")
    except Exception as e:
        # Monitoring is optional; the API still starts without it
        logger.error(f"Failed to initialize Sentry: {str(e)}")


async def _setup_store() -> None:
    """Open the document store backend"""
    try:
        await init_store(settings.STORE_BACKEND)
        logger.info(f"Document store '{settings.STORE_BACKEND}' initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize document store: {str(e)}")
        raise


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan context manager"""
    logger.info(f"Starting {settings.APP_NAME} application...")

    try:
        await _setup_logging()
        await _setup_sentry()
        await _setup_store()
        app.state.started_at = time.monotonic()

        logger.info("Application startup completed successfully")

        yield

    except Exception as e:
        logger.error(f"Application startup failed: {str(e)}")
        raise
    finally:
        logger.info(f"Shutting down {settings.APP_NAME} application...")
        try:
            await close_store()
            logger.info("Application shutdown completed successfully")
        except Exception as e:
            logger.error(f"Error during shutdown: {str(e)}")


def _error_response(exc: AppError, request: Request) -> JSONResponse:
    errors = list(exc.errors or [])
    if exc.field:
        errors.append({
            "code": exc.code,
            "message": exc.message,
            "field": exc.field
        })

    stack = None
    if settings.APP_ENV == "dev":
        # ``__cause__`` holds the store or runtime error behind a translated AppError
        origin = exc.__cause__ or exc
        stack = "".join(traceback.format_exception(type(origin), origin, origin.__traceback__))

    body = ApiError(
        status=exc.envelope_status,
        message=exc.message,
        code=exc.code,
        errors=[ErrorDetail(**e) for e in errors] or None,
        stack=stack,
    ).model_dump(mode="json", exclude_none=True)

    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}", exc_info=exc.__cause__ or exc)

    return JSONResponse(content=body, status_code=exc.status_code)


async def _handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    """Handle custom application errors"""
    return _error_response(exc, request)


async def _handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle HTTP exceptions from Starlette, e.g. unknown routes"""
    message = str(exc.detail)
    if exc.status_code == status.HTTP_404_NOT_FOUND and message == "Not Found":
        message = f"Endpoint not found: {request.url.path}"

    body = ApiError(
        status="error" if exc.status_code >= 500 else "fail",
        message=message
    ).model_dump(mode="json", exclude_none=True)

    return JSONResponse(content=body, status_code=exc.status_code, headers=getattr(exc, "headers", None))


async def _handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies are reported like any other ValidationError"""
    errors = []
    for error in exc.errors():
        location = ".".join(
            str(x) for x in error.get("loc", [])
            if x not in ("body",)
        )
        errors.append({
            "code": error.get("type", "validation_error"),
            "message": error.get("msg", ""),
            "field": location or None
        })

    return _error_response(ValidationError("Validation error", errors=errors), request)


async def _handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    """Anything that escaped the domain error taxonomy"""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    internal = InternalError()
    internal.__cause__ = exc
    return _error_response(internal, request)


def install_cors_middleware(app: FastAPI) -> None:
    """Install CORS middleware for the application"""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=settings.CORS_CREDENTIALS,
        allow_methods=settings.CORS_METHODS,
        allow_headers=settings.CORS_HEADERS,
        expose_headers=settings.CORS_EXPOSE_HEADERS,
    )


def install_exception_handlers(app: FastAPI) -> None:
    """Install all exception handlers for the application"""
    app.exception_handler(AppError)(_handle_app_error)
    app.exception_handler(StarletteHTTPException)(_handle_http_exception)
    app.exception_handler(RequestValidationError)(_handle_validation_error)
    app.exception_handler(Exception)(_handle_unexpected_error)

    logger.info("Exception handlers installed successfully")


def _create_api_prefix(endpoint_name: str) -> str:
    """Create API prefix for router endpoints"""
    return f"/api/v1/{endpoint_name}"


def include_routers(app: FastAPI) -> None:
    """Include all API routers with proper configuration"""
    routers_config = [
        (item_router, "items"),
    ]

    for router, prefix_name in routers_config:
        app.include_router(
            router,
            prefix=_create_api_prefix(prefix_name)
        )

    app.include_router(health_router)

    if settings.APP_ENV == "dev":
        @app.get("/scalar", include_in_schema=False)
        async def scalar_html():
            return get_scalar_api_reference(
                openapi_url=app.openapi_url,
                title=settings.APP_NAME,
            )

    logger.info(f"Included {len(routers_config)} API routers successfully")


def create_app() -> FastAPI:
    """Create and configure FastAPI application with all components"""
    app = FastAPI(
        title=settings.APP_NAME,
        description="Virtual desktop file manager API",
        version="1.0.0",
        debug=settings.APP_DEBUG,
        lifespan=lifespan,
        docs_url="/docs" if settings.APP_DEBUG else None,
        redoc_url="/redoc" if settings.APP_DEBUG else None,
    )
    app.state.started_at = None

    install_cors_middleware(app)
    app.add_middleware(SecurityHeadersMiddleware)

    install_exception_handlers(app)

    include_routers(app)

    logger.info("FastAPI application created and configured successfully")
    return app
