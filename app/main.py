"""
FastAPI application entry point.
Main application setup and configuration.
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
from sqlalchemy.exc import SQLAlchemyError
from pydantic import ValidationError as PydanticValidationError
from typing import Optional
import logging

from app.config import settings
from app.database import Database
from app.routers import auth_router, properties_router
from app.utils.exceptions import APIException
from app.services.error_handler import ErrorHandlerService
from app.middleware import RequestLoggingMiddleware

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Opens the database handle on startup and disposes it on shutdown.
    """
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Environment: {settings.environment}")

    owns_database = getattr(app.state, "database", None) is None
    if owns_database:
        app.state.database = Database(settings.database_url, echo=settings.debug)

    if not await app.state.database.ping():
        logger.error("Failed to connect to database on startup")

    yield

    logger.info("Shutting down application")
    if owns_database:
        await app.state.database.dispose()


def register_exception_handlers(app: FastAPI) -> None:
    """Route every error through ErrorHandlerService so all failures share one envelope."""

    @app.exception_handler(APIException)
    async def api_exception_handler(request: Request, exc: APIException):
        return ErrorHandlerService.handle_api_exception(exc, request)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return ErrorHandlerService.handle_validation_error(exc.errors(), request)

    @app.exception_handler(PydanticValidationError)
    async def pydantic_validation_exception_handler(request: Request, exc: PydanticValidationError):
        return ErrorHandlerService.handle_validation_error(exc.errors(), request)

    @app.exception_handler(SQLAlchemyError)
    async def database_exception_handler(request: Request, exc: SQLAlchemyError):
        return ErrorHandlerService.handle_database_error(exc, request)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return ErrorHandlerService.handle_http_exception(exc, request)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        return ErrorHandlerService.handle_unexpected_error(exc, request)


def create_app(database: Optional[Database] = None) -> FastAPI:
    """
    Build the application.

    Args:
        database: Pre-built database handle; when omitted the lifespan
            creates one from settings.database_url

    Returns:
        Configured FastAPI instance
    """
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="""
        Property listing backend for a local real-estate site.

        ## Features

        * **Listings**: Public search with filters, sorting and pagination
        * **Administration**: Admin-only create, update and delete of listings
        * **Accounts**: Phone-number registration and login with bearer tokens

        ## Authentication

        Obtain a token from `/api/auth/login` (or `/api/auth/admin/login` for
        administrators) and send it as `Authorization: Bearer <token>`.
        """,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_tags=[
            {
                "name": "Authentication",
                "description": "Registration, login and profile management"
            },
            {
                "name": "Properties",
                "description": "Listing search and admin management"
            },
            {
                "name": "Health",
                "description": "Service information and liveness"
            }
        ],
        lifespan=lifespan,
    )

    if database is not None:
        app.state.database = database

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Processing-Time"],
    )

    app.add_middleware(
        RequestLoggingMiddleware,
        slow_request_threshold=2.0,  # seconds
        enable_request_logging=not settings.is_testing,
    )

    app.include_router(auth_router, prefix=settings.api_prefix)
    app.include_router(properties_router, prefix=settings.api_prefix)

    register_exception_handlers(app)

    @app.get("/", tags=["Health"])
    async def root():
        """Basic service information."""
        return {
            "success": True,
            "message": f"Welcome to {settings.app_name}",
            "data": {
                "version": settings.app_version,
                "environment": settings.environment,
                "apiPrefix": settings.api_prefix,
                "documentation": {
                    "swaggerUi": "/docs",
                    "redoc": "/redoc",
                    "openapiJson": "/openapi.json"
                }
            }
        }

    @app.get("/health", tags=["Health"])
    async def health_check(request: Request):
        """
        Health check with database connectivity test.
        Used by container health checks and load balancers.
        """
        db_healthy = await request.app.state.database.ping()
        body = {
            "success": db_healthy,
            "message": "healthy" if db_healthy else "Database connection failed",
            "data": {
                "service": settings.app_name,
                "version": settings.app_version,
                "database": "connected" if db_healthy else "unavailable"
            }
        }
        return JSONResponse(status_code=200 if db_healthy else 503, content=body)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
