import logging
from datetime import datetime, timezone
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from prompt_library.api import api_router, auth_router
from prompt_library.config import Settings
from prompt_library.database import Database
from prompt_library.errors import PromptLibraryError
from prompt_library.services import ActivityService

logger = logging.getLogger(__name__)

VERSION = "1.0.0"


def configure_logging(level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _error(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    return f"{location}: {first.get('msg')}" if location else first.get("msg", "Invalid request")


def register_exception_handlers(app: FastAPI, settings: Settings):
    @app.exception_handler(PromptLibraryError)
    async def prompt_library_error_handler(request: Request, exc: PromptLibraryError):
        return _error(exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404 and exc.detail == "Not Found":
            return _error(404, "Endpoint not found")
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return _error(400, _validation_message(exc))

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        logger.exception(f"Database error on {request.method} {request.url.path}")
        if settings.is_development:
            return _error(500, "Internal server error", message=str(exc))
        return _error(500, "Internal server error")

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        if settings.is_development:
            return _error(500, "Internal server error", message=str(exc))
        return _error(500, "Internal server error")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application with its own database handle."""
    settings = settings or Settings()
    database = Database(settings.database_url)

    app = FastAPI(
        title="Prompt Library API",
        description="Store, browse, search, rate and comment on prompts",
        version=VERSION,
    )
    app.state.settings = settings
    app.state.database = database
    app.state.activity = ActivityService(database)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app, settings)

    # Include API routes
    app.include_router(api_router, prefix="/api")
    app.include_router(auth_router)

    @app.on_event("startup")
    async def startup_event():
        """Initialize database on startup."""
        database.init_db()

    @app.on_event("shutdown")
    async def shutdown_event():
        database.dispose()

    @app.get("/")
    async def root():
        return {
            "message": "Prompt Library API",
            "version": VERSION,
            "docs": "/docs",
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "database": database.engine.dialect.name,
            "environment": settings.environment,
        }

    return app


if __name__ == "__main__":
    settings = Settings()
    configure_logging(settings.log_level)
    logger.info(f"Database: {settings.database_label}")
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)
