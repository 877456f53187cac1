import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings
from .crud import TaskRepository
from .db import Database
from .errors import NotFoundError, StorageError, ValidationError
from .logging_setup import setup_logging
from .presentation import TaskBoard
from .routes import suggestions, tasks, ui
from .suggestions import SuggestionService

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the FastAPI app; the database handle lives as long as the app"""
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager"""
        # Startup
        database = Database(settings.database_url, echo=settings.db_echo)
        try:
            await database.init()
        except Exception as e:
            logger.warning("Database initialization failed: %s", e)
            logger.warning("Application will start but database features may not work")

        service = SuggestionService(settings.gemini_api_key, settings.gemini_model)
        if not settings.gemini_api_key:
            logger.warning("GEMINI_API_KEY not set; suggestions will use the fallback checklist")

        app.state.database = database
        app.state.suggestion_service = service
        app.state.board = TaskBoard(TaskRepository(database), service)
        await app.state.board.load()
        yield
        # Shutdown
        await database.close()

    app = FastAPI(
        title="Task Tracker API",
        description="Task tracking with Gemini-powered task refinement",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials="*" not in settings.allowed_origins,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "%s %s -> %d (%.1f ms)",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - started) * 1000,
        )
        return response

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"detail": "Task not found"})

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        logger.error("Storage error: %s", exc)
        return JSONResponse(status_code=503, content={"detail": "Database unavailable"})

    app.include_router(tasks.router, prefix="/api")
    app.include_router(suggestions.router, prefix="/api")
    app.include_router(ui.router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "task-tracker",
            "version": app.version,
            "ai_enabled": bool(settings.gemini_api_key),
        }

    return app


def serve_app() -> FastAPI:
    """Entry point for uvicorn: configure logging, then build the app"""
    settings = Settings.from_env()
    setup_logging(settings.log_level)
    return create_app(settings)


if __name__ == "__main__":
    import uvicorn

    settings = Settings.from_env()
    uvicorn.run(
        "app.main:serve_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
