"""Main FastAPI application."""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from api.routes import router
from config.settings import settings
from models.database import USERS, close_mongo_connection, init_mongo
from services.errors import TrackerError
from services.store import DocumentStore, MemoryDocumentStore, MongoDocumentStore
from services.tracker import ExerciseTrackerService
from utils.logger import setup_logger

logger = setup_logger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent


def resolve_dir(path: str) -> Path:
    """Resolve a configured directory against the project root."""
    candidate = Path(path)
    return candidate if candidate.is_absolute() else PROJECT_ROOT / candidate


def create_app(store: Optional[DocumentStore] = None) -> FastAPI:
    """Build the application.

    Args:
        store: Store to serve from. When omitted the store is chosen by
            ``settings.store_backend`` and opened on startup.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifespan context manager for startup/shutdown events."""
        logger.info("Starting application...")
        owns_connection = False
        if store is not None:
            active_store = store
        elif settings.store_backend == "memory":
            logger.warning("Using in-memory store; data is lost on restart")
            active_store = MemoryDocumentStore(unique_fields={USERS: ["username"]})
        else:
            active_store = MongoDocumentStore(await init_mongo())
            owns_connection = True

        app.state.service = ExerciseTrackerService(active_store)
        logger.info("Application started successfully")

        yield

        logger.info("Shutting down application...")
        if owns_connection:
            await close_mongo_connection()
        logger.info("Application shut down")

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Track users and their logged exercises",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(TrackerError)
    async def tracker_error_handler(request: Request, exc: TrackerError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}", exc_info=exc)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": "Invalid request parameters"})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    app.include_router(router)

    static_dir = resolve_dir(settings.static_dir)
    if static_dir.is_dir():
        app.mount("/public", StaticFiles(directory=static_dir), name="public")

    @app.get("/", include_in_schema=False)
    async def root():
        """Serve the HTML form for trying the API."""
        return FileResponse(resolve_dir(settings.views_dir) / "index.html")

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "service": settings.app_name
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
