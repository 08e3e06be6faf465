"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from taskpay.api.routes import (
    accounts_router,
    balances_router,
    health_router,
    payments_router,
    tasks_router,
    withdrawals_router,
)
from taskpay.config import Settings, get_settings
from taskpay.database import create_schema, get_engine, make_session_factory
from taskpay.domain.errors import (
    AuthorizationError,
    IllegalTransitionError,
    NotFoundError,
    StorageUnavailable,
    TaskPayError,
    ValidationError,
)
from taskpay.events import log_event
from taskpay.persistence.sql import SqlAlchemyRepository
from taskpay.services.tracker import TrackerService
from taskpay.storage.images import FilesystemImageStore

logger = logging.getLogger(__name__)

ERROR_STATUS: dict[type[TaskPayError], int] = {
    ValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    IllegalTransitionError: status.HTTP_409_CONFLICT,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    AuthorizationError: status.HTTP_403_FORBIDDEN,
    StorageUnavailable: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def error_status(exc: TaskPayError) -> int:
    for error_type, code in ERROR_STATUS.items():
        if isinstance(exc, error_type):
            return code
    return status.HTTP_400_BAD_REQUEST


def install_tracker(app: FastAPI, tracker: TrackerService) -> None:
    """Make ``tracker`` the app's service and log the events it emits."""
    tracker.emitter.on_all(log_event)
    app.state.tracker = tracker


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler.

    Builds a database-backed tracker unless one was supplied to create_app.
    """
    if getattr(app.state, "tracker", None) is not None:
        yield
        return

    settings: Settings = app.state.settings
    engine = get_engine(settings.database_url)
    await create_schema(engine)
    install_tracker(
        app,
        TrackerService(
            SqlAlchemyRepository(make_session_factory(engine)),
            image_store=FilesystemImageStore(
                settings.image_store_path, settings.image_base_url
            ),
        ),
    )
    try:
        yield
    finally:
        app.state.tracker.close()
        app.state.tracker = None
        await engine.dispose()


def create_app(
    tracker: TrackerService | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()
    app = FastAPI(
        title="TaskPay API",
        description="Labor task and payout tracker",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.tracker = None
    if tracker is not None:
        install_tracker(app, tracker)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(TaskPayError)
    async def tracker_exception_handler(request: Request, exc: TaskPayError) -> JSONResponse:
        """Map classified failures to HTTP responses."""
        content: dict[str, object] = {"detail": exc.message, "code": exc.code}
        if isinstance(exc, ValidationError) and exc.fields:
            content["fields"] = list(exc.fields)
        return JSONResponse(status_code=error_status(exc), content=content)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "An unexpected error occurred",
                "code": "INTERNAL_ERROR",
            },
        )

    # Include routers
    app.include_router(health_router)
    app.include_router(tasks_router, prefix="/api/v1")
    app.include_router(withdrawals_router, prefix="/api/v1")
    app.include_router(payments_router, prefix="/api/v1")
    app.include_router(accounts_router, prefix="/api/v1")
    app.include_router(balances_router, prefix="/api/v1")

    # Uploaded images; an absolute base URL means another server hosts them
    image_path = settings.image_base_url.rstrip("/")
    if image_path.startswith("/"):
        app.mount(
            image_path,
            StaticFiles(directory=settings.image_store_path, check_dir=False),
            name="images",
        )

    return app


# Default app instance for uvicorn
app = create_app()
