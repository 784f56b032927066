"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from retrivia.api.auth import router as auth_router
from retrivia.api.booth import router as booth_router
from retrivia.api.gallery import router as gallery_router
from retrivia.app_logging import configure_logging
from retrivia.containers import AppContainer
from retrivia.errors import (
    CaptureError,
    ImageDecodeError,
    NoActiveCropError,
    PhotoboothError,
    SessionAccessDenied,
    TrayFullError,
)

_ERROR_STATUS: dict[type[PhotoboothError], int] = {
    CaptureError: status.HTTP_503_SERVICE_UNAVAILABLE,
    ImageDecodeError: status.HTTP_400_BAD_REQUEST,
    TrayFullError: status.HTTP_409_CONFLICT,
    NoActiveCropError: status.HTTP_409_CONFLICT,
    SessionAccessDenied: status.HTTP_403_FORBIDDEN,
}


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        def log_identity(user_id: str | None) -> None:
            logger.info("Identity changed to %s", user_id or "anonymous")

        unsubscribe = app.state.container.identity.on_identity_change(log_identity)
        yield
        unsubscribe()
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(booth_router)
    app.include_router(gallery_router)
    app.include_router(auth_router)

    @app.exception_handler(PhotoboothError)
    async def photobooth_error(_request: Request, exc: PhotoboothError) -> JSONResponse:
        """Turn core failures into user-facing messages."""
        status_code = next(
            (
                code
                for error_type, code in _ERROR_STATUS.items()
                if isinstance(exc, error_type)
            ),
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
        logger.warning("%s: %s", type(exc).__name__, exc)
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
