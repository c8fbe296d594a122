"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import Response

from camera_search.api.schemas import SearchRequest, SessionView
from camera_search.app_logging import configure_logging
from camera_search.containers import AppContainer
from camera_search.domain.frames import CapturedFrame


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        try:
            await app.state.container.close_resources()
        except Exception:
            logger.exception("Failed to release camera search resources")

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/camera-search")
    async def session_state(request: Request) -> SessionView:
        """Return the current session state."""
        return _view(request)

    @app.post("/camera-search/open")
    async def open_session(request: Request) -> SessionView:
        """Load the model and start the camera."""
        await _container(request).session.open()
        return _view(request)

    @app.post("/camera-search/capture")
    async def capture(request: Request) -> SessionView:
        """Capture, classify and search for the top detected term."""
        await _container(request).session.capture()
        return _view(request)

    @app.post("/camera-search/search")
    async def select_category(payload: SearchRequest, request: Request) -> SessionView:
        """Search for another detected category."""
        await _container(request).session.select_category(payload.term)
        return _view(request)

    @app.post("/camera-search/retake")
    async def retake(request: Request) -> SessionView:
        """Discard the capture and reopen the camera."""
        await _container(request).session.retake()
        return _view(request)

    @app.post("/camera-search/close")
    async def close_session(request: Request) -> SessionView:
        """Release the camera and clear the session."""
        _container(request).session.close()
        return _view(request)

    @app.get("/camera-search/frame")
    async def captured_frame(request: Request) -> Response:
        """Return the captured frame as JPEG."""
        return _jpeg_response(_container(request).session.captured_frame)

    @app.get("/camera-search/preview")
    async def preview(request: Request) -> Response:
        """Return the current viewfinder frame as JPEG."""
        try:
            frame = await _container(request).session.preview()
        except Exception:
            logger.exception("Failed to read a viewfinder frame")
            frame = None
        return _jpeg_response(frame)

    return app


def _container(request: Request) -> AppContainer:
    return request.app.state.container


def _view(request: Request) -> SessionView:
    return SessionView.from_snapshot(_container(request).session.snapshot())


def _jpeg_response(frame: CapturedFrame | None) -> Response:
    if frame is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return Response(content=frame.to_jpeg(), media_type="image/jpeg")
