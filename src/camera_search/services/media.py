"""Camera stream acquisition, viewfinder binding and release."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from camera_search.domain.errors import CameraAcquisitionFailed, CameraError

if TYPE_CHECKING:
    from camera_search.domain.frames import CapturedFrame

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StreamConstraints:
    """Requested camera stream shape; video only."""

    facing_mode: str = "environment"
    width: int = 640
    height: int = 480
    audio: bool = False


class CameraStream(Protocol):
    """A live video stream holding camera hardware."""

    @property
    def active(self) -> bool:
        """Whether the underlying tracks are still running."""
        ...

    async def read_frame(self) -> CapturedFrame:
        """Snapshot the current video frame off the event loop."""
        ...

    def stop(self) -> None:
        """Stop all hardware tracks without blocking the caller."""
        ...


class CameraDevice(Protocol):
    """Platform camera capability."""

    async def open_stream(self, constraints: StreamConstraints) -> CameraStream:
        """Open a stream or raise a ``CameraError`` subclass."""
        ...


class Viewfinder:
    """Renderable surface showing the live stream."""

    def __init__(self) -> None:
        self._stream: CameraStream | None = None

    @property
    def attached_stream(self) -> CameraStream | None:
        return self._stream

    def bind(self, stream: CameraStream) -> None:
        self._stream = stream

    def unbind(self) -> None:
        self._stream = None

    async def preview(self) -> CapturedFrame | None:
        """Return the current live frame, if a running stream is bound."""
        stream = self._stream
        if stream is None or not stream.active:
            return None
        return await stream.read_frame()


@dataclass
class MediaAcquisition:
    """Owns camera stream lifecycle: request, attach, release."""

    device: CameraDevice
    constraints: StreamConstraints

    async def request_stream(self) -> CameraStream:
        """Request a camera stream, mapping unknown failures to a generic kind."""
        try:
            stream = await self.device.open_stream(self.constraints)
        except CameraError:
            raise
        except Exception as exc:
            logger.exception("Camera acquisition failed")
            raise CameraAcquisitionFailed(str(exc)) from exc
        logger.info(
            "Camera stream opened (facing=%s, %sx%s)",
            self.constraints.facing_mode,
            self.constraints.width,
            self.constraints.height,
        )
        return stream

    @staticmethod
    def attach(stream: CameraStream, viewfinder: Viewfinder) -> None:
        """Bind a stream to the viewfinder; no-op if already bound."""
        if viewfinder.attached_stream is stream:
            return
        viewfinder.bind(stream)

    @staticmethod
    def release(stream: CameraStream | None, viewfinder: Viewfinder | None = None) -> None:
        """Stop a stream's tracks; safe on None or an already stopped stream."""
        if viewfinder is not None and viewfinder.attached_stream is stream:
            viewfinder.unbind()
        if stream is None or not stream.active:
            return
        stream.stop()
        logger.info("Camera stream released")
