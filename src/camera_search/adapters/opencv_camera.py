"""OpenCV VideoCapture-backed camera device."""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import cv2

from camera_search.domain.errors import (
    CameraAcquisitionFailed,
    CameraNotFound,
    CameraPermissionDenied,
)
from camera_search.domain.frames import CapturedFrame
from camera_search.services.media import CameraDevice, CameraStream, StreamConstraints

logger = logging.getLogger(__name__)


class OpenCvCameraStream(CameraStream):
    """Live stream over an opened ``cv2.VideoCapture``.

    Reads and the final release run on a single worker thread owned by the
    stream, so a release always follows any read still in flight.
    """

    def __init__(self, capture: Any, index: int) -> None:
        self._capture: Any | None = capture
        self.index = index
        self._executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=1, thread_name_prefix=f"camera{index}"
        )
        self._released: concurrent.futures.Future[None] | None = None

    @property
    def active(self) -> bool:
        return self._capture is not None

    async def read_frame(self) -> CapturedFrame:
        capture = self._capture
        if capture is None:
            raise RuntimeError(f"Camera {self.index} stream is stopped")
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, self._read, capture)

    def _read(self, capture: Any) -> CapturedFrame:
        ok, frame = capture.read()
        if not ok or frame is None:
            raise RuntimeError(f"Camera {self.index} returned no frame")
        rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        return CapturedFrame(pixels=rgb)

    def stop(self) -> None:
        """Mark the stream stopped and release the device on the worker."""
        capture, self._capture = self._capture, None
        if capture is None:
            return
        self._released = self._executor.submit(capture.release)
        self._released.add_done_callback(self._log_release_failure)
        self._executor.shutdown(wait=False)

    def wait_released(self, timeout: float | None = None) -> None:
        """Block until the device handle has been released."""
        if self._released is not None:
            self._released.result(timeout=timeout)

    def _log_release_failure(self, future: concurrent.futures.Future[None]) -> None:
        if future.exception() is not None:
            logger.error(
                "Camera %s failed to release: %s", self.index, future.exception()
            )


@dataclass
class OpenCvCameraDevice(CameraDevice):
    """Camera device opened by index through OpenCV.

    OpenCV has no notion of facing mode; ``index`` selects the camera.
    """

    index: int = 0
    device_dir: Path = field(default_factory=lambda: Path("/dev"))
    release_timeout_seconds: float = 5.0
    _last_stream: OpenCvCameraStream | None = field(default=None, init=False, repr=False)

    async def open_stream(self, constraints: StreamConstraints) -> CameraStream:
        """Open the camera off the event loop."""
        return await asyncio.to_thread(self._open, constraints)

    def _open(self, constraints: StreamConstraints) -> OpenCvCameraStream:
        self._wait_for_previous_release()
        self._check_device_node()
        try:
            capture = cv2.VideoCapture(self.index)
        except cv2.error as exc:
            raise CameraAcquisitionFailed(str(exc)) from exc

        if not capture.isOpened():
            capture.release()
            raise CameraNotFound(f"Camera {self.index} could not be opened")

        try:
            capture.set(cv2.CAP_PROP_FRAME_WIDTH, constraints.width)
            capture.set(cv2.CAP_PROP_FRAME_HEIGHT, constraints.height)
        except cv2.error as exc:
            capture.release()
            raise CameraAcquisitionFailed(str(exc)) from exc

        logger.info(
            "Opened camera %s (requested %sx%s, facing=%s ignored)",
            self.index,
            constraints.width,
            constraints.height,
            constraints.facing_mode,
        )
        stream = OpenCvCameraStream(capture, self.index)
        self._last_stream = stream
        return stream

    def _wait_for_previous_release(self) -> None:
        previous, self._last_stream = self._last_stream, None
        if previous is None:
            return
        try:
            previous.wait_released(timeout=self.release_timeout_seconds)
        except concurrent.futures.TimeoutError as exc:
            raise CameraAcquisitionFailed(
                f"Camera {self.index} is still being released"
            ) from exc

    def _check_device_node(self) -> None:
        """Distinguish missing hardware from denied access on V4L2 systems."""
        if not sys.platform.startswith("linux") or not self.device_dir.is_dir():
            return
        node = self.device_dir / f"video{self.index}"
        if not node.exists():
            raise CameraNotFound(f"No camera at {node}")
        if not os.access(node, os.R_OK | os.W_OK):
            raise CameraPermissionDenied(f"Access to {node} denied")
