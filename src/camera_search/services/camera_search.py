"""Camera search session state machine.

Sequences camera acquisition and model loading, capture, classification,
label normalization and catalog search. One session serves one open
camera-search panel; ``close()`` returns it to ``IDLE`` and releases the
camera.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from camera_search.domain.errors import (
    CameraSearchError,
    SessionErrorKind,
    message_for,
)
from camera_search.domain.session import (
    STREAM_STATES,
    AnalyzingStage,
    LoadingStage,
    SessionSnapshot,
    SessionState,
)
from camera_search.services.normalizer import detect_categories

if TYPE_CHECKING:
    from camera_search.domain.frames import CapturedFrame
    from camera_search.domain.products import Product
    from camera_search.domain.session import DetectedCategory
    from camera_search.services.catalog import CatalogSearchService
    from camera_search.services.classifier import ClassifierGateway
    from camera_search.services.media import CameraStream, MediaAcquisition, Viewfinder

logger = logging.getLogger(__name__)


class CameraSearchSession:
    """Orchestrates one open-to-close camera search lifecycle."""

    def __init__(
        self,
        media: MediaAcquisition,
        viewfinder: Viewfinder,
        classifier: ClassifierGateway,
        catalog: CatalogSearchService,
        search_limit: int | None = None,
    ) -> None:
        self._media = media
        self._viewfinder = viewfinder
        self._classifier = classifier
        self._catalog = catalog
        self._search_limit = search_limit

        self._state = SessionState.IDLE
        self._stream: CameraStream | None = None
        # Bumped on close and on every new acquisition; completions that
        # started under an older generation are discarded.
        self._generation = 0
        self._search_token = 0
        self._reset_data()

    # -- Read side ----------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def holds_stream(self) -> bool:
        return self._stream is not None

    @property
    def captured_frame(self) -> CapturedFrame | None:
        return self._frame

    def snapshot(self) -> SessionSnapshot:
        """Return an immutable view of the session for rendering."""
        return SessionSnapshot(
            state=self._state,
            loading_stage=self._loading_stage,
            analyzing_stage=self._analyzing_stage,
            error_kind=self._error_kind,
            error=self._error,
            captured_frame=self._frame,
            detected_categories=tuple(self._detected),
            active_search_term=self._active_term,
            results=tuple(self._results),
            search_loading=self._search_loading,
            search_failed=self._search_failed,
            holds_stream=self.holds_stream,
        )

    async def preview(self) -> CapturedFrame | None:
        """Return the live viewfinder frame while the camera is running."""
        if self._state is not SessionState.LIVE_VIEWFINDER:
            return None
        return await self._viewfinder.preview()

    # -- Transitions ----------------------------------------------------------

    async def open(self) -> None:
        """Load the classifier and acquire the camera concurrently."""
        if self._state is not SessionState.IDLE:
            logger.debug("open() ignored in state %s", self._state)
            return
        await self._acquire(load_model=not self._classifier.loaded)

    async def capture(self) -> None:
        """Snapshot the viewfinder, release the camera, classify and search."""
        stream = self._stream
        if (
            self._state is not SessionState.LIVE_VIEWFINDER
            or stream is None
            or self._viewfinder.attached_stream is not stream
        ):
            logger.debug("capture() ignored in state %s", self._state)
            return

        generation = self._generation
        self._analyzing_stage = AnalyzingStage.CAPTURING
        self._transition(SessionState.CAPTURING)
        try:
            frame = await stream.read_frame()
        except Exception:
            if generation != self._generation:
                return
            logger.exception("Failed to read a frame from the camera")
            self._fail(SessionErrorKind.CLASSIFICATION_FAILED)
            return
        if generation != self._generation:
            logger.debug("Discarding a frame read for a closed session")
            return
        self._frame = frame
        self._release_stream()

        self._analyzing_stage = AnalyzingStage.DETECTING
        try:
            candidates = await self._classifier.classify(frame.pixels)
        except CameraSearchError:
            if generation == self._generation:
                self._fail(SessionErrorKind.CLASSIFICATION_FAILED)
            return
        if generation != self._generation:
            logger.debug("Discarding classification for a closed session")
            return

        self._analyzing_stage = AnalyzingStage.CLASSIFYING
        detected = detect_categories(candidates)
        if not detected:
            logger.info(
                "No recognizable object among %s",
                [candidate.raw_label for candidate in candidates],
            )
            self._fail(SessionErrorKind.NO_RECOGNIZABLE_OBJECT)
            return

        logger.info(
            "Detected categories: %s",
            ", ".join(category.search_term for category in detected),
        )
        self._detected = detected
        self._analyzing_stage = AnalyzingStage.SEARCHING
        self._transition(SessionState.SHOWING_RESULTS)
        await self._run_search(detected[0].search_term, generation)

    async def select_category(self, term: str) -> None:
        """Search for another detected term; the latest selection wins."""
        if self._state is not SessionState.SHOWING_RESULTS:
            logger.debug("select_category() ignored in state %s", self._state)
            return
        if term not in {category.search_term for category in self._detected}:
            logger.debug("select_category() ignored for undetected term %r", term)
            return
        await self._run_search(term, self._generation)

    async def retake(self) -> None:
        """Discard the capture and return to the live viewfinder."""
        if self._state not in {SessionState.SHOWING_RESULTS, SessionState.FAILED}:
            logger.debug("retake() ignored in state %s", self._state)
            return
        await self._acquire(load_model=not self._classifier.loaded)

    def close(self) -> None:
        """Release the camera and clear all session data, from any state."""
        self._generation += 1
        self._search_token += 1
        self._release_stream()
        self._reset_data()
        self._transition(SessionState.IDLE)

    # -- Internals ----------------------------------------------------------

    async def _acquire(self, *, load_model: bool) -> None:
        self._generation += 1
        generation = self._generation
        self._release_stream()
        self._reset_data()
        self._loading_stage = LoadingStage.MODEL if load_model else LoadingStage.CAMERA
        self._transition(SessionState.LOADING_RESOURCES)

        stream_task = asyncio.create_task(self._open_stream(generation))
        tasks = {stream_task}
        if load_model:
            tasks.add(asyncio.create_task(self._classifier.ensure_loaded()))
        for task in tasks:
            task.add_done_callback(_consume_exception)

        pending = set(tasks)
        error: BaseException | None = None
        try:
            while pending and error is None:
                done, pending = await asyncio.wait(
                    pending, return_when=asyncio.FIRST_COMPLETED
                )
                error = _first_error(done, prefer=stream_task)
                if pending and error is None and not stream_task.done():
                    self._loading_stage = LoadingStage.CAMERA
        except asyncio.CancelledError:
            if generation == self._generation:
                self.close()
            raise

        if generation != self._generation:
            logger.debug("Discarding acquisition for a superseded session")
            return
        if error is not None:
            self._fail(_error_kind(error))
            return

        stream = self._stream
        if stream is None:
            self._fail(SessionErrorKind.STREAM_ACQUISITION_FAILED)
            return
        self._media.attach(stream, self._viewfinder)
        if self._viewfinder.attached_stream is not stream:
            self._fail(SessionErrorKind.STREAM_ACQUISITION_FAILED)
            return
        self._loading_stage = LoadingStage.READY
        self._transition(SessionState.LIVE_VIEWFINDER)

    async def _open_stream(self, generation: int) -> None:
        stream = await self._media.request_stream()
        if (
            generation != self._generation
            or self._state is not SessionState.LOADING_RESOURCES
        ):
            logger.info("Releasing camera stream acquired by a superseded open")
            self._media.release(stream)
            return
        self._stream = stream

    async def _run_search(self, term: str, generation: int) -> None:
        self._search_token += 1
        token = self._search_token
        self._active_term = term
        self._search_loading = True
        self._search_failed = False

        result = await self._catalog.search(term, self._search_limit)

        if generation != self._generation or token != self._search_token:
            logger.debug("Discarding stale results for %r", term)
            return
        self._results = list(result.products)
        self._search_failed = result.failed
        self._search_loading = False

    def _fail(self, kind: SessionErrorKind) -> None:
        self._release_stream()
        self._error_kind = kind
        self._error = message_for(kind)
        logger.info("Camera search failed: %s", kind)
        self._transition(SessionState.FAILED)

    def _release_stream(self) -> None:
        stream, self._stream = self._stream, None
        self._media.release(stream, self._viewfinder)

    def _transition(self, state: SessionState) -> None:
        # The fresh stream is held through LOADING_RESOURCES until attach.
        if state not in STREAM_STATES and state is not SessionState.LOADING_RESOURCES:
            self._release_stream()
        logger.debug("Session state %s -> %s", self._state, state)
        self._state = state

    def _reset_data(self) -> None:
        self._loading_stage = LoadingStage.INIT
        self._analyzing_stage = AnalyzingStage.CAPTURING
        self._error_kind: SessionErrorKind | None = None
        self._error = ""
        self._frame: CapturedFrame | None = None
        self._detected: list[DetectedCategory] = []
        self._active_term = ""
        self._results: list[Product] = []
        self._search_loading = False
        self._search_failed = False


def _first_error(
    done: set[asyncio.Task[None]], prefer: asyncio.Task[None]
) -> BaseException | None:
    """Pick the error to surface; camera errors win over model errors."""
    ordered = sorted(done, key=lambda task: task is not prefer)
    for task in ordered:
        if task.cancelled():
            return asyncio.CancelledError()
        if task.exception() is not None:
            return task.exception()
    return None


def _error_kind(error: BaseException) -> SessionErrorKind:
    if isinstance(error, CameraSearchError):
        return error.kind
    logger.error("Unexpected acquisition error: %r", error)
    return SessionErrorKind.STREAM_ACQUISITION_FAILED


def _consume_exception(task: asyncio.Task[None]) -> None:
    if not task.cancelled():
        task.exception()
