"""Classifier gateway owning the lazily loaded on-device model."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Protocol

from camera_search.domain.errors import ClassificationError, ModelLoadError
from camera_search.domain.session import ClassificationCandidate

if TYPE_CHECKING:
    import numpy as np
    from numpy.typing import NDArray

logger = logging.getLogger(__name__)


class ModelHandle(Protocol):
    """A loaded classification model."""

    def classify(self, image: NDArray[np.uint8], top_k: int) -> list[dict[str, object]]:
        """Return ``[{"className": str, "probability": float}, ...]``."""
        ...


class ClassifierBackend(Protocol):
    """Loads a classification model (runtime plus weights)."""

    def load(self) -> ModelHandle:
        """Load the model; blocking, may download weights."""
        ...


class ClassifierGateway:
    """Process-wide owner of the classification model.

    ``ensure_loaded`` loads the model once; concurrent callers await the
    same in-flight load. A failed load is not cached. A load that outlasts
    ``load_timeout_seconds`` fails with ``ModelLoadError``.
    """

    def __init__(
        self,
        backend: ClassifierBackend,
        top_k: int = 5,
        load_timeout_seconds: float | None = None,
    ) -> None:
        self._backend = backend
        self._top_k = top_k
        self._load_timeout_seconds = load_timeout_seconds
        self._model: ModelHandle | None = None
        self._loading: asyncio.Future[ModelHandle] | None = None

    @property
    def loaded(self) -> bool:
        return self._model is not None

    async def ensure_loaded(self) -> None:
        """Load the model on first call; later calls return immediately."""
        if self._model is not None:
            return
        loop = asyncio.get_running_loop()
        if (
            self._loading is None
            or self._loading.done()
            or self._loading.get_loop() is not loop
        ):
            self._loading = loop.create_task(self._load())
        loading = self._loading
        try:
            await asyncio.shield(loading)
        finally:
            if loading.done() and self._loading is loading:
                self._loading = None

    async def _load(self) -> ModelHandle:
        logger.info("Loading classification model")
        try:
            async with asyncio.timeout(self._load_timeout_seconds):
                model = await asyncio.to_thread(self._backend.load)
        except TimeoutError as exc:
            logger.error(
                "Classification model did not load within %ss",
                self._load_timeout_seconds,
            )
            raise ModelLoadError("model load timed out") from exc
        except Exception as exc:
            logger.exception("Classification model failed to load")
            raise ModelLoadError(str(exc)) from exc
        self._model = model
        logger.info("Classification model ready")
        return model

    async def classify(
        self, image: NDArray[np.uint8], top_k: int | None = None
    ) -> list[ClassificationCandidate]:
        """Classify an image and return candidates by descending confidence."""
        await self.ensure_loaded()
        model = self._model
        if model is None:
            raise ModelLoadError("model is not loaded")
        k = top_k or self._top_k
        try:
            raw = await asyncio.to_thread(model.classify, image, k)
            candidates = [
                ClassificationCandidate(
                    raw_label=str(item["className"]),
                    confidence=float(item["probability"]),
                )
                for item in raw
            ]
        except Exception as exc:
            logger.exception("Classification call failed")
            raise ClassificationError(str(exc)) from exc
        candidates.sort(key=lambda candidate: candidate.confidence, reverse=True)
        return candidates[:k]
