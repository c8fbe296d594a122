"""Domain models for camera search sessions."""

from dataclasses import dataclass, field
from enum import StrEnum

from camera_search.domain.errors import SessionErrorKind
from camera_search.domain.frames import CapturedFrame
from camera_search.domain.products import Product


class SessionState(StrEnum):
    """Single source of truth for the session orchestrator."""

    IDLE = "idle"
    LOADING_RESOURCES = "loading_resources"
    LIVE_VIEWFINDER = "live_viewfinder"
    CAPTURING = "capturing"
    SHOWING_RESULTS = "showing_results"
    FAILED = "failed"


# The camera stream may only be held in these states.
STREAM_STATES = frozenset({SessionState.LIVE_VIEWFINDER, SessionState.CAPTURING})


class LoadingStage(StrEnum):
    """Progress while resources are being acquired."""

    INIT = "init"
    MODEL = "model"
    CAMERA = "camera"
    READY = "ready"


class AnalyzingStage(StrEnum):
    """Progress of a capture cycle."""

    CAPTURING = "capturing"
    DETECTING = "detecting"
    CLASSIFYING = "classifying"
    SEARCHING = "searching"


class ResultsView(StrEnum):
    """What the results panel should render."""

    LOADING = "loading"
    EMPTY = "empty"
    PRODUCTS = "products"


@dataclass(frozen=True)
class ClassificationCandidate:
    """A raw classifier label with its confidence in [0, 1]."""

    raw_label: str
    confidence: float


@dataclass(frozen=True)
class DetectedCategory:
    """A candidate that normalized onto a catalog search term."""

    display_label: str
    search_term: str
    confidence_percent: int


@dataclass(frozen=True)
class SearchResult:
    """Outcome of one catalog query; ``failed`` marks absorbed errors."""

    term: str
    products: list[Product] = field(default_factory=list)
    failed: bool = False


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of a session for the presentation layer."""

    state: SessionState
    loading_stage: LoadingStage
    analyzing_stage: AnalyzingStage
    error_kind: SessionErrorKind | None
    error: str
    captured_frame: CapturedFrame | None
    detected_categories: tuple[DetectedCategory, ...]
    active_search_term: str
    results: tuple[Product, ...]
    search_loading: bool
    search_failed: bool
    holds_stream: bool

    @property
    def results_view(self) -> ResultsView:
        if self.search_loading:
            return ResultsView.LOADING
        if not self.results:
            return ResultsView.EMPTY
        return ResultsView.PRODUCTS
