"""Shared test fixtures."""

import asyncio
import time
from dataclasses import dataclass, field

import numpy as np
import pytest

from camera_search.adapters.catalog_client import CatalogClient
from camera_search.config import Settings
from camera_search.containers import AppContainer
from camera_search.domain.frames import CapturedFrame
from camera_search.services.camera_search import CameraSearchSession
from camera_search.services.catalog import CatalogSearchService
from camera_search.services.classifier import (
    ClassifierBackend,
    ClassifierGateway,
    ModelHandle,
)
from camera_search.services.media import (
    CameraDevice,
    CameraStream,
    MediaAcquisition,
    StreamConstraints,
    Viewfinder,
)


def make_frame(width: int = 64, height: int = 48) -> CapturedFrame:
    pixels = np.zeros((height, width, 3), dtype=np.uint8)
    pixels[:, :, 0] = 200
    return CapturedFrame(pixels=pixels)


def product_doc(product_id: str, name: str, **extra: object) -> dict[str, object]:
    doc: dict[str, object] = {
        "_id": product_id,
        "name": name,
        "category": "Sacs",
        "categorySlug": "sacs",
        "price": 25000,
        "image": f"https://cdn.example/{product_id}.jpg",
    }
    doc.update(extra)
    return doc


@dataclass
class FakeStream(CameraStream):
    """Fake camera stream that counts stop calls."""

    frame: CapturedFrame = field(default_factory=make_frame)
    read_error: Exception | None = None
    read_gate: asyncio.Event | None = None
    stop_calls: int = 0
    running: bool = True

    @property
    def active(self) -> bool:
        return self.running

    async def read_frame(self) -> CapturedFrame:
        if self.read_gate is not None:
            await self.read_gate.wait()
        if self.read_error is not None:
            raise self.read_error
        return self.frame

    def stop(self) -> None:
        self.stop_calls += 1
        self.running = False


@dataclass
class FakeCameraDevice(CameraDevice):
    """Fake camera returning fresh streams, optionally gated or failing."""

    error: Exception | None = None
    gate: asyncio.Event | None = None
    streams: list[FakeStream] = field(default_factory=list)
    requests: list[StreamConstraints] = field(default_factory=list)

    async def open_stream(self, constraints: StreamConstraints) -> CameraStream:
        self.requests.append(constraints)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        stream = FakeStream()
        self.streams.append(stream)
        return stream


@dataclass
class FakeModelHandle(ModelHandle):
    """Fake model returning fixed predictions."""

    predictions: list[dict[str, object]] = field(
        default_factory=lambda: [
            {"className": "backpack, knapsack", "probability": 0.91},
            {"className": "handbag", "probability": 0.05},
        ]
    )
    error: Exception | None = None
    calls: list[int] = field(default_factory=list)

    def classify(self, image, top_k: int) -> list[dict[str, object]]:
        self.calls.append(top_k)
        if self.error is not None:
            raise self.error
        return self.predictions


@dataclass
class FakeClassifierBackend(ClassifierBackend):
    """Fake backend counting loads."""

    handle: FakeModelHandle = field(default_factory=FakeModelHandle)
    error: Exception | None = None
    delay_seconds: float = 0.0
    load_calls: int = 0

    def load(self) -> ModelHandle:
        self.load_calls += 1
        if self.delay_seconds:
            time.sleep(self.delay_seconds)
        if self.error is not None:
            raise self.error
        return self.handle


@dataclass
class FakeCatalogClient(CatalogClient):
    """Fake catalog returning canned documents per term."""

    payloads: dict[str, dict[str, object]] = field(
        default_factory=lambda: {
            "sac a dos": {
                "products": [
                    product_doc("p1", "Sac a dos wax"),
                    product_doc("p2", "Sac a dos cuir"),
                ]
            },
            "sac a main": {"products": [product_doc("p3", "Sac a main raphia")]},
        }
    )
    error: Exception | None = None
    gates: dict[str, asyncio.Event] = field(default_factory=dict)
    calls: list[tuple[str, int]] = field(default_factory=list)

    async def search_products(self, term: str, limit: int) -> dict[str, object]:
        self.calls.append((term, limit))
        gate = self.gates.get(term)
        if gate is not None:
            await gate.wait()
        if self.error is not None:
            raise self.error
        return self.payloads.get(term, {"products": []})


@pytest.fixture
def settings() -> Settings:
    return Settings(api_base_url="https://shop.example")


@pytest.fixture
def camera_device() -> FakeCameraDevice:
    return FakeCameraDevice()


@pytest.fixture
def classifier_backend() -> FakeClassifierBackend:
    return FakeClassifierBackend()


@pytest.fixture
def catalog_client() -> FakeCatalogClient:
    return FakeCatalogClient()


@pytest.fixture
def viewfinder() -> Viewfinder:
    return Viewfinder()


@pytest.fixture
def classifier(classifier_backend: FakeClassifierBackend) -> ClassifierGateway:
    return ClassifierGateway(classifier_backend, top_k=5)


@pytest.fixture
def catalog_service(catalog_client: FakeCatalogClient) -> CatalogSearchService:
    return CatalogSearchService(client=catalog_client, default_limit=8)


@pytest.fixture
def session(
    camera_device: FakeCameraDevice,
    viewfinder: Viewfinder,
    classifier: ClassifierGateway,
    catalog_service: CatalogSearchService,
) -> CameraSearchSession:
    return CameraSearchSession(
        media=MediaAcquisition(device=camera_device, constraints=StreamConstraints()),
        viewfinder=viewfinder,
        classifier=classifier,
        catalog=catalog_service,
        search_limit=8,
    )


@pytest.fixture
def container(
    settings: Settings,
    classifier: ClassifierGateway,
    catalog_service: CatalogSearchService,
    session: CameraSearchSession,
) -> AppContainer:
    async def close_resources() -> None:
        session.close()

    return AppContainer(
        settings=settings,
        classifier=classifier,
        catalog_service=catalog_service,
        session=session,
        close_resources=close_resources,
    )
