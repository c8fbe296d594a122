"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from camera_search.adapters.catalog_client import HttpxCatalogClient
from camera_search.adapters.onnx_classifier import OnnxClassifierBackend
from camera_search.adapters.opencv_camera import OpenCvCameraDevice
from camera_search.config import Settings, normalize_base_url
from camera_search.services.camera_search import CameraSearchSession
from camera_search.services.catalog import CatalogSearchService
from camera_search.services.classifier import ClassifierGateway
from camera_search.services.media import MediaAcquisition, StreamConstraints, Viewfinder


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    classifier: ClassifierGateway
    catalog_service: CatalogSearchService
    session: CameraSearchSession
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    media = MediaAcquisition(
        device=OpenCvCameraDevice(index=resolved_settings.camera_index),
        constraints=StreamConstraints(
            facing_mode=resolved_settings.camera_facing_mode,
            width=resolved_settings.camera_width,
            height=resolved_settings.camera_height,
        ),
    )
    classifier = ClassifierGateway(
        OnnxClassifierBackend(
            repo_id=resolved_settings.classifier_repo_id,
            model_file=resolved_settings.classifier_model_file,
            config_file=resolved_settings.classifier_config_file,
            models_dir=resolved_settings.models_dir,
        ),
        top_k=resolved_settings.classifier_top_k,
        load_timeout_seconds=resolved_settings.model_load_timeout_seconds,
    )
    catalog_client = HttpxCatalogClient.create(
        base_url=normalize_base_url(resolved_settings.api_base_url),
        timeout=resolved_settings.search_timeout_seconds,
    )
    catalog_service = CatalogSearchService(
        client=catalog_client,
        default_limit=resolved_settings.search_limit,
    )
    session = CameraSearchSession(
        media=media,
        viewfinder=Viewfinder(),
        classifier=classifier,
        catalog=catalog_service,
        search_limit=resolved_settings.search_limit,
    )

    async def close_resources() -> None:
        session.close()
        await catalog_client.close()

    return AppContainer(
        settings=resolved_settings,
        classifier=classifier,
        catalog_service=catalog_service,
        session=session,
        close_resources=close_resources,
    )
