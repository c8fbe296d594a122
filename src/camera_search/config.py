"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    api_base_url: str
    search_limit: int = 8
    search_timeout_seconds: float = 15
    camera_index: int = 0
    camera_facing_mode: str = "environment"
    camera_width: int = 640
    camera_height: int = 480
    classifier_repo_id: str = "Xenova/mobilenet_v2_1.0_224"
    classifier_model_file: str = "onnx/model.onnx"
    classifier_config_file: str = "config.json"
    classifier_top_k: int = 5
    model_load_timeout_seconds: float = 60
    models_dir: str = ".models"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def normalize_base_url(raw: str) -> str:
    """Strip trailing slashes so paths can be appended safely."""
    return raw.strip().rstrip("/")
