"""ASGI entrypoint for the camera search API."""

from camera_search.api.app import create_app
from camera_search.containers import build_container

app = create_app(build_container())
