"""ASGI entrypoint for the NightSwipe API."""

from nightswipe.api.app import create_app
from nightswipe.containers import build_container

app = create_app(build_container())
