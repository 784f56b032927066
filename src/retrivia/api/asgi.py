"""ASGI entrypoint for the photobooth kiosk."""

from retrivia.api.app import create_app
from retrivia.containers import build_container

app = create_app(build_container())
