"""ASGI entrypoint for the strip generator API."""

from manga_strip.api.app import create_app
from manga_strip.containers import build_container

app = create_app(build_container())
