"""HTTP API for casevoice."""

from .server import create_app

__all__ = ["create_app"]
