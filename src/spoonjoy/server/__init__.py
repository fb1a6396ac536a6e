"""ASGI application factory and dependencies for the Spoonjoy server."""

from spoonjoy.server.app import app, create_app

__all__ = ["app", "create_app"]
