"""HTTP API for statement processing."""

from bookkeep.api.app import create_app

__all__ = ["create_app"]
