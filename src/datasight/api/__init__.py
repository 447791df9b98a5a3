"""HTTP surface for insight generation."""

from .app import create_app

__all__ = ["create_app"]
