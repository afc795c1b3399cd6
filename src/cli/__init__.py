"""Command-line interface for the cache steps."""

from .app import app, main

__all__ = ["app", "main"]
