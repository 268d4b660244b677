# src/scoreforge/middleware/__init__.py

"""Middleware components for ScoreForge API."""

from .logging import RequestLoggingMiddleware

__all__ = ["RequestLoggingMiddleware"]
