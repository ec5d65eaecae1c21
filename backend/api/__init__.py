"""
ModelCompare API package.

Provides the FastAPI application for comparing LLM responses.
"""

from .app import app, create_app

__all__ = ["app", "create_app"]
