"""
Shared infrastructure for the ModelCompare backend.

This package contains cross-cutting concerns that are used by multiple modules:
- config: Centralized settings management
- database: Pooled Postgres access with transactional rollback
- exceptions: Base exception classes

Note: Business logic should NOT go here. This is for infrastructure only.
"""

from .config import Settings, get_settings
from .database import Database, get_database, reset_database
from .exceptions import (
    ModelCompareError,
    NotFoundError,
    ValidationError,
    AuthenticationError,
    AuthorizationError,
    ExternalServiceError,
    TemplateError,
    ProviderError,
    ModelNotFoundError,
    CircuitBreakerError,
    DatabaseError,
)
from .models import AuthenticatedUser

__all__ = [
    "Settings",
    "get_settings",
    "Database",
    "get_database",
    "reset_database",
    "ModelCompareError",
    "NotFoundError",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "ExternalServiceError",
    "TemplateError",
    "ProviderError",
    "ModelNotFoundError",
    "CircuitBreakerError",
    "DatabaseError",
    "AuthenticatedUser",
]
