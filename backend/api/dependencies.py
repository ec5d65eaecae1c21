"""
Dependency injection setup for FastAPI.

This module provides the "container" that wires together all module
implementations. Each module exposes its service through an interface,
and this file creates the concrete implementations.

Repositories are Postgres-backed when DATABASE_URL is set and in-memory
otherwise. Tests swap services through ``app.dependency_overrides``.
"""

from typing import TYPE_CHECKING, Optional

from shared.config import Settings, get_settings

# Type checking imports for interfaces (avoids circular imports)
if TYPE_CHECKING:
    from modules.auth.interfaces import IAuthService, IUserRepository
    from modules.battle.service import BattleService
    from modules.billing.interfaces import IBillingService
    from modules.compare.service import CompareService
    from modules.debates.interfaces import IDebateService
    from modules.templates.compiler import TemplateCompiler
    from modules.vixra.service import VixraService
    from providers.registry import ProviderRegistry
    from shared.database import Database


class ServiceContainer:
    """
    Container for all service instances.

    This class manages the lifecycle of service instances and their
    dependencies. Services are created lazily on first access.

    All services are cached as singletons within the container.
    Use reset() to clear all cached services for testing.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings
        self._reset_cache()

    def _reset_cache(self) -> None:
        self._database: "Database | None" = None
        self._database_resolved = False
        self._providers: "ProviderRegistry | None" = None
        self._templates: "TemplateCompiler | None" = None
        self._users: "IUserRepository | None" = None
        self._auth_service: "IAuthService | None" = None
        self._billing_service: "IBillingService | None" = None
        self._debate_service: "IDebateService | None" = None
        self._compare_service: "CompareService | None" = None
        self._battle_service: "BattleService | None" = None
        self._vixra_service: "VixraService | None" = None

    @property
    def settings(self) -> Settings:
        return self._settings or get_settings()

    @property
    def database(self) -> "Database | None":
        """The shared Database, or None when running in-memory."""
        if not self._database_resolved:
            from shared.database import get_database
            self._database = get_database()
            self._database_resolved = True
        return self._database

    @property
    def providers(self) -> "ProviderRegistry":
        """Get the provider registry."""
        if self._providers is None:
            from providers.factory import build_provider_registry
            self._providers = build_provider_registry(self.settings)
        return self._providers

    @property
    def templates(self) -> "TemplateCompiler":
        """Get the template compiler, compiling on first access."""
        if self._templates is None:
            from modules.templates.compiler import TemplateCompiler
            settings = self.settings
            self._templates = TemplateCompiler(
                settings.templates_path,
                strict=settings.template_validation_strict,
                validate=settings.validate_templates_at_startup,
            )
        if not self._templates.is_compiled:
            self._templates.compile_all()
        return self._templates

    @property
    def users(self) -> "IUserRepository":
        """Get the user repository."""
        if self._users is None:
            from modules.auth.repository import InMemoryUserRepository, PostgresUserRepository
            db = self.database
            self._users = PostgresUserRepository(db) if db else InMemoryUserRepository()
        return self._users

    @property
    def auth(self) -> "IAuthService":
        """Get the auth service instance."""
        if self._auth_service is None:
            from modules.auth.service import AuthService
            self._auth_service = AuthService(self.users, self.settings)
        return self._auth_service

    @property
    def billing(self) -> "IBillingService":
        """Get the billing service instance."""
        if self._billing_service is None:
            from modules.billing.service import BillingService
            self._billing_service = BillingService(self.users, self.settings)
        return self._billing_service

    @property
    def debates(self) -> "IDebateService":
        """Get the debate service instance."""
        if self._debate_service is None:
            from modules.debates.repository import (
                InMemoryDebateSessionRepository,
                PostgresDebateSessionRepository,
            )
            from modules.debates.service import DebateService
            db = self.database
            repository = PostgresDebateSessionRepository(db) if db else InMemoryDebateSessionRepository()
            self._debate_service = DebateService(
                repository=repository,
                providers=self.providers,
                settings=self.settings,
            )
        return self._debate_service

    @property
    def compare(self) -> "CompareService":
        """Get the compare service instance."""
        if self._compare_service is None:
            from modules.compare.repository import (
                InMemoryComparisonRepository,
                PostgresComparisonRepository,
            )
            from modules.compare.service import CompareService
            db = self.database
            repository = PostgresComparisonRepository(db) if db else InMemoryComparisonRepository()
            self._compare_service = CompareService(repository, self.providers, self.billing)
        return self._compare_service

    @property
    def battle(self) -> "BattleService":
        """Get the battle service instance."""
        if self._battle_service is None:
            from modules.battle.service import BattleService
            self._battle_service = BattleService(self.providers)
        return self._battle_service

    @property
    def vixra(self) -> "VixraService":
        """Get the viXra service instance."""
        if self._vixra_service is None:
            from modules.vixra.repository import (
                InMemoryVixraSessionRepository,
                PostgresVixraSessionRepository,
            )
            from modules.vixra.service import VixraService
            db = self.database
            repository = PostgresVixraSessionRepository(db) if db else InMemoryVixraSessionRepository()
            self._vixra_service = VixraService(repository, self.providers)
        return self._vixra_service

    def reset(self) -> None:
        """
        Reset all cached services.

        This is primarily for testing - allows tests to get fresh
        service instances with different mock dependencies.
        """
        self._reset_cache()


# Module-level container singleton
_container: ServiceContainer | None = None


def get_container() -> ServiceContainer:
    """Get the singleton service container."""
    global _container
    if _container is None:
        _container = ServiceContainer()
    return _container


def reset_container() -> None:
    """
    Reset the service container.

    This clears the cached container, so the next call to get_container()
    will create a fresh container with new service instances.

    Primarily used for testing.
    """
    global _container
    _container = None


# FastAPI dependency functions
# These are the functions that should be used in route Depends() calls


def get_database() -> "Database | None":
    """FastAPI dependency for the database (None when in-memory)."""
    return get_container().database


def get_provider_registry() -> "ProviderRegistry":
    """FastAPI dependency for the provider registry."""
    return get_container().providers


def get_template_compiler() -> "TemplateCompiler":
    """FastAPI dependency for the template compiler."""
    return get_container().templates


def get_auth_service() -> "IAuthService":
    """FastAPI dependency for auth service."""
    return get_container().auth


def get_billing_service() -> "IBillingService":
    """FastAPI dependency for billing service."""
    return get_container().billing


def get_debate_service() -> "IDebateService":
    """FastAPI dependency for debate service."""
    return get_container().debates


def get_compare_service() -> "CompareService":
    """FastAPI dependency for compare service."""
    return get_container().compare


def get_battle_service() -> "BattleService":
    """FastAPI dependency for battle service."""
    return get_container().battle


def get_vixra_service() -> "VixraService":
    """FastAPI dependency for viXra service."""
    return get_container().vixra
