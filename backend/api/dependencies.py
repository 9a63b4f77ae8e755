"""
Dependency injection setup for FastAPI.

This module provides the "container" that wires together all module
implementations. Each module exposes its service through an interface,
and this file creates the concrete implementations.

The Supabase clients are async to create, so the container is started
from the application lifespan before any service is handed out.
"""

import logging
from typing import TYPE_CHECKING, Optional

from shared.config import Settings, get_settings
from shared.database import get_supabase_auth_client, get_supabase_client
from shared.documents import IDocumentStore, InMemoryDocumentStore, SupabaseDocumentStore
from shared.exceptions import DefyError

# Type checking imports for interfaces (avoids circular imports)
if TYPE_CHECKING:
    from modules.auth.interfaces import IIdentityProvider, ISessionManager
    from modules.catalog.interfaces import ICatalogService
    from modules.profiles.interfaces import IProfileService

logger = logging.getLogger(__name__)


class ServiceContainer:
    """
    Container for all service instances.

    The document store and identity provider are created in startup()
    (or passed in, e.g. by tests). Services built on them are created
    lazily on first access and cached as singletons within the container.
    """

    def __init__(
        self,
        store: Optional[IDocumentStore] = None,
        identity_provider: "Optional[IIdentityProvider]" = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._store = store
        self._identity_provider = identity_provider
        self._session_manager: "ISessionManager | None" = None
        self._profile_service: "IProfileService | None" = None
        self._catalog_service: "ICatalogService | None" = None

    async def startup(self) -> None:
        """Create the external clients and resolve the initial session."""
        if self._store is None:
            if self._settings.document_store_backend == "memory":
                self._store = InMemoryDocumentStore()
            else:
                self._store = SupabaseDocumentStore(await get_supabase_client())

        if self._identity_provider is None:
            from modules.auth.provider import SupabaseIdentityProvider

            admin = None
            if self._settings.supabase_service_role_key:
                admin = await get_supabase_client()
            self._identity_provider = SupabaseIdentityProvider(
                await get_supabase_auth_client(),
                admin_client=admin,
            )

        try:
            await self.session.start()
        except DefyError as e:
            # The session has resolved to unauthenticated; serve anyway
            logger.warning(f"Initial session check failed: {e.code} {e.message}")

    async def shutdown(self) -> None:
        """Unsubscribe the session manager from provider notifications."""
        if self._session_manager is not None:
            await self._session_manager.close()

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def store(self) -> IDocumentStore:
        if self._store is None:
            raise RuntimeError("Service container not started: no document store")
        return self._store

    @property
    def identity_provider(self) -> "IIdentityProvider":
        if self._identity_provider is None:
            raise RuntimeError("Service container not started: no identity provider")
        return self._identity_provider

    @property
    def profiles(self) -> "IProfileService":
        """Get the profile service instance."""
        if self._profile_service is None:
            from modules.profiles.repository import ProfileRepository, ReadingProgressRepository
            from modules.profiles.service import ProfileService
            self._profile_service = ProfileService(
                ProfileRepository(self.store),
                ReadingProgressRepository(self.store),
                settings=self._settings,
            )
        return self._profile_service

    @property
    def catalog(self) -> "ICatalogService":
        """Get the catalog service instance."""
        if self._catalog_service is None:
            from modules.catalog.repository import (
                ArticleRepository,
                PublicationRepository,
                TopicRepository,
            )
            from modules.catalog.service import CatalogService
            self._catalog_service = CatalogService(
                TopicRepository(self.store),
                PublicationRepository(self.store),
                ArticleRepository(self.store),
                settings=self._settings,
            )
        return self._catalog_service

    @property
    def session(self) -> "ISessionManager":
        """Get the session manager instance."""
        if self._session_manager is None:
            from modules.auth.service import SessionManager
            self._session_manager = SessionManager(
                self.identity_provider,
                self.profiles,
                settings=self._settings,
            )
        return self._session_manager

    def reset(self) -> None:
        """
        Reset all cached services.

        This is primarily for testing - allows tests to get fresh
        service instances with different fake dependencies.
        """
        self._session_manager = None
        self._profile_service = None
        self._catalog_service = None


# Module-level container singleton
_container: ServiceContainer | None = None


def get_container() -> ServiceContainer:
    """Get the singleton service container."""
    global _container
    if _container is None:
        _container = ServiceContainer()
    return _container


def set_container(container: ServiceContainer) -> None:
    """Install a pre-built container (tests, embedding)."""
    global _container
    _container = container


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


def get_session_manager() -> "ISessionManager":
    """FastAPI dependency for the session manager."""
    return get_container().session


def get_profile_service() -> "IProfileService":
    """FastAPI dependency for the profile service."""
    return get_container().profiles


def get_catalog_service() -> "ICatalogService":
    """FastAPI dependency for the catalog service."""
    return get_container().catalog
