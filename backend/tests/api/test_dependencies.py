"""Tests for api/dependencies.py."""

import logging

import pytest

from api.dependencies import (
    ServiceContainer,
    get_container,
    get_profile_service,
    reset_container,
    set_container,
)
from modules.auth.models import SessionState
from shared.documents import InMemoryDocumentStore
from shared.exceptions import NetworkError

from tests.conftest import FakeIdentityProvider


class TestServiceContainer:
    def test_requires_startup(self, settings):
        container = ServiceContainer(settings=settings)

        with pytest.raises(RuntimeError):
            container.store
        with pytest.raises(RuntimeError):
            container.identity_provider

    @pytest.mark.asyncio
    async def test_startup_with_memory_store(self, settings, provider):
        container = ServiceContainer(identity_provider=provider, settings=settings)

        await container.startup()

        assert isinstance(container.store, InMemoryDocumentStore)
        assert container.session.session.state == SessionState.UNAUTHENTICATED
        await container.shutdown()

    @pytest.mark.asyncio
    async def test_startup_restores_stored_session(self, settings, store, provider):
        provider.current = provider.add_account("ann@example.com", "password1", id="ann")
        container = ServiceContainer(store=store, identity_provider=provider, settings=settings)

        await container.startup()

        assert container.session.session.identity.id == "ann"
        await container.shutdown()

    def test_services_are_singletons(self, settings, store, provider):
        container = ServiceContainer(store=store, identity_provider=provider, settings=settings)

        assert container.profiles is container.profiles
        assert container.catalog is container.catalog
        assert container.session is container.session

    def test_reset_creates_fresh_services(self, settings, store, provider):
        container = ServiceContainer(store=store, identity_provider=provider, settings=settings)
        profiles = container.profiles

        container.reset()

        assert container.profiles is not profiles
        assert container.store is store


class TestContainerSingleton:
    def test_get_container_is_cached(self):
        assert get_container() is get_container()

    def test_set_and_reset(self, settings, store):
        container = ServiceContainer(store=store, settings=settings)
        set_container(container)
        assert get_container() is container

        reset_container()
        assert get_container() is not container

    def test_dependency_functions_use_container(self, settings, store):
        container = ServiceContainer(store=store, identity_provider=FakeIdentityProvider(), settings=settings)
        set_container(container)
        assert get_profile_service() is container.profiles


class TestStartupFailures:
    @pytest.mark.asyncio
    async def test_initial_session_failure_is_logged_not_raised(self, settings, store, provider, caplog):
        provider.fail_next("current_identity", NetworkError("supabase"))
        container = ServiceContainer(store=store, identity_provider=provider, settings=settings)

        with caplog.at_level(logging.WARNING, logger="api.dependencies"):
            await container.startup()

        assert container.session.session.state == SessionState.UNAUTHENTICATED
        assert "NETWORK_ERROR" in caplog.text
        await container.shutdown()
