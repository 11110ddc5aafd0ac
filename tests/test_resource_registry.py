"""
Unit tests for ResourceRegistry.
Tests global/local scopes and refusal of unusable bindings.
"""
import threading
import pytest
from unittest.mock import MagicMock
from config.configuration import ResourceConfig
from realm.common.exceptions import ConnectionRejectedError, ResourceLookupError
from realm.infrastructure.connection_factory import (
    PooledConnectionFactory,
    UnpooledConnectionFactory,
)
from realm.infrastructure.resource_registry import RegistryScope, ResourceRegistry
from fakes import FAKE_ADDRESS, FAKE_DRIVER


class TestGlobalScope:
    def test_resolve_bound_factory(self, registry):
        factory = registry.resolve("db/app", RegistryScope.GLOBAL)
        assert isinstance(factory, UnpooledConnectionFactory)
        assert factory.driver_name == FAKE_DRIVER

    def test_unbound_name(self):
        with pytest.raises(ResourceLookupError) as exc:
            ResourceRegistry().resolve("db/missing")
        assert "Unable to find resource 'db/missing'" in str(exc.value)

    def test_bound_object_not_a_factory(self):
        registry = ResourceRegistry()
        registry.bind("db/app", object())
        with pytest.raises(ResourceLookupError) as exc:
            registry.resolve("db/app")
        assert "not a connection factory" in str(exc.value)

    def test_pooled_factory_refused(self):
        registry = ResourceRegistry()
        registry.bind("db/pool", PooledConnectionFactory(FAKE_DRIVER, FAKE_ADDRESS))
        with pytest.raises(ResourceLookupError) as exc:
            registry.resolve("db/pool")
        assert "pooled" in str(exc.value)

    def test_pooled_factory_never_opens_a_connection(self):
        """Called directly, past the registry, a pooled marker still fails closed."""
        factory = PooledConnectionFactory(FAKE_DRIVER, FAKE_ADDRESS)
        with pytest.raises(ConnectionRejectedError) as exc:
            factory.get_connection("alice", "s3cret")
        assert exc.value.details == {"driver_name": FAKE_DRIVER}

    def test_unbind(self, registry):
        registry.unbind("db/app")
        with pytest.raises(ResourceLookupError):
            registry.resolve("db/app")

    def test_global_name_not_visible_in_local_scope(self, registry):
        with registry.local_context():
            with pytest.raises(ResourceLookupError):
                registry.resolve("db/app", RegistryScope.LOCAL)


class TestLocalScope:
    def test_no_local_context(self):
        with pytest.raises(ResourceLookupError) as exc:
            ResourceRegistry().resolve("db/app", RegistryScope.LOCAL)
        assert "No local registry context" in str(exc.value)

    def test_local_context_bindings(self, driver_manager):
        registry = ResourceRegistry()
        factory = UnpooledConnectionFactory(driver_manager, FAKE_DRIVER, FAKE_ADDRESS)

        with registry.local_context({"db/app": factory}):
            assert registry.resolve("db/app", RegistryScope.LOCAL) is factory

        # Context is gone once the block exits
        with pytest.raises(ResourceLookupError):
            registry.resolve("db/app", RegistryScope.LOCAL)

    def test_bind_into_local_context(self, driver_manager):
        registry = ResourceRegistry()
        factory = UnpooledConnectionFactory(driver_manager, FAKE_DRIVER, FAKE_ADDRESS)
        with registry.local_context():
            registry.bind("db/app", factory, RegistryScope.LOCAL)
            assert registry.resolve("db/app", RegistryScope.LOCAL) is factory
            registry.unbind("db/app", RegistryScope.LOCAL)
            with pytest.raises(ResourceLookupError):
                registry.resolve("db/app", RegistryScope.LOCAL)

    def test_bind_without_local_context(self):
        with pytest.raises(ResourceLookupError):
            ResourceRegistry().bind("db/app", MagicMock(), RegistryScope.LOCAL)

    def test_local_contexts_are_isolated_between_threads(self, driver_manager):
        registry = ResourceRegistry()
        first = UnpooledConnectionFactory(driver_manager, FAKE_DRIVER, "fake://one")
        second = UnpooledConnectionFactory(driver_manager, FAKE_DRIVER, "fake://two")
        resolved = {}
        barrier = threading.Barrier(2)

        def worker(key, factory):
            with registry.local_context({"db/app": factory}):
                barrier.wait()
                resolved[key] = registry.resolve("db/app", RegistryScope.LOCAL)

        threads = [
            threading.Thread(target=worker, args=("one", first)),
            threading.Thread(target=worker, args=("two", second)),
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert resolved["one"] is first
        assert resolved["two"] is second


class TestFromConfig:
    def test_binds_configured_resources(self, driver_manager):
        registry = ResourceRegistry.from_config(
            [
                ResourceConfig(name="db/app", driver_name=FAKE_DRIVER, connection_address=FAKE_ADDRESS),
                ResourceConfig(name="db/pool", driver_name=FAKE_DRIVER, connection_address=FAKE_ADDRESS, pooled=True),
            ],
            driver_manager,
        )
        factory = registry.resolve("db/app")
        assert factory.driver_manager is driver_manager
        assert factory.address == FAKE_ADDRESS
        with pytest.raises(ResourceLookupError):
            registry.resolve("db/pool")
