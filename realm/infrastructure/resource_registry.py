"""
Resource registry: resolves symbolic names to connection factories.

Two scopes are supported. The global scope is one namespace shared by the whole
process. The local scope is a namespace bound to the caller's execution context
(thread or asyncio task) through a ContextVar, installed with local_context().
"""
import threading
from contextlib import contextmanager
from contextvars import ContextVar
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, Optional

import structlog

from realm.common.exceptions import ResourceLookupError
from realm.infrastructure.connection_factory import (
    ConnectionFactory,
    PooledConnectionFactory,
    UnpooledConnectionFactory,
)
from realm.infrastructure.driver_manager import DriverManager

logger = structlog.get_logger()

_LOCAL_BINDINGS: ContextVar[Optional[Dict[str, Any]]] = ContextVar("realm_local_bindings", default=None)


class RegistryScope(str, Enum):
    GLOBAL = "global"
    LOCAL = "local"


class ResourceRegistry:
    """Name -> connection factory lookup with global and local scopes."""

    def __init__(self):
        self._global: Dict[str, Any] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, resources: Iterable, driver_manager: DriverManager) -> "ResourceRegistry":
        """
        Build a registry whose global scope holds one factory per configured resource.

        Args:
            resources: ResourceConfig entries (name, driver_name, connection_address, pooled)
            driver_manager: Driver facility shared by the unpooled factories
        """
        registry = cls()
        for resource in resources:
            if resource.pooled:
                factory = PooledConnectionFactory(resource.driver_name, resource.connection_address)
            else:
                factory = UnpooledConnectionFactory(
                    driver_manager, resource.driver_name, resource.connection_address
                )
            registry.bind(resource.name, factory)
            logger.info("resource_bound", resource_name=resource.name, pooled=resource.pooled)
        return registry

    def bind(self, name: str, obj: Any, scope: RegistryScope = RegistryScope.GLOBAL) -> None:
        if scope == RegistryScope.LOCAL:
            bindings = _LOCAL_BINDINGS.get()
            if bindings is None:
                raise ResourceLookupError("No local registry context is bound to this caller")
            bindings[name] = obj
            return
        with self._lock:
            self._global[name] = obj

    def unbind(self, name: str, scope: RegistryScope = RegistryScope.GLOBAL) -> None:
        if scope == RegistryScope.LOCAL:
            bindings = _LOCAL_BINDINGS.get()
            if bindings is not None:
                bindings.pop(name, None)
            return
        with self._lock:
            self._global.pop(name, None)

    @contextmanager
    def local_context(self, bindings: Optional[Dict[str, Any]] = None) -> Iterator[Dict[str, Any]]:
        """
        Install a local namespace for the current execution context.

        Usage:
            with registry.local_context({"jdbc/app": factory}):
                realm.authenticate(user, password)
        """
        token = _LOCAL_BINDINGS.set(dict(bindings or {}))
        try:
            yield _LOCAL_BINDINGS.get()
        finally:
            _LOCAL_BINDINGS.reset(token)

    def resolve(self, name: str, scope: RegistryScope = RegistryScope.GLOBAL) -> ConnectionFactory:
        """
        Resolve name to an unpooled connection factory.

        Raises:
            ResourceLookupError: If the context is unavailable, the name is unbound,
                or the bound object cannot authenticate users.
        """
        if scope == RegistryScope.LOCAL:
            bindings = _LOCAL_BINDINGS.get()
            if bindings is None:
                raise ResourceLookupError(
                    "No local registry context is bound to this caller",
                    details={"resource_name": name, "scope": scope.value}
                )
            obj = bindings.get(name)
        else:
            with self._lock:
                obj = self._global.get(name)

        if obj is None:
            raise ResourceLookupError(
                f"Unable to find resource '{name}'",
                details={"resource_name": name, "scope": scope.value}
            )
        if not isinstance(obj, ConnectionFactory):
            raise ResourceLookupError(
                f"Resource '{name}' is not a connection factory",
                details={"resource_name": name, "scope": scope.value, "type": type(obj).__name__}
            )
        if obj.pooled:
            raise ResourceLookupError(
                f"Resource '{name}' is a pooled connection factory and cannot authenticate users",
                details={"resource_name": name, "scope": scope.value}
            )
        return obj
