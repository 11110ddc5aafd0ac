"""
Connection acquirers: the two ways a login attempt opens its connection.

Opening the connection is the authentication. Each acquirer returns an
Outcome holding the open connection, which the caller must close, or the
failure kind that stopped the attempt.
"""
from typing import Optional

import structlog

from realm.common.exceptions import (
    ConfigurationError,
    ConnectionRejectedError,
    DriverNotFoundError,
    ResourceLookupError,
)
from realm.common.results import FailureKind, Outcome
from realm.infrastructure.driver_manager import DriverManager
from realm.infrastructure.resource_registry import RegistryScope, ResourceRegistry

logger = structlog.get_logger()


class FactoryLookupAcquirer:
    """Opens the connection through a connection factory found in the resource registry."""

    def __init__(self, registry: ResourceRegistry):
        self.registry = registry

    def acquire(self, resource_name: str, scope: RegistryScope, username: str, password: str) -> Outcome:
        try:
            factory = self.registry.resolve(resource_name, scope)
        except ResourceLookupError as e:
            logger.error(
                "resource_lookup_failed",
                resource_name=resource_name,
                scope=scope.value,
                error=str(e),
            )
            return Outcome.fail(FailureKind.LOOKUP_ERROR, str(e))

        try:
            connection = factory.get_connection(username, password)
        except ConnectionRejectedError as e:
            logger.warning(
                "authentication_rejected",
                mode="factory_lookup",
                resource_name=resource_name,
                username=username,
                error=str(e),
            )
            return Outcome.fail(FailureKind.AUTHENTICATION_REJECTED, str(e))
        except ConfigurationError as e:
            # A bound factory whose driver cannot be loaded is a deployment fault
            logger.error(
                "driver_not_found",
                mode="factory_lookup",
                resource_name=resource_name,
                error=str(e),
                details=e.details,
            )
            return Outcome.fail(FailureKind.CONFIGURATION_ERROR, str(e))

        return Outcome.success(connection)


class DirectDriverAcquirer:
    """Opens the connection by loading a driver and connecting to an address."""

    def __init__(self, driver_manager: DriverManager):
        self.driver_manager = driver_manager

    def acquire(self, driver_name: Optional[str], address: str, username: str, password: str) -> Outcome:
        if not driver_name:
            logger.error("driver_not_configured", connection_address_set=bool(address))
            return Outcome.fail(FailureKind.CONFIGURATION_ERROR, "driver_name is not configured")

        try:
            self.driver_manager.load(driver_name)
        except DriverNotFoundError as e:
            logger.error("driver_not_found", driver_name=driver_name, error=str(e), details=e.details)
            return Outcome.fail(FailureKind.CONFIGURATION_ERROR, str(e))

        try:
            connection = self.driver_manager.connect(driver_name, address, username, password)
        except ConnectionRejectedError as e:
            logger.warning(
                "authentication_rejected",
                mode="direct_driver",
                driver_name=driver_name,
                username=username,
                error=str(e),
            )
            return Outcome.fail(FailureKind.AUTHENTICATION_REJECTED, str(e))

        return Outcome.success(connection)
