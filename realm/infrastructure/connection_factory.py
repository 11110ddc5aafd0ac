"""
Connection factories that can be bound into a resource registry.

Only unpooled factories can be used for login: a pool would hand out a
connection opened for a different credential, or skip authentication entirely.
"""
from abc import ABC, abstractmethod
from typing import Any

from realm.common.exceptions import ConnectionRejectedError
from realm.infrastructure.driver_manager import DriverManager


class ConnectionFactory(ABC):
    """Produces a connection authenticated as the given credential."""

    pooled: bool = False

    @abstractmethod
    def get_connection(self, username: str, password: str) -> Any:
        """
        Open a connection as username/password.

        Raises:
            ConnectionRejectedError: If the backing store refuses the credential
        """


class UnpooledConnectionFactory(ConnectionFactory):
    """Opens a fresh driver connection for every call."""

    def __init__(self, driver_manager: DriverManager, driver_name: str, address: str):
        self.driver_manager = driver_manager
        self.driver_name = driver_name
        self.address = address

    def get_connection(self, username: str, password: str) -> Any:
        return self.driver_manager.connect(self.driver_name, self.address, username, password)

    def __repr__(self) -> str:
        return f"UnpooledConnectionFactory(driver_name={self.driver_name!r})"


class PooledConnectionFactory(ConnectionFactory):
    """
    Placeholder bound for resources declared as pooled.

    Lookups refuse it, so a misdeclared resource fails closed instead of
    authenticating through a shared connection.
    """

    pooled = True

    def __init__(self, driver_name: str, address: str):
        self.driver_name = driver_name
        self.address = address

    def get_connection(self, username: str, password: str) -> Any:
        raise ConnectionRejectedError(
            "Pooled connection factories cannot authenticate users",
            details={"driver_name": self.driver_name},
        )
