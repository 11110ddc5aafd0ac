"""
Driver facility for the direct-driver login mode.

Loads DB-API 2.0 driver modules by name and opens one connection per call
with the credential being authenticated.
"""
import importlib
import threading
from types import ModuleType
from typing import Any, Dict, Optional

import structlog
from pydantic import SecretStr

from realm.common.exceptions import DriverNotFoundError, ConnectionRejectedError
from realm.infrastructure.connection_string_builder import ConnectionStringBuilder

logger = structlog.get_logger()

# Drivers whose connect() takes a single ODBC connection string
ODBC_DRIVERS = {"pyodbc"}


class DriverManager:
    """Thread-safe registry of loaded DB-API driver modules."""

    def __init__(self, login_timeout: Optional[int] = None):
        """
        Args:
            login_timeout: Passed to drivers that accept a login timeout. None leaves
                the driver default in place.
        """
        self.login_timeout = login_timeout
        self._drivers: Dict[str, ModuleType] = {}
        self._lock = threading.Lock()

    def load(self, driver_name: str) -> ModuleType:
        """
        Load (once) and return the driver module registered under driver_name.

        Raises:
            DriverNotFoundError: If the module cannot be imported or is not a DB-API driver
        """
        driver = self._drivers.get(driver_name)
        if driver is not None:
            return driver

        with self._lock:
            # Another thread may have finished loading while we waited
            driver = self._drivers.get(driver_name)
            if driver is not None:
                return driver

            try:
                module = importlib.import_module(driver_name)
            except ImportError as e:
                raise DriverNotFoundError(
                    f"Cannot find database driver '{driver_name}'",
                    details={"driver_name": driver_name, "error": str(e)}
                ) from e

            if not callable(getattr(module, "connect", None)):
                raise DriverNotFoundError(
                    f"Module '{driver_name}' is not a DB-API driver (no connect())",
                    details={"driver_name": driver_name}
                )

            self._drivers[driver_name] = module
            logger.debug("driver_loaded", driver_name=driver_name)
            return module

    def is_loaded(self, driver_name: str) -> bool:
        return driver_name in self._drivers

    def connect(self, driver_name: str, address: str, username: str, password: str) -> Any:
        """
        Open a new connection to address authenticated as username/password.

        Raises:
            DriverNotFoundError: If the driver cannot be loaded
            ConnectionRejectedError: If the driver refuses to open the connection
        """
        driver = self.load(driver_name)
        driver_error = getattr(driver, "Error", Exception)

        try:
            if driver_name in ODBC_DRIVERS:
                conn_str = ConnectionStringBuilder(address, username, SecretStr(password)).build()
                kwargs = {}
                if self.login_timeout is not None:
                    kwargs["timeout"] = self.login_timeout
                return driver.connect(conn_str, **kwargs)

            return driver.connect(address, user=username, password=password)
        except driver_error as e:
            raise ConnectionRejectedError(
                f"Connection refused for user '{username}'",
                details={"driver_name": driver_name, "error": str(e)}
            ) from e
