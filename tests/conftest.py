"""
Pytest configuration for unit tests.
"""
import pytest
import sys
import os

# Ensure project root is in python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
# and the tests directory itself, for the fakes module
sys.path.insert(0, os.path.abspath(os.path.dirname(__file__)))

# Mock pyodbc globally before any application imports
from unittest.mock import MagicMock


class PyodbcError(Exception):
    pass


_mock_pyodbc = MagicMock()
_mock_pyodbc.Error = PyodbcError
sys.modules["pyodbc"] = _mock_pyodbc

from realm.infrastructure.driver_manager import DriverManager
from realm.infrastructure.connection_factory import UnpooledConnectionFactory
from realm.infrastructure.resource_registry import ResourceRegistry

from fakes import FAKE_DRIVER, FAKE_ADDRESS, FakeStore


@pytest.fixture
def mock_pyodbc():
    """The pyodbc stand-in, reset between tests."""
    _mock_pyodbc.reset_mock(return_value=True, side_effect=True)
    _mock_pyodbc.Error = PyodbcError
    return _mock_pyodbc


@pytest.fixture
def store():
    return FakeStore(
        accounts={"alice": "s3cret", "bob": "hunter2"},
        roles={"alice": [["admin"], ["editor"]], "bob": []},
    )


@pytest.fixture
def fake_driver(store, monkeypatch):
    """Registers the fake store as an importable DB-API driver module."""
    monkeypatch.setitem(sys.modules, FAKE_DRIVER, store.as_driver())
    return FAKE_DRIVER


@pytest.fixture
def driver_manager(fake_driver):
    return DriverManager()


@pytest.fixture
def registry(driver_manager):
    registry = ResourceRegistry()
    registry.bind("db/app", UnpooledConnectionFactory(driver_manager, FAKE_DRIVER, FAKE_ADDRESS))
    return registry


@pytest.fixture(autouse=True)
def reset_config_loader():
    from config.configuration import ConfigLoader
    ConfigLoader.reset()
    yield
    ConfigLoader.reset()
