"""
Chooses how a login attempt obtains its connection.
"""
from enum import Enum

from config.configuration import RealmConfig


class ConnectionMode(str, Enum):
    FACTORY_LOOKUP = "factory_lookup"
    DIRECT_DRIVER = "direct_driver"
    NONE = "none"


def select_mode(config: RealmConfig) -> ConnectionMode:
    """
    Pick the acquisition path for config.

    A configured resource name always wins, even when direct-driver
    settings are present as well.
    """
    if config.resource_name:
        return ConnectionMode.FACTORY_LOOKUP
    if config.connection_address:
        return ConnectionMode.DIRECT_DRIVER
    return ConnectionMode.NONE
