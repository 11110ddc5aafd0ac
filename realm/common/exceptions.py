"""
Custom exceptions for the connection realm.

Collaborators (registry, driver facility, connection factories) raise these;
the realm core turns them into tagged outcomes before they reach the host.
"""

class RealmError(Exception):
    """Base exception for all realm errors."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.details = details or {}

class ConfigurationError(RealmError):
    """Raised when the realm cannot function as configured."""
    pass

class DriverNotFoundError(ConfigurationError):
    """Raised when a named database driver cannot be loaded."""
    pass

class ResourceLookupError(RealmError):
    """Raised when a named connection factory cannot be resolved from a registry."""
    pass

class ConnectionRejectedError(RealmError):
    """Raised when the backing store refuses to open a connection for a credential."""
    pass

class RoleQueryError(RealmError):
    """Raised when the role query fails on an authenticated connection."""
    pass
