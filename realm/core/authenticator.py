"""
Realm that authenticates a user through the data store's own login.

A credential is valid if and only if a connection can be opened with it. No
password is stored, hashed or compared here. When a role query is configured,
it runs on that same connection to derive the user's roles.

Connection pooling is incompatible with this scheme; use a separate pool for
data access.
"""
from typing import Any, Optional

import structlog

from config.configuration import RealmAppConfig, RealmConfig
from realm.common.results import FailureKind, Outcome
from realm.core.acquirers import DirectDriverAcquirer, FactoryLookupAcquirer
from realm.core.principal import Principal
from realm.core.role_resolver import RoleResolver, validate_role_query
from realm.core.strategy import ConnectionMode, select_mode
from realm.infrastructure.driver_manager import DriverManager
from realm.infrastructure.resource_registry import RegistryScope, ResourceRegistry

logger = structlog.get_logger()

REALM_NAME = "DataSourceConnectionRealm"
REALM_INFO = "DataSourceConnectionRealm/1.0"


class CredentialConnectionAuthenticator:
    """
    Authenticates users by opening a connection as them.

    Instances hold only the immutable configuration and the shared registry and
    driver facilities, so one instance can serve concurrent logins.
    """

    name = REALM_NAME
    info = REALM_INFO

    def __init__(
        self,
        config: RealmConfig,
        registry: Optional[ResourceRegistry] = None,
        driver_manager: Optional[DriverManager] = None,
    ):
        """
        Args:
            config: Realm configuration
            registry: Resource registry for factory-lookup mode
            driver_manager: Driver facility for direct-driver mode

        Raises:
            ConfigurationError: If the role query is unusable
        """
        self.config = config
        self.driver_manager = driver_manager if driver_manager is not None else DriverManager()
        self.registry = registry if registry is not None else ResourceRegistry()
        self.factory_acquirer = FactoryLookupAcquirer(self.registry)
        self.driver_acquirer = DirectDriverAcquirer(self.driver_manager)

        if config.role_query:
            validate_role_query(config.role_query)
        self.role_resolver = RoleResolver(config.role_query)

    @classmethod
    def from_config(cls, app_config: RealmAppConfig) -> "CredentialConnectionAuthenticator":
        """Wire the realm with a global registry built from the configured resources."""
        driver_manager = DriverManager(login_timeout=app_config.driver.login_timeout_seconds)
        registry = ResourceRegistry.from_config(app_config.resources, driver_manager)
        return cls(app_config.realm, registry=registry, driver_manager=driver_manager)

    @property
    def mode(self) -> ConnectionMode:
        return select_mode(self.config)

    @property
    def scope(self) -> RegistryScope:
        return RegistryScope.LOCAL if self.config.use_local_registry_scope else RegistryScope.GLOBAL

    def authenticate(self, username: str, password: str) -> Optional[Principal]:
        """
        Authenticate username/password against the data store.

        Returns:
            Principal on success, None on any failure
        """
        outcome = self.authenticate_outcome(username, password)
        if not outcome.ok:
            logger.debug("not_authenticated", username=username, reason=outcome.failure.value)
            return None
        return outcome.value

    def authenticate_outcome(self, username: str, password: str) -> Outcome:
        """Same as authenticate(), but returns the tagged outcome of the attempt."""
        logger.debug("authenticate_called", username=username)

        mode = select_mode(self.config)
        if mode == ConnectionMode.NONE:
            logger.error(
                "realm_not_configured",
                realm=self.name,
                error="Neither resource_name nor connection_address is configured",
            )
            return Outcome.fail(FailureKind.NOT_CONFIGURED, "Realm is not configured")

        if mode == ConnectionMode.FACTORY_LOOKUP:
            acquired = self.factory_acquirer.acquire(self.config.resource_name, self.scope, username, password)
        else:
            acquired = self.driver_acquirer.acquire(
                self.config.driver_name, self.config.connection_address, username, password
            )

        if not acquired.ok:
            return acquired

        connection = acquired.value
        try:
            outcome = self.role_resolver.resolve(connection, username, password)
        finally:
            self._release(connection)

        if outcome.ok:
            logger.info("authenticated", username=username, mode=mode.value, roles=len(outcome.value.roles))
        return outcome

    def get_password(self, username: str) -> None:
        """Passwords are never stored by this realm."""
        return None

    def get_principal(self, username: str) -> None:
        """Principals only exist for the duration of a successful authenticate()."""
        return None

    @staticmethod
    def _release(connection: Any) -> None:
        if connection is None:
            return
        try:
            connection.close()
        except Exception as e:
            # The login outcome is already decided; a failed close must not change it
            logger.warning("connection_close_failed", error=str(e))
