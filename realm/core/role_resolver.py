"""
Role resolution over an authenticated connection.

The role query runs as the user who just logged in, takes the username as its
only parameter and yields one role name per row in its first column.
"""
import contextlib
from typing import Any, List, Optional

import sqlglot
import structlog
from pydantic import SecretStr
from sqlglot import exp
from sqlglot.errors import SqlglotError

from realm.common.exceptions import ConfigurationError, RoleQueryError
from realm.common.results import FailureKind, Outcome
from realm.core.principal import Principal

logger = structlog.get_logger()

QUERY_TYPES = (exp.Select, exp.Union, exp.Intersect, exp.Except)


def validate_role_query(query: str, dialect: Optional[str] = None) -> None:
    """
    Check that query is a single SELECT with exactly one positional '?' parameter.

    SQL that sqlglot cannot parse is accepted with a warning, since the
    backing store may speak a dialect sqlglot does not know.

    Raises:
        ConfigurationError: If the query is not usable as a role query
    """
    try:
        parsed = [p for p in sqlglot.parse(query, read=dialect) if p]
    except SqlglotError as e:
        logger.warning("role_query_unparsed", error=str(e))
        return

    if len(parsed) != 1:
        raise ConfigurationError(
            "role_query must be a single statement", details={"statements": len(parsed)}
        )

    stmt = parsed[0]
    if not isinstance(stmt, QUERY_TYPES):
        raise ConfigurationError(
            f"role_query must be a SELECT statement. Found: {stmt.key}", details={"type": stmt.key}
        )

    placeholders = list(stmt.find_all(exp.Placeholder))
    named = [p for p in placeholders if p.name]
    if named or len(placeholders) != 1:
        raise ConfigurationError(
            "role_query must take exactly one positional '?' parameter (the username)",
            details={"placeholders": len(placeholders), "named": len(named)}
        )


class RoleResolver:
    """Builds the principal for an authenticated connection."""

    def __init__(self, role_query: Optional[str] = None):
        self.role_query = role_query

    def resolve(self, connection: Any, username: str, password: str) -> Outcome:
        """
        Returns:
            Outcome holding a Principal, or INVALID_CONNECTION / ROLE_QUERY_ERROR
        """
        if connection is None:
            logger.error("connection_missing", username=username)
            return Outcome.fail(FailureKind.INVALID_CONNECTION, "Connection was null")

        if not self.role_query:
            return Outcome.success(Principal(username=username, password=SecretStr(password)))

        try:
            roles = self._query_roles(connection, username)
        except Exception as e:
            logger.error("role_query_failed", username=username, error=str(e), exc_info=True)
            return Outcome.fail(FailureKind.ROLE_QUERY_ERROR, str(e))

        return Outcome.success(Principal(username=username, password=SecretStr(password), roles=roles))

    def _query_roles(self, connection: Any, username: str) -> List[Optional[str]]:
        logger.debug("role_query_started", username=username)
        roles: List[Optional[str]] = []
        with contextlib.closing(connection.cursor()) as cursor:
            cursor.execute(self.role_query, (username,))
            if cursor.description is None:
                raise RoleQueryError("Role query did not return a result set")
            # Only the first column names a role; extra columns are ignored
            for row in cursor.fetchall():
                value = row[0]
                role = None if value is None else str(value)
                logger.debug("role_added", username=username, role=role)
                roles.append(role)
        return roles
