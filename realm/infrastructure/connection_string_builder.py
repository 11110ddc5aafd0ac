"""
Connection String Builder for ODBC data sources.
Binds a login credential into a credential-free ODBC connection string.
"""
from typing import List, Tuple
from pydantic import SecretStr

# Keys that carry a credential in an ODBC connection string (lower-cased)
CREDENTIAL_KEYS = {"uid", "user id", "user", "username", "pwd", "password"}


def quote_value(value: str) -> str:
    """
    Quote an ODBC attribute value when it needs it.

    Values containing ';', braces or surrounding whitespace are wrapped in
    braces, with closing braces doubled.
    """
    needs_braces = (
        any(ch in value for ch in ";{}")
        or value != value.strip()
    )
    if not needs_braces:
        return value
    return "{" + value.replace("}", "}}") + "}"


def parse_connection_string(conn_str: str) -> List[Tuple[str, str]]:
    """
    Split an ODBC connection string into (key, raw_value) pairs.

    Braced values may contain ';' and use '}}' as an escaped closing brace.
    Raw values keep their braces so they can be written back unchanged.
    """
    pairs: List[Tuple[str, str]] = []
    i = 0
    length = len(conn_str)
    while i < length:
        eq = conn_str.find("=", i)
        if eq == -1:
            # Trailing garbage without '=' is ignored, the driver would reject it anyway
            if conn_str[i:].strip(" ;"):
                pairs.append((conn_str[i:].strip(" ;"), ""))
            break
        key = conn_str[i:eq].strip(" ;")
        j = eq + 1
        if j < length and conn_str[j] == "{":
            k = j + 1
            while k < length:
                if conn_str[k] == "}":
                    if k + 1 < length and conn_str[k + 1] == "}":
                        k += 2
                        continue
                    break
                k += 1
            value = conn_str[j:k + 1]
            end = conn_str.find(";", k + 1)
        else:
            end = conn_str.find(";", j)
            value = conn_str[j:end if end != -1 else length].strip()
        if key:
            pairs.append((key, value))
        if end == -1:
            break
        i = end + 1
    return pairs


class ConnectionStringBuilder:
    """Builds an ODBC connection string for one login attempt."""

    def __init__(self, address: str, username: str, password: SecretStr):
        """
        Initialize connection string builder.

        Args:
            address: ODBC connection string without credentials
                     (e.g. "Driver={ODBC Driver 18 for SQL Server};Server=db;Database=app")
            username: Login name to authenticate as
            password: Login password (SecretStr)
        """
        self.address = address
        self.username = username
        self.password = password

    def build(self) -> str:
        """
        Build the connection string with the credential bound as Uid/Pwd.

        Any credential attribute already present in the address is dropped so
        the attempt authenticates exactly as the supplied user.

        Returns:
            Complete ODBC connection string
        """
        parts = [
            f"{key}={value}"
            for key, value in parse_connection_string(self.address)
            if key.lower() not in CREDENTIAL_KEYS
        ]
        parts.append(f"Uid={quote_value(self.username)}")
        parts.append(f"Pwd={quote_value(self.password.get_secret_value())}")
        return ";".join(parts) + ";"
