"""
MCP host adapter for the connection realm.

Exposes the realm's login check to an MCP client over stdio. The password is
never echoed back.
"""
import sys
from typing import Dict, Any

from dotenv import load_dotenv
from mcp.server.fastmcp import FastMCP  # type: ignore[import-untyped]

load_dotenv()
load_dotenv('.env.local')

from config.configuration import get_config
from config.settings import settings
from realm.common.logging import configure_logging
from realm.core.authenticator import CredentialConnectionAuthenticator

# Load Config
try:
    config = get_config()
except Exception as e:
    print(f"FATAL: Config load failed: {e}", file=sys.stderr)
    sys.exit(1)

configure_logging(log_level=config.logging.level, json_format=config.logging.json_format)

try:
    auth_realm = CredentialConnectionAuthenticator.from_config(config)
except Exception as e:
    print(f"FATAL: Realm activation failed: {e}", file=sys.stderr)
    sys.exit(1)

mcp = FastMCP("connection-realm")


@mcp.tool()
def authenticate_user(username: str, password: str) -> Dict[str, Any]:
    """
    Check a username/password by logging in to the configured data store as that user.

    Returns whether the login succeeded and, if so, the roles granted by the role query.
    """
    principal = auth_realm.authenticate(username, password)
    if principal is None:
        return {"authenticated": False, "username": username, "roles": []}
    return {"authenticated": True, "username": principal.username, "roles": list(principal.roles)}


@mcp.tool()
def realm_info() -> Dict[str, Any]:
    """Return public realm settings (sanitized)."""
    return {
        "name": auth_realm.name,
        "info": auth_realm.info,
        "mode": auth_realm.mode.value,
        "local_registry_scope": auth_realm.config.use_local_registry_scope,
        "role_query_configured": bool(auth_realm.config.role_query),
    }


if __name__ == "__main__":
    if settings.MCP_TRANSPORT != "stdio":
        print(f"Unsupported transport '{settings.MCP_TRANSPORT}', using stdio", file=sys.stderr)
    print("Starting connection realm MCP (stdio)", file=sys.stderr)
    mcp.run(transport="stdio")
