"""
Configuration Management Module.
Loads the realm configuration from config.yaml and allows overrides via environment variables.
"""
import os
import yaml
from typing import List, Optional
from pathlib import Path
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
import structlog

from config.settings import settings
from realm.common.exceptions import ConfigurationError

logger = structlog.get_logger()

TRUE_VALUES = {"1", "true", "yes", "on"}

# --- Configuration Models ---

class RealmConfig(BaseModel):
    """Login strategy configuration. Immutable once the realm is active."""
    model_config = ConfigDict(frozen=True)

    # Factory-lookup mode: name of a connection factory in the resource registry
    resource_name: Optional[str] = None
    # Direct-driver mode: DB-API module name and connection address (no credentials)
    driver_name: Optional[str] = None
    connection_address: Optional[str] = None
    # Single-parameter query returning role names in its first column
    role_query: Optional[str] = None
    # Resolve resource_name in the caller's local registry instead of the global one
    use_local_registry_scope: bool = False

    @field_validator("resource_name", "driver_name", "connection_address", "role_query", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class ResourceConfig(BaseModel):
    """A connection factory bound into the global registry at activation."""
    name: str
    driver_name: str
    connection_address: str
    pooled: bool = False


class DriverConfig(BaseModel):
    # Handed to the driver's own login timeout; None keeps the driver default
    login_timeout_seconds: Optional[int] = None


class LoggingConfig(BaseModel):
    level: str = "INFO"
    json_format: bool = True


class RealmAppConfig(BaseModel):
    realm: RealmConfig = Field(default_factory=RealmConfig)
    resources: List[ResourceConfig] = Field(default_factory=list)
    driver: DriverConfig = Field(default_factory=DriverConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

# --- Loader Logic ---

class ConfigLoader:
    _instance: Optional[RealmAppConfig] = None

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> RealmAppConfig:
        """
        Load configuration from YAML and override with Environment Variables.
        Singleton pattern to avoid reloading.
        """
        if cls._instance:
            return cls._instance

        # 1. Determine Config Path
        if not config_path:
            config_path = os.getenv("REALM_CONFIG_PATH", settings.REALM_CONFIG_PATH)

        path = Path(config_path)
        if not path.is_absolute():
            path = Path.cwd() / config_path

        # 2. Load YAML
        config_data = {}
        if path.exists():
            try:
                with open(path, "r") as f:
                    config_data = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                logger.error("config_load_error", error=str(e), path=str(path))
                raise ConfigurationError(
                    f"Failed to load config file at {path}: {e}", details={"path": str(path)}
                ) from e
        else:
            logger.warning("config_file_not_found", path=str(path))

        if not isinstance(config_data, dict):
            raise ConfigurationError(f"Config file at {path} must contain a mapping")

        # 3. Environment Variable Overrides
        realm_data = dict(config_data.get("realm") or {})
        env_overrides = {
            "resource_name": os.getenv("REALM_RESOURCE_NAME"),
            "driver_name": os.getenv("REALM_DRIVER_NAME"),
            "connection_address": os.getenv("REALM_CONNECTION_ADDRESS"),
            "role_query": os.getenv("REALM_ROLE_QUERY"),
        }
        for key, value in env_overrides.items():
            if value is not None:
                realm_data[key] = value
                logger.info("realm_setting_overridden", setting=key)

        local_scope = os.getenv("REALM_LOCAL_SCOPE")
        if local_scope is not None:
            realm_data["use_local_registry_scope"] = local_scope.strip().lower() in TRUE_VALUES

        config_data["realm"] = realm_data

        log_level = os.getenv("LOG_LEVEL")
        if log_level:
            config_data["logging"] = {**(config_data.get("logging") or {}), "level": log_level}

        try:
            config = RealmAppConfig(**config_data)
        except ValidationError as e:
            logger.error("config_validation_error", error=str(e))
            raise ConfigurationError(f"Invalid Configuration: {e}") from e

        if not config.realm.resource_name and not config.realm.connection_address:
            logger.warning("No resource_name or connection_address configured. Every login will be refused.")

        cls._instance = config
        return config

    @classmethod
    def reset(cls) -> None:
        cls._instance = None


def get_config() -> RealmAppConfig:
    return ConfigLoader.load()
