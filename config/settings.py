"""
Process settings loaded from environment variables and .env files using pydantic-settings.
Realm behaviour itself lives in config/configuration.py; this covers the process around it.
"""
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables and .env files.
    """
    model_config = SettingsConfigDict(
        env_file=('.env', '.env.local'),  # Load both .env and .env.local
        env_file_encoding='utf-8',
        extra='ignore',
        case_sensitive=False
    )

    # --- Logging ---
    LOG_LEVEL: str = Field("INFO", description="Logging level")
    LOG_JSON: bool = Field(True, description="Render logs as JSON (False for console output)")

    # --- Realm ---
    REALM_CONFIG_PATH: str = Field("config/config.yaml", description="Path to the realm YAML configuration")

    # --- MCP host adapter ---
    MCP_TRANSPORT: str = Field("stdio", description="MCP transport mode (stdio, sse)")


# Global settings instance
settings = Settings()
