"""
Configuration management for the Blob Storage API.

This module provides centralized configuration using Pydantic Settings
for environment-based configuration management.
"""

from typing import List, Optional

import os
from pathlib import Path

from pydantic import Field, validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AzureBlobSettings(BaseSettings):
    """Azure Blob Storage configuration settings."""

    model_config = SettingsConfigDict(env_prefix="AZURE_BLOB_")

    auth_mode: str = Field(
        default="connection_string",
        description="How the client authenticates: connection_string or managed_identity",
    )
    connection_string: str = Field(default="", description="Azure Storage Connection String")
    account_name: str = Field(default="", description="Azure Storage Account Name (managed identity mode)")
    account_url: str = Field(default="", description="Explicit blob endpoint URL (overrides account_name)")
    container_name: str = Field(default="files", description="Default blob container name")
    auto_create_container: bool = Field(
        default=True, description="Create the default container on upload if it does not exist"
    )
    public_access: str = Field(default="blob", description="Access level for auto-created containers")
    directory_placeholder: str = Field(
        default="placeholder.txt", description="Blob name written inside a simulated directory"
    )

    @validator("auth_mode")
    def validate_auth_mode(cls, v: str) -> str:
        """Validate authentication mode."""
        valid_modes = ["connection_string", "managed_identity"]
        if v.lower() not in valid_modes:
            raise ValueError(f"Auth mode must be one of: {valid_modes}")
        return v.lower()

    @validator("connection_string")
    def validate_connection_string(cls, v: str) -> str:
        """Validate Azure Storage connection string."""
        if v and not v.startswith(("DefaultEndpointsProtocol=", "UseDevelopmentStorage=true")):
            raise ValueError("Invalid Azure Storage connection string format")
        return v

    @validator("public_access")
    def validate_public_access(cls, v: str) -> str:
        """Validate container public access level."""
        valid_levels = ["blob", "container", "none"]
        if v.lower() not in valid_levels:
            raise ValueError(f"Public access must be one of: {valid_levels}")
        return v.lower()

    @property
    def endpoint_url(self) -> str:
        """Blob endpoint used by the managed identity strategy."""
        if self.account_url:
            return self.account_url.rstrip("/")
        return f"https://{self.account_name}.blob.core.windows.net"

    @property
    def is_configured(self) -> bool:
        if self.auth_mode == "managed_identity":
            return bool(self.account_url or self.account_name)
        return bool(self.connection_string)


class CosmosDbSettings(BaseSettings):
    """Azure Cosmos DB configuration settings."""

    model_config = SettingsConfigDict(env_prefix="COSMOS_")

    connection_string: str = Field(default="", description="Cosmos DB account connection string")
    default_partition_key_path: str = Field(
        default="/id", description="Partition key path for containers created without one"
    )

    @validator("connection_string")
    def validate_connection_string(cls, v: str) -> str:
        """Validate Cosmos DB connection string format."""
        if v and not v.startswith("AccountEndpoint="):
            raise ValueError("Cosmos DB connection string must start with 'AccountEndpoint='")
        return v

    @validator("default_partition_key_path")
    def validate_partition_key_path(cls, v: str) -> str:
        if not v.startswith("/"):
            raise ValueError("Partition key path must start with '/'")
        return v


class CORSSettings(BaseSettings):
    """CORS configuration settings."""

    model_config = SettingsConfigDict(env_prefix="CORS_")

    allowed_origins: List[str] = Field(
        default=["*"],
        description="Allowed CORS origins",
    )
    allowed_methods: List[str] = Field(
        default=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        description="Allowed HTTP methods",
    )
    allowed_headers: List[str] = Field(
        default=["*"], description="Allowed HTTP headers"
    )

    @validator("allowed_origins", pre=True)
    def parse_allowed_origins(cls, v):
        """Parse allowed origins from string or list."""
        if isinstance(v, str):
            # Handle JSON-like string format
            if v.startswith("[") and v.endswith("]"):
                import json

                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    return [v.strip()]
            return [v.strip()]
        return v


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = Field(default="INFO", description="Logging level")
    format: str = Field(default="json", description="Log format (json or text)")

    @validator("level")
    def validate_log_level(cls, v: str) -> str:
        """Validate logging level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @validator("format")
    def validate_log_format(cls, v: str) -> str:
        if v.lower() not in ["json", "text"]:
            raise ValueError("Log format must be 'json' or 'text'")
        return v.lower()


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Application settings
    app_name: str = Field(default="Blob Storage API", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    app_env: str = Field(default="development", description="Application environment")
    debug: bool = Field(default=False, description="Debug mode")
    port: int = Field(default=8000, description="Application port")
    host: str = Field(default="0.0.0.0", description="Application host")

    # Sub-settings
    azure_blob: AzureBlobSettings = Field(default_factory=AzureBlobSettings)
    cosmos: CosmosDbSettings = Field(default_factory=CosmosDbSettings)
    cors: CORSSettings = Field(default_factory=CORSSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    def __init__(self, **kwargs):
        super().__init__(**kwargs)

        # Pull connection secrets from Azure Key Vault when one is configured.
        # Values already present in the environment win.
        try:
            from .key_vault import load_secrets
            load_secrets()
        except Exception as e:
            import logging
            logger = logging.getLogger("blobstorageapi")
            logger.debug(f"Key Vault integration skipped (using environment variables): {e}")

        # Sub-settings are re-read so Key Vault values land in them
        if "azure_blob" not in kwargs:
            self.azure_blob = AzureBlobSettings()
        if "cosmos" not in kwargs:
            self.cosmos = CosmosDbSettings()
        if "cors" not in kwargs:
            self.cors = CORSSettings()
        if "logging" not in kwargs:
            self.logging = LoggingSettings()

    @validator("app_env")
    def validate_app_env(cls, v: str) -> str:
        """Validate application environment."""
        valid_envs = ["development", "staging", "production", "testing"]
        if v.lower() not in valid_envs:
            raise ValueError(f"App environment must be one of: {valid_envs}")
        return v.lower()

    @validator("port")
    def validate_port(cls, v: int) -> int:
        """Validate port number."""
        if not 1 <= v <= 65535:
            raise ValueError("Port must be between 1 and 65535")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"


# Global settings instance (loaded after attempting to read .env)
_settings: Optional[Settings] = None


def _load_env_file_if_available() -> None:
    """Best-effort load of .env by searching current and parent directories.

    This helps when the working directory isn't the project root
    and pydantic's env_file doesn't get resolved as expected.
    """
    from dotenv import load_dotenv

    cwd = Path(os.getcwd()).resolve()
    for parent in [cwd, *cwd.parents]:
        candidate = parent / ".env"
        if candidate.exists():
            # Do not override already-set environment variables
            load_dotenv(dotenv_path=str(candidate), override=False)
            break


def get_settings() -> Settings:
    """Get application settings instance (lazy-init with .env discovery)."""
    global _settings
    if _settings is None:
        _load_env_file_if_available()
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
