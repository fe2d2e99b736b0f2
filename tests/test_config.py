"""
Settings tests: environment binding, validation, .env discovery and
Key Vault secret loading.
"""

import os

import pytest
from pydantic import ValidationError

from blobstorageapi.core import config, key_vault
from blobstorageapi.core.config import (
    AzureBlobSettings,
    CosmosDbSettings,
    LoggingSettings,
    Settings,
    get_settings,
    reset_settings,
)

COSMOS_CONNECTION_STRING = "AccountEndpoint=https://shop.documents.azure.com:443/;AccountKey=c2VjcmV0;"


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    monkeypatch.delenv("AZURE_KEY_VAULT_NAME", raising=False)
    reset_settings()
    yield
    reset_settings()


def test_blob_settings_read_environment(monkeypatch):
    monkeypatch.setenv("AZURE_BLOB_CONTAINER_NAME", "uploads")
    monkeypatch.setenv("AZURE_BLOB_AUTH_MODE", "MANAGED_IDENTITY")
    monkeypatch.setenv("AZURE_BLOB_ACCOUNT_NAME", "acct")

    settings = AzureBlobSettings()

    assert settings.container_name == "uploads"
    assert settings.auth_mode == "managed_identity"
    assert settings.endpoint_url == "https://acct.blob.core.windows.net"
    assert settings.is_configured


def test_blob_settings_defaults(monkeypatch):
    for name in ("CONNECTION_STRING", "CONTAINER_NAME", "AUTH_MODE", "AUTO_CREATE_CONTAINER", "DIRECTORY_PLACEHOLDER"):
        monkeypatch.delenv(f"AZURE_BLOB_{name}", raising=False)

    settings = AzureBlobSettings()

    assert settings.container_name == "files"
    assert settings.auto_create_container is True
    assert settings.directory_placeholder == "placeholder.txt"
    assert not settings.is_configured


def test_account_url_overrides_account_name():
    settings = AzureBlobSettings(account_name="acct", account_url="https://custom.example.net/")
    assert settings.endpoint_url == "https://custom.example.net"


def test_invalid_blob_connection_string_rejected():
    with pytest.raises(ValidationError):
        AzureBlobSettings(connection_string="AccountName=acct;AccountKey=abc")


def test_invalid_auth_mode_rejected():
    with pytest.raises(ValidationError):
        AzureBlobSettings(auth_mode="sas_token")


def test_cosmos_settings_validation():
    assert CosmosDbSettings(connection_string=COSMOS_CONNECTION_STRING).connection_string == COSMOS_CONNECTION_STRING
    with pytest.raises(ValidationError):
        CosmosDbSettings(connection_string="https://shop.documents.azure.com")
    with pytest.raises(ValidationError):
        CosmosDbSettings(default_partition_key_path="id")


def test_log_level_is_normalised():
    assert LoggingSettings(level="debug").level == "DEBUG"
    with pytest.raises(ValidationError):
        LoggingSettings(level="verbose")


def test_port_range_checked():
    with pytest.raises(ValidationError):
        Settings(port=70000)


def test_get_settings_is_cached_until_reset():
    first = get_settings()
    assert get_settings() is first
    reset_settings()
    assert get_settings() is not first


def test_env_file_loaded_without_overriding(monkeypatch, tmp_path):
    (tmp_path / ".env").write_text(
        "AZURE_BLOB_CONTAINER_NAME=from-dotenv\nCOSMOS_DEFAULT_PARTITION_KEY_PATH=/tenantId\n"
    )
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("AZURE_BLOB_CONTAINER_NAME", "already-set")
    # Registered so the value the .env file loads is removed afterwards
    monkeypatch.setenv("COSMOS_DEFAULT_PARTITION_KEY_PATH", "")
    monkeypatch.delenv("COSMOS_DEFAULT_PARTITION_KEY_PATH")

    config._load_env_file_if_available()

    assert os.getenv("AZURE_BLOB_CONTAINER_NAME") == "already-set"
    assert os.getenv("COSMOS_DEFAULT_PARTITION_KEY_PATH") == "/tenantId"


def test_no_env_file_no_crash(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    config._load_env_file_if_available()


class FakeKeyVault:
    vault_name = "shop-vault"
    is_available = True

    def __init__(self, secrets):
        self.secrets = secrets

    def get_secret(self, name, default=None):
        return self.secrets.get(name, default)


def test_key_vault_secrets_fill_missing_settings(monkeypatch):
    # Empty values count as missing and are restored on teardown
    monkeypatch.setenv("AZURE_BLOB_CONNECTION_STRING", "")
    monkeypatch.setenv("COSMOS_CONNECTION_STRING", "")
    monkeypatch.setenv("AZURE_BLOB_ACCOUNT_NAME", "")
    vault = FakeKeyVault({
        "AZURE-BLOB-CONNECTION-STRING": "UseDevelopmentStorage=true",
        "COSMOS-CONNECTION-STRING": COSMOS_CONNECTION_STRING,
    })
    monkeypatch.setattr(key_vault, "get_key_vault_service", lambda: vault)

    settings = Settings()

    assert settings.azure_blob.connection_string == "UseDevelopmentStorage=true"
    assert settings.cosmos.connection_string == COSMOS_CONNECTION_STRING


def test_environment_wins_over_key_vault(monkeypatch):
    monkeypatch.setenv("AZURE_BLOB_CONNECTION_STRING", "DefaultEndpointsProtocol=https;AccountName=local")
    monkeypatch.setenv("COSMOS_CONNECTION_STRING", "")
    vault = FakeKeyVault({"AZURE-BLOB-CONNECTION-STRING": "UseDevelopmentStorage=true"})
    monkeypatch.setattr(key_vault, "get_key_vault_service", lambda: vault)

    settings = Settings()

    assert settings.azure_blob.connection_string == "DefaultEndpointsProtocol=https;AccountName=local"


def test_key_vault_disabled_without_vault_name(monkeypatch):
    monkeypatch.setattr(key_vault, "_key_vault_service", None)
    assert key_vault.get_key_vault_service() is None
