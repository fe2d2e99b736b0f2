"""
Azure Key Vault as a source for the storage and Cosmos DB credentials.

When ``AZURE_KEY_VAULT_NAME`` is set, the account connection strings are
read from the vault at settings load time and copied into the process
environment, where the pydantic settings classes pick them up. Values
already present in the environment are never replaced.
"""
import os
import logging
from typing import Dict, List, MutableMapping, Optional

from azure.core.credentials import TokenCredential
from azure.core.exceptions import AzureError
from azure.identity import DefaultAzureCredential, ManagedIdentityCredential
from azure.keyvault.secrets import SecretClient

logger = logging.getLogger("blobstorageapi")

# Key Vault secret name -> environment variable read by core.config
SECRET_ENV_VARS: Dict[str, str] = {
    "AZURE-BLOB-CONNECTION-STRING": "AZURE_BLOB_CONNECTION_STRING",
    "AZURE-BLOB-ACCOUNT-NAME": "AZURE_BLOB_ACCOUNT_NAME",
    "COSMOS-CONNECTION-STRING": "COSMOS_CONNECTION_STRING",
}


def _env_var_for(secret_name: str) -> str:
    return SECRET_ENV_VARS.get(secret_name, secret_name.replace("-", "_").upper())


def _build_credential() -> Optional[TokenCredential]:
    """Managed Identity on App Service, DefaultAzureCredential everywhere else."""
    try:
        credential = ManagedIdentityCredential()
        logger.info("Using Managed Identity for Key Vault authentication")
        return credential
    except Exception as e:
        logger.debug(f"Managed Identity not available: {e}, trying DefaultAzureCredential")

    try:
        credential = DefaultAzureCredential()
        logger.info("Using DefaultAzureCredential for Key Vault authentication")
        return credential
    except Exception as e:
        logger.warning(f"Failed to initialize Azure credentials for Key Vault: {e}")
        return None


class AzureKeyVaultService:
    """Reads account secrets from one vault, falling back to the environment."""

    def __init__(self, vault_name: str, client: Optional[SecretClient] = None):
        self.vault_name = vault_name
        self.vault_url = f"https://{vault_name}.vault.azure.net/"
        self._client: Optional[SecretClient] = client

    @property
    def client(self) -> Optional[SecretClient]:
        if self._client is None:
            credential = _build_credential()
            if credential is None:
                return None
            try:
                self._client = SecretClient(vault_url=self.vault_url, credential=credential)
                logger.info(f"Azure Key Vault client initialized: {self.vault_name}")
            except Exception as e:
                logger.error(f"Failed to create Key Vault client for {self.vault_name}: {e}")
                return None
        return self._client

    @property
    def is_available(self) -> bool:
        """True once a client exists; access itself is only proven by get_secret()."""
        return self.client is not None

    def get_secret(self, secret_name: str, default: Optional[str] = None) -> Optional[str]:
        """
        Read one secret.

        Falls back to the matching environment variable (see SECRET_ENV_VARS)
        when the vault is unreachable or the read fails, then to ``default``.
        """
        env_var = _env_var_for(secret_name)
        if not self.is_available:
            logger.debug(f"Key Vault unavailable, reading {env_var} from the environment")
            return os.getenv(env_var) or default

        try:
            return self.client.get_secret(secret_name).value
        except AzureError as e:
            logger.warning(f"Failed to read {secret_name} from Key Vault {self.vault_name}: {e}")
            return os.getenv(env_var) or default


_key_vault_service: Optional[AzureKeyVaultService] = None


def get_key_vault_service() -> Optional[AzureKeyVaultService]:
    """Process-wide vault reader, or None when AZURE_KEY_VAULT_NAME is unset."""
    global _key_vault_service

    if _key_vault_service is None:
        vault_name = os.getenv("AZURE_KEY_VAULT_NAME", "")
        if not vault_name:
            logger.debug("AZURE_KEY_VAULT_NAME not set, Key Vault integration disabled")
            return None

        _key_vault_service = AzureKeyVaultService(vault_name)
        if not _key_vault_service.is_available:
            logger.warning(f"Key Vault '{vault_name}' is not available. Using environment variables.")

    return _key_vault_service


def load_secrets(environ: Optional[MutableMapping[str, str]] = None) -> List[str]:
    """
    Copy vault secrets into ``environ`` (``os.environ`` by default).

    Only variables that are unset or empty are filled.

    Returns:
        Names of the environment variables that were filled from the vault
    """
    environ = os.environ if environ is None else environ
    key_vault = get_key_vault_service()
    if key_vault is None or not key_vault.is_available:
        return []

    loaded = []
    for secret_name, env_var in SECRET_ENV_VARS.items():
        if environ.get(env_var):
            continue
        value = key_vault.get_secret(secret_name)
        if value:
            environ[env_var] = value
            loaded.append(env_var)

    if loaded:
        logger.info(f"Loaded {', '.join(loaded)} from Azure Key Vault {key_vault.vault_name}")
    return loaded
