"""
Azure Blob Storage service.

Thin adapter over ``azure-storage-blob``: each method maps to one remote
call on the configured account. SDK faults are not translated; callers
decide how to report them.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Union

from azure.core.exceptions import ResourceExistsError, ResourceNotFoundError
from azure.identity import DefaultAzureCredential
from azure.storage.blob import (
    BlobClient,
    BlobServiceClient,
    ContainerClient,
    ContentSettings,
    StorageStreamDownloader,
)

from ...core.config import AzureBlobSettings, get_settings
from ...core.exceptions import ConfigurationError

logger = logging.getLogger("blobstorageapi")


async def run_blocking(func, *args, **kwargs):
    """
    Run a blocking function in an executor to avoid blocking the event loop.

    Args:
        func: The blocking function to run
        *args: Positional arguments for the function
        **kwargs: Keyword arguments for the function

    Returns:
        Result of the function call
    """
    loop = asyncio.get_event_loop()
    return await loop.run_in_executor(None, lambda: func(*args, **kwargs))


class AzureBlobStorageService:
    """Azure Blob Storage service for file operations."""

    def __init__(
        self,
        settings: Optional[AzureBlobSettings] = None,
        client: Optional[BlobServiceClient] = None,
    ):
        self.settings = settings or get_settings().azure_blob
        self._client: Optional[BlobServiceClient] = client

    @property
    def client(self) -> BlobServiceClient:
        """Get or create the BlobServiceClient for the configured auth mode."""
        if self._client is None:
            if self.settings.auth_mode == "managed_identity":
                if not (self.settings.account_url or self.settings.account_name):
                    raise ConfigurationError(
                        "Azure Blob Storage account name is required. Set AZURE_BLOB_ACCOUNT_NAME."
                    )
                self._client = BlobServiceClient(
                    account_url=self.settings.endpoint_url,
                    credential=DefaultAzureCredential(),
                )
                logger.info(f"Azure Blob Storage client initialized with managed identity: {self.settings.endpoint_url}")
            else:
                if not self.settings.connection_string:
                    raise ConfigurationError(
                        "Azure Blob Storage connection string is required. Set AZURE_BLOB_CONNECTION_STRING."
                    )
                self._client = BlobServiceClient.from_connection_string(self.settings.connection_string)
                logger.info(f"Azure Blob Storage client initialized for account: {self._client.account_name}")

        return self._client

    @property
    def default_container(self) -> str:
        return self.settings.container_name

    def _container_client(self, container_name: Optional[str] = None) -> ContainerClient:
        return self.client.get_container_client(container_name or self.settings.container_name)

    def _blob_client(self, blob_name: str) -> BlobClient:
        return self.client.get_blob_client(container=self.settings.container_name, blob=blob_name)

    def _public_access(self) -> Optional[str]:
        if self.settings.public_access == "none":
            return None
        return self.settings.public_access

    async def ensure_container_exists(self, container_name: Optional[str] = None) -> bool:
        """Create the container if missing. Returns True if it exists afterwards."""
        name = container_name or self.settings.container_name
        try:
            await run_blocking(
                self._container_client(name).create_container,
                public_access=self._public_access(),
            )
            logger.info(f"Created blob container: {name}")
        except ResourceExistsError:
            logger.debug(f"Blob container already exists: {name}")
        return True

    async def upload_blob(
        self,
        blob_name: str,
        data: Union[bytes, Any],
        content_type: Optional[str] = None,
        length: Optional[int] = None,
    ) -> str:
        """
        Upload content to the default container, overwriting any existing blob.

        Args:
            blob_name: Name of the blob inside the default container
            data: Bytes or a readable stream
            content_type: Optional MIME type stored with the blob
            length: Size in bytes when ``data`` is a stream of known length

        Returns:
            URL of the uploaded blob
        """
        if self.settings.auto_create_container:
            await self.ensure_container_exists()

        blob_client = self._blob_client(blob_name)
        kwargs: Dict[str, Any] = {"overwrite": True}
        if content_type:
            kwargs["content_settings"] = ContentSettings(content_type=content_type)
        if length is not None:
            kwargs["length"] = length

        await run_blocking(blob_client.upload_blob, data, **kwargs)
        logger.info(f"Uploaded blob: {self.settings.container_name}/{blob_name}")
        return blob_client.url

    async def download_blob(self, blob_name: str) -> StorageStreamDownloader:
        """Start a download; raises ResourceNotFoundError if the blob is absent."""
        downloader = await run_blocking(self._blob_client(blob_name).download_blob)
        logger.info(f"Downloading blob: {self.settings.container_name}/{blob_name} ({downloader.size} bytes)")
        return downloader

    async def delete_blob(self, blob_name: str) -> bool:
        """
        Delete a blob from the default container.

        Returns:
            True if the blob was deleted, False if it did not exist
        """
        try:
            # Snapshots belong to their base blob and are removed with it
            await run_blocking(self._blob_client(blob_name).delete_blob, delete_snapshots="include")
        except ResourceNotFoundError:
            logger.warning(f"Blob not found for deletion: {blob_name}")
            return False
        logger.info(f"Deleted blob: {self.settings.container_name}/{blob_name}")
        return True

    async def create_directory(self, directory_name: str) -> str:
        """
        Simulate a directory on the flat namespace with an empty placeholder blob.

        Returns:
            Name of the placeholder blob
        """
        if self.settings.auto_create_container:
            await self.ensure_container_exists()

        blob_name = f"{directory_name.rstrip('/')}/{self.settings.directory_placeholder}"
        await run_blocking(self._blob_client(blob_name).upload_blob, b"", overwrite=True)
        logger.info(f"Created directory placeholder: {self.settings.container_name}/{blob_name}")
        return blob_name

    async def create_container(self, container_name: str, exist_ok: bool = True) -> bool:
        """
        Create a container.

        Returns:
            True if created, False if it already existed and ``exist_ok`` is set
        """
        try:
            await run_blocking(self.client.create_container, container_name)
        except ResourceExistsError:
            if not exist_ok:
                raise
            logger.info(f"Blob container already exists: {container_name}")
            return False
        logger.info(f"Created blob container: {container_name}")
        return True

    async def list_blobs(self, container_name: str) -> List[Dict[str, Any]]:
        """List every blob in a container, following the service's pagination."""
        container_client = self._container_client(container_name)
        blobs = await run_blocking(lambda: list(container_client.list_blobs(include=["metadata"])))

        files = []
        for blob in blobs:
            files.append({
                "name": blob.name,
                "size": blob.size,
                "content_type": blob.content_settings.content_type if blob.content_settings else None,
                "last_modified": blob.last_modified,
                "etag": blob.etag,
                "metadata": blob.metadata or {},
            })

        logger.info(f"Listed {len(files)} blobs in container: {container_name}")
        return files

    async def get_container_properties(self, container_name: str) -> Dict[str, Any]:
        properties = await run_blocking(self._container_client(container_name).get_container_properties)
        lease = properties.lease
        return {
            "name": properties.name,
            "last_modified": properties.last_modified,
            "etag": properties.etag,
            "public_access": properties.public_access,
            "lease_status": lease.status if lease else None,
            "lease_state": lease.state if lease else None,
            "lease_duration": lease.duration if lease else None,
            "has_immutability_policy": properties.has_immutability_policy,
            "has_legal_hold": properties.has_legal_hold,
            "metadata": dict(properties.metadata or {}),
        }

    async def get_blob_metadata(self, blob_name: str) -> Dict[str, str]:
        properties = await run_blocking(self._blob_client(blob_name).get_blob_properties)
        return dict(properties.metadata or {})

    async def set_blob_metadata(self, blob_name: str, metadata: Dict[str, str]) -> None:
        """Replace the metadata of a blob in the default container."""
        await run_blocking(self._blob_client(blob_name).set_blob_metadata, metadata)
        logger.info(f"Set {len(metadata)} metadata keys on blob: {blob_name}")

    async def copy_blob(self, source_blob_name: str, destination_blob_name: str) -> str:
        """
        Start a server-side copy inside the default container.

        The copy completes asynchronously on the service; this returns as soon
        as it is accepted.

        Returns:
            URL of the destination blob
        """
        source_client = self._blob_client(source_blob_name)
        destination_client = self._blob_client(destination_blob_name)

        copy = await run_blocking(destination_client.start_copy_from_url, source_client.url)
        logger.info(
            f"Started copy {source_blob_name} -> {destination_blob_name}: "
            f"copy_id={copy.get('copy_id')}, status={copy.get('copy_status')}"
        )
        return destination_client.url

    async def create_snapshot(self, blob_name: str) -> str:
        """Create a snapshot and return its opaque token."""
        snapshot = await run_blocking(self._blob_client(blob_name).create_snapshot)
        logger.info(f"Created snapshot of blob {blob_name}: {snapshot['snapshot']}")
        return snapshot["snapshot"]

    async def get_account_information(self) -> Dict[str, Any]:
        return await run_blocking(self.client.get_account_information)


_blob_service: Optional[AzureBlobStorageService] = None


def get_azure_blob_service() -> AzureBlobStorageService:
    """Get the process-wide Azure Blob Storage service instance."""
    global _blob_service
    if _blob_service is None:
        _blob_service = AzureBlobStorageService()
    return _blob_service
