"""FastAPI dependency providers."""

from typing import Annotated

from fastapi import Depends

from ..adapters.db.cosmos.cosmos_db_service import CosmosDbService, get_cosmos_db_service
from ..adapters.storage.azure_blob_service import AzureBlobStorageService, get_azure_blob_service


def get_blob_service() -> AzureBlobStorageService:
    """Get blob storage service instance."""
    return get_azure_blob_service()


def get_cosmos_service() -> CosmosDbService:
    """Get Cosmos DB service instance."""
    return get_cosmos_db_service()


# Dependency annotations for FastAPI
BlobServiceDep = Annotated[AzureBlobStorageService, Depends(get_blob_service)]
CosmosServiceDep = Annotated[CosmosDbService, Depends(get_cosmos_service)]
