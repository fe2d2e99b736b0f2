"""
Storage adapters.

Azure Blob Storage integration used by the blob routes.
"""

from .azure_blob_service import get_azure_blob_service, AzureBlobStorageService, run_blocking

__all__ = [
    "get_azure_blob_service",
    "AzureBlobStorageService",
    "run_blocking",
]
