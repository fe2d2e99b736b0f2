"""
API schemas package.
"""

from .common import ApiResponse, ErrorResponse
from .blob import (
    BlobDescriptor,
    BlobListResponse,
    ContainerPropertiesResponse,
    UploadBlobResponse,
)
from .cosmos import (
    ContainerResponse,
    DatabaseResponse,
    StoredProcedureDefinition,
    StoredProcedureRequest,
)

__all__ = [
    "ApiResponse",
    "ErrorResponse",
    "BlobDescriptor",
    "BlobListResponse",
    "ContainerPropertiesResponse",
    "UploadBlobResponse",
    "ContainerResponse",
    "DatabaseResponse",
    "StoredProcedureDefinition",
    "StoredProcedureRequest",
]
