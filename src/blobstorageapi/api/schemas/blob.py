"""
Blob storage request/response schemas.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class UploadBlobResponse(BaseModel):
    """Response for `POST /blob/upload`."""

    model_config = ConfigDict(populate_by_name=True)

    file_url: str = Field(..., alias="FileUrl", description="URL of the uploaded blob")


class BlobDescriptor(BaseModel):
    """One entry of a container listing."""

    name: str
    size: Optional[int] = None
    content_type: Optional[str] = None
    last_modified: Optional[datetime] = None
    etag: Optional[str] = None
    metadata: Dict[str, str] = Field(default_factory=dict)


class BlobListResponse(BaseModel):
    container: str
    files: List[BlobDescriptor]
    total_count: int


class ContainerPropertiesResponse(BaseModel):
    name: str
    last_modified: Optional[datetime] = None
    etag: Optional[str] = None
    public_access: Optional[str] = None
    lease_status: Optional[str] = None
    lease_state: Optional[str] = None
    lease_duration: Optional[str] = None
    has_immutability_policy: Optional[bool] = None
    has_legal_hold: Optional[bool] = None
    metadata: Dict[str, str] = Field(default_factory=dict)
