"""
Blob storage API endpoints.
"""

import logging
from typing import Dict, Optional

from azure.core.exceptions import ResourceNotFoundError
from fastapi import APIRouter, Body, File, Path, Query, Request, UploadFile, status
from fastapi.responses import StreamingResponse

from ..deps import BlobServiceDep
from ..errors import BlobNotFoundError, InvalidInputError
from ..schemas.blob import (
    BlobDescriptor,
    BlobListResponse,
    ContainerPropertiesResponse,
    UploadBlobResponse,
)
from ..schemas.common import ApiResponse
from ..utils.responses import ok, server_error
from ..utils.validation import require_text

router = APIRouter(prefix="/blob", tags=["blob"])
logger = logging.getLogger("blobstorageapi")


@router.post(
    "/upload",
    response_model=UploadBlobResponse,
    status_code=status.HTTP_200_OK,
)
async def upload_blob(
    blob_service: BlobServiceDep,
    file: Optional[UploadFile] = File(None, description="File to upload"),
):
    """Upload a file to the default container under its own file name."""
    if file is None or not file.filename or not file.size:
        raise InvalidInputError("No file provided.")

    # The spooled upload is handed over as a stream
    file_url = await blob_service.upload_blob(
        file.filename, file.file, content_type=file.content_type, length=file.size
    )
    return UploadBlobResponse(file_url=file_url)


@router.get("/get/{fileName}")
async def get_blob(
    blob_service: BlobServiceDep,
    file_name: str = Path(..., alias="fileName", description="Name of the blob to download"),
):
    """Stream a blob from the default container."""
    try:
        downloader = await blob_service.download_blob(file_name)
    except ResourceNotFoundError:
        raise BlobNotFoundError(file_name)

    return StreamingResponse(
        downloader.chunks(),
        media_type="application/octet-stream",
        headers={"Content-Disposition": f'attachment; filename="{file_name}"'},
    )


@router.get("/get/{container}/files", response_model=ApiResponse[BlobListResponse])
async def get_container_files(
    request: Request,
    blob_service: BlobServiceDep,
    container: str = Path(..., description="Container to list"),
):
    """List every blob in a container."""
    blobs = await blob_service.list_blobs(container)
    files = [BlobDescriptor(**blob) for blob in blobs]
    return ok(
        request,
        data=BlobListResponse(container=container, files=files, total_count=len(files)),
        message="Files listed",
    )


@router.get("/get/{container}/properties", response_model=ApiResponse[ContainerPropertiesResponse])
async def get_container_properties(
    request: Request,
    blob_service: BlobServiceDep,
    container: str = Path(..., description="Container to inspect"),
):
    properties = await blob_service.get_container_properties(container)
    return ok(request, data=ContainerPropertiesResponse(**properties), message="Container properties retrieved")


@router.delete("/delete/{fileName}", response_model=ApiResponse[str])
async def delete_blob(
    request: Request,
    blob_service: BlobServiceDep,
    file_name: str = Path(..., alias="fileName", description="Name of the blob to delete"),
):
    """Delete a blob; 404 if it does not exist."""
    deleted = await blob_service.delete_blob(file_name)
    if not deleted:
        raise BlobNotFoundError(file_name)
    return ok(request, data=file_name, message=f"Blob '{file_name}' deleted successfully.")


@router.post("/create-directory", response_model=ApiResponse[str])
async def create_directory(
    request: Request,
    blob_service: BlobServiceDep,
    directory_name: Optional[str] = Body(None, description="Directory name as a JSON string"),
):
    """Create a virtual directory by writing an empty placeholder blob inside it."""
    directory_name = require_text(directory_name, "Directory name cannot be empty.")
    placeholder = await blob_service.create_directory(directory_name)
    return ok(request, data=placeholder, message=f"Directory '{directory_name}' created successfully.")


@router.post("/create-container", response_model=ApiResponse[str])
async def create_container(
    request: Request,
    blob_service: BlobServiceDep,
    container_name: Optional[str] = Body(None, description="Container name as a JSON string"),
):
    container_name = require_text(container_name, "Container name cannot be empty.")
    created = await blob_service.create_container(container_name)
    if created:
        message = f"Container '{container_name}' created successfully."
    else:
        message = f"Container '{container_name}' already exists."
    return ok(request, data=container_name, message=message)


@router.get("/metadata/{blobName}", response_model=ApiResponse[Dict[str, str]])
async def get_blob_metadata(
    request: Request,
    blob_service: BlobServiceDep,
    blob_name: str = Path(..., alias="blobName"),
):
    """Return the metadata mapping of a blob in the default container."""
    try:
        metadata = await blob_service.get_blob_metadata(blob_name)
    except Exception as e:
        logger.error(f"Failed to get metadata for {blob_name}: {e}")
        return server_error(request, f"Error retrieving metadata: {e}")
    return ok(request, data=metadata, message="Metadata retrieved successfully.")


@router.post("/metadata/{blobName}", response_model=ApiResponse[str])
async def set_blob_metadata(
    request: Request,
    blob_service: BlobServiceDep,
    blob_name: str = Path(..., alias="blobName"),
    metadata: Dict[str, str] = Body(..., description="Metadata key/value pairs"),
):
    """Replace the metadata of a blob in the default container."""
    try:
        await blob_service.set_blob_metadata(blob_name, metadata)
    except Exception as e:
        logger.error(f"Failed to set metadata for {blob_name}: {e}")
        return server_error(request, f"Error setting metadata: {e}")
    return ok(request, data=blob_name, message="Metadata set successfully.")


@router.post("/copy", response_model=ApiResponse[str])
async def copy_blob(
    request: Request,
    blob_service: BlobServiceDep,
    source_blob_name: str = Query(..., alias="sourceBlobName"),
    destination_blob_name: str = Query(..., alias="destinationBlobName"),
):
    """
    Start a server-side copy within the default container.

    Returns the destination URL immediately; the copy finishes on the service.
    """
    try:
        destination_url = await blob_service.copy_blob(source_blob_name, destination_blob_name)
    except Exception as e:
        logger.error(f"Failed to copy {source_blob_name} -> {destination_blob_name}: {e}")
        return server_error(request, f"Error copying blob: {e}")
    return ok(request, data=destination_url, message="Blob copied successfully.")


@router.post("/snapshot/{blobName}", response_model=ApiResponse[str])
async def create_blob_snapshot(
    request: Request,
    blob_service: BlobServiceDep,
    blob_name: str = Path(..., alias="blobName"),
):
    try:
        snapshot_id = await blob_service.create_snapshot(blob_name)
    except Exception as e:
        logger.error(f"Failed to snapshot {blob_name}: {e}")
        return server_error(request, f"Error creating snapshot: {e}")
    return ok(request, data=snapshot_id, message="Snapshot created successfully.")
