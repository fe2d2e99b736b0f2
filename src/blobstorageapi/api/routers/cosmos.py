"""
Cosmos DB API endpoints.

Each route is a single call on the Cosmos DB service. Remote faults are
left to the application's error handlers.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Query, Request

from ..deps import CosmosServiceDep
from ..errors import InvalidInputError
from ..schemas.common import ApiResponse
from ..schemas.cosmos import (
    ContainerResponse,
    DatabaseResponse,
    StoredProcedureDefinition,
    StoredProcedureRequest,
)
from ..utils.responses import ok
from ..utils.validation import require_text
from ...adapters.db.cosmos.stored_procedures import BULK_INSERT_PROCEDURE

router = APIRouter(prefix="/cosmosdb", tags=["cosmosdb"])


@router.post("/createDatabase", response_model=ApiResponse[DatabaseResponse])
async def create_database(
    request: Request,
    cosmos_service: CosmosServiceDep,
    database_name: str = Query(..., alias="databaseName"),
):
    require_text(database_name, "Database name cannot be empty.")
    database = await cosmos_service.create_database(database_name)
    return ok(request, data=DatabaseResponse(**database), message=f"Database '{database_name}' is ready.")


@router.delete("/deleteDatabase", response_model=ApiResponse[str])
async def delete_database(
    request: Request,
    cosmos_service: CosmosServiceDep,
    database_name: str = Query(..., alias="databaseName"),
):
    require_text(database_name, "Database name cannot be empty.")
    await cosmos_service.delete_database(database_name)
    return ok(request, data=database_name, message=f"Database '{database_name}' deleted.")


@router.post("/createContainer", response_model=ApiResponse[ContainerResponse])
async def create_container(
    request: Request,
    cosmos_service: CosmosServiceDep,
    database_name: str = Query(..., alias="databaseName"),
    container_name: str = Query(..., alias="containerName"),
    partition_key_path: Optional[str] = Query(None, alias="partitionKeyPath"),
):
    """Create a container; the partition key path defaults to the configured one."""
    require_text(database_name, "Database name cannot be empty.")
    require_text(container_name, "Container name cannot be empty.")
    if partition_key_path is not None and not partition_key_path.startswith("/"):
        raise InvalidInputError("Partition key path must start with '/'.")

    container = await cosmos_service.create_container(database_name, container_name, partition_key_path)
    return ok(request, data=ContainerResponse(**container), message=f"Container '{container_name}' is ready.")


@router.post("/createDocument", response_model=ApiResponse[Dict[str, Any]])
async def create_document(
    request: Request,
    cosmos_service: CosmosServiceDep,
    database_name: str = Query(..., alias="databaseName"),
    container: str = Query(...),
    document: Dict[str, Any] = Body(..., description="Arbitrary JSON document; must carry an 'id'"),
):
    require_text(database_name, "Database name cannot be empty.")
    require_text(container, "Container name cannot be empty.")
    if not str(document.get("id") or "").strip():
        raise InvalidInputError("Document must have a non-empty 'id'.")

    created = await cosmos_service.create_item(database_name, container, document)
    return ok(request, data=created, message="Document created.")


@router.get("/readItem", response_model=ApiResponse[Optional[Dict[str, Any]]])
async def read_item(
    request: Request,
    cosmos_service: CosmosServiceDep,
    database_name: str = Query(..., alias="databaseName"),
    container: str = Query(...),
    item_id: str = Query(..., alias="id"),
    partition_key: Optional[str] = Query(None, alias="partitionKey", description="Defaults to the item id"),
):
    """Read one item. A missing item is a successful response with no data."""
    require_text(database_name, "Database name cannot be empty.")
    require_text(container, "Container name cannot be empty.")
    require_text(item_id, "Item id cannot be empty.")

    item = await cosmos_service.read_item(database_name, container, item_id, partition_key)
    message = "Item retrieved." if item is not None else f"Item with id {item_id} not found."
    return ok(request, data=item, message=message)


@router.post("/createStoredProcedure", response_model=ApiResponse[Dict[str, Any]])
async def create_stored_procedure(
    request: Request,
    cosmos_service: CosmosServiceDep,
    database_name: str = Query(..., alias="databaseName"),
    container_name: str = Query(..., alias="containerName"),
    procedure_name: str = Query(..., alias="procedureName"),
    definition: Optional[StoredProcedureDefinition] = Body(None),
):
    """Register a stored procedure; without a body the bulk insert script is used."""
    require_text(database_name, "Database name cannot be empty.")
    require_text(container_name, "Container name cannot be empty.")
    require_text(procedure_name, "Procedure name cannot be empty.")

    script = definition.body if definition and definition.body else BULK_INSERT_PROCEDURE
    created = await cosmos_service.create_stored_procedure(
        database_name, container_name, procedure_name, script
    )
    return ok(request, data=created, message=f"Stored procedure '{procedure_name}' created.")


@router.post("/executeStoredProcedure", response_model=ApiResponse[Any])
async def execute_stored_procedure(
    request: Request,
    cosmos_service: CosmosServiceDep,
    procedure_request: StoredProcedureRequest,
):
    result = await cosmos_service.execute_stored_procedure(
        procedure_request.database_name,
        procedure_request.container_name,
        procedure_request.procedure_name,
        procedure_request.partition_name,
        procedure_request.items,
    )
    return ok(request, data=result, message=f"Stored procedure '{procedure_request.procedure_name}' executed.")
