"""
Cosmos DB request/response schemas.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, validator


class StoredProcedureRequest(BaseModel):
    """Body of `POST /cosmosdb/executeStoredProcedure`."""

    model_config = ConfigDict(populate_by_name=True)

    database_name: str = Field(..., alias="databaseName", min_length=1)
    container_name: str = Field(..., alias="containerName", min_length=1)
    procedure_name: str = Field(..., alias="procedureName", min_length=1)
    partition_name: str = Field(..., alias="partitionName", min_length=1)
    items: List[Dict[str, Any]] = Field(default_factory=list, description="Passed to the procedure as its argument")

    @validator("database_name", "container_name", "procedure_name", "partition_name")
    def validate_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v


class StoredProcedureDefinition(BaseModel):
    """Optional body of `POST /cosmosdb/createStoredProcedure`."""

    body: Optional[str] = Field(None, description="JavaScript body; the bundled bulk insert script when omitted")


class DatabaseResponse(BaseModel):
    id: str


class ContainerResponse(BaseModel):
    id: str
    partition_key_path: str
