"""
Cosmos DB adapters used by the document routes.
"""

from .cosmos_db_service import CosmosDbService, get_cosmos_db_service
from .stored_procedures import BULK_INSERT_PROCEDURE

__all__ = [
    "CosmosDbService",
    "get_cosmos_db_service",
    "BULK_INSERT_PROCEDURE",
]
