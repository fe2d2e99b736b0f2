"""
Azure Cosmos DB service.

Maps database, container, item and stored-procedure operations onto
``azure-cosmos``. Only a missing item on read is downgraded (to ``None``);
every other fault propagates.
"""

import logging
from typing import Any, Dict, List, Optional

from azure.cosmos import CosmosClient, PartitionKey
from azure.cosmos.container import ContainerProxy
from azure.cosmos.exceptions import CosmosResourceNotFoundError

from ...storage.azure_blob_service import run_blocking
from ....core.config import CosmosDbSettings, get_settings
from ....core.exceptions import ConfigurationError

logger = logging.getLogger("blobstorageapi")


class CosmosDbService:
    """Cosmos DB (NoSQL API) service."""

    def __init__(
        self,
        settings: Optional[CosmosDbSettings] = None,
        client: Optional[CosmosClient] = None,
    ):
        self.settings = settings or get_settings().cosmos
        self._client: Optional[CosmosClient] = client

    @property
    def client(self) -> CosmosClient:
        """Get or create CosmosClient."""
        if self._client is None:
            if not self.settings.connection_string:
                raise ConfigurationError(
                    "Cosmos DB connection string is required. Set COSMOS_CONNECTION_STRING."
                )
            self._client = CosmosClient.from_connection_string(self.settings.connection_string)
            logger.info("Cosmos DB client initialized")
        return self._client

    def _container(self, database_name: str, container_name: str) -> ContainerProxy:
        return self.client.get_database_client(database_name).get_container_client(container_name)

    async def create_database(self, database_name: str) -> Dict[str, Any]:
        """Create a database unless it already exists."""
        database = await run_blocking(self.client.create_database_if_not_exists, id=database_name)
        logger.info(f"Database ready: {database_name}")
        return {"id": database.id}

    async def delete_database(self, database_name: str) -> None:
        await run_blocking(self.client.delete_database, database_name)
        logger.info(f"Deleted database: {database_name}")

    async def create_container(
        self,
        database_name: str,
        container_name: str,
        partition_key_path: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Create a container unless it already exists.

        Args:
            database_name: Parent database
            container_name: Container id
            partition_key_path: Partition key path, defaults to the configured one

        Returns:
            Container id and partition key path
        """
        path = partition_key_path or self.settings.default_partition_key_path
        database = self.client.get_database_client(database_name)
        container = await run_blocking(
            database.create_container_if_not_exists,
            id=container_name,
            partition_key=PartitionKey(path=path),
        )
        logger.info(f"Container ready: {database_name}/{container_name} (partition key {path})")
        return {"id": container.id, "partition_key_path": path}

    async def create_item(
        self, database_name: str, container_name: str, item: Dict[str, Any]
    ) -> Dict[str, Any]:
        container = self._container(database_name, container_name)
        created = await run_blocking(container.create_item, body=item)
        logger.info(f"Created item {created.get('id')} in {database_name}/{container_name}")
        return created

    async def read_item(
        self,
        database_name: str,
        container_name: str,
        item_id: str,
        partition_key: Optional[Any] = None,
    ) -> Optional[Dict[str, Any]]:
        """
        Read one item by id.

        Returns:
            The item, or None if it does not exist
        """
        container = self._container(database_name, container_name)
        try:
            return await run_blocking(
                container.read_item,
                item=item_id,
                partition_key=item_id if partition_key is None else partition_key,
            )
        except CosmosResourceNotFoundError:
            logger.info(f"Item with id {item_id} not found in {database_name}/{container_name}")
            return None

    async def create_stored_procedure(
        self,
        database_name: str,
        container_name: str,
        procedure_name: str,
        body: str,
    ) -> Dict[str, Any]:
        container = self._container(database_name, container_name)
        created = await run_blocking(
            container.scripts.create_stored_procedure,
            body={"id": procedure_name, "body": body},
        )
        logger.info(f"Created stored procedure {procedure_name} in {database_name}/{container_name}")
        return created

    async def execute_stored_procedure(
        self,
        database_name: str,
        container_name: str,
        procedure_name: str,
        partition_key: Any,
        items: List[Dict[str, Any]],
    ) -> Any:
        """
        Run a stored procedure with the item list as its single argument.

        The procedure executes inside Cosmos DB; whatever it sets as its
        response body is returned.
        """
        container = self._container(database_name, container_name)
        result = await run_blocking(
            container.scripts.execute_stored_procedure,
            sproc=procedure_name,
            partition_key=partition_key,
            params=[items],
        )
        logger.info(
            f"Stored procedure {procedure_name} executed in {database_name}/{container_name} "
            f"with {len(items)} items: {result}"
        )
        return result

    async def ping(self) -> bool:
        """Cheap connectivity check used by the readiness endpoint."""
        client = self.client
        await run_blocking(lambda: list(client.list_databases(max_item_count=1)))
        return True


_cosmos_service: Optional[CosmosDbService] = None


def get_cosmos_db_service() -> CosmosDbService:
    """Get the process-wide Cosmos DB service instance."""
    global _cosmos_service
    if _cosmos_service is None:
        _cosmos_service = CosmosDbService()
    return _cosmos_service
