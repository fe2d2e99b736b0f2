"""
Shared fixtures: in-memory stand-ins for the Azure adapters, wired into
the app through dependency overrides.
"""

import copy
import uuid
from typing import Any, Dict, List, Optional

import pytest
from azure.core.exceptions import ResourceExistsError, ResourceNotFoundError
from fastapi.testclient import TestClient

from blobstorageapi.api.deps import get_blob_service, get_cosmos_service
from blobstorageapi.app import app

ACCOUNT_URL = "https://testaccount.blob.core.windows.net"


class FakeDownloader:
    def __init__(self, content: bytes):
        self.content = content
        self.size = len(content)

    def chunks(self):
        # Two chunks so streaming is actually exercised
        middle = len(self.content) // 2
        for part in (self.content[:middle], self.content[middle:]):
            if part:
                yield part


class FakeBlobService:
    """Dictionary-backed replacement for AzureBlobStorageService."""

    def __init__(self, default_container: str = "files"):
        self.default_container = default_container
        self.containers: Dict[str, Dict[str, Dict[str, Any]]] = {default_container: {}}
        self.calls: List[str] = []
        self.uploads: List[Dict[str, Any]] = []

    def _url(self, blob_name: str, container: Optional[str] = None) -> str:
        return f"{ACCOUNT_URL}/{container or self.default_container}/{blob_name}"

    def _blob(self, blob_name: str) -> Dict[str, Any]:
        blob = self.containers[self.default_container].get(blob_name)
        if blob is None:
            raise ResourceNotFoundError("The specified blob does not exist.")
        return blob

    async def ensure_container_exists(self, container_name: Optional[str] = None) -> bool:
        self.calls.append("ensure_container_exists")
        self.containers.setdefault(container_name or self.default_container, {})
        return True

    async def upload_blob(self, blob_name, data, content_type=None, length=None):
        self.calls.append("upload_blob")
        self.uploads.append({"name": blob_name, "streamed": hasattr(data, "read"), "length": length})
        content = data.read() if hasattr(data, "read") else bytes(data)
        self.containers[self.default_container][blob_name] = {
            "content": content,
            "content_type": content_type,
            "metadata": {},
        }
        return self._url(blob_name)

    async def download_blob(self, blob_name):
        self.calls.append("download_blob")
        return FakeDownloader(self._blob(blob_name)["content"])

    async def delete_blob(self, blob_name):
        self.calls.append("delete_blob")
        return self.containers[self.default_container].pop(blob_name, None) is not None

    async def create_directory(self, directory_name):
        self.calls.append("create_directory")
        blob_name = f"{directory_name.rstrip('/')}/placeholder.txt"
        self.containers[self.default_container][blob_name] = {"content": b"", "content_type": None, "metadata": {}}
        return blob_name

    async def create_container(self, container_name, exist_ok=True):
        self.calls.append("create_container")
        if container_name in self.containers:
            if not exist_ok:
                raise ResourceExistsError("The specified container already exists.")
            return False
        self.containers[container_name] = {}
        return True

    async def list_blobs(self, container_name):
        self.calls.append("list_blobs")
        if container_name not in self.containers:
            raise ResourceNotFoundError("The specified container does not exist.")
        return [
            {
                "name": name,
                "size": len(blob["content"]),
                "content_type": blob["content_type"],
                "last_modified": None,
                "etag": f'"{uuid.uuid5(uuid.NAMESPACE_URL, name)}"',
                "metadata": dict(blob["metadata"]),
            }
            for name, blob in self.containers[container_name].items()
        ]

    async def get_container_properties(self, container_name):
        self.calls.append("get_container_properties")
        if container_name not in self.containers:
            raise ResourceNotFoundError("The specified container does not exist.")
        return {
            "name": container_name,
            "public_access": "blob",
            "lease_status": "unlocked",
            "lease_state": "available",
            "has_immutability_policy": False,
            "has_legal_hold": False,
            "metadata": {},
        }

    async def get_blob_metadata(self, blob_name):
        self.calls.append("get_blob_metadata")
        return dict(self._blob(blob_name)["metadata"])

    async def set_blob_metadata(self, blob_name, metadata):
        self.calls.append("set_blob_metadata")
        self._blob(blob_name)["metadata"] = dict(metadata)

    async def copy_blob(self, source_blob_name, destination_blob_name):
        self.calls.append("copy_blob")
        source = self._blob(source_blob_name)
        self.containers[self.default_container][destination_blob_name] = copy.deepcopy(source)
        return self._url(destination_blob_name)

    async def create_snapshot(self, blob_name):
        self.calls.append("create_snapshot")
        self._blob(blob_name)
        return "2024-01-01T00:00:00.0000000Z"

    async def get_account_information(self):
        self.calls.append("get_account_information")
        return {"sku_name": "Standard_LRS", "account_kind": "StorageV2"}


class FakeCosmosService:
    """Dictionary-backed replacement for CosmosDbService."""

    def __init__(self):
        self.databases: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.procedures: Dict[str, str] = {}
        self.executions: List[Dict[str, Any]] = []

    def _container(self, database_name, container_name):
        return self.databases[database_name][container_name]

    async def create_database(self, database_name):
        self.databases.setdefault(database_name, {})
        return {"id": database_name}

    async def delete_database(self, database_name):
        self.databases.pop(database_name)

    async def create_container(self, database_name, container_name, partition_key_path=None):
        self.databases[database_name].setdefault(container_name, {"items": {}})
        return {"id": container_name, "partition_key_path": partition_key_path or "/id"}

    async def create_item(self, database_name, container_name, item):
        self._container(database_name, container_name)["items"][item["id"]] = dict(item)
        return dict(item)

    async def read_item(self, database_name, container_name, item_id, partition_key=None):
        return self._container(database_name, container_name)["items"].get(item_id)

    async def create_stored_procedure(self, database_name, container_name, procedure_name, body):
        self.procedures[procedure_name] = body
        return {"id": procedure_name, "body": body}

    async def execute_stored_procedure(self, database_name, container_name, procedure_name, partition_key, items):
        self.executions.append({
            "database": database_name,
            "container": container_name,
            "procedure": procedure_name,
            "partition_key": partition_key,
            "items": items,
        })
        return len(items)

    async def ping(self):
        return True


@pytest.fixture
def blob_service():
    return FakeBlobService()


@pytest.fixture
def cosmos_service():
    return FakeCosmosService()


@pytest.fixture
def client(blob_service, cosmos_service):
    """Test client with both adapters replaced by in-memory fakes."""
    app.dependency_overrides[get_blob_service] = lambda: blob_service
    app.dependency_overrides[get_cosmos_service] = lambda: cosmos_service
    # Unhandled errors must reach the 500 handler instead of the test
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()
