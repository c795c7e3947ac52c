import logging

from azure.core.exceptions import ResourceExistsError
from azure.storage.blob import ContentSettings
from azure.storage.blob.aio import BlobServiceClient


logger = logging.getLogger(__name__)


class StorageServiceError(Exception):
    """Raised when blob storage cannot be configured."""


class BlobStorage:
    """Stores uploaded images in a single Azure Blob Storage container."""

    def __init__(self, service: BlobServiceClient, container_name: str):
        self._service = service
        self._container = service.get_container_client(container_name)
        self.container_name = container_name

    @classmethod
    def from_connection_string(cls, connection_string: str | None, container_name: str | None) -> "BlobStorage":
        if not connection_string or not container_name:
            raise StorageServiceError("BLOB_CONNECTION_STRING and BLOB_CONTAINER_NAME must be set")
        return cls(BlobServiceClient.from_connection_string(connection_string), container_name)

    async def ensure_container(self) -> None:
        """Create the container with public blob access unless it already exists."""
        try:
            await self._container.create_container(public_access="blob")
            logger.info("Created blob container %s", self.container_name)
        except ResourceExistsError:
            logger.debug("Blob container %s already exists", self.container_name)

    async def store(self, data: bytes, name: str, content_type: str | None = None) -> str:
        blob = self._container.get_blob_client(name)
        content_settings = ContentSettings(content_type=content_type) if content_type else None
        await blob.upload_blob(data, overwrite=True, content_settings=content_settings)
        return blob.url

    async def close(self) -> None:
        await self._service.close()
