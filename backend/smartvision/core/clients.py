import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

from smartvision.core.config import Settings
from smartvision.services.ocr_service import OcrPoller
from smartvision.services.storage_service import BlobStorage
from smartvision.services.vision_service import AzureVisionClient


logger = logging.getLogger(__name__)


class ServiceUnavailableError(Exception):
    """Raised when a request needs a client that failed to initialize at startup."""


@dataclass
class Clients:
    """Remote clients shared by every request; built once, never mutated per request."""

    poller: OcrPoller
    vision: Optional[AzureVisionClient] = None
    storage: Optional[BlobStorage] = None
    ocr_language: str = "en"
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def ready(self) -> bool:
        return self.vision is not None and self.storage is not None

    def require_vision(self) -> AzureVisionClient:
        if self.vision is None:
            raise ServiceUnavailableError(
                f"Computer Vision client is not available: {self.errors.get('vision', 'not initialized')}"
            )
        return self.vision

    def require_storage(self) -> BlobStorage:
        if self.storage is None:
            raise ServiceUnavailableError(
                f"Blob Storage client is not available: {self.errors.get('storage', 'not initialized')}"
            )
        return self.storage

    async def aclose(self) -> None:
        if self.vision is not None:
            await self.vision.close()
        if self.storage is not None:
            await self.storage.close()


async def build_clients(settings: Settings) -> Clients:
    """
    Create the vision and storage clients.
    A client that fails to initialize is logged and left out; the server keeps
    running and reports itself as degraded.
    """
    clients = Clients(
        poller=OcrPoller(max_attempts=settings.ocr_max_attempts, delay=settings.ocr_poll_interval),
        ocr_language=settings.ocr_language,
    )

    try:
        clients.vision = AzureVisionClient.create(
            settings.vision_endpoint, settings.vision_key, timeout=settings.vision_timeout
        )
        logger.info("Azure Computer Vision client initialized")
    except Exception as exc:
        logger.error("Failed to initialize Computer Vision client: %s", exc)
        clients.errors["vision"] = str(exc)

    storage = None
    try:
        storage = BlobStorage.from_connection_string(
            settings.blob_connection_string, settings.blob_container_name
        )
        await storage.ensure_container()
        clients.storage = storage
        logger.info("Azure Blob Storage client initialized and container ready")
    except Exception as exc:
        logger.error("Failed to initialize Blob Storage client: %s", exc)
        clients.errors["storage"] = str(exc)
        if storage is not None:
            await storage.close()

    return clients
