from fastapi import APIRouter, Depends

from smartvision.core.clients import Clients
from smartvision.deps.clients import get_clients


router = APIRouter(prefix="/api", tags=["Health"])


@router.get("/test")
def server_test():
    return {"message": "Server is working!", "status": "OK"}


@router.get("/health")
def health(clients: Clients = Depends(get_clients)):
    """Reports whether the remote clients came up at startup; never calls them."""
    return {
        "status": "ok" if clients.ready else "degraded",
        "vision": clients.vision is not None,
        "storage": clients.storage is not None,
    }
