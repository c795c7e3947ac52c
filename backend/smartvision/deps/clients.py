from fastapi import Request

from smartvision.core.clients import Clients


def get_clients(request: Request) -> Clients:
    return request.app.state.clients
