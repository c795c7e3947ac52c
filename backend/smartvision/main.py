import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from rich.logging import RichHandler

from smartvision.core.clients import Clients, build_clients
from smartvision.core.config import Settings
from smartvision.routers import analyze, health


logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).resolve().parent / "static"


def _setup_logging(level: str) -> None:
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    list(map(root.removeHandler, root.handlers[:]))
    root.addHandler(RichHandler(rich_tracebacks=True))


def create_app(settings: Optional[Settings] = None, clients: Optional[Clients] = None) -> FastAPI:
    """
    Builds the API. Remote clients are created on startup unless ``clients``
    is given, in which case the caller owns them.
    """
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = clients is None
        app.state.clients = await build_clients(settings) if owned else clients
        if not app.state.clients.ready:
            logger.warning("Server started in degraded mode: %s", app.state.clients.errors)
        try:
            yield
        finally:
            if owned:
                await app.state.clients.aclose()

    app = FastAPI(title="SmartVision AI API", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/", include_in_schema=False)
    async def index():
        return FileResponse(STATIC_DIR / "index.html")

    app.include_router(health.router)
    app.include_router(analyze.router)
    return app


def run() -> None:
    settings = Settings.from_env()
    _setup_logging(settings.log_level)
    logger.info("SmartVision AI server running on http://%s:%s", settings.host, settings.port)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    run()
