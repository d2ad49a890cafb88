from fastapi import FastAPI
from contextlib import asynccontextmanager

from backend.app.config import AppConfig
from backend.app.api.routes_graph import router as graph_router
from backend.app.api.routes_analysis import router as analysis_router
from backend.app.api.routes_bridge import router as bridge_router
from backend.app.dependencies import (
    get_engine,
    get_bridge_service,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifecycle hooks.

    The engine (and its startup snapshot) and the bridge are built once
    at startup; renderer channels still attached at shutdown are dropped
    so their pending requests fail instead of hanging.
    """
    # Force initialization
    get_engine()
    service = get_bridge_service()

    yield

    for channel_id in service.status().channels:
        service.bridge.disconnect(channel_id)


def create_app(config: AppConfig) -> FastAPI:
    app = FastAPI(
        title=config.app_name,
        lifespan=lifespan,
    )

    app.include_router(
        graph_router,
        prefix=f"{config.api_prefix}/graph",
        tags=["graph"],
    )

    app.include_router(
        analysis_router,
        prefix=f"{config.api_prefix}/analysis",
        tags=["analysis"],
    )

    app.include_router(
        bridge_router,
        prefix=f"{config.api_prefix}/bridge",
        tags=["bridge"],
    )

    return app


config = AppConfig()
app = create_app(config)
