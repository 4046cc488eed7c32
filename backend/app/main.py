import logging
import time
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI

from backend.app.config import AppConfig
from backend.app.api.routes_flow import router as flow_router
from backend.app.dependencies import get_config, get_orchestrator
from backend.app.loaders.flow_loader import seed_flow_if_empty


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifecycle hooks.

    Loads the seed flow if the default flow is empty and starts its undo
    history from whatever is stored.
    """
    logger = logging.getLogger("flowscaffold.startup")
    t0 = time.perf_counter()

    orchestrator = get_orchestrator()
    seed_path = get_config().seed_flow_path
    if seed_path:
        seed_flow_if_empty(orchestrator=orchestrator, seed_path=Path(seed_path))

    status = orchestrator.initialize_history()
    logger.info(
        "[startup] history seeded snapshots=%d in %.3fs",
        status.snapshot_count,
        time.perf_counter() - t0,
    )

    yield


def create_app(config: AppConfig) -> FastAPI:
    app = FastAPI(
        title=config.app_name,
        lifespan=lifespan,
    )

    app.include_router(
        flow_router,
        prefix=f"{config.api_prefix}/flow",
        tags=["flow"],
    )

    return app


config = AppConfig()
app = create_app(config)
