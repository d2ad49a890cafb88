from functools import lru_cache
import logging
from pathlib import Path
import time

from stormgraph.engine import EventStormingEngine
from stormgraph.bridge.operation_bridge import OperationBridge

from backend.app.config import AppConfig
from backend.app.services.bridge_service import BridgeService
from backend.app.loaders.snapshot_loader import load_snapshot_file


@lru_cache
def get_config() -> AppConfig:
    return AppConfig()


@lru_cache
def get_engine() -> EventStormingEngine:
    logger = logging.getLogger("stormgraph.startup")
    t0 = time.perf_counter()
    config = get_config()
    engine = EventStormingEngine(config.stormgraph)
    engine.store.metadata["source"] = "backend"
    engine.store.metadata["loaded_from_snapshot"] = False

    if config.snapshot_path:
        path = Path(config.snapshot_path)
        result = load_snapshot_file(engine=engine, path=path)
        if path.exists():
            engine.store.metadata["loaded_from_snapshot"] = result.is_valid
        if not result.is_valid:
            engine.store.metadata["load_error"] = "; ".join(result.errors)
    logger.info("[startup] get_engine total %.3fs", time.perf_counter() - t0)
    return engine


@lru_cache
def get_bridge() -> OperationBridge:
    return OperationBridge(get_config().stormgraph.bridge)


@lru_cache
def get_bridge_service() -> BridgeService:
    return BridgeService(get_bridge())
