from __future__ import annotations

import logging
import time
from pathlib import Path

from stormgraph.engine import EventStormingEngine
from stormgraph.validation.results import ValidationResult


def load_snapshot_file(*, engine: EventStormingEngine, path: Path) -> ValidationResult:
    """
    Bulk-load a {nodes, edges} JSON snapshot into the engine.

    A missing file is not an error: the engine simply starts empty.
    """
    logger = logging.getLogger("stormgraph.load_snapshot")

    if not path.exists():
        logger.info("no snapshot at %s, starting empty", path)
        return ValidationResult.success([f"Snapshot file '{path}' not found"])

    t0 = time.perf_counter()
    result = engine.import_json(path.read_text(encoding="utf-8"))
    logger.info(
        "read %s nodes=%s edges=%s valid=%s warnings=%s in %.3fs",
        path,
        engine.store.node_count(),
        engine.store.edge_count(),
        result.is_valid,
        len(result.warnings),
        time.perf_counter() - t0,
    )
    for message in result.errors:
        logger.warning("snapshot %s: %s", path, message)
    return result
