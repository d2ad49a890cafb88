from dataclasses import dataclass
from dynaconf import Dynaconf
from backend.app.constants import DEFAULTS

from stormgraph.config.settings import (
    ValidationConfig,
    AnalysisConfig,
    BridgeConfig,
    StormgraphConfig,
)

settings = Dynaconf(
    envvar_prefix="STORMGRAPH",
    load_dotenv=True,
    settings_files=[],
)
settings.update(DEFAULTS)


@dataclass(frozen=True)
class AppConfig:
    # ---------------- App ----------------
    app_name: str = settings.get("APP_NAME", "stormgraph-backend")
    api_prefix: str = settings.get("API_PREFIX", "")
    api_url: str = settings.get("API_URL", "http://localhost:8000")

    # ---------------- Snapshot ----------------
    snapshot_path: str = settings.get("SNAPSHOT_PATH", "")

    # ---------------- Stormgraph Policy ----------------
    stormgraph: StormgraphConfig = StormgraphConfig(
        validation=ValidationConfig(
            id_pattern=settings.get("VALIDATION_ID_PATTERN", r"^[a-z0-9\-_]+$"),
        ),
        analysis=AnalysisConfig(
            risk_high_reach=settings.get("ANALYSIS_RISK_HIGH_REACH", 10),
            risk_medium_reach=settings.get("ANALYSIS_RISK_MEDIUM_REACH", 5),
            criticality_high=settings.get("ANALYSIS_CRITICALITY_HIGH", 20),
            criticality_medium=settings.get("ANALYSIS_CRITICALITY_MEDIUM", 10),
            default_max_path_length=settings.get("ANALYSIS_MAX_PATH_LENGTH", 10),
            execution_path_max_length=settings.get("ANALYSIS_EXECUTION_PATH_MAX_LENGTH", 5),
            top_critical_nodes=settings.get("ANALYSIS_TOP_CRITICAL_NODES", 5),
        ),
        bridge=BridgeConfig(
            request_timeout=float(settings.get("BRIDGE_REQUEST_TIMEOUT", 5.0)),
            routing_policy=settings.get("BRIDGE_ROUTING_POLICY", "first_connected"),
        ),
    )
