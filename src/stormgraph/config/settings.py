from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

# ---------------------------------------------------------------------
# Structural validation
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class ValidationConfig:
    """
    Controls structural node validation.

    A node id that does not match `id_pattern` is a warning, never an error.
    """

    id_pattern: str = r"^[a-z0-9\-_]+$"


# ---------------------------------------------------------------------
# Graph analysis bands
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class AnalysisConfig:
    """
    Thresholds used when banding raw graph measures into
    LOW / MEDIUM / HIGH levels and bounding path searches.
    """

    risk_high_reach: int = 10
    risk_medium_reach: int = 5
    criticality_high: int = 20
    criticality_medium: int = 10
    default_max_path_length: int = 10
    execution_path_max_length: int = 5
    top_critical_nodes: int = 5


# ---------------------------------------------------------------------
# Remote operation bridge
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class BridgeConfig:
    """
    Controls request correlation with an out-of-process graph owner.

    routing_policy:
    - first_connected: the first channel in connection order receives every
      request; later channels wait on standby.
    - reject_additional: only one channel may be connected at a time.
    """

    request_timeout: float = 5.0
    routing_policy: Literal["first_connected", "reject_additional"] = "first_connected"


# ---------------------------------------------------------------------
# Root configuration object
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class StormgraphConfig:
    """
    Root configuration object for stormgraph.

    This object is intended to be:
    - constructed explicitly
    - passed to the engine and the bridge
    - treated as immutable policy
    """

    validation: ValidationConfig = field(default_factory=ValidationConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    bridge: BridgeConfig = field(default_factory=BridgeConfig)
