"""
Configuration layer for stormgraph.

This module defines the configuration contracts that control structural
validation, analysis banding, and remote operation bridging.

Configuration in stormgraph is:
- Explicit (passed, not global)
- Typed (frozen dataclasses)
- Defaulted (every field has a safe default)
"""

from stormgraph.config.settings import (
    ValidationConfig,
    AnalysisConfig,
    BridgeConfig,
    StormgraphConfig,
)

__all__ = [
    "ValidationConfig",
    "AnalysisConfig",
    "BridgeConfig",
    "StormgraphConfig",
]
