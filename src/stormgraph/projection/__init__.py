"""
Projection layer for stormgraph.

Derived, read-only views over the graph: process flows, aggregate views,
execution paths, health assessments, and reader-facing insights. Every
projection is recomputed from the current store state on each call.
"""

from stormgraph.projection.process_flow import (
    ProcessFlow,
    AggregateView,
    ProcessProjector,
)
from stormgraph.projection.execution_paths import (
    PathType,
    ExecutionPath,
    CommandExecutionPaths,
    ExecutionPathAnalyzer,
)
from stormgraph.projection.health import (
    Level,
    ChangeImpact,
    CriticalNode,
    CircularDependencies,
    AggregateHealth,
    GraphHealthMetrics,
    GraphStatistics,
    HealthAnalyzer,
)
from stormgraph.projection.insights import (
    SystemOverview,
    ImprovementReport,
    NodeContext,
)

__all__ = [
    "ProcessFlow",
    "AggregateView",
    "ProcessProjector",
    "PathType",
    "ExecutionPath",
    "CommandExecutionPaths",
    "ExecutionPathAnalyzer",
    "Level",
    "ChangeImpact",
    "CriticalNode",
    "CircularDependencies",
    "AggregateHealth",
    "GraphHealthMetrics",
    "GraphStatistics",
    "HealthAnalyzer",
    "SystemOverview",
    "ImprovementReport",
    "NodeContext",
]
