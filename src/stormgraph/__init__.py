"""
stormgraph
==========

An in-memory EventStorming model graph with validated mutations,
methodology checks, process and aggregate projections, and graph analysis.

Core idea:
- Model the domain as a typed graph and let every read be a projection.

Public API:
- EventStormingEngine
- OperationBridge
- OperationDispatcher
- Node / Edge
"""

from stormgraph.config.settings import StormgraphConfig
from stormgraph.engine import EventStormingEngine
from stormgraph.graph.graph_schema import Node, Edge, NodeType, EdgeLabel
from stormgraph.validation.results import ValidationResult
from stormgraph.bridge.operation_bridge import OperationBridge
from stormgraph.bridge.dispatcher import OperationDispatcher

__all__ = [
    "StormgraphConfig",
    "EventStormingEngine",
    "Node",
    "Edge",
    "NodeType",
    "EdgeLabel",
    "ValidationResult",
    "OperationBridge",
    "OperationDispatcher",
]

__version__ = "0.1.0"
