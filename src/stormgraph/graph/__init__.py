"""
Graph subsystem for stormgraph.

Defines the typed EventStorming graph:
- node and edge schema
- the in-memory store
- read-only graph algorithms
- snapshot load and export
"""

from stormgraph.graph.graph_schema import Node, Edge, NodeType, EdgeLabel
from stormgraph.graph.graph_store import GraphStore
from stormgraph.graph.graph_query import GraphQueryEngine
from stormgraph.graph.graph_builder import GraphBuilder

__all__ = [
    "Node",
    "Edge",
    "NodeType",
    "EdgeLabel",
    "GraphStore",
    "GraphQueryEngine",
    "GraphBuilder",
]
