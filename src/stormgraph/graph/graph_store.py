from __future__ import annotations

import networkx as nx
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from stormgraph.graph.graph_schema import Node, Edge


class GraphStore:
    """
    Authoritative in-memory EventStorming graph.

    Nodes are keyed by id, edges by (source, target, label); the label is
    the multigraph key, so the same pair of nodes may be joined once per
    label. The store applies what it is given: rule checks belong to the
    validation layer and must run before any call here.
    """

    def __init__(self) -> None:
        self._graph = nx.MultiDiGraph()
        self.metadata: Dict[str, Any] = {}

    # -------------------- Nodes --------------------

    def add_node(self, node: Node) -> bool:
        if self._graph.has_node(node.id):
            return False
        self._graph.add_node(node.id, data=node)
        return True

    def has_node(self, node_id: str) -> bool:
        return self._graph.has_node(node_id)

    def get_node(self, node_id: str) -> Optional[Node]:
        if not self._graph.has_node(node_id):
            return None
        return self._graph.nodes[node_id]["data"]

    def get_nodes(self) -> List[Node]:
        return [data["data"] for _, data in self._graph.nodes(data=True)]

    def update_node(self, node_id: str, updates: Mapping[str, Any]) -> bool:
        node = self.get_node(node_id)
        if node is None:
            return False
        merged = node.merge(updates)
        if merged.id != node_id:
            return False
        self._graph.nodes[node_id]["data"] = merged
        return True

    def remove_node(self, node_id: str) -> bool:
        if not self._graph.has_node(node_id):
            return False
        # networkx drops every incident edge together with the node
        self._graph.remove_node(node_id)
        return True

    def get_nodes_by_type(self, node_type: str) -> List[Node]:
        return self.filter_nodes(lambda node: node.type == node_type)

    def filter_nodes(self, predicate: Callable[[Node], bool]) -> List[Node]:
        return [node for node in self.get_nodes() if predicate(node)]

    # -------------------- Edges --------------------

    def add_edge(self, edge: Edge) -> bool:
        if not (self._graph.has_node(edge.source) and self._graph.has_node(edge.target)):
            return False
        if self._graph.has_edge(edge.source, edge.target, key=edge.label):
            return False
        self._graph.add_edge(edge.source, edge.target, key=edge.label, data=edge)
        return True

    def has_edge(self, source: str, target: str, label: str) -> bool:
        return self._graph.has_edge(source, target, key=label)

    def remove_edge(self, source: str, target: str, label: str) -> bool:
        if not self._graph.has_edge(source, target, key=label):
            return False
        self._graph.remove_edge(source, target, key=label)
        return True

    def edges(self) -> Iterable[Edge]:
        for _, _, data in self._graph.edges(data=True):
            yield data["data"]

    def get_edges(self) -> List[Edge]:
        return list(self.edges())

    def get_edges_by_label(self, label: str) -> List[Edge]:
        return self.filter_edges(lambda edge: edge.label == label)

    def filter_edges(self, predicate: Callable[[Edge], bool]) -> List[Edge]:
        return [edge for edge in self.edges() if predicate(edge)]

    def get_node_edges(self, node_id: str) -> List[Edge]:
        if not self._graph.has_node(node_id):
            return []
        outgoing = [d["data"] for _, _, d in self._graph.out_edges(node_id, data=True)]
        incoming = [d["data"] for _, _, d in self._graph.in_edges(node_id, data=True)]
        return outgoing + incoming

    # -------------------- Traversal --------------------

    def get_out_neighbors_by_label(self, node_id: str, label: str) -> List[Node]:
        if not self._graph.has_node(node_id):
            return []
        return [
            self.get_node(target)
            for _, target, key in self._graph.out_edges(node_id, keys=True)
            if key == label
        ]

    def get_in_neighbors_by_label(self, node_id: str, label: str) -> List[Node]:
        if not self._graph.has_node(node_id):
            return []
        return [
            self.get_node(source)
            for source, _, key in self._graph.in_edges(node_id, keys=True)
            if key == label
        ]

    def successors(self, node_id: str) -> List[str]:
        if node_id not in self._graph:
            return []
        return list(self._graph.successors(node_id))

    def predecessors(self, node_id: str) -> List[str]:
        if node_id not in self._graph:
            return []
        return list(self._graph.predecessors(node_id))

    def neighbors(self, node_id: str) -> List[str]:
        """Out- and in-neighbors, each listed once."""
        if node_id not in self._graph:
            return []
        seen = dict.fromkeys(self._graph.successors(node_id))
        seen.update(dict.fromkeys(self._graph.predecessors(node_id)))
        return list(seen)

    def in_degree(self, node_id: str) -> int:
        return self._graph.in_degree(node_id)

    def out_degree(self, node_id: str) -> int:
        return self._graph.out_degree(node_id)

    # -------------------- Analytics --------------------

    def node_count(self) -> int:
        return self._graph.number_of_nodes()

    def edge_count(self) -> int:
        return self._graph.number_of_edges()

    # -------------------- Lifecycle --------------------

    def clear(self) -> None:
        self._graph.clear()

    def clone(self) -> "GraphStore":
        g = GraphStore()
        g._graph = self._graph.copy()
        g.metadata = dict(self.metadata)
        return g
