from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Dict, List, Set

import networkx as nx

from stormgraph.graph.graph_store import GraphStore
from stormgraph.graph.graph_schema import Node
from stormgraph.utils.helpers import safe_mean


@dataclass(frozen=True)
class ImpactResult:
    """
    Forward reachability from a node.

    direct_impact: one-hop out-neighbors.
    indirect_impact: everything else reachable from them.
    """

    direct_impact: List[Node]
    indirect_impact: List[Node]
    total_reach: int


@dataclass(frozen=True)
class Bottleneck:
    node: Node
    centrality: int


@dataclass(frozen=True)
class GraphMetrics:
    node_count: int
    edge_count: int
    density: float
    connected_components: int
    cycles: int
    avg_degree: float
    bottlenecks: List[Bottleneck]


class GraphQueryEngine:
    """
    Read-only algorithms over a GraphStore.

    Nothing is cached: every call walks the current store state.
    """

    def __init__(self, store: GraphStore) -> None:
        self.store = store

    # ------------------------------------------------------------------
    # Cycles
    # ------------------------------------------------------------------

    def detect_cycles(self) -> List[List[str]]:
        """
        Depth-first search with a recursion stack, restarted from every
        unvisited node.

        Each report runs from the first occurrence of the repeated node to
        the current node, then repeats the first node. The same cycle may be
        reported more than once when reached from different entry points.
        """

        cycles: List[List[str]] = []
        visited: Set[str] = set()
        on_stack: Set[str] = set()
        path: List[str] = []

        def dfs(node_id: str) -> None:
            visited.add(node_id)
            on_stack.add(node_id)
            path.append(node_id)

            for nbr in self.store.successors(node_id):
                if nbr not in visited:
                    dfs(nbr)
                elif nbr in on_stack:
                    start = path.index(nbr)
                    cycles.append(path[start:] + [nbr])

            on_stack.discard(node_id)
            path.pop()

        for node in self.store.get_nodes():
            if node.id not in visited:
                dfs(node.id)

        return cycles

    # ------------------------------------------------------------------
    # Reachability
    # ------------------------------------------------------------------

    def get_impact_analysis(self, node_id: str) -> ImpactResult:
        if not self.store.has_node(node_id):
            return ImpactResult(direct_impact=[], indirect_impact=[], total_reach=0)

        direct_ids = self.store.successors(node_id)
        reachable: Dict[str, None] = dict.fromkeys(direct_ids)

        visited: Set[str] = {node_id}
        queue = deque(direct_ids)

        while queue:
            current = queue.popleft()
            if current in visited:
                continue
            visited.add(current)
            reachable[current] = None

            for nbr in self.store.successors(current):
                if nbr not in visited:
                    queue.append(nbr)

        direct_set = set(direct_ids)
        return ImpactResult(
            direct_impact=[self.store.get_node(i) for i in direct_ids],
            indirect_impact=[
                self.store.get_node(i) for i in reachable if i not in direct_set
            ],
            total_reach=len(reachable),
        )

    # ------------------------------------------------------------------
    # Centrality
    # ------------------------------------------------------------------

    def find_bottlenecks(self) -> List[Bottleneck]:
        """
        Degree centrality (in + out), highest first; isolated nodes are
        left out.
        """

        bottlenecks: List[Bottleneck] = []
        for node in self.store.get_nodes():
            score = self.store.in_degree(node.id) + self.store.out_degree(node.id)
            if score > 0:
                bottlenecks.append(Bottleneck(node=node, centrality=score))

        return sorted(bottlenecks, key=lambda b: b.centrality, reverse=True)

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    def find_all_paths(
        self,
        source: str,
        target: str,
        max_length: int = 10,
    ) -> List[List[str]]:
        """
        Every simple path from source to target holding at most
        max_length + 1 nodes.
        """

        if not (self.store.has_node(source) and self.store.has_node(target)):
            return []

        paths: List[List[str]] = []
        on_path: Set[str] = set()

        def dfs(current: str, path: List[str]) -> None:
            if len(path) > max_length:
                return
            if current == target:
                paths.append(path + [current])
                return
            if current in on_path:
                return

            on_path.add(current)
            for nbr in self.store.successors(current):
                dfs(nbr, path + [current])
            on_path.discard(current)

        dfs(source, [])
        return paths

    # ------------------------------------------------------------------
    # Aggregate metrics
    # ------------------------------------------------------------------

    def count_connected_components(self) -> int:
        if self.store.node_count() == 0:
            return 0
        # edge direction is ignored for connectivity
        return nx.number_weakly_connected_components(self.store._graph)

    def get_metrics(self) -> GraphMetrics:
        n = self.store.node_count()
        e = self.store.edge_count()
        max_edges = n * (n - 1)

        degrees = [
            self.store.in_degree(node.id) + self.store.out_degree(node.id)
            for node in self.store.get_nodes()
        ]

        return GraphMetrics(
            node_count=n,
            edge_count=e,
            density=e / max_edges if max_edges > 0 else 0.0,
            connected_components=self.count_connected_components(),
            cycles=len(self.detect_cycles()),
            avg_degree=safe_mean(degrees),
            bottlenecks=self.find_bottlenecks(),
        )
