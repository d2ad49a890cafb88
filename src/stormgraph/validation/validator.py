from __future__ import annotations

import re
from typing import List, Optional

from stormgraph.config.settings import ValidationConfig
from stormgraph.graph.graph_schema import (
    EDGE_LABELS,
    NODE_TYPES,
    Edge,
    EdgeLabel,
    Node,
    NodeType,
)
from stormgraph.graph.graph_store import GraphStore
from stormgraph.validation.results import ValidationResult
from stormgraph.validation.rules import allowed_pairs, format_pairs, is_compatible


class StructuralValidator:
    """
    Node, edge, and whole-graph structural checks.

    Every check returns a ValidationResult; nothing here mutates the store.
    """

    def __init__(self, store: GraphStore, config: Optional[ValidationConfig] = None) -> None:
        self.store = store
        self.config = config or ValidationConfig()
        self._id_pattern = re.compile(self.config.id_pattern)

    # ------------------------------------------------------------------
    # Nodes
    # ------------------------------------------------------------------

    def validate_node(self, node: Node) -> ValidationResult:
        errors: List[str] = []
        warnings: List[str] = []

        if not isinstance(node.id, str) or not node.id.strip():
            errors.append("Node ID cannot be empty")

        if not isinstance(node.label, str) or not node.label.strip():
            errors.append("Node label cannot be empty")

        if isinstance(node.id, str) and node.id and not self._id_pattern.match(node.id):
            warnings.append(
                f"Node ID '{node.id}' should use kebab-case format "
                "(lowercase with hyphens/underscores)"
            )

        if node.type not in NODE_TYPES:
            errors.append(
                f"Invalid node type '{node.type}'. Must be one of: {', '.join(NODE_TYPES)}"
            )

        return ValidationResult.from_messages(errors, warnings)

    # ------------------------------------------------------------------
    # Edges
    # ------------------------------------------------------------------

    def validate_edge(self, edge: Edge) -> ValidationResult:
        source = self.store.get_node(edge.source)
        if source is None:
            return ValidationResult.failure([f"Source node '{edge.source}' not found"])

        target = self.store.get_node(edge.target)
        if target is None:
            return ValidationResult.failure([f"Target node '{edge.target}' not found"])

        return self.validate_edge_types(edge, source, target)

    def validate_edge_types(self, edge: Edge, source: Node, target: Node) -> ValidationResult:
        if edge.label not in EDGE_LABELS:
            return ValidationResult.failure(
                [
                    f"Invalid edge label '{edge.label}'. "
                    f"Must be one of: {', '.join(EDGE_LABELS)}"
                ]
            )

        if not is_compatible(edge.label, source.type, target.type):
            return ValidationResult.failure(
                [
                    f"Invalid edge: {source.type} --{edge.label}--> {target.type}. "
                    f"Valid combinations for '{edge.label}': "
                    f"{format_pairs(allowed_pairs(edge.label))}"
                ]
            )

        return ValidationResult.success()

    def validate_incident_edges(self, node: Node) -> ValidationResult:
        """
        Re-check every edge touching `node` as if it carried node's type.
        Used before committing an update that changes a node's type.
        """
        errors: List[str] = []
        for edge in self.store.get_node_edges(node.id):
            source = node if edge.source == node.id else self.store.get_node(edge.source)
            target = node if edge.target == node.id else self.store.get_node(edge.target)
            errors.extend(self.validate_edge_types(edge, source, target).errors)
        return ValidationResult.from_messages(errors)

    # ------------------------------------------------------------------
    # Whole graph
    # ------------------------------------------------------------------

    def validate_graph(self) -> ValidationResult:
        errors: List[str] = []
        warnings: List[str] = []

        edges = self.store.get_edges()

        connected = {e.source for e in edges} | {e.target for e in edges}
        orphaned = [n for n in self.store.get_nodes() if n.id not in connected]
        if orphaned:
            warnings.append(
                f"Orphaned nodes found: {', '.join(n.label for n in orphaned)}"
            )

        for command in self.store.get_nodes_by_type(NodeType.COMMAND.value):
            if not self.store.get_out_neighbors_by_label(command.id, EdgeLabel.THEN.value):
                errors.append(f"Command '{command.label}' must generate at least one event")

        for event in self.store.get_nodes_by_type(NodeType.EVENT.value):
            if not self.store.get_in_neighbors_by_label(event.id, EdgeLabel.THEN.value):
                warnings.append(f"Event '{event.label}' is not generated by any command")

        return ValidationResult.from_messages(errors, warnings)
