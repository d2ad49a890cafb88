from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any, Dict, List, Mapping

from stormgraph.graph.graph_schema import Node, Edge
from stormgraph.graph.graph_store import GraphStore
from stormgraph.validation.results import ValidationResult

if TYPE_CHECKING:
    from stormgraph.validation.validator import StructuralValidator

logger = logging.getLogger("stormgraph.snapshot")


class SnapshotParseError(ValueError):
    """Raised when a snapshot is not a {nodes: [...], edges: [...]} document."""


class GraphBuilder:
    """
    Bulk-loads and exports whole-graph snapshots.

    Loading replaces the store's content. Entries that would break a graph
    invariant are skipped and reported as warnings instead of being stored.
    """

    def __init__(self, store: GraphStore, validator: "StructuralValidator") -> None:
        self.store = store
        self.validator = validator

    # ------------------------------------------------------------------
    # Load
    # ------------------------------------------------------------------

    def load(self, snapshot: Mapping[str, Any]) -> List[str]:
        """
        Replace the graph with `snapshot`; returns one warning per skipped
        entry plus the advisory warnings of the entries that were kept.
        """
        nodes, edges = self._split(snapshot)

        self.store.clear()
        warnings: List[str] = []

        for raw in nodes:
            node = Node.from_dict(raw) if isinstance(raw, Mapping) else None
            if node is None:
                warnings.append(f"Skipped node entry that is not an object: {raw!r}")
                continue
            result = self.validator.validate_node(node)
            if not result.is_valid:
                warnings.append(f"Skipped node '{node.id}': {'; '.join(result.errors)}")
                continue
            if not self.store.add_node(node):
                warnings.append(f"Skipped duplicate node '{node.id}'")
                continue
            warnings.extend(result.warnings)

        for raw in edges:
            edge = Edge.from_dict(raw) if isinstance(raw, Mapping) else None
            if edge is None:
                warnings.append(f"Skipped edge entry that is not an object: {raw!r}")
                continue
            result = self.validator.validate_edge(edge)
            if not result.is_valid:
                warnings.append(f"Skipped edge {edge.describe()}: {'; '.join(result.errors)}")
                continue
            if not self.store.add_edge(edge):
                warnings.append(f"Skipped duplicate edge {edge.describe()}")
                continue
            warnings.extend(result.warnings)

        logger.info(
            "loaded snapshot nodes=%s edges=%s warnings=%s",
            self.store.node_count(),
            self.store.edge_count(),
            len(warnings),
        )
        return warnings

    def load_json(self, text: str) -> ValidationResult:
        """
        Parse and load a JSON snapshot. Parse failures come back as a
        failing ValidationResult and leave the current graph untouched.
        """
        try:
            data = json.loads(text)
            self._split(data)
        except (json.JSONDecodeError, SnapshotParseError) as exc:
            logger.info("rejected snapshot: %s", exc)
            return ValidationResult.failure([f"Failed to parse JSON: {exc}"])

        warnings = self.load(data)
        return ValidationResult.success(warnings + self.validator.validate_graph().warnings)

    @staticmethod
    def _split(snapshot: Any) -> tuple[list, list]:
        if not isinstance(snapshot, Mapping):
            raise SnapshotParseError("snapshot must be a JSON object")
        nodes = snapshot.get("nodes")
        edges = snapshot.get("edges")
        if not isinstance(nodes, list):
            raise SnapshotParseError("Invalid JSON: missing or invalid nodes array")
        if not isinstance(edges, list):
            raise SnapshotParseError("Invalid JSON: missing or invalid edges array")
        return nodes, edges

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def export(self) -> Dict[str, List[Dict[str, Any]]]:
        return {
            "nodes": [node.to_dict() for node in self.store.get_nodes()],
            "edges": [edge.to_dict() for edge in self.store.get_edges()],
        }

    def export_json(self, indent: int = 2) -> str:
        return json.dumps(self.export(), indent=indent)
