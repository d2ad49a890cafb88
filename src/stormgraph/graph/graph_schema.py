from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional


class NodeType(str, Enum):
    ACTOR = "actor"
    COMMAND = "command"
    AGGREGATE = "aggregate"
    EVENT = "event"
    VIEWMODEL = "viewmodel"
    PRECONDITIONS = "preconditions"
    GUARDS = "guards"
    BRANCHING_LOGIC = "branchinglogic"
    BOUNDARY = "boundary"


class EdgeLabel(str, Enum):
    ISSUES = "issues"
    ON = "on"
    THEN = "then"
    IF = "if"
    IF_GUARD = "if guard"
    IF_PRECONDITIONS = "if preconditions"
    THEN_POLICY = "then (policy)"
    SUPPORTS_DECISION_FOR = "supports decision for"
    MARKS_PIVOTAL = "marks pivotal"


NODE_TYPES = tuple(t.value for t in NodeType)
EDGE_LABELS = tuple(label.value for label in EdgeLabel)

# Keys owned by the node itself; everything else is extension payload.
_CORE_NODE_KEYS = ("id", "label", "type")


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


@dataclass(frozen=True)
class Node:
    """
    EventStorming element in the model graph.

    `type` tags the element kind. `attributes` carries the extension fields
    (description, businessContext, code snippets, position, dimensions,
    subtype, ...) verbatim; the engine never interprets them.
    """

    id: str
    label: str
    type: str
    attributes: Dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def create(
        id: str,
        label: str,
        type: str,
        attributes: Optional[Dict[str, Any]] = None,
    ) -> "Node":
        return Node(
            id=id,
            label=label,
            type=_plain(type),
            attributes=dict(attributes or {}),
        )

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "Node":
        attributes = {k: v for k, v in data.items() if k not in _CORE_NODE_KEYS}
        return Node(
            id=_plain(data.get("id")) or "",
            label=data.get("label") or "",
            type=_plain(data.get("type")) or "",
            attributes=attributes,
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"id": self.id, "label": self.label, "type": self.type}
        data.update(self.attributes)
        return data

    def merge(self, updates: Mapping[str, Any]) -> "Node":
        """
        Shallow-merge `updates` over this node and return the result.
        """
        merged = self.to_dict()
        merged.update({k: _plain(v) for k, v in updates.items()})
        return Node.from_dict(merged)

    def is_a(self, node_type: NodeType) -> bool:
        return self.type == node_type.value


@dataclass(frozen=True)
class Edge:
    """
    Directed, labelled relationship between two nodes.

    (source, label, target) identifies an edge; two nodes may be linked by
    several edges as long as their labels differ.
    """

    source: str
    target: str
    label: str

    @staticmethod
    def create(source: str, target: str, label: str) -> "Edge":
        return Edge(source=source, target=target, label=_plain(label))

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> "Edge":
        return Edge(
            source=data.get("source") or "",
            target=data.get("target") or "",
            label=_plain(data.get("label")) or "",
        )

    @property
    def key(self) -> str:
        return f"{self.source}|{self.label}|{self.target}"

    def to_dict(self) -> Dict[str, Any]:
        return {"source": self.source, "target": self.target, "label": self.label}

    def describe(self) -> str:
        return f"{self.source} --{self.label}--> {self.target}"
