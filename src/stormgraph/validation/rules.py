"""
EventStorming relationship rules.

Each edge label admits a fixed set of (source type, target type) pairs.
"""

from __future__ import annotations

from typing import Dict, List, Tuple

from stormgraph.graph.graph_schema import EdgeLabel, NodeType

TypePair = Tuple[str, str]

EDGE_COMPATIBILITY: Dict[str, List[TypePair]] = {
    EdgeLabel.ISSUES.value: [(NodeType.ACTOR.value, NodeType.COMMAND.value)],
    EdgeLabel.ON.value: [(NodeType.COMMAND.value, NodeType.AGGREGATE.value)],
    EdgeLabel.THEN.value: [(NodeType.COMMAND.value, NodeType.EVENT.value)],
    EdgeLabel.IF.value: [(NodeType.EVENT.value, NodeType.BRANCHING_LOGIC.value)],
    EdgeLabel.IF_GUARD.value: [(NodeType.COMMAND.value, NodeType.GUARDS.value)],
    EdgeLabel.IF_PRECONDITIONS.value: [
        (NodeType.COMMAND.value, NodeType.PRECONDITIONS.value)
    ],
    EdgeLabel.THEN_POLICY.value: [(NodeType.EVENT.value, NodeType.COMMAND.value)],
    EdgeLabel.SUPPORTS_DECISION_FOR.value: [
        (NodeType.VIEWMODEL.value, NodeType.COMMAND.value)
    ],
    EdgeLabel.MARKS_PIVOTAL.value: [(NodeType.EVENT.value, NodeType.BOUNDARY.value)],
}


def allowed_pairs(label: str) -> List[TypePair]:
    return EDGE_COMPATIBILITY.get(label, [])


def is_compatible(label: str, source_type: str, target_type: str) -> bool:
    return (source_type, target_type) in allowed_pairs(label)


def format_pairs(pairs: List[TypePair]) -> str:
    return ", ".join(f"{source} -> {target}" for source, target in pairs)


# Short role descriptions used when explaining a node to a reader.
NODE_ROLES: Dict[str, str] = {
    NodeType.ACTOR.value: "A person, role, or system that initiates commands in the business process",
    NodeType.COMMAND.value: "An action or intention that changes the state of the system",
    NodeType.AGGREGATE.value: "A business entity that maintains state and enforces business rules",
    NodeType.EVENT.value: "A fact that occurred in the system, typically as a result of executing a command",
    NodeType.VIEWMODEL.value: "A read model that provides information needed for decision making",
    NodeType.PRECONDITIONS.value: "Conditions that must be true for a command to execute successfully",
    NodeType.GUARDS.value: "Business rules that determine whether a command should be allowed to execute",
    NodeType.BRANCHING_LOGIC.value: "Conditional logic that determines whether a specific event emits",
    NodeType.BOUNDARY.value: "A timeline marker separating phases of the process at a pivotal event",
}
