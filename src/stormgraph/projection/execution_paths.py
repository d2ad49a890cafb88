from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from stormgraph.graph.graph_query import GraphQueryEngine
from stormgraph.graph.graph_schema import EdgeLabel, Node, NodeType
from stormgraph.graph.graph_store import GraphStore

_ERROR_MARKERS = ("error", "failed")


class PathType(str, Enum):
    HAPPY_PATH = "HAPPY_PATH"
    ERROR_PATH = "ERROR_PATH"
    POLICY_PATH = "POLICY_PATH"


@dataclass(frozen=True)
class ExecutionPath:
    path: List[Node]
    path_type: PathType
    description: str


@dataclass(frozen=True)
class CommandExecutionPaths:
    command: Optional[Node]
    paths: List[ExecutionPath]


def classify_path(event: Node, triggers_policy: bool) -> PathType:
    """
    Error-looking event labels mark an error path, but an event that
    triggers a policy always makes it a policy path.
    """
    path_type = PathType.HAPPY_PATH
    label = event.label.lower()
    if any(marker in label for marker in _ERROR_MARKERS):
        path_type = PathType.ERROR_PATH
    if triggers_policy:
        path_type = PathType.POLICY_PATH
    return path_type


class ExecutionPathAnalyzer:
    """
    Enumerates how a command reaches each event it produces.
    """

    def __init__(self, store: GraphStore, query: GraphQueryEngine, max_length: int = 5) -> None:
        self.store = store
        self.query = query
        self.max_length = max_length

    def get_command_execution_paths(self, command_id: str) -> CommandExecutionPaths:
        command = self.store.get_node(command_id)
        if command is None or not command.is_a(NodeType.COMMAND):
            return CommandExecutionPaths(command=None, paths=[])

        paths: List[ExecutionPath] = []

        for event in self.store.get_out_neighbors_by_label(command_id, EdgeLabel.THEN.value):
            policies = self.store.get_out_neighbors_by_label(
                event.id, EdgeLabel.THEN_POLICY.value
            )
            path_type = classify_path(event, triggers_policy=bool(policies))

            description = f"{command.label} → {event.label}"
            if policies:
                description += " → Policy Actions"

            for path_ids in self.query.find_all_paths(command_id, event.id, self.max_length):
                paths.append(
                    ExecutionPath(
                        path=[self.store.get_node(i) for i in path_ids],
                        path_type=path_type,
                        description=description,
                    )
                )

        return CommandExecutionPaths(command=command, paths=paths)
