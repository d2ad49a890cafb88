from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

from stormgraph.graph.graph_schema import EdgeLabel, Node, NodeType
from stormgraph.graph.graph_store import GraphStore


@dataclass(frozen=True)
class ProcessFlow:
    """
    One business operation around a command:
    Actor -> Command -> Aggregate -> Events -> Branching logic / Policies.
    """

    command: Node
    actor: Optional[Node]
    aggregate: Optional[Node]
    guards: List[Node]
    preconditions: List[Node]
    events: List[Node]
    branching_logic: List[Node]
    policies_triggered: List[Node]


@dataclass(frozen=True)
class AggregateView:
    """
    Everything that happens to one aggregate: the commands acting on it,
    their flows, the events they produce, and the view models feeding them.
    """

    aggregate: Node
    processes: List[ProcessFlow]
    all_commands: List[Node]
    all_events: List[Node]
    view_models: List[Node]


def _unique(nodes: List[Node]) -> List[Node]:
    by_id: Dict[str, Node] = {}
    for node in nodes:
        by_id.setdefault(node.id, node)
    return list(by_id.values())


class ProcessProjector:
    """
    Derives process and aggregate views from the current store state.
    """

    def __init__(self, store: GraphStore) -> None:
        self.store = store

    # ------------------------------------------------------------------
    # Process flows
    # ------------------------------------------------------------------

    def get_process_flow(self, command_id: str) -> Optional[ProcessFlow]:
        command = self.store.get_node(command_id)
        if command is None or not command.is_a(NodeType.COMMAND):
            return None

        out = self.store.get_out_neighbors_by_label
        actors = self.store.get_in_neighbors_by_label(command_id, EdgeLabel.ISSUES.value)
        aggregates = out(command_id, EdgeLabel.ON.value)
        events = out(command_id, EdgeLabel.THEN.value)

        branching: List[Node] = []
        policies: List[Node] = []
        for event in events:
            branching.extend(out(event.id, EdgeLabel.IF.value))
            policies.extend(out(event.id, EdgeLabel.THEN_POLICY.value))

        return ProcessFlow(
            command=command,
            actor=actors[0] if actors else None,
            aggregate=aggregates[0] if aggregates else None,
            guards=out(command_id, EdgeLabel.IF_GUARD.value),
            preconditions=out(command_id, EdgeLabel.IF_PRECONDITIONS.value),
            events=events,
            branching_logic=_unique(branching),
            policies_triggered=_unique(policies),
        )

    def get_all_process_flows(self) -> List[ProcessFlow]:
        flows = (
            self.get_process_flow(cmd.id)
            for cmd in self.store.get_nodes_by_type(NodeType.COMMAND.value)
        )
        return [flow for flow in flows if flow is not None]

    def get_processes_by_event(self, event_id: str) -> List[ProcessFlow]:
        return [
            flow
            for flow in self.get_all_process_flows()
            if any(event.id == event_id for event in flow.events)
        ]

    # ------------------------------------------------------------------
    # Aggregate views
    # ------------------------------------------------------------------

    def get_aggregate_view(self, aggregate_id: str) -> Optional[AggregateView]:
        aggregate = self.store.get_node(aggregate_id)
        if aggregate is None or not aggregate.is_a(NodeType.AGGREGATE):
            return None

        commands = self.store.get_in_neighbors_by_label(aggregate_id, EdgeLabel.ON.value)
        processes = [
            flow
            for flow in (self.get_process_flow(cmd.id) for cmd in commands)
            if flow is not None
        ]

        view_models: List[Node] = []
        for cmd in commands:
            view_models.extend(
                self.store.get_in_neighbors_by_label(
                    cmd.id, EdgeLabel.SUPPORTS_DECISION_FOR.value
                )
            )

        return AggregateView(
            aggregate=aggregate,
            processes=processes,
            all_commands=commands,
            all_events=_unique([e for flow in processes for e in flow.events]),
            view_models=_unique(view_models),
        )

    def get_all_aggregate_views(self) -> List[AggregateView]:
        views = (
            self.get_aggregate_view(agg.id)
            for agg in self.store.get_nodes_by_type(NodeType.AGGREGATE.value)
        )
        return [view for view in views if view is not None]

    def get_aggregates_by_actor(self, actor_id: str) -> List[AggregateView]:
        return [
            view
            for view in self.get_all_aggregate_views()
            if any(
                flow.actor is not None and flow.actor.id == actor_id
                for flow in view.processes
            )
        ]
