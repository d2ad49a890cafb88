"""
EventStorming engine.

The single entry point that owns one model graph and exposes every
mutation, query, validation, and analysis over it. Mutations validate
before they commit and report the outcome as a ValidationResult; the
graph is left untouched by any rejected mutation.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from stormgraph.config.settings import StormgraphConfig
from stormgraph.graph.graph_builder import GraphBuilder, SnapshotParseError
from stormgraph.graph.graph_query import GraphQueryEngine
from stormgraph.graph.graph_schema import Edge, EdgeLabel, Node, NodeType
from stormgraph.graph.graph_store import GraphStore
from stormgraph.projection import insights
from stormgraph.projection.execution_paths import (
    CommandExecutionPaths,
    ExecutionPathAnalyzer,
)
from stormgraph.projection.health import (
    AggregateHealth,
    ChangeImpact,
    CircularDependencies,
    CriticalNode,
    GraphHealthMetrics,
    GraphStatistics,
    HealthAnalyzer,
)
from stormgraph.projection.process_flow import (
    AggregateView,
    ProcessFlow,
    ProcessProjector,
)
from stormgraph.validation.methodology import MethodologyValidator
from stormgraph.validation.results import MethodologyReport, ValidationResult
from stormgraph.validation.validator import StructuralValidator

logger = logging.getLogger("stormgraph.engine")

NodeInput = Union[Node, Mapping[str, Any]]
EdgeInput = Union[Edge, Mapping[str, Any]]

# Fields accepted by update_node_extended_fields.
EXTENDED_FIELDS = (
    "businessContext",
    "assertion",
    "coreCommand",
    "shellCommand",
    "hydrationFunction",
    "outcomeAssertions",
    "exampleState",
    "domainModel",
)


def _as_node(node: NodeInput) -> Node:
    return node if isinstance(node, Node) else Node.from_dict(node)


def _as_edge(edge: EdgeInput) -> Edge:
    return edge if isinstance(edge, Edge) else Edge.from_dict(edge)


def _element(node_id: str, label: str, node_type: NodeType, description: Optional[str]) -> Node:
    attributes = {"description": description} if description is not None else {}
    return Node.create(node_id, label, node_type, attributes)


class EventStormingEngine:
    """
    Facade over the store, validators, and projections.

    Construct one per process and share it; the engine is synchronous and
    holds no locks.
    """

    def __init__(self, config: Optional[StormgraphConfig] = None) -> None:
        self.config = config or StormgraphConfig()

        self.store = GraphStore()
        self.validator = StructuralValidator(self.store, self.config.validation)
        self.query = GraphQueryEngine(self.store)
        self.builder = GraphBuilder(self.store, self.validator)
        self.methodology = MethodologyValidator(self.store, self.query)
        self.projector = ProcessProjector(self.store)
        self.paths = ExecutionPathAnalyzer(
            self.store,
            self.query,
            max_length=self.config.analysis.execution_path_max_length,
        )
        self.health = HealthAnalyzer(self.store, self.query, self.config.analysis)

    # ==================================================================
    # Mutations
    # ==================================================================

    def add_node(self, node: NodeInput) -> ValidationResult:
        node = _as_node(node)

        if self.store.has_node(node.id):
            return self._reject(f"Node with ID '{node.id}' already exists")

        result = self.validator.validate_node(node)
        if not result.is_valid:
            logger.info("rejected node %s: %s", node.id, result.errors)
            return result

        self.store.add_node(node)
        logger.debug("added node %s (%s)", node.id, node.type)
        return result

    def update_node(self, node_id: str, updates: Mapping[str, Any]) -> ValidationResult:
        current = self.store.get_node(node_id)
        if current is None:
            return self._reject(f"Node with ID '{node_id}' not found")

        merged = current.merge(updates)
        if merged.id != node_id:
            return self._reject(f"Node ID '{node_id}' cannot be changed")

        result = self.validator.validate_node(merged)
        if result.is_valid and merged.type != current.type:
            result = ValidationResult.combine(
                [result, self.validator.validate_incident_edges(merged)]
            )
        if not result.is_valid:
            logger.info("rejected update of %s: %s", node_id, result.errors)
            return result

        self.store.update_node(node_id, updates)
        logger.debug("updated node %s", node_id)
        return result

    def update_node_extended_fields(
        self,
        node_id: str,
        fields: Mapping[str, Any],
    ) -> ValidationResult:
        """
        Attach documentation and code payloads (businessContext,
        hydrationFunction, ...) to an existing node. Unknown keys are ignored.
        """
        if not self.store.has_node(node_id):
            return self._reject(f"Node with ID '{node_id}' not found")

        payload = {k: v for k, v in fields.items() if k in EXTENDED_FIELDS}
        self.store.update_node(node_id, payload)
        logger.debug("updated extended fields of %s: %s", node_id, sorted(payload))
        return ValidationResult.success()

    def remove_node(self, node_id: str) -> ValidationResult:
        if not self.store.remove_node(node_id):
            return self._reject(f"Node with ID '{node_id}' not found")
        logger.debug("removed node %s", node_id)
        return ValidationResult.success()

    def add_edge(self, edge: EdgeInput) -> ValidationResult:
        edge = _as_edge(edge)

        result = self.validator.validate_edge(edge)
        if not result.is_valid:
            logger.info("rejected edge %s: %s", edge.describe(), result.errors)
            return result

        if not self.store.add_edge(edge):
            return self._reject(f"Edge already exists: {edge.describe()}")

        logger.debug("added edge %s", edge.describe())
        return result

    def remove_edge(self, source: str, target: str, label: str) -> ValidationResult:
        edge = Edge.create(source, target, label)
        if not self.store.remove_edge(edge.source, edge.target, edge.label):
            return self._reject(f"Edge not found: {edge.describe()}")
        logger.debug("removed edge %s", edge.describe())
        return ValidationResult.success()

    # -------------------- Composite mutations --------------------

    def create_command_flow(
        self,
        actor_id: str,
        actor_label: str,
        command_id: str,
        command_label: str,
        aggregate_id: str,
        aggregate_label: str,
        event_id: str,
        event_label: str,
        description: Optional[str] = None,
    ) -> ValidationResult:
        """
        Add the canonical Actor -> Command -> Aggregate / Event slice.

        Steps are applied one by one and their results combined; a failing
        step does not roll back the steps before it.
        """
        results = [
            self.add_node(_element(actor_id, actor_label, NodeType.ACTOR, description)),
            self.add_node(_element(command_id, command_label, NodeType.COMMAND, description)),
            self.add_node(
                _element(aggregate_id, aggregate_label, NodeType.AGGREGATE, description)
            ),
            self.add_node(_element(event_id, event_label, NodeType.EVENT, description)),
            self.add_edge(Edge.create(actor_id, command_id, EdgeLabel.ISSUES)),
            self.add_edge(Edge.create(command_id, aggregate_id, EdgeLabel.ON)),
            self.add_edge(Edge.create(command_id, event_id, EdgeLabel.THEN)),
        ]
        return ValidationResult.combine(results)

    def add_command_guards(
        self,
        command_id: str,
        guards: Iterable[Mapping[str, Any]],
    ) -> ValidationResult:
        return self._attach_to_command(command_id, guards, NodeType.GUARDS, EdgeLabel.IF_GUARD)

    def add_command_preconditions(
        self,
        command_id: str,
        preconditions: Iterable[Mapping[str, Any]],
    ) -> ValidationResult:
        return self._attach_to_command(
            command_id, preconditions, NodeType.PRECONDITIONS, EdgeLabel.IF_PRECONDITIONS
        )

    def _attach_to_command(
        self,
        command_id: str,
        items: Iterable[Mapping[str, Any]],
        node_type: NodeType,
        label: EdgeLabel,
    ) -> ValidationResult:
        results: List[ValidationResult] = []
        for item in items:
            item_id = item.get("id") or ""
            results.append(
                self.add_node(
                    _element(item_id, item.get("label") or "", node_type, item.get("description"))
                )
            )
            results.append(self.add_edge(Edge.create(command_id, item_id, label)))
        return ValidationResult.combine(results)

    # -------------------- Snapshots --------------------

    def load_graph(self, snapshot: Mapping[str, Any]) -> ValidationResult:
        """
        Replace the whole graph. Invalid entries are skipped and reported
        as warnings; a snapshot of the wrong shape changes nothing.
        """
        try:
            skipped = self.builder.load(snapshot)
        except SnapshotParseError as exc:
            logger.info("rejected snapshot: %s", exc)
            return ValidationResult.failure([str(exc)])
        return ValidationResult.success(skipped + self.validator.validate_graph().warnings)

    def import_json(self, text: str) -> ValidationResult:
        return self.builder.load_json(text)

    def export_json(self, indent: int = 2) -> str:
        return self.builder.export_json(indent=indent)

    def get_graph(self) -> Dict[str, List[Dict[str, Any]]]:
        return self.builder.export()

    # ==================================================================
    # Lookups
    # ==================================================================

    def get_node(self, node_id: str) -> Optional[Node]:
        return self.store.get_node(node_id)

    def get_nodes_by_type(self, node_type: Union[str, NodeType]) -> List[Node]:
        if isinstance(node_type, NodeType):
            node_type = node_type.value
        return self.store.get_nodes_by_type(node_type)

    def get_node_edges(self, node_id: str) -> List[Edge]:
        return self.store.get_node_edges(node_id)

    def get_edges_by_label(self, label: Union[str, EdgeLabel]) -> List[Edge]:
        if isinstance(label, EdgeLabel):
            label = label.value
        return self.store.get_edges_by_label(label)

    # ==================================================================
    # Projections
    # ==================================================================

    def get_process_flow(self, command_id: str) -> Optional[ProcessFlow]:
        return self.projector.get_process_flow(command_id)

    def get_all_process_flows(self) -> List[ProcessFlow]:
        return self.projector.get_all_process_flows()

    def get_processes_by_event(self, event_id: str) -> List[ProcessFlow]:
        return self.projector.get_processes_by_event(event_id)

    def get_aggregate_view(self, aggregate_id: str) -> Optional[AggregateView]:
        return self.projector.get_aggregate_view(aggregate_id)

    def get_all_aggregate_views(self) -> List[AggregateView]:
        return self.projector.get_all_aggregate_views()

    def get_aggregates_by_actor(self, actor_id: str) -> List[AggregateView]:
        return self.projector.get_aggregates_by_actor(actor_id)

    def get_command_execution_paths(self, command_id: str) -> CommandExecutionPaths:
        return self.paths.get_command_execution_paths(command_id)

    # ==================================================================
    # Validation and analysis
    # ==================================================================

    def validate_graph(self) -> ValidationResult:
        return self.validator.validate_graph()

    def validate_event_storming_methodology(self) -> MethodologyReport:
        return self.methodology.validate()

    def detect_circular_dependencies(self) -> CircularDependencies:
        return self.health.detect_circular_dependencies()

    def get_change_impact_analysis(self, node_id: str) -> ChangeImpact:
        return self.health.get_change_impact_analysis(node_id)

    def find_critical_nodes(self) -> List[CriticalNode]:
        return self.health.find_critical_nodes()

    def analyze_aggregate_health(self, aggregate_id: str) -> AggregateHealth:
        return self.health.analyze_aggregate_health(aggregate_id)

    def get_graph_health_metrics(self) -> GraphHealthMetrics:
        return self.health.get_graph_health_metrics(self.methodology.validate())

    def get_statistics(self) -> GraphStatistics:
        return self.health.get_statistics()

    def find_all_paths(
        self,
        source: str,
        target: str,
        max_length: Optional[int] = None,
    ) -> List[List[str]]:
        if max_length is None:
            max_length = self.config.analysis.default_max_path_length
        return self.query.find_all_paths(source, target, max_length)

    # -------------------- Insights --------------------

    def get_system_overview(self) -> insights.SystemOverview:
        methodology = self.methodology.validate()
        return insights.build_system_overview(
            statistics=self.health.get_statistics(),
            health=self.health.get_graph_health_metrics(methodology),
            critical=self.health.find_critical_nodes(),
            cycles=self.health.detect_circular_dependencies(),
            methodology=methodology,
            top=self.config.analysis.top_critical_nodes,
        )

    def suggest_improvements(self) -> insights.ImprovementReport:
        methodology = self.methodology.validate()
        return insights.suggest_improvements(
            methodology,
            self.health.get_graph_health_metrics(methodology),
            self.health.find_critical_nodes(),
        )

    def explain_node_context(self, node_id: str) -> Optional[insights.NodeContext]:
        return insights.explain_node_context(
            self.store,
            node_id,
            self.health.get_change_impact_analysis(node_id),
        )

    # ------------------------------------------------------------------

    @staticmethod
    def _reject(message: str) -> ValidationResult:
        logger.info("rejected mutation: %s", message)
        return ValidationResult.failure([message])
