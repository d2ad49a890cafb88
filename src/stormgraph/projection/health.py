from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from stormgraph.config.settings import AnalysisConfig
from stormgraph.graph.graph_query import GraphQueryEngine
from stormgraph.graph.graph_schema import EdgeLabel, Node, NodeType
from stormgraph.graph.graph_store import GraphStore
from stormgraph.utils.helpers import clamp
from stormgraph.validation.results import MethodologyReport


class Level(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


def band(value: float, *, medium: float, high: float) -> Level:
    """Strictly-greater thresholds: value > high is HIGH, > medium is MEDIUM."""
    if value > high:
        return Level.HIGH
    if value > medium:
        return Level.MEDIUM
    return Level.LOW


# ---------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class ChangeImpact:
    node: Optional[Node]
    direct_impact: List[Node]
    indirect_impact: List[Node]
    total_reach: int
    risk_level: Level


@dataclass(frozen=True)
class CriticalNode:
    node: Node
    centrality: int
    criticality_level: Level


@dataclass(frozen=True)
class CircularDependencies:
    cycles: List[List[str]]
    affected_nodes: List[Node]


@dataclass(frozen=True)
class AggregateHealth:
    aggregate: Optional[Node]
    command_count: int
    event_count: int
    cohesion_score: float
    consistency_issues: List[str]
    recommendations: List[str]


@dataclass(frozen=True)
class OverallMetrics:
    node_count: int
    edge_count: int
    density: float
    connected_components: int


@dataclass(frozen=True)
class MethodologyMetrics:
    validation_score: float
    violation_count: int
    warning_count: int


@dataclass(frozen=True)
class ComplexityMetrics:
    cyclic_complexity: int
    avg_degree: float
    bottleneck_count: int


@dataclass(frozen=True)
class GraphHealthMetrics:
    overall: OverallMetrics
    methodology: MethodologyMetrics
    complexity: ComplexityMetrics
    recommendations: List[str]


@dataclass(frozen=True)
class GraphStatistics:
    total_nodes: int
    total_edges: int
    nodes_by_type: Dict[str, int]
    edges_by_label: Dict[str, int]
    commands: int
    events: int
    aggregates: int
    actors: int


# ---------------------------------------------------------------------
# Analyzer
# ---------------------------------------------------------------------


class HealthAnalyzer:
    """
    Turns raw graph measures into banded, reader-facing assessments.
    """

    def __init__(
        self,
        store: GraphStore,
        query: GraphQueryEngine,
        config: Optional[AnalysisConfig] = None,
    ) -> None:
        self.store = store
        self.query = query
        self.config = config or AnalysisConfig()

    # -------------------- Node-level --------------------

    def detect_circular_dependencies(self) -> CircularDependencies:
        cycles = self.query.detect_cycles()
        affected_ids = dict.fromkeys(node_id for cycle in cycles for node_id in cycle)
        return CircularDependencies(
            cycles=cycles,
            affected_nodes=[
                node
                for node in (self.store.get_node(i) for i in affected_ids)
                if node is not None
            ],
        )

    def get_change_impact_analysis(self, node_id: str) -> ChangeImpact:
        node = self.store.get_node(node_id)
        if node is None:
            return ChangeImpact(
                node=None,
                direct_impact=[],
                indirect_impact=[],
                total_reach=0,
                risk_level=Level.LOW,
            )

        impact = self.query.get_impact_analysis(node_id)
        return ChangeImpact(
            node=node,
            direct_impact=impact.direct_impact,
            indirect_impact=impact.indirect_impact,
            total_reach=impact.total_reach,
            risk_level=band(
                impact.total_reach,
                medium=self.config.risk_medium_reach,
                high=self.config.risk_high_reach,
            ),
        )

    def find_critical_nodes(self) -> List[CriticalNode]:
        return [
            CriticalNode(
                node=b.node,
                centrality=b.centrality,
                criticality_level=band(
                    b.centrality,
                    medium=self.config.criticality_medium,
                    high=self.config.criticality_high,
                ),
            )
            for b in self.query.find_bottlenecks()
        ]

    # -------------------- Aggregate-level --------------------

    def analyze_aggregate_health(self, aggregate_id: str) -> AggregateHealth:
        aggregate = self.store.get_node(aggregate_id)
        if aggregate is None or not aggregate.is_a(NodeType.AGGREGATE):
            return AggregateHealth(
                aggregate=None,
                command_count=0,
                event_count=0,
                cohesion_score=0.0,
                consistency_issues=[],
                recommendations=[],
            )

        commands = self.store.get_in_neighbors_by_label(aggregate_id, EdgeLabel.ON.value)

        consistency_issues: List[str] = []
        event_count = 0
        for cmd in commands:
            events = self.store.get_out_neighbors_by_label(cmd.id, EdgeLabel.THEN.value)
            event_count += len(events)
            if not events:
                consistency_issues.append(f'Command "{cmd.label}" produces no events')

        cohesion = self.cohesion_score(len(commands), event_count)

        recommendations: List[str] = []
        if len(commands) > 10:
            recommendations.append(
                "Consider splitting this aggregate - it handles too many commands"
            )
        if len(commands) < 2:
            recommendations.append(
                "This aggregate might be too small - consider merging with related aggregates"
            )
        if cohesion < 30:
            recommendations.append(
                "Low cohesion detected - ensure commands and events are related"
            )

        return AggregateHealth(
            aggregate=aggregate,
            command_count=len(commands),
            event_count=event_count,
            cohesion_score=cohesion,
            consistency_issues=consistency_issues,
            recommendations=recommendations,
        )

    @staticmethod
    def cohesion_score(commands: int, events: int) -> float:
        total = commands + events
        if total == 0:
            return 0.0
        return clamp(commands * events / total * 10, 0.0, 100.0)

    # -------------------- Graph-level --------------------

    def get_graph_health_metrics(self, methodology: MethodologyReport) -> GraphHealthMetrics:
        metrics = self.query.get_metrics()

        violations = len(methodology.violations)
        warnings = len(methodology.warnings)
        if methodology.is_valid:
            score = 100.0
        else:
            score = float(max(0, 100 - violations * 20 - warnings * 5))

        recommendations: List[str] = []
        if metrics.cycles > 0:
            recommendations.append("Resolve circular dependencies in your event flows")
        if metrics.density < 0.1:
            recommendations.append("Graph seems sparse - consider adding more relationships")
        if metrics.density > 0.8:
            recommendations.append("Graph is very dense - consider simplifying relationships")
        if violations > 0:
            recommendations.append("Fix EventStorming methodology violations")

        return GraphHealthMetrics(
            overall=OverallMetrics(
                node_count=metrics.node_count,
                edge_count=metrics.edge_count,
                density=metrics.density,
                connected_components=metrics.connected_components,
            ),
            methodology=MethodologyMetrics(
                validation_score=score,
                violation_count=violations,
                warning_count=warnings,
            ),
            complexity=ComplexityMetrics(
                cyclic_complexity=metrics.cycles,
                avg_degree=metrics.avg_degree,
                bottleneck_count=len(metrics.bottlenecks),
            ),
            recommendations=recommendations,
        )

    def get_statistics(self) -> GraphStatistics:
        nodes = self.store.get_nodes()
        edges = self.store.get_edges()
        by_type = Counter(node.type for node in nodes)

        return GraphStatistics(
            total_nodes=len(nodes),
            total_edges=len(edges),
            nodes_by_type=dict(by_type),
            edges_by_label=dict(Counter(edge.label for edge in edges)),
            commands=by_type.get(NodeType.COMMAND.value, 0),
            events=by_type.get(NodeType.EVENT.value, 0),
            aggregates=by_type.get(NodeType.AGGREGATE.value, 0),
            actors=by_type.get(NodeType.ACTOR.value, 0),
        )
