from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from stormgraph.graph.graph_store import GraphStore
from stormgraph.projection.health import (
    ChangeImpact,
    CircularDependencies,
    CriticalNode,
    GraphHealthMetrics,
    GraphStatistics,
    Level,
)
from stormgraph.validation.methodology import CIRCULAR_DEPENDENCY, COMMAND_WITHOUT_EVENT
from stormgraph.validation.results import MethodologyReport
from stormgraph.validation.rules import NODE_ROLES


@dataclass(frozen=True)
class OverviewSummary:
    total_nodes: int
    total_edges: int
    nodes_by_type: Dict[str, int]
    health_score: float
    critical_issues: int
    warnings: int


@dataclass(frozen=True)
class SystemOverview:
    summary: OverviewSummary
    health_metrics: GraphHealthMetrics
    critical_nodes: List[CriticalNode]
    circular_dependencies: CircularDependencies
    validation_results: MethodologyReport


@dataclass(frozen=True)
class Suggestion:
    type: str
    priority: str
    issue: str
    suggestion: str


@dataclass(frozen=True)
class ImprovementReport:
    total_suggestions: int
    suggestions: List[Suggestion]


@dataclass(frozen=True)
class Connection:
    relationship: str
    direction: str
    connected_node: Optional[Dict[str, Any]]


@dataclass(frozen=True)
class ImpactSummary:
    directly_affected: int
    total_reach: int
    criticality_assessment: str


@dataclass(frozen=True)
class NodeContext:
    node: Dict[str, Any]
    role: str
    connections: List[Connection]
    impact: ImpactSummary


def build_system_overview(
    statistics: GraphStatistics,
    health: GraphHealthMetrics,
    critical: List[CriticalNode],
    cycles: CircularDependencies,
    methodology: MethodologyReport,
    top: int = 5,
) -> SystemOverview:
    return SystemOverview(
        summary=OverviewSummary(
            total_nodes=statistics.total_nodes,
            total_edges=statistics.total_edges,
            nodes_by_type=statistics.nodes_by_type,
            health_score=health.methodology.validation_score,
            critical_issues=len(methodology.violations),
            warnings=len(methodology.warnings),
        ),
        health_metrics=health,
        critical_nodes=critical[:top],
        circular_dependencies=cycles,
        validation_results=methodology,
    )


def suggest_improvements(
    methodology: MethodologyReport,
    health: GraphHealthMetrics,
    critical: List[CriticalNode],
) -> ImprovementReport:
    suggestions: List[Suggestion] = []

    for issue in methodology.violations + methodology.warnings:
        if issue.code == COMMAND_WITHOUT_EVENT:
            suggestions.append(
                Suggestion(
                    type="structural",
                    priority="high",
                    issue=issue.message,
                    suggestion="Add a 'then' edge from this command to the event it produces",
                )
            )
        elif issue.code == CIRCULAR_DEPENDENCY:
            suggestions.append(
                Suggestion(
                    type="architectural",
                    priority="critical",
                    issue=issue.message,
                    suggestion="Break the circular dependency by reviewing the business logic flow",
                )
            )

    score = health.methodology.validation_score
    if score < 70:
        suggestions.append(
            Suggestion(
                type="health",
                priority="medium",
                issue=f"Overall health score is {score:.2f}",
                suggestion="Consider simplifying complex aggregates or improving connectivity",
            )
        )

    for item in critical[:3]:
        if item.criticality_level == Level.HIGH:
            suggestions.append(
                Suggestion(
                    type="architecture",
                    priority="medium",
                    issue=f'Node "{item.node.label}" has high criticality ({item.centrality})',
                    suggestion="Consider breaking down this highly connected node or adding redundant paths",
                )
            )

    return ImprovementReport(total_suggestions=len(suggestions), suggestions=suggestions)


def explain_node_context(
    store: GraphStore,
    node_id: str,
    impact: ChangeImpact,
) -> Optional[NodeContext]:
    node = store.get_node(node_id)
    if node is None:
        return None

    connections: List[Connection] = []
    for edge in store.get_node_edges(node_id):
        outgoing = edge.source == node_id
        other = store.get_node(edge.target if outgoing else edge.source)
        connections.append(
            Connection(
                relationship=edge.label,
                direction="outgoing" if outgoing else "incoming",
                connected_node=(
                    {"id": other.id, "label": other.label, "type": other.type}
                    if other is not None
                    else None
                ),
            )
        )

    if impact.total_reach > 5:
        assessment = "high"
    elif impact.total_reach > 2:
        assessment = "medium"
    else:
        assessment = "low"

    return NodeContext(
        node={
            "id": node.id,
            "label": node.label,
            "type": node.type,
            "description": node.attributes.get("description"),
            "businessContext": node.attributes.get("businessContext"),
        },
        role=NODE_ROLES.get(node.type, "Unknown node type"),
        connections=connections,
        impact=ImpactSummary(
            directly_affected=len(impact.direct_impact),
            total_reach=impact.total_reach,
            criticality_assessment=assessment,
        ),
    )
