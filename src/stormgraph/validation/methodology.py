from __future__ import annotations

from typing import List

from stormgraph.graph.graph_query import GraphQueryEngine
from stormgraph.graph.graph_schema import EdgeLabel, NodeType
from stormgraph.graph.graph_store import GraphStore
from stormgraph.validation.results import MethodologyIssue, MethodologyReport

METHODOLOGY_RULE = "EventStorming Methodology"
BEST_PRACTICE_RULE = "EventStorming Best Practice"

COMMAND_WITHOUT_EVENT = "command-without-event"
EVENT_WITHOUT_COMMAND = "event-without-command"
CIRCULAR_DEPENDENCY = "circular-dependency"


class MethodologyValidator:
    """
    EventStorming methodology checks.

    Violations (error severity):
    - a command must generate at least one event

    Warnings (advisory):
    - an event should be generated by some command
    - circular dependencies between elements
    """

    def __init__(self, store: GraphStore, query: GraphQueryEngine) -> None:
        self.store = store
        self.query = query

    def validate(self) -> MethodologyReport:
        violations = self._commands_without_events()
        warnings = self._events_without_commands() + self._circular_dependencies()

        return MethodologyReport(
            is_valid=not violations,
            violations=violations,
            warnings=warnings,
            suggestions=self._suggestions(violations, warnings),
        )

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------

    def _commands_without_events(self) -> List[MethodologyIssue]:
        issues: List[MethodologyIssue] = []
        for command in self.store.get_nodes_by_type(NodeType.COMMAND.value):
            if not self.store.get_out_neighbors_by_label(command.id, EdgeLabel.THEN.value):
                issues.append(
                    MethodologyIssue(
                        code=COMMAND_WITHOUT_EVENT,
                        rule=METHODOLOGY_RULE,
                        message=f'Command "{command.label}" must generate at least one event',
                        affected_nodes=[command.id],
                    )
                )
        return issues

    def _events_without_commands(self) -> List[MethodologyIssue]:
        issues: List[MethodologyIssue] = []
        for event in self.store.get_nodes_by_type(NodeType.EVENT.value):
            if not self.store.get_in_neighbors_by_label(event.id, EdgeLabel.THEN.value):
                issues.append(
                    MethodologyIssue(
                        code=EVENT_WITHOUT_COMMAND,
                        rule=BEST_PRACTICE_RULE,
                        message=f'Event "{event.label}" is not generated by any command',
                        affected_nodes=[event.id],
                    )
                )
        return issues

    def _circular_dependencies(self) -> List[MethodologyIssue]:
        issues: List[MethodologyIssue] = []
        for cycle in self.query.detect_cycles():
            issues.append(
                MethodologyIssue(
                    code=CIRCULAR_DEPENDENCY,
                    rule=BEST_PRACTICE_RULE,
                    message=f"Circular dependency: {' -> '.join(cycle)}",
                    affected_nodes=list(dict.fromkeys(cycle)),
                )
            )
        return issues

    # ------------------------------------------------------------------
    # Suggestions
    # ------------------------------------------------------------------

    def _suggestions(
        self,
        violations: List[MethodologyIssue],
        warnings: List[MethodologyIssue],
    ) -> List[str]:
        suggestions: List[str] = []

        if violations:
            suggestions.append(
                "Focus on fixing methodology violations first - they represent structural issues"
            )
        if len(warnings) > 5:
            suggestions.append("Consider reviewing your EventStorming model for completeness")

        suggestions.append("Use impact analysis before making changes to critical nodes")
        suggestions.append("Check for circular dependencies regularly to avoid infinite loops")
        return suggestions
