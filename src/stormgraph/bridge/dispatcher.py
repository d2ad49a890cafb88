from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, Mapping, Optional

from stormgraph.bridge.operations import CONNECTED, RESPONSE, OperationType
from stormgraph.engine import EventStormingEngine
from stormgraph.utils.serialization import to_wire
from stormgraph.validation.results import ValidationResult

logger = logging.getLogger("stormgraph.dispatcher")

Handler = Callable[[Mapping[str, Any]], Dict[str, Any]]


def ok(data: Any) -> Dict[str, Any]:
    return {"success": True, "data": to_wire(data), "error": None, "warnings": None}


def from_result(result: ValidationResult, data: Any = None) -> Dict[str, Any]:
    return {
        "success": result.is_valid,
        "data": to_wire(data) if result.is_valid else None,
        "error": None if result.is_valid else list(result.errors),
        "warnings": list(result.warnings),
    }


class OperationDispatcher:
    """
    Graph-owner side of the bridge: runs wire operations against an engine.

    Every operation frame gets exactly one response frame. Handler failures
    are answered with success=false rather than left unanswered.
    """

    def __init__(self, engine: EventStormingEngine) -> None:
        self.engine = engine
        self._handlers: Dict[OperationType, Handler] = {
            OperationType.GET_GRAPH: lambda m: ok(engine.get_graph()),
            OperationType.LOAD_GRAPH: lambda m: from_result(engine.load_graph(m.get("data") or {})),
            OperationType.ADD_NODE: self._add_node,
            OperationType.UPDATE_NODE: lambda m: from_result(
                engine.update_node(m["nodeId"], m.get("data") or {})
            ),
            OperationType.DELETE_NODE: self._delete_node,
            OperationType.ADD_EDGE: lambda m: from_result(engine.add_edge(m["data"])),
            OperationType.REMOVE_EDGE: lambda m: from_result(
                engine.remove_edge(m["data"]["source"], m["data"]["target"], m["data"]["label"])
            ),
            OperationType.CREATE_COMMAND_FLOW: self._create_command_flow,
            OperationType.ADD_COMMAND_GUARDS: lambda m: from_result(
                engine.add_command_guards(m["commandId"], m.get("data") or [])
            ),
            OperationType.ADD_COMMAND_PRECONDITIONS: lambda m: from_result(
                engine.add_command_preconditions(m["commandId"], m.get("data") or [])
            ),
            OperationType.VALIDATE_GRAPH: lambda m: ok(engine.validate_graph()),
            OperationType.VALIDATE_METHODOLOGY: lambda m: ok(
                engine.validate_event_storming_methodology()
            ),
            OperationType.GET_STATISTICS: lambda m: ok(engine.get_statistics()),
            OperationType.GET_HEALTH: lambda m: ok(engine.get_graph_health_metrics()),
            OperationType.GET_PROCESS_FLOW: lambda m: ok(engine.get_process_flow(m["commandId"])),
            OperationType.GET_AGGREGATE_VIEW: lambda m: ok(
                engine.get_aggregate_view(m["aggregateId"])
            ),
            OperationType.GET_ALL_PROCESS_FLOWS: lambda m: ok(engine.get_all_process_flows()),
            OperationType.GET_ALL_AGGREGATE_VIEWS: lambda m: ok(engine.get_all_aggregate_views()),
            OperationType.GET_PROCESSES_BY_EVENT: lambda m: ok(
                engine.get_processes_by_event(m["eventId"])
            ),
            OperationType.GET_AGGREGATES_BY_ACTOR: lambda m: ok(
                engine.get_aggregates_by_actor(m["actorId"])
            ),
            OperationType.GET_NODES_BY_TYPE: lambda m: ok(engine.get_nodes_by_type(m["nodeType"])),
            OperationType.FIND_CRITICAL_NODES: lambda m: ok(engine.find_critical_nodes()),
            OperationType.DETECT_CIRCULAR_DEPENDENCIES: lambda m: ok(
                engine.detect_circular_dependencies()
            ),
            OperationType.GET_CHANGE_IMPACT: lambda m: ok(
                engine.get_change_impact_analysis(m["nodeId"])
            ),
            OperationType.GET_COMMAND_EXECUTION_PATHS: lambda m: ok(
                engine.get_command_execution_paths(m["commandId"])
            ),
            OperationType.ANALYZE_AGGREGATE_HEALTH: lambda m: ok(
                engine.analyze_aggregate_health(m["aggregateId"])
            ),
            OperationType.GET_SYSTEM_OVERVIEW: lambda m: ok(engine.get_system_overview()),
            OperationType.SUGGEST_IMPROVEMENTS: lambda m: ok(engine.suggest_improvements()),
            OperationType.EXPLAIN_NODE_CONTEXT: self._explain_node_context,
        }

    # ------------------------------------------------------------------

    def dispatch(self, raw: str) -> Optional[str]:
        """
        Decode one inbound frame and return the encoded response frame,
        or None when the frame needs no answer.
        """
        try:
            message = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.warning("dropping malformed operation frame: %s", exc)
            return None

        if not isinstance(message, Mapping):
            logger.warning("dropping non-object operation frame")
            return None
        if message.get("type") == CONNECTED:
            logger.info("bridge handshake: %s", message.get("message"))
            return None

        return json.dumps(
            {
                "type": RESPONSE,
                "requestId": message.get("requestId"),
                "data": self.handle(message),
            }
        )

    def handle(self, message: Mapping[str, Any]) -> Dict[str, Any]:
        op_name = message.get("type")
        try:
            op = OperationType(op_name)
        except ValueError:
            logger.warning("unknown operation %r", op_name)
            return self._error(f"Unknown operation: {op_name}")

        logger.debug("handling %s #%s", op.value, message.get("requestId"))
        try:
            return self._handlers[op](message)
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            logger.warning("operation %s failed: %r", op.value, exc)
            return self._error(f"Invalid {op.value} request: {exc}")

    # ------------------------------------------------------------------

    def _add_node(self, message: Mapping[str, Any]) -> Dict[str, Any]:
        data = message["data"]
        result = self.engine.add_node(data)
        node = self.engine.get_node(data.get("id")) if result.is_valid else None
        return from_result(result, node)

    def _delete_node(self, message: Mapping[str, Any]) -> Dict[str, Any]:
        node_id = message["nodeId"]
        impact = self.engine.get_change_impact_analysis(node_id)
        response = from_result(self.engine.remove_node(node_id))
        response["impact"] = to_wire(impact)
        return response

    def _create_command_flow(self, message: Mapping[str, Any]) -> Dict[str, Any]:
        data = message["data"]
        return from_result(
            self.engine.create_command_flow(
                actor_id=data["actorId"],
                actor_label=data["actorLabel"],
                command_id=data["commandId"],
                command_label=data["commandLabel"],
                aggregate_id=data["aggregateId"],
                aggregate_label=data["aggregateLabel"],
                event_id=data["eventId"],
                event_label=data["eventLabel"],
                description=data.get("description"),
            )
        )

    def _explain_node_context(self, message: Mapping[str, Any]) -> Dict[str, Any]:
        node_id = message["nodeId"]
        context = self.engine.explain_node_context(node_id)
        if context is None:
            return self._error(f"Node {node_id} not found")
        return ok(context)

    @staticmethod
    def _error(message: str) -> Dict[str, Any]:
        return {"success": False, "data": None, "error": message, "warnings": None}
