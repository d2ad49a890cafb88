from __future__ import annotations

from enum import Enum


class OperationType(str, Enum):
    """Wire names of the operations a graph owner answers."""

    GET_GRAPH = "get-graph"
    LOAD_GRAPH = "load-graph"
    ADD_NODE = "add-node"
    UPDATE_NODE = "update-node"
    DELETE_NODE = "delete-node"
    ADD_EDGE = "add-edge"
    REMOVE_EDGE = "remove-edge"
    CREATE_COMMAND_FLOW = "create-command-flow"
    ADD_COMMAND_GUARDS = "add-command-guards"
    ADD_COMMAND_PRECONDITIONS = "add-command-preconditions"
    VALIDATE_GRAPH = "validate-graph"
    VALIDATE_METHODOLOGY = "validate-methodology"
    GET_STATISTICS = "get-statistics"
    GET_HEALTH = "get-health"
    GET_PROCESS_FLOW = "get-process-flow"
    GET_AGGREGATE_VIEW = "get-aggregate-view"
    GET_ALL_PROCESS_FLOWS = "get-all-process-flows"
    GET_ALL_AGGREGATE_VIEWS = "get-all-aggregate-views"
    GET_PROCESSES_BY_EVENT = "get-processes-by-event"
    GET_AGGREGATES_BY_ACTOR = "get-aggregates-by-actor"
    GET_NODES_BY_TYPE = "get-nodes-by-type"
    FIND_CRITICAL_NODES = "find-critical-nodes"
    DETECT_CIRCULAR_DEPENDENCIES = "detect-circular-dependencies"
    GET_CHANGE_IMPACT = "get-change-impact"
    GET_COMMAND_EXECUTION_PATHS = "get-command-execution-paths"
    ANALYZE_AGGREGATE_HEALTH = "analyze-aggregate-health"
    GET_SYSTEM_OVERVIEW = "get-system-overview"
    SUGGEST_IMPROVEMENTS = "suggest-improvements"
    EXPLAIN_NODE_CONTEXT = "explain-node-context"


OPERATION_TYPES = tuple(op.value for op in OperationType)

# Frame types that are not operations.
CONNECTED = "connected"
RESPONSE = "response"
