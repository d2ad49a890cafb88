from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from backend.app.api.schemas import ValidationResponse
from backend.app.dependencies import get_engine
from stormgraph.engine import EventStormingEngine
from stormgraph.utils.serialization import to_wire

router = APIRouter()


def _not_found(kind: str, item_id: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"{kind} '{item_id}' not found")


# ---------------- Validation ----------------


@router.get("/validation", response_model=ValidationResponse)
def validate_graph(engine: EventStormingEngine = Depends(get_engine)):
    result = engine.validate_graph()
    return ValidationResponse(
        is_valid=result.is_valid,
        errors=result.errors,
        warnings=result.warnings,
    )


@router.get("/methodology")
def validate_methodology(engine: EventStormingEngine = Depends(get_engine)) -> Dict[str, Any]:
    return to_wire(engine.validate_event_storming_methodology())


# ---------------- Metrics ----------------


@router.get("/statistics")
def statistics(engine: EventStormingEngine = Depends(get_engine)) -> Dict[str, Any]:
    return to_wire(engine.get_statistics())


@router.get("/health")
def health(engine: EventStormingEngine = Depends(get_engine)) -> Dict[str, Any]:
    return to_wire(engine.get_graph_health_metrics())


@router.get("/overview")
def system_overview(engine: EventStormingEngine = Depends(get_engine)) -> Dict[str, Any]:
    return to_wire(engine.get_system_overview())


@router.get("/suggestions")
def suggest_improvements(engine: EventStormingEngine = Depends(get_engine)) -> Dict[str, Any]:
    return to_wire(engine.suggest_improvements())


@router.get("/critical-nodes")
def critical_nodes(engine: EventStormingEngine = Depends(get_engine)) -> List[Dict[str, Any]]:
    return to_wire(engine.find_critical_nodes())


@router.get("/cycles")
def circular_dependencies(engine: EventStormingEngine = Depends(get_engine)) -> Dict[str, Any]:
    return to_wire(engine.detect_circular_dependencies())


@router.get("/paths")
def find_paths(
    source: str,
    target: str,
    max_length: Optional[int] = Query(default=None, ge=1),
    engine: EventStormingEngine = Depends(get_engine),
) -> List[List[str]]:
    return engine.find_all_paths(source, target, max_length)


# ---------------- Node-centric ----------------


@router.get("/impact/{node_id}")
def change_impact(node_id: str, engine: EventStormingEngine = Depends(get_engine)) -> Dict[str, Any]:
    impact = engine.get_change_impact_analysis(node_id)
    if impact.node is None:
        raise _not_found("Node", node_id)
    return to_wire(impact)


@router.get("/nodes/{node_id}/context")
def node_context(node_id: str, engine: EventStormingEngine = Depends(get_engine)) -> Dict[str, Any]:
    context = engine.explain_node_context(node_id)
    if context is None:
        raise _not_found("Node", node_id)
    return to_wire(context)


# ---------------- Projections ----------------


@router.get("/process-flows")
def all_process_flows(engine: EventStormingEngine = Depends(get_engine)) -> List[Dict[str, Any]]:
    return to_wire(engine.get_all_process_flows())


@router.get("/process-flows/{command_id}")
def process_flow(command_id: str, engine: EventStormingEngine = Depends(get_engine)) -> Dict[str, Any]:
    flow = engine.get_process_flow(command_id)
    if flow is None:
        raise _not_found("Command", command_id)
    return to_wire(flow)


@router.get("/events/{event_id}/processes")
def processes_by_event(
    event_id: str,
    engine: EventStormingEngine = Depends(get_engine),
) -> List[Dict[str, Any]]:
    return to_wire(engine.get_processes_by_event(event_id))


@router.get("/aggregate-views")
def all_aggregate_views(engine: EventStormingEngine = Depends(get_engine)) -> List[Dict[str, Any]]:
    return to_wire(engine.get_all_aggregate_views())


@router.get("/aggregate-views/{aggregate_id}")
def aggregate_view(
    aggregate_id: str,
    engine: EventStormingEngine = Depends(get_engine),
) -> Dict[str, Any]:
    view = engine.get_aggregate_view(aggregate_id)
    if view is None:
        raise _not_found("Aggregate", aggregate_id)
    return to_wire(view)


@router.get("/actors/{actor_id}/aggregates")
def aggregates_by_actor(
    actor_id: str,
    engine: EventStormingEngine = Depends(get_engine),
) -> List[Dict[str, Any]]:
    return to_wire(engine.get_aggregates_by_actor(actor_id))


@router.get("/execution-paths/{command_id}")
def execution_paths(
    command_id: str,
    engine: EventStormingEngine = Depends(get_engine),
) -> Dict[str, Any]:
    paths = engine.get_command_execution_paths(command_id)
    if paths.command is None:
        raise _not_found("Command", command_id)
    return to_wire(paths)


@router.get("/aggregate-health/{aggregate_id}")
def aggregate_health(
    aggregate_id: str,
    engine: EventStormingEngine = Depends(get_engine),
) -> Dict[str, Any]:
    health = engine.analyze_aggregate_health(aggregate_id)
    if health.aggregate is None:
        raise _not_found("Aggregate", aggregate_id)
    return to_wire(health)
