from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query

from backend.app.api.schemas import (
    CommandFlowRequest,
    EdgePayload,
    ElementRequest,
    GraphStatsResponse,
    NodePayload,
    SnapshotPayload,
    SnapshotResponse,
    ValidationResponse,
)
from backend.app.dependencies import get_engine
from stormgraph.engine import EventStormingEngine
from stormgraph.utils.serialization import to_wire
from stormgraph.validation.results import ValidationResult

router = APIRouter()


def _result(result: ValidationResult) -> ValidationResponse:
    return ValidationResponse(
        is_valid=result.is_valid,
        errors=result.errors,
        warnings=result.warnings,
    )


# ---------------- Snapshot ----------------


@router.get("", response_model=SnapshotResponse)
def get_graph(engine: EventStormingEngine = Depends(get_engine)):
    return engine.get_graph()


@router.put("", response_model=ValidationResponse)
def load_graph(
    snapshot: SnapshotPayload,
    engine: EventStormingEngine = Depends(get_engine),
):
    return _result(engine.load_graph(snapshot.model_dump()))


@router.get("/stats", response_model=GraphStatsResponse)
def graph_stats(engine: EventStormingEngine = Depends(get_engine)):
    return GraphStatsResponse(
        nodes=engine.store.node_count(),
        edges=engine.store.edge_count(),
        metadata=engine.store.metadata,
    )


# ---------------- Nodes ----------------


@router.get("/nodes")
def list_nodes(
    node_type: Optional[str] = Query(default=None, alias="type"),
    engine: EventStormingEngine = Depends(get_engine),
) -> List[Dict[str, Any]]:
    nodes = engine.get_nodes_by_type(node_type) if node_type else engine.store.get_nodes()
    return to_wire(nodes)


@router.post("/nodes", response_model=ValidationResponse)
def add_node(
    node: NodePayload,
    engine: EventStormingEngine = Depends(get_engine),
):
    return _result(engine.add_node(node.model_dump()))


@router.get("/nodes/{node_id}")
def get_node(
    node_id: str,
    engine: EventStormingEngine = Depends(get_engine),
) -> Dict[str, Any]:
    node = engine.get_node(node_id)
    if node is None:
        raise HTTPException(status_code=404, detail=f"Node '{node_id}' not found")
    return node.to_dict()


@router.patch("/nodes/{node_id}", response_model=ValidationResponse)
def update_node(
    node_id: str,
    updates: Dict[str, Any] = Body(...),
    engine: EventStormingEngine = Depends(get_engine),
):
    return _result(engine.update_node(node_id, updates))


@router.put("/nodes/{node_id}/extended-fields", response_model=ValidationResponse)
def update_node_extended_fields(
    node_id: str,
    fields: Dict[str, Any] = Body(...),
    engine: EventStormingEngine = Depends(get_engine),
):
    return _result(engine.update_node_extended_fields(node_id, fields))


@router.delete("/nodes/{node_id}", response_model=ValidationResponse)
def remove_node(
    node_id: str,
    engine: EventStormingEngine = Depends(get_engine),
):
    return _result(engine.remove_node(node_id))


@router.get("/nodes/{node_id}/edges")
def get_node_edges(
    node_id: str,
    engine: EventStormingEngine = Depends(get_engine),
) -> List[Dict[str, Any]]:
    if engine.get_node(node_id) is None:
        raise HTTPException(status_code=404, detail=f"Node '{node_id}' not found")
    return to_wire(engine.get_node_edges(node_id))


# ---------------- Edges ----------------


@router.get("/edges")
def list_edges(
    label: Optional[str] = Query(default=None),
    engine: EventStormingEngine = Depends(get_engine),
) -> List[Dict[str, Any]]:
    edges = engine.get_edges_by_label(label) if label else engine.store.get_edges()
    return to_wire(edges)


@router.post("/edges", response_model=ValidationResponse)
def add_edge(
    edge: EdgePayload,
    engine: EventStormingEngine = Depends(get_engine),
):
    return _result(engine.add_edge(edge.model_dump()))


@router.delete("/edges", response_model=ValidationResponse)
def remove_edge(
    source: str,
    target: str,
    label: str,
    engine: EventStormingEngine = Depends(get_engine),
):
    return _result(engine.remove_edge(source, target, label))


# ---------------- Composite ----------------


@router.post("/command-flow", response_model=ValidationResponse)
def create_command_flow(
    request: CommandFlowRequest,
    engine: EventStormingEngine = Depends(get_engine),
):
    return _result(engine.create_command_flow(**request.model_dump()))


@router.post("/commands/{command_id}/guards", response_model=ValidationResponse)
def add_command_guards(
    command_id: str,
    guards: List[ElementRequest],
    engine: EventStormingEngine = Depends(get_engine),
):
    return _result(
        engine.add_command_guards(command_id, [g.model_dump(exclude_none=True) for g in guards])
    )


@router.post("/commands/{command_id}/preconditions", response_model=ValidationResponse)
def add_command_preconditions(
    command_id: str,
    preconditions: List[ElementRequest],
    engine: EventStormingEngine = Depends(get_engine),
):
    return _result(
        engine.add_command_preconditions(
            command_id, [p.model_dump(exclude_none=True) for p in preconditions]
        )
    )
