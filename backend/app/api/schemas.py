from typing import List, Dict, Any, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from stormgraph.bridge.operations import OperationType


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------- Requests ----------------


class NodePayload(BaseModel):
    """A node as it appears in a snapshot: core fields plus any extension fields."""

    model_config = ConfigDict(extra="allow")

    id: str
    label: str
    type: str


class EdgePayload(BaseModel):
    source: str
    target: str
    label: str


class SnapshotPayload(BaseModel):
    nodes: List[Dict[str, Any]]
    edges: List[Dict[str, Any]]


class CommandFlowRequest(CamelModel):
    actor_id: str
    actor_label: str
    command_id: str
    command_label: str
    aggregate_id: str
    aggregate_label: str
    event_id: str
    event_label: str
    description: Optional[str] = None


class ElementRequest(BaseModel):
    id: str
    label: str
    description: Optional[str] = None


class OperationRequest(BaseModel):
    type: OperationType
    fields: Dict[str, Any] = Field(default_factory=dict)
    timeout: Optional[float] = Field(default=None, gt=0)


# ---------------- Responses ----------------


class ValidationResponse(CamelModel):
    is_valid: bool
    errors: List[str]
    warnings: List[str]


class SnapshotResponse(BaseModel):
    nodes: List[Dict[str, Any]]
    edges: List[Dict[str, Any]]


class GraphStatsResponse(BaseModel):
    nodes: int
    edges: int
    metadata: Dict[str, Any]


class BridgeStatusResponse(CamelModel):
    connected: bool
    channels: List[str]
    active_channel: Optional[str]
    pending_requests: int
    routing_policy: str
