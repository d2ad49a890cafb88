from typing import Any

from fastapi import APIRouter, Depends, HTTPException, WebSocket

from backend.app.api.schemas import BridgeStatusResponse, OperationRequest
from backend.app.dependencies import get_bridge_service
from backend.app.services.bridge_service import BridgeService
from stormgraph.bridge.errors import RequestTimeoutError, TransportError

router = APIRouter()


@router.get("/status", response_model=BridgeStatusResponse)
def bridge_status(service: BridgeService = Depends(get_bridge_service)):
    status = service.status()
    return BridgeStatusResponse(
        connected=status.connected,
        channels=status.channels,
        active_channel=status.active_channel,
        pending_requests=status.pending_requests,
        routing_policy=status.routing_policy,
    )


@router.post("/operations")
async def forward_operation(
    request: OperationRequest,
    service: BridgeService = Depends(get_bridge_service),
) -> Any:
    """
    Forward one operation to the connected graph owner and return its
    response payload verbatim.
    """
    try:
        return await service.forward(request.type, request.fields, timeout=request.timeout)
    except RequestTimeoutError as exc:
        raise HTTPException(status_code=504, detail=str(exc)) from exc
    except TransportError as exc:
        raise HTTPException(status_code=503, detail=str(exc)) from exc


@router.websocket("/ws")
async def bridge_socket(
    websocket: WebSocket,
    service: BridgeService = Depends(get_bridge_service),
):
    await service.serve(websocket)
