from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import WebSocket

from stormgraph.bridge.errors import ChannelRejectedError
from stormgraph.bridge.operation_bridge import BridgeStatus, OperationBridge
from stormgraph.bridge.operations import OperationType

logger = logging.getLogger("stormgraph.bridge")


class WebSocketChannel:
    """Adapts a FastAPI WebSocket to the bridge's Channel protocol."""

    def __init__(self, websocket: WebSocket) -> None:
        self.websocket = websocket

    async def send(self, message: str) -> None:
        await self.websocket.send_text(message)


class BridgeService:
    """
    Backend side of the remote operation bridge.

    This is the ONLY place where:
    - renderer WebSockets are attached to the bridge
    - HTTP callers forward operations to the remote graph owner
    """

    def __init__(self, bridge: OperationBridge) -> None:
        self.bridge = bridge

    async def forward(
        self,
        op_type: OperationType,
        fields: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        return await self.bridge.request(op_type, fields, timeout=timeout)

    def status(self) -> BridgeStatus:
        return self.bridge.status()

    async def serve(self, websocket: WebSocket) -> None:
        """
        Run one renderer connection until it closes. Inbound frames are
        fed to the bridge; the channel is dropped on disconnect.
        """
        await websocket.accept()
        try:
            channel_id = await self.bridge.connect(WebSocketChannel(websocket))
        except ChannelRejectedError as exc:
            await websocket.close(code=1013, reason=str(exc))
            return

        try:
            while True:
                frame = await websocket.receive()
                if frame["type"] == "websocket.disconnect":
                    logger.info("websocket %s closed by peer (code=%s)", channel_id, frame.get("code"))
                    break
                raw = frame.get("text")
                if raw is None:
                    raw = frame.get("bytes")
                if raw is not None:
                    self.bridge.handle_message(channel_id, raw)
        finally:
            self.bridge.disconnect(channel_id)
