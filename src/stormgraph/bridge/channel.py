from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Channel(Protocol):
    """
    A duplex text channel to the process that owns the graph.

    Only the outbound half lives here; inbound frames are pushed into
    OperationBridge.handle_message by whoever reads the channel.
    """

    async def send(self, message: str) -> None:
        ...
