"""
Remote operation bridge for stormgraph.

Lets a process that does not own the graph forward operations to one
that does, over any text channel (a WebSocket in the backend), and
correlate the responses by request id.
"""

from stormgraph.bridge.errors import (
    BridgeError,
    TransportError,
    NoChannelError,
    ChannelRejectedError,
    ChannelClosedError,
    RequestTimeoutError,
)
from stormgraph.bridge.channel import Channel
from stormgraph.bridge.operations import OperationType, OPERATION_TYPES
from stormgraph.bridge.operation_bridge import OperationBridge, BridgeStatus
from stormgraph.bridge.dispatcher import OperationDispatcher

__all__ = [
    "BridgeError",
    "TransportError",
    "NoChannelError",
    "ChannelRejectedError",
    "ChannelClosedError",
    "RequestTimeoutError",
    "Channel",
    "OperationType",
    "OPERATION_TYPES",
    "OperationBridge",
    "BridgeStatus",
    "OperationDispatcher",
]
