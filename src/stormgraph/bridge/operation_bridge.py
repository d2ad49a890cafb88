from __future__ import annotations

import asyncio
import itertools
import json
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from stormgraph.bridge.channel import Channel
from stormgraph.bridge.errors import (
    BridgeError,
    ChannelClosedError,
    ChannelRejectedError,
    NoChannelError,
    RequestTimeoutError,
    TransportError,
)
from stormgraph.bridge.operations import CONNECTED, RESPONSE, OperationType
from stormgraph.config.settings import BridgeConfig

logger = logging.getLogger("stormgraph.bridge")


@dataclass
class _Pending:
    future: asyncio.Future
    timer: asyncio.TimerHandle


@dataclass
class _ChannelState:
    channel: Channel
    pending: Dict[int, _Pending] = field(default_factory=dict)


@dataclass(frozen=True)
class BridgeStatus:
    connected: bool
    channels: List[str]
    active_channel: Optional[str]
    pending_requests: int
    routing_policy: str


class OperationBridge:
    """
    Forwards operations to the process that owns the graph and correlates
    the responses.

    Each request carries a numeric requestId and is parked on the channel
    it was sent to. A response resolves only the request with the same id
    on the same channel; anything else is dropped. A request fails when
    its timer fires or when its channel disconnects, whichever comes first.

    Exactly one channel receives requests: the earliest connected one.
    """

    def __init__(self, config: Optional[BridgeConfig] = None) -> None:
        self.config = config or BridgeConfig()
        # Insertion order is connection order.
        self._channels: Dict[str, _ChannelState] = {}
        self._ids = itertools.count(1)

    # ------------------------------------------------------------------
    # Channel lifecycle
    # ------------------------------------------------------------------

    async def connect(self, channel: Channel, channel_id: Optional[str] = None) -> str:
        channel_id = channel_id or uuid.uuid4().hex

        if channel_id in self._channels:
            logger.warning("channel %s reconnected, dropping the previous connection", channel_id)
            self.disconnect(channel_id)

        if self.config.routing_policy == "reject_additional" and self._channels:
            logger.warning("refusing channel %s: %s already connected", channel_id, self.active_channel)
            raise ChannelRejectedError(channel_id)

        self._channels[channel_id] = _ChannelState(channel=channel)
        logger.info(
            "channel %s connected (total=%s, active=%s)",
            channel_id,
            len(self._channels),
            self.active_channel,
        )

        await channel.send(
            json.dumps({"type": CONNECTED, "message": "EventStorming Bridge connected"})
        )
        return channel_id

    def disconnect(self, channel_id: str) -> int:
        """
        Drop a channel and fail everything still waiting on it.
        Returns the number of requests rejected.
        """
        state = self._channels.pop(channel_id, None)
        if state is None:
            return 0

        rejected = 0
        for pending in state.pending.values():
            pending.timer.cancel()
            if not pending.future.done():
                pending.future.set_exception(ChannelClosedError(channel_id))
                rejected += 1
        state.pending.clear()

        logger.info(
            "channel %s disconnected, rejected=%s, active=%s",
            channel_id,
            rejected,
            self.active_channel,
        )
        return rejected

    # ------------------------------------------------------------------
    # Inbound
    # ------------------------------------------------------------------

    def handle_message(self, channel_id: str, raw: Union[str, bytes]) -> bool:
        """
        Feed one inbound frame. Returns True when it resolved a request.
        """
        try:
            message = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            logger.warning("dropping malformed frame on %s: %s", channel_id, exc)
            return False

        if not isinstance(message, Mapping) or message.get("type") != RESPONSE:
            logger.debug("ignoring non-response frame on %s", channel_id)
            return False

        request_id = message.get("requestId")
        if not isinstance(request_id, int) or isinstance(request_id, bool):
            logger.warning("dropping response with invalid requestId %r on %s", request_id, channel_id)
            return False

        state = self._channels.get(channel_id)
        pending = state.pending.pop(request_id, None) if state is not None else None
        if pending is None:
            logger.debug("dropping unmatched response %s on %s", request_id, channel_id)
            return False

        pending.timer.cancel()
        if not pending.future.done():
            pending.future.set_result(message.get("data"))
        return True

    # ------------------------------------------------------------------
    # Outbound
    # ------------------------------------------------------------------

    def next_request_id(self) -> int:
        return next(self._ids)

    async def request(
        self,
        op_type: Union[str, OperationType],
        fields: Optional[Mapping[str, Any]] = None,
        *,
        request_id: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """
        Send one operation to the active channel and wait for its payload.

        Raises NoChannelError, RequestTimeoutError or ChannelClosedError.
        """
        op = OperationType(op_type)
        channel_id, state = self._active()

        if request_id is None:
            request_id = self.next_request_id()
        if request_id in state.pending:
            raise BridgeError(f"Request {request_id} is already pending on {channel_id}")
        if timeout is None:
            timeout = self.config.request_timeout

        loop = asyncio.get_running_loop()
        future = loop.create_future()
        timer = loop.call_later(timeout, self._expire, state, channel_id, request_id, timeout)
        state.pending[request_id] = _Pending(future=future, timer=timer)

        message: Dict[str, Any] = {"type": op.value, "requestId": request_id}
        for key, value in (fields or {}).items():
            message.setdefault(key, value)

        logger.debug("sending %s #%s to %s", op.value, request_id, channel_id)
        try:
            await state.channel.send(json.dumps(message))
            return await future
        except BridgeError:
            raise
        except Exception as exc:
            logger.warning("send of %s #%s failed: %s", op.value, request_id, exc)
            raise TransportError(f"Failed to send {op.value}: {exc}") from exc
        finally:
            timer.cancel()
            entry = state.pending.get(request_id)
            if entry is not None and entry.future is future:
                del state.pending[request_id]

    def _expire(self, state: _ChannelState, channel_id: str, request_id: int, timeout: float) -> None:
        pending = state.pending.pop(request_id, None)
        if pending is None or pending.future.done():
            return
        logger.warning("request #%s on %s timed out after %ss", request_id, channel_id, timeout)
        pending.future.set_exception(RequestTimeoutError(request_id, timeout))

    def _active(self) -> Tuple[str, _ChannelState]:
        if not self._channels:
            logger.warning("no connected channel to forward to")
            raise NoChannelError()
        return next(iter(self._channels.items()))

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def active_channel(self) -> Optional[str]:
        return next(iter(self._channels), None)

    def pending_count(self, channel_id: Optional[str] = None) -> int:
        if channel_id is not None:
            state = self._channels.get(channel_id)
            return len(state.pending) if state is not None else 0
        return sum(len(state.pending) for state in self._channels.values())

    def status(self) -> BridgeStatus:
        return BridgeStatus(
            connected=bool(self._channels),
            channels=list(self._channels),
            active_channel=self.active_channel,
            pending_requests=self.pending_count(),
            routing_policy=self.config.routing_policy,
        )
