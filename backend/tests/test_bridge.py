import asyncio
import json

import pytest

from backend.app.services.bridge_service import BridgeService
from stormgraph.bridge.dispatcher import OperationDispatcher
from stormgraph.bridge.errors import (
    ChannelClosedError,
    ChannelRejectedError,
    NoChannelError,
    RequestTimeoutError,
)
from stormgraph.bridge.operation_bridge import OperationBridge
from stormgraph.bridge.operations import OperationType
from stormgraph.config.settings import BridgeConfig


class RecordingChannel:
    def __init__(self) -> None:
        self.sent = []

    async def send(self, message: str) -> None:
        self.sent.append(json.loads(message))

    def operations(self):
        return [m for m in self.sent if m["type"] != "connected"]


def _response(request_id, data) -> str:
    return json.dumps({"type": "response", "requestId": request_id, "data": data})


async def _until_sent(channel: RecordingChannel, count: int = 1) -> None:
    while len(channel.operations()) < count:
        await asyncio.sleep(0)


def test_connect_sends_greeting():
    async def scenario():
        bridge = OperationBridge()
        channel = RecordingChannel()
        channel_id = await bridge.connect(channel, "r1")
        return bridge, channel, channel_id

    bridge, channel, channel_id = asyncio.run(scenario())

    assert channel_id == "r1"
    assert channel.sent[0]["type"] == "connected"
    assert bridge.status().active_channel == "r1"


def test_response_resolves_matching_request():
    async def scenario():
        bridge = OperationBridge()
        channel = RecordingChannel()
        await bridge.connect(channel, "r1")

        task = asyncio.create_task(bridge.request(OperationType.GET_NODES_BY_TYPE, {"nodeType": "command"}))
        await _until_sent(channel)
        sent = channel.operations()[0]
        assert bridge.pending_count("r1") == 1

        assert bridge.handle_message("r1", _response(sent["requestId"], {"success": True}))
        return sent, await task, bridge.pending_count()

    sent, result, pending = asyncio.run(scenario())

    assert sent["type"] == "get-nodes-by-type"
    assert sent["nodeType"] == "command"
    assert result == {"success": True}
    assert pending == 0


def test_unmatched_and_malformed_responses_are_dropped():
    async def scenario():
        bridge = OperationBridge()
        first, second = RecordingChannel(), RecordingChannel()
        await bridge.connect(first, "first")
        await bridge.connect(second, "second")

        task = asyncio.create_task(bridge.request("get-graph", request_id=7, timeout=1))
        await _until_sent(first)

        outcomes = [
            bridge.handle_message("second", _response(7, "wrong channel")),
            bridge.handle_message("first", _response(8, "wrong id")),
            bridge.handle_message("first", "{not json"),
            bridge.handle_message("first", json.dumps({"type": "ping"})),
        ]
        still_pending = bridge.pending_count("first")
        bridge.handle_message("first", _response(7, "right"))
        return outcomes, still_pending, await task, second.operations()

    outcomes, still_pending, result, second_ops = asyncio.run(scenario())

    assert outcomes == [False, False, False, False]
    assert still_pending == 1
    assert result == "right"
    assert second_ops == []


def test_timeout_rejects_and_evicts():
    async def scenario():
        bridge = OperationBridge(BridgeConfig(request_timeout=0.01))
        await bridge.connect(RecordingChannel(), "r1")
        with pytest.raises(RequestTimeoutError):
            await bridge.request(OperationType.GET_STATISTICS)
        return bridge.pending_count()

    assert asyncio.run(scenario()) == 0


def test_disconnect_rejects_every_pending_request():
    async def scenario():
        bridge = OperationBridge()
        channel = RecordingChannel()
        await bridge.connect(channel, "r1")

        tasks = [
            asyncio.create_task(bridge.request(OperationType.GET_GRAPH)),
            asyncio.create_task(bridge.request(OperationType.GET_HEALTH)),
        ]
        await _until_sent(channel, 2)
        rejected = bridge.disconnect("r1")
        results = await asyncio.gather(*tasks, return_exceptions=True)
        return rejected, results

    rejected, results = asyncio.run(scenario())

    assert rejected == 2
    assert all(isinstance(r, ChannelClosedError) for r in results)


def test_no_channel_raises():
    async def scenario():
        await OperationBridge().request(OperationType.GET_GRAPH)

    with pytest.raises(NoChannelError):
        asyncio.run(scenario())


def test_first_connected_fails_over_in_connection_order():
    async def scenario():
        bridge = OperationBridge()
        first, second = RecordingChannel(), RecordingChannel()
        await bridge.connect(first, "first")
        await bridge.connect(second, "second")
        bridge.disconnect("first")

        task = asyncio.create_task(bridge.request(OperationType.GET_GRAPH, timeout=1))
        await _until_sent(second)
        bridge.handle_message("second", _response(second.operations()[0]["requestId"], "ok"))
        return await task

    assert asyncio.run(scenario()) == "ok"


def test_reject_additional_policy():
    async def scenario():
        bridge = OperationBridge(BridgeConfig(routing_policy="reject_additional"))
        await bridge.connect(RecordingChannel(), "first")
        with pytest.raises(ChannelRejectedError):
            await bridge.connect(RecordingChannel(), "second")
        return bridge.status()

    status = asyncio.run(scenario())
    assert status.channels == ["first"]


def test_unknown_operation_is_refused():
    async def scenario():
        bridge = OperationBridge()
        await bridge.connect(RecordingChannel(), "r1")
        await bridge.request("drop-database")

    with pytest.raises(ValueError):
        asyncio.run(scenario())


def test_round_trip_through_dispatcher(order_engine):
    dispatcher = OperationDispatcher(order_engine)

    class OwnerChannel:
        def __init__(self, bridge):
            self.bridge = bridge

        async def send(self, message):
            reply = dispatcher.dispatch(message)
            if reply is not None:
                asyncio.get_running_loop().call_soon(self.bridge.handle_message, "owner", reply)

    async def scenario():
        bridge = OperationBridge()
        await bridge.connect(OwnerChannel(bridge), "owner")
        return await bridge.request(OperationType.GET_PROCESS_FLOW, {"commandId": "place-order"})

    response = asyncio.run(scenario())

    assert response["success"] is True
    assert response["data"]["command"]["id"] == "place-order"
    assert response["data"]["policiesTriggered"][0]["id"] == "ship-order"


def test_response_with_unusable_request_id_is_dropped():
    async def scenario():
        bridge = OperationBridge()
        channel = RecordingChannel()
        await bridge.connect(channel, "r1")

        task = asyncio.create_task(bridge.request(OperationType.GET_GRAPH, timeout=1))
        await _until_sent(channel)
        request_id = channel.operations()[0]["requestId"]

        outcomes = [
            bridge.handle_message("r1", json.dumps({"type": "response", "requestId": [request_id], "data": None})),
            bridge.handle_message("r1", json.dumps({"type": "response", "requestId": {"id": 1}, "data": None})),
            bridge.handle_message("r1", json.dumps({"type": "response", "requestId": True, "data": None})),
            bridge.handle_message("r1", json.dumps({"type": "response", "data": None})),
        ]
        still_pending = bridge.pending_count("r1")
        bridge.handle_message("r1", _response(request_id, "ok"))
        return outcomes, still_pending, await task

    outcomes, still_pending, result = asyncio.run(scenario())

    assert outcomes == [False, False, False, False]
    assert still_pending == 1
    assert result == "ok"


def test_reconnect_with_same_id_rejects_requests_of_the_old_connection():
    async def scenario():
        bridge = OperationBridge()
        old = RecordingChannel()
        await bridge.connect(old, "r1")

        task = asyncio.create_task(bridge.request(OperationType.GET_GRAPH, timeout=5))
        await _until_sent(old)

        fresh = RecordingChannel()
        await bridge.connect(fresh, "r1")
        outcome = await asyncio.wait_for(asyncio.gather(task, return_exceptions=True), timeout=1)
        return outcome[0], bridge.status(), fresh.sent

    error, status, fresh_sent = asyncio.run(scenario())

    assert isinstance(error, ChannelClosedError)
    assert status.channels == ["r1"]
    assert status.pending_requests == 0
    assert fresh_sent[0]["type"] == "connected"


class ScriptedWebSocket:
    """Replays inbound frames and records the bridge state on each receive."""

    def __init__(self, service, frames):
        self.service = service
        self.frames = list(frames)
        self.sent = []
        self.connected_on_receive = []

    async def accept(self):
        return None

    async def send_text(self, message):
        self.sent.append(message)

    async def close(self, code=1000, reason=None):
        return None

    async def receive(self):
        self.connected_on_receive.append(self.service.status().connected)
        return self.frames.pop(0)


def test_binary_and_garbage_frames_keep_the_socket_alive(bridge):
    service = BridgeService(bridge)
    websocket = ScriptedWebSocket(
        service,
        [
            {"type": "websocket.receive", "bytes": b"\xff\xfe\x00"},
            {"type": "websocket.receive", "text": "{not json"},
            {"type": "websocket.receive", "bytes": b'{"type": "ping"}'},
            {"type": "websocket.disconnect", "code": 1000},
        ],
    )

    asyncio.run(service.serve(websocket))

    assert websocket.connected_on_receive == [True, True, True, True]
    assert json.loads(websocket.sent[0])["type"] == "connected"
    assert bridge.status().connected is False
