import asyncio
import json
import logging
import sys
import time
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from backend.app.config import AppConfig  # noqa: E402
from backend.app.dependencies import get_engine  # noqa: E402
from stormgraph.bridge.dispatcher import OperationDispatcher  # noqa: E402
from stormgraph.bridge.operation_bridge import OperationBridge  # noqa: E402
from stormgraph.bridge.operations import OperationType  # noqa: E402


class LoopbackChannel:
    """
    In-process graph owner: every frame sent to it is dispatched against
    a local engine and the response is fed straight back to the bridge.
    """

    def __init__(self, bridge: OperationBridge, dispatcher: OperationDispatcher) -> None:
        self.bridge = bridge
        self.dispatcher = dispatcher
        self.channel_id = "loopback"

    async def send(self, message: str) -> None:
        reply = self.dispatcher.dispatch(message)
        if reply is not None:
            asyncio.get_running_loop().call_soon(
                self.bridge.handle_message, self.channel_id, reply
            )


async def run(config: AppConfig) -> None:
    logger = logging.getLogger("stormgraph.run")
    start = time.perf_counter()

    engine = get_engine()
    bridge = OperationBridge(config.stormgraph.bridge)
    channel = LoopbackChannel(bridge, OperationDispatcher(engine))
    await bridge.connect(channel, channel.channel_id)

    async def forward(label: str, op: OperationType, fields=None) -> None:
        result = await bridge.request(op, fields)
        logger.info("[%s] ready in %.3fs", label, time.perf_counter() - start)
        logger.info(json.dumps(result, indent=2))

    await forward(
        "create-flow",
        OperationType.CREATE_COMMAND_FLOW,
        {
            "data": {
                "actorId": "customer",
                "actorLabel": "Customer",
                "commandId": "place-order",
                "commandLabel": "Place Order",
                "aggregateId": "order",
                "aggregateLabel": "Order",
                "eventId": "order-placed",
                "eventLabel": "Order Placed",
            }
        },
    )
    await forward("process-flow", OperationType.GET_PROCESS_FLOW, {"commandId": "place-order"})
    await forward("methodology", OperationType.VALIDATE_METHODOLOGY)
    await forward("overview", OperationType.GET_SYSTEM_OVERVIEW)

    bridge.disconnect(channel.channel_id)


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    asyncio.run(run(AppConfig()))


if __name__ == "__main__":
    main()
