from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from contextlib import asynccontextmanager

from backend.app.main import create_app
from backend.app.config import AppConfig
from backend.app.dependencies import get_engine, get_bridge_service
from backend.app.services.bridge_service import BridgeService

from stormgraph.bridge.operation_bridge import OperationBridge
from stormgraph.engine import EventStormingEngine


def build_order_flow(engine: EventStormingEngine) -> EventStormingEngine:
    """
    customer --issues--> place-order --on--> order
    place-order --then--> order-placed --then (policy)--> ship-order
    ship-order --then--> order-shipped
    """
    engine.create_command_flow(
        actor_id="customer",
        actor_label="Customer",
        command_id="place-order",
        command_label="Place Order",
        aggregate_id="order",
        aggregate_label="Order",
        event_id="order-placed",
        event_label="Order Placed",
    )
    engine.add_node({"id": "ship-order", "label": "Ship Order", "type": "command"})
    engine.add_node({"id": "order-shipped", "label": "Order Shipped", "type": "event"})
    engine.add_edge({"source": "order-placed", "target": "ship-order", "label": "then (policy)"})
    engine.add_edge({"source": "ship-order", "target": "order-shipped", "label": "then"})
    engine.add_edge({"source": "ship-order", "target": "order", "label": "on"})
    return engine


@pytest.fixture()
def engine() -> EventStormingEngine:
    return EventStormingEngine()


@pytest.fixture()
def order_engine(engine: EventStormingEngine) -> EventStormingEngine:
    return build_order_flow(engine)


@pytest.fixture()
def bridge() -> OperationBridge:
    return OperationBridge()


@pytest.fixture()
def client(engine: EventStormingEngine, bridge: OperationBridge):
    @asynccontextmanager
    async def _no_lifespan(_: FastAPI):
        yield

    app = create_app(AppConfig())
    app.router.lifespan_context = _no_lifespan

    service = BridgeService(bridge)
    app.dependency_overrides[get_engine] = lambda: engine
    app.dependency_overrides[get_bridge_service] = lambda: service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
