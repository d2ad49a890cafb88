import json

from stormgraph.bridge.dispatcher import OperationDispatcher


def _call(dispatcher: OperationDispatcher, **message):
    message.setdefault("requestId", 1)
    reply = json.loads(dispatcher.dispatch(json.dumps(message)))
    assert reply["type"] == "response"
    assert reply["requestId"] == message["requestId"]
    return reply["data"]


def test_connected_frame_needs_no_answer(engine):
    dispatcher = OperationDispatcher(engine)
    assert dispatcher.dispatch(json.dumps({"type": "connected", "message": "hi"})) is None
    assert dispatcher.dispatch("{broken") is None


def test_add_node_returns_the_stored_node(engine):
    dispatcher = OperationDispatcher(engine)

    data = _call(
        dispatcher,
        type="add-node",
        data={"id": "order", "label": "Order", "type": "aggregate", "businessContext": "# Order"},
    )

    assert data["success"] is True
    assert data["data"]["businessContext"] == "# Order"
    assert data["error"] is None


def test_failed_mutation_reports_errors(engine):
    dispatcher = OperationDispatcher(engine)

    data = _call(dispatcher, type="add-edge", data={"source": "a", "target": "b", "label": "then"})

    assert data["success"] is False
    assert data["error"] == ["Source node 'a' not found"]


def test_create_command_flow_and_queries(engine):
    dispatcher = OperationDispatcher(engine)

    created = _call(
        dispatcher,
        type="create-command-flow",
        data={
            "actorId": "customer",
            "actorLabel": "Customer",
            "commandId": "place-order",
            "commandLabel": "Place Order",
            "aggregateId": "order",
            "aggregateLabel": "Order",
            "eventId": "order-placed",
            "eventLabel": "Order Placed",
        },
    )
    assert created["success"] is True

    stats = _call(dispatcher, type="get-statistics")["data"]
    assert stats["totalNodes"] == 4
    assert stats["nodesByType"]["command"] == 1

    validation = _call(dispatcher, type="validate-graph")["data"]
    assert validation["isValid"] is True

    impact = _call(dispatcher, type="get-change-impact", nodeId="customer")["data"]
    assert impact["totalReach"] == 3
    assert impact["riskLevel"] == "LOW"


def test_delete_node_reports_impact(order_engine):
    data = _call(OperationDispatcher(order_engine), type="delete-node", nodeId="ship-order")

    assert data["success"] is True
    assert data["impact"]["totalReach"] == 2
    assert order_engine.get_node("ship-order") is None


def test_unknown_operation_and_bad_fields(engine):
    dispatcher = OperationDispatcher(engine)

    unknown = _call(dispatcher, type="format-disk")
    assert unknown["success"] is False
    assert unknown["error"] == "Unknown operation: format-disk"

    missing = _call(dispatcher, type="get-process-flow")
    assert missing["success"] is False
    assert missing["error"].startswith("Invalid get-process-flow request")


def test_explain_missing_node(engine):
    data = _call(OperationDispatcher(engine), type="explain-node-context", nodeId="ghost")
    assert data == {"success": False, "data": None, "error": "Node ghost not found", "warnings": None}


def test_guards_and_remove_edge(order_engine):
    dispatcher = OperationDispatcher(order_engine)

    guards = _call(
        dispatcher,
        type="add-command-guards",
        commandId="place-order",
        data=[{"id": "in-stock", "label": "In stock"}],
    )
    assert guards["success"] is True

    removed = _call(
        dispatcher,
        type="remove-edge",
        data={"source": "place-order", "target": "in-stock", "label": "if guard"},
    )
    assert removed["success"] is True
    assert order_engine.get_process_flow("place-order").guards == []
