import json


def _seed(client):
    response = client.post(
        "/graph/command-flow",
        json={
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
    assert response.status_code == 200
    assert response.json()["isValid"] is True


def test_graph_snapshot_round_trip(client):
    _seed(client)

    snapshot = client.get("/graph").json()
    assert {n["id"] for n in snapshot["nodes"]} == {"customer", "place-order", "order", "order-placed"}

    response = client.put("/graph", json={"nodes": snapshot["nodes"][:1], "edges": []})
    assert response.status_code == 200
    assert client.get("/graph/stats").json()["nodes"] == 1


def test_node_crud(client):
    created = client.post("/graph/nodes", json={"id": "order", "label": "Order", "type": "aggregate", "businessContext": "x"})
    assert created.json() == {"isValid": True, "errors": [], "warnings": []}

    node = client.get("/graph/nodes/order").json()
    assert node["businessContext"] == "x"

    updated = client.patch("/graph/nodes/order", json={"label": "Order Book"})
    assert updated.json()["isValid"] is True
    assert client.get("/graph/nodes", params={"type": "aggregate"}).json()[0]["label"] == "Order Book"

    extended = client.put("/graph/nodes/order/extended-fields", json={"exampleState": "{}"})
    assert extended.json()["isValid"] is True

    assert client.delete("/graph/nodes/order").json()["isValid"] is True
    assert client.get("/graph/nodes/order").status_code == 404


def test_invalid_mutation_is_reported_not_raised(client):
    response = client.post("/graph/nodes", json={"id": "x", "label": "X", "type": "widget"})

    assert response.status_code == 200
    body = response.json()
    assert body["isValid"] is False
    assert body["errors"][0].startswith("Invalid node type 'widget'")


def test_edges_endpoints(client):
    _seed(client)

    assert len(client.get("/graph/edges", params={"label": "then"}).json()) == 1
    assert len(client.get("/graph/nodes/place-order/edges").json()) == 3

    removed = client.delete(
        "/graph/edges",
        params={"source": "place-order", "target": "order", "label": "on"},
    )
    assert removed.json()["isValid"] is True
    added = client.post("/graph/edges", json={"source": "place-order", "target": "order", "label": "on"})
    assert added.json()["isValid"] is True


def test_guards_endpoint(client):
    _seed(client)

    response = client.post(
        "/graph/commands/place-order/guards",
        json=[{"id": "in-stock", "label": "In stock"}],
    )
    assert response.json()["isValid"] is True
    flow = client.get("/analysis/process-flows/place-order").json()
    assert flow["guards"][0]["id"] == "in-stock"


def test_analysis_endpoints(client):
    _seed(client)

    assert client.get("/analysis/validation").json()["isValid"] is True
    assert client.get("/analysis/methodology").json()["isValid"] is True
    assert client.get("/analysis/statistics").json()["totalNodes"] == 4
    assert client.get("/analysis/health").json()["methodology"]["validationScore"] == 100.0
    assert client.get("/analysis/overview").json()["summary"]["totalNodes"] == 4
    assert "suggestions" in client.get("/analysis/suggestions").json()
    assert client.get("/analysis/cycles").json() == {"cycles": [], "affectedNodes": []}
    assert client.get("/analysis/impact/customer").json()["totalReach"] == 3
    assert client.get("/analysis/aggregate-views/order").json()["aggregate"]["id"] == "order"
    assert client.get("/analysis/actors/customer/aggregates").json()[0]["aggregate"]["id"] == "order"
    assert client.get("/analysis/events/order-placed/processes").json()[0]["command"]["id"] == "place-order"
    assert client.get("/analysis/execution-paths/place-order").json()["paths"][0]["pathType"] == "HAPPY_PATH"
    assert client.get("/analysis/aggregate-health/order").json()["commandCount"] == 1
    assert client.get("/analysis/nodes/order/context").json()["role"].startswith("A business entity")
    assert client.get(
        "/analysis/paths",
        params={"source": "customer", "target": "order-placed"},
    ).json() == [["customer", "place-order", "order-placed"]]


def test_missing_things_are_404(client):
    assert client.get("/analysis/process-flows/ghost").status_code == 404
    assert client.get("/analysis/aggregate-views/ghost").status_code == 404
    assert client.get("/analysis/impact/ghost").status_code == 404
    assert client.get("/analysis/execution-paths/ghost").status_code == 404
    assert client.get("/analysis/aggregate-health/ghost").status_code == 404
    assert client.get("/analysis/nodes/ghost/context").status_code == 404
    assert client.get("/graph/nodes/ghost/edges").status_code == 404


def test_bridge_status_and_forward_without_owner(client):
    status = client.get("/bridge/status").json()
    assert status["connected"] is False
    assert status["routingPolicy"] == "first_connected"

    response = client.post("/bridge/operations", json={"type": "get-graph"})
    assert response.status_code == 503

    bad = client.post("/bridge/operations", json={"type": "not-an-operation"})
    assert bad.status_code == 422


def test_bridge_websocket_greets_and_registers(client):
    with client.websocket_connect("/bridge/ws") as websocket:
        greeting = json.loads(websocket.receive_text())
        assert greeting["type"] == "connected"

        status = client.get("/bridge/status").json()
        assert status["connected"] is True
        assert len(status["channels"]) == 1
