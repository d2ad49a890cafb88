from stormgraph.graph.graph_schema import Node, Edge, NodeType, EdgeLabel
from stormgraph.graph.graph_store import GraphStore
from stormgraph.graph.graph_query import GraphQueryEngine


def _store(*ids: str, node_type: str = "command") -> GraphStore:
    store = GraphStore()
    for node_id in ids:
        store.add_node(Node.create(node_id, node_id.upper(), node_type))
    return store


def test_node_round_trips_extension_fields_flat():
    node = Node.from_dict(
        {
            "id": "place-order",
            "label": "Place Order",
            "type": "command",
            "businessContext": "# Orders",
            "position": {"x": 10, "y": 20},
        }
    )

    assert node.attributes["businessContext"] == "# Orders"
    assert node.to_dict()["position"] == {"x": 10, "y": 20}
    assert node.is_a(NodeType.COMMAND)


def test_node_merge_is_shallow_and_returns_new_node():
    node = Node.create("a", "A", NodeType.EVENT, {"description": "old", "x": 1})
    merged = node.merge({"description": "new"})

    assert merged.attributes == {"description": "new", "x": 1}
    assert node.attributes["description"] == "old"
    assert merged.type == "event"


def test_store_rejects_duplicates_and_dangling_edges():
    store = _store("a", "b")

    assert store.add_node(Node.create("a", "again", "command")) is False
    assert store.add_edge(Edge.create("a", "missing", "then")) is False
    assert store.add_edge(Edge.create("a", "b", "then")) is True
    assert store.add_edge(Edge.create("a", "b", "then")) is False
    # same endpoints, different label
    assert store.add_edge(Edge.create("a", "b", EdgeLabel.ON)) is True
    assert store.edge_count() == 2


def test_remove_node_cascades_to_incident_edges():
    store = _store("a", "b", "c")
    store.add_edge(Edge.create("a", "b", "then"))
    store.add_edge(Edge.create("b", "c", "then"))

    assert store.remove_node("b") is True

    assert store.get_node_edges("b") == []
    assert store.edge_count() == 0
    for edge in store.get_edges():
        assert store.has_node(edge.source) and store.has_node(edge.target)


def test_update_node_refuses_id_change():
    store = _store("a")

    assert store.update_node("a", {"id": "b"}) is False
    assert store.update_node("a", {"label": "Renamed"}) is True
    assert store.get_node("a").label == "Renamed"


def test_label_neighbors_and_node_edges_order():
    store = _store("a", "b", "c")
    store.add_edge(Edge.create("a", "b", "then"))
    store.add_edge(Edge.create("c", "a", "issues"))

    assert [n.id for n in store.get_out_neighbors_by_label("a", "then")] == ["b"]
    assert [n.id for n in store.get_in_neighbors_by_label("a", "issues")] == ["c"]
    assert [e.key for e in store.get_node_edges("a")] == ["a|then|b", "c|issues|a"]
    assert store.get_edges_by_label("then")[0].describe() == "a --then--> b"


def test_detect_cycles_reports_closed_path():
    store = _store("c1", "e1", "c2", "e2")
    for s, t in [("c1", "e1"), ("e1", "c2"), ("c2", "e2"), ("e2", "c1")]:
        store.add_edge(Edge.create(s, t, "then"))

    cycles = GraphQueryEngine(store).detect_cycles()

    assert cycles
    assert set(cycles[0]) == {"c1", "e1", "c2", "e2"}
    assert cycles[0][0] == cycles[0][-1]


def test_impact_analysis_splits_direct_and_indirect():
    store = _store("n1", "n2", "n3", "n4")
    store.add_edge(Edge.create("n1", "n2", "then"))
    store.add_edge(Edge.create("n2", "n3", "then"))
    store.add_edge(Edge.create("n1", "n4", "then"))

    impact = GraphQueryEngine(store).get_impact_analysis("n1")

    assert {n.id for n in impact.direct_impact} == {"n2", "n4"}
    assert [n.id for n in impact.indirect_impact] == ["n3"]
    assert impact.total_reach == 3


def test_impact_of_missing_node_is_empty():
    impact = GraphQueryEngine(GraphStore()).get_impact_analysis("nope")
    assert impact.total_reach == 0
    assert impact.direct_impact == []


def test_bottlenecks_sorted_by_degree_and_skip_isolated():
    store = _store("hub", "a", "b", "lonely")
    store.add_edge(Edge.create("hub", "a", "then"))
    store.add_edge(Edge.create("hub", "b", "then"))

    bottlenecks = GraphQueryEngine(store).find_bottlenecks()

    assert bottlenecks[0].node.id == "hub"
    assert bottlenecks[0].centrality == 2
    assert "lonely" not in {b.node.id for b in bottlenecks}


def test_find_all_paths_respects_max_length():
    store = _store("a", "b", "c", "d")
    store.add_edge(Edge.create("a", "b", "then"))
    store.add_edge(Edge.create("b", "c", "then"))
    store.add_edge(Edge.create("c", "d", "then"))
    store.add_edge(Edge.create("a", "d", "on"))
    query = GraphQueryEngine(store)

    assert sorted(query.find_all_paths("a", "d")) == [["a", "b", "c", "d"], ["a", "d"]]
    assert query.find_all_paths("a", "d", max_length=1) == [["a", "d"]]
    assert query.find_all_paths("a", "zzz") == []


def test_metrics_on_empty_and_small_graph():
    empty = GraphQueryEngine(GraphStore()).get_metrics()
    assert empty.node_count == 0
    assert empty.density == 0.0
    assert empty.connected_components == 0

    store = _store("a", "b", "c")
    store.add_edge(Edge.create("a", "b", "then"))
    metrics = GraphQueryEngine(store).get_metrics()

    assert metrics.connected_components == 2
    assert metrics.density == 1 / 6
    assert metrics.cycles == 0
