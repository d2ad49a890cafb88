from stormgraph.config.settings import ValidationConfig
from stormgraph.graph.graph_query import GraphQueryEngine
from stormgraph.graph.graph_schema import Edge, Node
from stormgraph.graph.graph_store import GraphStore
from stormgraph.validation.methodology import (
    CIRCULAR_DEPENDENCY,
    COMMAND_WITHOUT_EVENT,
    EVENT_WITHOUT_COMMAND,
    MethodologyValidator,
)
from stormgraph.validation.results import ValidationResult
from stormgraph.validation.validator import StructuralValidator


def _validator(*nodes: Node) -> StructuralValidator:
    store = GraphStore()
    for node in nodes:
        store.add_node(node)
    return StructuralValidator(store)


def test_validate_node_reports_every_problem():
    result = _validator().validate_node(Node(id="", label=" ", type="widget"))

    assert not result.is_valid
    assert "Node ID cannot be empty" in result.errors
    assert "Node label cannot be empty" in result.errors
    assert any(e.startswith("Invalid node type 'widget'") for e in result.errors)


def test_non_kebab_id_is_only_a_warning():
    result = _validator().validate_node(Node.create("PlaceOrder", "Place Order", "command"))

    assert result.is_valid
    assert result.errors == []
    assert "kebab-case" in result.warnings[0]


def test_custom_id_pattern():
    validator = StructuralValidator(GraphStore(), ValidationConfig(id_pattern=r"^[A-Za-z]+$"))
    assert validator.validate_node(Node.create("PlaceOrder", "Place Order", "command")).warnings == []


def test_boundary_is_a_valid_node_type():
    assert _validator().validate_node(Node.create("phase-1", "Phase 1", "boundary")).is_valid


def test_edge_endpoint_checks_come_first():
    validator = _validator(Node.create("a", "A", "actor"))

    assert validator.validate_edge(Edge.create("x", "a", "issues")).errors == [
        "Source node 'x' not found"
    ]
    assert validator.validate_edge(Edge.create("a", "y", "issues")).errors == [
        "Target node 'y' not found"
    ]


def test_incompatible_edge_names_allowed_combination():
    validator = _validator(
        Node.create("actor-1", "Actor", "actor"),
        Node.create("agg-1", "Aggregate", "aggregate"),
    )

    result = validator.validate_edge(Edge.create("actor-1", "agg-1", "on"))

    assert not result.is_valid
    assert "actor --on--> aggregate" in result.errors[0]
    assert "command -> aggregate" in result.errors[0]


def test_unknown_edge_label_is_an_error():
    validator = _validator(
        Node.create("a", "A", "command"),
        Node.create("b", "B", "event"),
    )
    result = validator.validate_edge(Edge.create("a", "b", "causes"))

    assert not result.is_valid
    assert "Invalid edge label 'causes'" in result.errors[0]


def test_marks_pivotal_connects_event_to_boundary():
    validator = _validator(
        Node.create("e", "E", "event"),
        Node.create("b", "B", "boundary"),
    )
    assert validator.validate_edge(Edge.create("e", "b", "marks pivotal")).is_valid


def test_validate_graph_flags_commands_events_and_orphans():
    validator = _validator(
        Node.create("cmd", "Do It", "command"),
        Node.create("evt", "It Happened", "event"),
    )

    result = validator.validate_graph()

    assert not result.is_valid
    assert result.errors == ["Command 'Do It' must generate at least one event"]
    assert "Orphaned nodes found: Do It, It Happened" in result.warnings
    assert "Event 'It Happened' is not generated by any command" in result.warnings


def test_combine_is_valid_only_without_errors():
    combined = ValidationResult.combine(
        [ValidationResult.success(["w1"]), ValidationResult.failure(["e1"], ["w2"])]
    )
    assert not combined.is_valid
    assert combined.errors == ["e1"]
    assert combined.warnings == ["w1", "w2"]


def test_methodology_report_uses_codes_and_node_ids():
    store = GraphStore()
    for node_id, node_type in [("c1", "command"), ("e1", "event"), ("c2", "command"), ("e2", "event"), ("lost", "event")]:
        store.add_node(Node.create(node_id, node_id.upper(), node_type))
    store.add_edge(Edge.create("c1", "e1", "then"))
    store.add_edge(Edge.create("e1", "c2", "then (policy)"))
    store.add_edge(Edge.create("c2", "e2", "then"))
    store.add_edge(Edge.create("e2", "c1", "then (policy)"))

    report = MethodologyValidator(store, GraphQueryEngine(store)).validate()

    assert report.is_valid
    codes = [w.code for w in report.warnings]
    assert EVENT_WITHOUT_COMMAND in codes
    assert CIRCULAR_DEPENDENCY in codes
    cycle = next(w for w in report.warnings if w.code == CIRCULAR_DEPENDENCY)
    assert set(cycle.affected_nodes) == {"c1", "e1", "c2", "e2"}
    orphan_event = next(w for w in report.warnings if w.code == EVENT_WITHOUT_COMMAND)
    assert orphan_event.affected_nodes == ["lost"]


def test_methodology_violation_for_command_without_event():
    store = GraphStore()
    store.add_node(Node.create("c1", "Lonely", "command"))

    report = MethodologyValidator(store, GraphQueryEngine(store)).validate()

    assert not report.is_valid
    assert report.violations[0].code == COMMAND_WITHOUT_EVENT
    assert report.violations[0].affected_nodes == ["c1"]
    assert report.suggestions[0].startswith("Focus on fixing methodology violations")
