"""stormgraph.tools.server - MCP server over an EventStorming engine.

Every engine operation is registered as an ``eventstorming_*`` tool.
Tools answer with pretty-printed JSON, or with a plain sentence when the
requested element does not exist.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

from mcp.server.fastmcp import FastMCP
from pydantic import BaseModel

from stormgraph.engine import EXTENDED_FIELDS, EventStormingEngine
from stormgraph.graph.graph_schema import EDGE_LABELS, NODE_TYPES
from stormgraph.utils.serialization import camel_case, to_wire

logger = logging.getLogger("stormgraph.tools")

NodeTypeName = Literal[NODE_TYPES]  # type: ignore[valid-type]
EdgeLabelName = Literal[EDGE_LABELS]  # type: ignore[valid-type]

DEFAULT_SNAPSHOT_FILE = "ubistorming.json"

SERVER_INSTRUCTIONS = """\
Tools for building and analyzing an EventStorming model.

Start with eventstorming_get_graph or eventstorming_analyze_system_overview.
Mutations validate first and return {isValid, errors, warnings}; a failed
mutation leaves the model untouched. Use eventstorming_create_command_flow
to add a whole actor -> command -> aggregate / event slice in one call.
"""


class ElementSpec(BaseModel):
    """A guard or precondition attached to a command."""

    id: str
    label: str
    description: Optional[str] = None


def render(result: Any) -> str:
    if isinstance(result, str):
        return result
    return json.dumps(to_wire(result), indent=2)


def _extended(**values: Optional[str]) -> Dict[str, str]:
    fields = {camel_case(k): v for k, v in values.items() if v is not None}
    return {k: v for k, v in fields.items() if k in EXTENDED_FIELDS}


def create_server(
    engine: Optional[EventStormingEngine] = None,
    snapshot_file: str = DEFAULT_SNAPSHOT_FILE,
) -> FastMCP:
    """Create the MCP server with all tools registered.

    Args:
        engine: Engine the tools operate on; a fresh one when omitted.
        snapshot_file: Default path for the load/save file tools.

    Returns:
        FastMCP server instance.
    """
    engine = engine or EventStormingEngine()
    mcp = FastMCP("stormgraph", instructions=SERVER_INSTRUCTIONS)

    def tool(name: str):
        def decorator(fn):
            logger.debug("registering tool %s", name)
            return mcp.tool(name=name, structured_output=False)(fn)

        return decorator

    # ─────────────────────────────────────────────────────────────────
    # Query & analysis
    # ─────────────────────────────────────────────────────────────────

    @tool("eventstorming_get_graph")
    def get_graph() -> str:
        """Get the complete EventStorming graph with all nodes and edges."""
        return render(engine.get_graph())

    @tool("eventstorming_get_nodes_by_type")
    def get_nodes_by_type(node_type: NodeTypeName) -> str:
        """Get all nodes of a specific EventStorming type.

        Args:
            node_type: Type of EventStorming element.
        """
        return render(engine.get_nodes_by_type(node_type))

    @tool("eventstorming_get_process_flow")
    def get_process_flow(command_id: str) -> str:
        """Get the complete process flow for a command.

        Includes actor, aggregate, guards, preconditions, events,
        branching logic and triggered policies.

        Args:
            command_id: ID of the command node.
        """
        flow = engine.get_process_flow(command_id)
        if flow is None:
            return f"Command '{command_id}' not found or is not a command node"
        return render(flow)

    @tool("eventstorming_get_aggregate_view")
    def get_aggregate_view(aggregate_id: str) -> str:
        """Get everything that happens to an aggregate.

        Args:
            aggregate_id: ID of the aggregate node.
        """
        view = engine.get_aggregate_view(aggregate_id)
        if view is None:
            return f"Aggregate '{aggregate_id}' not found or is not an aggregate node"
        return render(view)

    @tool("eventstorming_validate_graph")
    def validate_graph() -> str:
        """Validate the graph structure and report errors and warnings."""
        return render(engine.validate_graph())

    @tool("eventstorming_get_statistics")
    def get_statistics() -> str:
        """Get node and edge counts broken down by type and label."""
        return render(engine.get_statistics())

    @tool("eventstorming_get_processes_by_event")
    def get_processes_by_event(event_id: str) -> str:
        """Find all process flows that produce a given event.

        Args:
            event_id: ID of the event node.
        """
        return render(engine.get_processes_by_event(event_id))

    @tool("eventstorming_get_aggregates_by_actor")
    def get_aggregates_by_actor(actor_id: str) -> str:
        """Find all aggregates an actor interacts with.

        Args:
            actor_id: ID of the actor node.
        """
        return render(engine.get_aggregates_by_actor(actor_id))

    @tool("eventstorming_get_all_process_flows")
    def get_all_process_flows() -> str:
        """Get the process flow of every command."""
        return render(engine.get_all_process_flows())

    @tool("eventstorming_get_all_aggregate_views")
    def get_all_aggregate_views() -> str:
        """Get the view of every aggregate."""
        return render(engine.get_all_aggregate_views())

    @tool("eventstorming_detect_circular_dependencies")
    def detect_circular_dependencies() -> str:
        """Detect cycles in the event flow that could cause infinite loops."""
        return render(engine.detect_circular_dependencies())

    @tool("eventstorming_get_change_impact_analysis")
    def get_change_impact_analysis(node_id: str) -> str:
        """Analyze what would be affected by changing a node.

        Args:
            node_id: ID of the node.
        """
        return render(engine.get_change_impact_analysis(node_id))

    @tool("eventstorming_find_critical_nodes")
    def find_critical_nodes() -> str:
        """Find the most connected nodes in the graph."""
        return render(engine.find_critical_nodes())

    @tool("eventstorming_validate_methodology")
    def validate_methodology() -> str:
        """Check the model against EventStorming methodology rules."""
        return render(engine.validate_event_storming_methodology())

    @tool("eventstorming_get_command_execution_paths")
    def get_command_execution_paths(command_id: str) -> str:
        """Enumerate the execution paths from a command to its events.

        Args:
            command_id: ID of the command node.
        """
        return render(engine.get_command_execution_paths(command_id))

    @tool("eventstorming_analyze_aggregate_health")
    def analyze_aggregate_health(aggregate_id: str) -> str:
        """Assess the cohesion and consistency of an aggregate.

        Args:
            aggregate_id: ID of the aggregate node.
        """
        return render(engine.analyze_aggregate_health(aggregate_id))

    @tool("eventstorming_get_graph_health_metrics")
    def get_graph_health_metrics() -> str:
        """Get overall, methodology and complexity health metrics."""
        return render(engine.get_graph_health_metrics())

    # ─────────────────────────────────────────────────────────────────
    # Mutations
    # ─────────────────────────────────────────────────────────────────

    @tool("eventstorming_add_node")
    def add_node(
        id: str,
        label: str,
        type: NodeTypeName,
        description: Optional[str] = None,
        business_context: Optional[str] = None,
        assertion: Optional[str] = None,
        core_command: Optional[str] = None,
        shell_command: Optional[str] = None,
        hydration_function: Optional[str] = None,
        outcome_assertions: Optional[str] = None,
        example_state: Optional[str] = None,
        domain_model: Optional[str] = None,
    ) -> str:
        """Add a new node to the EventStorming graph.

        Args:
            id: Unique identifier for the node (kebab-case).
            label: Human-readable label for the node.
            type: Type of EventStorming element.
            description: Optional description of the node.
            business_context: Markdown business documentation.
            assertion: Decision model assertion code.
            core_command: Core command type definition.
            shell_command: Shell command type definition.
            hydration_function: Hydration function code.
            outcome_assertions: Event outcome assertions.
            example_state: Example aggregate state.
            domain_model: Domain model type definition.
        """
        data: Dict[str, Any] = {"id": id, "label": label, "type": type}
        if description is not None:
            data["description"] = description
        data.update(
            _extended(
                business_context=business_context,
                assertion=assertion,
                core_command=core_command,
                shell_command=shell_command,
                hydration_function=hydration_function,
                outcome_assertions=outcome_assertions,
                example_state=example_state,
                domain_model=domain_model,
            )
        )
        return render(engine.add_node(data))

    @tool("eventstorming_add_edge")
    def add_edge(source: str, target: str, label: EdgeLabelName) -> str:
        """Add a new connection between two nodes.

        Args:
            source: ID of the source node.
            target: ID of the target node.
            label: Type of relationship between nodes.
        """
        return render(engine.add_edge({"source": source, "target": target, "label": label}))

    @tool("eventstorming_remove_node")
    def remove_node(node_id: str) -> str:
        """Remove a node and all its connections from the graph.

        Args:
            node_id: ID of the node to remove.
        """
        return render(engine.remove_node(node_id))

    @tool("eventstorming_update_node_extended_fields")
    def update_node_extended_fields(
        node_id: str,
        business_context: Optional[str] = None,
        assertion: Optional[str] = None,
        core_command: Optional[str] = None,
        shell_command: Optional[str] = None,
        hydration_function: Optional[str] = None,
        outcome_assertions: Optional[str] = None,
        example_state: Optional[str] = None,
        domain_model: Optional[str] = None,
    ) -> str:
        """Update a node with extended fields like businessContext, assertion, etc.

        Args:
            node_id: ID of the node to update.
        """
        fields = _extended(
            business_context=business_context,
            assertion=assertion,
            core_command=core_command,
            shell_command=shell_command,
            hydration_function=hydration_function,
            outcome_assertions=outcome_assertions,
            example_state=example_state,
            domain_model=domain_model,
        )
        return render(engine.update_node_extended_fields(node_id, fields))

    @tool("eventstorming_create_command_flow")
    def create_command_flow(
        actor_id: str,
        actor_label: str,
        command_id: str,
        command_label: str,
        aggregate_id: str,
        aggregate_label: str,
        event_id: str,
        event_label: str,
        description: Optional[str] = None,
    ) -> str:
        """Create a complete actor -> command -> aggregate / event flow in one step."""
        return render(
            engine.create_command_flow(
                actor_id=actor_id,
                actor_label=actor_label,
                command_id=command_id,
                command_label=command_label,
                aggregate_id=aggregate_id,
                aggregate_label=aggregate_label,
                event_id=event_id,
                event_label=event_label,
                description=description,
            )
        )

    @tool("eventstorming_add_command_guards")
    def add_command_guards(command_id: str, guards: List[ElementSpec]) -> str:
        """Attach guard nodes to a command.

        Args:
            command_id: ID of the command node.
            guards: Guards to create and connect with ``if guard``.
        """
        return render(
            engine.add_command_guards(command_id, [g.model_dump(exclude_none=True) for g in guards])
        )

    @tool("eventstorming_add_command_preconditions")
    def add_command_preconditions(command_id: str, preconditions: List[ElementSpec]) -> str:
        """Attach precondition nodes to a command.

        Args:
            command_id: ID of the command node.
            preconditions: Preconditions to create and connect with ``if preconditions``.
        """
        return render(
            engine.add_command_preconditions(
                command_id, [p.model_dump(exclude_none=True) for p in preconditions]
            )
        )

    # ─────────────────────────────────────────────────────────────────
    # Files
    # ─────────────────────────────────────────────────────────────────

    @tool("eventstorming_load_from_file")
    def load_from_file(file_path: Optional[str] = None) -> str:
        """Load the graph from the snapshot file (or a custom path).

        Args:
            file_path: Path to a JSON snapshot.
        """
        path = Path(file_path or snapshot_file)
        if not path.exists():
            return f"File '{path}' does not exist"
        return render(engine.import_json(path.read_text(encoding="utf-8")))

    @tool("eventstorming_save_to_file")
    def save_to_file(file_path: Optional[str] = None) -> str:
        """Save the graph to the snapshot file (or a custom path).

        Args:
            file_path: Path to write the JSON snapshot to.
        """
        path = Path(file_path or snapshot_file)
        path.write_text(engine.export_json(), encoding="utf-8")
        logger.info("saved graph to %s", path)
        return render({"success": True, "path": str(path)})

    # ─────────────────────────────────────────────────────────────────
    # Insights
    # ─────────────────────────────────────────────────────────────────

    @tool("eventstorming_analyze_system_overview")
    def analyze_system_overview() -> str:
        """Summarize the whole model: size, health, critical nodes, cycles and validation."""
        return render(engine.get_system_overview())

    @tool("eventstorming_suggest_improvements")
    def suggest_improvements() -> str:
        """Suggest concrete improvements to the model."""
        return render(engine.suggest_improvements())

    @tool("eventstorming_explain_node_context")
    def explain_node_context(node_id: str) -> str:
        """Explain a node's role, its connections and the impact of changing it.

        Args:
            node_id: ID of the node.
        """
        context = engine.explain_node_context(node_id)
        if context is None:
            return f"Node '{node_id}' not found"
        return render(context)

    return mcp


def run_server(
    engine: Optional[EventStormingEngine] = None,
    snapshot_file: str = DEFAULT_SNAPSHOT_FILE,
    transport: str = "stdio",
) -> None:
    """Run the MCP server.

    Args:
        engine: Engine to expose; loads ``snapshot_file`` into a fresh one when omitted.
        snapshot_file: Default path for the load/save file tools.
        transport: Transport type ('stdio' or 'sse').
    """
    if engine is None:
        engine = EventStormingEngine()
        path = Path(snapshot_file)
        if path.exists():
            result = engine.import_json(path.read_text(encoding="utf-8"))
            logger.info("loaded %s (valid=%s)", path, result.is_valid)
    create_server(engine, snapshot_file).run(transport=transport)
