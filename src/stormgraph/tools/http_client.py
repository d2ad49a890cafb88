from typing import Any, Dict, List, Optional

import requests


def _get(api_url: str, path: str, params: Optional[Dict[str, Any]] = None, timeout: int = 20) -> Any:
    r = requests.get(f"{api_url}{path}", params=params, timeout=timeout)
    r.raise_for_status()
    return r.json()


def _send(method: str, api_url: str, path: str, payload: Any = None, params=None, timeout: int = 20) -> Any:
    r = requests.request(method, f"{api_url}{path}", json=payload, params=params, timeout=timeout)
    r.raise_for_status()
    return r.json()


# ---------------- Graph ----------------


def fetch_graph(api_url: str) -> Dict[str, Any]:
    return _get(api_url, "/graph", timeout=60)


def load_graph(api_url: str, snapshot: Dict[str, Any]) -> Dict[str, Any]:
    return _send("PUT", api_url, "/graph", snapshot, timeout=60)


def fetch_graph_stats(api_url: str) -> Dict[str, Any]:
    return _get(api_url, "/graph/stats")


def fetch_nodes(api_url: str, node_type: Optional[str] = None) -> List[Dict[str, Any]]:
    params = {"type": node_type} if node_type else None
    return _get(api_url, "/graph/nodes", params)


def add_node(api_url: str, node: Dict[str, Any]) -> Dict[str, Any]:
    return _send("POST", api_url, "/graph/nodes", node)


def update_node(api_url: str, node_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
    return _send("PATCH", api_url, f"/graph/nodes/{node_id}", updates)


def remove_node(api_url: str, node_id: str) -> Dict[str, Any]:
    return _send("DELETE", api_url, f"/graph/nodes/{node_id}")


def add_edge(api_url: str, source: str, target: str, label: str) -> Dict[str, Any]:
    return _send("POST", api_url, "/graph/edges", {"source": source, "target": target, "label": label})


def remove_edge(api_url: str, source: str, target: str, label: str) -> Dict[str, Any]:
    params = {"source": source, "target": target, "label": label}
    return _send("DELETE", api_url, "/graph/edges", params=params)


def create_command_flow(api_url: str, flow: Dict[str, Any]) -> Dict[str, Any]:
    return _send("POST", api_url, "/graph/command-flow", flow)


# ---------------- Analysis ----------------


def fetch_validation(api_url: str) -> Dict[str, Any]:
    return _get(api_url, "/analysis/validation")


def fetch_methodology(api_url: str) -> Dict[str, Any]:
    return _get(api_url, "/analysis/methodology")


def fetch_health(api_url: str) -> Dict[str, Any]:
    return _get(api_url, "/analysis/health")


def fetch_overview(api_url: str) -> Dict[str, Any]:
    return _get(api_url, "/analysis/overview")


def fetch_process_flow(api_url: str, command_id: str) -> Dict[str, Any]:
    return _get(api_url, f"/analysis/process-flows/{command_id}")


def fetch_change_impact(api_url: str, node_id: str) -> Dict[str, Any]:
    return _get(api_url, f"/analysis/impact/{node_id}")


# ---------------- Bridge ----------------


def fetch_bridge_status(api_url: str) -> Dict[str, Any]:
    return _get(api_url, "/bridge/status")


def forward_operation(
    api_url: str,
    op_type: str,
    fields: Optional[Dict[str, Any]] = None,
    timeout: Optional[float] = None,
) -> Any:
    payload: Dict[str, Any] = {"type": op_type, "fields": fields or {}}
    if timeout is not None:
        payload["timeout"] = timeout
    # Leave headroom over the bridge's own timeout.
    return _send("POST", api_url, "/bridge/operations", payload, timeout=int((timeout or 5) + 10))
