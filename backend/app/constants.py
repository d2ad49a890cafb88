DEFAULTS = {
    # Service title shown in the OpenAPI docs
    "APP_NAME": "stormgraph-backend",
    # Prefix applied to every router
    "API_PREFIX": "",
    # Snapshot bulk-loaded at startup when the file exists ("" = start empty)
    "SNAPSHOT_PATH": "ubistorming.json",
    # Node ids not matching this pattern produce a warning
    "VALIDATION_ID_PATTERN": r"^[a-z0-9\-_]+$",
    # Total reach above which a change is HIGH risk
    "ANALYSIS_RISK_HIGH_REACH": 10,
    # Total reach above which a change is MEDIUM risk
    "ANALYSIS_RISK_MEDIUM_REACH": 5,
    # Degree centrality above which a node is HIGH criticality
    "ANALYSIS_CRITICALITY_HIGH": 20,
    # Degree centrality above which a node is MEDIUM criticality
    "ANALYSIS_CRITICALITY_MEDIUM": 10,
    # Maximum node count of an enumerated path
    "ANALYSIS_MAX_PATH_LENGTH": 10,
    # Maximum node count of a command execution path
    "ANALYSIS_EXECUTION_PATH_MAX_LENGTH": 5,
    # Critical nodes listed in the system overview
    "ANALYSIS_TOP_CRITICAL_NODES": 5,
    # Seconds a forwarded operation waits for its response
    "BRIDGE_REQUEST_TIMEOUT": 5.0,
    # first_connected | reject_additional
    "BRIDGE_ROUTING_POLICY": "first_connected",
    # Default backend API URL for clients
    "API_URL": "http://localhost:8000",
}
