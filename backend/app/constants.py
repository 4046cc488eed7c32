DEFAULTS = {
    # FastAPI application title
    "APP_NAME": "flowscaffold-backend",
    # Prefix in front of every router
    "API_PREFIX": "",
    # Flow identity used when a request does not name one
    "DEFAULT_FLOW_ID": "default:main",
    # Maximum snapshots kept per flow before the oldest are evicted
    "HISTORY_MAX_SNAPSHOTS": 50,
    # Layout direction: LR (left to right) or TB (top to bottom)
    "LAYOUT_DIRECTION": "LR",
    # Node box used by the layout
    "LAYOUT_NODE_WIDTH": 172,
    "LAYOUT_NODE_HEIGHT": 70,
    # Gap between ranks / between nodes in a rank
    "LAYOUT_RANK_SPACING": 50,
    "LAYOUT_NODE_SPACING": 40,
    # Per-axis distance under which a layout move is ignored
    "LAYOUT_POSITION_TOLERANCE": 0.01,
    # Persistence backend: memory | json
    "STORAGE_BACKEND": "json",
    # Directory holding one JSON document per flow
    "STORAGE_DATA_DIR": "data/flows",
    # Optional JSON flow loaded when the default flow is empty at startup
    "SEED_FLOW_PATH": "",
}
