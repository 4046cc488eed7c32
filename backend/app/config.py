from dataclasses import dataclass
from dynaconf import Dynaconf
from backend.app.constants import DEFAULTS

from flowscaffold.config.settings import (
    HistoryConfig,
    LayoutConfig,
    StorageConfig,
    FlowScaffoldConfig,
)

settings = Dynaconf(
    envvar_prefix="FLOWSCAFFOLD",
    load_dotenv=True,
    settings_files=[],
)


def _setting(key: str):
    return settings.get(key, DEFAULTS[key])


@dataclass(frozen=True)
class AppConfig:
    # ---------------- App ----------------
    app_name: str = _setting("APP_NAME")
    api_prefix: str = _setting("API_PREFIX")

    # ---------------- Seed ----------------
    seed_flow_path: str = _setting("SEED_FLOW_PATH")

    # ---------------- Flowscaffold Policy ----------------
    scaffold: FlowScaffoldConfig = FlowScaffoldConfig(
        history=HistoryConfig(
            max_snapshots=int(_setting("HISTORY_MAX_SNAPSHOTS")),
        ),
        layout=LayoutConfig(
            direction=_setting("LAYOUT_DIRECTION"),
            node_width=float(_setting("LAYOUT_NODE_WIDTH")),
            node_height=float(_setting("LAYOUT_NODE_HEIGHT")),
            rank_spacing=float(_setting("LAYOUT_RANK_SPACING")),
            node_spacing=float(_setting("LAYOUT_NODE_SPACING")),
            position_tolerance=float(_setting("LAYOUT_POSITION_TOLERANCE")),
        ),
        storage=StorageConfig(
            backend=_setting("STORAGE_BACKEND"),
            data_dir=_setting("STORAGE_DATA_DIR"),
        ),
        default_flow_id=_setting("DEFAULT_FLOW_ID"),
    )
