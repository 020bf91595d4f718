from linkeun_dash.config import DashConfig, load_dash_config
from linkeun_dash.home import LinkeunPaths, ensure_linkeun_layout, resolve_linkeun_home

__version__ = "0.1.0"

__all__ = [
    "DashConfig",
    "LinkeunPaths",
    "__version__",
    "ensure_linkeun_layout",
    "load_dash_config",
    "resolve_linkeun_home",
]
