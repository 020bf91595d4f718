from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class LinkeunPaths:
    home: Path
    logs_dir: Path
    config_dir: Path

    @property
    def dash_config_path(self) -> Path:
        return self.config_dir / "dash.json"

    @property
    def log_path(self) -> Path:
        return self.logs_dir / "dash.log"


def resolve_linkeun_home(environ: dict[str, str] | None = None) -> Path:
    env = os.environ if environ is None else environ

    raw = (env.get("LINKEUN_HOME") or "").strip()
    if raw:
        candidate = Path(raw).expanduser()
        # Relative values are anchored at the user's home, never the CWD.
        if not candidate.is_absolute():
            candidate = (Path.home() / candidate).resolve()
        else:
            candidate = candidate.resolve()
        return candidate

    def default_home() -> Path:
        if sys.platform.startswith("win"):
            base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA")
            if base:
                return Path(base) / "LinkeunDash"
            return Path.home() / "AppData" / "Local" / "LinkeunDash"

        if sys.platform == "darwin":
            return Path.home() / "Library" / "Application Support" / "LinkeunDash"

        xdg = os.environ.get("XDG_DATA_HOME")
        if xdg:
            return Path(xdg) / "linkeun-dash"
        return Path.home() / ".local" / "share" / "linkeun-dash"

    return default_home().resolve()


def ensure_linkeun_layout(home: Path) -> LinkeunPaths:
    home.mkdir(parents=True, exist_ok=True)

    logs_dir = home / "logs"
    config_dir = home / "config"

    for path in (logs_dir, config_dir):
        path.mkdir(parents=True, exist_ok=True)

    return LinkeunPaths(home=home, logs_dir=logs_dir, config_dir=config_dir)
