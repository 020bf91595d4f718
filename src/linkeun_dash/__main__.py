from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler

import uvicorn

from linkeun_dash.app import create_app
from linkeun_dash.config import load_dash_config
from linkeun_dash.home import ensure_linkeun_layout, resolve_linkeun_home


def main() -> None:
    home = resolve_linkeun_home()
    paths = ensure_linkeun_layout(home)
    config = load_dash_config(paths)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            RotatingFileHandler(
                paths.log_path,
                maxBytes=config.logging.max_size_mb * 1024 * 1024,
                backupCount=config.logging.backup_count,
            ),
            logging.StreamHandler(),
        ],
    )

    host = os.environ.get("LINKEUN_BIND") or config.network.bind_host

    env_port = os.environ.get("LINKEUN_PORT")
    port = int(env_port) if env_port else config.network.port

    uvicorn.run(create_app(), host=host, port=port, proxy_headers=config.is_production)


if __name__ == "__main__":
    main()
