from __future__ import annotations

import logging
import os

import uvicorn

from accounts_core.app import LOG_FORMAT, build_log_file_handler, create_app
from accounts_core.config import load_core_config, resolve_configured_paths
from accounts_core.home import ensure_accounts_layout, resolve_accounts_home


def main() -> None:
    home = resolve_accounts_home()
    paths = ensure_accounts_layout(home)
    config = load_core_config(paths)
    paths = resolve_configured_paths(paths, config)

    logging.basicConfig(
        level=logging.INFO,
        format=LOG_FORMAT,
        handlers=[
            build_log_file_handler(paths.logs_dir / "core.log", config.logging),
            logging.StreamHandler(),
        ],
    )

    host = os.environ.get("ACCOUNTS_BIND") or config.network.bind_host

    env_port = os.environ.get("ACCOUNTS_PORT")
    port = int(env_port) if env_port else config.network.core_port

    uvicorn.run(create_app(), host=host, port=port)


if __name__ == "__main__":
    main()
