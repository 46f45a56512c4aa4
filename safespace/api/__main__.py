"""
safespace.api.__main__ — ``python -m safespace.api``
=====================================================

Configures logging, reads the port from ``config.yaml`` and serves the
app with uvicorn.
"""

from __future__ import annotations

import logging

import uvicorn
from dotenv import load_dotenv


def main() -> None:
    load_dotenv()
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    # Quiet the chattiest third-party loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    from safespace.api.deps import get_config

    cfg = get_config()
    logging.getLogger(__name__).info("Starting %s on port %d", cfg.app_name, cfg.api_port)
    uvicorn.run("safespace.api.main:app", host="0.0.0.0", port=cfg.api_port)


if __name__ == "__main__":
    main()
