"""Application entrypoint."""

from __future__ import annotations

import uvicorn

from sma_signal_service.app.logger import setup_logger
from sma_signal_service.web import server


def main() -> None:
    config = server.APP_CONFIG
    logger = setup_logger(config.logging.log_dir, config.logging.level)
    logger.info("Starting signal service on {}:{}", config.server.host, config.server.port)
    try:
        uvicorn.run(server.app, host=config.server.host, port=config.server.port, log_config=None)
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user")


if __name__ == "__main__":
    main()
