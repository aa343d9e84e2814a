#!/usr/bin/env python3
"""Main entry point for the car inventory demo service.

This module loads configuration and starts the HTTP server.
"""

import logging
import sys
from pathlib import Path

from transform_table.app import run_server
from transform_table.config import Config, ConfigError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger(__name__)


def main():
    """Main entry point for the application."""
    logger.info("Starting car inventory service...")

    try:
        logger.info("Loading configuration...")
        config_file = "config.toml" if Path("config.toml").exists() else None
        config = Config.from_env_and_file(config_file)

        logger.info(f"Starting HTTP server on port {config.listen_port}...")
        logger.info(
            f"DataTables by default: {'enabled' if config.datatable else 'disabled'}"
        )
        logger.info("Service is ready to accept requests")

        run_server(config)

    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        logger.error("Please check your configuration and try again")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Shutting down gracefully...")
        sys.exit(0)
    except Exception as e:
        logger.exception(f"Unexpected error during startup: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
