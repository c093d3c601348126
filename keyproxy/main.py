"""
Main application entry point for KeyProxy.

Loads configuration from the environment, refuses to start on an unusable
configuration, and serves the API with uvicorn.
"""

import logging
import sys
from typing import Optional

import uvicorn

from .config import ConfigValidator, EnvironmentLoader, ProxyConfig
from .exceptions import ConfigurationError, handle_unexpected_error

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging to stdout."""
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def load_config() -> ProxyConfig:
    """Load and validate configuration.

    Raises:
        ConfigurationError: If validation finds any problem
    """
    config = EnvironmentLoader.load_config()

    errors = ConfigValidator.validate_config(config)
    if errors:
        for error in errors:
            logger.error(f"Configuration error: {error}")
        raise ConfigurationError("Invalid configuration", errors=errors)

    return config


def run(config: Optional[ProxyConfig] = None) -> None:
    """Run the server."""
    setup_logging()

    try:
        config = config or load_config()
        logging.getLogger().setLevel(config.log_level.value)

        from .api import ProxyServer
        server = ProxyServer(config)
    except ConfigurationError as e:
        logger.critical(f"Refusing to start: {e.message}")
        sys.exit(1)
    except Exception as e:
        error = handle_unexpected_error(e)
        logger.critical(f"Failed to initialize application: {error.to_log_string()}")
        raise

    logger.info(f"Server running on {config.server.host}:{config.server.port}")
    uvicorn.run(server.app, host=config.server.host, port=config.server.port)


if __name__ == "__main__":
    run()
