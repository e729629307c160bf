"""
Startup for the Adaptive Complexity Engine

Loads the configuration and applies its logging section to the package
logger. Callers that build engines from the application configuration go
through here so that file and environment logging settings take effect.
"""

import logging
from typing import Optional

from adaptive_complexity.common.config import AppConfig, get_config, reload_config
from adaptive_complexity.common.logger import APP_LOGGER_NAME, configure_logger

logger = logging.getLogger(__name__)


def setup_logging(config: Optional[AppConfig] = None) -> logging.Logger:
    """
    Configure the package logger from the ``logging`` config section.

    Args:
        config: Configuration to apply (the loaded configuration by default)

    Returns:
        The package logger
    """
    log_config = (config or get_config()).logging
    configured = configure_logger(
        level=log_config.level,
        use_json=log_config.json_output,
        log_file=log_config.file_path,
        name=APP_LOGGER_NAME
    )
    configured.debug(
        f"Logging configured: level={log_config.level} json={log_config.json_output} "
        f"file={log_config.file_path}"
    )
    return configured


def initialize(config_path: Optional[str] = None) -> AppConfig:
    """
    Load configuration and set up logging.

    Args:
        config_path: Config file to load instead of ``CONFIG_PATH``

    Returns:
        The loaded configuration

    Raises:
        ConfigurationError: If the configuration is invalid
    """
    config = reload_config(config_path) if config_path else get_config()
    setup_logging(config)
    logger.info(f"Adaptive complexity engine initialized ({config.environment.env})")
    return config
