"""Logging setup for the seasonality testing toolkit.

Provides a factory function to create configured loggers with
consistent formatting across all modules.
"""

from __future__ import annotations

import logging

from harmonic_seasonality.utils.config import Config, load_config


def setup_logger(
    name: str,
    config_path: str = "configs/config.yaml",
    config: Config | None = None,
) -> logging.Logger:
    """Create and configure a logger instance.

    Args:
        name: Logger name, typically ``__name__`` of the calling module
            or the package name to configure every module at once.
        config_path: Path to the YAML configuration file, read only
            when ``config`` is not given.
        config: Already loaded configuration.

    Returns:
        Configured logger instance with a single stream handler.
    """
    if config is None:
        config = load_config(config_path)
    logger = logging.getLogger(name)
    logger.setLevel(config.logging["level"])

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(config.logging["format"]))
        logger.addHandler(handler)

    return logger
