"""Python-standard logging configuration for spam-guard.

Applications embedding spam-guard normally configure logging themselves and
only need ``logging.getLogger("spam_guard")``. ``setup_logging`` is provided
for standalone use and tests: it applies the packaged YAML configuration via
``logging.config.dictConfig()``.
"""

from __future__ import annotations

import logging
import logging.config
import sys
from importlib import resources
from pathlib import Path
from typing import Any

import yaml


class LoggingError(Exception):
    """Exception raised for logging configuration errors."""

    pass


def load_config(config_path: Path | None = None) -> dict[str, Any]:
    """Load logging configuration from a YAML file.

    Args:
        config_path: Path to the YAML configuration file. Defaults to the
            configuration packaged with spam-guard.

    Returns:
        Logging configuration dictionary

    Raises:
        LoggingError: If configuration cannot be loaded or parsed

    """
    try:
        if config_path is None:
            text = (
                resources.files("spam_guard")
                .joinpath("config", "logging.yaml")
                .read_text(encoding="utf-8")
            )
        else:
            text = config_path.read_text(encoding="utf-8")
        config = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise LoggingError(f"Failed to parse logging config: {e}") from e
    except OSError as e:
        raise LoggingError(f"Failed to read logging config: {e}") from e

    if not isinstance(config, dict):
        raise LoggingError(f"Invalid logging configuration format in {config_path}")

    return config  # type: ignore[return-value]


def setup_logging(
    config_path: Path | str | None = None,
    level: str | None = None,
    force_basic: bool = False,
) -> None:
    """Configure logging using Python standard dictConfig.

    Falls back to basic console logging if the configuration cannot be
    applied; this function never raises.

    Args:
        config_path: Path to logging configuration file
        level: Override log level for spam-guard loggers (DEBUG, INFO, ...)
        force_basic: Force basic console logging (fallback mode)

    """
    if force_basic:
        _setup_basic_logging(level or "INFO")
        return

    try:
        if isinstance(config_path, str):
            config_path = Path(config_path)

        config = load_config(config_path)

        if level:
            if not isinstance(getattr(logging, level.upper(), None), int):
                raise LoggingError(f"Invalid log level: {level}")
            for logger_name in config.get("loggers", {}):
                config["loggers"][logger_name]["level"] = level.upper()

        logging.config.dictConfig(config)
        logging.getLogger(__name__).debug("Logging configured for spam-guard")

    except (LoggingError, KeyError, ValueError, TypeError) as e:
        fallback_level = level or "INFO"
        _setup_basic_logging(fallback_level)
        logging.getLogger(__name__).warning(
            "Failed to configure logging from file (%s), using basic console logging at %s level",
            e,
            fallback_level,
        )


def _setup_basic_logging(level: str) -> None:
    """Set up basic console logging as fallback.

    Args:
        level: Logging level string

    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
        force=True,
    )
