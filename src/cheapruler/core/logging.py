"""
Logging setup for the `cheapruler` package and CLI.

The packaged `config/logging.yaml` is applied with `dictConfig`. One level, from the
CLI's `--log-level` or else `settings.app.log_level`, is set on the root logger, the
`cheapruler` package logger and every handler that declares a level.
"""

from __future__ import annotations

import copy
import logging.config

from cheapruler.config.settings import get_logging_config, get_settings

PACKAGE_LOGGER = "cheapruler"


def configure_logging(level: str | None = None) -> str:
    """Apply the packaged logging config and return the level name used."""
    # The loaded config is cached; never mutate it in place.
    config = copy.deepcopy(get_logging_config())
    level = (level or get_settings().app.log_level).upper()

    config.setdefault("root", {})["level"] = level
    config.setdefault("loggers", {}).setdefault(PACKAGE_LOGGER, {})["level"] = level
    for handler in config.get("handlers", {}).values():
        if isinstance(handler, dict) and "level" in handler:
            handler["level"] = level

    logging.config.dictConfig(config)
    return level
