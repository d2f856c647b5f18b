"""Logging setup for the codec.

Handlers and levels come from ``configs/logging.yaml`` (or the file named by
``JSONMAPPER_LOGGING_CONFIG``); a console-only configuration is used when the
file is absent or unreadable. Conversion warnings are emitted under the
``jsonmapper.codec`` logger.
"""

from __future__ import annotations

import copy
import logging
import logging.config
import os
from pathlib import Path
from threading import RLock
from typing import Any

from jsonmapper.utils.config import load_config

CONFIG_ENV_VAR = "JSONMAPPER_LOGGING_CONFIG"

_CONFIG_LOCK = RLock()
_CONFIGURED = False

_DEFAULT_CONFIG: dict[str, Any] = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "codec": {"format": "%(asctime)s %(levelname)s [%(name)s] %(message)s"},
    },
    "handlers": {
        "stderr": {
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stderr",
            "formatter": "codec",
        }
    },
    "loggers": {
        "jsonmapper": {"level": "INFO", "handlers": ["stderr"], "propagate": False},
    },
}

_DICT_CONFIG_KEYS = frozenset(
    {"version", "disable_existing_loggers", "incremental", "formatters", "filters", "handlers", "root", "loggers"}
)


def default_config_path() -> Path:
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override)
    return Path(__file__).resolve().parents[2] / "configs" / "logging.yaml"


def build_config(path: str | Path | None = None) -> dict[str, Any]:
    """Return the ``dictConfig`` mapping read from ``path``.

    Keys ``dictConfig`` does not understand are dropped. A missing or
    malformed file yields the built-in console configuration.
    """

    config = copy.deepcopy(_DEFAULT_CONFIG)
    config_path = Path(path) if path is not None else default_config_path()
    try:
        data = load_config(config_path)
    except FileNotFoundError:
        return config
    except ValueError as exc:
        logging.getLogger("jsonmapper.telemetry").warning(
            "ignoring logging config %s: %s", config_path, exc
        )
        return config
    config.update({key: value for key, value in data.items() if key in _DICT_CONFIG_KEYS})
    return config


def configure(path: str | Path | None = None, *, force: bool = False) -> None:
    """Apply the logging configuration once; ``force`` re-applies it."""

    global _CONFIGURED
    with _CONFIG_LOCK:
        if _CONFIGURED and not force:
            return
        logging.config.dictConfig(build_config(path))
        _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    if not isinstance(name, str) or not name:
        raise ValueError("logger name must be a non-empty string")
    configure()
    return logging.getLogger(name)


__all__ = ["CONFIG_ENV_VAR", "build_config", "configure", "default_config_path", "get_logger"]
