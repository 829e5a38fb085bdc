"""Tagged logging helper shared by the simulator modules.

Every message carries a level and a subsystem tag, with optional key=value
fields appended so tick-level events stay greppable. Float fields print with
three decimals and 3D vectors as (x, y, z), so callers can pass walker
positions and timings straight through.
"""
from __future__ import annotations

import logging
from typing import Any

import numpy as np

_logger = logging.getLogger("stridebeats")
if not _logger.handlers:
    handler = logging.StreamHandler()
    formatter = logging.Formatter("[%(levelname)s][%(tag)s] %(message)s")
    handler.setFormatter(formatter)
    _logger.addHandler(handler)
    _logger.setLevel(logging.INFO)

_LEVEL_ALIASES = {"WARN": "WARNING", "FATAL": "CRITICAL"}
_VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class _TagAdapter(logging.LoggerAdapter):
    def process(self, msg: Any, kwargs: dict[str, Any]):
        tag = kwargs.pop("tag", "Walk")
        kwargs.setdefault("extra", {})["tag"] = tag
        return msg, kwargs


_logger_adapter = _TagAdapter(_logger, {})


def _level_name(level: str | None) -> str | None:
    name = (level or "").strip().upper()
    name = _LEVEL_ALIASES.get(name, name)
    return name if name in _VALID_LEVELS else None


def format_field(value: Any) -> str:
    """Render one key=value field: floats to 3 decimals, vectors as (x, y, z)."""
    if isinstance(value, np.ndarray) and value.shape == (3,):
        return f"({value[0]:.3f}, {value[1]:.3f}, {value[2]:.3f})"
    if isinstance(value, float):
        return f"{value:.3f}"
    return str(value)


def log_event(level: str, tag: str, message: str, **fields: Any) -> None:
    """Log a message with level+tag, appending key=value fields when provided."""
    level_val = getattr(logging, _level_name(level) or "INFO")
    if not _logger.isEnabledFor(level_val):
        return
    if fields:
        extras = " ".join(f"{k}={format_field(v)}" for k, v in fields.items())
        message = f"{message} | {extras}"
    _logger_adapter.log(level_val, message, tag=tag)


def set_log_level(level: str | None) -> str:
    """Set global log level from a CLI flag or config.log_level.

    Unknown names fall back to INFO with a warning. Returns the level applied."""
    name = _level_name(level)
    if name is None:
        _logger.setLevel(logging.INFO)
        log_event("WARN", "Log", "Unknown log level, using INFO", requested=level)
        return "INFO"
    _logger.setLevel(getattr(logging, name))
    return name
