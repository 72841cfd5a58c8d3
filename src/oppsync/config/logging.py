"""Logging set-up shared by the CLI and tests."""

from __future__ import annotations

import logging
import os

from .errors import ConfigurationError


def _level_from_env(default: int) -> int:
    raw = os.getenv("LOG_LEVEL")
    if raw is None or not raw.strip():
        return default
    name = raw.strip().upper()
    level = logging.getLevelNamesMapping().get(name)
    if level is None:
        raise ConfigurationError(f"Unknown LOG_LEVEL: {raw!r}")
    return level


def configure_logging(*, level: int | None = None, force: bool = False) -> None:
    """Initialise the root logger once with sensible defaults.

    Without an explicit ``level`` the ``LOG_LEVEL`` environment variable is used,
    falling back to INFO. Pass ``force=True`` to reconfigure during tests.
    """

    logging.basicConfig(
        level=level if level is not None else _level_from_env(logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
