"""Logging setup for the command-line tools."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from proxy_tracker.config.settings import AppConfig


def configure_logging(config: AppConfig) -> None:
    """Apply the configured level and format to the root logger.

    ``debug=True`` forces DEBUG regardless of ``logging.level``.
    """
    level = logging.DEBUG if config.debug else logging.getLevelName(str(config.logging.level))
    logging.basicConfig(level=level, format=config.logging.format, force=True)
