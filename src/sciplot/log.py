"""Logging setup.

Library modules log through loguru's shared ``logger``. Sinks are only
reconfigured when the hosting application (the CLI, a notebook) calls
:func:`setup_logging`.
"""

from __future__ import annotations

import os
import sys

from loguru import logger

__all__ = ["logger", "setup_logging"]

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level:7}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)


def _stderr(message) -> None:
    # looked up per message so redirected streams (pytest, CliRunner) are honored
    sys.stderr.write(message)


def setup_logging(level: str | None = None) -> int:
    """Replace loguru's default sink with a single formatted stderr sink.

    Args:
        level: Minimum level name. Defaults to ``$SCIPLOT_LOG_LEVEL`` or ``INFO``.

    Returns:
        The id of the added sink.
    """
    level = (level or os.environ.get("SCIPLOT_LOG_LEVEL", "INFO")).upper()
    logger.remove()
    return logger.add(_stderr, format=LOG_FORMAT, level=level)
