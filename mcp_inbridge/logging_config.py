"""
Bridge logging configuration.

Stdout carries JSON-RPC responses only, so every log record goes to stderr.
"""

import logging
import sys
from typing import Optional, TextIO

LOGGER_NAME = "mcp_inbridge"


def setup_logging(debug: bool = False, stream: Optional[TextIO] = None) -> logging.Logger:
    """
    Configure the bridge's root logger.

    Args:
        debug: Enable debug level
        stream: Diagnostic stream (default: sys.stderr)

    Returns:
        Root logger for the bridge
    """
    formatter = logging.Formatter(
        "%(asctime)s %(levelname)-5s [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if debug else logging.INFO)
    logger.handlers.clear()
    logger.propagate = False

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    return logger
