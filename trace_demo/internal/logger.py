"""
Logging utilities for internal use.
Usage:
    from trace_demo.internal.logger import get_logger
    log = get_logger(__name__)

Handlers and levels are owned by :mod:`trace_demo._logger`; modules only ask
for a named logger.
"""
import logging


TRACE = 5

logging.addLevelName(TRACE, "TRACE")


def get_logger(name: str) -> logging.Logger:
    """
    Retrieve or create a ``Logger`` instance with consistent behavior for internal use.

    Loggers always propagate to the ``trace_demo`` logger configured by
    :func:`trace_demo._logger.configure_trace_demo_logger`.
    """
    logger = logging.getLogger(name)
    logger.propagate = True
    return logger
