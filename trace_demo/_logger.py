import logging
from os import path
import sys
from typing import TYPE_CHECKING  # noqa:F401
from typing import Optional

from trace_demo.ext import LogLevel
from trace_demo.internal.logger import TRACE


if TYPE_CHECKING:  # pragma: no cover
    from trace_demo.settings import TracingConfig  # noqa:F401


LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] - %(message)s"
FILE_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] [%(filename)s:%(lineno)d] - %(message)s"

DEFAULT_FILE_SIZE_BYTES = 15 << 20  # 15 MB

HANDLER_NAME = "trace_demo"

# ``off`` sits above CRITICAL so nothing gets through.
LOG_LEVELS = {
    LogLevel.TRACE: TRACE,
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.CRITICAL: logging.CRITICAL,
    LogLevel.OFF: logging.CRITICAL + 10,
}


def level_from_name(name):
    # type: (str) -> int
    try:
        return LOG_LEVELS[LogLevel(name.lower())]
    except ValueError:
        raise ValueError(
            "Invalid log level %r. Log level must be one of %s." % (name, "/".join(lvl.value for lvl in LogLevel))
        )


def configure_trace_demo_logger(config, debug=False):
    # type: (TracingConfig, bool) -> logging.Logger
    """Configures the demo and ``ddtrace`` log levels and handlers.

    Both loggers share one stream handler on stderr, so library diagnostics
    do not interleave with the progress lines on stdout. When ``log_file`` is
    set, records are also written to a rotating file.

    Calling this function again replaces the handlers it installed before.
    """
    level = logging.DEBUG if debug else level_from_name(config.log_level)

    logger = logging.getLogger("trace_demo")
    ddtrace_logger = logging.getLogger("ddtrace")
    for lg in (logger, ddtrace_logger):
        for handler in [h for h in lg.handlers if h.get_name() == HANDLER_NAME]:
            lg.removeHandler(handler)
            handler.close()

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    stream_handler.set_name(HANDLER_NAME)

    file_handler = _add_file_handler(logger, config.log_file, level)

    for lg in (logger, ddtrace_logger):
        lg.setLevel(level)
        lg.addHandler(stream_handler)
        if file_handler is not None and lg is not logger:
            lg.addHandler(file_handler)

    return logger


def _add_file_handler(
    logger: logging.Logger,
    log_path: Optional[str],
    log_level: int,
    max_file_bytes: int = DEFAULT_FILE_SIZE_BYTES,
):
    file_handler = None
    if log_path is not None:
        log_path = path.abspath(log_path)
        num_backup = 1
        from logging.handlers import RotatingFileHandler

        file_handler = RotatingFileHandler(filename=log_path, mode="a", maxBytes=max_file_bytes, backupCount=num_backup)
        file_handler.setLevel(log_level)
        file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT))
        file_handler.set_name(HANDLER_NAME)
        logger.addHandler(file_handler)
        logger.debug("trace_demo logs will be routed to %s", log_path)
    return file_handler
