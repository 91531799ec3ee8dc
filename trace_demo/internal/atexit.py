# -*- encoding: utf-8 -*-
"""
Run a function when the demo is asked to stop with SIGINT or SIGTERM.
"""
import signal
import threading
import typing  # noqa:F401

from trace_demo.internal.logger import get_logger
from trace_demo.internal.utils import signals


log = get_logger(__name__)


EXIT_SIGNALS = (signal.SIGINT, signal.SIGTERM)

# Handlers cannot be uninstalled from a chain, so unregistered functions are
# skipped instead.
unregistered_signals = set()  # type: typing.Set[typing.Callable]


def unregister(func):
    # type: (typing.Callable[[], None]) -> None
    """Stop calling ``func`` on exit signals."""
    unregistered_signals.add(func)


def register_on_exit_signal(f):
    # type: (typing.Callable[[], None]) -> typing.Dict[int, typing.Any]
    """
    Call ``f`` when an exit signal (INT or TERM) is received.

    Returns the handlers that were installed before, keyed by signal number,
    to be given back to :func:`restore_signals`. Signals can only be handled
    from the main thread; elsewhere nothing is installed.
    """

    def handle_exit(sig, frame):
        if f not in unregistered_signals:
            log.debug("exit signal %s received", sig)
            f()

    unregistered_signals.discard(f)
    if threading.current_thread() is not threading.main_thread():
        log.debug("Exit signals can only be handled from the main thread")
        return {}

    previous = {}  # type: typing.Dict[int, typing.Any]
    for sig in EXIT_SIGNALS:
        handler = signals.handle_signal(sig, handle_exit)
        if handler is None:
            log.debug("No previous handler to restore for signal %s", sig)
            continue
        previous[sig] = handler
    return previous


def restore_signals(previous):
    # type: (typing.Dict[int, typing.Any]) -> None
    for sig, handler in previous.items():
        try:
            signal.signal(sig, handler)
        except (OSError, ValueError):
            log.debug("Could not restore handler for signal %s", sig, exc_info=True)
