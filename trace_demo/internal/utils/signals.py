import signal
import sys
from typing import Any  # noqa:F401
from typing import Callable  # noqa:F401
from typing import Optional  # noqa:F401


SignalHandler = Callable[[int, Any], None]


def _chainable(handler):
    # type: (Any) -> bool
    # SIG_DFL, SIG_IGN and None are not callables. The default SIGINT handler
    # raises KeyboardInterrupt, which would abort the drain before it starts.
    return callable(handler) and handler is not signal.default_int_handler


def handle_signal(sig, f):
    # type: (int, SignalHandler) -> Optional[Any]
    """
    Install ``f`` as the handler of ``sig`` and return the previous handler.

    A previous Python handler keeps running, after ``f``. Registering the
    same ``f`` twice does not wrap it twice.

    Returns ``None`` when the handler cannot be installed, e.g. while the
    interpreter shuts down or off the main thread.
    """
    if sys.is_finalizing():
        return None

    try:
        previous = signal.getsignal(sig)
    except (OSError, ValueError):
        return None

    def wrap_signals(signum, frame):
        f(signum, frame)
        previous(signum, frame)

    wrap_signals.__wrapped__ = f  # type: ignore[attr-defined]

    chain = _chainable(previous) and previous is not f and getattr(previous, "__wrapped__", None) is not f
    try:
        return signal.signal(sig, wrap_signals if chain else f)
    except (OSError, ValueError):
        return None
