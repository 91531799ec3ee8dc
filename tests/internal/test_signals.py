import signal

import mock
import pytest

from trace_demo.internal import atexit
from trace_demo.internal.utils.signals import handle_signal


@pytest.fixture
def restore_sigusr1():
    original = signal.getsignal(signal.SIGUSR1)
    try:
        yield
    finally:
        signal.signal(signal.SIGUSR1, original)


def test_handle_signal_chains_previous_handler(restore_sigusr1):
    calls = []
    signal.signal(signal.SIGUSR1, lambda sig, frame: calls.append("previous"))

    handle_signal(signal.SIGUSR1, lambda sig, frame: calls.append("new"))
    signal.getsignal(signal.SIGUSR1)(signal.SIGUSR1, None)

    assert calls == ["new", "previous"]


def test_handle_signal_returns_previous_handler(restore_sigusr1):
    def previous(sig, frame):
        pass

    signal.signal(signal.SIGUSR1, previous)
    assert handle_signal(signal.SIGUSR1, lambda sig, frame: None) is previous


def test_handle_signal_does_not_wrap_twice(restore_sigusr1):
    calls = []

    def handler(sig, frame):
        calls.append("handler")

    signal.signal(signal.SIGUSR1, signal.SIG_DFL)
    handle_signal(signal.SIGUSR1, handler)
    handle_signal(signal.SIGUSR1, handler)
    signal.getsignal(signal.SIGUSR1)(signal.SIGUSR1, None)

    assert calls == ["handler"]


def test_handle_signal_skips_default_int_handler():
    original = signal.getsignal(signal.SIGINT)
    handler = mock.Mock()
    try:
        signal.signal(signal.SIGINT, signal.default_int_handler)
        handle_signal(signal.SIGINT, handler)
        installed = signal.getsignal(signal.SIGINT)
        assert installed is handler
        # No KeyboardInterrupt from the default handler
        installed(signal.SIGINT, None)
        handler.assert_called_once_with(signal.SIGINT, None)
    finally:
        signal.signal(signal.SIGINT, original)


def test_register_on_exit_signal():
    before = {sig: signal.getsignal(sig) for sig in atexit.EXIT_SIGNALS}
    func = mock.Mock()
    previous = atexit.register_on_exit_signal(func)
    try:
        assert set(previous) == set(atexit.EXIT_SIGNALS)
        signal.getsignal(signal.SIGTERM)(signal.SIGTERM, None)
        func.assert_called_once_with()
    finally:
        atexit.restore_signals(previous)
    assert {sig: signal.getsignal(sig) for sig in atexit.EXIT_SIGNALS} == before


def test_unregistered_function_is_not_called():
    func = mock.Mock()
    previous = atexit.register_on_exit_signal(func)
    try:
        atexit.unregister(func)
        signal.getsignal(signal.SIGTERM)(signal.SIGTERM, None)
    finally:
        atexit.restore_signals(previous)
    func.assert_not_called()


def test_register_exit_signal_off_main_thread():
    import threading

    results = []
    t = threading.Thread(target=lambda: results.append(atexit.register_on_exit_signal(mock.Mock())))
    t.start()
    t.join()
    assert results == [{}]
