import contextlib
import os
from pathlib import Path
import subprocess
import sys
from typing import List  # noqa:F401

from ddtrace.trace import Span  # noqa:F401
from ddtrace.trace import TraceFilter
from ddtrace.trace import Tracer


PROJECT_ROOT = Path(__file__).resolve().parents[1]


@contextlib.contextmanager
def override_env(env, replace_os_env=False):
    """
    Temporarily override ``os.environ`` with provided values::

        >>> with override_env(dict(APM_SERVICE_NAME="checkout")):
            # Your test
    """
    # Copy the full original environment
    original = dict(os.environ)

    # We allow callers to clear out the environment to prevent leaking variables into the test
    if replace_os_env:
        os.environ.clear()

    for k in list(os.environ.keys()):
        if k.startswith(("APM_", "TRACE_DEMO_")):
            del os.environ[k]

    os.environ.update(env)
    try:
        yield
    finally:
        os.environ.clear()
        os.environ.update(original)


class CaptureFilter(TraceFilter):
    """Keeps finished traces and drops them so nothing reaches an agent."""

    def __init__(self):
        self.traces = []  # type: List[List[Span]]

    def process_trace(self, trace):
        self.traces.append(list(trace))
        return None


class DummyTracer(Tracer):
    """
    DummyTracer is a tracer which keeps finished traces in memory instead of
    sending them to the agent.
    """

    def __init__(self, *args, **kwargs):
        super(DummyTracer, self).__init__()
        self._capture = CaptureFilter()
        self.configure(trace_processors=[self._capture])

    def pop_traces(self):
        # type: () -> List[List[Span]]
        traces = self._capture.traces
        self._capture.traces = []
        return traces

    def pop(self):
        # type: () -> List[Span]
        return [span for trace in self.pop_traces() for span in trace]


def root_span(trace):
    # type: (List[Span]) -> Span
    roots = [s for s in trace if s.parent_id is None]
    assert len(roots) == 1, "expected one root span, got %r" % (roots,)
    return roots[0]


def end_ns(span):
    # type: (Span) -> int
    assert span.duration_ns is not None, "span %r was not finished" % (span.name,)
    return span.start_ns + span.duration_ns


def _build_env(env=None):
    environ = dict(PATH="%s:%s" % (PROJECT_ROOT, os.environ.get("PATH", "")), PYTHONPATH=str(PROJECT_ROOT))
    for k, v in os.environ.items():
        if k.startswith(("APM_", "TRACE_DEMO_")):
            continue
        environ.setdefault(k, v)
    environ["DD_INSTRUMENTATION_TELEMETRY_ENABLED"] = "0"
    environ["DD_REMOTE_CONFIGURATION_ENABLED"] = "0"
    if env:
        environ.update(env)
    return environ


def call_program(*args, **kwargs):
    timeout = kwargs.pop("timeout", None)
    if "env" in kwargs:
        # Remove all keys with the value None from env, None is used to unset an environment variable
        env = kwargs.pop("env")
        cleaned_env = {env: val for env, val in env.items() if val is not None}
        kwargs["env"] = cleaned_env
    close_fds = sys.platform != "win32"
    subp = subprocess.Popen(args, stdout=subprocess.PIPE, stderr=subprocess.PIPE, close_fds=close_fds, **kwargs)
    try:
        stdout, stderr = subp.communicate(timeout=timeout)
    except subprocess.TimeoutExpired:
        subp.terminate()
        stdout, stderr = subp.communicate(timeout=timeout)
    return stdout, stderr, subp.wait(), subp.pid


def run_trace_demo(*args, **kwargs):
    """Run ``python -m trace_demo`` with ``args`` in a clean environment."""
    env = _build_env(kwargs.pop("env", None))
    return call_program(sys.executable, "-m", "trace_demo", *args, env=env, cwd=str(PROJECT_ROOT), **kwargs)
