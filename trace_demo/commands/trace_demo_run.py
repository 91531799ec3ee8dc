#!/usr/bin/env python
import argparse
import pprint
import sys
from typing import Any  # noqa:F401
from typing import Dict  # noqa:F401
from typing import List  # noqa:F401
from typing import Optional  # noqa:F401
from typing import TextIO  # noqa:F401

from trace_demo._logger import configure_trace_demo_logger
from trace_demo.client import TracingClient
from trace_demo.internal import atexit
from trace_demo.internal.logger import get_logger
from trace_demo.runner import RunResult  # noqa:F401
from trace_demo.runner import TraceDemoRunner
from trace_demo.settings import RunnerConfig
from trace_demo.settings import TracingConfig
from trace_demo.version import __version__


log = get_logger(__name__)

USAGE = """
Exercise the APM tracing client with a fixed set of demo transactions,
spans, errors and metadata, then exit.

Configuration is read from APM_* (tracing client) and TRACE_DEMO_*
(pacing) environment variables.

Examples
trace-demo
APM_SERVICE_NAME=checkout APM_SERVER_URL=http://agent:8126 trace-demo --strict
"""

EXIT_OK = 0
EXIT_FAILED = 1


def exit_code(result, strict=False):
    # type: (RunResult, bool) -> int
    """A failed run still exits 0 unless ``strict`` is set."""
    if result.ok or not strict:
        return EXIT_OK
    return EXIT_FAILED


def drain_and_exit(client, out=None):
    # type: (TracingClient, Optional[TextIO]) -> None
    """Flush the client, then exit with status 0."""
    print("", file=out or sys.stdout)
    print("Received interrupt, shutting down gracefully...", file=out or sys.stdout, flush=True)

    def _exit():
        sys.exit(EXIT_OK)

    client.flush(callback=_exit)


def run_demo(client, runner_config=None, strict=False, out=None, sleep=None):
    # type: (TracingClient, Optional[RunnerConfig], bool, Optional[TextIO], Optional[object]) -> int
    """Run the demo with ``client`` and return the process exit code.

    An interrupt signal drains the client and exits with status 0 instead of
    returning.
    """
    runner_kwargs = {"out": out}
    if sleep is not None:
        runner_kwargs["sleep"] = sleep

    def on_exit_signal():
        drain_and_exit(client, out)

    # handlers stay installed until the client has shut down
    previous = {}  # type: Dict[int, Any]
    try:
        with client:
            previous = atexit.register_on_exit_signal(on_exit_signal)
            result = TraceDemoRunner(client, runner_config, **runner_kwargs).run()
    finally:
        atexit.unregister(on_exit_signal)
        atexit.restore_signals(previous)

    if not result.ok:
        log.warning("demo run failed: %r", result.error)
    return exit_code(result, strict=strict)


def main(argv=None):
    # type: (Optional[List[str]]) -> int
    parser = argparse.ArgumentParser(
        description=USAGE,
        prog="trace-demo",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument("-d", "--debug", help="enable debug logging (disabled by default)", action="store_true")
    parser.add_argument("-i", "--info", help="print client info useful for debugging", action="store_true")
    parser.add_argument(
        "--strict",
        help="exit with status 1 when the run failed (also TRACE_DEMO_STRICT_EXIT)",
        action="store_true",
    )
    parser.add_argument("-v", "--version", action="version", version="%(prog)s " + __version__)
    args = parser.parse_args(argv)

    tracing_config = TracingConfig()
    runner_config = RunnerConfig()
    configure_trace_demo_logger(tracing_config, debug=args.debug)

    client = TracingClient(tracing_config)

    if args.info:
        from trace_demo.internal.debug import collect

        with client:
            pprint.pprint(collect(client))
        return EXIT_OK

    print("Starting APM demo application...", flush=True)
    return run_demo(client, runner_config, strict=args.strict or runner_config.strict_exit)


if __name__ == "__main__":
    sys.exit(main())
