"""
The demo scenarios.

``TraceDemoRunner`` drives a fixed sequence of calls against a
:class:`~trace_demo.client.TracingClient` so the resulting transactions,
spans, errors and metadata can be looked at in the APM UI:

1. a successful transaction with a database span,
2. a transaction reporting a synthetic error,
3. an HTTP-like transaction with an external call span,
4. custom context and labels attached to the trace context.

Scenarios are separated by fixed pauses so the activity is easy to spot on a
dashboard. A failure inside the sequence is logged, reported to the client and
ends the run early, but the runner still drains before returning.
"""
import dataclasses
import sys
import threading
import time
from typing import Callable  # noqa:F401
from typing import List  # noqa:F401
from typing import Optional  # noqa:F401
from typing import TextIO  # noqa:F401

from trace_demo.client import TracingClient  # noqa:F401
from trace_demo.ext import SpanTypes
from trace_demo.ext import StrEnum
from trace_demo.ext import TransactionTypes
from trace_demo.internal.logger import get_logger
from trace_demo.settings import RunnerConfig
from trace_demo.version import __version__


log = get_logger(__name__)


class DemoError(Exception):
    """Raised on purpose by the error scenario."""


class RunnerState(StrEnum):
    NOT_STARTED = "not-started"
    SUCCESS_SCENARIO = "success-scenario"
    ERROR_SCENARIO = "error-scenario"
    HTTP_SCENARIO = "http-scenario"
    METADATA_SCENARIO = "metadata-scenario"
    DRAINING = "draining"
    EXITED = "exited"


class Events(object):
    SUCCESS_TRANSACTION_ENDED = "success-transaction-ended"
    ERROR_CAPTURED = "error-captured"
    ERROR_TRANSACTION_ENDED = "error-transaction-ended"
    HTTP_TRANSACTION_ENDED = "http-transaction-ended"
    METADATA_ATTACHED = "metadata-attached"


SUCCESS_TRANSACTION = "test-success"
ERROR_TRANSACTION = "test-error"
HTTP_TRANSACTION = "http-request"
DB_SPAN = "database-query"
HTTP_SPAN = "external-http"

SUCCESS_RESULT = "success"
ERROR_RESULT = "error"
HTTP_RESULT = "HTTP/2.0 200 OK"

DEMO_ERROR_MESSAGE = "Test error for APM monitoring"

DEMO_USER = {
    "id": "test-user-123",
    "username": "testuser",
    "email": "test@example.com",
}
FEATURE_FLAGS = ["flag_a", "flag_b"]
SERVICE_TIER = "premium"
REGION = "us-west-1"

DEMO_REQUEST_METHOD = "POST"
DEMO_REQUEST_URL = "http://localhost:8080/api/orders"
DEMO_REQUEST_BODY = '{"order_id": "demo-1", "quantity": 1}'


_last_run_id = 0
_run_id_lock = threading.Lock()


def new_run_id(clock=time.time):
    # type: (Callable[[], float]) -> int
    """Milliseconds since the epoch, strictly increasing within the process."""
    global _last_run_id

    with _run_id_lock:
        run_id = max(int(clock() * 1000), _last_run_id + 1)
        _last_run_id = run_id
    return run_id


@dataclasses.dataclass
class RunResult:
    ok: bool = True
    error: Optional[BaseException] = None
    events: List[str] = dataclasses.field(default_factory=list)
    states: List[RunnerState] = dataclasses.field(default_factory=list)
    run_id: Optional[int] = None


class TraceDemoRunner(object):
    """Run the demo scenarios against ``client``.

    :param client: a started :class:`~trace_demo.client.TracingClient`.
    :param config: pacing and summary settings. Read from the environment
        when omitted.
    :param out: stream receiving the progress lines, ``sys.stdout`` by default.
    :param sleep: called with the number of seconds to pause.
    """

    def __init__(self, client, config=None, out=None, sleep=time.sleep):
        # type: (TracingClient, Optional[RunnerConfig], Optional[TextIO], Callable[[float], None]) -> None
        self.client = client
        self.config = config if config is not None else RunnerConfig()
        self._out = out
        self._sleep = sleep
        self.state = RunnerState.NOT_STARTED
        self.result = RunResult(states=[RunnerState.NOT_STARTED])

    def _echo(self, message=""):
        # type: (str) -> None
        print(message, file=self._out if self._out is not None else sys.stdout, flush=True)

    def _wait(self, delay_ms):
        # type: (int) -> None
        if delay_ms > 0:
            self._sleep(delay_ms / 1000.0)

    def _enter(self, state):
        # type: (RunnerState) -> None
        log.debug("runner state %s -> %s", self.state.value, state.value)
        self.state = state
        self.result.states.append(state)

    def _record(self, event):
        # type: (str) -> None
        self.result.events.append(event)

    def successful_transaction(self):
        # type: () -> None
        transaction = self.client.start_transaction(SUCCESS_TRANSACTION, TransactionTypes.CUSTOM.value)
        self._echo("Running successful transaction...")

        span = self.client.start_span(DB_SPAN, SpanTypes.DB.value, "postgresql", "query")
        self._wait(self.config.db_query_delay)
        if span:
            span.end()

        transaction.result = SUCCESS_RESULT
        transaction.end()
        self._record(Events.SUCCESS_TRANSACTION_ENDED)
        self._echo("   Transaction completed successfully")

    def error_transaction(self):
        # type: () -> None
        transaction = self.client.start_transaction(ERROR_TRANSACTION, TransactionTypes.CUSTOM.value)
        self._echo("Running error transaction...")

        try:
            raise DemoError(DEMO_ERROR_MESSAGE)
        except DemoError as e:
            self.client.capture_error(e)
            self._record(Events.ERROR_CAPTURED)
            self._echo("   Error captured: %s" % e)

        transaction.result = ERROR_RESULT
        transaction.end()
        self._record(Events.ERROR_TRANSACTION_ENDED)

    def http_transaction(self):
        # type: () -> None
        transaction = self.client.start_transaction(HTTP_TRANSACTION, TransactionTypes.REQUEST.value)
        transaction.set_request(
            DEMO_REQUEST_METHOD,
            DEMO_REQUEST_URL,
            headers={
                "User-Agent": "trace-demo/%s" % __version__,
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            body=DEMO_REQUEST_BODY,
        )
        self._echo("Running HTTP simulation...")

        span = self.client.start_span(HTTP_SPAN, SpanTypes.EXTERNAL.value, "http")
        self._wait(self.config.http_call_delay)
        if span:
            span.end()

        transaction.result = HTTP_RESULT
        transaction.end()
        self._record(Events.HTTP_TRANSACTION_ENDED)
        self._echo("   HTTP transaction completed")

    def send_custom_metadata(self):
        # type: () -> None
        self._echo("Sending custom metadata...")

        tracing_config = self.client.config
        self.client.set_custom_context(
            {
                "user": dict(DEMO_USER),
                "custom": {
                    "environment": tracing_config.environment,
                    "version": tracing_config.service_version,
                    "feature_flags": list(FEATURE_FLAGS),
                },
            }
        )

        self.result.run_id = new_run_id()
        self.client.add_labels(
            {
                "service_tier": SERVICE_TIER,
                "region": REGION,
                "test_run": self.result.run_id,
            }
        )
        self._record(Events.METADATA_ATTACHED)
        self._echo("   Custom metadata sent")

    def _scenarios(self):
        return (
            (RunnerState.SUCCESS_SCENARIO, self.successful_transaction),
            (RunnerState.ERROR_SCENARIO, self.error_transaction),
            (RunnerState.HTTP_SCENARIO, self.http_transaction),
            (RunnerState.METADATA_SCENARIO, self.send_custom_metadata),
        )

    def run(self):
        # type: () -> RunResult
        """Run every scenario once, then drain.

        Exceptions raised by a scenario do not escape: the run stops, the
        error is reported to the client and the result is marked failed.
        """
        if self.state is not RunnerState.NOT_STARTED:
            raise RuntimeError("a runner can only run once")

        try:
            self._echo("")
            self._echo("APM demo starting...")
            self._echo("")
            for state, scenario in self._scenarios():
                self._enter(state)
                scenario()
                self._wait(self.config.scenario_delay)

            self._echo("")
            self._echo("All scenarios completed!")
            self._echo("Check APM data at: %s" % self.config.dashboard_url)
            self._echo("Service: %s" % self.client.config.service_name)
            self._echo("Data should appear within 30-60 seconds")
            self._echo("")
        except Exception as e:
            log.exception("demo run failed during %s", self.state.value)
            self._echo("Demo execution failed: %r" % (e,))
            self.result.ok = False
            self.result.error = e
            self.client.capture_error(e)

        self._enter(RunnerState.DRAINING)
        self._wait(self.config.drain_delay)
        self._echo("Demo completed. Exiting...")
        self._enter(RunnerState.EXITED)
        return self.result
