"""
The tracing client used by the demo.

``TracingClient`` wraps a ``ddtrace`` tracer behind the small API the demo
scenarios need::

    from trace_demo.client import TracingClient

    with TracingClient() as client:
        transaction = client.start_transaction("checkout", "request")
        span = client.start_span("select-cart", "db", "postgresql", "query")
        if span:
            span.end()
        transaction.result = "success"
        transaction.end()

The client is explicitly constructed and passed around. It is started on
``with`` entry and flushed and shut down on exit, even when the body raises.
"""
import contextvars
import os
import sys
import traceback
from typing import TYPE_CHECKING  # noqa:F401
from typing import Any  # noqa:F401
from typing import Callable  # noqa:F401
from typing import Dict  # noqa:F401
from typing import Mapping  # noqa:F401
from typing import Optional  # noqa:F401

from trace_demo import ext
from trace_demo.ext import CaptureBody
from trace_demo.internal.logger import get_logger
from trace_demo.internal.utils.formats import flatten_key_value
from trace_demo.internal.utils.formats import stringify_tags
from trace_demo.settings import TracingConfig
from trace_demo.span import Span
from trace_demo.span import Transaction


if TYPE_CHECKING:  # pragma: no cover
    from ddtrace.trace import Tracer  # noqa:F401


log = get_logger(__name__)

ERROR_SPAN_NAME = "error"

_current_transaction = contextvars.ContextVar(
    "trace_demo_current_transaction", default=None
)  # type: contextvars.ContextVar[Optional[Transaction]]


def tracer_environment(config):
    # type: (TracingConfig) -> Dict[str, str]
    """The ``DD_*`` variables ``ddtrace`` reads when it is first imported."""
    env = {
        "DD_SERVICE": config.service_name,
        "DD_ENV": config.environment,
        "DD_VERSION": config.service_version,
        "DD_TRACE_AGENT_URL": config.server_url,
        "DD_TRACE_ENABLED": "true" if config.active else "false",
    }
    if config.secret_token:
        env["DD_API_KEY"] = config.secret_token
    return env


def _set_error(dd_span, exc):
    # type: (Any, BaseException) -> None
    """Mark ``dd_span`` as errored with the details of ``exc``.

    ``Span.set_exc_info`` ignores exceptions without a traceback, so those
    that were never raised are tagged here directly.
    """
    exc_type = type(exc)
    if exc.__traceback__ is not None:
        dd_span.set_exc_info(exc_type, exc, exc.__traceback__)
        return

    from ddtrace.constants import ERROR_MSG
    from ddtrace.constants import ERROR_STACK
    from ddtrace.constants import ERROR_TYPE

    dd_span.error = 1
    dd_span.set_tag(ERROR_TYPE, "%s.%s" % (exc_type.__module__, exc_type.__name__))
    dd_span.set_tag(ERROR_MSG, str(exc))
    dd_span.set_tag(ERROR_STACK, "".join(traceback.format_exception_only(exc_type, exc)))


class TracingClient(object):
    """Front of the ``ddtrace`` tracer for the demo scenarios.

    :param config: the settings applied when the client starts. Read from the
        environment when omitted.
    :param tracer: the ``ddtrace`` tracer to report to. The global
        ``ddtrace.trace.tracer`` is used when omitted.
    """

    def __init__(self, config=None, tracer=None):
        # type: (Optional[TracingConfig], Optional[Tracer]) -> None
        self.config = config if config is not None else TracingConfig()
        self._tracer = tracer
        self._started = False
        self._closed = False
        self._applied_tags = {}  # type: Dict[str, str]
        self.errors_captured = 0
        self.flush_count = 0

    def __enter__(self):
        # type: () -> TracingClient
        return self.start()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    @property
    def tracer(self):
        # type: () -> Tracer
        if self._tracer is None:
            raise RuntimeError("the tracing client has not been started")
        return self._tracer

    @property
    def started(self):
        # type: () -> bool
        return self._started

    @property
    def closed(self):
        # type: () -> bool
        return self._closed

    @property
    def active(self):
        # type: () -> bool
        return self._started and not self._closed and self.config.active and self.tracer.enabled

    @property
    def current_transaction(self):
        # type: () -> Optional[Transaction]
        transaction = _current_transaction.get()
        if transaction is None or transaction._client is not self:
            return None
        return transaction

    @property
    def applied_tags(self):
        # type: () -> Dict[str, str]
        """Context and label tags attached so far."""
        return dict(self._applied_tags)

    def start(self):
        # type: () -> TracingClient
        if self._closed:
            raise RuntimeError("the tracing client was closed and cannot be restarted")
        if self._started:
            return self

        if self._tracer is None:
            if "ddtrace" in sys.modules:
                log.debug("ddtrace already imported, the agent URL from its own environment is kept")
            else:
                os.environ.update(tracer_environment(self.config))
            from ddtrace.trace import tracer

            self._tracer = tracer

        import ddtrace

        ddtrace.config.service = self.config.service_name
        ddtrace.config.env = self.config.environment
        ddtrace.config.version = self.config.service_version

        self._tracer.enabled = self.config.active
        if self.config.global_labels:
            self._apply_tags(self.config.global_labels)

        self._started = True
        log.info(
            "tracing client started: service=%s env=%s url=%s active=%s",
            self.config.service_name,
            self.config.environment,
            self.config.server_url,
            self.config.active,
        )
        return self

    def start_transaction(self, name, type_):
        # type: (str, str) -> Transaction
        """Open a transaction, which becomes the current one until it ends."""
        dd_span = self.tracer.start_span(name, child_of=None, resource=name, span_type=type_, activate=True)
        dd_span.set_tag(ext.TRANSACTION_TYPE, type_)
        transaction = Transaction(self, dd_span, name, type_)
        transaction._previous = self.current_transaction
        _current_transaction.set(transaction)
        log.debug("transaction started: %r", transaction)
        return transaction

    def start_span(self, name, type_, subtype=None, action=None):
        # type: (str, str, Optional[str], Optional[str]) -> Optional[Span]
        """Open a span under the current transaction.

        Returns ``None`` when there is no current transaction or when the
        client does not report anything.
        """
        transaction = self.current_transaction
        if transaction is None or transaction.ended:
            log.debug("no current transaction, span %r not created", name)
            return None
        if not self.active:
            log.debug("tracing inactive, span %r not created", name)
            return None

        dd_span = self.tracer.start_span(
            name, child_of=transaction.dd_span, resource=name, span_type=type_, activate=True
        )
        if subtype:
            dd_span.set_tag(ext.SPAN_SUBTYPE, subtype)
            if type_ == ext.SpanTypes.DB:
                dd_span.set_tag(ext.DB_SYSTEM, subtype)
        if action:
            dd_span.set_tag(ext.SPAN_ACTION, action)

        span = Span(dd_span, name, type_, subtype=subtype, action=action, transaction=transaction)
        transaction._register_span(span)
        return span

    def capture_error(self, exc):
        # type: (BaseException) -> None
        """Report an exception.

        The error is attached to the current transaction. Outside of a
        transaction it is reported on a standalone ``error`` span.
        """
        transaction = self.current_transaction
        if transaction is not None and not transaction.ended:
            _set_error(transaction.dd_span, exc)
        else:
            dd_span = self.tracer.start_span(
                ERROR_SPAN_NAME, child_of=None, resource=type(exc).__name__, activate=False
            )
            _set_error(dd_span, exc)
            dd_span.finish()
        self.errors_captured += 1
        log.debug("error captured: %r", exc)

    def set_custom_context(self, context):
        # type: (Mapping[str, Any]) -> None
        """Attach arbitrary metadata to the trace context.

        ``user`` fields are reported as ``usr.*`` tags, everything else under
        ``custom.``. Nested values are flattened into dotted keys.
        """
        tags = {}  # type: Dict[str, Any]
        for key, value in context.items():
            if key == "user":
                prefix = ext.USER_PREFIX
            elif key == ext.CUSTOM_PREFIX:
                prefix = ext.CUSTOM_PREFIX
            else:
                prefix = "%s.%s" % (ext.CUSTOM_PREFIX, key)
            tags.update(flatten_key_value(prefix, value))
        self._apply_tags(tags)

    def add_labels(self, labels):
        # type: (Mapping[str, Any]) -> None
        self._apply_tags(labels)

    def _apply_tags(self, tags):
        # type: (Mapping[str, Any]) -> None
        tags = stringify_tags(tags)
        self.tracer.set_tags(tags)
        root = self.tracer.current_root_span()
        if root is not None:
            root.set_tags(tags)
        self._applied_tags.update(tags)

    def _should_capture_body(self, errored):
        # type: (bool) -> bool
        policy = CaptureBody(self.config.capture_body)
        if policy in (CaptureBody.ALL, CaptureBody.TRANSACTIONS):
            return True
        return policy == CaptureBody.ERRORS and errored

    def _on_transaction_ended(self, transaction):
        # type: (Transaction) -> None
        if _current_transaction.get() is transaction:
            previous = transaction._previous
            _current_transaction.set(previous if previous is not None and not previous.ended else None)
        log.debug("transaction ended: %r", transaction)

    def flush(self, callback=None):
        # type: (Optional[Callable[[], Any]]) -> None
        """Send buffered telemetry, then call ``callback`` if given."""
        if self._started and not self._closed:
            self.tracer.flush()
            self.flush_count += 1
        if callback is not None:
            callback()

    def close(self, timeout=None):
        # type: (Optional[float]) -> None
        """Flush and shut the tracer down. Later calls do nothing."""
        if self._closed:
            return
        self._closed = True
        if not self._started:
            return

        transaction = self.current_transaction
        if transaction is not None and not transaction.ended:
            log.warning("transaction %r still open on close, ending it", transaction.name)
            transaction.end()

        self.tracer.flush()
        self.flush_count += 1
        self.tracer.shutdown(timeout=self.config.shutdown_timeout if timeout is None else timeout)
        log.info("tracing client closed")
