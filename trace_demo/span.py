from typing import TYPE_CHECKING  # noqa:F401
from typing import Any  # noqa:F401
from typing import Dict  # noqa:F401
from typing import List  # noqa:F401
from typing import Optional  # noqa:F401

from trace_demo import ext
from trace_demo.internal.logger import get_logger
from trace_demo.internal.utils.formats import stringify_tags


if TYPE_CHECKING:  # pragma: no cover
    from ddtrace.trace import Span as DDSpan  # noqa:F401

    from trace_demo.client import TracingClient  # noqa:F401


log = get_logger(__name__)


def status_code_from_result(result):
    # type: (Optional[str]) -> Optional[str]
    """Extract the status code from a status line result.

    >>> status_code_from_result("HTTP/2.0 200 OK")
    '200'
    >>> status_code_from_result("success") is None
    True
    """
    if not result or not result.startswith("HTTP/"):
        return None
    parts = result.split(" ")
    if len(parts) > 1 and parts[1].isdigit():
        return parts[1]
    return None


class Span(object):
    """A sub-operation of a :class:`Transaction`.

    The handle must be ended once; ending it again is a no-op.
    """

    def __init__(self, dd_span, name, type_, subtype=None, action=None, transaction=None):
        # type: (DDSpan, str, str, Optional[str], Optional[str], Optional[Transaction]) -> None
        self._dd_span = dd_span
        self.name = name
        self.type = type_
        self.subtype = subtype
        self.action = action
        self.transaction = transaction
        self._ended = False

    def __repr__(self):
        return "Span(name=%r, type=%r, subtype=%r, action=%r, ended=%r)" % (
            self.name,
            self.type,
            self.subtype,
            self.action,
            self._ended,
        )

    @property
    def ended(self):
        # type: () -> bool
        return self._ended

    @property
    def dd_span(self):
        # type: () -> DDSpan
        return self._dd_span

    def set_tag(self, key, value):
        # type: (str, Any) -> None
        self._dd_span.set_tag(key, value)

    def end(self):
        # type: () -> None
        if self._ended:
            log.debug("span %r already ended", self.name)
            return
        self._ended = True
        self._dd_span.finish()
        if self.transaction is not None:
            self.transaction._on_child_ended(self)


class Transaction(object):
    """A named unit of traced work with a start, an end and a result.

    Transactions are created by :meth:`TracingClient.start_transaction`.
    ``result`` can be assigned at any time before :meth:`end` is called.
    """

    def __init__(self, client, dd_span, name, type_):
        # type: (TracingClient, DDSpan, str, str) -> None
        self._client = client
        self._dd_span = dd_span
        self.name = name
        self.type = type_
        self.result = None  # type: Optional[str]
        self._ended = False
        self._open_spans = []  # type: List[Span]
        self._request_body = None  # type: Optional[str]
        self._previous = None  # type: Optional[Transaction]

    def __repr__(self):
        return "Transaction(name=%r, type=%r, result=%r, ended=%r)" % (self.name, self.type, self.result, self._ended)

    @property
    def ended(self):
        # type: () -> bool
        return self._ended

    @property
    def dd_span(self):
        # type: () -> DDSpan
        return self._dd_span

    @property
    def errored(self):
        # type: () -> bool
        return bool(self._dd_span.error) or self.result == "error"

    @property
    def open_spans(self):
        # type: () -> List[Span]
        return list(self._open_spans)

    def set_tag(self, key, value):
        # type: (str, Any) -> None
        self._dd_span.set_tag(key, value)

    def set_request(self, method, url, headers=None, body=None):
        # type: (str, str, Optional[Dict[str, str]], Optional[str]) -> None
        """Describe the request served by this transaction.

        Headers are recorded only when the client captures headers. The body
        is kept until the transaction ends since the ``errors`` policy depends
        on its outcome.
        """
        self._dd_span.set_tag(ext.HTTP_METHOD, method)
        self._dd_span.set_tag(ext.HTTP_URL, url)
        if headers and self._client.config.capture_headers:
            tags = {"%s.%s" % (ext.HTTP_REQUEST_HEADERS, k.lower()): v for k, v in headers.items()}
            self._dd_span.set_tags(stringify_tags(tags))
        self._request_body = body

    def _register_span(self, span):
        # type: (Span) -> None
        self._open_spans.append(span)

    def _on_child_ended(self, span):
        # type: (Span) -> None
        try:
            self._open_spans.remove(span)
        except ValueError:
            pass

    def end(self, result=None):
        # type: (Optional[str]) -> None
        if self._ended:
            log.debug("transaction %r already ended", self.name)
            return

        if result is not None:
            self.result = result

        # A span never outlives its transaction.
        for span in self.open_spans:
            log.warning("span %r still open when transaction %r ended, ending it first", span.name, self.name)
            span.end()

        self._ended = True
        if self.result is not None:
            self._dd_span.set_tag(ext.TRANSACTION_RESULT, self.result)
            status_code = status_code_from_result(self.result)
            if status_code is not None:
                self._dd_span.set_tag(ext.HTTP_STATUS_CODE, status_code)

        if self._request_body is not None and self._client._should_capture_body(self.errored):
            self._dd_span.set_tag(ext.HTTP_REQUEST_BODY, self._request_body)

        self._dd_span.finish()
        self._client._on_transaction_ended(self)
