import datetime
import logging
import os
import platform
import sys
from typing import TYPE_CHECKING  # noqa:F401
from typing import Any  # noqa:F401
from typing import Dict  # noqa:F401

from trace_demo.internal.logger import get_logger
from trace_demo.version import __version__


if TYPE_CHECKING:  # pragma: no cover
    from trace_demo.client import TracingClient  # noqa:F401


logger = get_logger(__name__)


def in_venv():
    # type: () -> bool
    return "VIRTUAL_ENV" in os.environ or sys.prefix != getattr(sys, "base_prefix", sys.prefix)


def tags_to_str(tags):
    # type: (Dict[str, Any]) -> str
    """Inverse of :func:`~trace_demo.internal.utils.formats.parse_tags_str`."""
    return ",".join("%s:%s" % item for item in tags.items())


def collect(client):
    # type: (TracingClient) -> Dict[str, Any]
    """Collect system, library and client information into a serializable dict."""
    import ddtrace

    config = client.config
    tracer = client.tracer if client.started else None

    return dict(
        # Timestamp UTC ISO 8601 with the trailing +00:00 removed
        date=datetime.datetime.now(datetime.timezone.utc).isoformat()[0:-6],
        os_name=platform.system(),
        os_version=platform.release(),
        is_64_bit=sys.maxsize > 2**32,
        vm=platform.python_implementation(),
        lang="python",
        lang_version=platform.python_version(),
        in_virtual_env=in_venv(),
        version=__version__,
        ddtrace_version=ddtrace.__version__,
        service=config.service_name,
        env=config.environment,
        service_version=config.service_version,
        server_url=config.server_url,
        agent_url=tracer.agent_trace_url if tracer is not None else None,
        secret_token_set=bool(config.secret_token),
        active=config.active,
        tracer_enabled=tracer.enabled if tracer is not None else None,
        capture_body=config.capture_body,
        capture_headers=config.capture_headers,
        log_level=config.log_level,
        log_file=config.log_file,
        global_labels=tags_to_str(config.global_labels),
        shutdown_timeout=config.shutdown_timeout,
        debug=logger.isEnabledFor(logging.DEBUG),
    )
