from typing import Optional

from envier import Env
from envier import validators

from trace_demo.ext import CaptureBody
from trace_demo.ext import LogLevel
from trace_demo.internal.utils.formats import parse_tags_str
from trace_demo.settings._validators import lowercase
from trace_demo.settings._validators import non_negative
from trace_demo.settings._validators import number


DEFAULT_SERVICE_NAME = "test-app"
DEFAULT_SERVER_URL = "http://localhost:8126"


class TracingConfig(Env):
    """Settings handed to the tracing client when it starts.

    Every option can be set from the environment, e.g. ``APM_SERVICE_NAME``.
    """

    __prefix__ = "apm"

    service_name = Env.v(
        str,
        "service_name",
        default=DEFAULT_SERVICE_NAME,
        help_type="String",
        help="Name of the service reported with every transaction",
    )

    secret_token = Env.v(
        str,
        "secret_token",
        default="",
        help_type="String",
        help="Token used to authenticate against the intake, if it requires one",
    )

    server_url = Env.v(
        str,
        "server_url",
        default=DEFAULT_SERVER_URL,
        help_type="String",
        help="URL of the trace agent receiving the demo telemetry",
    )

    environment = Env.v(
        str,
        "environment",
        default="test",
        help_type="String",
        help="Deployment environment tag",
    )

    service_version = Env.v(
        str,
        "service_version",
        default="1.0.0",
        help_type="String",
        help="Version tag reported with every transaction",
    )

    active = Env.v(
        bool,
        "active",
        default=True,
        help_type="Boolean",
        help="Send telemetry. When disabled, handles are still returned but nothing is reported",
    )

    capture_body = Env.v(
        str,
        "capture_body",
        parser=lowercase,
        default=CaptureBody.ERRORS.value,
        validator=validators.choice([c.value for c in CaptureBody]),
        help_type="String",
        help="Request body capture policy: off, errors, transactions or all",
    )

    capture_headers = Env.v(
        bool,
        "capture_headers",
        default=True,
        help_type="Boolean",
        help="Record request headers on transactions",
    )

    log_level = Env.v(
        str,
        "log_level",
        parser=lowercase,
        default=LogLevel.INFO.value,
        validator=validators.choice([lvl.value for lvl in LogLevel]),
        help_type="String",
        help="Log verbosity: trace, debug, info, warning, error, critical or off",
    )

    log_file = Env.v(
        Optional[str],
        "log_file",
        default=None,
        help_type="String",
        help="Also write logs to this file",
    )

    _global_labels = Env.v(
        dict,
        "global_labels",
        parser=parse_tags_str,
        default={},
        help_type="Mapping",
        help="Labels added to every transaction, as key:value pairs separated by commas",
    )
    # copied per instance, the item default is a single shared dict
    global_labels = Env.d(dict, lambda c: dict(c._global_labels))

    shutdown_timeout = Env.v(
        float,
        "shutdown_timeout",
        parser=number,
        default=5.0,
        validator=non_negative,
        help_type="Float",
        help="Seconds to wait for buffered telemetry to be sent on shutdown",
    )
