from envier import Env

from trace_demo.settings._validators import integer
from trace_demo.settings._validators import non_negative


class RunnerConfig(Env):
    __prefix__ = "trace_demo"

    # All delays are in milliseconds.
    db_query_delay = Env.v(int, "db_query_delay", parser=integer, default=100, validator=non_negative)
    http_call_delay = Env.v(int, "http_call_delay", parser=integer, default=200, validator=non_negative)
    scenario_delay = Env.v(
        int,
        "scenario_delay",
        parser=integer,
        default=500,
        validator=non_negative,
        help_type="Int",
        help="Pause between scenarios so the activity is easy to spot on a dashboard",
    )
    drain_delay = Env.v(
        int,
        "drain_delay",
        parser=integer,
        default=2000,
        validator=non_negative,
        help_type="Int",
        help="Pause before exiting so the tracer can send what it buffered",
    )

    dashboard_url = Env.v(
        str,
        "dashboard_url",
        default="https://app.datadoghq.com/apm/traces",
        help_type="String",
        help="Where to look for the results, printed in the summary",
    )

    strict_exit = Env.v(
        bool,
        "strict_exit",
        default=False,
        help_type="Boolean",
        help="Exit with status 1 when the run failed instead of always exiting 0",
    )
