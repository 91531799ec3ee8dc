import io

import pytest

from tests.utils import DummyTracer
from tests.utils import override_env
from trace_demo.client import TracingClient
from trace_demo.settings import RunnerConfig
from trace_demo.settings import TracingConfig


NO_DELAYS = {
    "TRACE_DEMO_DB_QUERY_DELAY": "0",
    "TRACE_DEMO_HTTP_CALL_DELAY": "0",
    "TRACE_DEMO_SCENARIO_DELAY": "0",
    "TRACE_DEMO_DRAIN_DELAY": "0",
}


@pytest.fixture(autouse=True)
def clean_env():
    # APM_* and TRACE_DEMO_* variables of the calling shell must not leak into tests
    with override_env({}):
        yield


@pytest.fixture
def tracer():
    return DummyTracer()


@pytest.fixture
def tracing_config():
    return TracingConfig(source={"APM_SERVICE_NAME": "trace-demo-tests"})


@pytest.fixture
def runner_config():
    return RunnerConfig(source=dict(NO_DELAYS))


@pytest.fixture
def client(tracer, tracing_config):
    client = TracingClient(tracing_config, tracer=tracer)
    client.start()
    try:
        yield client
    finally:
        client.close()


@pytest.fixture
def out():
    return io.StringIO()
