import pytest

from tests.utils import override_env
from trace_demo.settings import RunnerConfig
from trace_demo.settings import TracingConfig


def test_tracing_config_defaults():
    config = TracingConfig()
    assert config.service_name == "test-app"
    assert config.secret_token == ""
    assert config.server_url == "http://localhost:8126"
    assert config.environment == "test"
    assert config.service_version == "1.0.0"
    assert config.active is True
    assert config.capture_body == "errors"
    assert config.capture_headers is True
    assert config.log_level == "info"
    assert config.log_file is None
    assert config.global_labels == {}
    assert config.shutdown_timeout == 5.0


def test_tracing_config_from_env():
    env = {
        "APM_SERVICE_NAME": "checkout",
        "APM_SECRET_TOKEN": "s3cr3t",
        "APM_SERVER_URL": "http://agent:8126",
        "APM_ENVIRONMENT": "production",
        "APM_SERVICE_VERSION": "2.0.1",
        "APM_ACTIVE": "false",
        "APM_CAPTURE_BODY": "ALL",
        "APM_CAPTURE_HEADERS": "0",
        "APM_LOG_LEVEL": " Debug ",
        "APM_LOG_FILE": "/tmp/trace-demo.log",
        "APM_GLOBAL_LABELS": "team:apm, tier:gold",
        "APM_SHUTDOWN_TIMEOUT": "0.5",
    }
    with override_env(env):
        config = TracingConfig()

    assert config.service_name == "checkout"
    assert config.secret_token == "s3cr3t"
    assert config.server_url == "http://agent:8126"
    assert config.environment == "production"
    assert config.service_version == "2.0.1"
    assert config.active is False
    assert config.capture_body == "all"
    assert config.capture_headers is False
    assert config.log_level == "debug"
    assert config.log_file == "/tmp/trace-demo.log"
    assert config.global_labels == {"team": "apm", "tier": "gold"}
    assert config.shutdown_timeout == 0.5


@pytest.mark.parametrize(
    "name,value",
    [
        ("APM_CAPTURE_BODY", "sometimes"),
        ("APM_LOG_LEVEL", "verbose"),
        ("APM_SHUTDOWN_TIMEOUT", "-1"),
        ("APM_SHUTDOWN_TIMEOUT", "soon"),
    ],
)
def test_tracing_config_invalid(name, value):
    with pytest.raises(ValueError):
        TracingConfig(source={name: value})


def test_tracing_config_global_labels_not_shared():
    first = TracingConfig()
    second = TracingConfig()
    assert first.global_labels is not second.global_labels

    first.global_labels["team"] = "apm"
    assert second.global_labels == {}
    assert TracingConfig().global_labels == {}


def test_runner_config_defaults():
    config = RunnerConfig()
    assert config.db_query_delay == 100
    assert config.http_call_delay == 200
    assert config.scenario_delay == 500
    assert config.drain_delay == 2000
    assert config.dashboard_url == "https://app.datadoghq.com/apm/traces"
    assert config.strict_exit is False


def test_runner_config_from_env():
    with override_env({"TRACE_DEMO_SCENARIO_DELAY": "0", "TRACE_DEMO_STRICT_EXIT": "true"}):
        config = RunnerConfig()
    assert config.scenario_delay == 0
    assert config.strict_exit is True


@pytest.mark.parametrize("name", ["TRACE_DEMO_DB_QUERY_DELAY", "TRACE_DEMO_DRAIN_DELAY"])
def test_runner_config_negative_delay(name):
    with pytest.raises(ValueError):
        RunnerConfig(source={name: "-10"})


@pytest.mark.parametrize(
    "name",
    [
        "TRACE_DEMO_DB_QUERY_DELAY",
        "TRACE_DEMO_HTTP_CALL_DELAY",
        "TRACE_DEMO_SCENARIO_DELAY",
        "TRACE_DEMO_DRAIN_DELAY",
    ],
)
def test_runner_config_not_a_number(name):
    with pytest.raises(ValueError):
        RunnerConfig(source={name: "soon"})


def test_runner_config_delay_whitespace():
    config = RunnerConfig(source={"TRACE_DEMO_HTTP_CALL_DELAY": " 250 "})
    assert config.http_call_delay == 250
