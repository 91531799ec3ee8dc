# type: ignore
from typing import List  # noqa
from typing import Tuple  # noqa

from riot import Venv


latest = ""


SUPPORTED_PYTHON_VERSIONS = [
    (3, 8),
    (3, 9),
    (3, 10),
    (3, 11),
    (3, 12),
    (3, 13),
]  # type: List[Tuple[int, int]]


def version_to_str(version):
    # type: (Tuple[int, ...]) -> str
    """
    >>> version_to_str((3, 8))
    '3.8'
    """
    return ".".join(map(str, version))


MIN_PYTHON_VERSION = version_to_str(min(SUPPORTED_PYTHON_VERSIONS))
MAX_PYTHON_VERSION = version_to_str(max(SUPPORTED_PYTHON_VERSIONS))


def select_pys(min_version=MIN_PYTHON_VERSION, max_version=MAX_PYTHON_VERSION):
    # type: (str, str) -> List[str]
    """Supported Python versions between ``min_version`` and ``max_version``, inclusive.

    >>> select_pys(min_version="3.12")
    ['3.12', '3.13']
    """
    lo = tuple(int(p) for p in min_version.split("."))
    hi = tuple(int(p) for p in max_version.split("."))
    return [version_to_str(v) for v in SUPPORTED_PYTHON_VERSIONS if lo <= v <= hi]


venv = Venv(
    pkgs={
        "mock": latest,
        "pytest": latest,
        "pytest-randomly": latest,
        "coverage": latest,
    },
    env={
        # Keep ddtrace's background services quiet while testing
        "DD_INSTRUMENTATION_TELEMETRY_ENABLED": "0",
        "DD_REMOTE_CONFIGURATION_ENABLED": "0",
    },
    venvs=[
        Venv(
            name="trace-demo",
            command="pytest -v {cmdargs} tests/",
            venvs=[
                Venv(
                    name="trace-demo-ddtrace-min",
                    pys=MIN_PYTHON_VERSION,
                    pkgs={"ddtrace": "~=3.0.0"},
                ),
                Venv(
                    name="trace-demo-ddtrace-latest",
                    pys=select_pys(),
                    pkgs={"ddtrace": "<4"},
                ),
            ],
        ),
        Venv(
            name="flake8",
            command="flake8 {cmdargs} trace_demo tests",
            pys=[MAX_PYTHON_VERSION],
            pkgs={
                "flake8": latest,
                "flake8-isort": latest,
            },
        ),
    ],
)
