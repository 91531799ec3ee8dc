from .client import TracingClient
from .runner import RunResult
from .runner import TraceDemoRunner
from .settings import RunnerConfig
from .settings import TracingConfig
from .version import __version__


__all__ = [
    "RunResult",
    "RunnerConfig",
    "TraceDemoRunner",
    "TracingClient",
    "TracingConfig",
    "__version__",
]
