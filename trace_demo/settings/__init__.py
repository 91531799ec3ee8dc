from .runner import RunnerConfig
from .tracing import TracingConfig


__all__ = ["RunnerConfig", "TracingConfig"]
