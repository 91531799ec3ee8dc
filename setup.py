from pathlib import Path

from setuptools import find_packages, setup  # isort: skip


HERE = Path(__file__).resolve().parent


def get_long_description():
    readme = HERE / "README.md"
    if readme.exists():
        return readme.read_text(encoding="utf-8")
    return "Smoke-test harness exercising an APM tracing client with demo transactions."


setup(
    name="trace-demo",
    version="1.0.0",
    description="Generate demo transactions, spans, errors and metadata through ddtrace",
    long_description=get_long_description(),
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests*"]),
    python_requires=">=3.8",
    install_requires=[
        "ddtrace>=3.0,<4",
        "envier~=0.6",
    ],
    extras_require={
        "test": [
            "mock",
            "pytest",
            "riot",
        ],
    },
    entry_points={
        "console_scripts": [
            "trace-demo = trace_demo.commands.trace_demo_run:main",
        ],
    },
    zip_safe=False,
)
