"""AWS_EXECUTION_ENV tagging, so AWS can attribute traffic to this library."""

import os
from importlib.metadata import PackageNotFoundError, version

DISTRIBUTION = "asgi-lambda-hosting"
EXECUTION_ENV = "AWS_EXECUTION_ENV"


def _library_version() -> str:
    try:
        return version(DISTRIBUTION)
    except PackageNotFoundError:
        return "0.0.0"


def set_execution_environment(tag: str = DISTRIBUTION) -> str:
    """Append ``_lib/<tag>#<version>`` to AWS_EXECUTION_ENV once. Returns the new value."""
    marker = f"lib/{tag}#{_library_version()}"
    current = os.environ.get(EXECUTION_ENV, "")
    if marker in current:
        return current

    updated = f"{current}_{marker}" if current else marker
    os.environ[EXECUTION_ENV] = updated
    return updated
