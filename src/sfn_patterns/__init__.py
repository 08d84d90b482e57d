"""Resilient AWS Step Functions building blocks for the AWS CDK."""

from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
import re

from .aspects import ResilienceLambdaChecker
from .code_task import CodeTask
from .docker_image_task import DockerImageTask
from .loop_task import LoopDockerImageTask, LoopTask
from .naming import StateNameTooLongError, create_state_name
from .policy import DEFAULT_LAMBDA_RETRY, TRANSIENT_ERRORS, RetryPolicy
from .resilient_lambda_task import ResilientLambdaTask
from .retry_with_jitter_task import RetryWithJitterTask
from .try_task import TryTask

_pyproject = Path(__file__).resolve().parent.parent.parent / "pyproject.toml"


def _read_version(path: Path) -> str:
    text = path.read_text(encoding="utf-8")
    match = re.search(r'^version\s*=\s*"([^"]+)"', text, flags=re.MULTILINE)
    if not match:
        raise RuntimeError("version not found in pyproject.toml")
    return match.group(1)


try:
    __version__ = version("sfn-patterns")
except PackageNotFoundError:
    __version__ = _read_version(_pyproject)

__all__ = [
    "CodeTask",
    "DockerImageTask",
    "LoopTask",
    "LoopDockerImageTask",
    "ResilientLambdaTask",
    "RetryWithJitterTask",
    "TryTask",
    "ResilienceLambdaChecker",
    "RetryPolicy",
    "DEFAULT_LAMBDA_RETRY",
    "TRANSIENT_ERRORS",
    "StateNameTooLongError",
    "create_state_name",
    "__version__",
]
