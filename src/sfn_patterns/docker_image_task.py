"""State machine fragment backed by a container image Lambda function."""

from typing import Any

from aws_cdk import aws_lambda as lambda_

from .code_task import CodeTask


class DockerImageTask(CodeTask):
    """Like :class:`CodeTask` but ``function_props["code"]`` is a
    ``lambda_.DockerImageCode`` and the function is a ``DockerImageFunction``.
    """

    def _create_function(self, props: dict[str, Any]) -> lambda_.DockerImageFunction:
        return lambda_.DockerImageFunction(self, "Handler", **props)
