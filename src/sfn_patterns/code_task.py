"""State machine fragment that deploys and invokes a Lambda function."""

from typing import Any, Mapping

from aws_cdk import Duration
from aws_cdk import aws_lambda as lambda_
from aws_cdk import aws_stepfunctions as sfn
from constructs import Construct

from .constants import (
    DEFAULT_FUNCTION_HANDLER,
    DEFAULT_FUNCTION_MEMORY_MB,
    DEFAULT_FUNCTION_TIMEOUT_MINUTES,
    LIVE_ALIAS,
)
from .resilient_lambda_task import ResilientLambdaTask


class CodeTask(sfn.StateMachineFragment):
    """Create a Lambda function from ``function_props`` and invoke it.

    ``function_props`` takes the ``lambda_.Function`` keyword arguments and
    must include ``code``. Runtime, handler, timeout and memory size fall back
    to Python 3.11, ``index.handler``, 15 minutes and 512 MB. The task invokes
    the ``live`` alias of the current version and returns only the response
    payload.
    """

    def __init__(
        self,
        scope: Construct,
        id: str,
        *,
        function_props: Mapping[str, Any],
        function_payload: Mapping[str, Any] | None = None,
        comment: str | None = None,
        input_path: str | None = None,
        output_path: str | None = None,
        result_path: str | None = None,
        result_selector: Mapping[str, Any] | None = None,
    ) -> None:
        props = dict(function_props)
        if props.get("code") is None:
            raise ValueError("function_props must include 'code'")
        props.setdefault("timeout", Duration.minutes(DEFAULT_FUNCTION_TIMEOUT_MINUTES))
        props.setdefault("memory_size", DEFAULT_FUNCTION_MEMORY_MB)

        super().__init__(scope, id)

        self.lambda_function = self._create_function(props)
        self.alias = lambda_.Alias(
            self,
            "LambdaAlias",
            alias_name=LIVE_ALIAS,
            version=self.lambda_function.current_version,
        )

        payload = None
        if function_payload is not None:
            payload = sfn.TaskInput.from_object(dict(function_payload))

        self.task = ResilientLambdaTask(
            self,
            id,
            lambda_function=self.alias,
            payload=payload,
            payload_response_only=True,
            comment=comment,
            input_path=input_path,
            output_path=output_path,
            result_path=result_path,
            result_selector=None if result_selector is None else dict(result_selector),
        )
        self.task.add_retry(errors=["ServiceUnavailableException"])

    def _create_function(self, props: dict[str, Any]) -> lambda_.Function:
        props.setdefault("runtime", lambda_.Runtime.PYTHON_3_11)
        props.setdefault("handler", DEFAULT_FUNCTION_HANDLER)
        return lambda_.Function(self, "Handler", **props)

    @property
    def start_state(self) -> sfn.State:
        return self.task

    @property
    def end_states(self) -> list[sfn.INextable]:
        return [self.task]

    def add_catch(
        self,
        handler: sfn.IChainable,
        *,
        errors: list[str] | None = None,
        result_path: str | None = None,
    ) -> "CodeTask":
        """Route failures of the invoke task to ``handler``."""
        self.task.add_catch(handler, errors=errors, result_path=result_path)
        return self
