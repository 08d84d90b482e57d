"""Execute, wait and verify loop fragments."""

from typing import Any, Mapping

from aws_cdk import Duration
from aws_cdk import aws_lambda as lambda_
from aws_cdk import aws_stepfunctions as sfn
from constructs import Construct

from .code_task import CodeTask
from .constants import DEFAULT_VERIFY_PATH, DEFAULT_VERIFY_STATUS_FIELD, DEFAULT_WAIT_SECONDS
from .docker_image_task import DockerImageTask


class LoopTask(sfn.StateMachineFragment):
    """Step function execute, wait and verify loop.

    The execute step runs once with its result discarded. The verify step
    stores its result at ``verify_path`` and the loop exits when the
    ``verify_status_field`` of that result is ``SUCCEEDED`` (through the
    ``Succeeded`` pass state, the only end state) or ``FAILED`` (through the
    ``Failed`` fail state). Any other status waits and verifies again.
    """

    task_class: type[CodeTask] = CodeTask

    def __init__(
        self,
        scope: Construct,
        id: str,
        *,
        execute_step_code: lambda_.Code,
        verify_step_code: lambda_.Code,
        function_payload: Mapping[str, Any] | None = None,
        function_props: Mapping[str, Any] | None = None,
        wait_seconds: int = DEFAULT_WAIT_SECONDS,
        verify_path: str = DEFAULT_VERIFY_PATH,
        verify_status_field: str = DEFAULT_VERIFY_STATUS_FIELD,
    ) -> None:
        if (
            isinstance(wait_seconds, bool)
            or not isinstance(wait_seconds, int)
            or wait_seconds < 1
        ):
            raise ValueError("wait_seconds must be a positive integer")
        function_props = dict(function_props or {})
        function_props.pop("code", None)

        super().__init__(scope, id)

        status_path = f"{verify_path}.{verify_status_field}"

        self.execution_lambda = self.task_class(
            self,
            "Exec",
            result_path=sfn.JsonPath.DISCARD,
            function_payload=function_payload,
            function_props={**function_props, "code": execute_step_code},
        )
        self.verification_lambda = self.task_class(
            self,
            "Verify",
            result_path=verify_path,
            function_payload=function_payload,
            function_props={**function_props, "code": verify_step_code},
        )
        self.execution_task = self.execution_lambda.task
        self.verify_task = self.verification_lambda.task

        wait = sfn.Wait(
            self,
            "Wait",
            time=sfn.WaitTime.duration(Duration.seconds(wait_seconds)),
        )
        self.succeeded = sfn.Pass(self, "Succeeded")
        self.failed = sfn.Fail(self, "Failed")

        sfn.Chain.start(self.execution_lambda).next(wait).next(
            self.verification_lambda
        ).next(
            sfn.Choice(self, "Choice")
            .when(sfn.Condition.string_equals(status_path, "SUCCEEDED"), self.succeeded)
            .when(sfn.Condition.string_equals(status_path, "FAILED"), self.failed)
            .otherwise(wait)
        )

    @property
    def start_state(self) -> sfn.State:
        return self.execution_task

    @property
    def end_states(self) -> list[sfn.INextable]:
        return [self.succeeded]

    def add_catch(
        self,
        handler: sfn.IChainable,
        *,
        errors: list[str] | None = None,
        result_path: str | None = None,
    ) -> "LoopTask":
        """Route failures of the execute and verify steps to ``handler``."""
        self.execution_lambda.add_catch(handler, errors=errors, result_path=result_path)
        self.verification_lambda.add_catch(handler, errors=errors, result_path=result_path)
        return self


class LoopDockerImageTask(LoopTask):
    """:class:`LoopTask` whose steps run container image functions.

    ``execute_step_code`` and ``verify_step_code`` are ``lambda_.DockerImageCode``.
    """

    task_class = DockerImageTask
