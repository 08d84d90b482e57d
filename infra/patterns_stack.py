"""Define a sample stack composing the resilient Step Functions constructs.

The state machine retries a unit of work with jittered backoff, then polls a
provisioning job until it reports a terminal status, and always runs a
cleanup step.
"""

from pathlib import Path

from aws_cdk import Aspects, Duration, Stack
from aws_cdk import aws_lambda as lambda_
from aws_cdk import aws_stepfunctions as sfn
from constructs import Construct

from sfn_patterns import (
    LoopTask,
    ResilienceLambdaChecker,
    ResilientLambdaTask,
    RetryPolicy,
    RetryWithJitterTask,
    TryTask,
)

FUNCTIONS = Path(__file__).resolve().parent / "functions"


class PatternsStack(Stack):
    """Provision the sample workflow and its Lambda functions."""

    def __init__(self, scope: Construct, id: str, **kwargs) -> None:
        super().__init__(scope, id, **kwargs)

        work = lambda_.Function(
            self,
            "WorkHandler",
            runtime=lambda_.Runtime.PYTHON_3_11,
            code=lambda_.Code.from_asset(str(FUNCTIONS / "work")),
            handler="index.handler",
            timeout=Duration.seconds(30),
        )
        work_task = ResilientLambdaTask(
            self,
            "DoWork",
            lambda_function=work,
            payload_response_only=True,
            result_path="$.WorkResult",
        )
        work_with_jitter = RetryWithJitterTask(
            self,
            "DoWorkWithJitter",
            try_process=work_task,
            retry_props=RetryPolicy(errors=("States.TaskFailed",), max_attempts=4),
            state_name_prefix="Work",
        )

        provision = LoopTask(
            self,
            "Provision",
            execute_step_code=lambda_.Code.from_asset(str(FUNCTIONS / "execute")),
            verify_step_code=lambda_.Code.from_asset(str(FUNCTIONS / "verify")),
            function_props={"timeout": Duration.minutes(1)},
            wait_seconds=30,
        )
        provision.add_catch(
            sfn.Fail(self, "ProvisioningFailed", error="ProvisioningFailed"),
            result_path="$.Error",
        )

        pipeline = TryTask(
            self,
            "Pipeline",
            try_process=sfn.Chain.start(work_with_jitter).next(provision),
            finally_process=sfn.Pass(self, "Cleanup"),
        )

        sfn.StateMachine(
            self,
            "Workflow",
            definition_body=sfn.DefinitionBody.from_chainable(pipeline),
        )

        Aspects.of(self).add(ResilienceLambdaChecker())
