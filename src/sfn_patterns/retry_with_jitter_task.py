"""Retry a chain with exponential backoff and jitter.

Step Functions retries cannot randomize their delay, so the wrapped chain runs
inside a single-branch ``Parallel`` state. The branch reads the retry count the
service keeps for the ``Parallel`` retrier, asks a small Lambda for a jittered
wait on every retry and sleeps before handing the original input to the chain.
The native retrier has a zero interval so the computed wait is the only delay.
"""

from aws_cdk import Duration
from aws_cdk import aws_lambda as lambda_
from aws_cdk import aws_stepfunctions as sfn
from constructs import Construct

from .constants import JITTER_ASSET, JITTER_BACKOFF, JITTER_HANDLER
from .naming import create_state_name
from .policy import RetryPolicy
from .resilient_lambda_task import ResilientLambdaTask


class RetryWithJitterTask(sfn.Parallel):
    """Run ``try_process`` and retry it with backoff and jitter.

    The state output is the output of ``try_process``; the ``Parallel``
    wrapping is removed again through ``output_path``.
    """

    def __init__(
        self,
        scope: Construct,
        id: str,
        *,
        try_process: sfn.IChainable,
        retry_props: RetryPolicy | sfn.RetryProps,
        comment: str | None = None,
        input_path: str | None = None,
        result_path: str | None = None,
        state_name_prefix: str | None = None,
        jitter_function: lambda_.IFunction | None = None,
        strict_state_names: bool | None = None,
    ) -> None:
        """Build the retry branch.

        Args:
            scope: Parent construct.
            id: Construct id and state name of the ``Parallel`` state.
            try_process: Chain to execute and retry.
            retry_props: Errors to retry and the attempt bound. Interval and
                backoff rate are ignored; the jitter wait replaces them.
            comment: Optional state comment.
            input_path: JSONPath selecting the state input, or ``DISCARD``.
            result_path: ``None`` or ``"$"``. The branch result list is
                unwrapped with ``output_path="$[0]"``, which needs the list
                to be the whole state output.
            state_name_prefix: Prefix for the generated state names. Use it
                when several retries share a state machine or names get long.
            jitter_function: Existing jitter calculator to invoke instead of
                deploying a new one for this state.
            strict_state_names: See :func:`sfn_patterns.naming.create_state_name`.

        Raises:
            StateNameTooLongError: If a generated state name is too long.
            ValueError: If ``result_path`` places the result anywhere but ``$``.
        """

        if result_path not in (None, "$"):
            raise ValueError(
                f"result_path must be None or '$', got {result_path!r}; "
                "the output is unwrapped with output_path '$[0]'"
            )

        policy = (
            retry_props
            if isinstance(retry_props, RetryPolicy)
            else RetryPolicy.from_retry_props(retry_props)
        )

        # Resolve every name before any construct exists
        def name(base: str) -> str:
            return create_state_name(state_name_prefix, base, strict=strict_state_names)

        calculate_name = name("CalculateJitter")
        wait_name = name("WaitBetweenRetries")
        unwrap_name = name("Unwrap Input")
        check_name = name("CheckRetryCount")

        super().__init__(
            scope,
            id,
            comment=comment,
            input_path=input_path,
            output_path="$[0]",
            result_path=result_path,
            parameters={
                "RetryCount.$": "$$.State.RetryCount",
                "Input.$": "$",
            },
        )

        if jitter_function is None:
            jitter_function = lambda_.Function(
                self,
                "CalculateJitterLambda",
                runtime=lambda_.Runtime.PYTHON_3_11,
                code=lambda_.Code.from_asset(str(JITTER_ASSET)),
                handler=JITTER_HANDLER,
            )
        self.jitter_function = jitter_function
        self.retry_policy = policy

        self.calculate_jitter_task = ResilientLambdaTask(
            self,
            calculate_name,
            lambda_function=jitter_function,
            payload=sfn.TaskInput.from_object(
                {
                    "RetryCount.$": "$.RetryCount",
                    "Backoff": JITTER_BACKOFF,
                }
            ),
            payload_response_only=True,
            result_path="$.WaitSeconds",
        )

        wait = sfn.Wait(
            self,
            wait_name,
            time=sfn.WaitTime.seconds_path("$.WaitSeconds"),
        )

        # Restores the original input; Wait states cannot set an output path
        unwrap_input = sfn.Pass(self, unwrap_name, output_path="$.Input")

        retry_path = self.calculate_jitter_task.next(wait).next(unwrap_input)

        check_retry_count = (
            sfn.Choice(self, check_name)
            .when(sfn.Condition.number_greater_than("$.RetryCount", 0), retry_path)
            .otherwise(unwrap_input)
            .afterwards()
            .next(try_process)
        )

        self.branch(check_retry_count)

        self.add_retry(
            errors=list(policy.errors),
            max_attempts=policy.max_attempts,
            interval=Duration.seconds(0),
        )
