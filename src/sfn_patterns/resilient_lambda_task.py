"""Lambda invoke task with transient error handling."""

from aws_cdk import aws_stepfunctions_tasks as tasks
from constructs import Construct

from .policy import DEFAULT_LAMBDA_RETRY, TRANSIENT_ERRORS


class ResilientLambdaTask(tasks.LambdaInvoke):
    """``LambdaInvoke`` that retries throttling with exponential backoff.

    Accepts the same keyword arguments as ``LambdaInvoke``.
    """

    TRANSIENT_ERRORS = TRANSIENT_ERRORS

    def __init__(self, scope: Construct, id: str, **kwargs) -> None:
        super().__init__(scope, id, **kwargs)
        ResilientLambdaTask.add_default_retry(self)

    @staticmethod
    def add_default_retry(task: tasks.LambdaInvoke) -> None:
        """Add the transient Lambda error retry to ``task``.

        Args:
            task: Lambda task to modify.
        """

        DEFAULT_LAMBDA_RETRY.apply(task)
