"""Retry policies attached to Step Functions states."""

from dataclasses import dataclass

from aws_cdk import Duration
from aws_cdk import aws_stepfunctions as sfn

# Retried by ``LambdaInvoke`` unless ``retry_on_service_exceptions`` is off
LAMBDA_SERVICE_ERRORS = (
    "Lambda.ServiceException",
    "Lambda.AWSLambdaException",
    "Lambda.SdkClientException",
)

# Not covered by the CDK defaults
TRANSIENT_ERRORS = ("Lambda.TooManyRequestsException",)


@dataclass(frozen=True)
class RetryPolicy:
    """Declarative retry rule executed by the Step Functions service.

    ``errors`` lists the error classes to retry. ``max_attempts`` bounds the
    retries, ``interval_seconds`` seeds the first delay and ``backoff_rate``
    multiplies it on every attempt.
    """

    errors: tuple[str, ...] = (sfn.Errors.ALL,)
    max_attempts: int = 3
    backoff_rate: float = 2.0
    interval_seconds: int = 1

    def __post_init__(self) -> None:
        if isinstance(self.errors, str):
            raise TypeError("errors must be a sequence of error names")
        object.__setattr__(self, "errors", tuple(self.errors))
        if not self.errors:
            raise ValueError("errors must not be empty")
        if not isinstance(self.max_attempts, int) or self.max_attempts < 0:
            raise ValueError("max_attempts must be a non-negative integer")
        if self.backoff_rate < 1:
            raise ValueError("backoff_rate must be at least 1")
        if not isinstance(self.interval_seconds, int) or self.interval_seconds < 0:
            raise ValueError("interval_seconds must be a non-negative integer")

    @classmethod
    def from_retry_props(cls, props: sfn.RetryProps) -> "RetryPolicy":
        """Return a policy equivalent to CDK ``RetryProps``.

        Unset fields take the Step Functions defaults.
        """
        interval = props.interval
        return cls(
            errors=tuple(props.errors or (sfn.Errors.ALL,)),
            max_attempts=3 if props.max_attempts is None else props.max_attempts,
            backoff_rate=2.0 if props.backoff_rate is None else props.backoff_rate,
            interval_seconds=1 if interval is None else int(interval.to_seconds()),
        )

    def apply(self, state: sfn.State) -> sfn.State:
        """Attach the policy to ``state`` and return it."""
        state.add_retry(
            errors=list(self.errors),
            max_attempts=self.max_attempts,
            backoff_rate=self.backoff_rate,
            interval=Duration.seconds(self.interval_seconds),
        )
        return state


# https://docs.aws.amazon.com/step-functions/latest/dg/bp-lambda-serviceexception.html
DEFAULT_LAMBDA_RETRY = RetryPolicy(
    errors=TRANSIENT_ERRORS,
    max_attempts=6,
    backoff_rate=2,
    interval_seconds=2,
)
