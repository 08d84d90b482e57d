"""Synth-time checks for Lambda invocations in state machines."""

import json
from typing import Any, Iterator, Mapping

import jsii
from aws_cdk import Annotations, IAspect, Token
from aws_cdk import aws_stepfunctions as sfn
from aws_cdk import aws_stepfunctions_tasks as tasks
from constructs import IConstruct

from .policy import LAMBDA_SERVICE_ERRORS, TRANSIENT_ERRORS

REQUIRED_ERRORS = LAMBDA_SERVICE_ERRORS + TRANSIENT_ERRORS


def missing_retry_errors(retries: list[Mapping[str, Any]]) -> list[str]:
    """Return required transient errors not covered by ``retries``.

    Args:
        retries: ``Retry`` entries of an Amazon States Language task.

    Returns:
        list[str]: Missing error names in declaration order.
    """

    covered: set[str] = set()
    for retry in retries:
        covered.update(retry.get("ErrorEquals", []))
    if sfn.Errors.ALL in covered:
        return []
    return [error for error in REQUIRED_ERRORS if error not in covered]


def _lambda_tasks(states: Mapping[str, Any]) -> Iterator[tuple[str, Mapping[str, Any]]]:
    for name, state in states.items():
        kind = state.get("Type")
        if kind == "Task" and ":lambda:" in str(state.get("Resource", "")):
            yield name, state
        elif kind == "Parallel":
            for branch in state.get("Branches", []):
                yield from _lambda_tasks(branch.get("States", {}))
        elif kind == "Map":
            processor = state.get("ItemProcessor") or state.get("Iterator") or {}
            yield from _lambda_tasks(processor.get("States", {}))


@jsii.implements(IAspect)
class ResilienceLambdaChecker:
    """Report Lambda tasks that do not retry transient Lambda errors.

    ``LambdaInvoke`` tasks are inspected directly. ``CfnStateMachine``
    resources are inspected when their definition is a literal JSON string.
    Findings are warnings unless ``fail`` is set.
    """

    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail

    def visit(self, node: IConstruct) -> None:
        if isinstance(node, tasks.LambdaInvoke):
            missing = missing_retry_errors(node.to_state_json().get("Retry", []))
            if missing:
                self._report(node, node.node.id, missing)
        elif isinstance(node, sfn.CfnStateMachine):
            definition = node.definition_string
            if not definition or Token.is_unresolved(definition):
                return
            try:
                states = json.loads(definition).get("States", {})
            except ValueError as exc:
                raise ValueError(f"invalid state machine definition in {node.node.path}") from exc
            for name, state in _lambda_tasks(states):
                missing = missing_retry_errors(state.get("Retry", []))
                if missing:
                    self._report(node, name, missing)

    def _report(self, node: IConstruct, state_name: str, missing: list[str]) -> None:
        message = (
            f"Lambda task '{state_name}' does not retry transient errors: "
            + ", ".join(missing)
            + ". Use ResilientLambdaTask or ResilientLambdaTask.add_default_retry()."
        )
        if self.fail:
            Annotations.of(node).add_error(message)
        else:
            Annotations.of(node).add_warning_v2("sfn-patterns:missing-transient-retry", message)
