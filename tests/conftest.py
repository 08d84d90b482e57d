import copy
from types import SimpleNamespace

import aws_cdk as cdk
import pytest
from aws_cdk import aws_lambda as lambda_
from aws_cdk import aws_stepfunctions as sfn

DISCARDABLE = ("InputPath", "ResultPath", "OutputPath")


@pytest.fixture()
def stack():
    app = cdk.App()
    return cdk.Stack(app, "TestStack")


@pytest.fixture()
def function(stack):
    return lambda_.Function(
        stack,
        "Fn",
        runtime=lambda_.Runtime.PYTHON_3_11,
        handler="index.handler",
        code=lambda_.Code.from_inline("def handler(event, context):\n    return event\n"),
    )


@pytest.fixture()
def render():
    """Render ``chainable`` as resolved Amazon States Language.

    Paths set to ``DISCARD`` stay present with a ``None`` value, as in the
    synthesized definition; unset paths stay absent.
    """

    def _render(chainable: sfn.IChainable) -> dict:
        start = sfn.Chain.start(chainable).start_state
        raw = sfn.StateGraph(start, "test graph").to_graph_json()
        resolved = cdk.Stack.of(start).resolve(raw)
        _keep_discards(raw, resolved)
        return resolved

    return _render


def _keep_discards(raw, resolved):
    for name, state in raw["States"].items():
        target = resolved["States"][name]
        for key in DISCARDABLE:
            if key in state and target.get(key) is None:
                target[key] = None
        for raw_branch, branch in zip(state.get("Branches", []), target.get("Branches", [])):
            _keep_discards(raw_branch, branch)


def _read(doc, path):
    if path == "$":
        return doc
    if path == "$[0]":
        return doc[0]
    for part in path[2:].split("."):
        doc = doc[part]
    return doc


def _write(doc, path, value):
    if path == "$":
        return value
    result = copy.deepcopy(doc)
    cursor = result
    parts = path[2:].split(".")
    for part in parts[:-1]:
        cursor = cursor.setdefault(part, {})
    cursor[parts[-1]] = value
    return result


def _parameters(params, doc, context):
    resolved = {}
    for key, value in params.items():
        if not key.endswith(".$"):
            resolved[key] = value
        elif value.startswith("$$."):
            resolved[key[:-2]] = _read(context, "$" + value[2:])
        else:
            resolved[key[:-2]] = _read(doc, value)
    return resolved


def _matches(rule, doc):
    try:
        value = _read(doc, rule["Variable"])
    except (KeyError, TypeError):
        return rule.get("IsPresent") is False
    if "IsPresent" in rule:
        return rule["IsPresent"]
    if "NumericGreaterThan" in rule:
        return value > rule["NumericGreaterThan"]
    if "StringEquals" in rule:
        return value == rule["StringEquals"]
    raise AssertionError(f"unsupported rule {rule}")


def _select(doc, state, key):
    """Apply ``InputPath`` or ``OutputPath``; ``None`` means ``DISCARD``."""
    if key not in state:
        return doc
    if state[key] is None:
        return {}
    return _read(doc, state[key])


def _run(graph, doc, handlers, context, max_steps):
    states = graph["States"]
    name = graph["StartAt"]
    trace, waits = [], []
    for _ in range(max_steps):
        state = states[name]
        trace.append(name)
        kind = state["Type"]
        if kind == "Choice":
            name = next(
                (rule["Next"] for rule in state["Choices"] if _matches(rule, doc)),
                state.get("Default"),
            )
            continue
        if kind == "Fail":
            return SimpleNamespace(trace=trace, output=doc, waits=waits, failed=True)
        if kind in ("Task", "Parallel"):
            effective = _select(doc, state, "InputPath")
            if "Parameters" in state:
                effective = _parameters(state["Parameters"], effective, context)
            if kind == "Task":
                result = handlers[name](effective)
            else:
                result = []
                for branch in state["Branches"]:
                    run = _run(branch, effective, handlers, context, max_steps)
                    trace.extend(run.trace)
                    waits.extend(run.waits)
                    if run.failed:
                        return SimpleNamespace(
                            trace=trace, output=run.output, waits=waits, failed=True
                        )
                    result.append(run.output)
            if "ResultPath" not in state:
                doc = result
            elif state["ResultPath"] is not None:
                doc = _write(doc, state["ResultPath"], result)
        elif kind == "Wait":
            waits.append(
                _read(doc, state["SecondsPath"]) if "SecondsPath" in state else state["Seconds"]
            )
        doc = _select(doc, state, "OutputPath")
        if state.get("End"):
            return SimpleNamespace(trace=trace, output=doc, waits=waits, failed=False)
        name = state["Next"]
    raise AssertionError("graph did not terminate")


@pytest.fixture()
def walk():
    """Follow a rendered graph the way the service would, with fake tasks.

    ``handlers`` maps task state names to callables receiving the effective
    task input and returning its result. ``context`` backs ``$$.`` paths.
    """

    def _walk(graph, doc, handlers, context=None, max_steps=50):
        return _run(graph, doc, handlers, context or {}, max_steps)

    return _walk
