"""Jitter calculator invoked by ``RetryWithJitterTask``.

Returns the number of seconds to wait before the next attempt using "full
jitter": a uniform draw between zero and the exponential backoff ceiling.
"""

import logging
import os
import random
from dataclasses import dataclass
from typing import Any, Mapping

DEFAULT_MAX_WAIT_SECONDS = 900


@dataclass
class JitterEvent:
    """Invocation payload for :func:`lambda_handler`."""

    retry_count: int
    backoff: int

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "JitterEvent":
        """Return ``JitterEvent`` built from ``data``.

        Args:
            data: Mapping with keys ``"RetryCount"`` and ``"Backoff"``.

        Returns:
            JitterEvent: Parsed event object.

        Raises:
            KeyError: If a required field is missing.
            TypeError: If ``data`` is not a mapping or values are not integers.
            ValueError: If a value is out of range.
        """
        if not isinstance(data, Mapping):
            raise TypeError("event must be a mapping")
        try:
            retry_count = data["RetryCount"]
            backoff = data["Backoff"]
        except KeyError as exc:
            raise KeyError(f"missing field: {exc.args[0]}") from exc
        for value in (retry_count, backoff):
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError("RetryCount and Backoff must be integers")
        if retry_count < 0:
            raise ValueError("RetryCount must not be negative")
        if backoff < 1:
            raise ValueError("Backoff must be at least 1")
        return cls(retry_count=retry_count, backoff=backoff)


def _max_wait_seconds() -> int:
    raw = os.environ.get("JITTER_MAX_WAIT_SECONDS", str(DEFAULT_MAX_WAIT_SECONDS))
    try:
        value = int(raw)
    except ValueError as exc:
        raise RuntimeError("JITTER_MAX_WAIT_SECONDS must be an integer") from exc
    if value < 0:
        raise RuntimeError("JITTER_MAX_WAIT_SECONDS must not be negative")
    return value


def lambda_handler(event: Mapping[str, Any] | JitterEvent, _ctx) -> int:
    """Return a jittered wait in seconds for the given retry count.

    Args:
        event: Payload with ``RetryCount`` and ``Backoff``.
        _ctx: Lambda context object (unused).

    Returns:
        int: Seconds to wait, ``0`` on the first attempt.

    Raises:
        KeyError: If ``event`` is missing required fields.
        RuntimeError: If ``JITTER_MAX_WAIT_SECONDS`` is invalid.
        TypeError: If ``event`` is not a mapping of integers.
        ValueError: If a field is out of range.
    """

    evt = event if isinstance(event, JitterEvent) else JitterEvent.from_dict(event)
    cap = _max_wait_seconds()
    if evt.retry_count == 0:
        return 0
    ceiling = min(cap, evt.backoff**evt.retry_count)
    wait = random.randint(0, ceiling)  # nosec B311 - not a security context
    logging.getLogger(__name__).info(
        "retry %d: waiting %d of at most %d seconds", evt.retry_count, wait, ceiling
    )
    return wait
