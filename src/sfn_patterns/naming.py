"""State name helpers that respect the Step Functions length limit."""

import logging

from .constants import MAX_STATE_NAME_LENGTH, STATE_NAME_LENGTH_ERROR, load_state_name_mode


class StateNameTooLongError(ValueError):
    """Raised when a generated state name exceeds the service limit."""

    def __init__(self, name: str) -> None:
        super().__init__(
            f"state name {name!r} is {len(name)} characters long; "
            f"the limit is {MAX_STATE_NAME_LENGTH}"
        )
        self.name = name


def create_state_name(prefix: str | None, name: str, *, strict: bool | None = None) -> str:
    """Return ``name`` qualified by ``prefix``.

    Args:
        prefix: Optional prefix joined to ``name`` with a dash.
        name: Base state name.
        strict: Raise on overlong names. ``None`` reads the mode from
            ``SFN_PATTERNS_STATE_NAMES``.

    Returns:
        str: ``"<prefix>-<name>"`` or ``name`` when the prefix is empty. In
        legacy mode an overlong name is replaced by the length error message.

    Raises:
        StateNameTooLongError: If the name is too long and ``strict`` holds.
    """

    state_name = f"{prefix}-{name}" if prefix else name
    if len(state_name) <= MAX_STATE_NAME_LENGTH:
        return state_name
    if strict is None:
        strict = load_state_name_mode() == "strict"
    if strict:
        raise StateNameTooLongError(state_name)
    logging.getLogger(__name__).error(
        "state name %r exceeds %d characters", state_name, MAX_STATE_NAME_LENGTH
    )
    return STATE_NAME_LENGTH_ERROR
