from __future__ import annotations

import logging
from typing import Any, Dict

from .types import EMPTY_SNAPSHOT, VariableSnapshot, freeze

logger = logging.getLogger(__name__)

_UNREADABLE = object()


def coerce_value(val: Any) -> Any:
    """Unwrap boxed engine values; absent stays None, the rest passes through."""
    if val is None:
        return None
    if hasattr(val, "value"):
        return val.value
    return val


def _read_variable(variables: Any, name: str) -> Any:
    try:
        return coerce_value(variables.get_variable_with_name(name))
    except Exception as e:
        logger.debug("Skipping unreadable variable %r: %s", name, e)
        return _UNREADABLE


def snapshot_variables(story: Any) -> VariableSnapshot:
    """Capture every named variable of ``story``; never raises.

    A variable that cannot be read is left out. If the variable state itself
    is inaccessible the snapshot is empty.
    """
    try:
        variables = story.variables_state
        names = list(variables) if variables is not None else []
    except Exception as e:
        logger.debug("Variable state unavailable: %s", e)
        return EMPTY_SNAPSHOT
    values: Dict[str, Any] = {}
    for name in names:
        value = _read_variable(variables, name)
        if value is not _UNREADABLE:
            values[name] = value
    return freeze(values)
