"""
Reducer debugging utilities.

Provides:
- StateDiff: Compare two ApplicationState objects
- debug_reducer: Wrap a reducer so every action logs its state changes
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Optional, Tuple

if TYPE_CHECKING:
    from .core.state.actions import Action
    from .core.state.reducer import Reducer, Reduction
    from .types import ApplicationState

logger = logging.getLogger(__name__)


@dataclass
class StateDiff:
    """Represents differences between two states."""
    old_state: Dict[str, Any]
    new_state: Dict[str, Any]
    changes: Dict[str, Tuple[Any, Any]] = field(default_factory=dict)

    @classmethod
    def compute(cls, old: ApplicationState, new: ApplicationState) -> "StateDiff":
        """Compute diff between two states."""
        d_old = _flatten(old.to_dict())
        d_new = _flatten(new.to_dict())
        changes = {}

        for k, v in d_new.items():
            if d_old.get(k) != v:
                changes[k] = (d_old.get(k), v)
        for k, v in d_old.items():
            if k not in d_new:
                changes[k] = (v, None)

        return cls(old_state=d_old, new_state=d_new, changes=changes)

    @property
    def is_empty(self) -> bool:
        return not self.changes

    def summary(self) -> str:
        """Human-readable summary of changes."""
        if not self.changes:
            return "No state changes."

        lines = ["State Changes:"]
        for k, (old, new) in self.changes.items():
            lines.append(f"  {k}: {old} -> {new}")
        return "\n".join(lines)


def _flatten(data: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        name = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(_flatten(value, f"{name}."))
        elif isinstance(value, list):
            flat[name] = [item.get("name", item) if isinstance(item, dict) else item for item in value]
        else:
            flat[name] = value
    return flat


def debug_reducer(reducer: Reducer, log: Optional[logging.Logger] = None) -> Reducer:
    """
    Wrap ``reducer`` with logging of every action and resulting state change.

    The wrapped reducer returns exactly what ``reducer`` returns.
    """
    log = log or logger

    def wrapped(state: ApplicationState, action: Action) -> Reduction:
        log.debug(f"received action: {action.to_dict()}")
        new_state, command = reducer(state, action)
        log.debug(StateDiff.compute(state, new_state).summary())
        if command is not None:
            log.debug(f"emitted command: {command.to_dict()}")
        return new_state, command

    return wrapped
