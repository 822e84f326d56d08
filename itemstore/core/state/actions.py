"""
Action types for the state reducer.

Every state change is requested by dispatching an Action. This enables:
- A single writer (the store)
- Deterministic replay of an action log
- Side effects expressed as data (commands), never performed by the reducer
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Union

from ...types import Failure, Success


class ActionType(str, Enum):
    """The closed set of actions."""

    # Row gestures from the list
    ROW_MOVE = "row_move"
    ROW_DELETE = "row_delete"

    # Repository
    REPOSITORY_LOAD = "repository_load"
    REPOSITORY_LOADING_COMPLETE = "repository_loading_complete"


@dataclass(frozen=True)
class Action:
    """
    Immutable request for a state change.

    Attributes:
        action_type: Which action this is
        payload: Action-specific data
        timestamp: When the action was created (ISO format)
        seq: Sequence number, assigned by the store on dispatch
        source: What created this action (for debugging)
    """
    action_type: ActionType
    payload: Dict[str, Any] = field(default_factory=dict)
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())
    seq: int = 0
    source: str = "unknown"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dictionary for logging."""
        payload: Dict[str, Any] = {}
        for key, value in self.payload.items():
            if isinstance(value, frozenset):
                payload[key] = sorted(value)
            elif isinstance(value, Success):
                payload[key] = {"success": [i.to_dict() for i in value.value]}
            elif isinstance(value, Failure):
                payload[key] = {"failure": value.error.to_dict()}
            else:
                payload[key] = value
        return {
            "action_type": self.action_type.value,
            "payload": payload,
            "timestamp": self.timestamp,
            "seq": self.seq,
            "source": self.source,
        }


# Action factory functions

def row_move_action(
    source: Iterable[int],
    destination: int,
    origin: str = "row_move_action",
) -> Action:
    """Move the rows at ``source`` to before offset ``destination``."""
    return Action(
        action_type=ActionType.ROW_MOVE,
        payload={"source": frozenset(source), "destination": destination},
        source=origin,
    )


def row_delete_action(
    source: Iterable[int],
    origin: str = "row_delete_action",
) -> Action:
    """Delete the rows at ``source``."""
    return Action(
        action_type=ActionType.ROW_DELETE,
        payload={"source": frozenset(source)},
        source=origin,
    )


def repository_load_action(origin: str = "repository_load_action") -> Action:
    """Request a (re)load of the item list."""
    return Action(
        action_type=ActionType.REPOSITORY_LOAD,
        payload={},
        source=origin,
    )


def repository_loading_complete_action(
    result: Union[Success, Failure],
    generation: Optional[int] = None,
    origin: str = "effect",
) -> Action:
    """Deliver the settled result of a fetch."""
    return Action(
        action_type=ActionType.REPOSITORY_LOADING_COMPLETE,
        payload={"result": result, "generation": generation},
        source=origin,
    )
