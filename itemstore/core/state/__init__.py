# Pure state transitions: actions in, (state, command) out
from .actions import (
    Action,
    ActionType,
    repository_load_action,
    repository_loading_complete_action,
    row_delete_action,
    row_move_action,
)
from .commands import Command, CommandType, FetchItems
from .reducer import ReducerOptions, reduce_actions, reduce_state

__all__ = [
    "Action",
    "ActionType",
    "row_move_action",
    "row_delete_action",
    "repository_load_action",
    "repository_loading_complete_action",
    "Command",
    "CommandType",
    "FetchItems",
    "ReducerOptions",
    "reduce_state",
    "reduce_actions",
]
