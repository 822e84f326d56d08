# Reducer, effect runner and store
from .state import (
    Action,
    ActionType,
    Command,
    CommandType,
    FetchItems,
    ReducerOptions,
    reduce_actions,
    reduce_state,
    repository_load_action,
    repository_loading_complete_action,
    row_delete_action,
    row_move_action,
)
from .effects import EffectPhase, EffectRunner, FetchError, canonical_items, failing_fetcher
from .store import Store

__all__ = [
    "Action",
    "ActionType",
    "Command",
    "CommandType",
    "FetchItems",
    "ReducerOptions",
    "reduce_actions",
    "reduce_state",
    "repository_load_action",
    "repository_loading_complete_action",
    "row_delete_action",
    "row_move_action",
    "EffectPhase",
    "EffectRunner",
    "FetchError",
    "canonical_items",
    "failing_fetcher",
    "Store",
]
