"""
Unidirectional state container for an asynchronously loaded, reorderable list.

Actions go into a Store, a pure reducer computes the next state and any
command, and an effect runner executes commands and dispatches their results.
"""
from .types import ApplicationState, ErrorInfo, Failure, Item, Success
from .loadable import Failed, Loadable, Loaded, Loading, LoadPhase, NotRequested, match_loadable
from .list_ops import IndexOutOfRangeError, delete_items, move_items
from .config import StoreConfig, load_config
from .core import (
    Action,
    ActionType,
    EffectRunner,
    FetchError,
    FetchItems,
    Store,
    reduce_state,
    repository_load_action,
    repository_loading_complete_action,
    row_delete_action,
    row_move_action,
)

__version__ = "0.1.0"

__all__ = [
    "ApplicationState",
    "ErrorInfo",
    "Item",
    "Success",
    "Failure",
    "Loadable",
    "LoadPhase",
    "NotRequested",
    "Loading",
    "Loaded",
    "Failed",
    "match_loadable",
    "IndexOutOfRangeError",
    "move_items",
    "delete_items",
    "StoreConfig",
    "load_config",
    "Action",
    "ActionType",
    "row_move_action",
    "row_delete_action",
    "repository_load_action",
    "repository_loading_complete_action",
    "FetchItems",
    "reduce_state",
    "EffectRunner",
    "FetchError",
    "Store",
]
