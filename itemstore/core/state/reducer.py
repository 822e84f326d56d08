"""
Pure reducer for application state.

Uses a dispatch dictionary keyed by action type. Handlers never perform
I/O; work that must happen outside the reducer is returned as a Command.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple

from .actions import Action, ActionType
from .commands import Command, FetchItems
from ...list_ops import delete_items, move_items
from ...loadable import Failed, Loaded, Loading
from ...types import ApplicationState, Failure, Success

logger = logging.getLogger(__name__)

Reduction = Tuple[ApplicationState, Optional[Command]]
Reducer = Callable[[ApplicationState, Action], Reduction]


@dataclass(frozen=True)
class ReducerOptions:
    """
    Behavior switches for the repository actions.

    Attributes:
        eager_loading: Enter Loading synchronously on RepositoryLoad,
            carrying the last loaded value forward
        guard_stale_loads: Discard completions whose generation is not the
            most recently issued load
    """
    eager_loading: bool = True
    guard_stale_loads: bool = True


DEFAULT_OPTIONS = ReducerOptions()


def _handle_row_move(
    state: ApplicationState,
    payload: Dict[str, Any],
    options: ReducerOptions,
) -> Reduction:
    """Handle ROW_MOVE. Only a Loaded list can be reordered."""
    if not state.items.is_loaded:
        return state, None
    moved = move_items(state.items.value(), payload["source"], payload["destination"])
    return state.with_items(Loaded(moved)), None


def _handle_row_delete(
    state: ApplicationState,
    payload: Dict[str, Any],
    options: ReducerOptions,
) -> Reduction:
    """Handle ROW_DELETE. Only a Loaded list can lose rows."""
    if not state.items.is_loaded:
        return state, None
    remaining = delete_items(state.items.value(), payload["source"])
    return state.with_items(Loaded(remaining)), None


def _handle_repository_load(
    state: ApplicationState,
    payload: Dict[str, Any],
    options: ReducerOptions,
) -> Reduction:
    """Handle REPOSITORY_LOAD. Accepted from every phase."""
    generation = state.load_generation + 1
    items = state.items
    if options.eager_loading:
        items = Loading(last=state.items.value())
    new_state = ApplicationState(items=items, load_generation=generation)
    return new_state, FetchItems(generation=generation)


def _handle_loading_complete(
    state: ApplicationState,
    payload: Dict[str, Any],
    options: ReducerOptions,
) -> Reduction:
    """Handle REPOSITORY_LOADING_COMPLETE."""
    generation = payload.get("generation")
    if (
        options.guard_stale_loads
        and generation is not None
        and generation != state.load_generation
    ):
        logger.debug(
            f"Discarding stale completion: generation={generation} "
            f"current={state.load_generation}"
        )
        return state, None

    result = payload["result"]
    if isinstance(result, Success):
        return state.with_items(Loaded(tuple(result.value))), None
    if isinstance(result, Failure):
        return state.with_items(Failed(result.error)), None
    raise TypeError(f"Unexpected load result: {type(result).__name__}")


# O(1) dispatch table
_ACTION_HANDLERS: Dict[ActionType, Callable[..., Reduction]] = {
    ActionType.ROW_MOVE: _handle_row_move,
    ActionType.ROW_DELETE: _handle_row_delete,
    ActionType.REPOSITORY_LOAD: _handle_repository_load,
    ActionType.REPOSITORY_LOADING_COMPLETE: _handle_loading_complete,
}


def reduce_state(
    state: ApplicationState,
    action: Action,
    options: ReducerOptions = DEFAULT_OPTIONS,
) -> Reduction:
    """
    Apply an action to produce the next state and an optional command.

    Raises:
        IndexOutOfRangeError: If a row action addresses rows that do not exist
    """
    handler = _ACTION_HANDLERS.get(action.action_type)

    if handler is None:
        logger.warning(f"Unknown action type: {action.action_type}")
        return state, None

    return handler(state, action.payload, options)


def reduce_actions(
    initial_state: ApplicationState,
    actions: List[Action],
    options: ReducerOptions = DEFAULT_OPTIONS,
) -> ApplicationState:
    """Apply a sequence of actions to get the final state. Commands are dropped."""
    state = initial_state
    for action in actions:
        state, _ = reduce_state(state, action, options)
    return state
