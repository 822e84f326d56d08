"""
State store with an action queue and effect hand-off.

The store is the single writer for application state.
All writes go through dispatch(), all reads through get_snapshot().

This prevents race conditions by:
- Serializing every dispatch behind one lock
- Queueing re-entrant dispatches until the current action is finished
- Replacing state wholesale with the reducer's output
"""
from __future__ import annotations

import logging
import threading
from collections import deque
from functools import partial
from typing import Callable, Deque, List, Optional

from .state.actions import Action
from .state.commands import Command
from .state.reducer import Reducer, ReducerOptions, reduce_state
from .effects import EffectRunner, canonical_items
from ..config import StoreConfig
from ..debug import debug_reducer
from ..list_ops import IndexOutOfRangeError
from ..types import ApplicationState

logger = logging.getLogger(__name__)

Subscriber = Callable[[ApplicationState, Action], None]


class Store:
    """
    Central application store.

    - dispatch(action) runs the reducer, commits, publishes, runs effects
    - get_snapshot() returns the current (immutable) state

    Features:
    - Thread-safe; effect threads re-enter through dispatch()
    - Action log for replay/debugging
    - Subscriber notifications on every commit, changed or not

    Example:
        >>> store = Store(config=StoreConfig(fetch_delay_seconds=0.1))
        >>> store.dispatch(repository_load_action())
        >>> store.wait_for(lambda s: s.items.is_loaded, timeout=1.0)
    """

    def __init__(
        self,
        initial_state: Optional[ApplicationState] = None,
        config: Optional[StoreConfig] = None,
        effect_runner: Optional[EffectRunner] = None,
        reducer: Optional[Reducer] = None,
    ):
        """
        Initialize the store.

        Args:
            initial_state: Starting state (defaults to nothing requested)
            config: Store configuration
            effect_runner: Runner for commands (built from config if omitted)
            reducer: Reducer to use (defaults to reduce_state with config options)
        """
        self.config = config or StoreConfig()
        self._state = initial_state or ApplicationState()
        self._lock = threading.RLock()
        self._changed = threading.Condition(self._lock)
        self._seq = 0
        self._pending: Deque[Action] = deque()
        self._draining = False

        options = ReducerOptions(
            eager_loading=self.config.eager_loading,
            guard_stale_loads=self.config.guard_stale_loads,
        )
        reducer = reducer or partial(reduce_state, options=options)
        if self.config.debug:
            reducer = debug_reducer(reducer)
        self._reducer: Reducer = reducer

        self.effects = effect_runner or EffectRunner(
            self.dispatch,
            delay_seconds=self.config.fetch_delay_seconds,
            fetcher=partial(canonical_items, self.config.item_names),
        )

        self._action_log: Deque[Action] = deque(maxlen=self.config.max_action_log)
        self._subscribers: List[Subscriber] = []

    def dispatch(self, action: Action) -> bool:
        """
        Dispatch an action.

        This is the ONLY way to modify state. Calls from other threads wait
        for the lock; calls made while this thread is already applying an
        action are queued and applied right after it.
        Out-of-range indices are rejected. Any other reducer error propagates
        and drops the actions still queued.

        Returns:
            False if the reducer rejected the action, True otherwise
        """
        with self._lock:
            self._pending.append(action)
            if self._draining:
                logger.debug(f"Queued re-entrant action: {action.action_type.value}")
                return True

            self._draining = True
            try:
                applied = True
                first = True
                while self._pending:
                    ok = self._apply_action(self._pending.popleft())
                    if first:
                        applied = ok
                        first = False
                return applied
            finally:
                self._draining = False
                if self._pending:
                    dropped = [a.action_type.value for a in self._pending]
                    self._pending.clear()
                    logger.error(f"Dropped {len(dropped)} queued action(s) after failed dispatch: {dropped}")

    def _apply_action(self, action: Action) -> bool:
        """Apply a single action (internal, with lock held)."""
        action = Action(
            action_type=action.action_type,
            payload=action.payload,
            timestamp=action.timestamp,
            seq=self._seq + 1,
            source=action.source,
        )

        try:
            new_state, command = self._reducer(self._state, action)
        except IndexOutOfRangeError as e:
            logger.error(
                f"Rejected action {action.action_type.value}: {e}",
                exc_info=True,
            )
            return False

        # Rejected actions get no seq and stay out of the log
        self._seq = action.seq
        self._action_log.append(action)
        self._state = new_state
        self._changed.notify_all()
        logger.debug(
            f"Applied action: {action.action_type.value}",
            extra={
                "subsystem": "store",
                "seq": action.seq,
                "action_type": action.action_type.value,
                "generation": new_state.load_generation,
            },
        )

        for sub in list(self._subscribers):
            try:
                sub(self._state, action)
            except Exception as e:
                logger.warning(f"Subscriber error: {e}")

        if command is not None:
            self._run_command(command)
        return True

    def _run_command(self, command: Command) -> None:
        effect_id = self.effects.run(command)
        if effect_id is None:
            logger.warning(f"Command not started: {command.to_dict()}")

    def get_snapshot(self) -> ApplicationState:
        """
        Get the current state.

        State is immutable, so the returned object is safe to use without locks.
        """
        with self._lock:
            return self._state

    def get_action_log(self, n: Optional[int] = None) -> List[Action]:
        """Get recent actions from log."""
        with self._lock:
            actions = list(self._action_log)
            if n is not None:
                actions = actions[-n:]
            return actions

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Subscribe to state commits.

        Args:
            callback: Called with (new_state, action) after each commit

        Returns:
            Unsubscribe function
        """
        with self._lock:
            self._subscribers.append(callback)

        def unsubscribe():
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def wait_for(
        self,
        predicate: Callable[[ApplicationState], bool],
        timeout: Optional[float] = None,
    ) -> bool:
        """Block until ``predicate(state)`` holds. Returns False on timeout."""
        with self._lock:
            return self._changed.wait_for(lambda: predicate(self._state), timeout)

    def close(self) -> None:
        """Cancel outstanding effects and stop accepting new ones."""
        self.effects.shutdown()
