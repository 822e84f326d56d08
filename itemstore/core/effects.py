"""
Effect runner: executes commands off the dispatch thread.

Each command becomes an effect that moves through
scheduled -> settled -> delivered (or cancelled). Effects run on daemon
timer threads and re-enter the store only through ``dispatch``.
Several effects may be in flight at once. Settling and delivery happen
under one delivery lock, so outcomes reach the store strictly in the order
they settle, one at a time.
"""
from __future__ import annotations

import itertools
import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Union

from .state.actions import Action, repository_loading_complete_action
from .state.commands import Command, CommandType, FetchItems
from ..types import CANONICAL_NAMES, ErrorInfo, Failure, Item, Success

logger = logging.getLogger(__name__)

Fetcher = Callable[[], Sequence[Item]]
Dispatch = Callable[[Action], object]


class FetchError(Exception):
    """Raised by a fetcher when the item list cannot be produced."""


def canonical_items(names: Iterable[str] = CANONICAL_NAMES) -> List[Item]:
    """Fresh canonical items; every call generates new identifiers."""
    return [Item.new(name) for name in names]


def failing_fetcher(description: str) -> Fetcher:
    """Build a fetcher that always fails with ``description``."""
    def fetch() -> Sequence[Item]:
        raise FetchError(description)
    return fetch


class EffectPhase(str, Enum):
    SCHEDULED = "scheduled"
    SETTLED = "settled"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


@dataclass
class Effect:
    """Bookkeeping for one running command."""
    effect_id: int
    command: Command
    phase: EffectPhase = EffectPhase.SCHEDULED
    scheduled_at: str = field(default_factory=lambda: datetime.now().isoformat())
    timer: Optional[threading.Timer] = None
    result: Optional[Union[Success, Failure]] = None


class EffectRunner:
    """
    Runs commands returned by the reducer.

    Example:
        >>> runner = EffectRunner(store.dispatch, delay_seconds=0.1)
        >>> runner.run(FetchItems(generation=1))
        >>> runner.wait_idle(timeout=1.0)
    """

    def __init__(
        self,
        dispatch: Dispatch,
        delay_seconds: float = 2.0,
        fetcher: Optional[Fetcher] = None,
    ):
        """
        Initialize the runner.

        Args:
            dispatch: Where follow-up actions are sent
            delay_seconds: Delay before a fetch settles
            fetcher: Produces the item list; raise to report a failure
        """
        self._dispatch = dispatch
        self.delay_seconds = delay_seconds
        self.fetcher: Fetcher = fetcher or canonical_items
        self._lock = threading.Lock()
        self._idle = threading.Condition(self._lock)
        # Held from settling until delivery returns
        self._delivery = threading.Lock()
        self._ids = itertools.count(1)
        self._effects: Dict[int, Effect] = {}
        self._closed = False

        # Metrics
        self._delivered_count = 0
        self._failed_count = 0
        self._cancelled_count = 0

        self._runners: Dict[CommandType, Callable[[Effect], None]] = {
            CommandType.FETCH_ITEMS: self._schedule_fetch,
        }

    def run(self, command: Command) -> Optional[int]:
        """
        Start executing a command.

        Returns:
            Effect id, or None if the command was not started
        """
        start = self._runners.get(command.command_type)
        if start is None:
            logger.warning(f"No runner for command type: {command.command_type}")
            return None

        with self._lock:
            if self._closed:
                logger.warning(f"Runner closed, dropping {command.command_type.value}")
                return None
            effect = Effect(effect_id=next(self._ids), command=command)
            self._effects[effect.effect_id] = effect

        start(effect)
        logger.debug(
            f"Effect {effect.effect_id} scheduled: {command.to_dict()}",
            extra={"subsystem": "effects", "generation": getattr(command, "generation", None)},
        )
        return effect.effect_id

    def _schedule_fetch(self, effect: Effect) -> None:
        timer = threading.Timer(self.delay_seconds, self._settle_fetch, args=(effect,))
        timer.daemon = True
        timer.name = f"effect-{effect.effect_id}"
        effect.timer = timer
        timer.start()

    def _settle_fetch(self, effect: Effect) -> None:
        """Timer callback: run the fetcher, then deliver the outcome."""
        with self._lock:
            if effect.phase is EffectPhase.CANCELLED:
                return

        started = time.perf_counter()
        try:
            result: Union[Success, Failure] = Success(tuple(self.fetcher()))
        except Exception as e:
            logger.warning(f"Effect {effect.effect_id} fetch failed: {e}")
            result = Failure(ErrorInfo.from_exception(e))

        command: FetchItems = effect.command  # type: ignore[assignment]
        with self._delivery:
            with self._lock:
                if effect.phase is EffectPhase.CANCELLED:
                    return
                effect.phase = EffectPhase.SETTLED
                effect.result = result

            try:
                self._dispatch(
                    repository_loading_complete_action(result, generation=command.generation)
                )
            except Exception as e:
                logger.error(f"Effect {effect.effect_id} delivery failed: {e}", exc_info=True)
            finally:
                self._finish(effect, result, started)

    def _finish(self, effect: Effect, result: Union[Success, Failure], started: float) -> None:
        latency_ms = (time.perf_counter() - started) * 1000
        with self._lock:
            effect.phase = EffectPhase.DELIVERED
            self._delivered_count += 1
            if not result.is_success:
                self._failed_count += 1
            self._effects.pop(effect.effect_id, None)
            self._idle.notify_all()
        logger.debug(
            f"Effect {effect.effect_id} delivered",
            extra={
                "subsystem": "effects",
                "generation": getattr(effect.command, "generation", None),
                "latency_ms": latency_ms,
            },
        )

    def cancel(self, effect_id: int) -> bool:
        """
        Cancel an effect that has not settled yet.

        Returns:
            True if the effect was cancelled
        """
        with self._lock:
            effect = self._effects.get(effect_id)
            if effect is None or effect.phase is not EffectPhase.SCHEDULED:
                return False
            effect.phase = EffectPhase.CANCELLED
            if effect.timer is not None:
                effect.timer.cancel()
            self._effects.pop(effect_id, None)
            self._cancelled_count += 1
            self._idle.notify_all()
        logger.info(f"Effect {effect_id} cancelled")
        return True

    def shutdown(self) -> int:
        """Stop accepting commands and cancel every unsettled effect."""
        with self._lock:
            self._closed = True
            pending = [e.effect_id for e in self._effects.values()]
        cancelled = sum(1 for effect_id in pending if self.cancel(effect_id))
        logger.info(f"Effect runner shut down, cancelled {cancelled} effect(s)")
        return cancelled

    def pending_count(self) -> int:
        """Effects scheduled or settled but not yet delivered."""
        with self._lock:
            return len(self._effects)

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """
        Block until no effects are pending.

        Returns:
            True if idle, False on timeout
        """
        with self._lock:
            return self._idle.wait_for(lambda: not self._effects, timeout)

    def stats(self) -> dict:
        with self._lock:
            return {
                "pending": len(self._effects),
                "delivered": self._delivered_count,
                "failed": self._failed_count,
                "cancelled": self._cancelled_count,
                "delay_seconds": self.delay_seconds,
            }
