"""
Lifecycle of an asynchronously obtained value.

A ``Loadable`` is exactly one of:
- NotRequested: no load has been initiated
- Loading: a load is in flight, carrying the last good value (if any)
- Loaded: the most recent load succeeded
- Failed: the most recent load failed

Variants are immutable. Transitions happen by constructing a new variant.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, ClassVar, Dict, Generic, Optional, TypeVar

if TYPE_CHECKING:
    from .types import ErrorInfo

T = TypeVar("T")
R = TypeVar("R")


class LoadPhase(str, Enum):
    """Discriminator for the Loadable variants."""
    NOT_REQUESTED = "not_requested"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


@dataclass(frozen=True)
class Loadable(Generic[T]):
    """Base of the closed Loadable sum type. Never instantiated directly."""

    phase: ClassVar[LoadPhase]

    def value(self) -> Optional[T]:
        """Carried value for Loading and Loaded, None otherwise."""
        return None

    def error(self) -> Optional["ErrorInfo"]:
        """Error for Failed, None otherwise."""
        return None

    @property
    def is_loaded(self) -> bool:
        return self.phase is LoadPhase.LOADED

    def to_dict(self, serialize_value: Callable[[T], Any] = lambda v: v) -> Dict[str, Any]:
        value = self.value()
        error = self.error()
        return {
            "phase": self.phase.value,
            "value": serialize_value(value) if value is not None else None,
            "error": error.to_dict() if error is not None else None,
        }


@dataclass(frozen=True)
class NotRequested(Loadable[T]):
    phase: ClassVar[LoadPhase] = LoadPhase.NOT_REQUESTED


@dataclass(frozen=True)
class Loading(Loadable[T]):
    """Load in flight. ``last`` is the previously loaded value, if any."""
    phase: ClassVar[LoadPhase] = LoadPhase.LOADING
    last: Optional[T] = None

    def value(self) -> Optional[T]:
        return self.last


@dataclass(frozen=True)
class Loaded(Loadable[T]):
    phase: ClassVar[LoadPhase] = LoadPhase.LOADED
    loaded: T

    def value(self) -> Optional[T]:
        return self.loaded


@dataclass(frozen=True)
class Failed(Loadable[T]):
    phase: ClassVar[LoadPhase] = LoadPhase.FAILED
    failure: "ErrorInfo"

    def error(self) -> Optional["ErrorInfo"]:
        return self.failure


_VARIANTS = (NotRequested, Loading, Loaded, Failed)


def match_loadable(
    loadable: Loadable[T],
    *,
    not_requested: Callable[[], R],
    loading: Callable[[Optional[T]], R],
    loaded: Callable[[T], R],
    failed: Callable[["ErrorInfo"], R],
) -> R:
    """
    Exhaustive dispatch over the Loadable variants.

    Every branch must be supplied. Anything outside the closed set raises
    TypeError rather than falling through.
    """
    kind = type(loadable)
    if kind is NotRequested:
        return not_requested()
    if kind is Loading:
        return loading(loadable.last)  # type: ignore[attr-defined]
    if kind is Loaded:
        return loaded(loadable.loaded)  # type: ignore[attr-defined]
    if kind is Failed:
        return failed(loadable.failure)  # type: ignore[attr-defined]
    raise TypeError(
        f"Not a Loadable variant: {kind.__name__} "
        f"(expected one of {', '.join(v.__name__ for v in _VARIANTS)})"
    )
