from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Generic, Optional, Tuple, TypeVar

from .loadable import Loadable, NotRequested

T = TypeVar("T")

CANONICAL_NAMES = ("Foo", "Bar", "Baz", "Bing", "Bang")


@dataclass(frozen=True)
class Item:
    """
    A row in the list.

    Attributes:
        id: Stable unique identifier (identity key for list diffing)
        name: Display name
    """
    id: uuid.UUID
    name: str

    @classmethod
    def new(cls, name: str) -> "Item":
        """Create an item with a freshly generated identifier."""
        return cls(id=uuid.uuid4(), name=name)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": str(self.id), "name": self.name}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Item":
        return cls(id=uuid.UUID(str(data["id"])), name=data["name"])


@dataclass(frozen=True)
class ErrorInfo:
    """
    Description of a failed load.

    Only ``description`` takes part in equality and hashing. Two errors with
    the same text compare equal even if their causes differ; this is a known
    approximation kept for change detection.
    """
    description: str
    cause: Optional[BaseException] = field(default=None, compare=False, repr=False)

    @classmethod
    def from_exception(cls, exc: BaseException) -> "ErrorInfo":
        return cls(description=str(exc) or type(exc).__name__, cause=exc)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"description": self.description}
        if self.cause is not None:
            data["cause"] = type(self.cause).__name__
        return data


@dataclass(frozen=True)
class Success(Generic[T]):
    """Settled fetch that produced a value."""
    value: T

    @property
    def is_success(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    """Settled fetch that produced an error."""
    error: ErrorInfo

    @property
    def is_success(self) -> bool:
        return False


Items = Tuple[Item, ...]


@dataclass(frozen=True)
class ApplicationState:
    """
    The entire state of the system.

    Attributes:
        items: Loading lifecycle of the ordered item list
        load_generation: Number of loads issued so far; completions tagged
            with an older generation are stale
    """
    items: Loadable[Items] = field(default_factory=NotRequested)
    load_generation: int = 0

    def with_items(self, items: Loadable[Items]) -> "ApplicationState":
        return replace(self, items=items)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "items": self.items.to_dict(lambda seq: [i.to_dict() for i in seq]),
            "load_generation": self.load_generation,
        }
