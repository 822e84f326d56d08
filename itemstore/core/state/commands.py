"""Commands: descriptions of impure work returned by the reducer."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Dict


class CommandType(str, Enum):
    FETCH_ITEMS = "fetch_items"


@dataclass(frozen=True)
class Command:
    command_type: ClassVar[CommandType]

    def to_dict(self) -> Dict[str, Any]:
        return {"command_type": self.command_type.value}


@dataclass(frozen=True)
class FetchItems(Command):
    """Fetch the item list and report back tagged with ``generation``."""
    command_type: ClassVar[CommandType] = CommandType.FETCH_ITEMS
    generation: int = 0

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["generation"] = self.generation
        return data
