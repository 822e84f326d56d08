"""
Configuration for the item store.

Settings can come from a built-in preset, a JSON/YAML file, or environment
variables, so behavior can be changed without modifying code.
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, List, Optional, Tuple

import yaml

from .types import CANONICAL_NAMES

logger = logging.getLogger(__name__)

ENV_CONFIG_PATH = "ITEMSTORE_CONFIG"
ENV_PRESET = "ITEMSTORE_PRESET"
ENV_FETCH_DELAY = "ITEMSTORE_FETCH_DELAY"


@dataclass(frozen=True)
class StoreConfig:
    """
    Configuration for a Store and its effect runner.

    Attributes:
        fetch_delay_seconds: How long a fetch takes to settle
        item_names: Names of the items produced by the default fetcher
        eager_loading: Enter Loading synchronously when a load is requested
        guard_stale_loads: Drop completions from superseded loads
        max_action_log: Max actions kept in the store's log
        debug: Wrap the reducer with the logging debug middleware
        log_level: Level used by the CLI when configuring logging
    """
    fetch_delay_seconds: float = 2.0
    item_names: Tuple[str, ...] = CANONICAL_NAMES
    eager_loading: bool = True
    guard_stale_loads: bool = True
    max_action_log: int = 1000
    debug: bool = False
    log_level: str = "INFO"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        data = asdict(self)
        data["item_names"] = list(self.item_names)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StoreConfig":
        """Create from dictionary, ignoring unknown keys."""
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        if "item_names" in known:
            known["item_names"] = tuple(known["item_names"])
        return cls(**known)

    def save(self, path: str) -> None:
        """Save config to JSON file."""
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path: str) -> Optional["StoreConfig"]:
        """Load config from a JSON or YAML file. Returns None if unreadable."""
        if not os.path.exists(path):
            return None

        try:
            with open(path, "r", encoding="utf-8") as f:
                content = f.read()

            if path.endswith((".yaml", ".yml")):
                data = yaml.safe_load(content)
            else:
                data = json.loads(content)

            return cls.from_dict(data or {})

        except (OSError, ValueError, TypeError, AttributeError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load config from {path}: {e}")
            return None


# Built-in presets
PRESETS: Dict[str, StoreConfig] = {
    # No Loading phase, last completion wins
    "reference": StoreConfig(eager_loading=False, guard_stale_loads=False),
    "hardened": StoreConfig(),
    "fast": StoreConfig(fetch_delay_seconds=0.05),
}


def get_preset(name: str) -> Optional[StoreConfig]:
    """Get a built-in preset by name."""
    return PRESETS.get(name.lower())


def list_presets() -> List[str]:
    """List available preset names."""
    return list(PRESETS.keys())


def load_config(path: Optional[str] = None, preset: Optional[str] = None) -> StoreConfig:
    """
    Resolve the effective configuration.

    Checks in order:
    1. ``path`` or $ITEMSTORE_CONFIG
    2. ``preset`` or $ITEMSTORE_PRESET
    3. Defaults

    $ITEMSTORE_FETCH_DELAY overrides the fetch delay of whatever was chosen.
    """
    config: Optional[StoreConfig] = None

    path = path or os.environ.get(ENV_CONFIG_PATH)
    if path:
        config = StoreConfig.load(path)
        if config is None:
            logger.warning(f"Config file {path} not usable, falling back")

    preset = preset or os.environ.get(ENV_PRESET)
    if config is None and preset:
        config = get_preset(preset)
        if config is None:
            logger.warning(f"Unknown preset {preset!r}, available: {list_presets()}")

    config = config or StoreConfig()

    delay = os.environ.get(ENV_FETCH_DELAY)
    if delay:
        try:
            config = replace(config, fetch_delay_seconds=float(delay))
        except ValueError:
            logger.warning(f"Ignoring invalid {ENV_FETCH_DELAY}={delay!r}")

    return config
