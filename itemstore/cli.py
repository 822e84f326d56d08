from __future__ import annotations

import argparse
import logging
import sys
import time
from dataclasses import replace
from typing import List, Optional

from .config import StoreConfig, list_presets, load_config
from .core.effects import failing_fetcher
from .core.state.actions import (
    Action,
    repository_load_action,
    row_delete_action,
    row_move_action,
)
from .core.store import Store
from .loadable import match_loadable
from .logging_config import configure_logging
from .types import ApplicationState

logger = logging.getLogger(__name__)


def render(state: ApplicationState) -> str:
    """One-line text rendering of the state, as a list view would show it."""
    def names(items) -> str:
        return ", ".join(i.name for i in items)

    return match_loadable(
        state.items,
        not_requested=lambda: "[not requested]",
        loading=lambda last: f"[loading] {names(last)}" if last else "[loading]",
        loaded=lambda items: f"[loaded] {names(items)}",
        failed=lambda error: f"[failed] {error.description}",
    )


def _build_config(args: argparse.Namespace) -> StoreConfig:
    config = load_config(path=args.config, preset=args.preset)
    if args.delay is not None:
        config = replace(config, fetch_delay_seconds=args.delay)
    if args.debug:
        config = replace(config, debug=True)
    return config


def _build_store(config: StoreConfig, fail: Optional[str]) -> Store:
    store = Store(config=config)
    if fail:
        store.effects.fetcher = failing_fetcher(fail)
    return store


def run_demo(store: Store, out=None) -> ApplicationState:
    """
    Walk through load, a dropped early delete, a move and a multi-row delete.

    Returns:
        The final state
    """
    out = out or sys.stdout

    def on_commit(state: ApplicationState, action: Action) -> None:
        print(f"#{action.seq:<3} {action.action_type.value:<28} {render(state)}", file=out)

    unsubscribe = store.subscribe(on_commit)
    try:
        started = time.perf_counter()
        store.dispatch(repository_load_action(origin="cli"))
        # Dropped: nothing is loaded yet
        store.dispatch(row_delete_action([0], origin="cli"))

        timeout = store.config.fetch_delay_seconds + 5.0
        settled = store.wait_for(
            lambda s: s.items.is_loaded or s.items.error() is not None,
            timeout=timeout,
        )
        logger.info(
            "Load settled" if settled else "Load timed out",
            extra={"subsystem": "demo", "latency_ms": (time.perf_counter() - started) * 1000},
        )
        if not settled:
            print(f"Load did not settle within {timeout:.1f}s", file=out)
            return store.get_snapshot()

        if store.get_snapshot().items.is_loaded:
            store.dispatch(row_move_action([0], 3, origin="cli"))
            store.dispatch(row_delete_action([0, 2, 4], origin="cli"))
        return store.get_snapshot()
    finally:
        unsubscribe()


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(
        prog="itemstore",
        description="itemstore - unidirectional store for an asynchronously loaded list",
    )
    ap.add_argument("--config", help="Path to JSON/YAML config file")
    ap.add_argument("--preset", choices=list_presets(), help="Built-in config preset")
    ap.add_argument("--delay", type=float, help="Override fetch delay in seconds")
    ap.add_argument("--debug", action="store_true", help="Log every action and state diff")
    ap.add_argument("--log-dir", help="Also write rotating text and JSON logs here")
    ap.add_argument("--verbose", action="store_true", help="Enable verbose logging")

    sub = ap.add_subparsers(dest="command")

    demo = sub.add_parser("demo", help="Run the load/move/delete walkthrough")
    demo.add_argument("--fail", metavar="MESSAGE", help="Make the fetch fail with MESSAGE")

    serve = sub.add_parser("serve", help="Serve the REST adapter")
    serve.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve.add_argument("--port", type=int, default=8000, help="Port")

    args = ap.parse_args(argv)

    config = _build_config(args)
    level = "DEBUG" if (args.verbose or args.debug) else config.log_level
    configure_logging(level=level, log_dir=args.log_dir)

    if args.command == "serve":
        import uvicorn

        from .api import create_app

        uvicorn.run(create_app(Store(config=config)), host=args.host, port=args.port)
        return 0

    store = _build_store(config, getattr(args, "fail", None))
    try:
        final = run_demo(store)
    finally:
        store.close()

    print(f"Final: {render(final)}")
    return 0 if final.items.is_loaded else 1


if __name__ == "__main__":
    sys.exit(main())
