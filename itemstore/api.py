"""
REST adapter for the item store.

Translates HTTP requests into dispatched actions and returns the committed
state, so a presentation layer can drive the store without importing it.

Run with:
    python -m itemstore.api --port 8000
"""
from __future__ import annotations

import argparse
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel, Field

from .config import load_config
from .core.state.actions import repository_load_action, row_delete_action, row_move_action
from .core.store import Store
from .types import ApplicationState

logger = logging.getLogger(__name__)


# ============================================================================
# Pydantic models
# ============================================================================

class ItemModel(BaseModel):
    id: str
    name: str


class ErrorModel(BaseModel):
    description: str
    cause: Optional[str] = None


class StateResponse(BaseModel):
    """Snapshot of the application state."""
    phase: str = Field(..., description="not_requested, loading, loaded or failed")
    items: Optional[List[ItemModel]] = Field(None, description="Loaded (or last loaded) items")
    error: Optional[ErrorModel] = None
    load_generation: int = 0


class MoveRequest(BaseModel):
    """Request body for a row move."""
    source: List[int] = Field(..., description="Row indices to move")
    destination: int = Field(..., ge=0, description="Offset to insert before")


class DeleteRequest(BaseModel):
    """Request body for a row delete."""
    source: List[int] = Field(..., description="Row indices to delete")


class ActionLogEntry(BaseModel):
    seq: int
    action_type: str
    source: str
    timestamp: str
    payload: Dict[str, Any] = {}


def state_response(state: ApplicationState) -> StateResponse:
    data = state.to_dict()
    items = data["items"]
    return StateResponse(
        phase=items["phase"],
        items=items["value"],
        error=items["error"],
        load_generation=data["load_generation"],
    )


# ============================================================================
# App
# ============================================================================

def create_app(store: Optional[Store] = None) -> FastAPI:
    """
    Build the FastAPI app around ``store``.

    Args:
        store: Store to drive (a new one from load_config() if omitted)
    """
    store = store or Store(config=load_config())

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        yield
        store.close()

    app = FastAPI(
        title="itemstore",
        description="Unidirectional item list store",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.store = store

    @app.get("/health")
    def health() -> Dict[str, Any]:
        return {"status": "ok", "effects": store.effects.stats()}

    @app.get("/state", response_model=StateResponse)
    def get_state() -> StateResponse:
        return state_response(store.get_snapshot())

    @app.post("/actions/load", response_model=StateResponse, status_code=202)
    def load() -> StateResponse:
        store.dispatch(repository_load_action(origin="api"))
        return state_response(store.get_snapshot())

    @app.post("/actions/move", response_model=StateResponse)
    def move(request: MoveRequest) -> StateResponse:
        action = row_move_action(request.source, request.destination, origin="api")
        if not store.dispatch(action):
            raise HTTPException(status_code=400, detail="Row indices out of range")
        return state_response(store.get_snapshot())

    @app.post("/actions/delete", response_model=StateResponse)
    def delete(request: DeleteRequest) -> StateResponse:
        if not store.dispatch(row_delete_action(request.source, origin="api")):
            raise HTTPException(status_code=400, detail="Row indices out of range")
        return state_response(store.get_snapshot())

    @app.get("/actions/log", response_model=List[ActionLogEntry])
    def action_log(n: Optional[int] = Query(None, ge=1)) -> List[ActionLogEntry]:
        return [ActionLogEntry(**a.to_dict()) for a in store.get_action_log(n)]

    return app


def main() -> None:
    import uvicorn

    ap = argparse.ArgumentParser(description="itemstore REST adapter")
    ap.add_argument("--host", default="127.0.0.1", help="Bind address")
    ap.add_argument("--port", type=int, default=8000, help="Port")
    args = ap.parse_args()

    app = create_app()
    logger.info(f"Starting itemstore API on {args.host}:{args.port}")
    uvicorn.run(app, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
