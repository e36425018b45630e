"""Watchlist endpoints: the caller's set of tracked symbols."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from stockdash.api.deps import get_store, get_user_id
from stockdash.api.routes.shared import watchlist_to_dict
from stockdash.errors import MissingParameter
from stockdash.models.symbol import normalize_symbol
from stockdash.registry.store import PredictionStore

router = APIRouter()


class WatchlistIn(BaseModel):
    symbol: str


@router.get("/watchlist")
def get_watchlist(
    user_id: int = Depends(get_user_id),
    store: PredictionStore = Depends(get_store),
) -> list[dict]:
    return [watchlist_to_dict(e) for e in store.list_watchlist(user_id)]


@router.post("/watchlist")
def add_to_watchlist(
    body: WatchlistIn,
    user_id: int = Depends(get_user_id),
    store: PredictionStore = Depends(get_store),
) -> dict:
    """Add a symbol; a second add of the same symbol is a 400."""
    entry = store.add_watchlist_entry(user_id, normalize_symbol(body.symbol))
    return watchlist_to_dict(entry)


@router.delete("/watchlist")
def remove_from_watchlist(
    symbol: str | None = None,
    user_id: int = Depends(get_user_id),
    store: PredictionStore = Depends(get_store),
) -> dict:
    if not symbol or not symbol.strip():
        raise MissingParameter("symbol")
    store.remove_watchlist_entry(user_id, normalize_symbol(symbol))
    return {"success": True}
