from __future__ import annotations

from stockdash.errors import InvalidSymbol


def normalize_symbol(raw: str | None) -> str:
    """Upper-case and strip a ticker. Blank input raises InvalidSymbol."""
    if raw is None or not str(raw).strip():
        raise InvalidSymbol(raw)
    return str(raw).strip().upper()


def normalize_symbols(raw: list[str] | None) -> list[str]:
    """Normalise a batch, dropping repeats but keeping first-seen order."""
    if not raw:
        raise InvalidSymbol(None)
    seen: dict[str, None] = {}
    for item in raw:
        seen.setdefault(normalize_symbol(item), None)
    return list(seen)
