"""Generic filtering, sorting, and text search utilities."""

from __future__ import annotations

from typing import Any, Callable, Optional, Sequence

from sqlalchemy import Select, String, and_, cast, or_
from sqlalchemy.orm import InstrumentedAttribute


# ── Sorting ─────────────────────────────────────────────────────────

def apply_sorting(
    query: Select,
    model: Any,
    sort: Optional[str],
) -> Select:
    """
    Parse a sort string like ``"-start_date"`` and apply ORDER BY.

    * Leading ``-`` → DESC; otherwise ASC.
    * Names that are not mapped attributes of *model* are ignored.
    """
    if not sort:
        return query

    descending = sort.startswith("-")
    col = _get_column(model, sort.lstrip("-"))
    if col is None:
        return query
    return query.order_by(col.desc() if descending else col.asc())


# ── Generic filtering ──────────────────────────────────────────────

# Key suffix → comparison builder; a bare key means equality
_OPERATORS: dict[str, Callable[[Any, Any], Any]] = {
    "__ilike": lambda col, value: col.ilike(f"%{value}%"),
    "__from": lambda col, value: col >= value,
    "__to": lambda col, value: col <= value,
    "__in": lambda col, value: col.in_(value),
}


def _split_key(key: str) -> tuple[str, Callable[[Any, Any], Any]]:
    for suffix, build in _OPERATORS.items():
        if key.endswith(suffix):
            return key.removesuffix(suffix), build
    return key, lambda col, value: col == value


def apply_filters(
    query: Select,
    model: Any,
    filters: dict[str, Any],
) -> Select:
    """
    AND together one condition per entry of *filters*.

    ``"status"`` compares for equality; the suffixes ``__ilike`` (substring,
    case-insensitive), ``__from`` (>=), ``__to`` (<=) and ``__in`` pick other
    operators, e.g. ``{"start_date__from": date(2024, 1, 1)}``.

    Entries whose value is ``None`` and names that are not mapped
    attributes of *model* are skipped.
    """
    conditions = []
    for key, value in filters.items():
        if value is None:
            continue
        name, build = _split_key(key)
        col = _get_column(model, name)
        if col is not None:
            conditions.append(build(col, value))

    return query.where(and_(*conditions)) if conditions else query


# ── Text search ─────────────────────────────────────────────────────

def apply_search(
    query: Select,
    model: Any,
    search: Optional[str],
    columns: Sequence[str],
) -> Select:
    """Case-insensitive substring match of *search* across *columns* (OR)."""
    if not search or not search.strip():
        return query

    search = search.strip()
    like_conds = [
        cast(col, String).ilike(f"%{search}%")
        for col in (_get_column(model, name) for name in columns)
        if col is not None
    ]
    if not like_conds:
        return query
    return query.where(or_(*like_conds))


# ── Internal helper ─────────────────────────────────────────────────

def _get_column(model: Any, name: str) -> Optional[InstrumentedAttribute]:
    """Safely retrieve a mapped column attribute by name."""
    attr = getattr(model, name, None)
    return attr if isinstance(attr, InstrumentedAttribute) else None
