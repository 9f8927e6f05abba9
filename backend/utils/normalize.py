"""Case-insensitive name lookups shared by phases and milestones."""

from __future__ import annotations

from typing import Callable, Dict, Iterable, Optional, TypeVar

T = TypeVar("T")


def name_key(value: Optional[str]) -> str:
    """Normalized key for operator-entered names: trimmed and case-folded."""

    return (value or "").strip().casefold()


def index_by_name(items: Iterable[T], name_of: Callable[[T], str]) -> Dict[str, T]:
    """Build a normalized-key index; the first item wins on collisions."""

    index: Dict[str, T] = {}
    for item in items:
        index.setdefault(name_key(name_of(item)), item)
    return index


def lookup_name(items: Iterable[T], name: str, name_of: Callable[[T], str]) -> Optional[T]:
    return index_by_name(items, name_of).get(name_key(name))


__all__ = ["name_key", "index_by_name", "lookup_name"]
