"""Caller-side post-processing of decoded record lists."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Collection, Generic, List, Optional, Sequence, TypeVar

T = TypeVar("T")


@dataclass
class ListQuery:
    """Filters applied in a fixed order: reverse, exclude, allow-list, sort, limit.

    ``allow_list`` matches against the record's ``name`` attribute unless
    ``allow_key`` says otherwise. Sorting is stable, so records with equal
    keys keep their relative order.
    """

    reverse: bool = False
    exclude: Optional[Callable[[object], bool]] = None
    allow_list: Optional[Collection[str]] = None
    allow_key: str = "name"
    sort_key: Optional[Callable[[object], float]] = None
    descending: bool = True
    limit: Optional[int] = None

    def apply(self, records: Sequence[T]) -> List[T]:
        result = list(records)

        if self.reverse:
            result.reverse()

        if self.exclude is not None:
            result = [r for r in result if not self.exclude(r)]

        if self.allow_list is not None:
            allowed = set(self.allow_list)
            result = [r for r in result if getattr(r, self.allow_key, None) in allowed]

        if self.sort_key is not None:
            result.sort(key=self.sort_key, reverse=self.descending)

        if self.limit is not None and self.limit >= 0:
            del result[self.limit:]

        return result


class Paginator(Generic[T]):
    """Cumulative "load more" paging over a fixed list.

    With paging disabled every item is visible and there is never more to
    load.
    """

    def __init__(self, items: Sequence[T], page_size: int = 5, enabled: bool = True):
        if page_size <= 0:
            raise ValueError(f"page_size must be positive, got {page_size}")
        self.items: List[T] = list(items)
        self.page_size = page_size
        self.enabled = enabled
        self.current_page = 0

    @property
    def total_pages(self) -> int:
        return math.ceil(len(self.items) / self.page_size)

    def _shown_count(self) -> int:
        if not self.enabled:
            return len(self.items)
        return min(len(self.items), (self.current_page + 1) * self.page_size)

    def visible_items(self) -> List[T]:
        return self.items[:self._shown_count()]

    def page_items(self) -> List[T]:
        """Items added by the current page only."""
        if not self.enabled:
            return list(self.items)
        start = self.current_page * self.page_size
        return self.items[start:start + self.page_size]

    def has_more(self) -> bool:
        return self.enabled and (self.current_page + 1) * self.page_size < len(self.items)

    def remaining(self) -> int:
        return len(self.items) - self._shown_count()

    def load_more(self) -> List[T]:
        """Advance one page; returns the newly visible items."""
        if not self.has_more():
            return []
        self.current_page += 1
        return self.page_items()

    def show_all(self) -> List[T]:
        self.enabled = False
        return list(self.items)


__all__ = ["ListQuery", "Paginator"]
