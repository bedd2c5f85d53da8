# -*- coding: utf-8 -*-
"""View projection: (catalog, ViewState) -> visible page. Pure functions."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import List, Sequence

from .catalog import CatalogItem

ALL_CATEGORIES = "all"

# grid breakpoints are 5 / 8 / 10 / 12 columns; at 8 the last row holds 4
PAGE_SIZE = 60
PAGE_WINDOW = 5


@dataclass(frozen=True)
class ViewState:
    search_term: str = ""
    selected_category: str = ALL_CATEGORIES
    current_page: int = 1

    def set_search(self, term: str) -> "ViewState":
        return replace(self, search_term=term or "", current_page=1)

    def set_category(self, category: str) -> "ViewState":
        return replace(self, selected_category=category or ALL_CATEGORIES, current_page=1)

    def set_page(self, page: int) -> "ViewState":
        return replace(self, current_page=max(1, int(page)))


@dataclass(frozen=True)
class PageView:
    items: List[CatalogItem]
    filtered_count: int
    total_pages: int
    page: int
    page_size: int
    window: List[int] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "items": [it.to_dict() for it in self.items],
            "count": len(self.items),
            "filtered": self.filtered_count,
            "totalPages": self.total_pages,
            "page": self.page,
            "pageSize": self.page_size,
            "window": list(self.window),
        }


def matches(item: CatalogItem, search_term: str, category: str) -> bool:
    q = (search_term or "").lower()
    if q and not (q in item.name.lower() or q in item.id.lower() or q in item.code.lower()):
        return False
    return category == ALL_CATEGORIES or item.category == category


def filter_items(items: Sequence[CatalogItem], search_term: str = "", category: str = ALL_CATEGORIES) -> List[CatalogItem]:
    return [it for it in items if matches(it, search_term, category)]


def total_pages(count: int, page_size: int = PAGE_SIZE) -> int:
    """Page count, never below 1 (an empty result is one empty page)."""
    if page_size < 1:
        raise ValueError("page_size must be >= 1")
    return max(1, math.ceil(count / page_size))


def page_slice(items: Sequence[CatalogItem], page: int, page_size: int = PAGE_SIZE) -> List[CatalogItem]:
    p = max(1, int(page))
    start = (p - 1) * page_size
    return list(items[start:start + page_size])


def page_window(current: int, total: int, width: int = PAGE_WINDOW) -> List[int]:
    """Page numbers for pagination buttons: centred on current, clamped at the ends."""
    if total <= 0:
        return []
    if total <= width:
        return list(range(1, total + 1))
    half = width // 2
    if current <= half + 1:
        start = 1
    elif current >= total - half:
        start = total - width + 1
    else:
        start = current - half
    return list(range(start, start + width))


def project(items: Sequence[CatalogItem], state: ViewState, page_size: int = PAGE_SIZE) -> PageView:
    filtered = filter_items(items, state.search_term, state.selected_category)
    pages = total_pages(len(filtered), page_size)
    page = min(max(1, state.current_page), pages)
    return PageView(
        items=page_slice(filtered, page, page_size),
        filtered_count=len(filtered),
        total_pages=pages,
        page=page,
        page_size=page_size,
        window=page_window(page, pages),
    )
