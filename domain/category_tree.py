# -*- coding: utf-8 -*-
"""
domain/category_tree.py

Breadcrumb + pagination bookkeeping for browsing a category (or brand) tree.

The root level is paginated by the server (its total page count comes from
the response). Child levels arrive as one list and are paginated here.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

ROOT_NAME = "All Categories"
PAGE_WINDOW = 5


@dataclass(frozen=True)
class Crumb:
    id: Optional[Any]
    name: str


def _matches(node: Mapping[str, Any], query: str) -> bool:
    if not query:
        return True
    name = str(node.get("name") or "").lower()
    description = str(node.get("description") or "").lower()
    return query in name or query in description


class TreeNavigator:
    def __init__(self, page_size: int = 10, root_name: str = ROOT_NAME) -> None:
        if int(page_size) <= 0:
            raise ValueError("page_size must be positive")
        self.page_size = int(page_size)
        self.breadcrumbs: List[Crumb] = [Crumb(None, root_name)]
        self.page = 0
        self.search = ""
        self._items: List[Dict[str, Any]] = []
        self._server_total_pages = 0

    # --------- position ---------
    @property
    def current_parent_id(self) -> Optional[Any]:
        return self.breadcrumbs[-1].id

    @property
    def at_root(self) -> bool:
        return self.current_parent_id is None

    @property
    def title(self) -> str:
        if self.at_root:
            return self.breadcrumbs[0].name
        return f"{self.breadcrumbs[-1].name} Subcategories"

    def enter(self, node: Mapping[str, Any]) -> None:
        """Descend into *node*'s children."""
        node_id = node.get("id")
        if node_id is None:
            raise ValueError("cannot enter a node without an id")
        self.breadcrumbs.append(Crumb(node_id, str(node.get("name") or "")))
        self.page = 0

    def jump_to(self, index: int) -> None:
        """Go back to breadcrumb *index*, dropping everything after it."""
        index = int(index)
        if index < 0 or index >= len(self.breadcrumbs):
            raise IndexError(f"breadcrumb index {index} out of range")
        del self.breadcrumbs[index + 1:]
        self.page = 0

    # --------- data ---------
    def set_items(self, items: Sequence[Mapping[str, Any]], total_pages: Optional[int] = None) -> None:
        """Store the listing of the current level.

        At the root *total_pages* is the server's count and *items* is the
        current page only; below the root *items* is the whole level.
        """
        self._items = [dict(it) for it in items]
        self._server_total_pages = int(total_pages or 0)

    def set_search(self, text: str) -> None:
        self.search = str(text or "").strip().lower()
        if not self.at_root:
            self.page = 0

    def filtered_items(self) -> List[Dict[str, Any]]:
        return [it for it in self._items if _matches(it, self.search)]

    def visible_items(self) -> List[Dict[str, Any]]:
        items = self.filtered_items()
        if self.at_root:
            return items
        start = self.page * self.page_size
        return items[start:start + self.page_size]

    # --------- pagination ---------
    @property
    def total_pages(self) -> int:
        if self.at_root:
            return self._server_total_pages
        return int(math.ceil(len(self.filtered_items()) / float(self.page_size)))

    def go_to_page(self, page: int) -> bool:
        page = int(page)
        if 0 <= page < self.total_pages:
            self.page = page
            return True
        return False

    def next_page(self) -> bool:
        return self.go_to_page(self.page + 1)

    def prev_page(self) -> bool:
        return self.go_to_page(self.page - 1)

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages - 1

    @property
    def has_prev(self) -> bool:
        return self.page > 0

    def visible_page_numbers(self) -> List[int]:
        """Up to five page numbers centred on the current page."""
        total = self.total_pages
        if total <= PAGE_WINDOW:
            return list(range(total))
        if self.page <= 1:
            start = 0
        elif self.page >= total - 2:
            start = total - PAGE_WINDOW
        else:
            start = self.page - 2
        return list(range(start, start + PAGE_WINDOW))
