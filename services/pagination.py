"""Page windowing for tabular reading views."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Generic, List, Sequence, TypeVar

from models.records import ELLIPSIS, PageItem

T = TypeVar("T")

# Up to this many pages are listed without compression.
MAX_FLAT_PAGES = 7


def page_window(total_pages: int, current_page: int) -> List[PageItem]:
    """Page numbers to show, with ellipsis markers for elided runs.

    ``current_page`` must already lie within ``[1, total_pages]``.
    """
    if total_pages <= MAX_FLAT_PAGES:
        return list(range(1, total_pages + 1))

    left = max(2, current_page - 1)
    right = min(total_pages - 1, current_page + 1)

    pages: List[PageItem] = [1]
    if left > 2:
        pages.append(ELLIPSIS)
    pages.extend(range(left, right + 1))
    if right < total_pages - 1:
        pages.append(ELLIPSIS)
    pages.append(total_pages)
    return pages


@dataclass
class Page(Generic[T]):
    items: List[T]
    page: int
    per_page: int
    total_items: int
    total_pages: int
    window: List[PageItem] = field(default_factory=list)


def paginate(items: Sequence[T], page: int, per_page: int = 10) -> Page[T]:
    """Slice ``items`` for ``page``, clamping the page into range first."""
    if per_page <= 0:
        raise ValueError("per_page must be positive.")
    total_pages = math.ceil(len(items) / per_page)
    current = max(1, min(page, max(total_pages, 1)))
    start = (current - 1) * per_page
    return Page(
        items=list(items[start : start + per_page]),
        page=current,
        per_page=per_page,
        total_items=len(items),
        total_pages=total_pages,
        window=page_window(total_pages, current),
    )
