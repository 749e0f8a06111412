"""Page-number pagination shared by the service layer and the API.

Services return a ``PageResult`` so list operations stay independent of
DRF; views render it with ``PageResult.to_response_data``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, List, TypeVar

from django.conf import settings
from django.core.paginator import EmptyPage, Paginator

T = TypeVar("T")


@dataclass(frozen=True)
class PageResult(Generic[T]):
    """One page of a listing plus the metadata needed to navigate it."""

    items: List[T]
    page: int
    size: int
    total_items: int
    total_pages: int = field(default=0)

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    def to_response_data(self, results: list[Any]) -> dict[str, Any]:
        return {
            "count": self.total_items,
            "page": self.page,
            "page_size": self.size,
            "total_pages": self.total_pages,
            "has_next": self.has_next,
            "has_previous": self.has_previous,
            "results": results,
        }


def normalize_page_params(page: Any = None, size: Any = None) -> tuple[int, int]:
    """Coerce raw ``page`` / ``size`` values into a safe, 1-based pair.

    Invalid or missing values fall back to the defaults; ``size`` is
    capped at ``settings.MAX_PAGE_SIZE``.
    """
    default_size = settings.DEFAULT_PAGE_SIZE
    try:
        page_number = int(page) if page not in (None, "") else 1
    except (TypeError, ValueError):
        page_number = 1
    try:
        page_size = int(size) if size not in (None, "") else default_size
    except (TypeError, ValueError):
        page_size = default_size

    page_number = max(page_number, 1)
    page_size = min(max(page_size, 1), settings.MAX_PAGE_SIZE)
    return page_number, page_size


def paginate(queryset: Any, page: Any = None, size: Any = None) -> PageResult:
    """Slice ``queryset`` into a ``PageResult``.

    A page past the end yields an empty ``items`` list instead of an
    error, so clients can iterate until ``has_next`` is false.
    """
    page_number, page_size = normalize_page_params(page, size)
    paginator = Paginator(queryset, page_size, allow_empty_first_page=True)
    try:
        items = list(paginator.page(page_number).object_list)
    except EmptyPage:
        items = []
    return PageResult(
        items=items,
        page=page_number,
        size=page_size,
        total_items=paginator.count,
        total_pages=paginator.num_pages if paginator.count else 0,
    )
