import math
from dataclasses import dataclass
from typing import Generic, List, Sequence, TypeVar

PAGE_SIZE = 8

T = TypeVar("T")


@dataclass(frozen=True)
class Page(Generic[T]):
    shown: List[T]
    page: int
    total_pages: int

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def page_numbers(self) -> List[int]:
        return list(range(1, self.total_pages + 1))


def paginate(items: Sequence[T], page: int, page_size: int = PAGE_SIZE) -> Page[T]:
    """Slice ``items`` into the requested fixed-size page.

    ``total_pages`` is ``ceil(len(items) / page_size)``. Out of range pages
    are clamped to the nearest valid page (page 1 for an empty list).
    ``items`` is never modified.
    """
    if page_size < 1:
        raise ValueError("page_size must be positive")
    total_pages = math.ceil(len(items) / page_size)
    page = max(1, min(page, total_pages or 1))
    start = (page - 1) * page_size
    return Page(shown=list(items[start : start + page_size]), page=page, total_pages=total_pages)
