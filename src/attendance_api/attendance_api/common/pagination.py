from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.constants import DEFAULT_PAGE, MAX_PAGE_SIZE, MIN_PAGE_SIZE


@dataclass(frozen=True)
class PageRequest:
    page: int
    page_size: int

    @classmethod
    def build(cls, page: Optional[int], page_size: Optional[int], *, default_size: int) -> "PageRequest":
        """Apply defaults and bounds: page >= 1, page_size within [1, 100]."""
        page = DEFAULT_PAGE if page is None else int(page)
        page_size = default_size if page_size is None else int(page_size)
        return cls(
            page=max(page, DEFAULT_PAGE),
            page_size=min(max(page_size, MIN_PAGE_SIZE), MAX_PAGE_SIZE),
        )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def limit(self) -> int:
        return self.page_size


def total_pages(total_records: int, page_size: int) -> int:
    return -(-int(total_records) // int(page_size))
