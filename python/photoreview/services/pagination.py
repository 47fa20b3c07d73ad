"""Pagination normalization and the paged envelope.

Every paginated listing goes through normalize_pagination() before its
query and build_page() after it, so the envelope always reports the
effective page and page size.

Rules:
- page defaults to 1 when absent or <= 0
- page_size defaults to 25 when absent or <= 0
- page_size above 100 is clamped to 100 (never an error)
- offset = (page - 1) * page_size; a page reaching past MAX_OFFSET (the largest
  64-bit OFFSET) holds no rows and is never sent to the database
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TypeVar

from photoreview.schemas.pagination import Page

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 25
MAX_PAGE_SIZE = 100
MAX_OFFSET = 2**63 - 1

T = TypeVar("T")


@dataclass(frozen=True)
class PageParams:
    """Effective pagination bounds."""

    page: int
    page_size: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def limit(self) -> int:
        return self.page_size

    @property
    def out_of_range(self) -> bool:
        """offset + limit does not fit a 64-bit integer."""
        return self.offset + self.limit > MAX_OFFSET


def normalize_pagination(page: int | None = None, page_size: int | None = None) -> PageParams:
    """Apply defaults and the page size ceiling."""
    effective_page = page if page is not None and page > 0 else DEFAULT_PAGE
    effective_size = page_size if page_size is not None and page_size > 0 else DEFAULT_PAGE_SIZE
    return PageParams(page=effective_page, page_size=min(effective_size, MAX_PAGE_SIZE))


def build_page(
    items: Sequence[T],
    total: int,
    page: int | None = None,
    page_size: int | None = None,
) -> Page[T]:
    """Wrap items in the paged envelope, re-normalizing page and page_size."""
    params = normalize_pagination(page, page_size)
    return Page(items=list(items), total=total, page=params.page, page_size=params.page_size)
