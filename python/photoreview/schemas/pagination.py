"""Paged envelope returned by every listing."""

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    """Uniform {items, total, page, page_size} listing envelope.

    total counts every row matching the scoped, filtered predicate,
    independent of page and page_size.
    """

    items: list[T]
    total: int
    page: int
    page_size: int
