"""Pagination and sorting shared by every list query."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

from commerce.domain.exceptions import ValidationError

T = TypeVar("T")

MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 10


class SortOrder(Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class PageRequest:
    """Which slice of a collection to return, and in what order.

    ``sort_by`` holds the persisted (camelCase) field name; each entity's
    query type restricts it to the fields it allows.
    """

    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE
    sort_by: str = "createdAt"
    sort_order: SortOrder = SortOrder.DESC

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValidationError("Page must be at least 1")
        if not 1 <= self.limit <= MAX_PAGE_SIZE:
            raise ValidationError(f"Limit must be between 1 and {MAX_PAGE_SIZE}")

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


@dataclass
class Page(Generic[T]):
    items: list[T]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    @staticmethod
    def of(items: list[T], total: int, request: PageRequest) -> Page[T]:
        return Page(items=items, total=total, page=request.page, limit=request.limit)
