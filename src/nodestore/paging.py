"""
Sorting and pagination for list endpoints.

Query parameters follow the usual REST conventions: ``page`` (0-based),
``size``, and repeatable ``sort=property,direction``.
"""

import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Generic, Iterator, Mapping, TypeVar
from urllib.parse import urlencode

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 2000

_PROPERTY = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z0-9_]+)*$")


class Direction(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class Order:
    property: str
    direction: Direction = Direction.ASC


@dataclass(frozen=True)
class Sort:
    orders: tuple[Order, ...] = ()

    @classmethod
    def parse(cls, values: list[str]) -> "Sort":
        """
        Parse ``sort`` parameter values like ``name,desc`` or ``name,state,asc``.

        A trailing direction applies to every property in the same value.
        Properties that are not plain dotted names are ignored.
        """
        orders = []
        for value in values:
            parts = [part.strip() for part in value.split(",") if part.strip()]
            if not parts:
                continue
            direction = Direction.ASC
            if parts[-1].lower() in (Direction.ASC.value, Direction.DESC.value):
                direction = Direction(parts.pop().lower())
            orders.extend(Order(p, direction) for p in parts if _PROPERTY.match(p))
        return cls(tuple(orders))

    @property
    def is_sorted(self) -> bool:
        return bool(self.orders)

    def __str__(self) -> str:
        if not self.orders:
            return "UNSORTED"
        return ", ".join(f"{o.property}: {o.direction.value.upper()}" for o in self.orders)


UNSORTED = Sort()


@dataclass(frozen=True)
class Pageable:
    page: int = 0
    size: int = DEFAULT_PAGE_SIZE
    sort: Sort = UNSORTED

    @classmethod
    def from_args(cls, args: Mapping) -> "Pageable":
        """Read page, size and sort from request args; bad numbers fall back to defaults."""
        try:
            page = max(int(args.get("page", 0)), 0)
        except ValueError:
            page = 0
        try:
            size = min(max(int(args.get("size", DEFAULT_PAGE_SIZE)), 1), MAX_PAGE_SIZE)
        except ValueError:
            size = DEFAULT_PAGE_SIZE
        sort_values = args.getlist("sort") if hasattr(args, "getlist") else []
        return cls(page=page, size=size, sort=Sort.parse(sort_values))

    @property
    def offset(self) -> int:
        return self.page * self.size


@dataclass
class Page(Generic[T]):
    content: list[T]
    pageable: Pageable
    total: int

    def __iter__(self) -> Iterator[T]:
        return iter(self.content)

    def __len__(self) -> int:
        return len(self.content)

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.pageable.size) if self.pageable.size else 1

    @property
    def has_next(self) -> bool:
        return self.pageable.page + 1 < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.pageable.page > 0


def _page_uri(base_url: str, args: Mapping, page: int, size: int) -> str:
    params = [(k, v) for k, v in _items(args) if k not in ("page", "size")]
    params += [("page", page), ("size", size)]
    return f"{base_url}?{urlencode(params)}"


def _items(args: Mapping):
    if hasattr(args, "items") and hasattr(args, "getlist"):
        return args.items(multi=True)
    return args.items()


def pagination_headers(base_url: str, args: Mapping, page: Page) -> dict[str, str]:
    """
    Build ``X-Total-Count`` and ``Link`` headers for a page.

    Link carries next/prev when they exist, plus last and first.
    """
    number, size = page.pageable.page, page.pageable.size
    links = []
    if page.has_next:
        links.append(f'<{_page_uri(base_url, args, number + 1, size)}>; rel="next"')
    if page.has_previous:
        links.append(f'<{_page_uri(base_url, args, number - 1, size)}>; rel="prev"')
    last = page.total_pages - 1 if page.total_pages > 0 else 0
    links.append(f'<{_page_uri(base_url, args, last, size)}>; rel="last"')
    links.append(f'<{_page_uri(base_url, args, 0, size)}>; rel="first"')
    return {"X-Total-Count": str(page.total), "Link": ",".join(links)}
