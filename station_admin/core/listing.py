"""
Search and pagination over in-memory record lists
"""
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence


def to_int(value, default=None):
    """Parse a form/query value as int, falling back to default"""
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def resolve(record: Dict[str, Any], path: str) -> Any:
    """Resolve a dotted path such as ``director.username`` in nested dicts"""
    value: Any = record
    for part in path.split('.'):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value


def matches(record: Dict[str, Any], term: Optional[str], fields: Iterable[str]) -> bool:
    """Case-insensitive substring match of term against any of the fields"""
    if not term:
        return True
    needle = term.strip().lower()
    if not needle:
        return True
    for path in fields:
        value = resolve(record, path)
        if value is not None and needle in str(value).lower():
            return True
    return False


def same_id(left, right) -> bool:
    """Compare record ids that may arrive as int or str"""
    if left is None or right is None:
        return False
    return str(left) == str(right)


def filter_records(records: Iterable[Dict[str, Any]], term: Optional[str], fields: Sequence[str]) -> List[Dict[str, Any]]:
    return [record for record in records if matches(record, term, fields)]


@dataclass
class Page:
    items: List[Any]
    page: int
    per_page: int
    total: int
    total_pages: int
    pages: List[int] = field(default_factory=list)

    @property
    def first_index(self) -> int:
        return (self.page - 1) * self.per_page + 1 if self.total else 0

    @property
    def last_index(self) -> int:
        return min(self.page * self.per_page, self.total)

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


def page_window(current: int, total_pages: int, max_visible: int = 5) -> List[int]:
    """Page numbers centred on the current page, shifted to stay within bounds"""
    if total_pages < 1:
        return []
    start = max(1, current - max_visible // 2)
    end = min(total_pages, start + max_visible - 1)
    if end - start + 1 < max_visible:
        start = max(1, end - max_visible + 1)
    return list(range(start, end + 1))


def paginate(items: Sequence[Any], page: Optional[int], per_page: Optional[int],
             allowed_sizes: Optional[Sequence[int]] = None, default_size: int = 10,
             max_visible: int = 5) -> Page:
    """Slice items into a page, clamping the page number and page size"""
    if not per_page or per_page < 1 or (allowed_sizes and per_page not in allowed_sizes):
        per_page = default_size

    total = len(items)
    total_pages = math.ceil(total / per_page)
    page = min(max(page or 1, 1), max(total_pages, 1))

    start = (page - 1) * per_page
    return Page(
        items=list(items[start:start + per_page]),
        page=page,
        per_page=per_page,
        total=total,
        total_pages=total_pages,
        pages=page_window(page, total_pages, max_visible)
    )
