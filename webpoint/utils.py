"""
WebPoint - Request Utilities
Safe parsing helpers and the list paginator shared by public and admin lists
"""
import math
from typing import Any, Callable, Generic, List, Optional, Sequence, TypeVar, Union

T = TypeVar('T')


def safe_int(value, default=0, min_val=None, max_val=None):
    """
    Safely parse an integer from a request parameter.

    Args:
        value: The value to parse (string or None)
        default: Default value if parsing fails
        min_val: Minimum allowed value (optional)
        max_val: Maximum allowed value (optional)

    Returns:
        int: Parsed integer or default
    """
    try:
        result = int(value) if value is not None else default
    except (ValueError, TypeError):
        result = default

    if min_val is not None:
        result = max(result, min_val)
    if max_val is not None:
        result = min(result, max_val)

    return result


class Paginator(Generic[T]):
    """
    Client-side style windowing over an in-memory sequence.

    The page number is 1-indexed and every navigation call clamps silently:
    next/prev never leave [1, total_pages] and go_to_page clamps its argument.
    The source sequence is never mutated.
    """

    def __init__(self, items: Sequence[T], items_per_page: int = 10):
        if items_per_page < 1:
            raise ValueError('items_per_page must be at least 1')
        self._items = items
        self._items_per_page = items_per_page
        self.current_page = 1

    @property
    def items(self) -> Sequence[T]:
        return self._items

    @property
    def items_per_page(self) -> int:
        return self._items_per_page

    @property
    def total_pages(self) -> int:
        return math.ceil(len(self._items) / self._items_per_page)

    @property
    def current_data(self) -> List[T]:
        start = (self.current_page - 1) * self._items_per_page
        return list(self._items[start:start + self._items_per_page])

    def next_page(self) -> int:
        self.current_page = max(1, min(self.current_page + 1, self.total_pages))
        return self.current_page

    def prev_page(self) -> int:
        self.current_page = max(self.current_page - 1, 1)
        return self.current_page

    def go_to_page(self, page: int) -> int:
        self.current_page = max(1, min(page, self.total_pages))
        return self.current_page

    def set_items(self, items: Sequence[T]):
        """Swap the source sequence, e.g. after the upstream filter changes"""
        self._items = items
        if self.current_page > self.total_pages:
            self.go_to_page(self.current_page)

    def set_items_per_page(self, items_per_page: int):
        """Change the page size; the window restarts at page 1"""
        if items_per_page < 1:
            raise ValueError('items_per_page must be at least 1')
        self._items_per_page = items_per_page
        self.current_page = 1

    def to_dict(self, serialize: Optional[Callable[[T], Any]] = None) -> dict:
        data = self.current_data
        if serialize:
            data = [serialize(item) for item in data]
        return {
            'items': data,
            'page': self.current_page,
            'per_page': self._items_per_page,
            'total': len(self._items),
            'total_pages': self.total_pages
        }


def filter_items(
    items: Sequence[T],
    key: Union[str, Callable[[T], Any]],
    value: Optional[Any]
) -> List[T]:
    """
    Upstream category/status filter feeding a Paginator.
    `value` of None, '' or 'all' keeps everything.
    """
    if value in (None, '', 'all'):
        return list(items)

    def _get(item):
        if callable(key):
            return key(item)
        if isinstance(item, dict):
            return item.get(key)
        return getattr(item, key, None)

    return [item for item in items if _get(item) == value]


def paginate_request(request, items: Sequence[T], default_per_page=10, max_per_page=100) -> Paginator[T]:
    """
    Build a Paginator from ?page= and ?per_page= query params.
    A page past the end is clamped onto the last page.
    """
    per_page = safe_int(request.args.get('per_page'), default_per_page, min_val=1, max_val=max_per_page)
    paginator = Paginator(items, items_per_page=per_page)
    paginator.go_to_page(safe_int(request.args.get('page'), 1, min_val=1))
    return paginator


def get_date_range_params(request, default_days=7, max_days=365):
    """
    Get date range from ?range=24h|7d|30d (or plain ?days=).

    Returns:
        tuple: (range_label, hours)
    """
    range_label = request.args.get('range')
    if range_label:
        if range_label.endswith('h'):
            hours = safe_int(range_label[:-1], 24, min_val=1, max_val=max_days * 24)
            return range_label, hours
        if range_label.endswith('d'):
            days = safe_int(range_label[:-1], default_days, min_val=1, max_val=max_days)
            return range_label, days * 24
    days = safe_int(request.args.get('days'), default_days, min_val=1, max_val=max_days)
    return f'{days}d', days * 24
