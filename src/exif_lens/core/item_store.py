"""
item_store.py: Ordered in-memory collection of gallery items.

Newest submissions sit at the front. Items are immutable values; every change
replaces the stored value with one derived from the *current* item, so
completions arriving in any order never overwrite each other.
"""

from typing import Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from ..utils.log_utils import get_logger
from .models import Item, ItemStatus, STATUS_FILTERS

logger = get_logger(__name__)


def _check_filter(status: str) -> str:
    value = status.value if isinstance(status, ItemStatus) else str(status)
    if value not in STATUS_FILTERS and value != ItemStatus.PENDING.value:
        raise ValueError(f"Unknown status filter: {status}")
    return value


class ItemStore:
    """Ordered collection of items keyed by id."""

    def __init__(self, items: Iterable[Item] = ()) -> None:
        self._items: List[Item] = []
        self.prepend(list(items))

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Item]:
        return iter(tuple(self._items))

    def __contains__(self, item_id: object) -> bool:
        return any(item.id == item_id for item in self._items)

    def get(self, item_id: str) -> Optional[Item]:
        for item in self._items:
            if item.id == item_id:
                return item
        return None

    def prepend(self, items: List[Item]) -> None:
        """Insert `items` at the front, keeping their input order."""
        existing = {item.id for item in self._items}
        for item in items:
            if item.id in existing:
                raise ValueError(f"Duplicate item id: {item.id}")
            existing.add(item.id)
        self._items[:0] = items

    def apply(self, item_id: str, change: Callable[[Item], Item]) -> Optional[Item]:
        """Replace the item with `change(current_item)`; no-op if it is gone."""
        for index, item in enumerate(self._items):
            if item.id == item_id:
                updated = change(item)
                self._items[index] = updated
                return updated
        logger.debug("Item %s no longer in store; update dropped", item_id)
        return None

    def update_item(self, item_id: str, **patch) -> Optional[Item]:
        """Merge `patch` into the item with `item_id`, if it still exists."""
        return self.apply(item_id, lambda item: item.evolve(**patch))

    def delete_items(self, item_ids: Iterable[str]) -> List[Item]:
        """Remove every item whose id is in `item_ids`; return the removed items."""
        doomed = set(item_ids)
        removed = [item for item in self._items if item.id in doomed]
        if removed:
            self._items = [item for item in self._items if item.id not in doomed]
        return removed

    def filter_by_status(self, status: str = "all") -> Tuple[Item, ...]:
        value = _check_filter(status)
        if value == "all":
            return tuple(self._items)
        return tuple(item for item in self._items if item.status.value == value)

    def count_by_status(self, status: str = "all") -> int:
        value = _check_filter(status)
        if value == "all":
            return len(self._items)
        return sum(1 for item in self._items if item.status.value == value)

    def counts(self) -> Dict[str, int]:
        """Counts for every filter tab."""
        return {name: self.count_by_status(name) for name in STATUS_FILTERS}

    def select(self, item_ids: Iterable[str]) -> Tuple[Item, ...]:
        """Items whose id is in `item_ids`, in store order."""
        wanted = set(item_ids)
        return tuple(item for item in self._items if item.id in wanted)
