"""
selection.py: The set of item ids marked for bulk actions.
"""

from typing import Iterable, Iterator, Set

from .models import Item


class SelectionSet:
    """Ids currently selected in the gallery."""

    def __init__(self) -> None:
        self._ids: Set[str] = set()

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._ids

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._ids))

    @property
    def ids(self) -> frozenset:
        return frozenset(self._ids)

    def toggle(self, item_id: str) -> bool:
        """Flip membership of `item_id`; return True if it is now selected."""
        if item_id in self._ids:
            self._ids.discard(item_id)
            return False
        self._ids.add(item_id)
        return True

    def select_all(self, view: Iterable[Item]) -> None:
        """Replace the selection with exactly the ids in `view`."""
        self._ids = {item.id for item in view}

    def clear(self) -> None:
        self._ids = set()

    def prune(self, item_ids: Iterable[str]) -> None:
        """Forget ids of items that no longer exist."""
        self._ids.difference_update(item_ids)
