"""
controller.py: Application state for the gallery.

`GalleryController` owns the item store, the selection set, the local display
handles and the analysis pipeline. Presentation code only reads views from it
and calls its methods; every method must run on the controller's event loop
(see `runner.LoopRunner` for calling it from other threads).
"""

import asyncio
from datetime import datetime
from typing import Callable, Iterable, List, Optional, Set, Tuple

from ..utils.log_utils import get_logger
from .exporter import ExportDocument, build_export
from .handles import HandleRegistry
from .item_store import ItemStore
from .models import Item, SourceKind, UploadedFile, new_item_id
from .pipeline import AnalysisPipeline
from .selection import SelectionSet

logger = get_logger(__name__)


class GalleryController:
    """Owns gallery state and starts one analysis task per submitted image."""

    def __init__(
        self,
        client,
        items: Iterable[Item] = (),
        max_image_size: Optional[int] = None,
        fetch_timeout: Optional[float] = None,
        handles: Optional[HandleRegistry] = None,
    ) -> None:
        self.store = ItemStore(items)
        self.selection = SelectionSet()
        self.handles = handles or HandleRegistry()
        self.pipeline = AnalysisPipeline(
            self.store, client, max_image_size=max_image_size, fetch_timeout=fetch_timeout
        )
        self._tasks: Set[asyncio.Task] = set()

    # --- Submission ---

    def submit_files(self, files: Iterable[UploadedFile]) -> List[Item]:
        """Create one `analyzing` item per image file and start analyzing each."""
        accepted = []
        for upload in files:
            if not upload.is_image:
                logger.warning("Skipping %s: %s is not an image type", upload.filename, upload.content_type)
                continue
            accepted.append(upload)

        new_items = []
        for upload in accepted:
            item_id = new_item_id()
            new_items.append(Item(
                id=item_id,
                url=self.handles.create(item_id, upload),
                source_kind=SourceKind.FILE,
                filename=upload.filename,
                content_type=upload.content_type,
            ))
        self.store.prepend(new_items)
        logger.info("Accepted %d file(s) for analysis", len(new_items))

        for item, upload in zip(new_items, accepted):
            self._spawn(self.pipeline.run_file(item, upload), item.id)
        return new_items

    def submit_url(self, url: str) -> Item:
        """Create one `analyzing` item for a remote image and start analyzing it."""
        url = url.strip()
        if not url:
            raise ValueError("URL must not be empty")
        item = Item(id=new_item_id(), url=url, source_kind=SourceKind.URL)
        self.store.prepend([item])
        logger.info("Accepted URL %s as %s", url, item.id)
        self._spawn(self.pipeline.run_url(item), item.id)
        return item

    def _spawn(self, coro, item_id: str) -> None:
        task = asyncio.get_running_loop().create_task(coro, name=f"analyze-{item_id}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    async def wait_idle(self) -> None:
        """Wait until every analysis started so far has committed."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # --- Views ---

    def filter_by_status(self, status: str = "all") -> Tuple[Item, ...]:
        return self.store.filter_by_status(status)

    def count_by_status(self, status: str = "all") -> int:
        return self.store.count_by_status(status)

    def counts(self):
        return self.store.counts()

    def get(self, item_id: str) -> Optional[Item]:
        return self.store.get(item_id)

    def selected_items(self) -> Tuple[Item, ...]:
        return self.store.select(self.selection.ids)

    # --- Deletion ---

    def delete_items(self, item_ids: Iterable[str]) -> int:
        """Remove items, prune them from the selection and release their handles."""
        item_ids = list(item_ids)
        removed = self.store.delete_items(item_ids)
        self.selection.prune(item_ids)
        for item in removed:
            if item.source_kind is SourceKind.FILE:
                self.handles.release(item.id)
        if removed:
            logger.info("Deleted %d item(s)", len(removed))
        return len(removed)

    # --- Selection & bulk actions ---

    def toggle(self, item_id: str) -> bool:
        if item_id not in self.store:
            return False
        return self.selection.toggle(item_id)

    def select_all(self, status: str = "all") -> int:
        """Select exactly the items visible under the `status` filter."""
        self.selection.select_all(self.store.filter_by_status(status))
        return len(self.selection)

    def clear_selection(self) -> None:
        self.selection.clear()

    def bulk_delete(self, confirm: Callable[[int], bool]) -> int:
        """Delete every selected item if `confirm(count)` agrees."""
        count = len(self.selection)
        if not count:
            return 0
        if not confirm(count):
            logger.info("Bulk delete of %d item(s) cancelled", count)
            return 0
        deleted = self.delete_items(self.selection.ids)
        self.selection.clear()
        return deleted

    def bulk_export(self, now: Optional[datetime] = None) -> ExportDocument:
        """Export the selected items; neither store nor selection changes."""
        return build_export(self.selected_items(), now=now)
