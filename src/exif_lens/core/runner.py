"""
runner.py: Host the controller's event loop on a background thread.

WSGI request handlers run on their own threads; they hand every controller
call to this loop so that all state changes stay on one thread.
"""

import asyncio
import threading
from typing import Any, Awaitable, Callable, Optional

from ..utils.log_utils import get_logger

logger = get_logger(__name__)


class LoopRunner:
    """An asyncio event loop running forever on a daemon thread."""

    def __init__(self, name: str = "exif-lens-loop") -> None:
        self.loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)

    def _run(self) -> None:
        asyncio.set_event_loop(self.loop)
        self.loop.run_forever()

    def start(self) -> "LoopRunner":
        self._thread.start()
        logger.debug("Event loop thread started")
        return self

    @property
    def running(self) -> bool:
        return self._thread.is_alive()

    def run(self, coro: Awaitable, timeout: Optional[float] = None) -> Any:
        """Run `coro` on the loop and block until it finishes."""
        return asyncio.run_coroutine_threadsafe(coro, self.loop).result(timeout)

    def call(self, fn: Callable[..., Any], *args, timeout: Optional[float] = None, **kwargs) -> Any:
        """Call a plain function on the loop thread and return its result."""
        async def invoke():
            return fn(*args, **kwargs)
        return self.run(invoke(), timeout=timeout)

    def stop(self) -> None:
        if not self.running:
            return

        async def cancel_pending():
            current = asyncio.current_task()
            pending = [t for t in asyncio.all_tasks() if t is not current]
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

        self.run(cancel_pending())
        self.loop.call_soon_threadsafe(self.loop.stop)
        self._thread.join()
        self.loop.close()
        logger.debug("Event loop thread stopped")

    def __enter__(self) -> "LoopRunner":
        return self.start()

    def __exit__(self, *exc) -> None:
        self.stop()
