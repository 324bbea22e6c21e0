"""
pipeline.py: Drive one item from `analyzing` to a terminal status.

    acquire bytes -> validate content type -> encode -> infer -> commit

Each item runs as its own coroutine; the only shared state touched is the
item store, and only through `ItemStore.update_item`, which always works on
the latest stored value. A commit for an item that was deleted meanwhile is
a silent no-op.
"""

import asyncio
import time
from typing import Optional, Tuple

import aiohttp

from ..utils.log_utils import get_logger
from .errors import (
    AcquisitionError,
    AnalysisError,
    ContentTypeError,
    FetchError,
    InferenceError,
    NetworkError,
    describe_failure,
)
from .image_encoder import EncodedImage, encode_image
from .item_store import ItemStore
from .models import ExifMetadata, InvalidTransition, Item, ItemStatus, UploadedFile

logger = get_logger(__name__)


async def fetch_image(url: str, timeout: Optional[float] = None) -> Tuple[bytes, str]:
    """Download `url` and return its bytes and declared content type.

    Raises:
        FetchError: The server answered with a non-2xx status.
        NetworkError: The server could not be reached.
        AcquisitionError: Any other client-side failure (e.g. a malformed URL).
    """
    client_timeout = aiohttp.ClientTimeout(total=timeout)
    try:
        async with aiohttp.ClientSession(timeout=client_timeout) as session:
            async with session.get(url) as response:
                if not 200 <= response.status < 300:
                    raise FetchError(response.status, url)
                data = await response.read()
                return data, response.content_type
    except aiohttp.InvalidURL as err:
        raise AcquisitionError(f"Invalid URL: {url}") from err
    except (aiohttp.ClientConnectionError, asyncio.TimeoutError) as err:
        raise NetworkError(str(err) or type(err).__name__) from err
    except aiohttp.ClientError as err:
        raise AcquisitionError(f"Failed to fetch image: {err}") from err


def is_image_type(content_type: Optional[str]) -> bool:
    return bool(content_type) and content_type.lower().startswith("image/")


class AnalysisPipeline:
    """Runs the per-item analysis steps against an inference client."""

    def __init__(self, store: ItemStore, client, max_image_size: Optional[int] = None,
                 fetch_timeout: Optional[float] = None) -> None:
        self.store = store
        self.client = client
        self.max_image_size = max_image_size
        self.fetch_timeout = fetch_timeout

    async def run_file(self, item: Item, upload: UploadedFile) -> Optional[Item]:
        """Analyze an uploaded file already registered as `item`."""
        async def acquire() -> Tuple[bytes, str]:
            return upload.data, upload.content_type
        return await self._run(item, acquire)

    async def run_url(self, item: Item) -> Optional[Item]:
        """Fetch and analyze the remote image referenced by `item.url`."""
        async def acquire() -> Tuple[bytes, str]:
            data, content_type = await fetch_image(item.url, self.fetch_timeout)
            if not is_image_type(content_type):
                raise ContentTypeError(content_type)
            return data, content_type
        return await self._run(item, acquire)

    async def _run(self, item: Item, acquire) -> Optional[Item]:
        start_time = time.time()
        try:
            data, content_type = await acquire()
            logger.debug("Acquired %d bytes (%s) for %s", len(data), content_type, item.id)
            encoded = await self._encode(data, content_type)
            metadata = await self._infer(encoded)
        except Exception as err:
            if isinstance(err, AnalysisError):
                logger.error("Failed to analyze %s: %s", item.id, err)
            else:
                logger.exception("Unexpected failure while analyzing %s", item.id)
            return self._commit(item.id, status=ItemStatus.ERROR,
                                error=describe_failure(err, item.source_kind))

        logger.info("Completed %s in %.2fs", item.id, time.time() - start_time)
        return self._commit(item.id, status=ItemStatus.COMPLETE, metadata=metadata)

    async def _encode(self, data: bytes, content_type: str) -> EncodedImage:
        if not self.max_image_size:
            return encode_image(data, content_type)
        # Downscaling is CPU-bound, so we run it in the default thread pool
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, encode_image, data, content_type, self.max_image_size)

    async def _infer(self, encoded: EncodedImage) -> ExifMetadata:
        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(
            None, self.client.analyze_image, encoded.data, encoded.content_type
        )
        if isinstance(result, ExifMetadata):
            return result
        if not result:
            raise InferenceError("Empty response from inference service")
        try:
            return ExifMetadata.model_validate(result)
        except ValueError as err:
            raise InferenceError("Inference service returned incomplete metadata") from err

    def _commit(self, item_id: str, **patch) -> Optional[Item]:
        try:
            return self.store.update_item(item_id, **patch)
        except InvalidTransition:
            logger.warning("Ignoring second result for %s", item_id)
            return None
