"""
Background image decoding.

Decoding is the one slow, asynchronous step of a coloring session. This module
runs it on a worker thread and lets the host's event loop pick up finished
results when convenient. Results carry the session's load ticket, so a
session can recognise and drop results for images the user has already
navigated away from. The pixel buffer itself is never touched off the host
thread.

Classes:
    LoadResult: Finished decode, success or failure
    AsyncImageLoader: Thread-pool backed decoder with non-blocking polling
"""

import concurrent.futures
import logging
from typing import Any, Callable, Dict, List, NamedTuple, Optional

from CC_Libs.errors import ImageLoadError

logger = logging.getLogger(__name__)

# Type alias for the decode function: image id -> PIL image
LoadFunction = Callable[[str], Any]


class LoadResult(NamedTuple):
    ticket: int
    image_id: str
    image: Optional[Any]
    error: Optional[ImageLoadError]

    @property
    def ok(self) -> bool:
        return self.error is None


class AsyncImageLoader:
    """
    Decode images off the event-loop thread.

    Example:
        >>> loader = AsyncImageLoader(catalog.load)
        >>> ticket = session.open_image("castle")
        >>> loader.request(ticket, "castle")
        >>> # later, from a timer on the UI thread:
        >>> for result in loader.collect_finished():
        ...     session.apply_load_result(result)
    """

    def __init__(self, load_fn: LoadFunction, max_workers: int = 1) -> None:
        if not callable(load_fn):
            raise ValueError(f"load_fn must be callable, got {type(load_fn)}")
        self._load_fn = load_fn
        self._executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=max(1, int(max_workers)),
            thread_name_prefix="image-decode",
        )
        self._pending: Dict[concurrent.futures.Future, tuple] = {}

    def request(self, ticket: int, image_id: str) -> concurrent.futures.Future:
        """Start decoding ``image_id`` for the load identified by ``ticket``."""
        future = self._executor.submit(self._load_fn, image_id)
        self._pending[future] = (ticket, image_id)
        logger.debug("Queued decode of %s (ticket %d)", image_id, ticket)
        return future

    def has_pending(self) -> bool:
        return bool(self._pending)

    def collect_finished(self) -> List[LoadResult]:
        """
        Return results for every decode that has finished, without blocking.

        Unexpected decoder exceptions are reported as ImageLoadError results
        so the session can still move to its failed state.
        """
        finished: List[LoadResult] = []
        for future in [f for f in self._pending if f.done()]:
            ticket, image_id = self._pending.pop(future)
            finished.append(self._to_result(future, ticket, image_id))
        return finished

    def wait_all(self, timeout: Optional[float] = None) -> List[LoadResult]:
        """Block until pending decodes finish, then collect them."""
        concurrent.futures.wait(list(self._pending), timeout=timeout)
        return self.collect_finished()

    def shutdown(self, wait: bool = False) -> None:
        for future in self._pending:
            future.cancel()
        self._pending.clear()
        self._executor.shutdown(wait=wait)

    def _to_result(self, future: concurrent.futures.Future, ticket: int, image_id: str) -> LoadResult:
        if future.cancelled():
            return LoadResult(ticket, image_id, None, ImageLoadError(image_id, "load cancelled"))

        exc = future.exception()
        if exc is None:
            return LoadResult(ticket, image_id, future.result(), None)

        if isinstance(exc, ImageLoadError):
            return LoadResult(ticket, image_id, None, exc)

        logger.error("Unexpected error decoding %s: %s", image_id, exc, exc_info=exc)
        return LoadResult(ticket, image_id, None, ImageLoadError(image_id, str(exc)))
