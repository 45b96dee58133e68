"""Helpers for running blocking driver calls off the event loop.

Blocking work is submitted to a dedicated, bounded thread pool owned by this
module instead of the loop's default executor, so slow drivers cannot starve
unrelated work scheduled through ``asyncio.to_thread``.
"""

import asyncio
import functools
import os
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Any, Optional, TypeVar

from typing_extensions import ParamSpec

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable
    from types import TracebackType

__all__ = (
    "CapacityLimiter",
    "async_",
    "configure_worker_pool",
    "get_worker_pool",
    "shutdown_worker_pool",
)

ReturnT = TypeVar("ReturnT")
ParamSpecT = ParamSpec("ParamSpecT")

_THREAD_NAME_PREFIX = "querybridge-worker"
_pool_lock = threading.Lock()
_worker_pool: Optional[ThreadPoolExecutor] = None
_max_workers: int = min(32, (os.cpu_count() or 1) + 4)


class CapacityLimiter:
    """Limits the number of concurrent operations using a semaphore."""

    def __init__(self, total_tokens: int) -> None:
        self._total_tokens = total_tokens
        self._semaphore_instance: Optional[asyncio.Semaphore] = None

    @property
    def _semaphore(self) -> asyncio.Semaphore:
        # Created lazily so the semaphore binds to the running loop.
        if self._semaphore_instance is None:
            self._semaphore_instance = asyncio.Semaphore(self._total_tokens)
        return self._semaphore_instance

    async def acquire(self) -> None:
        await self._semaphore.acquire()

    def release(self) -> None:
        self._semaphore.release()

    @property
    def total_tokens(self) -> int:
        return self._total_tokens

    @total_tokens.setter
    def total_tokens(self, value: int) -> None:
        self._total_tokens = value
        self._semaphore_instance = None

    async def __aenter__(self) -> None:
        await self.acquire()

    async def __aexit__(
        self,
        exc_type: "Optional[type[BaseException]]",
        exc_val: "Optional[BaseException]",
        exc_tb: "Optional[TracebackType]",
    ) -> None:
        self.release()


def configure_worker_pool(max_workers: int) -> None:
    """Resize the shared worker pool.

    The current pool, if any, is shut down without waiting; calls already
    running on it complete normally.

    Args:
        max_workers: Maximum number of worker threads.

    Raises:
        ValueError: If ``max_workers`` is not positive.
    """
    global _worker_pool, _max_workers  # noqa: PLW0603
    if max_workers <= 0:
        msg = "max_workers must be greater than 0"
        raise ValueError(msg)
    with _pool_lock:
        previous, _worker_pool, _max_workers = _worker_pool, None, max_workers
    if previous is not None:
        previous.shutdown(wait=False)


def get_worker_pool() -> ThreadPoolExecutor:
    """Return the shared worker pool, creating it on first use.

    Returns:
        The bounded thread pool used for blocking driver calls.
    """
    global _worker_pool  # noqa: PLW0603
    with _pool_lock:
        if _worker_pool is None:
            _worker_pool = ThreadPoolExecutor(max_workers=_max_workers, thread_name_prefix=_THREAD_NAME_PREFIX)
        return _worker_pool


def shutdown_worker_pool(wait: bool = True) -> None:
    """Shut down the shared worker pool; a new one is created on next use."""
    global _worker_pool  # noqa: PLW0603
    with _pool_lock:
        previous, _worker_pool = _worker_pool, None
    if previous is not None:
        previous.shutdown(wait=wait)


def async_(
    function: "Callable[ParamSpecT, ReturnT]", *, limiter: "Optional[CapacityLimiter]" = None
) -> "Callable[ParamSpecT, Awaitable[ReturnT]]":
    """Convert a blocking function into an awaitable running on the worker pool.

    A limiter token is held until the blocking call itself returns. Cancelling
    the awaiting task, for example through :func:`asyncio.wait_for`, does not
    free the token while the worker thread is still busy.

    Args:
        function: The blocking callable.
        limiter: Optional limiter throttling concurrent calls.

    Returns:
        An async function with the same signature.
    """

    @functools.wraps(function)
    async def wrapper(*args: "ParamSpecT.args", **kwargs: "ParamSpecT.kwargs") -> "ReturnT":
        partial_f = functools.partial(function, *args, **kwargs)
        loop = asyncio.get_running_loop()
        if limiter is None:
            return await loop.run_in_executor(get_worker_pool(), partial_f)
        await limiter.acquire()
        try:
            future = loop.run_in_executor(get_worker_pool(), partial_f)
        except BaseException:
            limiter.release()
            raise
        future.add_done_callback(functools.partial(_release_token, limiter))
        return await asyncio.shield(future)

    return wrapper


def _release_token(limiter: CapacityLimiter, future: "asyncio.Future[Any]") -> None:
    limiter.release()
    if not future.cancelled():
        # Retrieved so an abandoned call does not log "exception was never retrieved".
        future.exception()
