"""
Shared plumbing for the report calculators.

Every record store call goes through ReportCalculator._query so it is
bounded by the configured timeout. A timeout becomes StorageTimeoutError,
which callers may retry; nothing here retries on its own.
"""

import asyncio
from typing import Awaitable, Optional, TypeVar

from src.config import get_settings
from src.services.storage.interface import RecordStoreInterface, StorageTimeoutError

T = TypeVar("T")


async def gather_or_cancel(*awaitables: Awaitable):
    """
    Run awaitables concurrently; if one fails, cancel the rest and re-raise.

    The first exception propagates unchanged, so a failing query aborts
    the whole report instead of leaving sibling queries running.
    """
    tasks = [asyncio.ensure_future(aw) for aw in awaitables]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        raise


class ReportCalculator:
    """Base for calculators that read from a record store."""

    def __init__(
        self,
        store: RecordStoreInterface,
        query_timeout_seconds: Optional[float] = None,
    ):
        self._store = store
        if query_timeout_seconds is None:
            query_timeout_seconds = get_settings().reports.query_timeout_seconds
        self._timeout = query_timeout_seconds

    async def _query(self, awaitable: Awaitable[T], description: str) -> T:
        try:
            return await asyncio.wait_for(awaitable, timeout=self._timeout)
        except asyncio.TimeoutError:
            raise StorageTimeoutError(
                f"{description} did not finish within {self._timeout}s"
            )
