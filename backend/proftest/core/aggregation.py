"""
Pass count aggregation for test records.

When a read projects ``passCount``, each returned test gets the number of
completions recorded for it. Counts run concurrently (one per record, bounded
by a semaphore) and are joined before the response is produced.

Failure policy: the first count that raises cancels the outstanding ones and
the whole aggregation fails with AggregationError.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional, TypeVar, Union

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from proftest.core.config import settings
from proftest.core.projection import Projection
from proftest.models.models import TestCompletion

logger = logging.getLogger(__name__)

R = TypeVar("R")

CountFunction = Callable[[Any], Awaitable[int]]

PASS_COUNT_ATTRIBUTE = "pass_count"


class AggregationError(Exception):
    """Raised when any per-record pass count fails.

    Attributes:
        record_index: Position of the record whose count failed first
    """

    def __init__(self, message: str, record_index: int):
        super().__init__(message)
        self.record_index = record_index


async def attach_pass_counts(
    records: Union[R, List[R]],
    projection: Projection,
    count: CountFunction,
    max_concurrency: Optional[int] = None,
) -> Union[R, List[R]]:
    """
    Attach ``pass_count`` to one record or a list of records.

    The return value has the same shape as ``records``: a single record in,
    the same record out; a list in, a list in the original order out. When
    the projection doesn't request pass counts nothing is computed and the
    input is returned as-is.

    Args:
        records: A record or list of records to decorate
        projection: Parsed request projection
        count: Coroutine function returning the completion count of a record
        max_concurrency: Upper bound on in-flight counts
            (default: settings.PASS_COUNT_MAX_CONCURRENCY)

    Returns:
        The input, with ``pass_count`` set on every record

    Raises:
        AggregationError: If any count fails; outstanding counts are cancelled
    """
    if not projection.include_pass_count:
        return records

    is_list = isinstance(records, list)
    items: List[R] = records if is_list else [records]  # type: ignore[list-item]
    if not items:
        return records

    limit = max_concurrency or settings.PASS_COUNT_MAX_CONCURRENCY
    semaphore = asyncio.Semaphore(limit)

    async def _count_one(record: R) -> int:
        async with semaphore:
            return await count(record)

    tasks = [asyncio.create_task(_count_one(item)) for item in items]
    try:
        counts = await asyncio.gather(*tasks)
    except Exception as e:
        for task in tasks:
            task.cancel()
        # Let cancelled tasks settle so none is left running or unretrieved
        await asyncio.gather(*tasks, return_exceptions=True)
        failed = next(
            (
                i
                for i, t in enumerate(tasks)
                if t.done() and not t.cancelled() and t.exception() is e
            ),
            -1,
        )
        logger.error(
            f"Pass count aggregation failed at record {failed}: {e}",
            extra={"record_count": len(items)},
        )
        raise AggregationError(f"Pass count failed: {e}", record_index=failed) from e

    for item, value in zip(items, counts):
        setattr(item, PASS_COUNT_ATTRIBUTE, value)

    logger.debug(
        f"Attached pass counts to {len(items)} records",
        extra={"record_count": len(items)},
    )
    return items if is_list else items[0]


def completion_counter(
    session_factory: async_sessionmaker[AsyncSession],
) -> CountFunction:
    """
    Build a count function that reads completions from the database.

    Each call opens its own session so counts can run concurrently.

    Args:
        session_factory: Factory producing async database sessions

    Returns:
        Coroutine function mapping a Test record to its completion count
    """

    async def _count(test: Any) -> int:
        async with session_factory() as db:
            result = await db.execute(
                select(func.count(TestCompletion.id)).where(
                    TestCompletion.test_id == test.id
                )
            )
            return int(result.scalar_one())

    return _count
