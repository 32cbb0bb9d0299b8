"""
Test catalog endpoints.

GET     /v1/tests              -> list_tests
POST    /v1/tests              -> create_test
GET     /v1/tests/{test_id}    -> get_test
PUT     /v1/tests/{test_id}    -> update_test
DELETE  /v1/tests/{test_id}    -> delete_test

Read endpoints accept ``fields`` (JSON projection, see
proftest.core.projection). Projecting ``passCount`` attaches per-test
completion counts computed concurrently.
"""
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from proftest.core.aggregation import (
    AggregationError,
    CountFunction,
    attach_pass_counts,
    completion_counter,
)
from proftest.core.error_responses import (
    ErrorMessages,
    raise_bad_request,
    raise_not_found,
    raise_server_error,
)
from proftest.core.projection import Projection, ProjectionError, parse_projection
from proftest.core.scoring import get_scorer, UnknownScorerError
from proftest.models import get_db, get_session_factory
from proftest.models.models import Test
from proftest.schemas.tests import (
    TestCreate,
    TestResponse,
    TestUpdate,
    projectable_fields,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def get_projection(
    fields: Optional[str] = Query(
        None,
        description='JSON object of field flags, e.g. {"name": true, "passCount": true}',
    ),
) -> Projection:
    """Parse the ``fields`` query parameter, rejecting bad input with 400."""
    try:
        return parse_projection(fields, allowed=projectable_fields())
    except ProjectionError as e:
        if e.unknown:
            raise_bad_request(ErrorMessages.unknown_fields(e.unknown))
        raise_bad_request(ErrorMessages.INVALID_FIELDS_PARAMETER)


def get_pass_counter(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> CountFunction:
    """Count function backed by the database."""
    return completion_counter(session_factory)


async def _get_test_or_404(db: AsyncSession, test_id: int) -> Test:
    result = await db.execute(select(Test).where(Test.id == test_id))
    test = result.scalar_one_or_none()
    if test is None:
        raise_not_found(ErrorMessages.TEST_NOT_FOUND)
    return test


def _ensure_scorer_registered(scorer: str) -> None:
    try:
        get_scorer(scorer)
    except UnknownScorerError:
        raise_bad_request(ErrorMessages.unknown_scorer(scorer))


def _serialize(test: Test, projection: Projection) -> Dict[str, Any]:
    return projection.apply(TestResponse.model_validate(test).to_wire())


@router.get("")
async def list_tests(
    ids: Optional[List[int]] = Query(None, description="Restrict to these test IDs"),
    projection: Projection = Depends(get_projection),
    count: CountFunction = Depends(get_pass_counter),
    db: AsyncSession = Depends(get_db),
) -> List[Dict[str, Any]]:
    """
    List tests, optionally restricted to ``ids``.

    Args:
        ids: Optional list of test IDs
        projection: Parsed ``fields`` parameter
        count: Pass count function
        db: Database session

    Returns:
        Projected test records in ID order
    """
    stmt = select(Test).order_by(Test.id)
    if ids:
        stmt = stmt.where(Test.id.in_(ids))
    result = await db.execute(stmt)
    tests = list(result.scalars().all())

    try:
        tests = await attach_pass_counts(tests, projection, count)
    except AggregationError:
        raise_server_error(ErrorMessages.PASS_COUNT_FAILED)

    return [_serialize(test, projection) for test in tests]


@router.get("/{test_id}")
async def get_test(
    test_id: int,
    projection: Projection = Depends(get_projection),
    count: CountFunction = Depends(get_pass_counter),
    db: AsyncSession = Depends(get_db),
) -> Dict[str, Any]:
    """
    Get a single test.

    Raises:
        HTTPException: 404 if the test doesn't exist, 500 if the pass count fails
    """
    test = await _get_test_or_404(db, test_id)

    try:
        test = await attach_pass_counts(test, projection, count)
    except AggregationError:
        raise_server_error(ErrorMessages.PASS_COUNT_FAILED)

    return _serialize(test, projection)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_test(
    test_data: TestCreate,
    db: AsyncSession = Depends(get_db),
) -> Dict[str, Any]:
    """
    Create a test.

    The scorer must already be registered so submissions can be scored.
    """
    _ensure_scorer_registered(test_data.scorer)

    test = Test(**test_data.model_dump())
    try:
        db.add(test)
        await db.commit()
        await db.refresh(test)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Database error creating test: {e}")
        raise_server_error(ErrorMessages.database_operation_failed("create test"))

    logger.info(f"Created test {test.id}", extra={"test_id": test.id})
    return _serialize(test, Projection())


@router.put("/{test_id}")
async def update_test(
    test_id: int,
    test_update: TestUpdate,
    db: AsyncSession = Depends(get_db),
) -> Dict[str, Any]:
    """
    Update a test. Only provided fields change.

    Raises:
        HTTPException: 404 if the test doesn't exist, 400 if the merged
            dimensions are inconsistent or the scorer is unknown
    """
    test = await _get_test_or_404(db, test_id)
    update_data = test_update.model_dump(exclude_unset=True)

    if "scorer" in update_data:
        _ensure_scorer_registered(update_data["scorer"])

    thinking_types = update_data.get("thinking_types", test.thinking_types)
    description = update_data.get("description", test.description)
    if len(thinking_types) != len(description):
        raise_bad_request(
            f"description has {len(description)} entries for "
            f"{len(thinking_types)} thinkingTypes."
        )

    for field, value in update_data.items():
        setattr(test, field, value)

    try:
        await db.commit()
        await db.refresh(test)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Database error updating test {test_id}: {e}")
        raise_server_error(ErrorMessages.database_operation_failed("update test"))

    return _serialize(test, Projection())


@router.delete("/{test_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_test(
    test_id: int,
    db: AsyncSession = Depends(get_db),
) -> None:
    """
    Delete a test and its completion records.

    Raises:
        HTTPException: 404 if the test doesn't exist
    """
    test = await _get_test_or_404(db, test_id)
    try:
        await db.delete(test)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Database error deleting test {test_id}: {e}")
        raise_server_error(ErrorMessages.database_operation_failed("delete test"))

    logger.info(f"Deleted test {test_id}", extra={"test_id": test_id})
