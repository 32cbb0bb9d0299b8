"""
Current-user endpoints: answer submission.
"""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from proftest.core.auth import get_current_user
from proftest.core.datetime_utils import ensure_timezone_aware, utc_now
from proftest.core.error_responses import (
    ErrorMessages,
    raise_bad_request,
    raise_not_found,
    raise_server_error,
)
from proftest.core.scoring import ScoringError, UnknownScorerError, score_answers
from proftest.models import get_db
from proftest.models.models import Test, TestCompletion, User
from proftest.schemas.answers import AnswerSubmission, AnswerSubmissionResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.put("/me/answers", response_model=AnswerSubmissionResponse)
async def submit_answers(
    submission: AnswerSubmission,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Score a completed answer set and record the completion.

    The answer list must have one non-null entry per question. Nothing is
    written unless scoring succeeds. Re-submitting a test overwrites the
    user's previous completion, so pass counts count users, not attempts.

    Args:
        submission: Test ID and answers indexed by question position
        current_user: Current authenticated user
        db: Database session

    Returns:
        Raw scored result, one entry per dimension

    Raises:
        HTTPException: 404 if the test doesn't exist, 400 if the answers are
            incomplete, 500 if scoring or persistence fails
    """
    result = await db.execute(select(Test).where(Test.id == submission.test_id))
    test = result.scalar_one_or_none()
    if test is None:
        raise_not_found(ErrorMessages.TEST_NOT_FOUND)

    answers = submission.answers
    if not answers:
        raise_bad_request(ErrorMessages.EMPTY_ANSWER_LIST)
    if len(answers) != len(test.questions):
        raise_bad_request(
            ErrorMessages.answer_count_mismatch(len(test.questions), len(answers))
        )
    missing = [position for position, value in enumerate(answers) if value is None]
    if missing:
        raise_bad_request(ErrorMessages.incomplete_answers(len(answers), missing))

    try:
        scored = score_answers(test, answers)
    except UnknownScorerError as e:
        logger.error(f"Test {test.id} references unregistered scorer '{e.name}'")
        raise_server_error(ErrorMessages.SCORING_FAILED)
    except ScoringError as e:
        logger.error(f"Scoring failed for test {test.id}: {e}", exc_info=True)
        raise_server_error(ErrorMessages.SCORING_FAILED)

    existing = await db.execute(
        select(TestCompletion).where(
            TestCompletion.user_id == current_user.id,
            TestCompletion.test_id == test.id,
        )
    )
    completion = existing.scalar_one_or_none()
    passed_at = utc_now()

    try:
        if completion is None:
            completion = TestCompletion(
                user_id=current_user.id,
                test_id=test.id,
                answers=list(answers),
                result=scored,
                passed_at=passed_at,
            )
            db.add(completion)
        else:
            completion.answers = list(answers)
            completion.result = scored
            completion.passed_at = passed_at
        await db.commit()
        await db.refresh(completion)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(
            f"Database error recording completion for user {current_user.id}, "
            f"test {test.id}: {e}"
        )
        raise_server_error(
            ErrorMessages.database_operation_failed("record test completion")
        )

    logger.info(
        f"Recorded completion for user {current_user.id}",
        extra={"test_id": test.id},
    )
    return AnswerSubmissionResponse(
        result=scored,
        passed_at=ensure_timezone_aware(completion.passed_at),
    )
