"""
Answer accumulation with exactly-once submission.
"""
import logging
from typing import Any, Awaitable, Callable, List, Optional

from proftest.session.exceptions import (
    SessionCompleteError,
    SubmissionInFlightError,
    ValidationFailure,
)
from proftest.session.navigator import QuestionNavigator

logger = logging.getLogger(__name__)

# Called with (test_id, answers) when the session reaches completion
CompletionHandler = Callable[[int, List[Any]], Awaitable[Any]]


class AnswerAccumulator:
    """
    Records answers at the navigator's current position.

    Submission fires only on the transition into the completion sentinel, so a
    completed pass is submitted exactly once. A failed submission leaves the
    persisted session untouched; ``resubmit()`` tries again.
    """

    def __init__(self, navigator: QuestionNavigator, on_complete: CompletionHandler):
        self.navigator = navigator
        self.on_complete = on_complete
        self._in_flight = False

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    async def record(self, value: Any) -> Optional[Any]:
        """
        Record an answer for the current question and move on.

        Args:
            value: The user's answer

        Returns:
            The completion handler's result when this answer completed the
            session, otherwise None

        Raises:
            SubmissionInFlightError: A submission for this session is running
            SessionCompleteError: Every question is already answered
            ValidationFailure: The answer is None, which marks an unanswered
                question
        """
        if value is None:
            raise ValidationFailure("An answer is required to move on")
        if self._in_flight:
            raise SubmissionInFlightError(
                f"Submission for test {self.navigator.session.test_id} is in progress"
            )
        if self.navigator.current() is None:
            raise SessionCompleteError(
                f"All questions of test {self.navigator.session.test_id} are answered"
            )

        session = self.navigator.session
        session.answers[self.navigator.index] = value
        session.save_answers()
        self.navigator.advance()

        if self.navigator.current() is None:
            return await self._submit()
        return None

    async def resubmit(self) -> Any:
        """
        Re-trigger submission of a completed session after a failure.

        Raises:
            SubmissionInFlightError: A submission is already running
            ValidationFailure: The session is not complete
        """
        if self._in_flight:
            raise SubmissionInFlightError(
                f"Submission for test {self.navigator.session.test_id} is in progress"
            )
        if self.navigator.current() is not None:
            raise ValidationFailure(
                f"Test {self.navigator.session.test_id} has unanswered questions"
            )
        return await self._submit()

    async def _submit(self) -> Any:
        session = self.navigator.session
        logger.info(
            f"Submitting {len(session.answers)} answers for test {session.test_id}",
            extra={"test_id": session.test_id, "record_count": len(session.answers)},
        )
        self._in_flight = True
        try:
            return await self.on_complete(session.test_id, list(session.answers))
        finally:
            self._in_flight = False
