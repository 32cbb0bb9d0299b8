"""
Session state and question navigation for one test on one device.

A ``Session`` is persisted under two keys of a ``SessionStore``:

* ``<testId>`` holds the JSON-encoded answer sequence (``null`` = unanswered)
* ``<testId>questionIndex`` holds the current question index

Absent or unreadable keys re-initialise to defaults, so a crash between the
two removals of ``clear()`` never corrupts a later session.
"""
import json
import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

from proftest.session.store import SessionStore

logger = logging.getLogger(__name__)

INDEX_KEY_SUFFIX = "questionIndex"


def answers_key(test_id: int) -> str:
    """Store key of a test's answer sequence."""
    return str(test_id)


def index_key(test_id: int) -> str:
    """Store key of a test's current question index."""
    return f"{test_id}{INDEX_KEY_SUFFIX}"


def _clamp(value: int, lower: int, upper: int) -> int:
    return max(lower, min(upper, value))


@dataclass
class Session:
    """
    Device-local, resumable state of an in-progress test.

    Attributes:
        test_id: Test being taken
        question_count: Number of questions in the test
        store: Storage port the session persists into
        current_question_index: Position of the current question; equals
            ``question_count`` once every question is answered
        answers: Answer per question position, ``None`` when unanswered
    """

    test_id: int
    question_count: int
    store: SessionStore
    current_question_index: int = 0
    answers: List[Any] = field(default_factory=list)

    def __post_init__(self):
        if self.question_count < 0:
            raise ValueError("question_count must be non-negative")
        self.answers = self._fit_answers(self.answers)

    def _fit_answers(self, answers: Sequence[Any]) -> List[Any]:
        fitted = list(answers[: self.question_count])
        fitted.extend([None] * (self.question_count - len(fitted)))
        return fitted

    @classmethod
    def load(cls, store: SessionStore, test_id: int, question_count: int) -> "Session":
        """
        Restore a session from the store, or start a fresh one.

        A stored index that is not an integer or lies outside
        ``[0, question_count]`` is clamped into range. A stored completion
        sentinel with unanswered positions is moved back to the first
        unanswered question.

        Args:
            store: Storage port
            test_id: Test being taken
            question_count: Number of questions in the test

        Returns:
            Session positioned where the user left off
        """
        session = cls(test_id=test_id, question_count=question_count, store=store)

        raw_answers = store.get(answers_key(test_id))
        if raw_answers is not None:
            try:
                decoded = json.loads(raw_answers)
            except json.JSONDecodeError:
                decoded = None
            if isinstance(decoded, list):
                session.answers = session._fit_answers(decoded)
            else:
                logger.warning(
                    f"Discarding unreadable answers for test {test_id}",
                    extra={"test_id": test_id},
                )

        raw_index = store.get(index_key(test_id))
        index = 0
        if raw_index is not None:
            try:
                index = int(raw_index)
            except ValueError:
                logger.warning(
                    f"Discarding unreadable question index {raw_index!r} for test {test_id}",
                    extra={"test_id": test_id},
                )
                index = 0
        index = _clamp(index, 0, question_count)

        if index == question_count and None in session.answers:
            index = session.answers.index(None)

        session.current_question_index = index
        return session

    @property
    def is_complete(self) -> bool:
        """Whether the index sits on the completion sentinel."""
        return self.current_question_index >= self.question_count

    def save_index(self) -> None:
        self.store.set(index_key(self.test_id), str(self.current_question_index))

    def save_answers(self) -> None:
        self.store.set(answers_key(self.test_id), json.dumps(self.answers))

    def clear(self) -> None:
        """
        Remove the session's keys from the store.

        The index goes first: if only the answers survive a crash, the next
        session restarts at question 0 with the previous answers prefilled.
        """
        self.store.delete(index_key(self.test_id))
        self.store.delete(answers_key(self.test_id))


class QuestionNavigator:
    """
    Walks an ordered question list by index.

    The navigator performs no upper-bound check on ``advance()``; callers
    detect completion through ``current()`` returning ``None``.
    """

    def __init__(self, session: Session, questions: Sequence[Any]):
        if len(questions) != session.question_count:
            raise ValueError(
                f"Session expects {session.question_count} questions, got {len(questions)}"
            )
        self.session = session
        self.questions = list(questions)

    @property
    def index(self) -> int:
        return self.session.current_question_index

    def current(self) -> Optional[Any]:
        """Return the current question, or None once every question is answered."""
        if self.index >= len(self.questions):
            return None
        return self.questions[self.index]

    def advance(self) -> int:
        """Move to the next question and persist the index."""
        self.session.current_question_index += 1
        self.session.save_index()
        return self.session.current_question_index

    def retreat(self) -> int:
        """
        Move to the previous question and persist the index.

        At the first question the index stays at 0.
        """
        self.session.current_question_index = max(0, self.session.current_question_index - 1)
        self.session.save_index()
        return self.session.current_question_index
