"""
Wires the session pipeline together for one test.

open -> answer ... answer -> (automatic submission) -> DisplayResult
"""
import logging
from typing import Any, Optional

import httpx

from proftest.session.accumulator import AnswerAccumulator
from proftest.session.client import ApiClient
from proftest.session.config import SessionSettings
from proftest.session.exceptions import SessionError, SubmissionInFlightError
from proftest.session.navigator import QuestionNavigator, Session
from proftest.session.presenter import DisplayResult, ResultPresenter, TestMetadata
from proftest.session.store import InMemorySessionStore, JsonFileSessionStore, SessionStore

logger = logging.getLogger(__name__)

# Fields the take-a-test screen needs
TAKE_TEST_FIELDS = {
    "name": True,
    "icon": True,
    "type": True,
    "longDesc": True,
    "instruction": True,
    "questions": True,
    "thinkingTypes": True,
    "description": True,
    "levels": True,
}


class SessionController:
    """
    Drives one test session: navigation, answers, submission, results.

    The local store entries for the test are cleared only after the scoring
    endpoint acknowledged the submission.
    """

    def __init__(
        self,
        client: ApiClient,
        store: SessionStore,
        presenter: Optional[ResultPresenter] = None,
    ):
        self.client = client
        self.store = store
        self.presenter = presenter or ResultPresenter()
        self.test: Optional[TestMetadata] = None
        self.navigator: Optional[QuestionNavigator] = None
        self.accumulator: Optional[AnswerAccumulator] = None

    async def open(self, test_id: int) -> TestMetadata:
        """
        Fetch the test and restore any interrupted session for it.

        Raises:
            NotFoundError: The test does not exist
            TransportFailure: The metadata fetch failed
        """
        test = await self.client.fetch_test(test_id, fields=TAKE_TEST_FIELDS)
        session = Session.load(self.store, test.id, len(test.questions))

        self.test = test
        self.navigator = QuestionNavigator(session, test.questions)
        self.accumulator = AnswerAccumulator(self.navigator, self._complete)

        logger.info(
            f"Opened test {test.id} at question {session.current_question_index} "
            f"of {session.question_count}",
            extra={"test_id": test.id},
        )
        return test

    def _require_open(self) -> None:
        if self.navigator is None or self.accumulator is None:
            raise SessionError("No test is open")

    def current(self) -> Optional[Any]:
        """Current question, or None once every question is answered."""
        self._require_open()
        return self.navigator.current()

    @property
    def index(self) -> int:
        self._require_open()
        return self.navigator.index

    def retreat(self) -> int:
        """Go back one question so its answer can be changed."""
        self._require_open()
        if self.accumulator.in_flight:
            raise SubmissionInFlightError("Cannot navigate while submitting")
        return self.navigator.retreat()

    async def answer(self, value: Any) -> Optional[DisplayResult]:
        """
        Record an answer for the current question.

        Returns:
            DisplayResult when this answer completed the test, otherwise None
        """
        self._require_open()
        return await self.accumulator.record(value)

    async def resubmit(self) -> DisplayResult:
        """Retry submission of a completed session after a failure."""
        self._require_open()
        return await self.accumulator.resubmit()

    async def _complete(self, test_id: int, answers: list) -> DisplayResult:
        scored = await self.client.submit(
            test_id, answers, question_count=len(self.test.questions)
        )
        self.navigator.session.clear()
        logger.info(f"Cleared local session for test {test_id}", extra={"test_id": test_id})
        return self.presenter.present(self.test, scored)


def create_controller(
    settings: Optional[SessionSettings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> SessionController:
    """
    Build a controller from client settings.

    The store is a JSON file at ``store_path`` when set, in-memory otherwise.
    """
    settings = settings or SessionSettings()
    store: SessionStore
    if settings.store_path:
        store = JsonFileSessionStore(settings.store_path)
    else:
        store = InMemorySessionStore()
    return SessionController(
        client=ApiClient.from_settings(settings, transport=transport),
        store=store,
    )
