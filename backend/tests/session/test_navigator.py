"""
Tests for Session persistence and QuestionNavigator.
"""
import json

import pytest

from proftest.session.navigator import (
    QuestionNavigator,
    Session,
    answers_key,
    index_key,
)
from proftest.session.store import InMemorySessionStore

QUESTIONS = ["q0", "q1", "q2"]


@pytest.fixture
def store():
    return InMemorySessionStore()


def navigator_for(store, test_id=7, questions=QUESTIONS):
    session = Session.load(store, test_id, len(questions))
    return QuestionNavigator(session, questions)


class TestStoreKeys:
    """The store key layout."""

    def test_keys(self):
        assert answers_key(7) == "7"
        assert index_key(7) == "7questionIndex"


class TestSessionLoad:
    """Tests for restoring a session from the store."""

    def test_fresh_session(self, store):
        session = Session.load(store, 7, 3)

        assert session.current_question_index == 0
        assert session.answers == [None, None, None]
        assert not session.is_complete

    def test_resumes_index_and_answers(self, store):
        store.set("7", json.dumps([4, None, None]))
        store.set("7questionIndex", "1")

        session = Session.load(store, 7, 3)

        assert session.current_question_index == 1
        assert session.answers == [4, None, None]

    def test_sessions_of_other_tests_ignored(self, store):
        store.set("8", json.dumps([1, 1, 1]))
        store.set("8questionIndex", "3")

        session = Session.load(store, 7, 3)

        assert session.current_question_index == 0
        assert session.answers == [None, None, None]

    @pytest.mark.parametrize(
        "raw_index, expected",
        [("-4", 0), ("99", 0), ("abc", 0), ("2", 2)],
    )
    def test_index_clamped(self, store, raw_index, expected):
        # 99 clamps to the sentinel, which falls back to the first unanswered question
        store.set("7questionIndex", raw_index)
        assert Session.load(store, 7, 3).current_question_index == expected

    def test_sentinel_kept_when_all_answered(self, store):
        store.set("7", json.dumps([1, 2, 3]))
        store.set("7questionIndex", "3")

        session = Session.load(store, 7, 3)

        assert session.current_question_index == 3
        assert session.is_complete

    def test_sentinel_without_answers_restarts_at_first_gap(self, store):
        """A crash that lost the answers cannot leave a complete empty session."""
        store.set("7", json.dumps([1, None, 3]))
        store.set("7questionIndex", "3")

        assert Session.load(store, 7, 3).current_question_index == 1

    def test_answers_padded_and_truncated(self, store):
        store.set("7", json.dumps([1]))
        assert Session.load(store, 7, 3).answers == [1, None, None]

        store.set("7", json.dumps([1, 2, 3, 4, 5]))
        assert Session.load(store, 7, 3).answers == [1, 2, 3]

    def test_unreadable_answers_discarded(self, store):
        store.set("7", "not json")
        assert Session.load(store, 7, 3).answers == [None, None, None]

    def test_clear_removes_both_keys(self, store):
        session = Session.load(store, 7, 3)
        session.save_answers()
        session.save_index()

        session.clear()

        assert store.get("7") is None
        assert store.get("7questionIndex") is None

    def test_clear_is_idempotent(self, store):
        session = Session.load(store, 7, 3)
        session.clear()
        session.clear()
        assert store.keys() == []


class TestQuestionNavigator:
    """Tests for current / advance / retreat."""

    def test_current_starts_at_first_question(self, store):
        assert navigator_for(store).current() == "q0"

    def test_advance_persists_index(self, store):
        navigator = navigator_for(store)

        assert navigator.advance() == 1
        assert navigator.current() == "q1"
        assert store.get("7questionIndex") == "1"

    def test_advance_then_retreat_restores_index(self, store):
        navigator = navigator_for(store)
        navigator.advance()
        before = navigator.index

        navigator.advance()
        navigator.retreat()

        assert navigator.index == before
        assert store.get("7questionIndex") == str(before)

    def test_retreat_at_first_question_clamps(self, store):
        navigator = navigator_for(store)

        assert navigator.retreat() == 0
        assert navigator.current() == "q0"
        assert store.get("7questionIndex") == "0"

    def test_current_is_none_past_the_end(self, store):
        navigator = navigator_for(store)
        for _ in QUESTIONS:
            navigator.advance()

        assert navigator.index == 3
        assert navigator.current() is None

    def test_resumed_navigator_continues(self, store):
        navigator_for(store).advance()

        resumed = navigator_for(store)

        assert resumed.current() == "q1"

    def test_question_count_must_match_session(self, store):
        session = Session.load(store, 7, 2)
        with pytest.raises(ValueError):
            QuestionNavigator(session, QUESTIONS)
