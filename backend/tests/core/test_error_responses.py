"""
Tests for error message templates and HTTPException builders.
"""
import pytest
from fastapi import HTTPException

from proftest.core.error_responses import (
    ErrorMessages,
    raise_bad_request,
    raise_not_found,
    raise_server_error,
    raise_unauthorized,
)


class TestErrorMessages:
    """Tests for the message templates."""

    def test_incomplete_answers_sorts_positions(self):
        message = ErrorMessages.incomplete_answers(expected=4, missing=[3, 0])
        assert message == "All 4 questions must be answered. Unanswered positions: 0, 3."

    def test_unknown_fields(self):
        assert ErrorMessages.unknown_fields({"b", "a"}) == "Unknown fields requested: a, b."

    def test_database_operation_failed(self):
        assert ErrorMessages.database_operation_failed("update test") == (
            "Failed to update test. Please try again later."
        )


class TestRaiseHelpers:
    """Tests for the raise_* builders."""

    def test_bad_request(self):
        with pytest.raises(HTTPException) as exc_info:
            raise_bad_request("Bad.")
        assert exc_info.value.status_code == 400
        assert exc_info.value.detail == "Bad."

    def test_not_found(self):
        with pytest.raises(HTTPException) as exc_info:
            raise_not_found(ErrorMessages.TEST_NOT_FOUND)
        assert exc_info.value.status_code == 404

    def test_unauthorized_sets_bearer_challenge(self):
        with pytest.raises(HTTPException) as exc_info:
            raise_unauthorized(ErrorMessages.INVALID_TOKEN)
        assert exc_info.value.status_code == 401
        assert exc_info.value.headers == {"WWW-Authenticate": "Bearer"}

    def test_server_error_keeps_detail_unchanged(self):
        with pytest.raises(HTTPException) as exc_info:
            raise_server_error(ErrorMessages.PASS_COUNT_FAILED)
        assert exc_info.value.status_code == 500
        assert exc_info.value.detail == ErrorMessages.PASS_COUNT_FAILED

    def test_server_error_takes_only_detail(self):
        with pytest.raises(TypeError):
            raise_server_error("Oops.", error_id="abc")
