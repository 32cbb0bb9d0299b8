"""
Tests for answer submission (PUT /v1/users/me/answers).
"""
import pytest

from proftest.core.error_responses import ErrorMessages
from proftest.core.security import create_access_token

ANSWERS_URL = "/v1/users/me/answers"


def completions_for(db_session, test_id):
    from proftest.models.models import TestCompletion

    db_session.expire_all()
    return (
        db_session.query(TestCompletion)
        .filter(TestCompletion.test_id == test_id)
        .all()
    )


class TestSubmitAnswers:
    """Tests for scoring and recording a completed answer set."""

    def test_submit_scores_answers(self, client, auth_headers, sample_test):
        response = client.put(
            ANSWERS_URL,
            json={"testId": sample_test.id, "answers": [10, 5, 8, 2]},
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["result"] == [
            {"level": 3, "score": 10.0},
            {"level": 2, "score": 5.0},
            {"level": 3, "score": 8.0},
            {"level": 0, "score": 2.0},
        ]
        assert "passedAt" in data

    def test_submit_records_completion(
        self, client, auth_headers, sample_test, test_user, db_session
    ):
        client.put(
            ANSWERS_URL,
            json={"testId": sample_test.id, "answers": [10, 5, 8, 2]},
            headers=auth_headers,
        )

        completions = completions_for(db_session, sample_test.id)
        assert len(completions) == 1
        assert completions[0].user_id == test_user.id
        assert completions[0].answers == [10, 5, 8, 2]
        assert completions[0].result[0] == {"level": 3, "score": 10.0}

    def test_resubmission_overwrites_completion(
        self, client, auth_headers, sample_test, db_session
    ):
        for answers in ([10, 5, 8, 2], [0, 0, 0, 10]):
            response = client.put(
                ANSWERS_URL,
                json={"testId": sample_test.id, "answers": answers},
                headers=auth_headers,
            )
            assert response.status_code == 200

        completions = completions_for(db_session, sample_test.id)
        assert len(completions) == 1
        assert completions[0].answers == [0, 0, 0, 10]

    def test_submission_counts_towards_pass_count(
        self, client, auth_headers, sample_test
    ):
        client.put(
            ANSWERS_URL,
            json={"testId": sample_test.id, "answers": [1, 1, 1, 1]},
            headers=auth_headers,
        )

        response = client.get(
            f"/v1/tests/{sample_test.id}", params={"fields": '{"passCount": true}'}
        )
        assert response.json()["passCount"] == 1

    def test_unknown_test(self, client, auth_headers, db_session):
        response = client.put(
            ANSWERS_URL,
            json={"testId": 9999, "answers": [1]},
            headers=auth_headers,
        )

        assert response.status_code == 404
        assert response.json()["detail"] == ErrorMessages.TEST_NOT_FOUND

    def test_unanswered_positions_rejected(
        self, client, auth_headers, sample_test, db_session
    ):
        response = client.put(
            ANSWERS_URL,
            json={"testId": sample_test.id, "answers": [10, None, 8, None]},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["detail"] == ErrorMessages.incomplete_answers(4, [1, 3])
        assert completions_for(db_session, sample_test.id) == []

    def test_wrong_answer_count_rejected(self, client, auth_headers, sample_test):
        response = client.put(
            ANSWERS_URL,
            json={"testId": sample_test.id, "answers": [10, 5]},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["detail"] == ErrorMessages.answer_count_mismatch(4, 2)

    def test_empty_answers_rejected(self, client, auth_headers, sample_test):
        response = client.put(
            ANSWERS_URL,
            json={"testId": sample_test.id, "answers": []},
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.json()["detail"] == ErrorMessages.EMPTY_ANSWER_LIST

    @pytest.mark.parametrize(
        "body",
        [
            {"answers": [1, 2, 3, 4]},
            {"testId": "abc", "answers": [1, 2, 3, 4]},
            {"testId": 0, "answers": [1, 2, 3, 4]},
            {"testId": 1, "answers": "1,2,3,4"},
        ],
    )
    def test_malformed_body(self, client, auth_headers, sample_test, body):
        response = client.put(ANSWERS_URL, json=body, headers=auth_headers)
        assert response.status_code == 422

    def test_unregistered_scorer_is_server_error(
        self, client, auth_headers, db_session, sample_test
    ):
        sample_test.scorer = "retired_scorer"
        db_session.commit()

        response = client.put(
            ANSWERS_URL,
            json={"testId": sample_test.id, "answers": [1, 1, 1, 1]},
            headers=auth_headers,
        )

        assert response.status_code == 500
        assert response.json()["detail"] == ErrorMessages.SCORING_FAILED
        assert completions_for(db_session, sample_test.id) == []


class TestSubmitAnswersAuth:
    """Authentication requirements of answer submission."""

    def test_requires_token(self, client, sample_test):
        response = client.put(
            ANSWERS_URL, json={"testId": sample_test.id, "answers": [1, 1, 1, 1]}
        )
        assert response.status_code in (401, 403)

    def test_invalid_token(self, client, sample_test):
        response = client.put(
            ANSWERS_URL,
            json={"testId": sample_test.id, "answers": [1, 1, 1, 1]},
            headers={"Authorization": "Bearer not-a-jwt"},
        )

        assert response.status_code == 401
        assert response.json()["detail"] == ErrorMessages.INVALID_TOKEN

    def test_token_for_unknown_user(self, client, sample_test):
        token = create_access_token({"user_id": 9999})
        response = client.put(
            ANSWERS_URL,
            json={"testId": sample_test.id, "answers": [1, 1, 1, 1]},
            headers={"Authorization": f"Bearer {token}"},
        )

        assert response.status_code == 401
        assert response.json()["detail"] == ErrorMessages.USER_NOT_FOUND_AUTH
