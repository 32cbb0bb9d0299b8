"""
HTTP client for the scoring endpoint and test metadata.

Every failure is raised as a SessionError subclass. Nothing here touches the
local session store, so a failed call always leaves the session resumable.
"""
import json
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

import httpx
from pydantic import ValidationError

from proftest.schemas.answers import AnswerSubmissionResponse, ScoredEntry
from proftest.session.config import SessionSettings
from proftest.session.exceptions import (
    NotFoundError,
    TransportFailure,
    ValidationFailure,
)
from proftest.session.presenter import TestMetadata

logger = logging.getLogger(__name__)

# Scoring endpoint, relative to the API base URL
ANSWERS_PATH = "/users/me/answers"
TESTS_PATH = "/tests"


def validate_answers(answers: Sequence[Any], question_count: Optional[int] = None) -> None:
    """
    Reject malformed or incomplete answer sets before any network call.

    Args:
        answers: Answers indexed by question position
        question_count: Expected number of answers, when known

    Raises:
        ValidationFailure: If the set is empty, has the wrong length, or
            contains unanswered positions
    """
    if not answers:
        raise ValidationFailure("Answer list cannot be empty")
    if question_count is not None and len(answers) != question_count:
        raise ValidationFailure(
            f"Expected {question_count} answers, received {len(answers)}"
        )
    missing = [i for i, value in enumerate(answers) if value is None]
    if missing:
        raise ValidationFailure(
            f"Unanswered questions at positions: {', '.join(str(i) for i in missing)}"
        )


class ApiClient:
    """Async client for the Proftest API.

    Attributes:
        base_url: API base URL including the version prefix
        timeout: HTTP request timeout in seconds
    """

    def __init__(
        self,
        base_url: str,
        access_token: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize ApiClient.

        Args:
            base_url: API base URL (e.g., "http://localhost:8000/v1")
            access_token: Bearer token sent with every request
            timeout: HTTP request timeout in seconds
            transport: Optional httpx transport, used to target an ASGI app
                or a mock in tests
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        headers = {"Accept": "application/json"}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )
        logger.debug(f"ApiClient initialized with base_url: {self.base_url}")

    @classmethod
    def from_settings(
        cls,
        settings: SessionSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "ApiClient":
        return cls(
            base_url=settings.api_base_url,
            access_token=settings.access_token,
            timeout=settings.http_timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            logger.warning(f"Timed out calling {method} {path}: {e}")
            raise TransportFailure(f"Request to {path} timed out") from e
        except httpx.HTTPError as e:
            logger.warning(f"Failed to call {method} {path}: {e}")
            raise TransportFailure(f"Request to {path} failed: {e}") from e

        if response.is_success:
            return response

        detail = self._error_detail(response)
        if response.status_code == 404:
            raise NotFoundError(detail)
        if response.status_code in (400, 422):
            raise ValidationFailure(detail)
        logger.warning(
            f"{method} {path} returned {response.status_code}: {detail}",
            extra={"status_code": response.status_code},
        )
        raise TransportFailure(detail, status_code=response.status_code)

    @staticmethod
    def _error_detail(response: httpx.Response) -> str:
        try:
            detail = response.json().get("detail")
        except (ValueError, AttributeError):
            detail = None
        if isinstance(detail, str):
            return detail
        if detail is not None:
            return json.dumps(detail)
        return f"HTTP {response.status_code}"

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise TransportFailure("Response body is not valid JSON") from e

    async def submit(
        self,
        test_id: int,
        answers: Sequence[Any],
        question_count: Optional[int] = None,
    ) -> List[ScoredEntry]:
        """
        Send a completed answer set for scoring.

        Args:
            test_id: Test being submitted
            answers: Answers indexed by question position
            question_count: Expected number of answers, when known

        Returns:
            Raw scored result, one entry per dimension

        Raises:
            ValidationFailure: Answers rejected locally or by the server
            NotFoundError: The test does not exist
            TransportFailure: The call failed or the response is malformed
        """
        validate_answers(answers, question_count)

        response = await self._request(
            "PUT", ANSWERS_PATH, json={"testId": test_id, "answers": list(answers)}
        )
        try:
            parsed = AnswerSubmissionResponse.model_validate(self._json(response))
        except ValidationError as e:
            raise TransportFailure(f"Malformed scoring response: {e}") from e

        logger.info(
            f"Test {test_id} scored with {len(parsed.result)} dimensions",
            extra={"test_id": test_id},
        )
        return parsed.result

    async def fetch_test(
        self, test_id: int, fields: Optional[Mapping[str, bool]] = None
    ) -> TestMetadata:
        """
        Fetch one test's metadata.

        Args:
            test_id: Test to fetch
            fields: Projection flags, e.g. {"name": True, "passCount": True}

        Raises:
            NotFoundError: The test does not exist
            ValidationFailure: The projection was rejected
            TransportFailure: The call failed or the response is malformed
        """
        response = await self._request(
            "GET", f"{TESTS_PATH}/{test_id}", params=self._params(fields=fields)
        )
        try:
            return TestMetadata.model_validate(self._json(response))
        except ValidationError as e:
            raise TransportFailure(f"Malformed test record: {e}") from e

    async def list_tests(
        self,
        ids: Optional[Sequence[int]] = None,
        fields: Optional[Mapping[str, bool]] = None,
    ) -> List[TestMetadata]:
        """List tests, optionally restricted to ``ids``, in ID order."""
        response = await self._request(
            "GET", TESTS_PATH, params=self._params(ids=ids, fields=fields)
        )
        payload = self._json(response)
        if not isinstance(payload, list):
            raise TransportFailure("Expected a list of tests")
        try:
            return [TestMetadata.model_validate(item) for item in payload]
        except ValidationError as e:
            raise TransportFailure(f"Malformed test record: {e}") from e

    @staticmethod
    def _params(
        ids: Optional[Sequence[int]] = None,
        fields: Optional[Mapping[str, bool]] = None,
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {}
        if ids:
            params["ids"] = [int(i) for i in ids]
        if fields is not None:
            params["fields"] = json.dumps({k: bool(v) for k, v in fields.items()})
        return params
