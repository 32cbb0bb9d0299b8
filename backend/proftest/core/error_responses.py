"""
Standardized error response messages and builders.

This module provides consistent error messages and HTTPException builders
for the entire API:

1. Consistent message format across all endpoints
2. User-facing messages that don't leak implementation details
3. Clear separation of user-facing messages from log messages

Error Message Format Guidelines:
- Use sentence case (capitalize first letter only)
- End with a period for complete sentences
- Include relevant IDs in parentheses when helpful for debugging: "(ID: 123)"
- Use "Please try again later." for transient server errors

Usage:
    from proftest.core.error_responses import ErrorMessages, raise_not_found

    if test is None:
        raise_not_found(ErrorMessages.TEST_NOT_FOUND)

    raise_bad_request(ErrorMessages.incomplete_answers(expected=10, missing=[3]))
"""

from typing import Iterable, NoReturn

from fastapi import HTTPException, status


class ErrorMessages:
    """Centralized error message constants and templates.

    Naming Convention:
    - Constants: SCREAMING_SNAKE_CASE for static messages
    - Methods: snake_case for templates that accept parameters
    """

    # ==========================================================================
    # Authentication Errors (401)
    # ==========================================================================
    INVALID_TOKEN = "Invalid authentication token."
    INVALID_TOKEN_TYPE = "Invalid token type."
    INVALID_TOKEN_PAYLOAD = "Invalid token payload."
    USER_NOT_FOUND_AUTH = "User not found."

    # ==========================================================================
    # Not Found Errors (404)
    # ==========================================================================
    TEST_NOT_FOUND = "Test not found."

    # ==========================================================================
    # Bad Request Errors (400)
    # ==========================================================================
    INVALID_FIELDS_PARAMETER = (
        "The fields parameter must be a JSON object of field names to booleans."
    )
    EMPTY_ANSWER_LIST = "Answer list cannot be empty."

    # ==========================================================================
    # Server Errors (500)
    # ==========================================================================
    PASS_COUNT_FAILED = "Failed to compute pass counts. Please try again later."
    SCORING_FAILED = "Failed to score answers. Please try again later."

    # ==========================================================================
    # Template Methods for Dynamic Messages
    # ==========================================================================
    @staticmethod
    def unknown_fields(fields: Iterable[str]) -> str:
        """Message when a projection names fields the resource does not have."""
        names = ", ".join(sorted(fields))
        return f"Unknown fields requested: {names}."

    @staticmethod
    def incomplete_answers(expected: int, missing: Iterable[int]) -> str:
        """Message when a submission leaves questions unanswered."""
        positions = ", ".join(str(p) for p in sorted(missing))
        return (
            f"All {expected} questions must be answered. "
            f"Unanswered positions: {positions}."
        )

    @staticmethod
    def answer_count_mismatch(expected: int, received: int) -> str:
        """Message when a submission has the wrong number of answers."""
        return f"Expected {expected} answers, received {received}."

    @staticmethod
    def unknown_scorer(scorer: str) -> str:
        """Message when a test references a scoring function that isn't registered."""
        return f"Scoring function '{scorer}' is not registered."

    @staticmethod
    def database_operation_failed(operation: str) -> str:
        """Generic message for database operation failures."""
        return f"Failed to {operation}. Please try again later."


# ==============================================================================
# HTTPException Builder Functions
# ==============================================================================


def raise_bad_request(detail: str) -> NoReturn:
    """Raise a 400 Bad Request exception.

    Use for client errors where the request is malformed or invalid.

    Args:
        detail: User-facing error message

    Raises:
        HTTPException: 400 Bad Request
    """
    raise HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=detail,
    )


def raise_unauthorized(
    detail: str,
    include_www_authenticate: bool = True,
) -> NoReturn:
    """Raise a 401 Unauthorized exception.

    Args:
        detail: User-facing error message
        include_www_authenticate: Whether to include WWW-Authenticate header

    Raises:
        HTTPException: 401 Unauthorized
    """
    headers = {"WWW-Authenticate": "Bearer"} if include_www_authenticate else None
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers=headers,
    )


def raise_not_found(detail: str) -> NoReturn:
    """Raise a 404 Not Found exception.

    Use when a requested resource doesn't exist.

    Args:
        detail: User-facing error message

    Raises:
        HTTPException: 404 Not Found
    """
    raise HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=detail,
    )


def raise_server_error(detail: str) -> NoReturn:
    """Raise a 500 Internal Server Error exception.

    Always use user-friendly messages; log technical details separately.

    Args:
        detail: User-facing error message (should be generic and friendly)

    Raises:
        HTTPException: 500 Internal Server Error
    """
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=detail,
    )
