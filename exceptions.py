"""
Error types.

Domain errors are raised by the store and the evaluation harness; the API
layer converts them into APIException subclasses with a consistent body.
"""
from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class DecodeError(ValueError):
    """Payload could not be decoded into a list of users."""


class MissingInputError(ValueError):
    """Ingestion was called without a payload."""


class UpstreamUnavailable(ConnectionError):
    """A probed endpoint could not be reached."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"{url} unreachable: {reason}")
        self.url = url
        self.reason = reason


class APIException(HTTPException):
    """Base API exception with consistent structure."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, Any]] = None
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code


class BadRequestError(APIException):
    def __init__(self, detail: str, error_code: str = "BAD_REQUEST"):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code=error_code
        )
