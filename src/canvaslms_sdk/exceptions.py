"""SDK-specific exceptions."""

from __future__ import annotations

from typing import Mapping


class CanvasError(Exception):
    """Base exception for all Canvas SDK failures."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: object = None,
        headers: Mapping[str, str] | None = None,
        request_id: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body
        self.headers = dict(headers) if headers is not None else {}
        self.request_id = request_id
        self.cause = cause


class CanvasValidationError(CanvasError):
    """Raised when caller input is invalid before a request is sent."""


class CanvasHTTPError(CanvasError):
    """Raised for HTTP responses with a status of 400 or above."""


class CanvasAuthError(CanvasHTTPError):
    """Raised for authentication and authorization failures."""


class CanvasDecodeError(CanvasError):
    """Raised when a successful response does not carry valid JSON."""


class CanvasNetworkError(CanvasError):
    """Raised for transport-level failures like DNS and TCP errors."""


class CanvasTimeoutError(CanvasNetworkError):
    """Raised when a request exceeds the configured timeout."""
