"""Python SDK for the Canvas LMS REST API."""

from .client import AsyncCanvasClient, CanvasClient
from .exceptions import (
    CanvasAuthError,
    CanvasDecodeError,
    CanvasError,
    CanvasHTTPError,
    CanvasNetworkError,
    CanvasTimeoutError,
    CanvasValidationError,
)
from .request_spec import PER_PAGE, RequestSpec
from .settings import CanvasSettings

__all__ = [
    "AsyncCanvasClient",
    "CanvasAuthError",
    "CanvasClient",
    "CanvasDecodeError",
    "CanvasError",
    "CanvasHTTPError",
    "CanvasNetworkError",
    "CanvasSettings",
    "CanvasTimeoutError",
    "CanvasValidationError",
    "PER_PAGE",
    "RequestSpec",
]
