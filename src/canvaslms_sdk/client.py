"""Main synchronous and asynchronous clients for the Canvas LMS API."""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Mapping, NoReturn

import httpx

from .exceptions import (
    CanvasAuthError,
    CanvasDecodeError,
    CanvasHTTPError,
    CanvasNetworkError,
    CanvasTimeoutError,
    CanvasValidationError,
)
from .models import JSONValue
from .request_spec import PER_PAGE, RequestSpec, normalize_base_url
from .security import bearer_header, sanitize_headers
from .settings import CanvasSettings

logger = logging.getLogger(__name__)

GRADE_INCLUDES = ("total_scores", "current_grading_period_scores")


def _course_path(course_id: str | int, resource: str) -> str:
    if course_id is None or str(course_id).strip() == "":
        raise CanvasValidationError("course_id is required")
    return f"/courses/{course_id}/{resource}"


def _courses_query(enrollment_type: str | None, enrollment_state: str | None) -> dict[str, Any]:
    params: dict[str, Any] = {"per_page": PER_PAGE}
    if enrollment_type:
        params["enrollment_type"] = enrollment_type
    if enrollment_state:
        params["enrollment_state"] = enrollment_state
    return params


def _grades_query() -> dict[str, Any]:
    return {
        "include": list(GRADE_INCLUDES),
        "enrollment_type": "student",
        "enrollment_state": "active",
        "per_page": PER_PAGE,
    }


class _BaseCanvasClient:
    user_agent = "canvaslms-sdk/0.1.0"

    def __init__(self, settings: CanvasSettings | None = None) -> None:
        self.settings = settings if settings is not None else CanvasSettings()
        self.base_url = normalize_base_url(self.settings.api_url)
        self._default_headers = {
            **bearer_header(self.settings.api_token.get_secret_value()),
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": self.user_agent,
        }
        self._client_kwargs = {
            "timeout": self.settings.timeout,
            "follow_redirects": True,
            "trust_env": False,
        }

    def _updated_settings(self, changes: Mapping[str, Any]) -> CanvasSettings:
        # model_copy(update=...) skips validation, so rebuild from a dump.
        return CanvasSettings.model_validate({**self.settings.model_dump(), **changes})

    @property
    def proxy_url(self) -> str | None:
        return self.settings.cors_proxy_url if self.settings.proxy_enabled else None

    def build_url(self, spec: RequestSpec) -> str:
        url = spec.build_url(self.base_url, proxy_url=self.proxy_url)
        if self.proxy_url:
            logger.debug("Using proxy URL: %s", url)
        return url

    def _log_request(self, spec: RequestSpec, url: str) -> None:
        logger.debug("Making %s request to: %s", spec.method, url)
        logger.debug("Request headers: %s", sanitize_headers(self._default_headers))

    @staticmethod
    def _raise_transport_error(exc: httpx.TransportError) -> NoReturn:
        if isinstance(exc, httpx.TimeoutException):
            raise CanvasTimeoutError("Canvas API request timed out", cause=exc) from exc
        raise CanvasNetworkError(f"Canvas API request failed: {exc}", cause=exc) from exc

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        logger.debug("Response status: %s", response.status_code)
        if response.status_code < 400:
            return
        text = response.text
        logger.warning("Canvas API error %s: %s", response.status_code, text)
        kwargs = {
            "status_code": response.status_code,
            "body": text,
            "headers": MappingProxyType(dict(response.headers)),
            "request_id": response.headers.get("x-request-context-id"),
        }
        message = f"Canvas API request failed: {response.status_code} - {text}"
        if response.status_code in {401, 403}:
            raise CanvasAuthError(message, **kwargs)
        raise CanvasHTTPError(message, **kwargs)

    @staticmethod
    def _parse_response(response: httpx.Response) -> JSONValue:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise CanvasDecodeError(
                "Canvas API returned a non-JSON response",
                status_code=response.status_code,
                body=response.text,
                cause=exc,
            ) from exc


class CanvasClient(_BaseCanvasClient):
    """Synchronous client."""

    def __init__(
        self,
        settings: CanvasSettings | None = None,
        *,
        httpx_client: httpx.Client | None = None,
    ) -> None:
        super().__init__(settings)
        self._httpx = httpx_client or httpx.Client(**self._client_kwargs)

    def __enter__(self) -> "CanvasClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._httpx.close()

    def with_settings(self, **changes: Any) -> "CanvasClient":
        """Return a new client for an updated copy of the settings."""
        return CanvasClient(self._updated_settings(changes))

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        body: Any | None = None,
    ) -> JSONValue:
        spec = RequestSpec(path, method, dict(params or {}), body)
        url = self.build_url(spec)
        self._log_request(spec, url)
        try:
            response = self._httpx.request(
                spec.method,
                url,
                headers=self._default_headers,
                content=spec.content(),
            )
        except httpx.TransportError as exc:
            self._raise_transport_error(exc)
        self._raise_for_status(response)
        return self._parse_response(response)

    def get_user_profile(self) -> JSONValue:
        return self._request("GET", "/users/self")

    def get_courses(self, enrollment_type: str | None = None, enrollment_state: str | None = None) -> JSONValue:
        return self._request("GET", "/courses", params=_courses_query(enrollment_type, enrollment_state))

    def get_course_assignments(self, course_id: str | int) -> JSONValue:
        return self._request("GET", _course_path(course_id, "assignments"), params={"per_page": PER_PAGE})

    def get_course_modules(self, course_id: str | int) -> JSONValue:
        return self._request("GET", _course_path(course_id, "modules"), params={"per_page": PER_PAGE})

    def get_upcoming_events(self) -> JSONValue:
        return self._request("GET", "/users/self/upcoming_events")

    def get_todo_items(self) -> JSONValue:
        return self._request("GET", "/users/self/todo")

    def get_course_grades(self) -> JSONValue:
        return self._request("GET", "/courses", params=_grades_query())

    def test_connection(self) -> bool:
        try:
            self.get_user_profile()
        except Exception as exc:
            logger.debug("Connection test failed: %s", exc)
            return False
        return True


class AsyncCanvasClient(_BaseCanvasClient):
    """Asynchronous client."""

    def __init__(
        self,
        settings: CanvasSettings | None = None,
        *,
        httpx_client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(settings)
        self._httpx = httpx_client or httpx.AsyncClient(**self._client_kwargs)

    async def __aenter__(self) -> "AsyncCanvasClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._httpx.aclose()

    def with_settings(self, **changes: Any) -> "AsyncCanvasClient":
        """Return a new client for an updated copy of the settings."""
        return AsyncCanvasClient(self._updated_settings(changes))

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        body: Any | None = None,
    ) -> JSONValue:
        spec = RequestSpec(path, method, dict(params or {}), body)
        url = self.build_url(spec)
        self._log_request(spec, url)
        try:
            response = await self._httpx.request(
                spec.method,
                url,
                headers=self._default_headers,
                content=spec.content(),
            )
        except httpx.TransportError as exc:
            self._raise_transport_error(exc)
        self._raise_for_status(response)
        return self._parse_response(response)

    async def get_user_profile(self) -> JSONValue:
        return await self._request("GET", "/users/self")

    async def get_courses(self, enrollment_type: str | None = None, enrollment_state: str | None = None) -> JSONValue:
        return await self._request("GET", "/courses", params=_courses_query(enrollment_type, enrollment_state))

    async def get_course_assignments(self, course_id: str | int) -> JSONValue:
        return await self._request("GET", _course_path(course_id, "assignments"), params={"per_page": PER_PAGE})

    async def get_course_modules(self, course_id: str | int) -> JSONValue:
        return await self._request("GET", _course_path(course_id, "modules"), params={"per_page": PER_PAGE})

    async def get_upcoming_events(self) -> JSONValue:
        return await self._request("GET", "/users/self/upcoming_events")

    async def get_todo_items(self) -> JSONValue:
        return await self._request("GET", "/users/self/todo")

    async def get_course_grades(self) -> JSONValue:
        return await self._request("GET", "/courses", params=_grades_query())

    async def test_connection(self) -> bool:
        try:
            await self.get_user_profile()
        except Exception as exc:
            logger.debug("Connection test failed: %s", exc)
            return False
        return True
