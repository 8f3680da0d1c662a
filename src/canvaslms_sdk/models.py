"""Lenient typed views over Canvas API payloads.

The clients return decoded JSON untouched. These models are only used where a
caller wants attribute access, e.g. when rendering Markdown, and ignore any
field they do not know about.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict

JSONValue = dict[str, Any] | list[Any] | str | int | float | bool | None


class CanvasModel(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)


class Profile(CanvasModel):
    id: str | None = None
    name: str | None = None
    email: str | None = None
    primary_email: str | None = None
    login_id: str | None = None

    @property
    def display_email(self) -> str | None:
        return self.primary_email or self.email


class Enrollment(CanvasModel):
    type: str | None = None
    enrollment_state: str | None = None
    computed_current_grade: str | None = None
    computed_current_score: str | None = None


class Course(CanvasModel):
    id: str | None = None
    name: str | None = None
    course_code: str | None = None
    enrollments: list[Enrollment] | None = None


class Assignment(CanvasModel):
    id: str | None = None
    name: str | None = None
    due_at: str | None = None
    has_submitted_submissions: bool | None = None


class CalendarEvent(CanvasModel):
    id: str | None = None
    title: str | None = None
    start_at: str | None = None
    context_name: str | None = None


class TodoItem(CanvasModel):
    type: str | None = None
    context_name: str | None = None
    assignment: Assignment | None = None


class Module(CanvasModel):
    id: str | None = None
    name: str | None = None
    position: int | None = None
    items_count: int | None = None
    state: str | None = None


def as_list(payload: Any) -> list[Any]:
    """Treat a missing or non-list payload as an empty collection."""
    if isinstance(payload, list):
        return payload
    return []
