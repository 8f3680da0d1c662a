"""Render Canvas payloads as Markdown."""

from __future__ import annotations

from datetime import datetime, timezone, tzinfo
from typing import Any, Mapping

from .models import (
    Assignment,
    CalendarEvent,
    Course,
    Module,
    Profile,
    TodoItem,
    as_list,
)

NO_DATE = "No date"
NOT_AVAILABLE = "N/A"


def format_date(value: str | None, tz: tzinfo | None = None) -> str:
    """Render an ISO-8601 timestamp in ``tz`` (local time when omitted)."""
    if not value:
        return NO_DATE
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (TypeError, ValueError):
        return str(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(tz).strftime("%Y-%m-%d %H:%M:%S")


def _cell(value: Any) -> str:
    if value is None:
        return ""
    return str(value).replace("|", "\\|").replace("\n", " ")


def _table(headers: list[str], rows: list[list[str]]) -> str:
    lines = [
        "| " + " | ".join(headers) + " |",
        "| " + " | ".join("---" for _ in headers) + " |",
    ]
    lines.extend("| " + " | ".join(row) + " |" for row in rows)
    return "\n".join(lines) + "\n"


def format_profile(profile: Mapping[str, Any]) -> str:
    user = Profile.model_validate(profile)
    return (
        "## Canvas User Profile\n\n"
        f"- **Name:** {_cell(user.name)}\n"
        f"- **ID:** {_cell(user.id)}\n"
        f"- **Email:** {_cell(user.display_email)}\n"
        f"- **Login ID:** {_cell(user.login_id)}\n\n"
    )


def format_assignments(assignments: Any, tz: tzinfo | None = None) -> str:
    items = [Assignment.model_validate(item) for item in as_list(assignments)]
    if not items:
        return "No assignments found for this course.\n\n"

    completed = 0
    pending = 0
    rows: list[list[str]] = []
    for assignment in items:
        # Undated assignments are not tracked.
        if not assignment.due_at:
            continue
        if assignment.has_submitted_submissions:
            completed += 1
            status = "✅ Completed"
        else:
            pending += 1
            status = "⏳ Pending"
        rows.append([_cell(assignment.name), format_date(assignment.due_at, tz), status])

    return (
        _table(["Assignment", "Due Date", "Status"], rows)
        + f"\n**Summary:** {completed} completed, {pending} pending assignments\n\n"
    )


def format_courses(
    courses: Any,
    assignments_by_course: Mapping[str, Any] | None = None,
    tz: tzinfo | None = None,
) -> str:
    """Render the course list followed by one assignment table per course.

    ``assignments_by_course`` is keyed by the course id as a string.
    """
    items = [Course.model_validate(item) for item in as_list(courses)]
    if not items:
        return ""

    output = "## Canvas Active Courses\n\n"
    for course in items:
        output += f"- **{_cell(course.name)}** (ID: {_cell(course.id)})\n"

    assignments_by_course = assignments_by_course or {}
    for course in items:
        output += f"\n### Assignments for {_cell(course.name)}\n\n"
        output += format_assignments(assignments_by_course.get(str(course.id)), tz)
    return output


def format_modules(modules: Any) -> str:
    items = [Module.model_validate(item) for item in as_list(modules)]
    output = "## Canvas Course Modules\n\n"
    if not items:
        return output + "No modules found for this course.\n"
    for module in items:
        count = module.items_count if module.items_count is not None else 0
        output += f"- **{_cell(module.name)}** ({count} items)\n"
    return output


def format_events(events: Any, tz: tzinfo | None = None) -> str:
    items = [CalendarEvent.model_validate(item) for item in as_list(events)]
    output = "## Canvas Upcoming Events\n\n"
    if not items:
        return output + "No upcoming events found.\n"
    rows = [
        [_cell(event.title), format_date(event.start_at, tz), _cell(event.context_name or NOT_AVAILABLE)]
        for event in items
    ]
    return output + _table(["Event", "Date", "Course"], rows)


def format_todos(todos: Any, tz: tzinfo | None = None) -> str:
    items = [TodoItem.model_validate(item) for item in as_list(todos)]
    output = "## Canvas Todo Items\n\n"
    if not items:
        return output + "No todo items found.\n"
    rows = []
    for todo in items:
        assignment = todo.assignment or Assignment()
        rows.append(
            [
                _cell(assignment.name),
                _cell(todo.context_name),
                format_date(assignment.due_at, tz),
            ]
        )
    return output + _table(["Assignment", "Course", "Due Date"], rows)


def format_grades(courses: Any) -> str:
    items = [Course.model_validate(item) for item in as_list(courses)]
    output = "## Canvas Course Grades\n\n"
    if not items:
        return output + _table(["Course", "Grade", "Score"], []) + "No courses with grades found.\n"
    rows = []
    for course in items:
        if course.enrollments:
            enrollment = course.enrollments[0]
            grade = enrollment.computed_current_grade or NOT_AVAILABLE
            score = enrollment.computed_current_score or NOT_AVAILABLE
            rows.append([_cell(course.name), _cell(grade), _cell(score)])
        else:
            rows.append([_cell(course.name), "No grade", "No score"])
    return output + _table(["Course", "Grade", "Score"], rows)
