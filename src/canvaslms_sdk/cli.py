"""Command line host: fetch Canvas data and print it as Markdown."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Sequence

from pydantic import ValidationError

from .client import AsyncCanvasClient
from .exceptions import CanvasError
from .formatting import (
    format_courses,
    format_events,
    format_grades,
    format_modules,
    format_profile,
    format_todos,
)
from .models import as_list
from .settings import CanvasSettings

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="canvaslms", description=__doc__)
    parser.add_argument("--api-url", dest="api_url", help="Canvas instance URL")
    parser.add_argument("--token", dest="api_token", help="Canvas API access token")
    parser.add_argument(
        "--proxy",
        dest="use_proxy",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="route requests through the CORS proxy",
    )
    parser.add_argument("--proxy-url", dest="cors_proxy_url", help="CORS proxy URL prefix")
    parser.add_argument("--insert", type=Path, help="append the output to this file instead of printing it")
    parser.add_argument("-v", "--verbose", action="store_true")

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("profile", help="current user profile")
    subparsers.add_parser("courses", help="active courses with their assignments")
    modules = subparsers.add_parser("modules", help="modules of one course")
    modules.add_argument("course_id")
    subparsers.add_parser("events", help="upcoming events")
    subparsers.add_parser("todo", help="todo items")
    subparsers.add_parser("grades", help="current course grades")
    subparsers.add_parser("test-connection", help="check the configured credentials")
    return parser


def _settings_from_args(args: argparse.Namespace) -> CanvasSettings:
    overrides: dict[str, Any] = {}
    for key in ("api_url", "api_token", "use_proxy", "cors_proxy_url"):
        value = getattr(args, key)
        if value is not None:
            overrides[key] = value
    return CanvasSettings(**overrides)


def _make_client(settings: CanvasSettings) -> AsyncCanvasClient:
    return AsyncCanvasClient(settings)


async def _courses_overview(client: AsyncCanvasClient) -> str:
    courses = await client.get_courses("student", "active")
    assignments: dict[str, Any] = {}
    for course in as_list(courses):
        course_id = course.get("id") if isinstance(course, dict) else None
        assignments[str(course_id)] = await client.get_course_assignments(course_id)
    return format_courses(courses, assignments)


async def _render(client: AsyncCanvasClient, args: argparse.Namespace) -> str:
    if args.command == "profile":
        return format_profile(await client.get_user_profile())
    if args.command == "courses":
        return await _courses_overview(client)
    if args.command == "modules":
        return format_modules(await client.get_course_modules(args.course_id))
    if args.command == "events":
        return format_events(await client.get_upcoming_events())
    if args.command == "todo":
        return format_todos(await client.get_todo_items())
    if args.command == "grades":
        return format_grades(await client.get_course_grades())
    raise ValueError(f"Unknown command: {args.command}")


def _emit(text: str, insert: Path | None) -> None:
    if insert is None:
        print(text, end="" if text.endswith("\n") else "\n")
        return
    with insert.open("a", encoding="utf-8") as handle:
        handle.write(text)
    print(f"Inserted into {insert}", file=sys.stderr)


async def _run(args: argparse.Namespace) -> int:
    async with _make_client(_settings_from_args(args)) as client:
        if args.command == "test-connection":
            if await client.test_connection():
                print("Connection successful!")
                return 0
            print("Connection failed. Check your settings and try again.")
            return 1
        text = await _render(client, args)
    _emit(text, args.insert)
    return 0


def _main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return asyncio.run(_run(args))
    except (CanvasError, ValidationError) as exc:
        logger.debug("Command %s failed", args.command, exc_info=exc)
        print(f"Failed to fetch Canvas data: {exc}", file=sys.stderr)
        return 1


def main() -> None:
    raise SystemExit(_main())
