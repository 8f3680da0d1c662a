from __future__ import annotations

import httpx
import pytest

import canvaslms_sdk.cli as cli
from canvaslms_sdk import AsyncCanvasClient, CanvasSettings

BASE_ARGS = ["--api-url", "https://canvas.example.com/", "--token", "cli-token", "--no-proxy"]


def _install_transport(monkeypatch, handler, seen_settings: list[CanvasSettings] | None = None) -> None:
    def make_client(settings: CanvasSettings) -> AsyncCanvasClient:
        if seen_settings is not None:
            seen_settings.append(settings)
        transport = httpx.MockTransport(handler)
        return AsyncCanvasClient(settings, httpx_client=httpx.AsyncClient(transport=transport))

    monkeypatch.setattr(cli, "_make_client", make_client)


def test_profile_prints_markdown(monkeypatch, capsys) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["Authorization"] == "Bearer cli-token"
        return httpx.Response(200, json={"id": 3, "name": "Grace", "email": "g@example.com"}, request=request)

    _install_transport(monkeypatch, handler)

    assert cli._main([*BASE_ARGS, "profile"]) == 0
    output = capsys.readouterr().out
    assert "## Canvas User Profile" in output
    assert "- **Name:** Grace" in output


def test_courses_fetches_assignments_per_course(monkeypatch, capsys) -> None:
    paths: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        paths.append(request.url.path)
        if request.url.path == "/api/v1/courses":
            assert request.url.params["enrollment_type"] == "student"
            return httpx.Response(200, json=[{"id": 1, "name": "Biology"}, {"id": 2, "name": "History"}], request=request)
        return httpx.Response(200, json=[], request=request)

    _install_transport(monkeypatch, handler)

    assert cli._main([*BASE_ARGS, "courses"]) == 0
    assert paths == [
        "/api/v1/courses",
        "/api/v1/courses/1/assignments",
        "/api/v1/courses/2/assignments",
    ]
    assert "### Assignments for History" in capsys.readouterr().out


def test_modules_uses_course_argument(monkeypatch, capsys) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/v1/courses/77/modules"
        return httpx.Response(200, json=[{"name": "Intro", "items_count": 2}], request=request)

    _install_transport(monkeypatch, handler)

    assert cli._main([*BASE_ARGS, "modules", "77"]) == 0
    assert "- **Intro** (2 items)" in capsys.readouterr().out


def test_insert_appends_to_file(monkeypatch, tmp_path, capsys) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[], request=request)

    _install_transport(monkeypatch, handler)
    note = tmp_path / "note.md"
    note.write_text("# Notes\n\n")

    assert cli._main([*BASE_ARGS, "--insert", str(note), "todo"]) == 0
    assert note.read_text() == "# Notes\n\n## Canvas Todo Items\n\nNo todo items found.\n"
    assert capsys.readouterr().out == ""


def test_request_failure_exits_non_zero(monkeypatch, capsys) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, text="Not Found", request=request)

    _install_transport(monkeypatch, handler)

    assert cli._main([*BASE_ARGS, "grades"]) == 1
    err = capsys.readouterr().err
    assert "404" in err
    assert "Not Found" in err


@pytest.mark.parametrize(("status", "exit_code", "message"), [(200, 0, "successful"), (401, 1, "failed")])
def test_test_connection_command(monkeypatch, capsys, status: int, exit_code: int, message: str) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, json={"id": 1}, request=request)

    _install_transport(monkeypatch, handler)

    assert cli._main([*BASE_ARGS, "test-connection"]) == exit_code
    assert message in capsys.readouterr().out


def test_proxy_flags_reach_settings(monkeypatch) -> None:
    seen: list[CanvasSettings] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.host == "proxy.example"
        return httpx.Response(200, json=[], request=request)

    _install_transport(monkeypatch, handler, seen)

    argv = [
        "--api-url",
        "https://canvas.example.com",
        "--token",
        "cli-token",
        "--proxy",
        "--proxy-url",
        "https://proxy.example/",
        "events",
    ]
    assert cli._main(argv) == 0
    assert seen[0].proxy_enabled is True
    assert seen[0].cors_proxy_url == "https://proxy.example/"


def test_main_raises_system_exit(monkeypatch) -> None:
    monkeypatch.setattr(cli, "_main", lambda: 0)
    with pytest.raises(SystemExit) as excinfo:
        cli.main()
    assert excinfo.value.code == 0


@pytest.mark.parametrize(("command", "payload"), [("profile", ["x"]), ("grades", [42]), ("todo", [{"assignment": "x"}])])
def test_malformed_payload_exits_non_zero(monkeypatch, capsys, command: str, payload: object) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=payload, request=request)

    _install_transport(monkeypatch, handler)

    assert cli._main([*BASE_ARGS, command]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Failed to fetch Canvas data" in captured.err


def test_empty_profile_body_exits_non_zero(monkeypatch, capsys) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(204, request=request)

    _install_transport(monkeypatch, handler)

    assert cli._main([*BASE_ARGS, "profile"]) == 1
    assert "Failed to fetch Canvas data" in capsys.readouterr().err
