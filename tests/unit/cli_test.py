"""Tests for the respdoc CLI, including that -h is accepted as a help flag on all commands."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from respdoc.cli.app import app

runner = CliRunner()


@pytest.mark.parametrize(
    "args",
    [
        [],
        ["compile"],
        ["responses"],
        ["status"],
        ["routes"],
        ["routes", "modules"],
        ["routes", "path"],
    ],
    ids=["root", "compile", "responses", "status", "routes", "routes-modules", "routes-path"],
)
def test_short_help_flag(args: list[str]) -> None:
    result = runner.invoke(app, [*args, "-h"])
    assert result.exit_code == 0
    assert "Usage" in result.output


def test_compile_prints_builder_text(tmp_path: Path, user_source: str) -> None:
    path = tmp_path / "responses.rs"
    path.write_text(user_source, encoding="utf-8")

    result = runner.invoke(app, ["compile", str(path), "--type", "Greeting", "--format", "builder"])

    assert result.exit_code == 0
    assert "Greeting (ToResponse)" in result.output
    assert 'ResponseBuilder::new().description("")' in result.output


def test_compile_prints_openapi_json(tmp_path: Path, user_source: str) -> None:
    path = tmp_path / "responses.rs"
    path.write_text(user_source, encoding="utf-8")

    result = runner.invoke(app, ["compile", str(path), "--type", "Gone", "--format", "openapi"])

    assert result.exit_code == 0
    assert json.loads(result.output) == {"description": ""}


def test_compile_error_exits_with_one(tmp_path: Path) -> None:
    path = tmp_path / "bad.rs"
    path.write_text("#[derive(ToResponse)]\nunion U { a: u32 }\n", encoding="utf-8")

    result = runner.invoke(app, ["compile", str(path)])

    assert result.exit_code == 1
    assert "Union type is not supported" in result.output


def test_format_defaults_to_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "gone.rs"
    path.write_text("#[derive(ToResponse)]\nstruct Gone;\n", encoding="utf-8")
    monkeypatch.setenv("RESPDOC_OUTPUT_FORMAT", "openapi")

    result = runner.invoke(app, ["compile", str(path)])

    assert result.exit_code == 0
    assert json.loads(result.output) == {"description": ""}


def test_responses_command() -> None:
    result = runner.invoke(app, ["responses", '(status = 200, description = "ok")', "--format", "openapi"])

    assert result.exit_code == 0
    assert json.loads(result.output) == {"200": {"description": "ok"}}


def test_status_command_resolves_literals() -> None:
    result = runner.invoke(app, ["status", "StatusCode::NOT_FOUND", "201"])

    assert result.exit_code == 0
    assert "404" in result.output
    assert "201" in result.output


def test_status_command_reports_unknown_constant() -> None:
    result = runner.invoke(app, ["status", "StatusCode::BOGUS"])

    assert result.exit_code == 1
    assert "No associated item `BOGUS`" in result.output


def test_routes_path_command() -> None:
    result = runner.invoke(app, ["routes", "path", "src/routes/users/_id.rs"])

    assert result.exit_code == 0
    assert result.output.strip() == "/users/{id}"


def test_routes_modules_command(tmp_path: Path) -> None:
    (tmp_path / "health.rs").write_text("pub async fn get() {}\n", encoding="utf-8")

    result = runner.invoke(app, ["routes", "modules", str(tmp_path)])

    assert result.exit_code == 0
    assert "routes::health::get" in result.output
    assert "(1 handlers)" in result.output
