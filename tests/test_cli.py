from __future__ import annotations

import pytest
from loguru import logger
from typer.testing import CliRunner

from conftest import DATA_DIR, REPOSITORY
from pom_wiki.cli import ProjectSpec, app

runner = CliRunner()

OFFLINE = ["--local-repo", str(REPOSITORY), "--offline"]
MASTER_PAGE = "[Template:ComponentTable:ch.qos.logback:logback-classic]"


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch):
    for var in (
        "POM_WIKI_LOCAL_REPO",
        "POM_WIKI_REMOTE_URL",
        "POM_WIKI_TIMEOUT",
        "POM_WIKI_MAX_PARENT_DEPTH",
        "POM_WIKI_LOG_LEVEL",
    ):
        monkeypatch.delenv(var, raising=False)
    yield
    # The CLI points loguru at the runner's temporary stderr.
    logger.remove()


def test_project_spec_parse() -> None:
    spec = ProjectSpec.parse("net.imagej:imagej:2.0.0=ImageJ 2")
    assert spec.gav.compact() == "net.imagej:imagej:2.0.0"
    assert spec.name == "ImageJ 2"
    assert ProjectSpec.parse("net.imagej:imagej:2.0.0").name is None
    assert ProjectSpec.parse("net.imagej:imagej:2.0.0=").name is None


def test_update_dry_run() -> None:
    result = runner.invoke(app, [*OFFLINE, "update", "ch.qos.logback", "logback-classic", "1.2.3"])

    assert result.exit_code == 0, result.output
    assert MASTER_PAGE in result.output
    assert "[Template:ComponentStats:ch.qos.logback:logback-core]" in result.output
    assert "[Template:ComponentStats:org.slf4j:slf4j-api]" in result.output
    assert "[Template:ComponentStats:javax.servlet:javax.servlet-api]" in result.output
    assert "| project = Logback Classic Module\n" in result.output
    assert "[Template:ComponentStats:ch.qos.logback:logback-classic]" not in result.output


def test_update_with_name_and_base_page() -> None:
    result = runner.invoke(
        app,
        [
            *OFFLINE,
            "update",
            "ch.qos.logback",
            "logback-classic",
            "1.2.3",
            "--name",
            "Logback",
            "--include-base",
        ],
    )

    assert result.exit_code == 0, result.output
    assert "| project = Logback\n" in result.output
    assert "[Template:ComponentStats:ch.qos.logback:logback-classic]" in result.output


def test_update_with_candidate_directory() -> None:
    result = runner.invoke(
        app,
        [
            *OFFLINE,
            "update",
            "ch.qos.logback",
            "logback-classic",
            "1.2.3",
            "--candidates",
            str(REPOSITORY / "org"),
        ],
    )

    assert result.exit_code == 0, result.output
    assert "[Template:ComponentStats:org.slf4j:slf4j-api]" in result.output
    assert "logback-core]" not in result.output


def test_update_missing_project_exits_with_error() -> None:
    result = runner.invoke(app, [*OFFLINE, "update", "com.acme", "missing", "1.0"])

    assert result.exit_code == 1
    assert "Error:" in result.output
    assert "com.acme:missing:1.0" in result.output


def test_batch_with_names_and_includes() -> None:
    result = runner.invoke(
        app,
        [
            *OFFLINE,
            "batch",
            "ch.qos.logback:logback-classic:1.2.3=Logback",
            "org.slf4j:slf4j-api:1.7.25",
            "--include",
            "ch.qos.logback:logback-classic",
        ],
    )

    assert result.exit_code == 0, result.output
    assert MASTER_PAGE in result.output
    assert "[Template:ComponentTable:org.slf4j:slf4j-api]" in result.output
    assert "[Template:ComponentStats:ch.qos.logback:logback-classic]" in result.output
    assert "| project = Logback\n" in result.output
    assert result.output.index(MASTER_PAGE) < result.output.index("[Template:ComponentTable:org.slf4j")


def test_batch_stops_at_first_failure() -> None:
    result = runner.invoke(
        app,
        [*OFFLINE, "batch", "com.acme:missing:1.0", "ch.qos.logback:logback-classic:1.2.3"],
    )

    assert result.exit_code == 1
    assert "Error:" in result.output
    assert MASTER_PAGE not in result.output


def test_batch_keep_going_reports_failures() -> None:
    result = runner.invoke(
        app,
        [
            *OFFLINE,
            "batch",
            "com.acme:missing:1.0",
            "ch.qos.logback:logback-classic:1.2.3",
            "--keep-going",
        ],
    )

    assert result.exit_code == 1
    assert "Failed:" in result.output
    assert MASTER_PAGE in result.output
    assert "1/2 project(s) failed." in result.output


def test_batch_rejects_too_many_projects() -> None:
    projects = [f"com.acme:p{i}:1" for i in range(10)]
    result = runner.invoke(app, [*OFFLINE, "batch", *projects])

    assert result.exit_code == 2
    assert "At most 9 projects" in result.output


def test_batch_rejects_bad_coordinates() -> None:
    result = runner.invoke(app, [*OFFLINE, "batch", "not-a-gav"])
    assert result.exit_code == 2


def test_inspect_prints_dependency_tree() -> None:
    result = runner.invoke(app, [*OFFLINE, "inspect", "ch.qos.logback:logback-classic:1.2.3"])

    assert result.exit_code == 0, result.output
    assert "ch.qos.logback:logback-classic:1.2.3" in result.output
    assert "Logback Core Module" in result.output
    assert "SLF4J API Module" in result.output


def test_invalid_remote_url_is_rejected() -> None:
    result = runner.invoke(
        app,
        ["--local-repo", str(DATA_DIR), "--remote-url", "ftp://repo", "inspect", "g:a:1"],
    )
    assert result.exit_code == 2


@pytest.mark.parametrize("coordinates", [["", "a", "1"], ["g", " ", "1"], ["g", "a", ""]])
def test_update_blank_coordinate_exits_with_error(coordinates: list[str]) -> None:
    result = runner.invoke(app, [*OFFLINE, "update", *coordinates])

    assert result.exit_code == 1
    assert "Error:" in result.output
    assert "Null" in result.output


def test_batch_resolves_every_project_before_publishing() -> None:
    result = runner.invoke(
        app,
        [*OFFLINE, "batch", "ch.qos.logback:logback-classic:1.2.3", "com.acme:missing:1.0"],
    )

    assert result.exit_code == 1
    assert "com.acme:missing:1.0" in result.output
    assert MASTER_PAGE not in result.output
