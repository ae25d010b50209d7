"""Typer CLI entry point for pom-wiki."""

from __future__ import annotations

import sys
from contextlib import ExitStack
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger
from rich.console import Console
from rich.markup import escape

from pom_wiki.config import Settings
from pom_wiki.exceptions import PomWikiError
from pom_wiki.index import ComponentIndex
from pom_wiki.mediawiki import MediaWikiPublisher
from pom_wiki.models import GAV, MetadataDocument
from pom_wiki.render import TableRenderer
from pom_wiki.scanner import load_candidates
from pom_wiki.source import PomSource
from pom_wiki.updater import PagePublisher, WikiUpdater
from pom_wiki.visualize import build_dependency_tree

MAX_BATCH_PROJECTS = 9

app = typer.Typer(add_completion=False, help="Generate MediaWiki component tables from Maven POMs.")
console = Console()
err_console = Console(stderr=True)


@dataclass
class ProjectSpec:
    """One base project to publish.

    Attributes:
        gav: Coordinates of the base project
        name: Display name overriding the POM's project name
        include_project: Also publish a component table for the project itself
    """

    gav: GAV
    name: str | None = None
    include_project: bool = False

    @classmethod
    def parse(cls, value: str) -> "ProjectSpec":
        """Parse `groupId:artifactId:version[=Display Name]`."""
        coords, sep, name = value.partition("=")
        try:
            gav = GAV.parse(coords)
        except ValueError as exc:
            raise typer.BadParameter(str(exc)) from None
        display_name = name.strip() if sep else ""
        return cls(gav=gav, name=display_name or None)


def _configure_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level, format="<level>{level: <8}</level> {message}")


def _fail(exc: Exception) -> typer.Exit:
    err_console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
    return typer.Exit(code=1)


def _settings(ctx: typer.Context) -> Settings:
    return ctx.obj


def _open_source(stack: ExitStack, settings: Settings) -> PomSource:
    return stack.enter_context(
        PomSource(settings.local_repository, settings.remote_url or None, timeout=settings.timeout)
    )


def _open_publisher(stack: ExitStack, url: str | None, settings: Settings) -> PagePublisher | None:
    if url is None:
        return None
    return stack.enter_context(MediaWikiPublisher(url, timeout=settings.timeout))


def _index(
    settings: Settings,
    source: PomSource,
    project: ProjectSpec,
    candidates: list[MetadataDocument] | None,
) -> ComponentIndex:
    renderer = TableRenderer(doc_prefixes=settings.doc_prefixes, manifests=source)
    index = ComponentIndex(
        project.gav,
        source,
        candidates,
        renderer=renderer,
        max_parent_depth=settings.max_parent_depth,
    )
    if project.name:
        index.base_name = project.name
    return index


def _publish(
    settings: Settings,
    source: PomSource,
    project: ProjectSpec,
    publisher: PagePublisher | None,
    candidates: list[MetadataDocument] | None,
) -> list[str]:
    index = _index(settings, source, project, candidates)
    pages = WikiUpdater(index, publisher, include_project=project.include_project).update()
    logger.info(f"{project.gav.compact()}: wrote {len(pages)} page(s)")
    return pages


@app.callback()
def configure(
    ctx: typer.Context,
    local_repo: Annotated[
        Path | None, typer.Option("--local-repo", help="Local Maven repository root.")
    ] = None,
    remote_url: Annotated[
        str | None, typer.Option("--remote-url", help="Remote Maven repository base URL.")
    ] = None,
    offline: Annotated[
        bool, typer.Option("--offline", help="Only read POMs from the local repository.")
    ] = False,
    verbose: Annotated[
        int, typer.Option("--verbose", "-v", count=True, help="More logging (-v info, -vv debug).")
    ] = 0,
) -> None:
    """Shared options; defaults come from POM_WIKI_* environment variables."""
    settings = Settings.from_env()
    if local_repo is not None:
        settings.local_repository = local_repo
    if remote_url is not None:
        settings.remote_url = remote_url
    if verbose:
        settings.log_level = "DEBUG" if verbose > 1 else "INFO"
    try:
        settings.validate()
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from None
    if offline:
        settings.remote_url = ""
    _configure_logging(settings.log_level)
    ctx.obj = settings


@app.command()
def update(
    ctx: typer.Context,
    group_id: Annotated[str, typer.Argument(help="groupId of the base project.")],
    artifact_id: Annotated[str, typer.Argument(help="artifactId of the base project.")],
    version: Annotated[str, typer.Argument(help="version of the base project.")],
    name: Annotated[
        str | None, typer.Option("--name", help="Display name used in the component tables.")
    ] = None,
    include_base: Annotated[
        bool, typer.Option("--include-base", help="Also publish a component table for the base project.")
    ] = False,
    url: Annotated[
        str | None, typer.Option("--url", help="MediaWiki URL; omit for a dry run to stdout.")
    ] = None,
    candidates: Annotated[
        Path | None, typer.Option("--candidates", help="Directory of candidate POMs to filter.")
    ] = None,
) -> None:
    """Publish the tables of one base project."""
    settings = _settings(ctx)
    try:
        project = ProjectSpec(
            gav=GAV.of(group_id, artifact_id, version),
            name=name,
            include_project=include_base,
        )
        with ExitStack() as stack:
            source = _open_source(stack, settings)
            publisher = _open_publisher(stack, url, settings)
            pool = load_candidates(candidates) if candidates else None
            _publish(settings, source, project, publisher, pool)
    except PomWikiError as exc:
        raise _fail(exc) from None


@app.command()
def batch(
    ctx: typer.Context,
    projects: Annotated[
        list[str],
        typer.Argument(help="Base projects as groupId:artifactId:version[=Display Name] (up to 9)."),
    ],
    include: Annotated[
        list[str] | None,
        typer.Option("--include", help="groupId:artifactId of a project that also gets a component table."),
    ] = None,
    url: Annotated[
        str | None, typer.Option("--url", help="MediaWiki URL; omit for a dry run to stdout.")
    ] = None,
    keep_going: Annotated[
        bool, typer.Option("--keep-going", help="Report a failing project and continue with the next.")
    ] = False,
    candidates: Annotated[
        Path | None, typer.Option("--candidates", help="Directory of candidate POMs to filter.")
    ] = None,
) -> None:
    """Publish the tables of several base projects."""
    settings = _settings(ctx)
    if len(projects) > MAX_BATCH_PROJECTS:
        raise typer.BadParameter(f"At most {MAX_BATCH_PROJECTS} projects per batch")
    specs = [ProjectSpec.parse(p) for p in projects]
    included = set(include or [])
    for spec in specs:
        spec.include_project = spec.gav.key() in included

    failed: list[str] = []

    def report(gav: str, exc: PomWikiError) -> None:
        err_console.print(f"[bold red]Failed:[/bold red] {gav}: {escape(str(exc))}")
        failed.append(gav)

    try:
        with ExitStack() as stack:
            source = _open_source(stack, settings)
            # Resolve every base POM before writing any page.
            resolutions = [source.lookup(s.gav.group_id, s.gav.artifact_id, s.gav.version) for s in specs]
            for resolution in resolutions:
                if resolution.ok:
                    continue
                if not keep_going:
                    resolution.unwrap()
                report(resolution.gav, resolution.error)

            publisher = _open_publisher(stack, url, settings)
            pool = load_candidates(candidates) if candidates else None
            for spec, resolution in zip(specs, resolutions):
                if not resolution.ok:
                    continue
                try:
                    _publish(settings, source, spec, publisher, pool)
                except PomWikiError as exc:
                    if not keep_going:
                        raise
                    report(spec.gav.compact(), exc)
    except PomWikiError as exc:
        raise _fail(exc) from None

    if failed:
        err_console.print(f"[bold red]{len(failed)}/{len(specs)} project(s) failed.[/bold red]")
        raise typer.Exit(code=1)


@app.command()
def inspect(
    ctx: typer.Context,
    project: Annotated[str, typer.Argument(help="Base project as groupId:artifactId:version.")],
    candidates: Annotated[
        Path | None, typer.Option("--candidates", help="Directory of candidate POMs to filter.")
    ] = None,
) -> None:
    """Print the direct dependencies of a project and which have POMs."""
    settings = _settings(ctx)
    spec = ProjectSpec.parse(project)
    try:
        with ExitStack() as stack:
            source = _open_source(stack, settings)
            pool = load_candidates(candidates) if candidates else None
            console.print(build_dependency_tree(_index(settings, source, spec, pool)))
    except PomWikiError as exc:
        raise _fail(exc) from None


def main() -> None:
    """Console-script entry point."""
    app()
