"""Pytest configuration and fixtures for pom-wiki tests."""
from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from pom_wiki.exceptions import NotFoundError
from pom_wiki.models import GAV, MetadataDocument
from pom_wiki.source import PomSource

DATA_DIR = Path(__file__).parent / "data"
REPOSITORY = DATA_DIR / "repository"


def make_pom(gav: str, *, parent: str | None = None, **fields: Any) -> MetadataDocument:
    """Build a MetadataDocument from `g:a:v` strings and keyword fields."""
    return MetadataDocument(
        gav=GAV.parse(gav),
        parent=GAV.parse(parent) if parent else None,
        **fields,
    )


class DictSource:
    """In-memory MetadataSource that records every resolve call."""

    def __init__(self, *poms: MetadataDocument) -> None:
        self.poms = {pom.gav.compact(): pom for pom in poms}
        self.calls: list[str] = []

    def resolve(self, group_id: str, artifact_id: str, version: str) -> MetadataDocument:
        gav = f"{group_id}:{artifact_id}:{version}"
        self.calls.append(gav)
        try:
            return self.poms[gav]
        except KeyError:
            raise NotFoundError(f"POM not found: {gav}") from None


@pytest.fixture
def repository() -> Path:
    """The checked-in miniature local Maven repository."""
    return REPOSITORY


@pytest.fixture
def source(repository: Path) -> PomSource:
    """An offline source reading the fixture repository."""
    with PomSource(repository, remote_url=None) as pom_source:
        yield pom_source
