"""Load a candidate pool of POMs from disk (`--candidates DIR`)."""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from pom_wiki.models import MetadataDocument
from pom_wiki.parser import parse_pom


def _is_pom(path: Path) -> bool:
    name = path.name.lower()
    return name == "pom.xml" or name.endswith(".pom")


def load_candidates(root: Path) -> list[MetadataDocument]:
    """Parse `root` itself when it is a file, else every `pom.xml` / `*.pom` below it.

    Files are read in sorted path order, which fixes the candidate order.

    Raises:
        MalformedDocumentError: If any of the files cannot be parsed.
    """
    paths = [root] if root.is_file() else sorted(p for p in root.rglob("*") if p.is_file() and _is_pom(p))
    logger.debug(f"Found {len(paths)} candidate POM(s) under {root}")
    return [parse_pom(path) for path in paths]
