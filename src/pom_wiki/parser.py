"""Read Maven POM files into `MetadataDocument` objects with lxml.

Elements are matched by `local-name()`, so POMs with and without the
`http://maven.apache.org/POM/4.0.0` namespace read the same way.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Mapping

from lxml import etree

from pom_wiki.exceptions import MalformedDocumentError, NotFoundError
from pom_wiki.models import (
    GAV,
    Contributor,
    Dependency,
    Developer,
    License,
    MetadataDocument,
    UNKNOWN_VERSION,
)


_PROPERTY_REF = re.compile(r"\$\{([^}]+)\}")
_WHITESPACE = re.compile(r"\s+")

# Nested references are expanded at most this many times.
_MAX_EXPANSIONS = 5

_BUILTIN_PREFIXES = ("project.", "pom.", "")


def _path(*names: str) -> str:
    return "".join(f"/*[local-name()='{name}']" for name in names)


def _text(node: etree._Element, *names: str) -> str | None:
    """Stripped text of the first element at `names` below `node`, or None if blank."""
    for found in node.xpath("." + _path(*names)):
        return (found.text or "").strip() or None
    return None


def _texts(node: etree._Element, *names: str) -> tuple[str, ...]:
    values = ((found.text or "").strip() for found in node.xpath("." + _path(*names)))
    return tuple(value for value in values if value)


def _one_line(value: str | None) -> str | None:
    return None if value is None else _WHITESPACE.sub(" ", value)


def _flag(value: str | None) -> bool | None:
    """Map `true`/`false` (any case) to a bool; anything else is None."""
    return {"true": True, "false": False}.get((value or "").strip().lower())


def _read_root(content: bytes, origin: str) -> etree._Element:
    parser = etree.XMLParser(resolve_entities=False, no_network=True)
    try:
        root = etree.fromstring(content, parser=parser)
    except etree.XMLSyntaxError as exc:
        raise MalformedDocumentError(f"Failed to parse POM: {origin}") from exc
    if etree.QName(root).localname != "project":
        raise MalformedDocumentError(f"Not a POM (root element is not <project>): {origin}")
    return root


def expand_properties(value: str, props: Mapping[str, str]) -> str:
    """Substitute `${key}` references found in `props`; unknown ones stay verbatim."""

    def lookup(match: re.Match[str]) -> str:
        return props.get(match.group(1)) or match.group(0)

    for _ in range(_MAX_EXPANSIONS):
        expanded = _PROPERTY_REF.sub(lookup, value)
        if expanded == value:
            break
        value = expanded
    return value


def resolve_version(value: str | None, props: Mapping[str, str]) -> str:
    """Expanded version, or `Unknown` when absent or still holding a reference."""
    expanded = expand_properties(value, props).strip() if value else ""
    if not expanded or _PROPERTY_REF.search(expanded):
        return UNKNOWN_VERSION
    return expanded


def _properties(root: etree._Element) -> dict[str, str]:
    props: dict[str, str] = {}
    for node in root.xpath("." + _path("properties") + "/*"):
        value = (node.text or "").strip()
        if value:
            props[etree.QName(node).localname] = value
    return props


def coordinate_properties(group_id: str, artifact_id: str, version: str) -> dict[str, str]:
    """`${project.version}` and friends, plus the deprecated `pom.` and bare forms."""
    props: dict[str, str] = {}
    for prefix in _BUILTIN_PREFIXES:
        props[prefix + "groupId"] = group_id
        props[prefix + "artifactId"] = artifact_id
        props[prefix + "version"] = version
    return props


def _parent(project: etree._Element) -> GAV | None:
    coords = [_text(project, "parent", key) for key in ("groupId", "artifactId", "version")]
    if None in coords:
        return None
    group_id, artifact_id, version = coords
    return GAV(group_id=group_id, artifact_id=artifact_id, version=version)


def _dependency_nodes(parent: etree._Element, props: Mapping[str, str], *names: str):
    """Yield `(node, groupId, artifactId)` with both ids expanded; incomplete entries are skipped."""
    for node in parent.xpath("." + _path(*names)):
        group_id = _text(node, "groupId")
        artifact_id = _text(node, "artifactId")
        if group_id is not None and artifact_id is not None:
            yield node, expand_properties(group_id, props), expand_properties(artifact_id, props)


def _dependencies(project: etree._Element, props: Mapping[str, str]) -> tuple[Dependency, ...]:
    deps: list[Dependency] = []
    for node, group_id, artifact_id in _dependency_nodes(project, props, "dependencies", "dependency"):
        declared = _text(node, "version")
        deps.append(
            Dependency(
                gav=GAV(group_id=group_id, artifact_id=artifact_id, version=resolve_version(declared, props)),
                scope=_text(node, "scope"),
                optional=_flag(_text(node, "optional")),
                declared_version=declared,
            )
        )
    return tuple(deps)


def _managed_versions(project: etree._Element, props: Mapping[str, str]) -> dict[str, str]:
    managed: dict[str, str] = {}
    path = ("dependencyManagement", "dependencies", "dependency")
    for node, group_id, artifact_id in _dependency_nodes(project, props, *path):
        version = _text(node, "version")
        if version is not None:
            managed[f"{group_id}:{artifact_id}"] = version
    return managed


def _licenses(project: etree._Element) -> tuple[License, ...]:
    return tuple(
        License(name=_text(node, "name"), url=_text(node, "url"))
        for node in project.xpath("." + _path("licenses", "license"))
    )


def _developers(project: etree._Element) -> tuple[Developer, ...]:
    return tuple(
        Developer(
            id=_text(node, "id"),
            name=_text(node, "name"),
            url=_text(node, "url"),
            roles=_texts(node, "roles", "role"),
        )
        for node in project.xpath("." + _path("developers", "developer"))
    )


def _contributors(project: etree._Element) -> tuple[Contributor, ...]:
    # Maven has no contributor id; SciJava POMs put it under <properties><id>.
    return tuple(
        Contributor(
            id=_text(node, "properties", "id"),
            name=_text(node, "name"),
            url=_text(node, "url"),
            roles=_texts(node, "roles", "role"),
        )
        for node in project.xpath("." + _path("contributors", "contributor"))
    )


def parse_pom_bytes(content: bytes, origin: str = "<memory>") -> MetadataDocument:
    """Parse POM XML content into a `MetadataDocument`.

    Only the document itself is read: list fields a parent declares are not
    merged in here (see `ComponentIndex.elements`). A missing groupId or
    version is taken from the `<parent>` coordinates, and `${...}` references
    in coordinates are expanded from `<properties>`. Dependency versions that
    stay unresolved are recorded as `Unknown`, with the text as written kept in
    `declared_version`; `ComponentIndex` completes them from ancestor
    properties and `<dependencyManagement>`.

    Args:
        content: Raw POM bytes.
        origin: File path or URL, used in error messages.

    Raises:
        MalformedDocumentError: If the XML is invalid or the coordinates are incomplete.
    """
    root = _read_root(content, origin)

    artifact_id = _text(root, "artifactId")
    if artifact_id is None:
        raise MalformedDocumentError(f"Missing required <artifactId> in POM: {origin}")
    group_id = _text(root, "groupId") or _text(root, "parent", "groupId")
    if group_id is None:
        raise MalformedDocumentError(
            f"Missing required <groupId> (or parent <groupId>) in POM: {origin}"
        )
    version = _text(root, "version") or _text(root, "parent", "version") or UNKNOWN_VERSION

    declared = _properties(root)
    props = {**declared, **coordinate_properties(group_id, artifact_id, version)}

    return MetadataDocument(
        gav=GAV(
            group_id=expand_properties(group_id, props),
            artifact_id=artifact_id,
            version=resolve_version(version, props),
        ),
        parent=_parent(root),
        name=_one_line(_text(root, "name")),
        description=_one_line(_text(root, "description")),
        url=_text(root, "url"),
        scm_url=_text(root, "scm", "url"),
        scm_tag=_text(root, "scm", "tag"),
        licenses=_licenses(root),
        developers=_developers(root),
        contributors=_contributors(root),
        dependencies=_dependencies(root, props),
        managed_versions=_managed_versions(root, props),
        properties=declared,
    )


def parse_pom(path: str | Path) -> MetadataDocument:
    """Parse a POM file from disk.

    Raises:
        NotFoundError: If the file does not exist.
        MalformedDocumentError: If the file cannot be read or parsed.
    """
    path = Path(path)
    if not path.exists():
        raise NotFoundError(f"POM not found: {path}")
    try:
        content = path.read_bytes()
    except OSError as exc:
        raise MalformedDocumentError(f"Failed to read POM: {path}") from exc
    return parse_pom_bytes(content, str(path))
