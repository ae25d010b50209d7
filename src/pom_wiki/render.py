"""MediaWiki markup for component metadata tables."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime
from types import MappingProxyType
from typing import Protocol

from pom_wiki.models import Contributor, Developer, License, MetadataDocument
from pom_wiki.roles import Member, Team, classify, needed_roles, property_flag
from pom_wiki.source import ManifestSource


DEFAULT_LICENSES: Mapping[str, str] = MappingProxyType(
    {
        "Apache 2": "Apache",
        "Apache License 2": "Apache",
        "Apache License, Version 2.0": "Apache",
        "The Apache Software License, Version 2.0": "Apache",
        "BSD": "BSD",
        "Simplified BSD License": "BSD-2",
        "New BSD License": "BSD-3",
        "GNU GPL v3": "GPLv3",
        "GNU General Public License v3+": "GPLv3",
        "GNU General Public License v2+": "GPLv2",
        "GNU Public License v2": "GPLv2",
        "GPLv2": "GPLv2",
        "LGPL": "LGPL",
        "The GNU Lesser General Public License, Version 3.0": "LGPLv3",
        "LGPLv2": "LGPLv2",
        "The MIT License": "MIT",
        "Public domain": "Public Domain",
        "CC0 1.0 Universal License": "CC0",
        "BIG": "BIG License|BIG",
        "ImageScience": "ImageScience License|ImageScience",
    }
)

DOC_PREFIXES = ("http://imagej.net/", "http://fiji.sc/")

RELEASE_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

_GITHUB_RE = re.compile(r"^https?://github\.com/([^/]*)/([^/.]*)(\.git)?$")

MASTER_COLUMNS = ("Name", "Description", "Repository", "Artifact", "[[License]]", "[[Team]]")


class LicenseTable:
    """Maps license names as written in POMs to wiki page names."""

    def __init__(self, known: Mapping[str, str] | None = None) -> None:
        self._known = dict(DEFAULT_LICENSES if known is None else known)

    def page(self, name: str) -> str | None:
        return self._known.get(name)


class ListLookup(Protocol):
    """List fields of a POM after parent-chain inheritance."""

    def licenses(self, pom: MetadataDocument) -> Sequence[License]: ...

    def developers(self, pom: MetadataDocument) -> Sequence[Developer]: ...

    def contributors(self, pom: MetadataDocument) -> Sequence[Contributor]: ...


# -- Link helpers --


def maven_link(group_id: str, artifact_id: str, version: str | None = None) -> str:
    if version is None:
        return f"{{{{Maven | g={group_id} | a={artifact_id} | label={artifact_id}}}}}"
    return f"{{{{Maven | g={group_id} | a={artifact_id} | v={version} | label={version}}}}}"


def person_link(member_id: str | None, name: str | None) -> str | None:
    return name if member_id is None else f"{{{{Person|{member_id}}}}}"


def link(label: str | None, url: str | None, prefixes: Sequence[str] = DOC_PREFIXES) -> str | None:
    """Link `label` to `url`, as an internal wiki link when the URL points into the wiki itself."""
    if not url:
        return label
    for prefix in prefixes:
        if url.startswith(prefix):
            page = url[len(prefix):].replace("_", " ") or "Welcome"
            return f"[[{page}|{label}]]"
    return f"[{url} {label}]"


def is_valid_tag(scm_tag: str | None) -> bool:
    return scm_tag is not None and scm_tag != "HEAD"


def default_tag(artifact_id: str | None, version: str | None) -> str | None:
    if artifact_id is None or version is None:
        return None
    # net.imagej:ij tags its releases v<version>
    if artifact_id == "ij":
        return f"v{version}"
    return f"{artifact_id}-{version}"


def scm_link(
    scm_url: str | None,
    scm_tag: str | None = None,
    artifact_id: str | None = None,
    version: str | None = None,
) -> str | None:
    """Render a source repository link; GitHub URLs get the `{{GitHub}}` template."""
    if scm_url is None:
        return None
    m = _GITHUB_RE.match(scm_url)
    if m:
        org, repo = m.group(1), m.group(2)
        tag = scm_tag if is_valid_tag(scm_tag) else default_tag(artifact_id, version)
        tag_part = "" if tag is None else f" | tag={tag}"
        return f"{{{{GitHub | org={org} | repo={repo}{tag_part}}}}}"
    return f"[{scm_url} {scm_url}]"


def items(values: Iterable[str | None]) -> str:
    """Comma-join the non-null values."""
    return ", ".join(v for v in values if v is not None)


def yn(value: object) -> str:
    return "yes" if value else "no"


class _Text:
    def __init__(self) -> None:
        self._lines: list[str] = []

    def line(self, *parts: object) -> None:
        self._lines.append("".join("" if p is None else str(p) for p in parts))

    def row(self, key: str, value: str | None) -> None:
        """Emit `| key = value`, unless the value is empty."""
        if value:
            self.line("| ", key, " = ", value)

    def __str__(self) -> str:
        return "".join(f"{line}\n" for line in self._lines)


class TableRenderer:
    """Renders master and component tables.

    Args:
        licenses: Known license names; `DEFAULT_LICENSES` when omitted.
        doc_prefixes: URL prefixes of the wiki itself.
        manifests: Source of build manifests for the release date row.
        table_class: CSS class of the master table.
    """

    def __init__(
        self,
        licenses: LicenseTable | None = None,
        *,
        doc_prefixes: Sequence[str] = DOC_PREFIXES,
        manifests: ManifestSource | None = None,
        table_class: str = "wikitable",
    ) -> None:
        self.licenses = licenses if licenses is not None else LicenseTable()
        self.doc_prefixes = tuple(doc_prefixes)
        self.manifests = manifests
        self.table_class = table_class

    def link(self, label: str | None, url: str | None) -> str | None:
        return link(label, url, self.doc_prefixes)

    def license_links(self, licenses: Iterable[License]) -> str:
        links: list[str | None] = []
        for lic in licenses:
            if lic.name is None:
                continue
            page = self.licenses.page(lic.name)
            links.append(self.link(lic.name, lic.url) if page is None else f"[[{page}]]")
        return items(links)

    def team_links(self, developers: Iterable[Developer]) -> str:
        return items(person_link(dev.id, dev.name) for dev in developers)

    def contributor_links(self, contributors: Iterable[Contributor]) -> str:
        return items(
            self.link(c.name, c.url) if c.id is None else person_link(c.id, c.name)
            for c in contributors
        )

    def release_date(self, pom: MetadataDocument) -> str | None:
        """Implementation-Date of the component's manifest as YYYY-MM-DD, if known."""
        if self.manifests is None:
            return None
        manifest = self.manifests.manifest(pom.gav)
        if not manifest:
            return None
        value = manifest.get("Implementation-Date")
        if value is None:
            return None
        try:
            return datetime.strptime(value, RELEASE_DATE_FORMAT).strftime("%Y-%m-%d")
        except ValueError:
            return None

    def master_table(
        self,
        base_name: str,
        poms: Sequence[MetadataDocument],
        lookup: ListLookup,
    ) -> str:
        """Summary table with one row per component.

        `base_name` is accepted for symmetry with `component_table`; the master
        table itself does not show it.
        """
        s = _Text()
        s.line('{| class="', self.table_class, '"')
        for column in MASTER_COLUMNS:
            s.line("| '''", column, "'''")
        for pom in poms:
            s.line("|-")
            s.line("| ", self.link(pom.name, pom.url))
            s.line("| ", pom.description)
            s.line("| ", scm_link(pom.scm_url))
            s.line("| ", maven_link(pom.group_id, pom.artifact_id))
            s.line("| ", self.license_links(lookup.licenses(pom)))
            s.line("| ", self.team_links(lookup.developers(pom)))
        s.line("|}")
        return str(s)

    def component_table(
        self,
        base_name: str,
        pom: MetadataDocument,
        lookup: ListLookup,
    ) -> str:
        """Sidebar table with detailed statistics about one component."""
        g, a, v = pom.group_id, pom.artifact_id, pom.version
        developers = lookup.developers(pom)
        contributors = lookup.contributors(pom)
        team = classify(developers, contributors)

        def people(role: str) -> str:
            return _people(team, role)

        dev_status = (
            f"{{{{DevStatus | developer={yn(developers)}"
            f" | incubating={yn(v.startswith('0.x'))}"
            f" | obsolete={yn(property_flag(pom, 'scijava.obsolete'))}}}}}"
        )
        support_status = (
            f"{{{{SupportStatus | debugger={yn(team.members('debugger'))}"
            f" | reviewer={yn(team.members('reviewer'))}"
            f" | support={yn(team.members('support'))}}}}}"
        )

        s = _Text()
        s.line("{{Component")
        s.row("project", base_name)
        s.row("name", pom.name)
        s.row("url", pom.url)
        s.row("source", scm_link(pom.scm_url, pom.scm_tag, a, v))
        s.row("license", self.license_links(lookup.licenses(pom)))
        s.row("release", maven_link(g, a, v))
        s.row("date", self.release_date(pom))
        s.row("devStatus", dev_status)
        s.row("supportStatus", support_status)
        s.row("founders", people("founder"))
        s.row("leads", people("lead"))
        s.row("developers", people("developer"))
        s.row("debuggers", people("debugger"))
        s.row("reviewers", people("reviewer"))
        s.row("support", people("support"))
        s.row("maintainers", people("maintainer"))
        s.row("contributors", self.contributor_links(contributors))
        s.row("otherDevs", items(team.other_devs))
        s.row("neededRoles", items(needed_roles(pom, team)))
        s.line("}}")
        return str(s)


def _people(team: Team, role: str) -> str:
    members: list[Member] = team.members(role)
    return items(person_link(member_id, name) for member_id, name in members)
