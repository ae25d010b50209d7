"""Index the direct dependencies of a Maven component.

A `ComponentIndex` resolves the POM of a base project, records its direct
dependencies by `groupId:artifactId`, and keeps the candidate POMs that match
one of them. Matching ignores versions: a candidate `org.slf4j:slf4j-api:2.0.0`
is relevant to a project depending on `org.slf4j:slf4j-api:1.7.25`.

Dependency versions left open by the base POM (a `${...}` defined higher
up, or no `<version>` at all) are completed from the parent chain, as in the
Maven effective model.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Literal

from loguru import logger

from pom_wiki.exceptions import CyclicParentError
from pom_wiki.models import (
    GAV,
    Contributor,
    Dependency,
    Developer,
    License,
    MetadataDocument,
    UNKNOWN_VERSION,
)
from pom_wiki.parser import coordinate_properties, resolve_version
from pom_wiki.render import TableRenderer
from pom_wiki.source import MetadataSource


ListField = Literal["dependencies", "licenses", "developers", "contributors"]

DEFAULT_MAX_PARENT_DEPTH = 50


class ComponentIndex:
    """Dependencies of one base project and the POMs relevant to them.

    Args:
        project: Coordinates of the base project.
        source: Resolver used for the base POM and every parent hop.
        candidates: Candidate POMs to filter. When omitted, the POMs of the
            project's direct dependencies are resolved through `source`.
        renderer: Table renderer; a default `TableRenderer` when omitted.
        max_parent_depth: Maximum number of parent hops in `elements`.
    """

    def __init__(
        self,
        project: GAV,
        source: MetadataSource,
        candidates: Iterable[MetadataDocument] | None = None,
        *,
        renderer: TableRenderer | None = None,
        max_parent_depth: int = DEFAULT_MAX_PARENT_DEPTH,
    ) -> None:
        self._source = source
        self._renderer = renderer or TableRenderer()
        self._max_parent_depth = max_parent_depth

        self._project = source.resolve(project.group_id, project.artifact_id, project.version)
        self._base_name = self._project.name or self._project.artifact_id

        self._direct = self._complete_versions(self.dependencies(self._project))
        # NB: last declaration wins for a repeated groupId:artifactId.
        self._deps: dict[str, str] = {}
        for dep in self._direct:
            self._deps[dep.gav.key()] = dep.gav.version

        if candidates is None:
            candidates = self._resolve_dependencies()
        self._poms = [pom for pom in candidates if self.is_relevant(pom)]
        logger.debug(
            f"Indexed {self._project.gav.compact()}: "
            f"{len(self._deps)} dependencies, {len(self._poms)} relevant POMs"
        )

    @property
    def project(self) -> MetadataDocument:
        return self._project

    @property
    def base_name(self) -> str:
        """Human-readable project name used in the `project` row of component tables."""
        return self._base_name

    @base_name.setter
    def base_name(self, value: str) -> None:
        self._base_name = value

    @property
    def direct_dependencies(self) -> tuple[Dependency, ...]:
        """The base project's direct dependencies, versions completed from its ancestors."""
        return self._direct

    @property
    def dependency_versions(self) -> dict[str, str]:
        """Mapping of `groupId:artifactId` to declared version for the direct dependencies."""
        return dict(self._deps)

    @property
    def poms(self) -> list[MetadataDocument]:
        """Relevant POMs, in candidate order."""
        return list(self._poms)

    def is_relevant(self, pom: MetadataDocument) -> bool:
        return pom.gav.key() in self._deps

    def generate_master_table(self) -> str:
        return self._renderer.master_table(self._base_name, self._poms, self)

    def generate_component_table(self, pom: MetadataDocument) -> str:
        return self._renderer.component_table(self._base_name, pom, self)

    # -- Inherited list fields --

    def dependencies(self, pom: MetadataDocument) -> tuple[Dependency, ...]:
        return self.elements(pom, "dependencies")

    def licenses(self, pom: MetadataDocument) -> tuple[License, ...]:
        return self.elements(pom, "licenses")

    def developers(self, pom: MetadataDocument) -> tuple[Developer, ...]:
        return self.elements(pom, "developers")

    def contributors(self, pom: MetadataDocument) -> tuple[Contributor, ...]:
        return self.elements(pom, "contributors")

    def lineage(self, pom: MetadataDocument) -> Iterator[MetadataDocument]:
        """Yield `pom`, then its ancestors nearest first, resolving each parent lazily.

        Raises:
            CyclicParentError: If the parent chain repeats a POM or exceeds
                `max_parent_depth` hops.
        """
        visited = {pom.gav.compact()}
        current = pom
        yield current
        hops = 0
        while current.parent is not None:
            parent = current.parent
            if parent.compact() in visited:
                raise CyclicParentError(
                    f"Parent chain of {pom.gav.compact()} loops back to {parent.compact()}"
                )
            hops += 1
            if hops > self._max_parent_depth:
                raise CyclicParentError(
                    f"Parent chain of {pom.gav.compact()} exceeds {self._max_parent_depth} levels"
                )
            visited.add(parent.compact())
            logger.trace(f"Following parent of {current.gav.compact()}: {parent.compact()}")
            current = self._source.resolve(parent.group_id, parent.artifact_id, parent.version)
            yield current

    def elements(self, pom: MetadataDocument, field: ListField) -> tuple:
        """Return `pom`'s own list for `field`, or the nearest ancestor's non-empty one.

        Raises:
            CyclicParentError: If the parent chain loops or is too deep.
        """
        for current in self.lineage(pom):
            values = getattr(current, field)
            if values:
                return values
        return ()

    def _complete_versions(self, deps: tuple[Dependency, ...]) -> tuple[Dependency, ...]:
        """Fill in `Unknown` dependency versions from the base project's ancestors.

        A `${...}` version is expanded with the properties of the whole parent
        chain (nearer POMs win; the base project's own coordinates win over
        both). A dependency still without a version takes the one from the
        nearest `<dependencyManagement>` entry for its groupId:artifactId.
        """
        if all(dep.gav.version != UNKNOWN_VERSION for dep in deps):
            return deps

        props: dict[str, str] = {}
        managed: dict[str, str] = {}
        for pom in self.lineage(self._project):
            for key, value in pom.properties.items():
                props.setdefault(key, value)
            for key, value in pom.managed_versions.items():
                managed.setdefault(key, value)
        project = self._project.gav
        props.update(coordinate_properties(project.group_id, project.artifact_id, project.version))

        completed: list[Dependency] = []
        for dep in deps:
            if dep.gav.version == UNKNOWN_VERSION:
                version = resolve_version(dep.declared_version, props)
                if version == UNKNOWN_VERSION:
                    version = resolve_version(managed.get(dep.gav.key()), props)
                if version != UNKNOWN_VERSION:
                    logger.debug(f"Completed version of {dep.gav.key()}: {version}")
                    dep = dep.model_copy(update={"gav": dep.gav.model_copy(update={"version": version})})
            completed.append(dep)
        return tuple(completed)

    def _resolve_dependencies(self) -> list[MetadataDocument]:
        resolved: dict[str, MetadataDocument] = {}
        for key, version in self._deps.items():
            if version == UNKNOWN_VERSION:
                logger.warning(f"Skipping dependency {key}: no version declared or managed")
                continue
            group_id, artifact_id = key.split(":", 1)
            pom = self._source.resolve(group_id, artifact_id, version)
            resolved[pom.gav.compact()] = pom
        return list(resolved.values())
