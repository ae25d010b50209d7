"""Pydantic models for POM metadata documents."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from pom_wiki.exceptions import CoordinateError, PomWikiError


UNKNOWN_VERSION = "Unknown"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class GAV(_Frozen):
    """groupId, artifactId and version of a Maven artifact.

    The version is `Unknown` when a dependency declares none or it cannot be
    resolved from properties.
    """

    group_id: str = Field(..., min_length=1)
    artifact_id: str = Field(..., min_length=1)
    version: str = Field(default=UNKNOWN_VERSION, min_length=1)

    def compact(self) -> str:
        """`groupId:artifactId:version`, the form used in page summaries and errors."""
        return f"{self.group_id}:{self.artifact_id}:{self.version}"

    def key(self) -> str:
        """Return the version-less `groupId:artifactId` key."""
        return f"{self.group_id}:{self.artifact_id}"

    @classmethod
    def parse(cls, value: str) -> "GAV":
        """Parse a `groupId:artifactId:version` string.

        Raises:
            ValueError: If the string does not have exactly three non-empty parts.
        """
        parts = (value or "").strip().split(":")
        if len(parts) != 3 or not all(parts):
            raise ValueError(f"Expected groupId:artifactId:version, got {value!r}")
        return cls(group_id=parts[0], artifact_id=parts[1], version=parts[2])

    @classmethod
    def of(cls, group_id: str, artifact_id: str, version: str) -> "GAV":
        """Build coordinates from user input.

        Raises:
            CoordinateError: If a coordinate is missing or blank.
        """
        for label, value in (("groupId", group_id), ("artifactId", artifact_id), ("version", version)):
            if not value or not value.strip():
                raise CoordinateError(f"Null {label}")
        return cls(group_id=group_id, artifact_id=artifact_id, version=version)


class Dependency(_Frozen):
    """One `<dependency>` of a POM."""

    gav: GAV
    scope: str | None = None
    optional: bool | None = None
    # Version text as written, before ${...} expansion.
    declared_version: str | None = None

    def label(self) -> str:
        """Coordinates followed by `(scope=...)` and `(optional)` markers when set."""
        label = self.gav.compact()
        if self.scope:
            label += f" (scope={self.scope})"
        if self.optional:
            label += " (optional)"
        return label


class License(_Frozen):
    """A `<license>` entry."""

    name: str | None = None
    url: str | None = None


class Developer(_Frozen):
    """A `<developer>` entry with its raw role strings in declaration order."""

    id: str | None = None
    name: str | None = None
    url: str | None = None
    roles: tuple[str, ...] = ()


class Contributor(_Frozen):
    """A `<contributor>` entry.

    Contributors have no `<id>` element in the POM schema; the id is read from
    the contributor's own `<properties><id>` instead.
    """

    id: str | None = None
    name: str | None = None
    url: str | None = None
    roles: tuple[str, ...] = ()


class MetadataDocument(_Frozen):
    """A parsed POM.

    List fields hold only what the POM itself declares. Inherited values are
    looked up along the parent chain by `ComponentIndex.elements`.
    """

    gav: GAV
    parent: GAV | None = None
    name: str | None = None
    description: str | None = None
    url: str | None = None
    scm_url: str | None = None
    scm_tag: str | None = None
    licenses: tuple[License, ...] = ()
    developers: tuple[Developer, ...] = ()
    contributors: tuple[Contributor, ...] = ()
    dependencies: tuple[Dependency, ...] = ()
    properties: dict[str, str] = Field(default_factory=dict)
    # <dependencyManagement> versions by groupId:artifactId, unexpanded.
    managed_versions: dict[str, str] = Field(default_factory=dict)

    @property
    def group_id(self) -> str:
        return self.gav.group_id

    @property
    def artifact_id(self) -> str:
        return self.gav.artifact_id

    @property
    def version(self) -> str:
        return self.gav.version

    def get_property(self, key: str) -> str | None:
        """Return the value of `<properties><key>` declared by this POM."""
        return self.properties.get(key)


class Resolution(BaseModel):
    """Outcome of resolving one coordinate triple: a document or an error."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    gav: str
    document: MetadataDocument | None = None
    error: PomWikiError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> MetadataDocument:
        """Return the document, or raise the recorded error."""
        if self.error is not None:
            raise self.error
        assert self.document is not None
        return self.document
