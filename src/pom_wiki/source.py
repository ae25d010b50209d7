"""POM retrieval from the local Maven repository and a remote repository.

Lookup order for a coordinate triple:
    1. the in-memory cache of this source,
    2. `<local_repository>/<g/r/o/u/p>/<artifact>/<version>/<artifact>-<version>.pom`,
    3. the same relative path under the remote repository URL.
"""

from __future__ import annotations

import zipfile
from pathlib import Path
from typing import Protocol

import httpx
from loguru import logger

from pom_wiki.config import DEFAULT_REMOTE_URL
from pom_wiki.exceptions import NotFoundError, PomWikiError
from pom_wiki.models import GAV, MetadataDocument, Resolution
from pom_wiki.parser import parse_pom, parse_pom_bytes


MANIFEST_ENTRY = "META-INF/MANIFEST.MF"


class MetadataSource(Protocol):
    """Anything that can turn coordinates into a parsed POM."""

    def resolve(self, group_id: str, artifact_id: str, version: str) -> MetadataDocument: ...


class ManifestSource(Protocol):
    """Anything that can supply the build manifest of a component."""

    def manifest(self, gav: GAV) -> dict[str, str] | None: ...


def relative_path(group_id: str, artifact_id: str, version: str, extension: str = "pom") -> str:
    """Return the Maven repository layout path of an artifact file."""
    group_path = group_id.replace(".", "/")
    return f"{group_path}/{artifact_id}/{version}/{artifact_id}-{version}.{extension}"


def parse_manifest(text: str) -> dict[str, str]:
    """Parse the main section of a JAR manifest.

    Lines starting with a single space continue the previous value.
    """
    attributes: dict[str, str] = {}
    last_key: str | None = None
    for line in text.splitlines():
        if not line:
            break
        if line.startswith(" ") and last_key is not None:
            attributes[last_key] += line[1:]
            continue
        key, sep, value = line.partition(":")
        if not sep:
            continue
        last_key = key.strip()
        attributes[last_key] = value.strip()
    return attributes


class PomSource:
    """Memoizing POM resolver backed by a local and a remote Maven repository.

    Example:
        with PomSource(Path.home() / ".m2" / "repository") as source:
            pom = source.resolve("org.slf4j", "slf4j-api", "1.7.25")
    """

    def __init__(
        self,
        local_repository: Path,
        remote_url: str | None = DEFAULT_REMOTE_URL,
        *,
        client: httpx.Client | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Initialize the source.

        Args:
            local_repository: Root of the local Maven repository.
            remote_url: Base URL of the remote repository, or None to stay offline.
            client: HTTP client to use; one is created (and owned) when omitted.
            timeout: Timeout in seconds for a client created here.
        """
        self._local_repository = Path(local_repository)
        self._remote_url = remote_url.rstrip("/") + "/" if remote_url else None
        self._owns_client = client is None and remote_url is not None
        self._client = client
        if self._owns_client:
            self._client = httpx.Client(timeout=timeout, follow_redirects=True)
        self._cache: dict[str, MetadataDocument] = {}

    def __enter__(self) -> "PomSource":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client and self._client is not None:
            self._client.close()

    @property
    def local_repository(self) -> Path:
        return self._local_repository

    def local_path(self, group_id: str, artifact_id: str, version: str, extension: str = "pom") -> Path:
        return self._local_repository / relative_path(group_id, artifact_id, version, extension)

    def remote_location(self, group_id: str, artifact_id: str, version: str) -> str | None:
        if self._remote_url is None:
            return None
        return self._remote_url + relative_path(group_id, artifact_id, version)

    def resolve(self, group_id: str, artifact_id: str, version: str) -> MetadataDocument:
        """Return the POM for the given coordinates.

        Raises:
            CoordinateError: If a coordinate is missing.
            NotFoundError: If no local file or remote document exists.
            MalformedDocumentError: If the content is not a parseable POM.
        """
        gav = GAV.of(group_id, artifact_id, version).compact()
        cached = self._cache.get(gav)
        if cached is not None:
            logger.trace(f"POM cache hit: {gav}")
            return cached

        path = self.local_path(group_id, artifact_id, version)
        if path.exists():
            logger.debug(f"Reading {gav} from local repository: {path}")
            pom = parse_pom(path)
        else:
            pom = self._fetch_remote(gav, self.remote_location(group_id, artifact_id, version))
        self._cache[gav] = pom
        return pom

    def lookup(self, group_id: str, artifact_id: str, version: str) -> Resolution:
        """Like `resolve`, but report failures as a `Resolution` instead of raising."""
        gav = f"{group_id}:{artifact_id}:{version}"
        try:
            return Resolution(gav=gav, document=self.resolve(group_id, artifact_id, version))
        except PomWikiError as exc:
            return Resolution(gav=gav, error=exc)

    def manifest(self, gav: GAV) -> dict[str, str] | None:
        """Return the main manifest attributes of the component's JAR, if it is available locally."""
        jar = self.local_path(gav.group_id, gav.artifact_id, gav.version, "jar")
        if not jar.exists():
            return None
        try:
            with zipfile.ZipFile(jar) as archive:
                text = archive.read(MANIFEST_ENTRY).decode("utf-8", errors="replace")
        except (OSError, KeyError, zipfile.BadZipFile) as exc:
            logger.debug(f"No readable manifest in {jar}: {exc}")
            return None
        return parse_manifest(text)

    def _fetch_remote(self, gav: str, url: str | None) -> MetadataDocument:
        if url is None or self._client is None:
            raise NotFoundError(f"POM not found in local repository: {gav}")
        logger.debug(f"Fetching {gav} from {url}")
        try:
            response = self._client.get(url)
        except httpx.HTTPError as exc:
            raise NotFoundError(f"Failed to fetch POM {gav} from {url}: {exc}") from exc
        if response.status_code == 404:
            raise NotFoundError(f"POM not found locally or at {url}: {gav}")
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise NotFoundError(
                f"Failed to fetch POM {gav} from {url}: HTTP {response.status_code}"
            ) from exc
        return parse_pom_bytes(response.content, url)
