"""Runtime configuration module.

Settings are read from environment variables; CLI options override them.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path


DEFAULT_REMOTE_URL = "https://maven.scijava.org/content/groups/public/"
LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


@dataclass
class Settings:
    """pom-wiki configuration container.

    Attributes:
        local_repository: Root of the local Maven repository (usually ~/.m2/repository)
        remote_url: Base URL of the remote Maven repository
        timeout: HTTP timeout in seconds for POM downloads and wiki calls
        max_parent_depth: Maximum number of parent hops when inheriting list fields
        log_level: loguru level name for the stderr sink
        doc_prefixes: URL prefixes rewritten to internal wiki links
    """

    local_repository: Path = field(
        default_factory=lambda: Path.home() / ".m2" / "repository"
    )
    remote_url: str = DEFAULT_REMOTE_URL
    timeout: float = 30.0
    max_parent_depth: int = 50
    log_level: str = "WARNING"
    doc_prefixes: tuple[str, ...] = ("http://imagej.net/", "http://fiji.sc/")

    @classmethod
    def from_env(cls) -> "Settings":
        """Create configuration from environment variables.

        Environment variables:
            POM_WIKI_LOCAL_REPO: Local Maven repository (default: "~/.m2/repository")
            POM_WIKI_REMOTE_URL: Remote repository base URL (default: SciJava public group)
            POM_WIKI_TIMEOUT: HTTP timeout in seconds (default: 30)
            POM_WIKI_MAX_PARENT_DEPTH: Parent chain bound (default: 50)
            POM_WIKI_LOG_LEVEL: Log level (default: "WARNING")
        """
        local_repo = os.getenv("POM_WIKI_LOCAL_REPO")
        return cls(
            local_repository=(
                Path(local_repo).expanduser()
                if local_repo
                else Path.home() / ".m2" / "repository"
            ),
            remote_url=os.getenv("POM_WIKI_REMOTE_URL", DEFAULT_REMOTE_URL),
            timeout=float(os.getenv("POM_WIKI_TIMEOUT", "30")),
            max_parent_depth=int(os.getenv("POM_WIKI_MAX_PARENT_DEPTH", "50")),
            log_level=os.getenv("POM_WIKI_LOG_LEVEL", "WARNING").upper(),
        )

    def validate(self) -> None:
        """Validate the configuration.

        Raises:
            ValueError: If a setting is out of range.
        """
        if not self.remote_url.startswith(("http://", "https://")):
            raise ValueError(f"POM_WIKI_REMOTE_URL must be an http(s) URL: {self.remote_url}")
        if self.timeout <= 0:
            raise ValueError("POM_WIKI_TIMEOUT must be positive")
        if self.max_parent_depth < 1:
            raise ValueError("POM_WIKI_MAX_PARENT_DEPTH must be at least 1")
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"Unsupported log level: {self.log_level}")
