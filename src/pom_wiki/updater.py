"""Publish the tables of an indexed component to a wiki.

Two kinds of pages are written for a base project `G:A:V`:

- `Template:ComponentTable:<G>:<A>`, the master table of its dependencies;
- `Template:ComponentStats:<dG>:<dA>` for each relevant dependency, the
  component sidebar table, meant to be transcluded as
  `{{ComponentStats:<dG>:<dA>}}`.

Without a publisher, pages are printed to a text stream instead (dry run).
"""

from __future__ import annotations

import sys
from typing import Protocol, TextIO

from loguru import logger

from pom_wiki.index import ComponentIndex


SEP = ":"
MASTER_KIND = "ComponentTable"
COMPONENT_KIND = "ComponentStats"


class PagePublisher(Protocol):
    """Something that can replace the text of a wiki page."""

    def edit(self, page: str, text: str, summary: str) -> None: ...


def page_name(kind: str, group_id: str, artifact_id: str) -> str:
    return "Template:" + kind + SEP + group_id + SEP + artifact_id


class WikiUpdater:
    """Uploads the tables of one `ComponentIndex`.

    Args:
        index: The indexed base project.
        publisher: Remote wiki; None means dry run to `out`.
        include_project: Also publish a ComponentStats page for the base project.
        out: Stream for the dry run (stdout by default).
    """

    def __init__(
        self,
        index: ComponentIndex,
        publisher: PagePublisher | None = None,
        *,
        include_project: bool = False,
        out: TextIO | None = None,
    ) -> None:
        self.index = index
        self.publisher = publisher
        self.include_project = include_project
        self._out = out
        self.summary = "Update to " + index.project.gav.compact()

    def update(self) -> list[str]:
        """Publish the master table, then each component table.

        Returns:
            The names of the pages written, in order.
        """
        project = self.index.project
        written = [
            self.upload(
                page_name(MASTER_KIND, project.group_id, project.artifact_id),
                self.index.generate_master_table(),
            )
        ]

        poms = self.index.poms
        if self.include_project:
            poms.append(project)
        for pom in poms:
            written.append(
                self.upload(
                    page_name(COMPONENT_KIND, pom.group_id, pom.artifact_id),
                    self.index.generate_component_table(pom),
                )
            )
        return written

    def upload(self, page: str, text: str) -> str:
        if self.publisher is None:
            out = self._out or sys.stdout
            out.write(f"\n[{page}]\n{text}\n")
        else:
            self.publisher.edit(page, text, self.summary)
            logger.info(f"Updated {page}")
        return page
