"""Rich rendering of an indexed component."""

from __future__ import annotations

from rich.markup import escape
from rich.tree import Tree

from pom_wiki.index import ComponentIndex


def build_dependency_tree(index: ComponentIndex) -> Tree:
    """Build a Rich Tree of the base project's direct dependencies.

    Dependencies with a relevant POM in the index are shown in green with that
    POM's project name; the others are dimmed.

    Args:
        index: Indexed base project.

    Returns:
        A Rich Tree object for rendering.
    """
    project = index.project
    root = Tree(f"[bold]{project.gav.compact()}[/bold] ({escape(index.base_name)})")
    dependencies = index.direct_dependencies
    if not dependencies:
        root.add("[dim]No direct dependencies found[/dim]")
        return root

    names = {pom.gav.key(): pom.name or pom.artifact_id for pom in index.poms}
    deps_branch = root.add("dependencies")
    for dep in dependencies:
        name = names.get(dep.gav.key())
        if name is None:
            deps_branch.add(f"[dim]{escape(dep.label())}[/dim]")
        else:
            deps_branch.add(f"[green]{escape(dep.label())}[/green] {escape(name)}")
    return root
