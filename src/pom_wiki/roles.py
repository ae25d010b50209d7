"""Team role classification for POM developers and contributors.

Role strings are compared case-insensitively after dropping any trailing
parenthetical note, so `"Support (part-time)"` counts as `support`.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from pom_wiki.models import Contributor, Developer, MetadataDocument


Member = tuple[str | None, str | None]
"""An `(id, name)` pair of a team member."""

FOUNDER = "founder"
KNOWN_ROLES = ("founder", "lead", "developer", "debugger", "reviewer", "support", "maintainer")

# (role, team-size property, label used in the neededRoles row)
STAFFED_ROLES = (
    ("lead", "scijava.team.leads", "leads"),
    ("developer", "scijava.team.developers", "developers"),
    ("debugger", "scijava.team.debuggers", "debuggers"),
    ("reviewer", "scijava.team.reviewers", "reviewers"),
    ("support", "scijava.team.supports", "support"),
    ("maintainer", "scijava.team.maintainers", "maintainers"),
)

_INTEGER_RE = re.compile(r"[+-]?\d+")


def role_name(raw: str) -> str:
    """Normalize a raw `<role>` value: `" founder (emeritus) "` -> `"founder"`."""
    value = raw.strip()
    paren = value.find("(")
    return value if paren < 0 else value[:paren].strip()


def has_role(roles: Iterable[str], role: str) -> bool:
    wanted = role.lower()
    return any(role_name(r).lower() == wanted for r in roles)


def role_holders(developers: Iterable[Developer], role: str) -> list[Member]:
    """Return the developers holding `role`, in declaration order."""
    return [(dev.id, dev.name) for dev in developers if has_role(dev.roles, role)]


def founders(developers: Iterable[Developer], contributors: Iterable[Contributor]) -> list[Member]:
    """Founders among developers, followed by contributors who declare a founder role."""
    members = role_holders(developers, FOUNDER)
    members.extend((c.id, c.name) for c in contributors if has_role(c.roles, FOUNDER))
    return members


def unknown_roles(roles: Iterable[str], known: Sequence[str] = KNOWN_ROLES) -> list[str]:
    known_lower = {k.lower() for k in known}
    return [name for name in map(role_name, roles) if name.lower() not in known_lower]


def other_developers(developers: Iterable[Developer]) -> list[str]:
    """Describe developers with roles outside `KNOWN_ROLES` as `"name (role1, role2)"`."""
    others: list[str] = []
    for dev in developers:
        extra = unknown_roles(dev.roles)
        if extra:
            others.append(f"{dev.name or dev.id} ({', '.join(extra)})")
    return others


def property_number(document: MetadataDocument, key: str) -> int:
    """Integer value of a POM property, or -1 when absent or not an integer."""
    value = document.get_property(key)
    if value is None or not _INTEGER_RE.fullmatch(value):
        return -1
    return int(value)


def property_flag(document: MetadataDocument, key: str) -> bool:
    value = document.get_property(key)
    return value is not None and value.lower() == "true"


@dataclass
class Team:
    """Role classification of one component's team."""

    founders: list[Member] = field(default_factory=list)
    holders: dict[str, list[Member]] = field(default_factory=dict)
    other_devs: list[str] = field(default_factory=list)

    def members(self, role: str) -> list[Member]:
        if role == FOUNDER:
            return self.founders
        return self.holders.get(role, [])


def classify(developers: Sequence[Developer], contributors: Sequence[Contributor]) -> Team:
    return Team(
        founders=founders(developers, contributors),
        holders={role: role_holders(developers, role) for role in KNOWN_ROLES if role != FOUNDER},
        other_devs=other_developers(developers),
    )


def needed_roles(document: MetadataDocument, team: Team) -> list[str]:
    """Staffing shortfall per role, e.g. `["leads (1)", "support (2)"]`.

    Targets come from the `scijava.team.*` properties; a missing target is -1
    and never produces a shortfall.
    """
    needed: list[str] = []
    for role, key, label in STAFFED_ROLES:
        shortfall = property_number(document, key) - len(team.members(role))
        if shortfall > 0:
            needed.append(f"{label} ({shortfall})")
    return needed
