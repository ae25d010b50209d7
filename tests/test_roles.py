from __future__ import annotations

import pytest

from conftest import make_pom
from pom_wiki.models import Contributor, Developer
from pom_wiki.roles import (
    classify,
    founders,
    has_role,
    needed_roles,
    other_developers,
    property_flag,
    property_number,
    role_holders,
    role_name,
)


def _dev(dev_id: str, *roles: str, name: str | None = None) -> Developer:
    return Developer(id=dev_id, name=name or dev_id.title(), roles=roles)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("lead", "lead"),
        ("  reviewer  ", "reviewer"),
        ("founder (emeritus)", "founder"),
        ("support (part-time)", "support"),
        ("(none)", ""),
    ],
)
def test_role_name_strips_parenthetical(raw: str, expected: str) -> None:
    assert role_name(raw) == expected


@pytest.mark.parametrize("role", ["Lead", "LEAD", "lead", " lead (interim)"])
def test_roles_match_case_insensitively(role: str) -> None:
    assert has_role([role], "lead")
    assert role_holders([_dev("a", role)], "lead") == [("a", "A")]


def test_role_holders_keep_declaration_order_across_roles() -> None:
    devs = [
        _dev("zed", "developer", "lead"),
        _dev("amy", "lead"),
        _dev("bob", "developer"),
    ]
    assert role_holders(devs, "lead") == [("zed", "Zed"), ("amy", "Amy")]
    assert role_holders(devs, "developer") == [("zed", "Zed"), ("bob", "Bob")]
    assert role_holders(devs, "maintainer") == []


def test_developer_listed_once_per_role() -> None:
    devs = [_dev("amy", "lead", "Lead (again)")]
    assert role_holders(devs, "lead") == [("amy", "Amy")]


def test_founders_include_contributors() -> None:
    devs = [_dev("ctrueden", "founder", "lead")]
    contributors = [
        Contributor(id="hinerm", name="Mark Hiner", roles=("Founder (retired)",)),
        Contributor(name="Jane Doe", roles=("reviewer",)),
        Contributor(name="Jim Roe", roles=("founder",)),
    ]
    assert founders(devs, contributors) == [
        ("ctrueden", "Ctrueden"),
        ("hinerm", "Mark Hiner"),
        (None, "Jim Roe"),
    ]


def test_other_developers_list_unknown_roles_only() -> None:
    devs = [
        _dev("amy", "lead", "architect", "Release Manager (2019)", name="Amy Adams"),
        _dev("bob", "developer", "SUPPORT"),
        _dev("cat", "tester", name="Cat Cole"),
    ]
    assert other_developers(devs) == [
        "Amy Adams (architect, Release Manager)",
        "Cat Cole (tester)",
    ]


def test_property_number() -> None:
    pom = make_pom(
        "g:a:1",
        properties={"n": "3", "neg": "-2", "junk": "three", "spaced": " 4"},
    )
    assert property_number(pom, "n") == 3
    assert property_number(pom, "neg") == -2
    assert property_number(pom, "junk") == -1
    assert property_number(pom, "spaced") == -1
    assert property_number(pom, "absent") == -1


def test_property_flag() -> None:
    pom = make_pom("g:a:1", properties={"yes": "TRUE", "no": "yes"})
    assert property_flag(pom, "yes")
    assert not property_flag(pom, "no")
    assert not property_flag(pom, "absent")


def test_needed_roles_reports_shortfalls_only() -> None:
    pom = make_pom(
        "g:a:1",
        properties={
            "scijava.team.leads": "2",
            "scijava.team.developers": "1",
            "scijava.team.supports": "3",
            "scijava.team.reviewers": "many",
            "scijava.team.maintainers": "0",
        },
    )
    team = classify([_dev("amy", "lead", "developer"), _dev("bob", "support")], [])
    assert needed_roles(pom, team) == ["leads (1)", "support (2)"]


def test_needed_roles_without_targets() -> None:
    team = classify([], [])
    assert needed_roles(make_pom("g:a:1"), team) == []


@pytest.mark.parametrize("target", range(0, 5))
def test_needed_roles_monotonic_in_target(target: int) -> None:
    team = classify([_dev("amy", "debugger"), _dev("bob", "debugger")], [])

    def shortfall(n: int) -> list[str]:
        return needed_roles(make_pom("g:a:1", properties={"scijava.team.debuggers": str(n)}), team)

    before, after = shortfall(target), shortfall(target + 1)
    if target + 1 <= 2:
        assert before == after == []
    else:
        assert after == [f"debuggers ({target + 1 - 2})"]
        assert before == ([] if target <= 2 else [f"debuggers ({target - 2})"])


def test_classify_collects_every_known_role() -> None:
    devs = [
        _dev("a", "founder"),
        _dev("b", "lead", "maintainer"),
        _dev("c", "reviewer", "debugger", "support"),
    ]
    team = classify(devs, [Contributor(id="d", roles=("founder",))])
    assert team.members("founder") == [("a", "A"), ("d", None)]
    assert team.members("lead") == [("b", "B")]
    assert team.members("maintainer") == [("b", "B")]
    assert team.members("developer") == []
    assert [m[0] for m in team.members("debugger")] == ["c"]
    assert team.other_devs == []
