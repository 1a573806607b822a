from __future__ import annotations

"""
Unit tests for the Hierarchy Builder.

Verifies:
1. Forest shape, sibling ordering and display labels.
2. Orphan, self-reference and cycle promotion to root.
3. First-wins resolution of duplicate entity ids.
4. Determinism of repeated builds over the same rows.
"""

import logging
import random

from hierfilter.core.hierarchy.builder import build_hierarchy
from hierfilter.core.hierarchy.query import all_ids, descendant_ids, find_by_id
from hierfilter.domain.constants import DEMO_ROWS
from hierfilter.domain.tree_models import Row


def _rows(*pairs):
    return [{"user": user, "leader": leader} for user, leader in pairs]


def _build(rows, **kwargs):
    return build_hierarchy(rows, user_key="user", leader_key="leader", **kwargs)


# -----------------------------------------------------------------------------
# SHAPE & ORDER
# -----------------------------------------------------------------------------

def test_scenario_single_chain() -> None:
    """TC-01: Carlos -> María -> Juan forms one root with nested children."""
    forest = _build(_rows(("Carlos", None), ("María", "Carlos"), ("Juan", "María")))

    assert [n.id for n in forest] == ["Carlos"]
    carlos = forest[0]
    assert [c.id for c in carlos.children] == ["María"]
    assert [c.id for c in carlos.children[0].children] == ["Juan"]
    assert descendant_ids(carlos) == ["María", "Juan"]


def test_siblings_sorted_by_label(scenario_forest) -> None:
    """TC-02: Siblings are ordered alphabetically by display label."""
    carlos = scenario_forest[0]
    assert [c.id for c in carlos.children] == ["Ana", "María"]
    assert descendant_ids(carlos) == ["Ana", "Luis", "María", "Juan", "Pedro"]


def test_sort_is_case_insensitive_with_id_tiebreak() -> None:
    """TC-03: 'bob' sorts before 'Carl'; equal labels fall back to the id."""
    rows = [
        {"user": "u2", "leader": None, "name": "Same"},
        {"user": "Carl", "leader": None, "name": "Carl"},
        {"user": "u1", "leader": None, "name": "Same"},
        {"user": "bob", "leader": None, "name": "bob"},
    ]
    forest = _build(rows, display_key="name")
    assert [n.id for n in forest] == ["bob", "Carl", "u1", "u2"]


def test_display_label_defaults_to_id() -> None:
    """TC-04: Missing or empty display values fall back to the entity id."""
    rows = [
        {"user": "a", "leader": None, "name": "Alice"},
        {"user": "b", "leader": "a", "name": ""},
    ]
    forest = _build(rows, display_key="name")
    assert forest[0].display_label == "Alice"
    assert forest[0].match_key == "a"
    assert forest[0].children[0].display_label == "b"


def test_accepts_row_objects() -> None:
    """TC-05: Row instances are read through attribute access."""
    rows = [Row("Carlos"), Row("María", "Carlos", "María López")]
    forest = build_hierarchy(rows, display_key="display_label")

    assert forest[0].children[0].display_label == "María López"
    assert forest[0].children[0].parent_id == "Carlos"


def test_empty_input_gives_empty_forest() -> None:
    assert build_hierarchy([]) == ()


def test_rows_without_entity_are_skipped() -> None:
    """TC-06: Rows with an empty entity id never become nodes."""
    forest = _build(_rows(("", None), (None, "x"), ("Solo", None)))
    assert all_ids(forest) == ["Solo"]

# -----------------------------------------------------------------------------
# DATA ERROR POLICIES
# -----------------------------------------------------------------------------

def test_dangling_parent_becomes_root() -> None:
    """TC-07: A leader that does not exist promotes the row to root."""
    forest = _build(_rows(("Carlos", None), ("Eva", "Ghost")))

    assert sorted(n.id for n in forest) == ["Carlos", "Eva"]
    eva = find_by_id(forest, "Eva")
    assert eva.parent_id == "Ghost"


def test_self_parent_becomes_root() -> None:
    forest = _build(_rows(("Narciso", "Narciso")))
    assert [n.id for n in forest] == ["Narciso"]
    assert forest[0].is_leaf


def test_cycle_is_broken_at_first_member(caplog) -> None:
    """TC-08: A -> B -> C -> A keeps every member; A (first in input) becomes root."""
    with caplog.at_level(logging.WARNING):
        forest = _build(_rows(("A", "C"), ("B", "A"), ("C", "B")))

    assert [n.id for n in forest] == ["A"]
    assert descendant_ids(forest[0]) == ["B", "C"]
    assert "Cyclic leader reference" in caplog.text


def test_cycle_next_to_valid_tree() -> None:
    forest = _build(_rows(("Root", None), ("Kid", "Root"), ("X", "Y"), ("Y", "X")))

    assert sorted(all_ids(forest)) == ["Kid", "Root", "X", "Y"]
    assert {n.id for n in forest} == {"Root", "X"}


def test_entity_below_cycle_keeps_its_leader() -> None:
    """
    TC-08b: Only a loop member is promoted; C listed first still hangs under A.

    C -> A, A -> B, B -> A: C is unreachable but not on the loop.
    """
    forest = _build(_rows(("C", "A"), ("A", "B"), ("B", "A")))

    assert [n.id for n in forest] == ["A"]
    assert [c.id for c in forest[0].children] == ["B", "C"]
    assert find_by_id(forest, "C").parent_id == "A"
    assert sorted(all_ids(forest)) == ["A", "B", "C"]


def test_long_chain_below_cycle() -> None:
    rows = [(f"n{i}", f"n{i - 1}") for i in range(1, 50)]
    rows.reverse()
    rows += [("n0", "loop"), ("loop", "n0")]

    forest = _build(_rows(*rows))

    assert [n.id for n in forest] == ["n0"]
    assert len(all_ids(forest)) == 51
    assert find_by_id(forest, "n1").parent_id == "n0"


def test_duplicate_ids_first_wins() -> None:
    """
    TC-09: Duplicate entity ids keep the first row.

    First-wins is a policy choice; the later row (with a different
    leader) is dropped entirely.
    """
    forest = _build(_rows(("Boss", None), ("Other", None), ("Dup", "Boss"), ("Dup", "Other")))

    assert all_ids(forest).count("Dup") == 1
    assert find_by_id(forest, "Dup").parent_id == "Boss"
    assert find_by_id(forest, "Other").is_leaf

# -----------------------------------------------------------------------------
# PROPERTIES
# -----------------------------------------------------------------------------

def test_every_row_appears_exactly_once() -> None:
    """TC-10: allIds length equals the number of distinct non-empty ids."""
    rng = random.Random(7)
    ids = [f"n{i}" for i in range(60)]
    rows = []
    for entity in ids:
        leader = rng.choice(ids + [None, None, "missing"])
        rows.append({"user": entity, "leader": leader})

    forest = _build(rows)
    found = all_ids(forest)

    assert len(found) == len(ids)
    assert set(found) == set(ids)


def test_build_is_idempotent() -> None:
    """TC-11: Two builds over the same rows are deeply equal."""
    first = build_hierarchy(DEMO_ROWS, user_key="Usuario", leader_key="Lider")
    second = build_hierarchy(DEMO_ROWS, user_key="Usuario", leader_key="Lider")

    assert first == second
    assert first is not second


def test_demo_organisation_shape() -> None:
    forest = build_hierarchy(DEMO_ROWS, user_key="Usuario", leader_key="Lider")

    assert [n.id for n in forest] == ["Carlos"]
    assert len(all_ids(forest)) == len(DEMO_ROWS)
    roberto = find_by_id(forest, "Roberto")
    assert [c.id for c in roberto.children] == ["Fernando", "Isabel"]


def test_deep_chain_does_not_recurse() -> None:
    """TC-12: Very deep hierarchies build without hitting the recursion limit."""
    depth = 5000
    rows = [{"user": "n0", "leader": None}]
    rows += [{"user": f"n{i}", "leader": f"n{i - 1}"} for i in range(1, depth)]

    forest = _build(rows)

    assert len(all_ids(forest)) == depth
