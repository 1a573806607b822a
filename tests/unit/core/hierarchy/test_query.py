from __future__ import annotations

"""
Unit tests for the Tree Query Engine.

Covers traversal order, lookups, ancestry, substring search with
ancestor-path retention, and the versioned search cache.
"""

from hierfilter.core.hierarchy.query import (
    SearchCache,
    all_ids,
    ancestor_ids,
    count_nodes,
    descendant_ids,
    find_by_id,
    iter_preorder,
    matches,
    node_depths,
    normalize_term,
    search_tree,
)
from hierfilter.domain.tree_models import Forest


def _ids(forest: Forest):
    return all_ids(forest)


def _assert_search_law(result: Forest, needle: str, revealed: bool = False) -> None:
    """
    Every kept node matches, has a matching descendant, or sits below a
    direct hit whose own descendants do not match (full subtree revealed).
    """
    for node in result:
        below_match = any(matches(n, needle) for n in iter_preorder(node.children))
        assert revealed or matches(node, needle) or below_match, node.id

        reveals = revealed or (matches(node, needle) and not below_match)
        _assert_search_law(node.children, needle, reveals)

# -----------------------------------------------------------------------------
# TRAVERSALS
# -----------------------------------------------------------------------------

def test_all_ids_preorder(scenario_forest) -> None:
    assert all_ids(scenario_forest) == ["Carlos", "Ana", "Luis", "María", "Juan", "Pedro"]
    assert count_nodes(scenario_forest) == 6


def test_descendant_ids_of_leaf_is_empty(scenario_forest) -> None:
    assert descendant_ids(find_by_id(scenario_forest, "Juan")) == []


def test_find_by_id(scenario_forest) -> None:
    assert find_by_id(scenario_forest, "Pedro").parent_id == "María"
    assert find_by_id(scenario_forest, "Nobody") is None


def test_ancestor_ids(scenario_forest) -> None:
    assert ancestor_ids(scenario_forest, "Juan") == ["Carlos", "María"]
    assert ancestor_ids(scenario_forest, "Carlos") == []
    assert ancestor_ids(scenario_forest, "Nobody") == []


def test_node_depths(scenario_forest) -> None:
    depths = node_depths(scenario_forest)
    assert depths["Carlos"] == 0
    assert depths["Ana"] == 1
    assert depths["Juan"] == 2

# -----------------------------------------------------------------------------
# SEARCH
# -----------------------------------------------------------------------------

def test_empty_term_returns_same_forest(scenario_forest) -> None:
    """TC-01: Empty and whitespace-only terms are 'no filter'."""
    assert search_tree(scenario_forest, "") is scenario_forest
    assert search_tree(scenario_forest, "   ") is scenario_forest
    assert search_tree(scenario_forest, None) is scenario_forest


def test_search_keeps_ancestor_path(scenario_forest) -> None:
    """TC-02: 'juan' keeps Carlos -> María -> Juan only."""
    result = search_tree(scenario_forest, "juan")

    assert _ids(result) == ["Carlos", "María", "Juan"]
    _assert_search_law(result, "juan")


def test_search_is_case_insensitive(scenario_forest) -> None:
    assert _ids(search_tree(scenario_forest, "PEDRO")) == ["Carlos", "María", "Pedro"]
    assert normalize_term("  JuAn ") == "juan"


def test_direct_hit_reveals_whole_subtree(scenario_forest) -> None:
    """TC-03: A matching node with no matching descendants keeps all its children."""
    result = search_tree(scenario_forest, "maría")
    maria = find_by_id(result, "María")

    assert [c.id for c in maria.children] == ["Juan", "Pedro"]
    # The untouched subtree is shared with the original forest
    assert maria is find_by_id(scenario_forest, "María")


def test_search_matches_id_when_label_differs() -> None:
    from hierfilter.core.hierarchy.builder import build_hierarchy

    rows = [
        {"user": "u-100", "leader": None, "name": "Zoe"},
        {"user": "u-200", "leader": "u-100", "name": "Yann"},
    ]
    forest = build_hierarchy(rows, user_key="user", leader_key="leader", display_key="name")

    assert _ids(search_tree(forest, "200")) == ["u-100", "u-200"]
    assert _ids(search_tree(forest, "yann")) == ["u-100", "u-200"]


def test_search_without_matches_is_empty(scenario_forest) -> None:
    assert search_tree(scenario_forest, "zzz") == ()


def test_search_does_not_mutate_input(scenario_forest) -> None:
    before = _ids(scenario_forest)
    search_tree(scenario_forest, "luis")
    assert _ids(scenario_forest) == before


def test_direct_hit_reveals_non_matching_children(scenario_forest) -> None:
    """A leaf-level miss below a matching leader stays visible."""
    result = search_tree(scenario_forest, "ana")

    assert _ids(result) == ["Carlos", "Ana", "Luis"]


def test_search_law_over_many_terms(scenario_forest) -> None:
    for term in ["a", "r", "o", "lu", "ped", "x"]:
        _assert_search_law(search_tree(scenario_forest, term), normalize_term(term))

# -----------------------------------------------------------------------------
# SEARCH CACHE
# -----------------------------------------------------------------------------

def test_cache_hits_within_version(scenario_forest) -> None:
    cache = SearchCache()

    first = cache.search(scenario_forest, 1, "juan")
    second = cache.search(scenario_forest, 1, " JUAN ")

    assert first is second
    assert cache.misses == 1
    assert cache.hits == 1


def test_cache_invalidated_by_new_version(scenario_forest) -> None:
    cache = SearchCache()
    cache.search(scenario_forest, 1, "juan")
    cache.search(scenario_forest, 2, "juan")

    assert cache.misses == 2
    assert cache.hits == 0


def test_cache_evicts_least_recently_used(scenario_forest) -> None:
    cache = SearchCache(max_entries=2)
    cache.search(scenario_forest, 1, "a")
    cache.search(scenario_forest, 1, "b")
    cache.search(scenario_forest, 1, "a")  # refresh 'a'
    cache.search(scenario_forest, 1, "c")  # evicts 'b'

    cache.search(scenario_forest, 1, "a")
    assert cache.hits == 2
    cache.search(scenario_forest, 1, "b")
    assert cache.misses == 4


def test_cache_empty_term_bypasses_storage(scenario_forest) -> None:
    cache = SearchCache()
    assert cache.search(scenario_forest, 1, "") is scenario_forest
    assert cache.hits == 0 and cache.misses == 0
