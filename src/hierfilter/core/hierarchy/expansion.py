from __future__ import annotations

"""
Expansion Model.

Tracks which nodes are expanded, independently of selection. An active
search forces every path of the filtered forest open; clearing the search
leaves the expanded set as it was.
"""

from typing import FrozenSet, Iterable, Optional

from hierfilter.core.hierarchy.query import all_ids, normalize_term
from hierfilter.domain.tree_models import Forest

Expansion = FrozenSet[str]


def toggle_expanded(expanded: Iterable[str], node_id: str) -> Expansion:
    current = frozenset(expanded)
    if node_id in current:
        return current - {node_id}
    return current | {node_id}


def expand_all(forest: Forest) -> Expansion:
    return frozenset(all_ids(forest))


def collapse_all() -> Expansion:
    return frozenset()


def prune_expanded(expanded: Iterable[str], forest: Forest) -> Expansion:
    return frozenset(expanded) & frozenset(all_ids(forest))


class ExpansionModel:
    """Holds the expanded id set and the last search term it was synced to."""

    def __init__(self, expanded: Iterable[str] = ()):
        self.expanded: Expansion = frozenset(expanded)
        self._synced_term = ""

    def is_expanded(self, node_id: str) -> bool:
        return node_id in self.expanded

    def toggle(self, node_id: str) -> Expansion:
        self.expanded = toggle_expanded(self.expanded, node_id)
        return self.expanded

    def expand_all(self, forest: Forest) -> Expansion:
        self.expanded = expand_all(forest)
        return self.expanded

    def collapse_all(self) -> Expansion:
        self.expanded = collapse_all()
        return self.expanded

    def prune(self, forest: Forest) -> Expansion:
        self.expanded = prune_expanded(self.expanded, forest)
        return self.expanded

    def sync_search(
            self,
            term: Optional[str],
            filtered: Forest,
            force: bool = False,
    ) -> Expansion:
        """
        Force the expanded set open when the active search term changes.

        One-way: an empty term only resets the sync marker, it never
        collapses anything.

        Args:
            term: Raw search text.
            filtered: Forest produced by the search.
            force: Re-sync an unchanged term after the forest was rebuilt.

        Returns:
            Expansion: The (possibly forced) expanded set.
        """
        needle = normalize_term(term)
        if needle and (force or needle != self._synced_term):
            self.expanded = expand_all(filtered)
        self._synced_term = needle
        return self.expanded
