from __future__ import annotations

"""
Tree Query Engine.

Read-only traversals over a forest: descendant and whole-forest id
enumeration, lookup by id, ancestry, and substring search producing a
pruned forest that keeps the paths leading to every match. No function
mutates its input; pruned forests share untouched subtrees with the
original.
"""

import logging
from collections import OrderedDict
from typing import Dict, Iterator, List, Optional, Tuple

from hierfilter.domain.constants import SEARCH_CACHE_SIZE
from hierfilter.domain.tree_models import Forest, Node

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# TRAVERSALS
# -----------------------------------------------------------------------------

def iter_preorder(forest: Forest) -> Iterator[Node]:
    """Yield every node of the forest in pre-order, in forest order."""
    stack: List[Node] = list(reversed(forest))
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def descendant_ids(node: Node) -> List[str]:
    """
    Enumerate the ids of a node's subtree in pre-order, excluding the node.

    Args:
        node: Subtree root.

    Returns:
        List[str]: Descendant ids in forest order.
    """
    return [n.id for n in iter_preorder(node.children)]


def all_ids(forest: Forest) -> List[str]:
    """Enumerate every id of the forest in pre-order."""
    return [n.id for n in iter_preorder(forest)]


def count_nodes(forest: Forest) -> int:
    return sum(1 for _ in iter_preorder(forest))


def find_by_id(forest: Forest, node_id: str) -> Optional[Node]:
    """
    Locate a node by id; the first match in pre-order wins.

    Args:
        forest: Forest to search.
        node_id: Id to look for.

    Returns:
        Optional[Node]: The node, or None when absent.
    """
    for node in iter_preorder(forest):
        if node.id == node_id:
            return node
    return None


def ancestor_ids(forest: Forest, node_id: str) -> List[str]:
    """
    Return the ids on the path from a root down to the node's parent.

    Returns an empty list for roots and for unknown ids.
    """
    stack: List[Tuple[Node, Tuple[str, ...]]] = [(n, ()) for n in reversed(forest)]
    while stack:
        node, path = stack.pop()
        if node.id == node_id:
            return list(path)
        child_path = path + (node.id,)
        stack.extend((child, child_path) for child in reversed(node.children))
    return []


def node_depths(forest: Forest) -> Dict[str, int]:
    """Map every id to its depth (roots are depth 0)."""
    depths: Dict[str, int] = {}
    stack: List[Tuple[Node, int]] = [(n, 0) for n in reversed(forest)]
    while stack:
        node, depth = stack.pop()
        depths.setdefault(node.id, depth)
        stack.extend((child, depth + 1) for child in reversed(node.children))
    return depths

# -----------------------------------------------------------------------------
# SEARCH
# -----------------------------------------------------------------------------

def normalize_term(term: Optional[str]) -> str:
    """Canonical form of a search term; empty means no filter."""
    return (term or "").strip().casefold()


def matches(node: Node, needle: str) -> bool:
    """Case-insensitive substring match against display label or id."""
    return needle in node.match_key.casefold() or needle in node.display_label.casefold()


def search_tree(forest: Forest, term: Optional[str]) -> Forest:
    """
    Prune the forest to the nodes matching a term and their ancestors.

    A node that matches directly while none of its descendants match keeps
    its whole original subtree. A node that does not match keeps only the
    children that survive pruning.

    Args:
        forest: Forest to filter.
        term: Search text; empty or whitespace returns the forest unchanged.

    Returns:
        Forest: Pruned forest (the same object when no filter applies).
    """
    needle = normalize_term(term)
    if not needle:
        return forest
    return _prune(forest, needle)


def _prune(nodes: Forest, needle: str) -> Forest:
    result: List[Node] = []
    for node in nodes:
        is_match = matches(node, needle)
        kept = _prune(node.children, needle) if node.children else ()

        if kept:
            if _same_nodes(kept, node.children):
                result.append(node)
            else:
                result.append(Node(
                    id=node.id,
                    match_key=node.match_key,
                    display_label=node.display_label,
                    parent_id=node.parent_id,
                    children=kept,
                ))
        elif is_match:
            result.append(node)
    return tuple(result)


def _same_nodes(left: Forest, right: Forest) -> bool:
    return len(left) == len(right) and all(a is b for a, b in zip(left, right))


class SearchCache:
    """
    Memoised search keyed by (forest version, normalised term).

    Each forest build gets a new version; results for older versions are
    dropped on first use of a newer one.
    """

    def __init__(self, max_entries: int = SEARCH_CACHE_SIZE):
        self._max_entries = max_entries
        self._version = -1
        self._entries: "OrderedDict[str, Forest]" = OrderedDict()
        self.hits = 0
        self.misses = 0

    def search(self, forest: Forest, version: int, term: Optional[str]) -> Forest:
        """
        Return the pruned forest for a term, computing it at most once per version.

        Args:
            forest: Forest the version number identifies.
            version: Monotonic build stamp of the forest.
            term: Raw search text.

        Returns:
            Forest: Pruned forest.
        """
        needle = normalize_term(term)
        if not needle:
            return forest

        if version != self._version:
            self._entries.clear()
            self._version = version

        cached = self._entries.get(needle)
        if cached is not None:
            self._entries.move_to_end(needle)
            self.hits += 1
            return cached

        self.misses += 1
        pruned = _prune(forest, needle)
        self._entries[needle] = pruned
        if len(self._entries) > self._max_entries:
            self._entries.popitem(last=False)
        return pruned

    def clear(self) -> None:
        self._entries.clear()
        self._version = -1
