from __future__ import annotations

"""
Hierarchy Builder.

Converts flat (entity, leader) rows into an immutable forest. Duplicate
entities resolve first-wins; dangling, self-referencing and cyclic leader
references are promoted to roots so every entity appears exactly once.
"""

import locale
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from hierfilter.domain.constants import ENTITY_KEY, PARENT_KEY
from hierfilter.domain.tree_models import Forest, Node, Row

logger = logging.getLogger(__name__)

RowLike = Union[Row, Mapping[str, Any]]

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def build_hierarchy(
        rows: Sequence[RowLike],
        user_key: str = ENTITY_KEY,
        leader_key: str = PARENT_KEY,
        display_key: Optional[str] = None,
) -> Forest:
    """
    Build a sorted forest from flat rows.

    Leader values are used as given: empty and null-like values must be
    normalised to None before they reach this function (see Row.from_record).

    Args:
        rows: Row instances or mappings, in host order.
        user_key: Field holding the entity key.
        leader_key: Field holding the leader key.
        display_key: Optional field holding the display label.

    Returns:
        Forest: Root nodes sorted by display label, then id.
    """
    # 1. Node registry (first occurrence wins)
    order: List[str] = []
    parents: Dict[str, Optional[str]] = {}
    labels: Dict[str, str] = {}
    skipped = 0
    duplicates = 0

    for row in rows:
        entity = _field(row, user_key)
        if not entity:
            skipped += 1
            continue
        entity = str(entity)
        if entity in parents:
            duplicates += 1
            continue

        leader = _field(row, leader_key)
        label = _field(row, display_key) if display_key else None

        order.append(entity)
        parents[entity] = None if leader is None else str(leader)
        labels[entity] = str(label) if label else entity

    # 2. Parent-child linking with orphan promotion
    children: Dict[str, List[str]] = {entity: [] for entity in order}
    roots: List[str] = []
    orphans = 0

    for entity in order:
        leader = parents[entity]
        if leader is not None and leader != entity and leader in children:
            children[leader].append(entity)
        else:
            if leader is not None:
                orphans += 1
            roots.append(entity)

    # 3. Cycle members never reach a root; promote one per cycle
    promoted = _promote_cycles(order, parents, children, roots)

    forest = _freeze(roots, children, parents, labels)

    logger.debug(
        f"Hierarchy built: {len(order)} nodes, {len(forest)} roots "
        f"(skipped={skipped}, duplicates={duplicates}, orphans={orphans}, "
        f"cycles={promoted})"
    )
    return forest


def sort_key(node: Node) -> Tuple[str, str]:
    """Sibling ordering: display label (case-insensitive, locale-aware), then id."""
    return _collation_key(node.display_label), node.match_key

# -----------------------------------------------------------------------------
# INTERNAL HELPERS
# -----------------------------------------------------------------------------

def _field(row: RowLike, key: Optional[str]) -> Any:
    """Read a field from a mapping or a Row-like object."""
    if key is None:
        return None
    if isinstance(row, Mapping):
        return row.get(key)
    return getattr(row, key, None)


def _collation_key(label: str) -> str:
    try:
        return locale.strxfrm(label.casefold())
    except (ValueError, OSError):
        return label.casefold()


def _promote_cycles(
        order: List[str],
        parents: Dict[str, Optional[str]],
        children: Dict[str, List[str]],
        roots: List[str],
) -> int:
    """
    Detach cycles from the parent map so their members become reachable.

    An unreachable entity either sits on a cycle or hangs below one.
    Following its leaders always ends on the loop; the loop member that
    comes first in input order is cut from its leader's child list and
    promoted to root. Entities hanging below keep their leaders.

    Returns:
        int: Number of promoted entities.
    """
    reachable = set()
    stack = list(roots)
    while stack:
        current = stack.pop()
        reachable.add(current)
        stack.extend(children[current])

    if len(reachable) == len(order):
        return 0

    position = {entity: i for i, entity in enumerate(order)}
    promoted = 0
    for entity in order:
        if entity in reachable:
            continue

        # Walk up until an id repeats; the tail from that id is the loop
        path: List[str] = []
        seen: Dict[str, int] = {}
        current = entity
        while current not in seen:
            seen[current] = len(path)
            path.append(current)
            current = parents[current]  # type: ignore[assignment]
        cycle = path[seen[current]:]
        head = min(cycle, key=position.__getitem__)

        children[parents[head]].remove(head)  # type: ignore[index]
        roots.append(head)
        promoted += 1
        logger.warning(f"Cyclic leader reference detected; '{head}' promoted to root.")

        stack = [head]
        while stack:
            current = stack.pop()
            reachable.add(current)
            stack.extend(children[current])

    return promoted


def _freeze(
        roots: List[str],
        children: Dict[str, List[str]],
        parents: Dict[str, Optional[str]],
        labels: Dict[str, str],
) -> Forest:
    """
    Materialise immutable, sorted nodes bottom-up without recursion.
    """
    # Post-order via reversed pre-order
    visit: List[str] = []
    stack = list(roots)
    while stack:
        current = stack.pop()
        visit.append(current)
        stack.extend(children[current])

    built: Dict[str, Node] = {}
    for entity in reversed(visit):
        kids = sorted((built[c] for c in children[entity]), key=sort_key)
        built[entity] = Node(
            id=entity,
            match_key=entity,
            display_label=labels[entity],
            parent_id=parents[entity],
            children=tuple(kids),
        )

    return tuple(sorted((built[r] for r in roots), key=sort_key))
