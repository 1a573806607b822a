from __future__ import annotations

"""
Tree Renderer.

Converts a forest into a visual ASCII representation honouring the
current expansion and selection state: checkbox marks reflect the
tri-state, collapsed branches show a '+' marker and every branch carries
a direct-children count badge.
"""

from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from hierfilter.core.hierarchy.selection import tri_state
from hierfilter.domain.tree_models import CheckState, Forest, Node

CHECK_MARKS: Dict[CheckState, str] = {
    CheckState.CHECKED: "[x]",
    CheckState.UNCHECKED: "[ ]",
    CheckState.INDETERMINATE: "[-]",
}

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def render_forest(
        forest: Forest,
        selected: FrozenSet[str] = frozenset(),
        expanded: Optional[FrozenSet[str]] = None,
) -> List[str]:
    """
    Render the visible part of a forest as a list of lines.

    Args:
        forest: Forest to render (usually the search-filtered one).
        selected: Selected ids, used for checkbox marks.
        expanded: Expanded ids; None renders every branch open.

    Returns:
        List[str]: Visual lines, one per visible node.
    """
    lines: List[str] = []
    render_tree_structure(forest, lines, selected, expanded, prefix="")
    return lines


def render_tree_structure(
        nodes: Forest,
        lines: List[str],
        selected: FrozenSet[str],
        expanded: Optional[FrozenSet[str]],
        prefix: str = "",
) -> None:
    """
    Recursively transform sibling nodes into output lines.

    Uses standard ASCII connectors (├──, └──) and manages indentation
    levels for nested branches.

    Args:
        nodes: Sibling nodes at the current level.
        lines: Accumulator list for output strings.
        selected: Selected ids.
        expanded: Expanded ids (None means all).
        prefix: Indentation prefix for the current recursion level.
    """
    total = len(nodes)

    for i, node in enumerate(nodes):
        is_last = (i == total - 1)
        connector = "└── " if is_last else "├── "
        mark = CHECK_MARKS[tri_state(node, selected)]

        # Scenario A: Leaf entry
        if node.is_leaf:
            lines.append(f"{prefix}{connector}{mark} {node.display_label}")
            continue

        # Scenario B: Branch, open or collapsed
        is_open = expanded is None or node.id in expanded
        toggle = "" if is_open else "+ "
        badge = f" ({len(node.children)})"
        lines.append(f"{prefix}{connector}{toggle}{mark} {node.display_label}{badge}")

        if is_open:
            new_prefix = prefix + ("    " if is_last else "│   ")
            render_tree_structure(node.children, lines, selected, expanded, prefix=new_prefix)


def forest_to_dicts(forest: Forest, selected: FrozenSet[str] = frozenset()) -> List[Dict[str, Any]]:
    """
    Convert a forest into JSON-ready nested dictionaries.

    Each entry carries id, label, parent, tri-state and children.
    """
    return [
        {
            "id": node.id,
            "label": node.display_label,
            "parent_id": node.parent_id,
            "state": tri_state(node, selected).value,
            "children": forest_to_dicts(node.children, selected),
        }
        for node in forest
    ]


def visible_rows(forest: Forest, expanded: FrozenSet[str]) -> List[Tuple[Node, int]]:
    """
    Flatten the forest into (node, depth) pairs for list-style widgets.

    Children of a collapsed branch are omitted. Order is pre-order.
    """
    rows: List[Tuple[Node, int]] = []
    stack: List[Tuple[Node, int]] = [(node, 0) for node in reversed(forest)]
    while stack:
        node, depth = stack.pop()
        rows.append((node, depth))
        if node.children and node.id in expanded:
            stack.extend((child, depth + 1) for child in reversed(node.children))
    return rows
