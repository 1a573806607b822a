from __future__ import annotations

"""
Selection Model.

Multi-select over a forest with cascading semantics: selecting or
deselecting a node applies to its entire subtree. State transitions are
pure functions over frozensets; SelectionModel wraps them for callers that
want a stateful object that notifies listeners (the host filter sink).
"""

import logging
from typing import Callable, FrozenSet, Iterable, List

from hierfilter.core.hierarchy.query import all_ids, descendant_ids
from hierfilter.domain.tree_models import CheckState, Forest, Node

logger = logging.getLogger(__name__)

Selection = FrozenSet[str]
SelectionListener = Callable[[Selection], None]

# -----------------------------------------------------------------------------
# PURE TRANSITIONS
# -----------------------------------------------------------------------------

def toggle_selection(selected: Iterable[str], node: Node, target: bool) -> Selection:
    """
    Select or deselect a node together with all of its descendants.

    The previous state of the subtree is irrelevant: the whole subtree ends
    up in the target state.

    Args:
        selected: Current selection.
        node: Node the user toggled.
        target: True to select, False to deselect.

    Returns:
        Selection: The new selection.
    """
    subtree = {node.id, *descendant_ids(node)}
    current = frozenset(selected)
    if target:
        return current | subtree
    return current - subtree


def tri_state(node: Node, selected: Selection) -> CheckState:
    """
    Classify a node's selection relative to its subtree.

    A selected internal node whose descendants are all unselected reports
    INDETERMINATE rather than CHECKED; cascading toggles never produce that
    state, only direct set manipulation does.

    Args:
        node: Node to classify.
        selected: Current selection.

    Returns:
        CheckState: checked, unchecked or indeterminate.
    """
    is_selected = node.id in selected
    if node.is_leaf:
        return CheckState.CHECKED if is_selected else CheckState.UNCHECKED

    descendants = descendant_ids(node)
    selected_count = sum(1 for d in descendants if d in selected)

    if is_selected and selected_count == len(descendants):
        return CheckState.CHECKED
    if is_selected or selected_count > 0:
        return CheckState.INDETERMINATE
    return CheckState.UNCHECKED


def next_target(node: Node, selected: Selection) -> bool:
    """A click selects the subtree unless the node is fully checked already."""
    return tri_state(node, selected) is not CheckState.CHECKED


def select_all(forest: Forest) -> Selection:
    return frozenset(all_ids(forest))


def clear_selection() -> Selection:
    return frozenset()


def prune_selection(selected: Iterable[str], forest: Forest) -> Selection:
    """Drop ids that no longer exist in the forest."""
    return frozenset(selected) & frozenset(all_ids(forest))

# -----------------------------------------------------------------------------
# STATEFUL WRAPPER
# -----------------------------------------------------------------------------

class SelectionModel:
    """
    Holds the selected id set and emits every change to its listeners.
    """

    def __init__(self, selected: Iterable[str] = ()):
        self._selected: Selection = frozenset(selected)
        self._listeners: List[SelectionListener] = []

    @property
    def selected(self) -> Selection:
        return self._selected

    def subscribe(self, listener: SelectionListener) -> None:
        """Register a callback receiving the new selection after each mutation."""
        self._listeners.append(listener)

    def toggle(self, node: Node, target: bool) -> Selection:
        return self._commit(toggle_selection(self._selected, node, target))

    def click(self, node: Node) -> Selection:
        """Apply the checkbox rule: fully checked nodes clear, others select."""
        return self.toggle(node, next_target(node, self._selected))

    def select_all(self, forest: Forest) -> Selection:
        return self._commit(select_all(forest))

    def clear(self) -> Selection:
        return self._commit(clear_selection())

    def prune(self, forest: Forest) -> Selection:
        """Remove stale ids after a rebuild; listeners hear only real changes."""
        pruned = prune_selection(self._selected, forest)
        if pruned == self._selected:
            return pruned
        logger.debug(f"Selection pruned: {len(self._selected) - len(pruned)} stale id(s)")
        return self._commit(pruned)

    def tri_state(self, node: Node) -> CheckState:
        return tri_state(node, self._selected)

    def _commit(self, selected: Selection) -> Selection:
        self._selected = selected
        for listener in list(self._listeners):
            listener(selected)
        return selected
