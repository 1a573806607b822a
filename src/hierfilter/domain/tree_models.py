from __future__ import annotations

"""
Hierarchy Data Models.

Provides the immutable structures shared by the hierarchy engine: the flat
Row read from the host, the recursive Node and the Forest of roots, plus
the tri-state classification used for checkbox display.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional, Tuple

from hierfilter.domain.constants import NULL_SENTINELS

# -----------------------------------------------------------------------------
# STRUCTURAL COMPONENTS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class Row:
    """
    Flat record describing one entity and its leader.

    Attributes:
        entity_id: Unique key of the entity.
        parent_id: Key of the leader, or None for a root.
        display_label: Optional label shown instead of the key.
    """
    entity_id: str
    parent_id: Optional[str] = None
    display_label: Optional[str] = None

    @classmethod
    def from_record(
            cls,
            record: Mapping[str, Any],
            user_key: str,
            leader_key: str,
            display_key: Optional[str] = None,
    ) -> "Row":
        """
        Adapt a host record into a Row, normalising null leader values.

        Args:
            record: Raw mapping of field name to formatted value.
            user_key: Field holding the entity key.
            leader_key: Field holding the leader key.
            display_key: Optional field holding the display label.

        Returns:
            Row: The normalised row.
        """
        entity = record.get(user_key)
        leader = record.get(leader_key)
        label = record.get(display_key) if display_key else None

        return cls(
            entity_id="" if entity is None else str(entity).strip(),
            parent_id=normalize_parent(leader),
            display_label=None if label is None else str(label),
        )


@dataclass(frozen=True)
class Node:
    """
    Immutable node of the hierarchy.

    Attributes:
        id: Entity key.
        match_key: Key used for search so ids stay searchable.
        display_label: Label presented to the user.
        parent_id: Declared leader key (may be dangling).
        children: Sorted child nodes, empty for leaves.
    """
    id: str
    match_key: str
    display_label: str
    parent_id: Optional[str] = None
    children: Tuple["Node", ...] = field(default_factory=tuple)

    @property
    def is_leaf(self) -> bool:
        return not self.children


Forest = Tuple[Node, ...]


class CheckState(str, Enum):
    """Selection classification of a node relative to its subtree."""
    CHECKED = "checked"
    UNCHECKED = "unchecked"
    INDETERMINATE = "indeterminate"


# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def normalize_parent(value: Any) -> Optional[str]:
    """Map the host's empty-leader vocabulary to the no-parent sentinel."""
    if value is None:
        return None
    text = str(value).strip()
    if text in NULL_SENTINELS:
        return None
    return text
