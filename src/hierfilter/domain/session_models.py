from __future__ import annotations

"""
Session Domain Data Models.

Defines the result objects used to communicate refresh and filter outcomes
between the session service and the interface layers (CLI/GUI).
"""

from dataclasses import dataclass, field as dc_field
from typing import Any, Dict, FrozenSet, Optional

from hierfilter.domain.tree_models import Forest

ERROR_CONFIGURATION = "configuration"
ERROR_HOST = "host"

# Error text of results superseded by a newer request
STALE = "stale"

# -----------------------------------------------------------------------------
# CORE DATA MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class RefreshResult:
    """
    Outcome of a data refresh (fetch rows and rebuild the forest).

    Attributes:
        ok: Flag indicating success or failure.
        error: Descriptive message in case of failure.
        error_kind: Taxonomy bucket ('configuration' or 'host').
        field: Offending configuration field, when known.
        retryable: Whether the caller may simply try again.
        sequence: Refresh stamp used to discard stale completions.
        forest: Forest in effect after the refresh (last-known-good on failure).
        summary: Build statistics (rows, nodes, roots).
    """
    ok: bool
    error: str = ""
    error_kind: str = ""
    field: Optional[str] = None
    retryable: bool = False
    sequence: int = 0
    forest: Forest = ()
    summary: Dict[str, Any] = dc_field(default_factory=dict)


@dataclass(frozen=True)
class FilterResult:
    """
    Outcome of propagating a selection to the host filter sink.

    Attributes:
        ok: Flag indicating success or failure.
        error: Descriptive message in case of failure.
        sequence: Filter request stamp.
        values: Selection that was applied (empty means cleared).
        stale: True when a newer request superseded this one.
    """
    ok: bool
    error: str = ""
    sequence: int = 0
    values: FrozenSet[str] = frozenset()
    stale: bool = False

# -----------------------------------------------------------------------------
# FACTORY FUNCTIONS
# -----------------------------------------------------------------------------

def create_error_result(
        error: str,
        error_kind: str,
        forest: Forest,
        sequence: int = 0,
        field: Optional[str] = None,
        retryable: bool = False,
) -> RefreshResult:
    """
    Create a failed refresh result carrying the retained forest.

    Args:
        error: Detailed error description.
        error_kind: Taxonomy bucket.
        forest: Last-known-good forest kept by the session.
        sequence: Refresh stamp.
        field: Offending configuration field.
        retryable: Whether the failure is transient.

    Returns:
        RefreshResult: An immutable error result object.
    """
    return RefreshResult(
        ok=False,
        error=error,
        error_kind=error_kind,
        field=field,
        retryable=retryable,
        sequence=sequence,
        forest=forest,
    )


def create_success_result(
        forest: Forest,
        sequence: int,
        summary: Optional[Dict[str, Any]] = None,
) -> RefreshResult:
    """Create a successful refresh result."""
    return RefreshResult(
        ok=True,
        sequence=sequence,
        forest=forest,
        summary=summary or {},
    )
