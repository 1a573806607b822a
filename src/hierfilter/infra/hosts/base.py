from __future__ import annotations

"""
Host Capability Interface.

The hierarchy engine reaches the host dashboard only through this narrow
protocol; concrete host objects are adapted here, at the boundary.
"""

from typing import Any, Dict, List, Protocol, Sequence

from hierfilter.domain.constants import APP_NAME, CURRENT_CONFIG_VERSION

USER_AGENT = f"{APP_NAME}-Client/{CURRENT_CONFIG_VERSION}"
DEFAULT_TIMEOUT = 10


class HostBridge(Protocol):
    """Data source and filter sink offered by a host dashboard."""

    def list_sources(self) -> Dict[str, List[str]]:
        """Return the schema: source name -> field names."""
        ...

    def fetch_rows(self, source_name: str) -> List[Dict[str, Any]]:
        """Return the records of a source as field -> formatted value mappings."""
        ...

    def apply_filter(self, source_name: str, field_name: str, values: Sequence[str]) -> None:
        """Replace the source's filter on a field with a multi-value equality filter."""
        ...

    def clear_filter(self, source_name: str, field_name: str) -> None:
        """Remove any filter on the field."""
        ...
