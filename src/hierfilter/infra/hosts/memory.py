from __future__ import annotations

"""
In-Memory Host.

Serves sources held in memory: the bundled demo organisation, a CSV file
loaded from disk, or fixtures handed in by tests. Applied filters are
recorded so callers can inspect what the dashboard would receive.
"""

import csv
import logging
import os
from typing import Any, Dict, List, Mapping, Optional, Sequence

from hierfilter.domain.constants import DEMO_SOURCES
from hierfilter.domain.errors import HostError

logger = logging.getLogger(__name__)


class MemoryHost:
    """
    HostBridge implementation backed by in-memory record lists.
    """

    def __init__(self, sources: Mapping[str, Sequence[Mapping[str, Any]]]):
        """
        Args:
            sources: Source name -> records.
        """
        self._sources: Dict[str, List[Dict[str, Any]]] = {
            name: [dict(r) for r in records] for name, records in sources.items()
        }
        self.filters: Dict[str, Dict[str, List[str]]] = {}

    # -------------------------------------------------------------------------
    # FACTORIES
    # -------------------------------------------------------------------------

    @classmethod
    def demo(cls) -> "MemoryHost":
        """Host preloaded with the demo worksheets."""
        return cls(DEMO_SOURCES)

    @classmethod
    def from_csv(cls, path: str, source_name: Optional[str] = None) -> "MemoryHost":
        """
        Load a CSV file (header row required) as a single source.

        Args:
            path: CSV file path.
            source_name: Source name; defaults to the file stem.

        Raises:
            HostError: When the file cannot be read.
        """
        name = source_name or os.path.splitext(os.path.basename(path))[0]
        try:
            with open(path, "r", encoding="utf-8-sig", newline="") as f:
                records = list(csv.DictReader(f))
        except (OSError, csv.Error, UnicodeDecodeError) as e:
            raise HostError(f"Cannot read CSV source '{path}': {e}") from e

        logger.info(f"MemoryHost: Loaded {len(records)} record(s) from {path}")
        return cls({name: records})

    # -------------------------------------------------------------------------
    # HOST BRIDGE
    # -------------------------------------------------------------------------

    def list_sources(self) -> Dict[str, List[str]]:
        schema: Dict[str, List[str]] = {}
        for name, records in self._sources.items():
            fields: List[str] = []
            for record in records:
                for key in record:
                    if key not in fields:
                        fields.append(key)
            schema[name] = fields
        return schema

    def fetch_rows(self, source_name: str) -> List[Dict[str, Any]]:
        if source_name not in self._sources:
            raise HostError(f"Source '{source_name}' is not available.")
        return [dict(r) for r in self._sources[source_name]]

    def apply_filter(self, source_name: str, field_name: str, values: Sequence[str]) -> None:
        self.filters.setdefault(source_name, {})[field_name] = list(values)
        logger.debug(f"MemoryHost: Filter {source_name}.{field_name} = {len(values)} value(s)")

    def clear_filter(self, source_name: str, field_name: str) -> None:
        self.filters.get(source_name, {}).pop(field_name, None)
        logger.debug(f"MemoryHost: Filter {source_name}.{field_name} cleared")

    def replace_rows(self, source_name: str, records: Sequence[Mapping[str, Any]]) -> None:
        """Swap a source's records, simulating a host data change."""
        self._sources[source_name] = [dict(r) for r in records]
