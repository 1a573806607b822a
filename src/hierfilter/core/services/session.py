from __future__ import annotations

"""
Hierarchy Session Service.

Orchestrates one filter widget's lifecycle: validates the configuration,
fetches rows from the host, rebuilds the forest, keeps the search,
selection and expansion views in sync, and propagates every selection
change to the host filter sink. Host calls are stamped with sequence
numbers so that completions superseded by a newer request are discarded.
"""

import logging
from typing import Any, Callable, Dict, FrozenSet, List, Optional

from hierfilter.core.hierarchy.builder import build_hierarchy
from hierfilter.core.hierarchy.expansion import ExpansionModel
from hierfilter.core.hierarchy.query import SearchCache, count_nodes, find_by_id, normalize_term
from hierfilter.core.hierarchy.selection import SelectionModel
from hierfilter.core.services.validator import validate_against_schema
from hierfilter.domain.config import FilterConfig
from hierfilter.domain.constants import DISPLAY_KEY, ENTITY_KEY, PARENT_KEY
from hierfilter.domain.errors import ConfigurationError, HostError
from hierfilter.domain.session_models import (
    ERROR_CONFIGURATION,
    ERROR_HOST,
    STALE,
    FilterResult,
    RefreshResult,
    create_error_result,
    create_success_result,
)
from hierfilter.domain.tree_models import CheckState, Forest, Node, Row
from hierfilter.infra.hosts.base import HostBridge

logger = logging.getLogger(__name__)

FilterDispatcher = Callable[[int, FrozenSet[str]], None]


class HierarchySession:
    """
    Stateful facade over the hierarchy engine bound to one host source.

    The forest is replaced wholesale on every successful refresh; on any
    failure the last-known-good forest and selection are retained.
    """

    def __init__(
            self,
            host: HostBridge,
            config: FilterConfig,
            filter_dispatcher: Optional[FilterDispatcher] = None,
    ):
        """
        Args:
            host: Data source and filter sink.
            config: Filter configuration record.
            filter_dispatcher: Optional callable scheduling apply_filter
                elsewhere (e.g. a worker thread). Defaults to applying inline.
        """
        self.host = host
        self.config = config
        self.forest: Forest = ()
        self.version = 0
        self.search_term = ""

        self.selection = SelectionModel()
        self.expansion = ExpansionModel()
        self.last_filter: Optional[FilterResult] = None

        self._search_cache = SearchCache()
        self._refresh_seq = 0
        self._filter_seq = 0
        self._dispatch = filter_dispatcher or self._apply_inline

        self.selection.subscribe(self._on_selection_changed)

    # -------------------------------------------------------------------------
    # CONFIGURATION
    # -------------------------------------------------------------------------

    def set_config(self, config: FilterConfig) -> None:
        """Swap the configuration; the next refresh uses it."""
        logger.info(
            f"Session: Configuration set to source='{config.source_name}', "
            f"entity='{config.entity_field}', parent='{config.parent_field}'"
        )
        self.config = config

    # -------------------------------------------------------------------------
    # DATA REFRESH
    # -------------------------------------------------------------------------

    def begin_refresh(self) -> int:
        """Issue a new refresh stamp; older in-flight refreshes become stale."""
        self._refresh_seq += 1
        return self._refresh_seq

    def is_stale_refresh(self, seq: int) -> bool:
        return seq < self._refresh_seq

    def fetch_records(self) -> List[Dict[str, Any]]:
        """
        Validate the configuration against the host schema and fetch rows.

        Safe to call from a worker thread: touches only the host.

        Raises:
            ConfigurationError: Required field missing or not resolvable.
            HostError: The host failed to answer.
        """
        config = self.config
        validate_against_schema(config, self.host.list_sources())
        return self.host.fetch_rows(config.source_name)

    def refresh(self) -> RefreshResult:
        """
        Fetch rows and rebuild the forest synchronously.

        Returns:
            RefreshResult: Success with the new forest, or a typed failure
            carrying the retained forest.
        """
        seq = self.begin_refresh()
        try:
            records = self.fetch_records()
        except (ConfigurationError, HostError) as e:
            return self.fail_refresh(seq, e)
        return self.complete_refresh(seq, records)

    def fail_refresh(self, seq: int, error: Exception) -> RefreshResult:
        """Report a refresh failure while keeping the current state."""
        if self.is_stale_refresh(seq):
            logger.debug(f"Session: Ignoring failure of stale refresh #{seq}: {error}")
            return RefreshResult(ok=False, error=STALE, sequence=seq, forest=self.forest)

        if isinstance(error, ConfigurationError):
            logger.error(f"Session: Configuration rejected: {error}")
            return create_error_result(
                str(error), ERROR_CONFIGURATION, self.forest, seq, field=error.field
            )

        retryable = getattr(error, "retryable", True)
        logger.error(f"Session: Host data request failed: {error}")
        return create_error_result(
            str(error), ERROR_HOST, self.forest, seq, retryable=retryable
        )

    def complete_refresh(self, seq: int, records: List[Dict[str, Any]]) -> RefreshResult:
        """
        Build the forest from fetched records unless a newer refresh exists.

        Args:
            seq: Stamp returned by begin_refresh.
            records: Host records for the configured source.

        Returns:
            RefreshResult: Build outcome; stale completions leave state untouched.
        """
        if self.is_stale_refresh(seq):
            logger.debug(f"Session: Discarding stale refresh #{seq} (latest #{self._refresh_seq})")
            return RefreshResult(ok=False, error=STALE, sequence=seq, forest=self.forest)

        config = self.config
        rows = [
            Row.from_record(r, config.entity_field, config.parent_field, config.display_field)
            for r in records
        ]
        forest = build_hierarchy(
            rows,
            user_key=ENTITY_KEY,
            leader_key=PARENT_KEY,
            display_key=DISPLAY_KEY if config.display_field else None,
        )

        self.forest = forest
        self.version += 1
        if self.search_term:
            self.expansion.sync_search(self.search_term, self.visible_forest(), force=True)

        summary = {"rows": len(records), "nodes": count_nodes(forest), "roots": len(forest)}
        logger.info(
            f"Session: Forest rebuilt v{self.version} "
            f"({summary['nodes']} nodes, {summary['roots']} roots)"
        )
        return create_success_result(forest, seq, summary)

    # -------------------------------------------------------------------------
    # SEARCH & EXPANSION
    # -------------------------------------------------------------------------

    def set_search(self, term: Optional[str]) -> Forest:
        """Update the active search term and return the visible forest."""
        self.search_term = normalize_term(term)
        visible = self.visible_forest()
        self.expansion.sync_search(self.search_term, visible)
        return visible

    def visible_forest(self) -> Forest:
        """Forest after applying the active search (memoised per version)."""
        return self._search_cache.search(self.forest, self.version, self.search_term)

    def toggle_expanded(self, node_id: str) -> None:
        self.expansion.toggle(node_id)

    def expand_all(self) -> None:
        self.expansion.expand_all(self.forest)

    def collapse_all(self) -> None:
        self.expansion.collapse_all()

    # -------------------------------------------------------------------------
    # SELECTION
    # -------------------------------------------------------------------------

    def click(self, node_id: str) -> FrozenSet[str]:
        """Checkbox click on a node: cascade select, or clear if fully checked."""
        node = self._require_node(node_id)
        return self.selection.click(node)

    def select(self, node_id: str, target: bool = True) -> FrozenSet[str]:
        node = self._require_node(node_id)
        return self.selection.toggle(node, target)

    def select_all(self) -> FrozenSet[str]:
        return self.selection.select_all(self.forest)

    def clear_selection(self) -> FrozenSet[str]:
        return self.selection.clear()

    def prune_stale_ids(self) -> None:
        """Drop selected and expanded ids absent from the current forest."""
        self.selection.prune(self.forest)
        self.expansion.prune(self.forest)

    def check_state(self, node: Node) -> CheckState:
        return self.selection.tri_state(node)

    # -------------------------------------------------------------------------
    # FILTER PROPAGATION
    # -------------------------------------------------------------------------

    def apply_filter(self, seq: int, values: FrozenSet[str]) -> FilterResult:
        """
        Push a selection to the host unless a newer request superseded it.

        Safe to call from a worker thread.

        Args:
            seq: Filter request stamp.
            values: Selection to apply; empty clears the filter.

        Returns:
            FilterResult: Outcome of the host call.
        """
        if seq < self._filter_seq:
            logger.debug(f"Session: Skipping superseded filter request #{seq}")
            return FilterResult(ok=False, sequence=seq, values=values, stale=True)

        config = self.config
        try:
            if values:
                self.host.apply_filter(config.source_name, config.entity_field, sorted(values))
            else:
                self.host.clear_filter(config.source_name, config.entity_field)
        except HostError as e:
            logger.error(f"Session: Error applying filter: {e}")
            return FilterResult(ok=False, error=str(e), sequence=seq, values=values)

        return FilterResult(ok=True, sequence=seq, values=values)

    def _on_selection_changed(self, selected: FrozenSet[str]) -> None:
        self._filter_seq += 1
        self._dispatch(self._filter_seq, selected)

    def _apply_inline(self, seq: int, values: FrozenSet[str]) -> None:
        self.last_filter = self.apply_filter(seq, values)

    # -------------------------------------------------------------------------
    # HELPERS
    # -------------------------------------------------------------------------

    def _require_node(self, node_id: str) -> Node:
        node = find_by_id(self.forest, node_id)
        if node is None:
            raise KeyError(node_id)
        return node
