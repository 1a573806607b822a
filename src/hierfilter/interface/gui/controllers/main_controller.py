from __future__ import annotations

"""
Main Application Controller.

Bridges the View (tree, configuration and log panels) and the Model
(HierarchySession). Host round-trips run on daemon threads; their
results are marshalled back onto the Tk main loop with app.after()
before any state or widget is touched.
"""

import logging
import threading
import tkinter.messagebox as mb
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Tuple

import customtkinter as ctk

from hierfilter.core.hierarchy.render import visible_rows
from hierfilter.core.services.session import HierarchySession
from hierfilter.core.services.validator import validate_against_schema, validate_config
from hierfilter.domain import config as cfg
from hierfilter.domain.config import FilterConfig
from hierfilter.domain.errors import ConfigurationError, HostError
from hierfilter.domain.session_models import (
    ERROR_CONFIGURATION,
    STALE,
    FilterResult,
    RefreshResult,
)
from hierfilter.infra.hosts.base import HostBridge
from hierfilter.interface.gui import threads
from hierfilter.utils.i18n import i18n

logger = logging.getLogger(__name__)

FRAME_TREE = "tree"
FRAME_SETTINGS = "settings"
FRAME_LOGS = "logs"

# ==============================================================================
# PRIMARY APPLICATION CONTROLLER
# ==============================================================================

class AppController:
    """
    Central controller bridging the widget views and the hierarchy session.
    """

    def __init__(
            self,
            app: ctk.CTk,
            host: HostBridge,
            config: FilterConfig,
            app_state: Dict[str, Any],
            demo_mode: bool = False,
    ):
        """
        Initialize the controller with application context and state.

        Args:
            app: Root CustomTkinter application instance.
            host: Data source and filter sink.
            config: Active filter configuration record.
            app_state: Global persistent application state.
            demo_mode: True when running against the bundled demo host.
        """
        self.app = app
        self.host = host
        self.app_state = app_state
        self.demo_mode = demo_mode
        self.session = HierarchySession(host, config, filter_dispatcher=self._dispatch_filter)

        # Shortcuts to registered View components
        self.header_view: Any = None
        self.tree_view: Any = None
        self.config_view: Any = None
        self.logs_view: Any = None

        self._schema: Dict[str, List[str]] = {}
        self.active_frame = FRAME_TREE

    @property
    def config(self) -> FilterConfig:
        return self.session.config

    # -------------------------------------------------------------------------
    # VIEW REGISTRATION & NAVIGATION
    # -------------------------------------------------------------------------

    def register_views(self, header: Any, tree: Any, config_panel: Any, logs: Any) -> None:
        """
        Link visual frame instances to the controller.

        Args:
            header: Title bar with refresh/settings triggers.
            tree: Search, rows and footer panel.
            config_panel: Source and field selection panel.
            logs: Real-time logging console frame.
        """
        self.header_view = header
        self.tree_view = tree
        self.config_view = config_panel
        self.logs_view = logs
        tree.bind_row_callbacks(self.on_toggle_expand, self.on_check)

    def show_frame(self, name: str) -> None:
        """Swap the content area between the tree, settings and logs views."""
        frames = {
            FRAME_TREE: self.tree_view,
            FRAME_SETTINGS: self.config_view,
            FRAME_LOGS: self.logs_view,
        }
        for frame in frames.values():
            frame.grid_forget()
        frames[name].grid(row=1, column=0, sticky="nsew", padx=10, pady=10)
        self.active_frame = name

    def toggle_logs(self) -> None:
        self.show_frame(FRAME_TREE if self.active_frame == FRAME_LOGS else FRAME_LOGS)

    # -------------------------------------------------------------------------
    # DATA REFRESH
    # -------------------------------------------------------------------------

    def refresh(self) -> None:
        """Start a background fetch; open settings if the record is incomplete."""
        if not self.config.is_complete:
            logger.info("Refresh skipped: filter configuration is incomplete.")
            self.open_settings()
            return

        seq = self.session.begin_refresh()
        self.header_view.set_busy(True)
        if not self.session.forest:
            self.tree_view.show_message(i18n.t("gui.errors.loading"))

        logger.debug(f"Starting refresh #{seq} for source '{self.config.source_name}'")
        self._start_worker(threads.run_refresh_task, (self.session, seq, self.handle_refresh_callback))

    def handle_refresh_callback(self, seq: int, outcome: Any) -> None:
        """Receive worker output and schedule processing on the main thread."""
        self.app.after(0, lambda: self.on_refresh_done(seq, outcome))

    def on_refresh_done(self, seq: int, outcome: Any) -> RefreshResult:
        """
        Apply fetched records (or a failure) to the session and the views.

        Args:
            seq: Refresh stamp.
            outcome: Record list, or the ConfigurationError/HostError raised.

        Returns:
            RefreshResult: The session's verdict.
        """
        if isinstance(outcome, Exception):
            result = self.session.fail_refresh(seq, outcome)
        else:
            result = self.session.complete_refresh(seq, outcome)

        if result.error == STALE:
            return result

        self.header_view.set_busy(False)

        if not result.ok:
            self._report_refresh_failure(result)

        self.redraw()
        return result

    def _report_refresh_failure(self, result: RefreshResult) -> None:
        if result.error_kind == ERROR_CONFIGURATION:
            self.open_settings()
            self.config_view.show_error(result.error)
            return
        mb.showerror(i18n.t("gui.errors.title"), i18n.t("gui.errors.host", error=result.error))

    # -------------------------------------------------------------------------
    # SEARCH, EXPANSION & SELECTION EVENTS
    # -------------------------------------------------------------------------

    def on_search_changed(self, _event: Any = None) -> None:
        self.session.set_search(self.tree_view.entry_search.get())
        self.redraw()

    def on_toggle_expand(self, node_id: str) -> None:
        self.session.toggle_expanded(node_id)
        self.redraw()

    def expand_all(self) -> None:
        self.session.expand_all()
        self.redraw()

    def collapse_all(self) -> None:
        self.session.collapse_all()
        self.redraw()

    def on_check(self, node_id: str) -> None:
        try:
            self.session.click(node_id)
        except KeyError:
            logger.warning(f"Ignoring click on unknown node '{node_id}' (forest was rebuilt).")
            return
        self.redraw()

    def select_all(self) -> None:
        self.session.select_all()
        self.redraw()

    def select_none(self) -> None:
        self.session.clear_selection()
        self.redraw()

    # -------------------------------------------------------------------------
    # FILTER PROPAGATION
    # -------------------------------------------------------------------------

    def _dispatch_filter(self, seq: int, values: FrozenSet[str]) -> None:
        self._start_worker(
            threads.run_filter_task,
            (self.session, seq, values, self.handle_filter_callback),
        )

    def handle_filter_callback(self, result: FilterResult) -> None:
        self.app.after(0, lambda: self.on_filter_done(result))

    def on_filter_done(self, result: FilterResult) -> None:
        if result.stale:
            return
        self.session.last_filter = result
        if result.ok:
            logger.info(f"Filter applied with {len(result.values)} value(s).")
            return
        mb.showerror(i18n.t("gui.errors.title"), i18n.t("gui.errors.filter", error=result.error))

    # -------------------------------------------------------------------------
    # RENDERING
    # -------------------------------------------------------------------------

    def redraw(self) -> None:
        """Render the visible forest and the footer from session state."""
        if not self.tree_view:
            return

        visible = self.session.visible_forest()
        if not self.session.forest:
            self.tree_view.show_message(i18n.t("gui.tree.no_data"))
        elif not visible:
            self.tree_view.show_message(i18n.t("gui.tree.no_results"))
        else:
            expansion = self.session.expansion
            rows = [
                (node, depth, expansion.is_expanded(node.id), self.session.check_state(node))
                for node, depth in visible_rows(visible, expansion.expanded)
            ]
            self.tree_view.render_rows(rows)

        self.update_footer()

    def update_footer(self) -> None:
        count = len(self.session.selection.selected)
        if count:
            text = i18n.t("gui.footer.selected", count=count)
        else:
            text = i18n.t("gui.footer.no_filter")
        self.tree_view.set_footer(text)

    # -------------------------------------------------------------------------
    # SETTINGS
    # -------------------------------------------------------------------------

    def open_settings(self) -> None:
        """Load the host schema into the combos and show the settings view."""
        self.config_view.show_error("")
        self.config_view.set_demo_mode(self.demo_mode)
        try:
            self._schema = self.host.list_sources()
        except HostError as e:
            logger.error(f"Could not list host sources: {e}")
            self._schema = {}
            self.config_view.show_error(i18n.t("gui.errors.host", error=str(e)))

        self.config_view.set_sources(list(self._schema))
        self.config_view.set_fields(self._schema.get(self.config.source_name, []))
        self.config_view.set_values(self.config.to_dict())
        self.show_frame(FRAME_SETTINGS)

    def on_source_selected(self, source_name: str) -> None:
        self.config_view.set_fields(self._schema.get(source_name, []))

    def save_settings(self) -> bool:
        """
        Validate and persist the record from the settings view, then refresh.

        Returns:
            bool: False when the record was rejected (the view shows why).
        """
        values = self.config_view.get_values()
        try:
            record, _ = validate_config(values, strict=True)
            validate_against_schema(record, self._schema)
        except ConfigurationError as e:
            logger.warning(f"Settings rejected: {e}")
            self.config_view.show_error(str(e))
            return False

        self.session.set_config(record)
        self.app_state["filter_config"] = record.to_dict()
        cfg.save_app_state(self.app_state)

        self.show_frame(FRAME_TREE)
        self.refresh()
        return True

    def cancel_settings(self) -> None:
        self.show_frame(FRAME_TREE)

    # -------------------------------------------------------------------------
    # THREADING
    # -------------------------------------------------------------------------

    @staticmethod
    def _start_worker(target: Callable[..., None], args: Tuple[Any, ...]) -> None:
        threading.Thread(target=target, args=args, daemon=True).start()
