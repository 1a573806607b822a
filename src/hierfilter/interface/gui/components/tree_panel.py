from __future__ import annotations

"""
Hierarchy Tree Panel.

Search entry, bulk action buttons, the scrollable list of tree rows and
the selection footer. The panel is a passive view: it renders what the
controller hands it and forwards row events through the callbacks bound
with bind_row_callbacks().
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

import customtkinter as ctk

from hierfilter.domain.tree_models import CheckState, Node
from hierfilter.utils.i18n import i18n

logger = logging.getLogger(__name__)

RowCallback = Callable[[str], None]

CHECK_GLYPHS: Dict[CheckState, str] = {
    CheckState.CHECKED: "☑",
    CheckState.UNCHECKED: "☐",
    CheckState.INDETERMINATE: "⊟",
}
TOGGLE_OPEN = "▼"
TOGGLE_CLOSED = "▶"
INDENT_PX = 18


class TreePanel(ctk.CTkFrame):
    """
    Main widget body: search, tree rows and footer.
    """

    def __init__(self, master: Any, **kwargs: Any):
        super().__init__(master, corner_radius=10, fg_color="transparent", **kwargs)
        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(2, weight=1)

        self._on_toggle: Optional[RowCallback] = None
        self._on_check: Optional[RowCallback] = None

        # 1. Search
        self.entry_search = ctk.CTkEntry(
            self, placeholder_text=i18n.t("gui.tree.search_placeholder")
        )
        self.entry_search.grid(row=0, column=0, sticky="ew", padx=10, pady=(10, 5))

        # 2. Bulk actions
        actions = ctk.CTkFrame(self, fg_color="transparent")
        actions.grid(row=1, column=0, sticky="ew", padx=10, pady=5)
        for col in range(4):
            actions.grid_columnconfigure(col, weight=1)

        self.btn_expand = ctk.CTkButton(actions, text=i18n.t("gui.buttons.expand"), width=60)
        self.btn_collapse = ctk.CTkButton(actions, text=i18n.t("gui.buttons.collapse"), width=60)
        self.btn_all = ctk.CTkButton(actions, text=i18n.t("gui.buttons.all"), width=60)
        self.btn_none = ctk.CTkButton(actions, text=i18n.t("gui.buttons.none"), width=60)
        for col, btn in enumerate((self.btn_expand, self.btn_collapse, self.btn_all, self.btn_none)):
            btn.grid(row=0, column=col, sticky="ew", padx=2)

        # 3. Rows
        self.scroll = ctk.CTkScrollableFrame(self)
        self.scroll.grid(row=2, column=0, sticky="nsew", padx=10, pady=5)
        self.scroll.grid_columnconfigure(0, weight=1)
        self._row_widgets: List[ctk.CTkFrame] = []

        # 4. Footer
        self.lbl_footer = ctk.CTkLabel(self, text=i18n.t("gui.footer.no_filter"), anchor="w")
        self.lbl_footer.grid(row=3, column=0, sticky="ew", padx=15, pady=(0, 10))

    # ==========================================================================
    # PUBLIC UPDATE METHODS (Called by Controllers)
    # ==========================================================================

    def bind_row_callbacks(self, on_toggle: RowCallback, on_check: RowCallback) -> None:
        """Register handlers for expand-toggle and checkbox clicks."""
        self._on_toggle = on_toggle
        self._on_check = on_check

    def render_rows(self, rows: List[Tuple[Node, int, bool, CheckState]]) -> None:
        """
        Rebuild the row list.

        Args:
            rows: (node, depth, is_expanded, check_state) in display order.
        """
        self._clear_rows()
        for index, (node, depth, is_open, state) in enumerate(rows):
            self._row_widgets.append(self._build_row(index, node, depth, is_open, state))
        logger.debug(f"UI: Tree panel rendered {len(rows)} row(s)")

    def show_message(self, text: str) -> None:
        """Replace the rows with a single centred message."""
        self._clear_rows()
        label = ctk.CTkLabel(self.scroll, text=text, text_color="gray")
        label.grid(row=0, column=0, pady=20)
        self._row_widgets.append(label)

    def set_footer(self, text: str) -> None:
        self.lbl_footer.configure(text=text)

    # ==========================================================================
    # ROW CONSTRUCTION
    # ==========================================================================

    def _clear_rows(self) -> None:
        for widget in self._row_widgets:
            widget.destroy()
        self._row_widgets = []

    def _build_row(
            self,
            index: int,
            node: Node,
            depth: int,
            is_open: bool,
            state: CheckState,
    ) -> ctk.CTkFrame:
        row = ctk.CTkFrame(self.scroll, fg_color="transparent")
        row.grid(row=index, column=0, sticky="ew", padx=(depth * INDENT_PX, 0))
        row.grid_columnconfigure(2, weight=1)

        if node.is_leaf:
            spacer = ctk.CTkLabel(row, text="", width=24)
            spacer.grid(row=0, column=0)
        else:
            toggle = ctk.CTkButton(
                row,
                text=TOGGLE_OPEN if is_open else TOGGLE_CLOSED,
                width=24,
                fg_color="transparent",
                text_color=("gray10", "#DCE4EE"),
                command=lambda node_id=node.id: self._emit(self._on_toggle, node_id),
            )
            toggle.grid(row=0, column=0)

        check = ctk.CTkButton(
            row,
            text=CHECK_GLYPHS[state],
            width=24,
            fg_color="transparent",
            text_color=("gray10", "#DCE4EE"),
            command=lambda node_id=node.id: self._emit(self._on_check, node_id),
        )
        check.grid(row=0, column=1)

        label = ctk.CTkLabel(row, text=node.display_label, anchor="w")
        label.grid(row=0, column=2, sticky="ew", padx=(4, 0))

        if not node.is_leaf:
            badge = ctk.CTkLabel(row, text=str(len(node.children)), text_color="gray", width=28)
            badge.grid(row=0, column=3, padx=(0, 6))

        return row

    @staticmethod
    def _emit(callback: Optional[RowCallback], node_id: str) -> None:
        if callback is not None:
            callback(node_id)
