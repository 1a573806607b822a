from __future__ import annotations

"""
Filter Configuration Panel.

Lets the user pick the host source and the entity, parent and display
fields from comboboxes populated with the host schema.
"""

from typing import Any, Dict, List, Optional

import customtkinter as ctk

from hierfilter.utils.i18n import i18n


class ConfigPanel(ctk.CTkFrame):
    """
    Settings view for the FilterConfig record.
    """

    def __init__(self, master: Any, **kwargs: Any):
        super().__init__(master, corner_radius=10, **kwargs)
        self.grid_columnconfigure(0, weight=1)

        self.lbl_title = ctk.CTkLabel(
            self,
            text=i18n.t("gui.config.title"),
            font=ctk.CTkFont(size=15, weight="bold"),
        )
        self.lbl_title.grid(row=0, column=0, sticky="w", padx=15, pady=(15, 10))

        placeholder = i18n.t("gui.config.select_placeholder")

        self.combo_source = self._add_combo(1, "gui.config.source", None, placeholder)
        self.combo_entity = self._add_combo(
            3, "gui.config.entity_field", "gui.config.entity_hint", placeholder
        )
        self.combo_parent = self._add_combo(
            6, "gui.config.parent_field", "gui.config.parent_hint", placeholder
        )
        self.combo_display = self._add_combo(9, "gui.config.display_field", None, placeholder)

        self.lbl_error = ctk.CTkLabel(self, text="", text_color="#E04F5F", anchor="w")
        self.lbl_error.grid(row=11, column=0, sticky="ew", padx=15)

        self.lbl_demo = ctk.CTkLabel(
            self, text=i18n.t("gui.config.demo_mode"), text_color="gray", anchor="w"
        )

        actions = ctk.CTkFrame(self, fg_color="transparent")
        actions.grid(row=13, column=0, sticky="e", padx=15, pady=15)
        self.btn_cancel = ctk.CTkButton(
            actions,
            text=i18n.t("gui.buttons.cancel"),
            width=90,
            fg_color="transparent",
            border_width=1,
            text_color=("gray10", "#DCE4EE"),
        )
        self.btn_cancel.grid(row=0, column=0, padx=(0, 5))
        self.btn_save = ctk.CTkButton(actions, text=i18n.t("gui.buttons.save"), width=90)
        self.btn_save.grid(row=0, column=1)

    def _add_combo(
            self,
            row: int,
            label_key: str,
            hint_key: Optional[str],
            placeholder: str,
    ) -> ctk.CTkComboBox:
        ctk.CTkLabel(self, text=i18n.t(label_key), anchor="w").grid(
            row=row, column=0, sticky="ew", padx=15
        )
        combo = ctk.CTkComboBox(self, values=[], state="readonly")
        combo.set(placeholder)
        combo.grid(row=row + 1, column=0, sticky="ew", padx=15, pady=(0, 2))
        if hint_key:
            ctk.CTkLabel(
                self, text=i18n.t(hint_key), text_color="gray", anchor="w",
                font=ctk.CTkFont(size=11),
            ).grid(row=row + 2, column=0, sticky="ew", padx=15, pady=(0, 6))
        return combo

    # ==========================================================================
    # PUBLIC UPDATE METHODS (Called by Controllers)
    # ==========================================================================

    def set_demo_mode(self, active: bool) -> None:
        if active:
            self.lbl_demo.grid(row=12, column=0, sticky="ew", padx=15)
        else:
            self.lbl_demo.grid_forget()

    def set_sources(self, names: List[str]) -> None:
        self.combo_source.configure(values=names)

    def set_fields(self, fields: List[str]) -> None:
        """Offer the fields of the selected source to every field combo."""
        self.combo_entity.configure(values=fields)
        self.combo_parent.configure(values=fields)
        self.combo_display.configure(values=[i18n.t("gui.config.none_option")] + fields)

    def set_values(self, config: Dict[str, Any]) -> None:
        placeholder = i18n.t("gui.config.select_placeholder")
        self.combo_source.set(config.get("source_name") or placeholder)
        self.combo_entity.set(config.get("entity_field") or placeholder)
        self.combo_parent.set(config.get("parent_field") or placeholder)
        self.combo_display.set(config.get("display_field") or i18n.t("gui.config.none_option"))

    def get_values(self) -> Dict[str, Any]:
        """Scrape the combos; placeholders and '(none)' read as empty."""
        blanks = {i18n.t("gui.config.select_placeholder"), i18n.t("gui.config.none_option")}

        def read(combo: ctk.CTkComboBox) -> str:
            value = combo.get().strip()
            return "" if value in blanks else value

        return {
            "source_name": read(self.combo_source),
            "entity_field": read(self.combo_entity),
            "parent_field": read(self.combo_parent),
            "display_field": read(self.combo_display) or None,
        }

    def show_error(self, text: str) -> None:
        self.lbl_error.configure(text=text)
