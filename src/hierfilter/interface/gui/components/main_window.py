from __future__ import annotations

"""
Main Application Window Factory.

Initializes the root CustomTkinter application window, configures
global theme attributes, and establishes the primary structural grid:
header on top, swappable content area below, footer-bearing panels
inside the content area.
"""

from typing import Any, Dict

import customtkinter as ctk

from hierfilter.domain import constants as const
from hierfilter.utils.i18n import i18n

# -----------------------------------------------------------------------------
# ROOT WINDOW CONSTRUCTION
# -----------------------------------------------------------------------------

def create_main_window(app_settings: Dict[str, Any]) -> ctk.CTk:
    """
    Instantiate and configure the primary application window.

    Args:
        app_settings: Persisted application settings (appearance, locale).

    Returns:
        ctk.CTk: The configured root application instance.
    """
    ctk.set_appearance_mode(app_settings.get("appearance", "System"))
    ctk.set_default_color_theme("blue")

    app = ctk.CTk()

    app.title(f"{i18n.t('app.title')} - v{const.CURRENT_CONFIG_VERSION}")
    app.geometry("520x680")
    app.minsize(360, 420)

    # Row 0: header, Row 1: content
    app.grid_columnconfigure(0, weight=1)
    app.grid_rowconfigure(1, weight=1)

    return app


# -----------------------------------------------------------------------------
# HEADER BAR
# -----------------------------------------------------------------------------

class HeaderFrame(ctk.CTkFrame):
    """Title bar with the refresh, settings and logs triggers."""

    def __init__(self, master: Any, **kwargs: Any):
        super().__init__(master, corner_radius=0, **kwargs)
        self.grid_columnconfigure(0, weight=1)

        self.lbl_title = ctk.CTkLabel(
            self,
            text=i18n.t("app.title"),
            font=ctk.CTkFont(size=16, weight="bold"),
        )
        self.lbl_title.grid(row=0, column=0, padx=15, pady=10, sticky="w")

        self.btn_refresh = ctk.CTkButton(self, text=i18n.t("gui.buttons.refresh"), width=90)
        self.btn_refresh.grid(row=0, column=1, padx=(0, 5), pady=10)

        self.btn_settings = ctk.CTkButton(self, text=i18n.t("gui.buttons.settings"), width=90)
        self.btn_settings.grid(row=0, column=2, padx=(0, 5), pady=10)

        self.btn_logs = ctk.CTkButton(
            self,
            text=i18n.t("gui.logs.title"),
            width=70,
            fg_color="transparent",
            border_width=1,
            text_color=("gray10", "#DCE4EE"),
        )
        self.btn_logs.grid(row=0, column=3, padx=(0, 15), pady=10)

    def set_busy(self, busy: bool) -> None:
        """Disable the refresh trigger while a fetch is in flight."""
        if busy:
            self.btn_refresh.configure(state="disabled", text=i18n.t("gui.errors.loading"))
        else:
            self.btn_refresh.configure(state="normal", text=i18n.t("gui.buttons.refresh"))
