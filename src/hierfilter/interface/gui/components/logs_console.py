from __future__ import annotations

"""
Diagnostics Console.

Read-only, terminal-like view of the session logs (refreshes, host
errors, filter propagation), fed from the background log queue.
"""

from typing import Any

import customtkinter as ctk

from hierfilter.utils.i18n import i18n

MAX_LINES = 2000


class LogsFrame(ctk.CTkFrame):
    """
    Monospaced log buffer with a copy-to-clipboard action.
    """

    def __init__(self, master: Any, **kwargs: Any):
        super().__init__(master, corner_radius=10, fg_color="transparent", **kwargs)
        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(0, weight=1)
        self._line_count = 0

        self.textbox = ctk.CTkTextbox(self, state="disabled", font=("Consolas", 10))
        self.textbox.grid(row=0, column=0, sticky="nsew", padx=10, pady=(10, 0))

        self.btn_copy = ctk.CTkButton(
            self,
            text=i18n.t("gui.logs.copy"),
            command=self._copy_logs
        )
        self.btn_copy.grid(row=1, column=0, padx=10, pady=10, sticky="e")

    def append_log(self, msg: str) -> None:
        """
        Append a formatted record, keeping the buffer read-only to the user.

        The oldest line is dropped once MAX_LINES is reached.
        """
        self.textbox.configure(state="normal")
        self.textbox.insert("end", msg + "\n")
        self._line_count += 1
        if self._line_count > MAX_LINES:
            self.textbox.delete("1.0", "2.0")
            self._line_count -= 1
        self.textbox.see("end")
        self.textbox.configure(state="disabled")

    def _copy_logs(self) -> None:
        self.master.clipboard_clear()
        self.master.clipboard_append(self.textbox.get("1.0", "end"))
