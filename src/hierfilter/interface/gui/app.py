from __future__ import annotations

"""
GUI Entrypoint and Application Lifecycle Orchestrator.

Initializes the CustomTkinter environment, restores persisted state,
picks the host (HTTP bridge or bundled demo), assembles the view
hierarchy and binds it to the AppController. Manages log polling and
persists the session on close.
"""

import logging
import queue
from logging.handlers import QueueHandler
from typing import Any, Dict, Tuple

from hierfilter.domain import config as cfg
from hierfilter.domain import constants as const
from hierfilter.domain.config import FilterConfig
from hierfilter.infra.hosts import HostBridge, HttpHost, MemoryHost
from hierfilter.infra.logging import LoggingConfig, configure_logging, get_default_log_path
from hierfilter.interface.gui.components.config_panel import ConfigPanel
from hierfilter.interface.gui.components.logs_console import LogsFrame
from hierfilter.interface.gui.components.main_window import HeaderFrame, create_main_window
from hierfilter.interface.gui.components.tree_panel import TreePanel
from hierfilter.interface.gui.controllers.main_controller import FRAME_TREE, AppController
from hierfilter.utils.i18n import i18n

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# MAIN APPLICATION LOOP
# -----------------------------------------------------------------------------

def main() -> None:
    """
    Initialize and launch the Graphical User Interface.

    Startup runs in phases: logging, state recovery, host selection, UI
    construction, controller binding and loop entry.
    """
    # -----------------------------------------------------------------------------
    # PHASE 1: DIAGNOSTIC INFRASTRUCTURE SETUP
    # -----------------------------------------------------------------------------
    configure_logging(LoggingConfig(level="INFO", console=True, log_file=get_default_log_path()))
    logger.info(f"GUI Lifecycle: Initializing v{const.CURRENT_CONFIG_VERSION}")

    # Dedicated queue feeding the in-app console
    gui_log_queue: queue.Queue = queue.Queue()
    gui_log_handler = QueueHandler(gui_log_queue)
    gui_log_handler.setLevel(logging.INFO)
    logging.getLogger().addHandler(gui_log_handler)

    # -----------------------------------------------------------------------------
    # PHASE 2: PERSISTENT STATE RECOVERY
    # -----------------------------------------------------------------------------
    app_state = cfg.load_app_state()
    app_settings = app_state["app_settings"]
    i18n.load_locale(app_settings.get("locale") or "en")

    # -----------------------------------------------------------------------------
    # PHASE 3: HOST SELECTION
    # -----------------------------------------------------------------------------
    host, config, demo_mode = _resolve_host(app_settings, app_state["filter_config"])

    # -----------------------------------------------------------------------------
    # PHASE 4: VIEW COMPONENT HIERARCHY CONSTRUCTION
    # -----------------------------------------------------------------------------
    app = create_main_window(app_settings)

    header = HeaderFrame(app)
    header.grid(row=0, column=0, sticky="ew")

    tree_panel = TreePanel(app)
    config_panel = ConfigPanel(app)
    logs_frame = LogsFrame(app)

    # -----------------------------------------------------------------------------
    # PHASE 5: CONTROLLER INTEGRATION AND EVENT BINDING
    # -----------------------------------------------------------------------------
    controller = AppController(app, host, config, app_state, demo_mode=demo_mode)
    controller.register_views(header, tree_panel, config_panel, logs_frame)
    controller.show_frame(FRAME_TREE)

    header.btn_refresh.configure(command=controller.refresh)
    header.btn_settings.configure(command=controller.open_settings)
    header.btn_logs.configure(command=controller.toggle_logs)

    tree_panel.entry_search.bind("<KeyRelease>", controller.on_search_changed)
    tree_panel.btn_expand.configure(command=controller.expand_all)
    tree_panel.btn_collapse.configure(command=controller.collapse_all)
    tree_panel.btn_all.configure(command=controller.select_all)
    tree_panel.btn_none.configure(command=controller.select_none)

    config_panel.combo_source.configure(command=controller.on_source_selected)
    config_panel.btn_save.configure(command=controller.save_settings)
    config_panel.btn_cancel.configure(command=controller.cancel_settings)

    # -----------------------------------------------------------------------------
    # PHASE 6: BACKGROUND POLLING AND LIFECYCLE
    # -----------------------------------------------------------------------------
    log_formatter = logging.Formatter("%(asctime)s | %(levelname)s | %(message)s", "%H:%M:%S")

    def poll_log_queue() -> None:
        """Flush records from the background queue into the console view."""
        while not gui_log_queue.empty():
            try:
                record = gui_log_queue.get_nowait()
            except queue.Empty:
                break
            logs_frame.append_log(log_formatter.format(record))
        app.after(100, poll_log_queue)

    def on_closing() -> None:
        """Persist session state and terminate the process."""
        app_state["filter_config"] = controller.config.to_dict()
        cfg.save_app_state(app_state)
        app.destroy()

    app.protocol("WM_DELETE_WINDOW", on_closing)
    app.after(100, poll_log_queue)

    if app_settings.get("auto_refresh", True):
        app.after(0, controller.refresh)
    else:
        controller.redraw()

    app.mainloop()


# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _resolve_host(
        app_settings: Dict[str, Any],
        filter_config: Dict[str, Any],
) -> Tuple[HostBridge, FilterConfig, bool]:
    """
    Choose the HTTP bridge when a host URL is configured, else the demo host.

    In demo mode an incomplete record is completed with the demo mapping.
    """
    config = FilterConfig.from_dict(filter_config)
    host_url = (app_settings.get("host_url") or "").strip()

    if host_url:
        logger.info(f"GUI Lifecycle: Connecting to dashboard bridge at {host_url}")
        return HttpHost(host_url), config, False

    logger.info("GUI Lifecycle: No dashboard host configured. Demo mode active.")
    if not config.is_complete:
        config = FilterConfig.from_dict(dict(const.DEMO_FILTER_CONFIG))
    return MemoryHost.demo(), config, True


if __name__ == "__main__":
    main()
