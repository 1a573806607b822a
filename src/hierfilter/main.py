from __future__ import annotations

"""
Main Entry Point and Global Supervisor.

Routes execution to the CLI (any argument present) or to the GUI, and
installs a global exception hook so fatal crashes are logged and
reported through the interface in use.
"""

import logging
import os
import sys
import traceback
from typing import Any

# -----------------------------------------------------------------------------
# ENVIRONMENT INITIALIZATION
# -----------------------------------------------------------------------------

# Make the src directory importable when run as a script
BASE_DIR = os.path.dirname(os.path.abspath(__file__))
if not getattr(sys, 'frozen', False):
    SRC_DIR = os.path.dirname(BASE_DIR)
    if SRC_DIR not in sys.path:
        sys.path.insert(0, SRC_DIR)


# -----------------------------------------------------------------------------
# GLOBAL SUPERVISOR (EXCEPTION HANDLING)
# -----------------------------------------------------------------------------

def global_exception_handler(exctype: type[BaseException], value: BaseException, tb: Any) -> None:
    """
    Trap unhandled exceptions and route them to interface-appropriate reporters.

    Args:
        exctype: Exception class.
        value: Exception instance.
        tb: Traceback object.
    """
    stack_trace = "".join(traceback.format_exception(exctype, value, tb))
    error_msg = str(value)

    logger = logging.getLogger("hierfilter.supervisor")
    logger.critical(f"FATAL EXCEPTION DETECTED: {error_msg}\n{stack_trace}")

    # CLI Fallback: Detailed trace to stderr
    if len(sys.argv) > 1:
        print("\n" + "=" * 80, file=sys.stderr)
        print("CRITICAL ERROR (HIERFILTER CLI)", file=sys.stderr)
        print("=" * 80, file=sys.stderr)
        print(stack_trace, file=sys.stderr)
        sys.exit(1)

    # GUI Fallback: native alert
    try:
        import tkinter.messagebox as mb
        from tkinter import Tk

        from hierfilter.utils.i18n import i18n

        root = Tk()
        root.withdraw()
        mb.showerror(
            f"{i18n.t('app.title')} - {i18n.t('gui.errors.title')}",
            i18n.t("gui.errors.fatal", error=error_msg),
        )
        root.destroy()
    except Exception:
        print(f"CRITICAL SYSTEM ERROR: {error_msg}\n{stack_trace}", file=sys.stderr)

    sys.exit(1)


# Hook into the Python interpreter exception flow
sys.excepthook = global_exception_handler


# -----------------------------------------------------------------------------
# EXECUTION ROUTING
# -----------------------------------------------------------------------------

def main() -> int:
    """
    Detect execution context and delegate to the specific interface controller.

    Returns:
        int: Process exit code.
    """
    try:
        if len(sys.argv) > 1:
            from hierfilter.interface.cli.app import main as cli_main
            return cli_main()

        from hierfilter.interface.gui.app import main as gui_main
        gui_main()
        return 0

    except Exception as e:
        global_exception_handler(type(e), e, sys.exc_info()[2])
        return 1


if __name__ == "__main__":
    sys.exit(main())
