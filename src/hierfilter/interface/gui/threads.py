from __future__ import annotations

"""
Background Worker Threads for GUI Operations.

Host round-trips (row fetches and filter propagation) run on daemon
threads so the widget never freezes while the dashboard answers. Results
travel back through callbacks; the controller marshals them onto the Tk
main loop.
"""

import logging
from typing import Any, Callable, FrozenSet

from hierfilter.core.services.session import HierarchySession
from hierfilter.domain.errors import ConfigurationError, HostError
from hierfilter.domain.session_models import FilterResult

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# DATA REFRESH WORKER
# -----------------------------------------------------------------------------

def run_refresh_task(
        session: HierarchySession,
        seq: int,
        on_complete: Callable[[int, Any], None],
) -> None:
    """
    Fetch host rows for a refresh stamp in a background thread.

    The forest itself is rebuilt on the main thread by the controller;
    this worker only performs the I/O.

    Args:
        session: Session whose host and configuration are used.
        seq: Refresh stamp issued by session.begin_refresh().
        on_complete: Receives the stamp and either the record list or the
            raised ConfigurationError/HostError.
    """
    try:
        records = session.fetch_records()
    except (ConfigurationError, HostError) as e:
        logger.debug(f"Refresh Thread: Request #{seq} failed: {e}")
        on_complete(seq, e)
        return
    except Exception as e:
        logger.critical(f"Refresh Thread: Unexpected failure: {e}", exc_info=True)
        on_complete(seq, HostError(str(e)))
        return

    logger.debug(f"Refresh Thread: Request #{seq} fetched {len(records)} record(s)")
    on_complete(seq, records)


# -----------------------------------------------------------------------------
# FILTER PROPAGATION WORKER
# -----------------------------------------------------------------------------

def run_filter_task(
        session: HierarchySession,
        seq: int,
        values: FrozenSet[str],
        on_complete: Callable[[FilterResult], None],
) -> None:
    """
    Push a selection to the host filter sink.

    Args:
        session: Session bound to the host.
        seq: Filter request stamp.
        values: Flattened selection; empty clears the filter.
        on_complete: Receives the FilterResult.
    """
    result = session.apply_filter(seq, values)
    on_complete(result)
