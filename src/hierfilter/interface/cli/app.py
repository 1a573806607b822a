from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: initialization of logging, resolution of
the filter configuration (defaults, persistent storage and CLI
overrides), host construction, hierarchy refresh, search, selection and
result rendering. Acts as the headless counterpart of the GUI widget.
"""

import json
import os
import sys
from typing import Any, Dict, List, Optional

from hierfilter.core.hierarchy.query import find_by_id
from hierfilter.core.hierarchy.render import forest_to_dicts, render_forest
from hierfilter.core.services.session import HierarchySession
from hierfilter.core.services.validator import validate_config
from hierfilter.domain.config import FilterConfig, load_config, save_config
from hierfilter.domain.constants import DEMO_FILTER_CONFIG
from hierfilter.domain.errors import HostError
from hierfilter.domain.session_models import ERROR_CONFIGURATION, RefreshResult
from hierfilter.infra.hosts import HostBridge, HttpHost, MemoryHost
from hierfilter.infra.logging import LoggingConfig, configure_logging, get_logger
from hierfilter.interface.cli import args as cli_args
from hierfilter.utils.i18n import i18n

logger = get_logger(__name__)

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the main CLI application workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code (0 ok, 1 host failure, 2 configuration error,
        130 interrupted).
    """
    if sys.platform == "win32":
        if hasattr(sys.stdout, "reconfigure"):
            sys.stdout.reconfigure(encoding="utf-8")
        if hasattr(sys.stderr, "reconfigure"):
            sys.stderr.reconfigure(encoding="utf-8")

    # 1. Argument parsing phase
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    # 2. Logging bootstrap (CLI-specific: Console stderr)
    log_level = "DEBUG" if args.debug else "INFO"
    configure_logging(LoggingConfig(level=log_level, console=True, log_file=None))

    if args.lang:
        i18n.load_locale(args.lang)

    logger.debug("CLI execution initiated. Resolving configuration hierarchy...")

    try:
        return _run(args)
    except KeyboardInterrupt:
        msg = i18n.t("cli.status.interrupted")
        logger.warning(msg)
        print(msg, file=sys.stderr)
        return 130


def _run(args: Any) -> int:
    # 3. Resolve base configuration (Default vs Persistent state)
    base_conf = FilterConfig() if args.use_defaults else load_config()

    # 4. Map and merge command-line overrides
    overrides = cli_args.args_to_overrides(args)
    raw_conf = _merge_config(base_conf.to_dict(), overrides)
    raw_conf = _apply_source_defaults(raw_conf, args)

    # 5. Schema validation and normalization
    clean_conf, warnings = validate_config(raw_conf, strict=False)
    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")

    # Short-circuit if configuration dump is requested
    if args.dump_config:
        print(json.dumps(clean_conf.to_dict(), ensure_ascii=False, indent=2))
        return 0

    # 6. Host construction
    try:
        host = _build_host(args)
    except HostError as e:
        return _fail(i18n.t("cli.errors.host", error=str(e)), 1)

    # 7. Hierarchy refresh
    session = HierarchySession(host, clean_conf)
    result = session.refresh()
    if not result.ok:
        return _report_refresh_failure(result)

    # 8. Search, selection and expansion
    session.set_search(args.search)

    for node_id in args.select_ids:
        try:
            session.select(node_id)
        except KeyError:
            return _fail(i18n.t("cli.errors.unknown_node", id=node_id), 2)

    if args.expand_all:
        session.expand_all()
    for node_id in args.expand_ids:
        if find_by_id(session.forest, node_id) is None:
            return _fail(i18n.t("cli.errors.unknown_node", id=node_id), 2)
        if not session.expansion.is_expanded(node_id):
            session.toggle_expanded(node_id)

    if args.save_config:
        save_config(clean_conf)
        logger.info("Effective configuration persisted.")

    # 9. Output rendering phase
    if args.json_output:
        print(json.dumps(_build_json_report(session, result), ensure_ascii=False, indent=2))
    else:
        _print_human_summary(session)

    last_filter = session.last_filter
    if last_filter is not None and not last_filter.ok and not last_filter.stale:
        print(f"ERROR: {i18n.t('cli.errors.filter', error=last_filter.error)}", file=sys.stderr)
        return 1
    return 0

# -----------------------------------------------------------------------------
# CONFIGURATION MERGING
# -----------------------------------------------------------------------------

def _merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Perform a shallow merge of override values into the base configuration.

    Only known keys are merged and None means "not provided".

    Args:
        base: The primary configuration dictionary.
        overrides: New values to inject.

    Returns:
        Dict[str, Any]: The merged configuration state.
    """
    out = dict(base)
    for k in ("source_name", "entity_field", "parent_field", "display_field"):
        if k in overrides and overrides[k] is not None:
            out[k] = overrides[k]
    return out


def _apply_source_defaults(conf: Dict[str, Any], args: Any) -> Dict[str, Any]:
    """Fill blank fields with values matching the selected data source."""
    out = dict(conf)
    if args.csv_path:
        if not out.get("source_name"):
            out["source_name"] = os.path.splitext(os.path.basename(args.csv_path))[0]
        return out

    if args.host_url:
        return out

    # Demo mode: bundled organisation
    for key, value in DEMO_FILTER_CONFIG.items():
        if not out.get(key):
            out[key] = value
    return out


def _build_host(args: Any) -> HostBridge:
    if args.csv_path:
        return MemoryHost.from_csv(args.csv_path)
    if args.host_url:
        return HttpHost(args.host_url)
    logger.debug("No host specified. Running against the demo organisation.")
    return MemoryHost.demo()

# -----------------------------------------------------------------------------
# VIEW RENDERING
# -----------------------------------------------------------------------------

def _fail(msg: str, code: int) -> int:
    logger.error(msg)
    print(f"ERROR: {msg}", file=sys.stderr)
    return code


def _report_refresh_failure(result: RefreshResult) -> int:
    if result.error_kind == ERROR_CONFIGURATION:
        return _fail(i18n.t("cli.errors.config", error=result.error), 2)
    return _fail(i18n.t("cli.errors.host", error=result.error), 1)


def _footer(selected_count: int) -> str:
    if selected_count:
        return i18n.t("cli.status.selected", count=selected_count)
    return i18n.t("cli.status.no_filter")


def _build_json_report(session: HierarchySession, result: RefreshResult) -> Dict[str, Any]:
    selected = session.selection.selected
    last_filter = session.last_filter
    return {
        "config": session.config.to_dict(),
        "summary": dict(result.summary),
        "search": session.search_term,
        "forest": forest_to_dicts(session.visible_forest(), selected),
        "selected": sorted(selected),
        "filter": None if last_filter is None else {
            "ok": last_filter.ok,
            "error": last_filter.error,
            "values": sorted(last_filter.values),
        },
    }


def _print_human_summary(session: HierarchySession) -> None:
    """
    Print the visible tree followed by the selection footer.

    Args:
        session: Refreshed session holding forest, selection and expansion.
    """
    visible = session.visible_forest()
    selected = session.selection.selected

    if not session.forest:
        print(i18n.t("cli.status.no_data"))
    elif not visible:
        print(i18n.t("cli.status.no_results"))
    else:
        for line in render_forest(visible, selected, session.expansion.expanded):
            print(line)

    print()
    print(_footer(len(selected)))

# -----------------------------------------------------------------------------
# CLI ENTRYPOINT
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
