from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line interface schema and translates the parsed
namespace into filter configuration overrides.
"""

import argparse
from typing import Any, Dict

from hierfilter.utils.i18n import i18n

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the HierFilter CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="hierfilter",
        description=i18n.t("app.description"),
    )

    # --- Data Source ---
    source = p.add_mutually_exclusive_group()
    source.add_argument("--demo", action="store_true", help=i18n.t("cli.args.demo"))
    source.add_argument("--csv", dest="csv_path", default=None, help=i18n.t("cli.args.csv"))
    source.add_argument("--host", dest="host_url", default=None, help=i18n.t("cli.args.host"))

    # --- Filter Configuration ---
    p.add_argument("--source", dest="source_name", default=None, help=i18n.t("cli.args.source"))
    p.add_argument(
        "--entity-field",
        dest="entity_field",
        default=None,
        help=i18n.t("cli.args.entity_field"),
    )
    p.add_argument(
        "--parent-field",
        dest="parent_field",
        default=None,
        help=i18n.t("cli.args.parent_field"),
    )
    p.add_argument(
        "--display-field",
        dest="display_field",
        default=None,
        help=i18n.t("cli.args.display_field"),
    )

    # --- Tree Interaction ---
    p.add_argument("--search", default=None, help=i18n.t("cli.args.search"))
    p.add_argument(
        "--select",
        dest="select_ids",
        action="append",
        default=[],
        metavar="ID",
        help=i18n.t("cli.args.select"),
    )
    p.add_argument(
        "--expand",
        dest="expand_ids",
        action="append",
        default=[],
        metavar="ID",
        help=i18n.t("cli.args.expand"),
    )
    p.add_argument("--expand-all", action="store_true", help=i18n.t("cli.args.expand_all"))

    # --- Configuration and Diagnostic Tools ---
    p.add_argument("--save-config", action="store_true", help=i18n.t("cli.args.save_config"))
    p.add_argument("--use-defaults", action="store_true", help=i18n.t("cli.args.use_defaults"))
    p.add_argument("--dump-config", action="store_true", help=i18n.t("cli.args.dump_config"))
    p.add_argument("--debug", action="store_true", help=i18n.t("cli.args.debug"))
    p.add_argument("--lang", default=None, help=i18n.t("cli.args.lang"))

    # --- Format Selection ---
    p.add_argument("--json", dest="json_output", action="store_true", help=i18n.t("cli.args.json"))

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into configuration overrides.

    Unset options map to None so the merge step keeps the base value.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Configuration overrides subset.
    """
    return {
        "source_name": args.source_name,
        "entity_field": args.entity_field,
        "parent_field": args.parent_field,
        "display_field": args.display_field,
    }
