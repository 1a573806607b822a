from __future__ import annotations

import json
import logging
from typing import Any, Dict

logger = logging.getLogger(__name__)

# Legacy camelCase record keys -> current snake_case keys
_LEGACY_KEY_MAP: Dict[str, str] = {
    "worksheetName": "source_name",
    "sourceName": "source_name",
    "userField": "entity_field",
    "entityFieldName": "entity_field",
    "leaderField": "parent_field",
    "parentFieldName": "parent_field",
    "fullNameField": "display_field",
    "displayFieldName": "display_field",
}


def run_migrations(data: Dict[str, Any], default_state: Dict[str, Any]) -> Dict[str, Any]:
    """
    Orchestrate the migration of legacy configuration schemas to the current version.

    Applies a chain of responsibility to transform raw loaded JSON into a
    structure compatible with the current application state.

    Args:
        data: The raw dictionary loaded from config.json.
        default_state: A clean instance of the current version's default state.

    Returns:
        Dict[str, Any]: The fully migrated state dictionary.
    """
    # 1. Migration: Flat extension settings record (v1.0) -> app state (v1.1)
    # Detection: 'worksheetName' or 'hierarchyConfig' exists at root level
    if "worksheetName" in data or "hierarchyConfig" in data:
        logger.info("Migrations: Detected legacy v1.0 record. Upgrading to v1.1...")
        legacy = data.get("hierarchyConfig", data)
        if isinstance(legacy, str):
            legacy = _parse_embedded_record(legacy)
        new_state = default_state.copy()
        new_state["filter_config"] = dict(default_state.get("filter_config", {}))
        new_state["filter_config"].update(legacy)
        data = new_state

    # 2. Migration: camelCase record keys -> snake_case keys (v1.2)
    _migrate_record_keys(data)

    return data


def _parse_embedded_record(raw: str) -> Dict[str, Any]:
    """Decode the JSON string the extension settings store used to hold."""
    try:
        parsed = json.loads(raw)
    except ValueError as e:
        logger.warning(f"Migrations: Discarding unreadable embedded record: {e}")
        return {}
    return parsed if isinstance(parsed, dict) else {}


def _migrate_record_keys(data: Dict[str, Any]) -> None:
    """
    Rename legacy camelCase keys inside 'filter_config' in-place.

    Existing snake_case values win over legacy ones.
    """
    record = data.get("filter_config")
    if not isinstance(record, dict):
        return

    for legacy_key, key in _LEGACY_KEY_MAP.items():
        if legacy_key not in record:
            continue
        value = record.pop(legacy_key)
        if not record.get(key):
            record[key] = value
            logger.info(f"Migrations: filter_config {legacy_key} -> {key}")
