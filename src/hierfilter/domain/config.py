from __future__ import annotations

"""
Configuration Domain Management.

Handles persistent storage of application state and of the filter
configuration record (source and field names) using JSON. Supports
schema migration and default fallback.
"""

import json
import logging
import os
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from hierfilter.domain.constants import CURRENT_CONFIG_VERSION
from hierfilter.domain.migrations import run_migrations
from hierfilter.infra.fs import get_user_data_dir

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Constants & Defaults
# -----------------------------------------------------------------------------
CONFIG_FILE = os.path.join(get_user_data_dir(), "config.json")

REQUIRED_FIELDS = ("source_name", "entity_field", "parent_field")


# -----------------------------------------------------------------------------
# Configuration Models
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class FilterConfig:
    """
    Record naming the host source and the fields the hierarchy is built from.

    Attributes:
        source_name: Host data source (worksheet) to read rows from.
        entity_field: Field holding the entity (user) key.
        parent_field: Field holding the parent (leader) key.
        display_field: Optional field holding the display label.
    """
    source_name: str = ""
    entity_field: str = ""
    parent_field: str = ""
    display_field: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FilterConfig":
        """Build a record from a plain dictionary, ignoring unknown keys."""
        display = data.get("display_field") or None
        return cls(
            source_name=str(data.get("source_name") or ""),
            entity_field=str(data.get("entity_field") or ""),
            parent_field=str(data.get("parent_field") or ""),
            display_field=str(display) if display else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @property
    def is_complete(self) -> bool:
        """True when all required fields are non-empty."""
        return all(getattr(self, name).strip() for name in REQUIRED_FIELDS)


def get_default_config() -> Dict[str, Any]:
    """
    Generate the default filter configuration record.

    Returns:
        Dict[str, Any]: Empty record; a build requires the user to fill it.
    """
    return FilterConfig().to_dict()


def get_default_app_state() -> Dict[str, Any]:
    """
    Generate the complete default application state structure.

    Returns:
        Dict[str, Any]: The full JSON structure for config.json.
    """
    return {
        "version": CURRENT_CONFIG_VERSION,
        "app_settings": {
            "appearance": "System",
            "locale": "en",
            "host_url": "",
            "auto_refresh": True,
        },
        "filter_config": get_default_config(),
    }


# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------
def load_app_state() -> Dict[str, Any]:
    """
    Load application state from disk.
    Handles legacy schema migration automatically.

    Returns:
        Dict[str, Any]: The loaded state or a default structure on failure.
    """
    default_state = get_default_app_state()

    if not os.path.exists(CONFIG_FILE):
        logger.debug("Config file not found. Returning defaults.")
        return default_state

    try:
        with open(CONFIG_FILE, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load config: {e}. Using defaults.")
        return default_state

    if not isinstance(data, dict):
        logger.warning("Corrupted config file. Resetting to defaults.")
        return default_state

    data = run_migrations(data, get_default_app_state())

    # Merge with defaults to ensure new keys exist
    state = default_state
    if isinstance(data.get("app_settings"), dict):
        state["app_settings"].update(data["app_settings"])
    if isinstance(data.get("filter_config"), dict):
        state["filter_config"].update(
            FilterConfig.from_dict(data["filter_config"]).to_dict()
        )

    # Update version stamp
    state["version"] = CURRENT_CONFIG_VERSION
    return state


def save_app_state(state: Dict[str, Any]) -> None:
    """
    Persist application state to disk.

    Args:
        state: The state dictionary to save.
    """
    try:
        os.makedirs(os.path.dirname(CONFIG_FILE), exist_ok=True)
        state["version"] = CURRENT_CONFIG_VERSION
        with open(CONFIG_FILE, "w", encoding="utf-8") as f:
            json.dump(state, f, ensure_ascii=False, indent=4)
        logger.debug(f"Configuration saved to {CONFIG_FILE}")
    except OSError as e:
        logger.error(f"Failed to save configuration: {e}")


# -----------------------------------------------------------------------------
# Facade API
# -----------------------------------------------------------------------------
def load_config() -> FilterConfig:
    """
    Retrieve the persisted filter configuration record directly.
    """
    state = load_app_state()
    return FilterConfig.from_dict(state.get("filter_config", {}))


def save_config(config: FilterConfig) -> None:
    """
    Save the provided record as the active 'filter_config'.
    """
    state = load_app_state()
    state["filter_config"] = config.to_dict()
    save_app_state(state)
