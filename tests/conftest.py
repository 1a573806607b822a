from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. Isolation of the persisted config file from the real user folder.
3. Shared row and forest fixtures used across unit tests.
"""

import os
import sys
from typing import Any, Dict, List, Optional

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

from hierfilter.core.hierarchy.builder import build_hierarchy  # noqa: E402
from hierfilter.domain.tree_models import Forest  # noqa: E402


def pytest_configure(config: Any) -> None:
    config.addinivalue_line("markers", "gui: tests exercising the customtkinter interface layer")


# -----------------------------------------------------------------------------
# Isolation
# -----------------------------------------------------------------------------
@pytest.fixture(autouse=True)
def isolated_config_file(tmp_path, monkeypatch):
    """Point the persisted app state at a per-test temporary file."""
    config_path = tmp_path / "config.json"
    monkeypatch.setattr("hierfilter.domain.config.CONFIG_FILE", str(config_path))
    return config_path


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
def make_rows(pairs: List[tuple]) -> List[Dict[str, Optional[str]]]:
    """Build user/leader mappings from (user, leader) tuples."""
    return [{"user": user, "leader": leader} for user, leader in pairs]


@pytest.fixture
def scenario_rows() -> List[Dict[str, Optional[str]]]:
    """
    Small organisation used across the engine tests.

    Carlos
    ├── Ana
    │   └── Luis
    └── María
        ├── Juan
        └── Pedro
    """
    return make_rows([
        ("Carlos", None),
        ("María", "Carlos"),
        ("Juan", "María"),
        ("Pedro", "María"),
        ("Ana", "Carlos"),
        ("Luis", "Ana"),
    ])


@pytest.fixture
def scenario_forest(scenario_rows) -> Forest:
    return build_hierarchy(scenario_rows, user_key="user", leader_key="leader")


@pytest.fixture
def config_dict() -> Dict[str, Any]:
    """Complete filter record matching the demo organisation."""
    return {
        "source_name": "Hoja de Usuarios",
        "entity_field": "Usuario",
        "parent_field": "Lider",
        "display_field": None,
    }
