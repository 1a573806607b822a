from __future__ import annotations

"""
Domain Constants and Static Data Structures.

Provides centralized access to application-wide constants, including
versioning, the host null-value vocabulary and the demo organisation
used when no host dashboard is attached.
"""

from typing import Dict, FrozenSet, List, Optional

CURRENT_CONFIG_VERSION = "1.2.0"
APP_NAME = "HierFilter"

# -----------------------------------------------------------------------------
# HOST VALUE NORMALISATION
# -----------------------------------------------------------------------------

# Formatted values the host emits for an empty leader cell
NULL_SENTINELS: FrozenSet[str] = frozenset({"", "%null%", "Null", "null", "NULL"})

# Canonical field names used when rows are already normalised
ENTITY_KEY = "entity_id"
PARENT_KEY = "parent_id"
DISPLAY_KEY = "display_label"

# Bound on memoised search results per session
SEARCH_CACHE_SIZE = 64

# -----------------------------------------------------------------------------
# DEMO DATASET
# -----------------------------------------------------------------------------

DEMO_SOURCE_NAME = "Hoja de Usuarios"

DEMO_ROWS: List[Dict[str, Optional[str]]] = [
    {"Usuario": "Carlos", "Lider": None},
    {"Usuario": "María", "Lider": "Carlos"},
    {"Usuario": "Juan", "Lider": "María"},
    {"Usuario": "Pedro", "Lider": "María"},
    {"Usuario": "Ana", "Lider": "Carlos"},
    {"Usuario": "Luis", "Lider": "Ana"},
    {"Usuario": "Elena", "Lider": "Ana"},
    {"Usuario": "Roberto", "Lider": "Luis"},
    {"Usuario": "Sofía", "Lider": "Luis"},
    {"Usuario": "Miguel", "Lider": "Elena"},
    {"Usuario": "Laura", "Lider": "Juan"},
    {"Usuario": "Diego", "Lider": "Juan"},
    {"Usuario": "Carmen", "Lider": "Pedro"},
    {"Usuario": "Fernando", "Lider": "Roberto"},
    {"Usuario": "Isabel", "Lider": "Roberto"},
]

DEMO_SALES_ROWS: List[Dict[str, Optional[str]]] = [
    {"Vendedor": "Lucía", "Supervisor": None, "Región": "Norte", "Monto": "1200"},
    {"Vendedor": "Tomás", "Supervisor": "Lucía", "Región": "Norte", "Monto": "800"},
    {"Vendedor": "Raúl", "Supervisor": "Lucía", "Región": "Sur", "Monto": "650"},
]

DEMO_SOURCES: Dict[str, List[Dict[str, Optional[str]]]] = {
    DEMO_SOURCE_NAME: DEMO_ROWS,
    "Datos de Ventas": DEMO_SALES_ROWS,
}

# Field mapping that makes the demo organisation build out of the box
DEMO_FILTER_CONFIG: Dict[str, str] = {
    "source_name": DEMO_SOURCE_NAME,
    "entity_field": "Usuario",
    "parent_field": "Lider",
}
