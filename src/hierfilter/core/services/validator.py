from __future__ import annotations

"""
Configuration Validation Service.

Acts as the gatekeeper before any hierarchy build: normalises untrusted
configuration input (CLI, GUI, persisted JSON) into a FilterConfig,
checks that the required fields are present, and resolves the named
source and fields against the host schema.
"""

import logging
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from hierfilter.domain.config import REQUIRED_FIELDS, FilterConfig
from hierfilter.domain.errors import ConfigurationError

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def validate_config(
        config: Any,
        *,
        strict: bool = False,
) -> Tuple[FilterConfig, List[str]]:
    """
    Validate and normalize the provided configuration.

    Accepts a FilterConfig or a plain dictionary. Values are stripped;
    non-string values are coerced (or rejected in strict mode).

    Args:
        config: Raw configuration data.
        strict: If True, raises on type mismatch and on missing required fields.

    Returns:
        Tuple[FilterConfig, List[str]]: The normalized record and a list of warnings.
    """
    warnings: List[str] = []

    if isinstance(config, FilterConfig):
        config = config.to_dict()

    # 1. Base Type Validation
    if not isinstance(config, dict):
        msg = f"Invalid config type: expected dict, received {type(config).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using defaults.")
        logger.warning(msg)
        return FilterConfig(), warnings

    # 2. Field Processing & Normalization
    clean: Dict[str, Any] = {}
    for field in REQUIRED_FIELDS:
        clean[field] = _as_str(config.get(field), field, warnings, strict)
    clean["display_field"] = _as_str(config.get("display_field"), "display_field", warnings, strict)

    record = FilterConfig.from_dict(clean)

    # 3. Completeness
    missing = missing_fields(record)
    if missing:
        msg = f"Missing required field(s): {', '.join(missing)}."
        if strict:
            raise ConfigurationError(msg, field=missing[0])
        warnings.append(msg)

    return record, warnings


def missing_fields(config: FilterConfig) -> List[str]:
    """List the required fields that are empty, in declaration order."""
    return [name for name in REQUIRED_FIELDS if not getattr(config, name).strip()]


def require_complete(config: FilterConfig) -> None:
    """
    Reject a record that cannot drive a build.

    Raises:
        ConfigurationError: Naming the first empty required field.
    """
    missing = missing_fields(config)
    if missing:
        raise ConfigurationError(
            f"Configuration field '{missing[0]}' is required.", field=missing[0]
        )


def validate_against_schema(
        config: FilterConfig,
        sources: Mapping[str, Sequence[str]],
) -> None:
    """
    Resolve the configured source and fields in the host schema.

    Args:
        config: Complete filter configuration.
        sources: Host schema (source name -> field names).

    Raises:
        ConfigurationError: When the source or any configured field is unknown.
    """
    require_complete(config)

    if config.source_name not in sources:
        raise ConfigurationError(
            f"Source '{config.source_name}' not found.", field="source_name"
        )

    available = set(sources[config.source_name])
    checks = [
        ("entity_field", config.entity_field),
        ("parent_field", config.parent_field),
        ("display_field", config.display_field),
    ]
    for field, value in checks:
        if value and value not in available:
            raise ConfigurationError(
                f"Field '{value}' ({field}) not found in source '{config.source_name}'.",
                field=field,
            )


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: TYPE COERCION
# -----------------------------------------------------------------------------

def _as_str(value: Any, field: str, warnings: List[str], strict: bool) -> str:
    """Validate and sanitize string inputs."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()

    msg = f"Invalid field '{field}': expected str, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Converted to text.")
    return str(value).strip()
