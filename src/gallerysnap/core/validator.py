from __future__ import annotations

"""
Configuration Validation Service.

Acts as the gatekeeper for the export/import engine, ensuring that the
configuration dictionary conforms to the expected schema. Handles type
coercion and default value injection.
"""

import logging
from typing import Any, Dict, List, Tuple

from gallerysnap.domain.config import get_default_config

logger = logging.getLogger(__name__)

# Inclusive bounds for the numeric fields
_INT_BOUNDS: Dict[str, Tuple[int, int]] = {
    "short_edge_target": (1, 16384),
    "jpeg_quality": (1, 95),
    "max_snapshot_mb": (0, 1 << 20),
}

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def validate_config(
        config: Any,
        *,
        strict: bool = False,
) -> Tuple[Dict[str, Any], List[str]]:
    """
    Validate and normalize the provided configuration dictionary.

    Converts untrusted inputs (CLI flags, persisted state) into strictly
    typed parameters and fills missing keys with domain defaults.

    Args:
        config: Raw configuration data (usually a dictionary).
        strict: If True, raises exceptions on type mismatch instead of coercing.

    Returns:
        Tuple[Dict[str, Any], List[str]]: The normalized configuration and
                                          a list of warnings.
    """
    warnings: List[str] = []
    defaults = get_default_config()

    if not isinstance(config, dict):
        msg = f"Invalid config type: expected dict, received {type(config).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using defaults.")
        logger.warning(msg)
        return defaults, warnings

    merged: Dict[str, Any] = dict(defaults)
    merged.update(config)

    string_fields = ["input_path", "output_path"]
    bool_fields = ["include_hidden", "pretty_json"]

    for field in string_fields:
        merged[field] = _as_str(
            merged.get(field), defaults.get(field, ""), field, warnings, strict
        )

    for field in bool_fields:
        merged[field] = _as_bool(
            merged.get(field), defaults.get(field, False), field, warnings, strict
        )

    for field, (low, high) in _INT_BOUNDS.items():
        merged[field] = _as_bounded_int(
            merged.get(field), defaults[field], low, high, field, warnings, strict
        )

    return merged, warnings

# -----------------------------------------------------------------------------
# PRIVATE HELPERS: TYPE COERCION
# -----------------------------------------------------------------------------

def _as_str(value: Any, fallback: str, field: str, warnings: List[str], strict: bool) -> str:
    """Validate and sanitize string inputs."""
    if value is None:
        return fallback
    if isinstance(value, str):
        return value.strip()

    msg = f"Invalid field '{field}': expected str, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_bool(value: Any, fallback: bool, field: str, warnings: List[str], strict: bool) -> bool:
    """Coerce various input types into native booleans."""
    if isinstance(value, bool):
        return value
    if value is None:
        return fallback

    if not strict:
        if isinstance(value, (int, float)) and value in (0, 1):
            warnings.append(f"Field '{field}' converted from number {value} to bool.")
            return bool(value)
        if isinstance(value, str):
            s = value.strip().lower()
            if s in ("true", "1", "yes", "y"):
                warnings.append(f"Field '{field}' converted from '{value}' to True.")
                return True
            if s in ("false", "0", "no", "n"):
                warnings.append(f"Field '{field}' converted from '{value}' to False.")
                return False

    msg = f"Invalid field '{field}': expected bool, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_bounded_int(
        value: Any,
        fallback: int,
        low: int,
        high: int,
        field: str,
        warnings: List[str],
        strict: bool
) -> int:
    """Coerce numeric input into an int clamped to [low, high]."""
    if value is None:
        return fallback

    number: Any = value
    if isinstance(value, bool):
        number = None
    elif isinstance(value, str) and not strict:
        try:
            number = int(value.strip())
            warnings.append(f"Field '{field}' converted from '{value}' to {number}.")
        except ValueError:
            number = None
    elif isinstance(value, float) and not strict and value.is_integer():
        number = int(value)

    if not isinstance(number, int) or isinstance(number, bool):
        msg = f"Invalid field '{field}': expected int, received {type(value).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using fallback.")
        return fallback

    if number < low or number > high:
        msg = f"Field '{field}' out of range [{low}, {high}]: {number}."
        if strict:
            raise ValueError(msg)
        warnings.append(f"{msg} Clamped.")
        return max(low, min(high, number))

    return number
