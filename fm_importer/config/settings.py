"""
Configuration and Feature Flags for the importers

This module provides feature flags that switch the importers between the
lenient behavior of the Papyrus importer they replace and stricter
fail-fast modes. Flags are controlled via environment variables for safe
toggling without code changes.

Usage:
    from fm_importer.config.settings import is_enabled

    if is_enabled('strict_references'):
        raise UnresolvedReferenceError(...)
    else:
        logger.warning(...)

Environment Variables:
    FM_STRICT_REFERENCES=true/false  - Raise on link endpoints missing from the id map
    FM_STRICT_STEREOTYPES=true/false - Raise on duplicate stereotype applications
    FM_IMPORT_KNOWS_EDGES=true/false - Import 'knows' edges from graph documents
    FM_SKIP_UNKNOWN_TYPES=true/false - Skip XMI types missing from the type lookup
    FM_TYPE_LOOKUP_FILE=<path>       - YAML file extending the type lookup table
    FM_ASSET_ROOT=<path>             - Directory the MCP server resolves uploads from
"""

import os
from pathlib import Path
from typing import Dict, Optional


# Feature flags with environment variable overrides
FEATURE_FLAGS: Dict[str, bool] = {
    # Unresolved link endpoints become None pointers unless this is on
    'strict_references': os.getenv('FM_STRICT_REFERENCES', 'false').lower() == 'true',

    # Duplicate stereotype target ids are last-wins unless this is on
    'strict_stereotype_conflicts': os.getenv('FM_STRICT_STEREOTYPES', 'false').lower() == 'true',

    'import_knows_edges': os.getenv('FM_IMPORT_KNOWS_EDGES', 'false').lower() == 'true',

    'skip_unknown_element_types': os.getenv('FM_SKIP_UNKNOWN_TYPES', 'false').lower() == 'true',
}


def is_enabled(flag: str) -> bool:
    """
    Check if a feature flag is enabled.

    Args:
        flag: Feature flag name (e.g., 'strict_references')

    Returns:
        True if flag is enabled, False otherwise

    Raises:
        KeyError: If flag name is not recognized

    Example:
        >>> is_enabled('strict_references')
        False  # Default

        >>> # After: export FM_STRICT_REFERENCES=true
        >>> is_enabled('strict_references')
        True
    """
    if flag not in FEATURE_FLAGS:
        available = ', '.join(FEATURE_FLAGS.keys())
        raise KeyError(
            f"Unknown feature flag: '{flag}'. "
            f"Available flags: {available}"
        )

    return FEATURE_FLAGS[flag]


def get_all_flags() -> Dict[str, bool]:
    """
    Get all feature flags and their current state.

    Returns:
        Dictionary of flag names to boolean values
    """
    return FEATURE_FLAGS.copy()


def set_flag(flag: str, enabled: bool) -> None:
    """
    Programmatically set a feature flag (for testing only).

    Args:
        flag: Feature flag name
        enabled: True to enable, False to disable

    Warning:
        This is for testing only. In production, use environment variables.
    """
    if flag not in FEATURE_FLAGS:
        available = ', '.join(FEATURE_FLAGS.keys())
        raise KeyError(
            f"Unknown feature flag: '{flag}'. "
            f"Available flags: {available}"
        )

    FEATURE_FLAGS[flag] = enabled


def get_type_lookup_file() -> Optional[Path]:
    """Path of the YAML type lookup override, if one is configured."""
    value = os.getenv('FM_TYPE_LOOKUP_FILE')
    return Path(value) if value else None


def get_asset_root() -> Path:
    """Directory uploaded assets are resolved from (defaults to the cwd)."""
    return Path(os.getenv('FM_ASSET_ROOT', '.'))
