"""Configuration module for feature flags and settings."""

from .settings import (
    FEATURE_FLAGS,
    get_all_flags,
    get_asset_root,
    get_type_lookup_file,
    is_enabled,
    set_flag,
)

__all__ = [
    "FEATURE_FLAGS",
    "get_all_flags",
    "get_asset_root",
    "get_type_lookup_file",
    "is_enabled",
    "set_flag",
]
