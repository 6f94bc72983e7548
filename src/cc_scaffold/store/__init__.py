"""Loading, merging and backing up existing configuration."""

from .backup import BackupManager
from .loader import ConfigLoader, extract_custom_sections, load_existing_config
from .merger import diff, format_diff, merge, merge_components

__all__ = [
    "BackupManager",
    "ConfigLoader",
    "extract_custom_sections",
    "load_existing_config",
    "diff",
    "format_diff",
    "merge",
    "merge_components",
]
