"""Project characteristic scanning."""

from .project import ProjectScanner, format_scan_results

__all__ = ["ProjectScanner", "format_scan_results"]
