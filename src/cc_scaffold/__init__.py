"""CC Scaffold - Generate Claude Code configuration for a project."""

__version__ = "0.1.0"

from .config import Config
from .models import (
    ContextModel,
    ExistingConfig,
    ProjectConfig,
    RecommendationResult,
    ResolvedConfig,
    ScanResult,
)
from .analyzer import RecommendationEngine, analyze_project
from .scanner import ProjectScanner
from .store import BackupManager, diff, load_existing_config, merge
from .generator import ConfigGenerator

__all__ = [
    "Config",
    "ContextModel",
    "ExistingConfig",
    "ProjectConfig",
    "RecommendationResult",
    "ResolvedConfig",
    "ScanResult",
    "RecommendationEngine",
    "analyze_project",
    "ProjectScanner",
    "BackupManager",
    "diff",
    "load_existing_config",
    "merge",
    "ConfigGenerator",
]
