"""Configuration management for CC Scaffold."""

import os
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv
from pydantic import BaseModel, Field


load_dotenv()


DEFAULT_IGNORED_DIRS = [
    ".git",
    "node_modules",
    "__pycache__",
    ".venv",
    "venv",
    "dist",
    "build",
    "coverage",
    "bin",
    "obj",
    ".next",
    ".nuxt",
    "vendor",
]


class Config(BaseModel):
    """Application configuration."""

    # Output Settings
    output_dir: Path = Field(default=Path(".claude"))
    backup_keep: int = Field(default=5)

    # Scanner Settings
    scan_file_limit: int = Field(default=30)  # config-like files searched for connection strings
    scan_max_depth: int = Field(default=6)
    ignored_dirs: list[str] = Field(default_factory=lambda: DEFAULT_IGNORED_DIRS.copy())

    # External Analysis Settings
    claude_binary: str = Field(default="claude")
    analysis_timeout: int = Field(default=300)
    analysis_stall_timeout: int = Field(default=30)

    log_level: str = Field(default="WARNING")

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        def _parse_int(value: Optional[str], fallback: int) -> int:
            try:
                return int(value) if value is not None else fallback
            except ValueError:
                return fallback

        ignored_dirs = DEFAULT_IGNORED_DIRS.copy()
        extra_ignored = os.getenv("CC_SCAFFOLD_IGNORED_DIRS")
        if extra_ignored:
            ignored_dirs.extend(
                [entry.strip() for entry in extra_ignored.split(",") if entry.strip()]
            )

        output_dir_env = os.getenv("CC_SCAFFOLD_OUTPUT_DIR")

        return cls(
            output_dir=Path(output_dir_env) if output_dir_env else Path(".claude"),
            backup_keep=_parse_int(os.getenv("CC_SCAFFOLD_BACKUP_KEEP"), 5),
            scan_file_limit=_parse_int(os.getenv("CC_SCAFFOLD_SCAN_FILE_LIMIT"), 30),
            scan_max_depth=_parse_int(os.getenv("CC_SCAFFOLD_SCAN_MAX_DEPTH"), 6),
            ignored_dirs=ignored_dirs,
            claude_binary=os.getenv("CC_SCAFFOLD_CLAUDE_BINARY", "claude"),
            analysis_timeout=_parse_int(os.getenv("CC_SCAFFOLD_ANALYSIS_TIMEOUT"), 300),
            analysis_stall_timeout=_parse_int(
                os.getenv("CC_SCAFFOLD_ANALYSIS_STALL_TIMEOUT"), 30
            ),
            log_level=os.getenv("CC_SCAFFOLD_LOG_LEVEL", "WARNING"),
        )
