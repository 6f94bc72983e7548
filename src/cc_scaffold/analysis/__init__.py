"""External analysis with the Claude CLI and the offline audit."""

from .claude_cli import (
    ClaudeAnalyzer,
    apply_recommendations,
    build_analysis_prompt,
    parse_analysis_response,
    quick_audit,
)

__all__ = [
    "ClaudeAnalyzer",
    "apply_recommendations",
    "build_analysis_prompt",
    "parse_analysis_response",
    "quick_audit",
]
