"""Pytest configuration and shared fixtures."""

import json
import pytest
from pathlib import Path
from cc_scaffold.config import Config


@pytest.fixture
def temp_repo(tmp_path: Path) -> Path:
    """Create a temporary repository structure for testing."""
    repo = tmp_path / "test_repo"
    repo.mkdir()

    (repo / "README.md").write_text("# Test Project")
    (repo / "main.py").write_text("print('hello')")

    return repo


@pytest.fixture
def config() -> Config:
    """Provide a test configuration."""
    return Config(analysis_timeout=5, analysis_stall_timeout=1)


@pytest.fixture
def existing_claude(temp_repo: Path) -> Path:
    """Add a .claude/ directory with one customized skill, an agent and a hook."""
    claude_dir = temp_repo / ".claude"
    skill_dir = claude_dir / "skills" / "code-reviewer"
    skill_dir.mkdir(parents=True)
    (skill_dir / "SKILL.md").write_text(
        "# Code Reviewer Skill\n\n"
        "Generic text.\n\n"
        "## Project-Specific\n\n"
        "Always check tenant isolation.\n\n"
        "### Examples\n\n"
        "Use TenantId filters.\n\n"
        "## Output Format\n\n"
        "Generic output.\n"
    )

    agents_dir = claude_dir / "agents"
    agents_dir.mkdir()
    (agents_dir / "architect.md").write_text("# Architect Agent\n")

    hooks_dir = claude_dir / "hooks"
    hooks_dir.mkdir()
    (hooks_dir / "my-hook.sh").write_text("#!/bin/bash\nexit 0\n")

    (claude_dir / "settings.json").write_text(
        json.dumps(
            {"hooks": {"Stop": [{"matcher": "*", "command": ".claude/hooks/my-hook.sh"}]}}
        )
    )
    context_dir = claude_dir / "context"
    context_dir.mkdir()
    (context_dir / "domain.md").write_text("# Domain glossary\n")

    (temp_repo / "CLAUDE.md").write_text("# test_repo\n")
    return temp_repo
