"""Tests for writing configurations to disk."""

import json
import os

import yaml

from cc_scaffold.generator import ConfigGenerator, render_claude_md, render_settings
from cc_scaffold.generator.catalog import AGENTS, HOOKS, SKILLS, render_component, title_case
from cc_scaffold.models import CustomComponent, ProjectConfig
from cc_scaffold.store import load_existing_config, merge


def _frontmatter(content: str) -> dict:
    _, raw, _ = content.split("---", 2)
    return yaml.safe_load(raw)


def _resolve(project_path, **fields):
    fields.setdefault("project_name", "demo")
    return merge(load_existing_config(project_path), ProjectConfig(**fields))


class TestCatalog:
    def test_catalog_sizes(self):
        assert len(SKILLS) == 16
        assert len(AGENTS) == 10
        assert len(HOOKS) == 10

    def test_skill_frontmatter(self):
        meta = _frontmatter(render_component("skill", "test-writer"))

        assert meta == {
            "name": "test-writer",
            "description": "Write comprehensive tests following AAA pattern",
        }

    def test_agent_frontmatter(self):
        meta = _frontmatter(render_component("agent", "test-runner"))

        assert meta["name"] == "test-runner"
        assert meta["model"] == "sonnet"
        assert "Bash" in meta["tools"]

    def test_hook_script(self):
        script = render_component("hook", "secrets-scanner")

        assert script.startswith("#!/bin/bash\n")
        assert "# Exit codes: 0 = pass, 2 = block with message" in script
        assert script.rstrip().endswith("exit 0")

    def test_unknown_component(self):
        assert render_component("skill", "nope") is None

    def test_title_case(self):
        assert title_case("api-design-reviewer") == "Api Design Reviewer"


class TestRenderers:
    def test_settings_group_hooks_by_event(self):
        settings = render_settings(["quality-gate", "secrets-scanner", "branch-protection", "nope"])

        assert settings == {
            "hooks": {
                "Stop": [{"matcher": "*", "command": ".claude/hooks/quality-gate.sh"}],
                "PreToolUse": [
                    {"matcher": "Write", "command": ".claude/hooks/secrets-scanner.sh"},
                    {"matcher": "Bash", "command": ".claude/hooks/branch-protection.sh"},
                ],
            }
        }

    def test_claude_md_sections(self):
        config = ProjectConfig(
            project_name="demo",
            description="A demo service",
            project_type="api-service",
            tech_stack=["python"],
            skills=["code-reviewer"],
            agents=["architect"],
            hooks=["quality-gate"],
            enforcement_level="suggested",
        )

        content = render_claude_md(config)

        assert content.startswith("# demo\n\nA demo service\n")
        assert "- **Type**: api-service" in content
        assert "- @.claude/skills/code-reviewer/SKILL.md" in content
        assert "- @.claude/agents/architect.md" in content
        assert "- **quality-gate**: Verify tests pass before session completion" in content
        assert "## Guidelines" in content
        assert "## Enforcement Rules" not in content
        assert "## Session Checklist" in content


class TestConfigGenerator:
    def test_write_fresh_configuration(self, temp_repo):
        resolved = _resolve(
            temp_repo,
            skills=["code-reviewer", "not-in-catalog"],
            agents=["architect"],
            hooks=["quality-gate"],
            custom_components=[CustomComponent(type="skill", name="billing-rules", description="Billing")],
        )

        summary = ConfigGenerator(temp_repo).write(resolved)

        claude_dir = temp_repo / ".claude"
        assert (temp_repo / "CLAUDE.md").exists()
        assert (claude_dir / "skills" / "code-reviewer" / "SKILL.md").exists()
        assert (claude_dir / "skills" / "billing-rules" / "SKILL.md").exists()
        assert (claude_dir / "agents" / "architect.md").exists()
        hook = claude_dir / "hooks" / "quality-gate.sh"
        assert os.access(hook, os.X_OK)
        settings = json.loads((claude_dir / "settings.json").read_text())
        assert settings["hooks"]["Stop"][0]["command"] == ".claude/hooks/quality-gate.sh"
        assert summary.skills == 1 and summary.agents == 1 and summary.hooks == 1
        assert summary.skipped == ["not-in-catalog"]
        assert summary.files[0] == temp_repo / "CLAUDE.md"

    def test_update_reappends_custom_sections(self, existing_claude):
        resolved = _resolve(existing_claude, skills=["code-reviewer"])

        summary = ConfigGenerator(existing_claude).write(resolved)

        content = (existing_claude / ".claude" / "skills" / "code-reviewer" / "SKILL.md").read_text()
        assert content.startswith("---\n")
        assert "Review code for quality, security, and best practices" in content
        assert content.count("## Project-Specific") == 1
        assert content.rstrip().endswith("Use TenantId filters.")
        assert summary.preserved == ["code-reviewer"]

    def test_existing_components_are_untouched(self, existing_claude):
        agent = existing_claude / ".claude" / "agents" / "architect.md"
        hook = existing_claude / ".claude" / "hooks" / "my-hook.sh"
        before = agent.stat().st_mtime_ns

        ConfigGenerator(existing_claude).write(_resolve(existing_claude, skills=["test-writer"]))

        assert agent.read_text() == "# Architect Agent\n"
        assert agent.stat().st_mtime_ns == before
        assert hook.read_text() == "#!/bin/bash\nexit 0\n"
        assert "- @.claude/agents/architect.md" in (existing_claude / "CLAUDE.md").read_text()

    def test_merge_keeps_unknown_hook_registrations(self, existing_claude):
        ConfigGenerator(existing_claude).write(_resolve(existing_claude, hooks=["quality-gate"]))

        settings = json.loads((existing_claude / ".claude" / "settings.json").read_text())
        commands = [entry["command"] for entry in settings["hooks"]["Stop"]]
        assert commands == [".claude/hooks/quality-gate.sh", ".claude/hooks/my-hook.sh"]

    def test_preserved_context_is_written_back(self, existing_claude):
        ConfigGenerator(existing_claude).write(_resolve(existing_claude))

        assert (existing_claude / ".claude" / "context" / "domain.md").read_text() == "# Domain glossary\n"

    def test_add_components_registers_hook_once(self, existing_claude):
        generator = ConfigGenerator(existing_claude)

        assert generator.add_components("hook", ["secrets-scanner", "nope"]) == ["secrets-scanner"]
        generator.add_components("hook", ["secrets-scanner"])

        settings = json.loads((existing_claude / ".claude" / "settings.json").read_text())
        assert settings["hooks"]["PreToolUse"] == [
            {"matcher": "Write", "command": ".claude/hooks/secrets-scanner.sh"}
        ]
        assert settings["hooks"]["Stop"][0]["command"] == ".claude/hooks/my-hook.sh"

    def test_add_hook_with_malformed_settings(self, existing_claude):
        settings_path = existing_claude / ".claude" / "settings.json"
        settings_path.write_text(json.dumps({"hooks": [], "model": "sonnet"}))

        assert ConfigGenerator(existing_claude).add_components("hook", ["quality-gate"]) == ["quality-gate"]

        settings = json.loads(settings_path.read_text())
        assert settings["model"] == "sonnet"
        commands = [e["command"] for entries in settings["hooks"].values() for e in entries]
        assert commands == [".claude/hooks/quality-gate.sh"]

    def test_add_hook_with_malformed_event_list(self, existing_claude):
        settings_path = existing_claude / ".claude" / "settings.json"
        event = HOOKS["quality-gate"].event
        settings_path.write_text(json.dumps({"hooks": {event: "oops"}}))

        ConfigGenerator(existing_claude).add_components("hook", ["quality-gate"])

        settings = json.loads(settings_path.read_text())
        assert settings["hooks"][event] == [
            {"matcher": HOOKS["quality-gate"].matcher, "command": ".claude/hooks/quality-gate.sh"}
        ]

    def test_validate_reports_problems(self, existing_claude):
        claude_dir = existing_claude / ".claude"
        (claude_dir / "skills" / "half-done").mkdir()
        (claude_dir / "hooks" / "my-hook.sh").chmod(0o644)

        report = ConfigGenerator(existing_claude).validate()

        assert report.valid is True
        assert "Skill 'half-done' missing SKILL.md" in report.warnings
        assert "Hook 'my-hook' is not executable" in report.warnings
        assert report.summary == {"skills": 1, "agents": 1, "hooks": 1}

    def test_validate_invalid_settings(self, existing_claude):
        (existing_claude / ".claude" / "settings.json").write_text("{")

        report = ConfigGenerator(existing_claude).validate()

        assert report.valid is False
        assert report.errors[0].startswith("Invalid settings.json")

    def test_validate_missing_directory(self, temp_repo):
        report = ConfigGenerator(temp_repo).validate()

        assert report.valid is False
        assert report.errors == [".claude directory not found"]
