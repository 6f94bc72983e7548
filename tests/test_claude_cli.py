"""Tests for the Claude CLI analysis and the offline audit."""

import json
import os
import sys
from pathlib import Path

import pytest

from cc_scaffold.analysis import (
    ClaudeAnalyzer,
    apply_recommendations,
    build_analysis_prompt,
    parse_analysis_response,
    quick_audit,
)
from cc_scaffold.config import Config
from cc_scaffold.errors import (
    AnalysisError,
    AnalysisStalledError,
    AnalysisTimeoutError,
    ClaudeUnavailableError,
)
from cc_scaffold.models import AnalysisRecommendation

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="uses bash fake binaries")

ANALYSIS_JSON = {
    "projectSummary": "A billing service",
    "techStack": {"languages": ["python"], "frameworks": ["fastapi"]},
    "architecture": {"pattern": "Layered"},
    "recommendations": [
        {"priority": "high", "action": "add", "type": "skill", "name": "database-reviewer", "reason": "Migrations"}
    ],
}


def _fake_claude(tmp_path: Path, body: str) -> Path:
    script = tmp_path / "fake-claude"
    script.write_text(
        "#!/bin/bash\n"
        'if [ "$1" = "--version" ]; then echo "1.0.0"; exit 0; fi\n'
        f"{body}\n"
    )
    script.chmod(0o755)
    return script


def _analyzer(script: Path, timeout: int = 5, stall: int = 1) -> ClaudeAnalyzer:
    config = Config(
        claude_binary=str(script), analysis_timeout=timeout, analysis_stall_timeout=stall
    )
    return ClaudeAnalyzer(config, poll_interval=0.05)


class TestParseAnalysisResponse:
    def test_fenced_json_block(self):
        text = f"Analysis done.\n\n```json\n{json.dumps(ANALYSIS_JSON)}\n```\nThanks."

        result = parse_analysis_response(text)

        assert result.parse_error is False
        assert result.project_summary == "A billing service"
        assert result.tech_stack["frameworks"] == ["fastapi"]
        assert result.recommendations[0].name == "database-reviewer"
        assert result.recommendations[0].details == ""

    def test_raw_object_in_prose(self):
        text = f"Here you go: {json.dumps(ANALYSIS_JSON)} -- end"

        assert parse_analysis_response(text).project_summary == "A billing service"

    def test_invalid_block_falls_back_to_raw_object(self):
        text = "```json\n{oops}\n```\n" + json.dumps(ANALYSIS_JSON)

        assert parse_analysis_response(text).project_summary == "A billing service"

    def test_incomplete_recommendation_is_dropped(self):
        data = dict(ANALYSIS_JSON)
        data["recommendations"] = [
            {"priority": "low", "name": "no-action-or-type"},
            *ANALYSIS_JSON["recommendations"],
        ]

        result = parse_analysis_response(json.dumps(data))

        assert result.parse_error is False
        assert result.project_summary == "A billing service"
        assert [r.name for r in result.recommendations] == ["database-reviewer"]

    def test_whole_text_json(self):
        result = parse_analysis_response(json.dumps({"projectSummary": "tiny"}))

        assert result.project_summary == "tiny"
        assert result.recommendations == []

    @pytest.mark.parametrize(
        "text",
        [
            "I could not analyze this project.",
            "[1, 2, 3]",
            '{"projectSummary": "x", "recommendations": "not a list"}',
            "",
        ],
    )
    def test_unparseable_text_is_kept_raw(self, text):
        result = parse_analysis_response(text)

        assert result.parse_error is True
        assert result.raw == text
        assert result.error


def test_prompt_mentions_project_path(tmp_path):
    prompt = build_analysis_prompt(tmp_path)

    assert f"PROJECT PATH: {tmp_path}" in prompt
    assert '"projectSummary"' in prompt


@posix_only
class TestClaudeAnalyzer:
    def test_missing_binary(self, tmp_path):
        analyzer = _analyzer(tmp_path / "does-not-exist")

        assert analyzer.is_available() is False
        with pytest.raises(ClaudeUnavailableError):
            analyzer.analyze(tmp_path)

    def test_successful_analysis_reports_progress(self, tmp_path):
        (tmp_path / "answer.txt").write_text(f"```json\n{json.dumps(ANALYSIS_JSON)}\n```\n")
        script = _fake_claude(tmp_path, 'cat "$(pwd)/answer.txt"')
        progress = []

        result = _analyzer(script).analyze(tmp_path, on_progress=lambda n, _t: progress.append(n))

        assert result.project_summary == "A billing service"
        assert progress and progress[-1] == len((tmp_path / "answer.txt").read_text())

    def test_non_zero_exit(self, tmp_path):
        script = _fake_claude(tmp_path, "echo boom >&2\nexit 3")

        with pytest.raises(AnalysisError, match="code 3: boom"):
            _analyzer(script).analyze(tmp_path)

    def test_stall_without_output(self, tmp_path):
        script = _fake_claude(tmp_path, "exec sleep 30")

        with pytest.raises(AnalysisStalledError) as exc_info:
            _analyzer(script, timeout=10, stall=1).analyze(tmp_path)

        assert not isinstance(exc_info.value, AnalysisTimeoutError)

    def test_timeout_after_partial_output(self, tmp_path):
        script = _fake_claude(tmp_path, "echo partial\nexec sleep 30")

        with pytest.raises(AnalysisTimeoutError) as exc_info:
            _analyzer(script, timeout=1, stall=1).analyze(tmp_path)

        assert exc_info.value.chars_received == len("partial\n")
        assert not isinstance(exc_info.value, AnalysisStalledError)


class TestApplyRecommendations:
    @staticmethod
    def _rec(**fields):
        fields.setdefault("type", "skill")
        fields.setdefault("reason", "Because")
        return AnalysisRecommendation(**fields)

    def test_add_catalog_and_custom_components(self, temp_repo):
        results = apply_recommendations(
            [
                self._rec(action="add", name="test-writer"),
                self._rec(action="add", name="etl-patterns", details="- Idempotent loads"),
                self._rec(action="add", type="hook", name="quality-gate"),
            ],
            temp_repo,
        )

        claude_dir = temp_repo / ".claude"
        assert all(r.applied for r in results)
        assert "AAA pattern" in (claude_dir / "skills" / "test-writer" / "SKILL.md").read_text()
        custom = (claude_dir / "skills" / "etl-patterns" / "SKILL.md").read_text()
        assert "Because" in custom and "- Idempotent loads" in custom
        assert os.access(claude_dir / "hooks" / "quality-gate.sh", os.X_OK)
        settings = json.loads((claude_dir / "settings.json").read_text())
        assert settings["hooks"]["Stop"][0]["command"] == ".claude/hooks/quality-gate.sh"

    def test_update_appends_note_once(self, existing_claude):
        rec = self._rec(action="update", type="agent", name="architect", details="Mention ADRs")

        apply_recommendations([rec, rec], existing_claude)

        content = (existing_claude / ".claude" / "agents" / "architect.md").read_text()
        assert content.count("## Updates Needed") == 1
        assert "**Details**: Mention ADRs" in content

    def test_fix_marks_reason(self, existing_claude):
        apply_recommendations(
            [self._rec(action="fix", name="code-reviewer", reason="Uses Jest")], existing_claude
        )

        content = (existing_claude / ".claude" / "skills" / "code-reviewer" / "SKILL.md").read_text()
        assert "**Reason**: [FIX REQUIRED] Uses Jest" in content
        assert "Always check tenant isolation." in content

    def test_update_missing_component_adds_it(self, temp_repo):
        apply_recommendations([self._rec(action="update", type="agent", name="debugger")], temp_repo)

        assert (temp_repo / ".claude" / "agents" / "debugger.md").exists()

    def test_remove(self, existing_claude):
        results = apply_recommendations(
            [
                self._rec(action="remove", name="code-reviewer"),
                self._rec(action="remove", type="hook", name="my-hook"),
                self._rec(action="remove", type="agent", name="ghost"),
            ],
            existing_claude,
        )

        claude_dir = existing_claude / ".claude"
        assert not (claude_dir / "skills" / "code-reviewer").exists()
        assert not (claude_dir / "hooks" / "my-hook.sh").exists()
        assert [r.applied for r in results] == [True, True, False]
        assert results[2].error == "agent 'ghost' not found"

    def test_unknown_action_and_type(self, temp_repo):
        results = apply_recommendations(
            [self._rec(action="rename", name="x"), self._rec(action="add", type="plugin", name="x")],
            temp_repo,
        )

        assert [r.applied for r in results] == [False, False]
        assert results[0].error == "Unknown action: rename"
        assert results[1].error == "Unknown component type: plugin"


class TestQuickAudit:
    def test_missing_directory(self, temp_repo):
        report = quick_audit(temp_repo)

        assert report.exists is False
        assert report.summary["error"] == 1

    def test_clean_configuration(self, existing_claude):
        (existing_claude / ".claude" / "hooks" / "my-hook.sh").chmod(0o755)

        report = quick_audit(existing_claude)

        assert report.exists is True
        assert report.issues == []

    def test_reports_each_problem(self, existing_claude):
        claude_dir = existing_claude / ".claude"
        (claude_dir / "settings.json").write_text("not json")
        (claude_dir / "skills" / "half-done").mkdir()
        (existing_claude / "CLAUDE.md").unlink()

        report = quick_audit(existing_claude)
        messages = [issue.message for issue in report.issues]

        assert report.summary == {"error": 1, "warning": 3, "info": 0}
        assert "Skill 'half-done' missing SKILL.md" in messages
        assert "Hook 'my-hook.sh' is not executable" in messages
        assert "No CLAUDE.md found in project root" in messages
