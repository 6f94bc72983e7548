"""Built-in skills, agents and hooks, and rendering of their files."""

from __future__ import annotations

from dataclasses import dataclass, field

import yaml


@dataclass(frozen=True)
class SkillTemplate:
    name: str
    description: str
    guidelines: tuple[str, ...] = ()


@dataclass(frozen=True)
class AgentTemplate:
    name: str
    description: str
    tools: tuple[str, ...] = ("Read", "Grep", "Glob", "Bash")
    model: str = "sonnet"
    steps: tuple[str, ...] = ()


@dataclass(frozen=True)
class HookTemplate:
    name: str
    description: str
    event: str
    matcher: str
    script: str = ""


SKILLS: dict[str, SkillTemplate] = {
    s.name: s
    for s in (
        SkillTemplate(
            "code-reviewer",
            "Review code for quality, security, and best practices",
            ("Check correctness before style", "Flag missing tests", "Point out security smells"),
        ),
        SkillTemplate(
            "test-writer",
            "Write comprehensive tests following AAA pattern",
            ("Arrange, act, assert", "One behavior per test", "Cover edge cases and failures"),
        ),
        SkillTemplate(
            "security-auditor",
            "Audit code for security vulnerabilities",
            ("Validate all external input", "No secrets in source", "Check authz on every endpoint"),
        ),
        SkillTemplate(
            "doc-generator",
            "Generate documentation from code",
            ("Document public interfaces", "Keep examples runnable"),
        ),
        SkillTemplate(
            "commit-msg-generator",
            "Generate conventional commit messages from staged changes",
            ("Use type(scope): summary", "Summary under 72 characters"),
        ),
        SkillTemplate(
            "refactoring-advisor",
            "Identify code smells and suggest refactoring patterns",
            ("Refactor under green tests", "Prefer small, reversible steps"),
        ),
        SkillTemplate(
            "api-design-reviewer",
            "Review API design for REST/GraphQL best practices",
            ("Consistent resource naming", "Explicit error responses", "Versioning strategy"),
        ),
        SkillTemplate(
            "database-reviewer",
            "Review database schema and queries for optimization and safety",
            ("Reversible migrations", "Index foreign keys", "Avoid N+1 queries"),
        ),
        SkillTemplate(
            "accessibility-auditor",
            "Audit UI for WCAG compliance",
            ("Keyboard navigation", "Sufficient contrast", "Labels for form controls"),
        ),
        SkillTemplate(
            "ux-reviewer",
            "Review UI/UX for usability",
            ("Clear feedback for actions", "Consistent layout", "Helpful empty and error states"),
        ),
        SkillTemplate(
            "performance-analyzer",
            "Identify performance bottlenecks and optimization opportunities",
            ("Measure before optimizing", "Watch allocation in hot paths"),
        ),
        SkillTemplate(
            "dependency-auditor",
            "Audit dependencies for vulnerabilities, outdated packages, license conflicts",
            ("Pin versions", "Review licenses", "Remove unused packages"),
        ),
        SkillTemplate(
            "naming-conventions",
            "Enforce consistent naming conventions across codebase",
            ("Follow the language's idiom", "Names describe intent"),
        ),
        SkillTemplate(
            "error-handling-patterns",
            "Implement consistent error handling patterns",
            ("Fail fast on programmer errors", "Never swallow exceptions silently"),
        ),
        SkillTemplate(
            "logging-standards",
            "Implement consistent logging for observability",
            ("Structured fields over string concatenation", "No secrets in logs"),
        ),
        SkillTemplate(
            "git-workflow",
            "Follow Git workflow best practices",
            ("Short-lived feature branches", "Atomic commits", "Protected main branch"),
        ),
    )
}

AGENTS: dict[str, AgentTemplate] = {
    a.name: a
    for a in (
        AgentTemplate(
            "architect",
            "Design review and ADR generation",
            steps=("Map the current structure", "Evaluate the proposal", "Record the decision as an ADR"),
        ),
        AgentTemplate(
            "code-reviewer",
            "Post-change quality gate with automatic diff analysis",
            steps=("Read the diff", "Check against project skills", "Report blocking issues first"),
        ),
        AgentTemplate(
            "security-auditor",
            "Pre-deployment security validation and vulnerability scanning",
            steps=("Scan for secrets", "Audit dependencies", "Review authentication paths"),
        ),
        AgentTemplate(
            "test-runner",
            "Auto-run tests on changes and fix failing tests",
            tools=("Read", "Edit", "Grep", "Glob", "Bash"),
            steps=("Run the affected tests", "Diagnose failures", "Fix and re-run"),
        ),
        AgentTemplate(
            "doc-engineer",
            "Technical documentation specialist",
            tools=("Read", "Write", "Edit", "Grep", "Glob"),
            steps=("Find undocumented interfaces", "Write reference docs", "Update guides"),
        ),
        AgentTemplate(
            "debugger",
            "Systematic debugging process specialist",
            steps=("Reproduce", "Isolate", "Fix the root cause", "Add a regression test"),
        ),
        AgentTemplate(
            "refactorer",
            "Safe refactoring with test verification",
            tools=("Read", "Edit", "Grep", "Glob", "Bash"),
            steps=("Confirm tests pass", "Apply one refactoring", "Re-run tests"),
        ),
        AgentTemplate(
            "migrator",
            "Database and API migration specialist",
            steps=("Plan forward and rollback", "Apply in small steps", "Verify data integrity"),
        ),
        AgentTemplate(
            "onboarder",
            "Generate onboarding documentation from codebase analysis",
            tools=("Read", "Write", "Grep", "Glob"),
            steps=("Survey the codebase", "Summarize architecture", "List first tasks"),
        ),
        AgentTemplate(
            "estimator",
            "Task breakdown and estimation specialist",
            steps=("Break work into tasks", "Identify risks", "Estimate with ranges"),
        ),
    )
}

HOOKS: dict[str, HookTemplate] = {
    h.name: h
    for h in (
        HookTemplate(
            "pre-commit-lint",
            "Run linter before file writes",
            "PreToolUse",
            "Write|Edit",
            'if [ -f package.json ] && command -v npx >/dev/null; then\n'
            '  npx --no-install eslint "$FILE_PATH" >&2 || exit 2\n'
            "fi",
        ),
        HookTemplate(
            "post-edit-format",
            "Auto-format files after editing",
            "PostToolUse",
            "Write|Edit",
            'if command -v npx >/dev/null && [ -f package.json ]; then\n'
            '  npx --no-install prettier --write "$FILE_PATH" >/dev/null 2>&1 || true\n'
            "fi",
        ),
        HookTemplate(
            "session-context-loader",
            "Display available skills and agents at session start",
            "SessionStart",
            "*",
            'echo "Skills: $(ls .claude/skills 2>/dev/null | tr \'\\n\' \' \')"\n'
            'echo "Agents: $(ls .claude/agents 2>/dev/null | sed \'s/\\.md$//\' | tr \'\\n\' \' \')"',
        ),
        HookTemplate(
            "quality-gate",
            "Verify tests pass before session completion",
            "Stop",
            "*",
            'if [ -f package.json ]; then\n'
            '  npm test --silent >&2 || { echo "Tests failing" >&2; exit 2; }\n'
            "fi",
        ),
        HookTemplate(
            "secrets-scanner",
            "Block commits containing secrets",
            "PreToolUse",
            "Write",
            'if echo "$INPUT" | grep -Eq \'(AKIA[0-9A-Z]{16}|-----BEGIN [A-Z ]*PRIVATE KEY-----)\'; then\n'
            '  echo "Possible secret detected" >&2\n'
            "  exit 2\n"
            "fi",
        ),
        HookTemplate(
            "layer-violation-blocker",
            "Block Clean Architecture layer violations",
            "PreToolUse",
            "Write",
            'case "$FILE_PATH" in\n'
            "  *Domain/*)\n"
            '    if echo "$INPUT" | grep -Eq \'using .*\\.(Infrastructure|Application)\'; then\n'
            '      echo "Domain must not depend on outer layers" >&2\n'
            "      exit 2\n"
            "    fi\n"
            "    ;;\n"
            "esac",
        ),
        HookTemplate(
            "large-file-warning",
            "Warn when creating files over 500 lines",
            "PreToolUse",
            "Write",
            'LINES=$(echo "$INPUT" | wc -l)\n'
            'if [ "$LINES" -gt 500 ]; then\n'
            '  echo "Warning: $FILE_PATH exceeds 500 lines" >&2\n'
            "fi",
        ),
        HookTemplate(
            "branch-protection",
            "Prevent direct commits to protected branches",
            "PreToolUse",
            "Bash",
            "BRANCH=$(git rev-parse --abbrev-ref HEAD 2>/dev/null || true)\n"
            'if echo "$INPUT" | grep -q "git commit" && { [ "$BRANCH" = "main" ] || [ "$BRANCH" = "master" ]; }; then\n'
            '  echo "Direct commits to $BRANCH are not allowed" >&2\n'
            "  exit 2\n"
            "fi",
        ),
        HookTemplate(
            "changelog-reminder",
            "Remind to update CHANGELOG before completing",
            "Stop",
            "*",
            "if ! git diff --name-only 2>/dev/null | grep -q CHANGELOG; then\n"
            '  echo "Reminder: update CHANGELOG.md" >&2\n'
            "fi",
        ),
        HookTemplate(
            "todo-collector",
            "Extract TODOs from code to tracking file",
            "PostToolUse",
            "Write|Edit",
            'grep -n "TODO" "$FILE_PATH" 2>/dev/null | sed "s|^|$FILE_PATH:|" >> .claude/TODO.md || true',
        ),
    )
}


def get_template(kind: str, name: str):
    """Look up a catalog entry; None when the name is unknown."""
    return {"skill": SKILLS, "agent": AGENTS, "hook": HOOKS}[kind].get(name)


def title_case(name: str) -> str:
    """Format a kebab-case name as Title Case."""
    return " ".join(word[:1].upper() + word[1:] for word in name.split("-"))


def _frontmatter(data: dict) -> str:
    return f"---\n{yaml.safe_dump(data, default_flow_style=False, sort_keys=False)}---\n"


def render_skill(name: str, description: str, guidelines: tuple[str, ...] = ()) -> str:
    """Render SKILL.md content."""
    items = "\n".join(f"- {g}" for g in guidelines) or "- "
    return (
        _frontmatter({"name": name, "description": description})
        + f"\n# {title_case(name)} Skill\n\n{description}\n\n"
        + "## Usage\n\nApply this skill when working on related changes.\n\n"
        + f"## Guidelines\n\n{items}\n\n"
        + "## Output Format\n\n```\n## Summary\n\n[Your summary here]\n\n"
        + "## Recommendations\n\n1. Recommendation 1\n```\n"
    )


def render_agent(
    name: str,
    description: str,
    tools: tuple[str, ...] = ("Read", "Write", "Edit", "Grep", "Glob", "Bash"),
    model: str = "sonnet",
    steps: tuple[str, ...] = (),
) -> str:
    """Render an agent definition."""
    process = "\n".join(f"{i}. {step}" for i, step in enumerate(steps, 1)) or (
        "1. Analyze\n2. Plan\n3. Execute\n4. Verify"
    )
    return (
        _frontmatter(
            {"name": name, "description": description, "tools": list(tools), "model": model}
        )
        + f"\n# {title_case(name)} Agent\n\n{description}\n\n"
        + f"## Process\n\n{process}\n\n"
        + "## Output Format\n\n```\n## Summary\n\n[Summary of actions taken]\n\n"
        + "### Changes Made\n- Change 1\n```\n"
    )


def render_hook(name: str, description: str, script: str = "") -> str:
    """Render a hook script. Exit 0 passes; exit 2 blocks with a message."""
    body = script or f'echo "Running {name} hook..." >&2'
    return (
        "#!/bin/bash\n"
        f"# {title_case(name)} Hook\n"
        f"# Description: {description}\n"
        "# Exit codes: 0 = pass, 2 = block with message\n\n"
        "set -e\n\n"
        "INPUT=$(cat)\n"
        "FILE_PATH=$(echo \"$INPUT\" | grep -o '\"file_path\"[^,}]*' | head -1 | cut -d'\"' -f4 || true)\n\n"
        f"{body}\n\n"
        "exit 0\n"
    )


def render_component(kind: str, name: str) -> str | None:
    """Render a catalog component; None when the name is unknown."""
    template = get_template(kind, name)
    if template is None:
        return None
    if kind == "skill":
        return render_skill(template.name, template.description, template.guidelines)
    if kind == "agent":
        return render_agent(
            template.name, template.description, template.tools, template.model, template.steps
        )
    return render_hook(template.name, template.description, template.script)


def list_components(kind: str) -> list[dict]:
    """Name/description pairs (plus event for hooks) for display."""
    if kind == "skill":
        return [{"name": s.name, "description": s.description} for s in SKILLS.values()]
    if kind == "agent":
        return [{"name": a.name, "description": a.description} for a in AGENTS.values()]
    return [
        {"name": h.name, "description": h.description, "event": h.event}
        for h in HOOKS.values()
    ]
