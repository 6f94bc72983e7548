"""Write a resolved configuration to disk."""

import json
import logging
import os
from pathlib import Path
from typing import Iterable, List, Optional

from ..models import (
    ComponentKind,
    ComponentRef,
    CustomComponent,
    GenerationSummary,
    MergeStrategy,
    ProjectConfig,
    ResolvedConfig,
    ValidationReport,
)
from .catalog import HOOKS, render_agent, render_component, render_hook, render_skill

logger = logging.getLogger(__name__)

ENFORCEMENT_SECTIONS = {
    "strict": (
        "## Enforcement Rules",
        "The skills, agents and hooks above are mandatory. Apply every required "
        "skill to relevant changes and do not bypass active hooks.",
    ),
    "suggested": (
        "## Guidelines",
        "The components above are recommended. Use them when they fit the task.",
    ),
    "available": (
        "## Available Components",
        "The components above are available on request.",
    ),
}


def render_claude_md(config: ProjectConfig, hooks: Optional[Iterable[str]] = None) -> str:
    """Render the root CLAUDE.md for a configuration.

    Args:
        config: Project configuration; for a ResolvedConfig every resolved
            component is listed, including untouched existing ones
        hooks: Hook names to list, defaulting to the configuration's hooks

    Returns:
        Markdown content
    """
    skills, agents, hook_names = _component_names(config)
    if hooks is not None:
        hook_names = list(hooks)

    lines = [f"# {config.project_name}", ""]
    if config.description:
        lines += [config.description, ""]

    lines += ["## Project Context", ""]
    lines.append(f"- **Type**: {config.project_type or 'general'}")
    if config.tech_stack:
        lines.append(f"- **Stack**: {', '.join(config.tech_stack)}")
    if config.architecture:
        lines.append(f"- **Architecture**: {', '.join(config.architecture)}")
    lines.append("")

    if skills:
        lines += ["## Required Skills", ""]
        lines += [f"- @{config.output_dir.as_posix()}/skills/{s}/SKILL.md" for s in skills]
        lines.append("")

    if agents:
        lines += ["## Required Agents", ""]
        lines += [f"- @{config.output_dir.as_posix()}/agents/{a}.md" for a in agents]
        lines.append("")

    if hook_names:
        lines += ["## Active Hooks", ""]
        for name in hook_names:
            template = HOOKS.get(name)
            description = template.description if template else "Project hook"
            lines.append(f"- **{name}**: {description}")
        lines.append("")

    heading, text = ENFORCEMENT_SECTIONS[config.enforcement_level]
    lines += [heading, "", text, ""]

    lines += [
        "## Session Checklist",
        "",
        "- [ ] Review the required skills before starting",
        "- [ ] Run tests before finishing",
        "- [ ] Keep this file in sync with the configuration",
    ]
    return "\n".join(lines) + "\n"


def render_settings(hook_names: Iterable[str], output_dir: Path = Path(".claude")) -> dict:
    """Build settings.json content registering catalog hooks by event.

    Names missing from the catalog are ignored.
    """
    hooks: dict = {}
    for name in hook_names:
        template = HOOKS.get(name)
        if template is None:
            continue
        hooks.setdefault(template.event, []).append(
            {
                "matcher": template.matcher,
                "command": f"{Path(output_dir).as_posix()}/hooks/{name}.sh",
            }
        )
    return {"hooks": hooks}


def render_custom(component: CustomComponent) -> str:
    """Render a user-defined component with a basic body."""
    description = component.description or f"Custom {component.type}"
    if component.type == "skill":
        return render_skill(component.name, description)
    if component.type == "agent":
        return render_agent(component.name, description)
    return render_hook(component.name, description)


class ConfigGenerator:
    """Writes CLAUDE.md and the configuration directory for a project."""

    def __init__(self, project_root: Path, output_dir: Path = Path(".claude")):
        """Initialize generator.

        Args:
            project_root: Project directory; CLAUDE.md is written here
            output_dir: Configuration directory, relative to the project root
        """
        self.project_root = Path(project_root)
        self.output_dir = Path(output_dir)
        self.config_dir = self.project_root / self.output_dir

    def write(self, resolved: ResolvedConfig) -> GenerationSummary:
        """Write every file of a resolved configuration.

        Components with status ``existing`` are left as they are on disk.
        Updated components get their preserved custom sections re-appended.

        Args:
            resolved: Output of the merger

        Returns:
            Summary of written files

        Raises:
            OSError: If a destination cannot be written
        """
        self.output_dir = Path(resolved.output_dir)
        self.config_dir = self.project_root / self.output_dir
        summary = GenerationSummary()

        for sub in ("skills", "agents", "hooks"):
            (self.config_dir / sub).mkdir(parents=True, exist_ok=True)

        for kind in ("skill", "agent", "hook"):
            for ref in resolved.components.by_kind(kind):
                if ref.is_existing:
                    continue
                path = self._write_ref(ref, summary)
                if path is not None:
                    summary.files.append(path)
                    self._count(summary, kind)

        for component in resolved.components.custom:
            path = self.component_path(component.type, component.name)
            if path.exists():
                continue
            self.write_file(path, render_custom(component), executable=component.type == "hook")
            summary.files.append(path)

        hook_names = [ref.name for ref in resolved.components.hooks]
        settings = render_settings(hook_names, resolved.output_dir)
        if resolved.strategy is MergeStrategy.MERGE:
            settings = _keep_unknown_hook_entries(settings, self._read_settings())
        settings_path = self.config_dir / "settings.json"
        self.write_file(settings_path, json.dumps(settings, indent=2) + "\n")
        summary.files.append(settings_path)

        if resolved.preserved_context:
            context_dir = self.config_dir / "context"
            for name, content in resolved.preserved_context.items():
                path = context_dir / f"{name}.md"
                self.write_file(path, content)
                summary.files.append(path)

        claude_md = self.config_dir.parent / "CLAUDE.md"
        self.write_file(claude_md, render_claude_md(resolved))
        summary.files.insert(0, claude_md)

        logger.info("Wrote %d files to %s", len(summary.files), self.config_dir)
        return summary

    def add_components(self, kind: ComponentKind, names: Iterable[str]) -> List[str]:
        """Write catalog components into the existing configuration directory.

        Hooks are also registered in settings.json, without duplicating an
        existing command entry.

        Returns:
            Names that were written; unknown names are skipped
        """
        added = []
        for name in names:
            content = render_component(kind, name)
            if content is None:
                logger.warning("Unknown %s '%s', skipping", kind, name)
                continue
            self.write_file(self.component_path(kind, name), content, executable=kind == "hook")
            added.append(name)

        if kind == "hook" and added:
            settings = self._read_settings() or {}
            registered = settings.get("hooks")
            if not isinstance(registered, dict):
                if registered is not None:
                    logger.warning("Replacing malformed 'hooks' entry in settings.json")
                registered = settings["hooks"] = {}
            new_entries = render_settings(added, self.output_dir)["hooks"]
            for event, entries in new_entries.items():
                current = registered.get(event)
                if not isinstance(current, list):
                    if current is not None:
                        logger.warning("Replacing malformed '%s' hook list in settings.json", event)
                    current = registered[event] = []
                commands = {entry.get("command") for entry in current if isinstance(entry, dict)}
                current.extend(e for e in entries if e["command"] not in commands)
            self.write_file(self.config_dir / "settings.json", json.dumps(settings, indent=2) + "\n")

        return added

    def validate(self) -> ValidationReport:
        """Check the configuration directory for structural problems."""
        report = ValidationReport()

        if not self.config_dir.is_dir():
            report.valid = False
            report.errors.append(f"{self.output_dir} directory not found")
            return report

        settings_path = self.config_dir / "settings.json"
        if settings_path.exists():
            try:
                json.loads(settings_path.read_text(encoding="utf-8"))
            except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
                report.valid = False
                report.errors.append(f"Invalid settings.json: {e}")
        else:
            report.warnings.append("settings.json not found")

        if not (self.config_dir.parent / "CLAUDE.md").exists():
            report.warnings.append("CLAUDE.md not found in project root")

        skills_dir = self.config_dir / "skills"
        if skills_dir.is_dir():
            for entry in sorted(skills_dir.iterdir()):
                if not entry.is_dir():
                    continue
                if (entry / "SKILL.md").exists():
                    report.summary["skills"] += 1
                else:
                    report.warnings.append(f"Skill '{entry.name}' missing SKILL.md")

        agents_dir = self.config_dir / "agents"
        if agents_dir.is_dir():
            report.summary["agents"] = len(list(agents_dir.glob("*.md")))

        hooks_dir = self.config_dir / "hooks"
        if hooks_dir.is_dir():
            for hook in sorted(hooks_dir.glob("*.sh")):
                report.summary["hooks"] += 1
                if not os.access(hook, os.X_OK):
                    report.warnings.append(f"Hook '{hook.stem}' is not executable")

        return report

    def _write_ref(self, ref: ComponentRef, summary: GenerationSummary) -> Optional[Path]:
        content = render_component(ref.kind, ref.name)
        if content is None:
            logger.warning("Unknown %s '%s', skipping", ref.kind, ref.name)
            summary.skipped.append(ref.name)
            return None

        if ref.is_update and ref.custom_sections:
            content = f"{content.rstrip()}\n\n{ref.custom_sections}\n"
            summary.preserved.append(ref.name)

        path = self.component_path(ref.kind, ref.name)
        self.write_file(path, content, executable=ref.kind == "hook")
        return path

    def component_path(self, kind: str, name: str) -> Path:
        if kind == "skill":
            return self.config_dir / "skills" / name / "SKILL.md"
        if kind == "agent":
            return self.config_dir / "agents" / f"{name}.md"
        return self.config_dir / "hooks" / f"{name}.sh"

    def _read_settings(self) -> Optional[dict]:
        path = self.config_dir / "settings.json"
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
            logger.warning("Ignoring unreadable %s: %s", path, e)
            return None
        return data if isinstance(data, dict) else None

    def write_file(self, path: Path, content: str, executable: bool = False) -> None:
        """Write a file, creating parent directories; hooks are made executable."""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        if executable:
            path.chmod(0o755)

    @staticmethod
    def _count(summary: GenerationSummary, kind: str) -> None:
        if kind == "skill":
            summary.skills += 1
        elif kind == "agent":
            summary.agents += 1
        else:
            summary.hooks += 1


def _component_names(config: ProjectConfig) -> tuple[list, list, list]:
    if isinstance(config, ResolvedConfig) and any(
        (config.components.skills, config.components.agents, config.components.hooks)
    ):
        return (
            [r.name for r in config.components.skills],
            [r.name for r in config.components.agents],
            [r.name for r in config.components.hooks],
        )
    return list(config.skills), list(config.agents), list(config.hooks)


def _keep_unknown_hook_entries(settings: dict, previous: Optional[dict]) -> dict:
    """Carry over hook entries from the previous settings that were not regenerated."""
    if not previous or not isinstance(previous.get("hooks"), dict):
        return settings
    commands = {
        entry["command"] for entries in settings["hooks"].values() for entry in entries
    }
    for event, entries in previous["hooks"].items():
        if not isinstance(entries, list):
            continue
        for entry in entries:
            if isinstance(entry, dict) and entry.get("command") not in commands:
                settings["hooks"].setdefault(event, []).append(entry)
                commands.add(entry.get("command"))
    return settings


__all__ = [
    "ConfigGenerator",
    "render_claude_md",
    "render_settings",
    "render_custom",
]
