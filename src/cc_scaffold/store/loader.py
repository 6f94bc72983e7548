"""Load an existing Claude configuration directory back into memory."""

import json
import logging
import re
from pathlib import Path
from typing import List, Optional

from ..models import ExistingConfig, StoredComponent, StoredHook

logger = logging.getLogger(__name__)

# Headings that mark user-authored content to keep across regeneration
CUSTOM_MARKERS = (
    "## Project-Specific",
    "## Our Rules",
    "## Custom Rules",
    "## Project Rules",
    "## Local Additions",
    "## Team Conventions",
    "## Company Standards",
)

# Level-2 heading; "# Title" and "### Sub" stay inside a custom section
SECTION_BOUNDARY = re.compile(r"^## [^#]")
FENCE = re.compile(r"^\s*(```|~~~)")


def extract_custom_sections(content: Optional[str]) -> str:
    """Extract user-authored sections from a component file.

    A section starts at a line beginning with one of ``CUSTOM_MARKERS`` and
    runs up to (not including) the next level-2 heading, or to the
    end of the content. Headings inside fenced code blocks are ignored.

    Args:
        content: Markdown content of a skill or agent

    Returns:
        All custom sections in document order, separated by a blank line.
        Empty string when there are none.
    """
    if not content:
        return ""

    sections: List[str] = []
    current: Optional[List[str]] = None
    in_fence = False

    for line in content.splitlines():
        if FENCE.match(line):
            in_fence = not in_fence
        elif not in_fence and SECTION_BOUNDARY.match(line):
            if current is not None:
                sections.append("\n".join(current).rstrip())
                current = None
            if line.startswith(CUSTOM_MARKERS):
                current = [line]
                continue

        if current is not None:
            current.append(line)

    if current is not None:
        sections.append("\n".join(current).rstrip())

    return "\n\n".join(sections).strip()


class ConfigLoader:
    """Reads ``.claude/`` plus the root ``CLAUDE.md``.

    Every sub-resource is read independently; a missing or unreadable file
    leaves that piece empty without affecting the others.
    """

    def __init__(self, output_dir: Path = Path(".claude")):
        """Initialize loader.

        Args:
            output_dir: Configuration directory, relative to the project root
        """
        self.output_dir = Path(output_dir)

    def load(self, project_path: Path) -> ExistingConfig:
        """Load the configuration found under ``project_path``.

        Args:
            project_path: Project root

        Returns:
            ExistingConfig; ``exists`` is False when the directory is absent
        """
        project_path = Path(project_path)
        claude_dir = project_path / self.output_dir
        config = ExistingConfig(path=claude_dir)

        if not claude_dir.is_dir():
            return config

        config.exists = True
        config.settings = self._load_settings(claude_dir / "settings.json")
        config.skills = self._load_skills(claude_dir / "skills")
        config.agents = self._load_agents(claude_dir / "agents")
        config.hooks = self._load_hooks(claude_dir / "hooks")
        config.claude_md = _read_text(claude_dir.parent / "CLAUDE.md")
        config.preserved_context = self._load_context(claude_dir / "context")

        logger.debug(
            "Loaded %s: %d skills, %d agents, %d hooks",
            claude_dir,
            len(config.skills),
            len(config.agents),
            len(config.hooks),
        )
        return config

    def _load_settings(self, path: Path) -> Optional[dict]:
        content = _read_text(path)
        if content is None:
            return None
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            logger.warning("Ignoring invalid %s: %s", path, e)
            return None
        if not isinstance(data, dict):
            logger.warning("Ignoring %s: expected a JSON object", path)
            return None
        return data

    def _load_skills(self, skills_dir: Path) -> List[StoredComponent]:
        skills = []
        for entry in _list_dir(skills_dir):
            if not entry.is_dir():
                continue
            # A skill directory without SKILL.md is still listed
            content = _read_text(entry / "SKILL.md")
            skills.append(
                StoredComponent(
                    name=entry.name,
                    content=content,
                    custom_sections=extract_custom_sections(content),
                )
            )
        return skills

    def _load_agents(self, agents_dir: Path) -> List[StoredComponent]:
        agents = []
        for entry in _list_dir(agents_dir):
            if entry.suffix != ".md" or not entry.is_file():
                continue
            content = _read_text(entry)
            agents.append(
                StoredComponent(
                    name=entry.stem,
                    content=content,
                    custom_sections=extract_custom_sections(content),
                )
            )
        return agents

    def _load_hooks(self, hooks_dir: Path) -> List[StoredHook]:
        return [
            StoredHook(name=entry.stem, content=_read_text(entry))
            for entry in _list_dir(hooks_dir)
            if entry.suffix == ".sh" and entry.is_file()
        ]

    def _load_context(self, context_dir: Path) -> dict[str, str]:
        preserved = {}
        for entry in _list_dir(context_dir):
            if entry.suffix != ".md":
                continue
            content = _read_text(entry)
            if content is not None:
                preserved[entry.stem] = content
        return preserved


def load_existing_config(project_path: Path, output_dir: Path = Path(".claude")) -> ExistingConfig:
    """Load the configuration directory of ``project_path``."""
    return ConfigLoader(output_dir).load(project_path)


def _list_dir(path: Path) -> List[Path]:
    try:
        return sorted(path.iterdir(), key=lambda p: p.name)
    except OSError:
        return []


def _read_text(path: Path) -> Optional[str]:
    """Read a UTF-8 file; None when it is missing or unreadable."""
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Could not read %s: %s", path, e)
        return None
