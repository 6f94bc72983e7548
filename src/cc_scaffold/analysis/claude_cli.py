"""Deep project analysis through the Claude CLI, plus an offline audit."""

import codecs
import json
import logging
import os
import re
import shutil
import subprocess
import tempfile
import threading
import time
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Union

from pydantic import ValidationError

from ..config import Config
from ..errors import (
    AnalysisError,
    AnalysisStalledError,
    AnalysisTimeoutError,
    ClaudeUnavailableError,
)
from ..generator.catalog import get_template, render_agent, render_hook, render_skill
from ..generator.config_generator import ConfigGenerator
from ..models import (
    AnalysisRecommendation,
    AnalysisResult,
    AppliedRecommendation,
    AuditIssue,
    AuditReport,
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, str], None]

JSON_BLOCK = re.compile(r"```json\s*([\s\S]*?)\s*```")
SUMMARY_KEY = '"projectSummary"'

UPDATE_MARKER = "## Updates Needed"

ANALYSIS_PROMPT = """
You are analyzing a software project to provide recommendations for Claude Code configuration.

PROJECT PATH: {project_path}

TASK: Perform a comprehensive analysis of this project. Read the actual source files to understand the codebase deeply.

## STEP 1: Explore the Project

- List directories to understand organization
- Read key files (package.json, pyproject.toml, *.csproj, CLAUDE.md, etc.)
- Examine a few source files to understand patterns

## STEP 2: Analyze These Areas

### Tech Stack
Languages, frameworks, databases, build tools.

### Architecture
Folder structure, layers, design patterns, dependency flow.

### Existing .claude/ Configuration (if present)
For each component: is it comprehensive, does it use this project's actual
patterns, are there gaps or outdated references?

### Code Patterns
Naming conventions, error handling, test frameworks, documentation style.

### Quality Gaps
Which skills, agents and hooks would help, and which existing components need updates?

## STEP 3: Output JSON

After your analysis, output a JSON block with this structure:

```json
{{
  "projectSummary": "One paragraph describing what this project is and does",
  "techStack": {{"languages": [], "frameworks": [], "databases": [], "tools": []}},
  "architecture": {{"pattern": "", "layers": [], "designPatterns": []}},
  "existingConfig": {{
    "hasClaudeDir": true,
    "skills": [{{"name": "", "status": "good|needs-update|broken", "notes": ""}}],
    "agents": [],
    "hooks": [],
    "claudeMd": {{"status": "", "notes": ""}}
  }},
  "codePatterns": {{"namingConvention": "", "errorHandling": "", "testFramework": "", "testPattern": ""}},
  "recommendations": [
    {{
      "priority": "high|medium|low",
      "action": "add|update|fix|remove",
      "type": "skill|agent|hook",
      "name": "kebab-case-name",
      "reason": "Why, referencing specific things you observed",
      "details": "What exactly should change"
    }}
  ],
  "customComponentSuggestions": [
    {{"type": "skill", "name": "", "description": "", "reason": ""}}
  ]
}}
```

Be thorough. Read actual files. Reference specific things you observe.
The JSON must be valid and parseable.
"""


def build_analysis_prompt(project_path: Union[str, Path]) -> str:
    """Build the prompt sent to the Claude CLI."""
    return ANALYSIS_PROMPT.format(project_path=project_path)


class ClaudeAnalyzer:
    """Runs ``claude --print`` against a project and parses its answer."""

    def __init__(self, config: Optional[Config] = None, poll_interval: float = 0.1):
        """Initialize analyzer.

        Args:
            config: Binary name and timeouts; defaults to Config.from_env()
            poll_interval: Seconds between timeout checks
        """
        self.config = config or Config.from_env()
        self.poll_interval = poll_interval

    def is_available(self) -> bool:
        """Check that the Claude CLI can be run."""
        try:
            result = subprocess.run(
                [self._binary(), "--version"],
                capture_output=True,
                timeout=self.config.analysis_stall_timeout,
            )
        except (OSError, subprocess.SubprocessError) as e:
            logger.debug("Claude CLI unavailable: %s", e)
            return False
        return result.returncode == 0

    def analyze(
        self, project_path: Path, on_progress: Optional[ProgressCallback] = None
    ) -> AnalysisResult:
        """Analyze a project with the Claude CLI.

        Args:
            project_path: Project to analyze; the CLI runs with it as cwd
            on_progress: Called from the reader thread with the running
                character count and each new chunk of output

        Returns:
            Parsed analysis; ``parse_error`` is set when the answer had no
            usable JSON

        Raises:
            ClaudeUnavailableError: If the binary is missing
            AnalysisTimeoutError: If the wall-clock timeout elapses
            AnalysisStalledError: If no output arrives within the stall window
            AnalysisError: If the CLI exits with a non-zero status
        """
        if not self.is_available():
            raise ClaudeUnavailableError(
                "Claude CLI not found. Install with: npm install -g @anthropic-ai/claude-code"
            )

        prompt = build_analysis_prompt(Path(project_path))
        output = self._invoke(prompt, Path(project_path), on_progress)
        return parse_analysis_response(output)

    def _invoke(
        self, prompt: str, cwd: Path, on_progress: Optional[ProgressCallback]
    ) -> str:
        with tempfile.TemporaryFile() as stderr_file:
            try:
                proc = subprocess.Popen(
                    [self._binary(), "--print", "-p", prompt],
                    cwd=str(cwd),
                    stdin=subprocess.DEVNULL,
                    stdout=subprocess.PIPE,
                    stderr=stderr_file,
                )
            except OSError as e:
                raise ClaudeUnavailableError(f"Failed to invoke Claude: {e}") from e

            chunks: List[str] = []
            received = [0]
            lock = threading.Lock()

            def _read_stdout() -> None:
                decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
                for data in iter(lambda: proc.stdout.read1(4096), b""):
                    text = decoder.decode(data)
                    if not text:
                        continue
                    with lock:
                        chunks.append(text)
                        received[0] += len(text)
                        count = received[0]
                    if on_progress is not None:
                        on_progress(count, text)
                tail = decoder.decode(b"", final=True)
                if tail:
                    with lock:
                        chunks.append(tail)
                        received[0] += len(tail)

            reader = threading.Thread(target=_read_stdout, name="claude-stdout", daemon=True)
            reader.start()
            started = time.monotonic()

            while reader.is_alive():
                reader.join(self.poll_interval)
                if not reader.is_alive():
                    break
                elapsed = time.monotonic() - started
                with lock:
                    count = received[0]
                if elapsed > self.config.analysis_timeout:
                    self._kill(proc)
                    raise AnalysisTimeoutError(
                        f"Claude analysis timed out after {self.config.analysis_timeout}s. "
                        f"Received {count} chars before timeout.",
                        chars_received=count,
                    )
                if count == 0 and elapsed > self.config.analysis_stall_timeout:
                    self._kill(proc)
                    raise AnalysisStalledError(
                        "Claude analysis appears stalled (no output received). "
                        "Try running with --verbose or check if Claude CLI is working."
                    )

            returncode = proc.wait()
            if returncode != 0:
                stderr_file.seek(0)
                stderr = stderr_file.read().decode("utf-8", errors="replace").strip()
                raise AnalysisError(f"Claude exited with code {returncode}: {stderr}")

        return "".join(chunks)

    def _binary(self) -> str:
        return shutil.which(self.config.claude_binary) or self.config.claude_binary

    @staticmethod
    def _kill(proc: subprocess.Popen) -> None:
        proc.kill()
        try:
            proc.wait(timeout=5)
        except subprocess.TimeoutExpired:
            logger.warning("Claude process %s did not exit after kill", proc.pid)


def parse_analysis_response(text: str) -> AnalysisResult:
    """Extract the analysis JSON from a response.

    Tries a fenced ```json block, then a raw object containing
    ``projectSummary``, then the whole text. Never raises; unparseable
    responses come back with ``parse_error`` set and the text in ``raw``.
    """
    candidates = []
    block = JSON_BLOCK.search(text)
    if block:
        candidates.append(block.group(1))
    raw_object = _raw_object(text)
    if raw_object:
        candidates.append(raw_object)
    candidates.append(text)

    error = None
    for candidate in candidates:
        result = _load_result(candidate)
        if isinstance(result, AnalysisResult):
            return result
        error = error or result
    return AnalysisResult(raw=text, parse_error=True, error=error)


def _raw_object(text: str) -> Optional[str]:
    """Slice from the brace opening the object with ``projectSummary`` to the last brace."""
    key = text.find(SUMMARY_KEY)
    if key == -1:
        return None
    start = text.rfind("{", 0, key)
    end = text.rfind("}")
    if start == -1 or end < key:
        return None
    return text[start : end + 1]


def _load_result(candidate: str) -> Union[AnalysisResult, str]:
    """Parse one candidate; returns the error message on failure."""
    try:
        data = json.loads(candidate)
    except json.JSONDecodeError as e:
        return str(e)
    if not isinstance(data, dict):
        return "expected a JSON object"
    if isinstance(data.get("recommendations"), list):
        data["recommendations"] = _valid_recommendations(data["recommendations"])
    try:
        return AnalysisResult.model_validate(data)
    except ValidationError as e:
        return str(e)


def _valid_recommendations(items: list) -> List[AnalysisRecommendation]:
    """Keep the recommendations that validate; drop the rest with a warning."""
    valid = []
    for index, item in enumerate(items):
        try:
            valid.append(AnalysisRecommendation.model_validate(item))
        except ValidationError as e:
            logger.warning("Dropping invalid recommendation #%d: %s", index, e.errors()[0]["msg"])
    return valid


def apply_recommendations(
    recommendations: Iterable[AnalysisRecommendation],
    project_path: Path,
    output_dir: Path = Path(".claude"),
) -> List[AppliedRecommendation]:
    """Apply analysis recommendations to the configuration directory.

    ``add`` writes the catalog body or a basic one, ``update`` and ``fix``
    append an "Updates Needed" note once, ``remove`` deletes the component.
    A failing item is recorded and the rest are still applied.
    """
    generator = ConfigGenerator(Path(project_path), output_dir)
    results = []

    for rec in recommendations:
        outcome = AppliedRecommendation(**rec.model_dump())
        try:
            if rec.type not in ("skill", "agent", "hook"):
                outcome.error = f"Unknown component type: {rec.type}"
            elif rec.action == "add":
                _add(generator, rec)
                outcome.applied = True
            elif rec.action in ("update", "fix"):
                _mark_for_update(generator, rec, fix=rec.action == "fix")
                outcome.applied = True
            elif rec.action == "remove":
                outcome.applied = _remove(generator, rec)
                if not outcome.applied:
                    outcome.error = f"{rec.type} '{rec.name}' not found"
            else:
                outcome.error = f"Unknown action: {rec.action}"
        except OSError as e:
            logger.warning("Could not apply %s %s '%s': %s", rec.action, rec.type, rec.name, e)
            outcome.error = str(e)
        results.append(outcome)

    return results


def _add(generator: ConfigGenerator, rec: AnalysisRecommendation) -> None:
    if get_template(rec.type, rec.name) is not None:
        generator.add_components(rec.type, [rec.name])
        return

    description = rec.reason or f"Custom {rec.type} for this project."
    path = generator.component_path(rec.type, rec.name)
    if rec.type == "skill":
        content = render_skill(rec.name, description, _detail_lines(rec.details))
    elif rec.type == "agent":
        content = render_agent(rec.name, description, steps=_detail_lines(rec.details))
    else:
        content = render_hook(rec.name, description, f"# {rec.details}" if rec.details else "")
    generator.write_file(path, content, executable=rec.type == "hook")
    logger.info("Added %s: %s", rec.type, rec.name)


def _mark_for_update(generator: ConfigGenerator, rec: AnalysisRecommendation, fix: bool) -> None:
    path = generator.component_path(rec.type, rec.name)
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        _add(generator, rec)
        return

    if UPDATE_MARKER in content:
        return

    reason = f"[FIX REQUIRED] {rec.reason}" if fix else rec.reason
    details = rec.details or "See above sections for needed changes."
    if rec.type == "hook":
        note = f"\n# {UPDATE_MARKER}\n# Reason: {reason}\n# Details: {details}\n"
    else:
        note = f"\n\n---\n\n{UPDATE_MARKER}\n\n**Reason**: {reason}\n\n**Details**: {details}\n"
    path.write_text(content.rstrip("\n") + "\n" + note, encoding="utf-8")
    logger.info("Marked %s for update: %s", rec.type, rec.name)


def _remove(generator: ConfigGenerator, rec: AnalysisRecommendation) -> bool:
    path = generator.component_path(rec.type, rec.name)
    if rec.type == "skill":
        path = path.parent
        if not path.is_dir():
            return False
        shutil.rmtree(path)
    else:
        if not path.is_file():
            return False
        path.unlink()
    logger.info("Removed %s: %s", rec.type, rec.name)
    return True


def _detail_lines(details: str) -> tuple[str, ...]:
    return tuple(line.strip("- ").strip() for line in details.splitlines() if line.strip())


def quick_audit(project_path: Path, output_dir: Path = Path(".claude")) -> AuditReport:
    """Audit the configuration directory without the Claude CLI."""
    project_path = Path(project_path)
    claude_dir = project_path / output_dir

    if not claude_dir.is_dir():
        return AuditReport(
            exists=False,
            issues=[AuditIssue(type="error", message=f"No {output_dir}/ directory found")],
        )

    issues = []

    settings_path = claude_dir / "settings.json"
    try:
        json.loads(settings_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        issues.append(AuditIssue(type="warning", message="No settings.json found"))
    except (json.JSONDecodeError, OSError, UnicodeDecodeError) as e:
        issues.append(AuditIssue(type="error", message=f"Invalid settings.json: {e}"))

    skills_dir = claude_dir / "skills"
    if skills_dir.is_dir():
        for skill in sorted(p for p in skills_dir.iterdir() if p.is_dir()):
            if not (skill / "SKILL.md").exists():
                issues.append(
                    AuditIssue(type="warning", message=f"Skill '{skill.name}' missing SKILL.md")
                )
    else:
        issues.append(AuditIssue(type="info", message="No skills directory found"))

    hooks_dir = claude_dir / "hooks"
    if hooks_dir.is_dir():
        for hook in sorted(hooks_dir.glob("*.sh")):
            if not os.stat(hook).st_mode & 0o111:
                issues.append(
                    AuditIssue(type="warning", message=f"Hook '{hook.name}' is not executable")
                )
    else:
        issues.append(AuditIssue(type="info", message="No hooks directory found"))

    if not (claude_dir.parent / "CLAUDE.md").exists():
        issues.append(AuditIssue(type="warning", message="No CLAUDE.md found in project root"))

    return AuditReport(exists=True, issues=issues)
