"""Core data models for CC Scaffold."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def dedupe(values: List[str]) -> List[str]:
    """Remove duplicates while keeping first-occurrence order."""
    seen = set()
    result = []
    for value in values:
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result


ComponentKind = Literal["skill", "agent", "hook"]


class MergeStrategy(str, Enum):
    """How a new configuration reconciles with one already on disk."""

    MERGE = "merge"
    REPLACE = "replace"
    BACKUP_REPLACE = "backup-replace"
    CANCEL = "cancel"


class ContextModel(BaseModel):
    """Characteristics of a project, used as input to recommendations.

    List fields have set semantics. Values outside the known vocabularies
    are kept; they simply match no rule.
    """

    project_type: Optional[str] = None
    tech_stack: List[str] = Field(default_factory=list)
    architecture: List[str] = Field(default_factory=list)
    concerns: List[str] = Field(default_factory=list)
    target_users: Optional[str] = None
    has_api: bool = False

    @field_validator("tech_stack", "architecture", "concerns", mode="before")
    @classmethod
    def _collapse_duplicates(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, (set, frozenset, tuple)):
            value = list(value)
        if isinstance(value, list):
            return dedupe(value)
        return value


class ComponentNames(BaseModel):
    """Component names grouped by kind."""

    skills: List[str] = Field(default_factory=list)
    agents: List[str] = Field(default_factory=list)
    hooks: List[str] = Field(default_factory=list)


class ScanResult(BaseModel):
    """Project characteristics inferred from the filesystem."""

    name: str
    languages: List[str] = Field(default_factory=list)
    frameworks: List[str] = Field(default_factory=list)
    databases: List[str] = Field(default_factory=list)
    architecture: List[str] = Field(default_factory=list)
    project_type: str = "general"
    tech_stack: List[str] = Field(default_factory=list)
    has_tests: bool = False
    has_docker: bool = False
    has_ci: bool = False
    has_api: bool = False
    existing_claude: bool = False
    existing_claude_components: ComponentNames = Field(default_factory=ComponentNames)

    def to_context(self) -> ContextModel:
        """Pre-fill a ContextModel from the detected characteristics."""
        return ContextModel(
            project_type=self.project_type,
            tech_stack=self.tech_stack,
            architecture=self.architecture,
            has_api=self.has_api,
        )


@dataclass(frozen=True)
class RecommendationRule:
    """A condition and the components it contributes when satisfied.

    ``always`` marks the unconditional rule whose reason is never shown.
    """

    condition: Callable[[ContextModel], bool]
    skills: tuple[str, ...] = ()
    agents: tuple[str, ...] = ()
    hooks: tuple[str, ...] = ()
    reason: str = ""
    always: bool = False


class RuleOutcome(BaseModel):
    """Result of evaluating one rule's condition."""

    rule_index: int
    matched: bool = False
    error: Optional[str] = None


class RecommendationResult(BaseModel):
    """Deduplicated components suggested for a context."""

    skills: List[str] = Field(default_factory=list)
    agents: List[str] = Field(default_factory=list)
    hooks: List[str] = Field(default_factory=list)
    reasons: List[str] = Field(default_factory=list)
    outcomes: List[RuleOutcome] = Field(default_factory=list)

    @property
    def failed_rules(self) -> List[RuleOutcome]:
        return [outcome for outcome in self.outcomes if outcome.error is not None]


class StoredComponent(BaseModel):
    """A skill or agent read back from disk."""

    name: str
    content: Optional[str] = None
    custom_sections: str = ""


class StoredHook(BaseModel):
    """A hook script read back from disk."""

    name: str
    content: Optional[str] = None


class CustomComponent(BaseModel):
    """A project-specific component defined by the user."""

    type: ComponentKind
    name: str
    description: str = ""


class ExistingConfig(BaseModel):
    """Configuration directory contents as found on disk."""

    path: Path
    exists: bool = False
    skills: List[StoredComponent] = Field(default_factory=list)
    agents: List[StoredComponent] = Field(default_factory=list)
    hooks: List[StoredHook] = Field(default_factory=list)
    custom: List[CustomComponent] = Field(default_factory=list)
    settings: Optional[Dict[str, Any]] = None
    claude_md: Optional[str] = None
    preserved_context: Dict[str, str] = Field(default_factory=dict)

    def names(self) -> ComponentNames:
        return ComponentNames(
            skills=[s.name for s in self.skills],
            agents=[a.name for a in self.agents],
            hooks=[h.name for h in self.hooks],
        )


class ComponentRef(BaseModel):
    """A component in a resolved configuration, tagged with its merge status."""

    name: str
    kind: ComponentKind
    status: Literal["new", "update", "existing"] = "new"
    content: Optional[str] = None  # only set for untouched existing components
    custom_sections: str = ""

    @property
    def is_new(self) -> bool:
        return self.status == "new"

    @property
    def is_update(self) -> bool:
        return self.status == "update"

    @property
    def is_existing(self) -> bool:
        return self.status == "existing"


class ProjectConfig(BaseModel):
    """Configuration requested for generation."""

    project_name: str
    description: str = ""
    output_dir: Path = Path(".claude")
    project_type: Optional[str] = None
    tech_stack: List[str] = Field(default_factory=list)
    architecture: List[str] = Field(default_factory=list)
    skills: List[str] = Field(default_factory=list)
    agents: List[str] = Field(default_factory=list)
    hooks: List[str] = Field(default_factory=list)
    enforcement_level: Literal["strict", "suggested", "available"] = "strict"
    custom_components: List[CustomComponent] = Field(default_factory=list)

    @field_validator("skills", "agents", "hooks", mode="before")
    @classmethod
    def _unique_names(cls, value: Any) -> Any:
        if isinstance(value, list):
            return dedupe(value)
        return value

    def names(self) -> ComponentNames:
        return ComponentNames(skills=self.skills, agents=self.agents, hooks=self.hooks)


class ResolvedComponents(BaseModel):
    """Merged component references per kind."""

    skills: List[ComponentRef] = Field(default_factory=list)
    agents: List[ComponentRef] = Field(default_factory=list)
    hooks: List[ComponentRef] = Field(default_factory=list)
    custom: List[CustomComponent] = Field(default_factory=list)

    def by_kind(self, kind: ComponentKind) -> List[ComponentRef]:
        return {"skill": self.skills, "agent": self.agents, "hook": self.hooks}[kind]


class ResolvedConfig(ProjectConfig):
    """A ProjectConfig after reconciliation with what is already on disk."""

    components: ResolvedComponents = Field(default_factory=ResolvedComponents)
    preserved_context: Dict[str, str] = Field(default_factory=dict)
    strategy: MergeStrategy = MergeStrategy.MERGE


class KindDiff(BaseModel):
    """Name-level changes for one component kind."""

    added: List[str] = Field(default_factory=list)
    removed: List[str] = Field(default_factory=list)
    kept: List[str] = Field(default_factory=list)


class MergeDiff(BaseModel):
    """Name-level changes between an existing and a requested configuration."""

    skills: KindDiff = Field(default_factory=KindDiff)
    agents: KindDiff = Field(default_factory=KindDiff)
    hooks: KindDiff = Field(default_factory=KindDiff)


class Backup(BaseModel):
    """A snapshot directory of the configuration."""

    name: str
    timestamp: str
    created: datetime
    path: Path


class PruneFailure(BaseModel):
    """A snapshot that could not be removed."""

    path: Path
    reason: str


class PruneResult(BaseModel):
    """Outcome of removing old snapshots."""

    removed: int = 0
    kept: int = 0
    failures: List[PruneFailure] = Field(default_factory=list)


class GenerationSummary(BaseModel):
    """Files written by the generator."""

    files: List[Path] = Field(default_factory=list)
    skills: int = 0
    agents: int = 0
    hooks: int = 0
    preserved: List[str] = Field(default_factory=list)  # names with re-appended custom sections
    skipped: List[str] = Field(default_factory=list)


class ValidationReport(BaseModel):
    """Result of validating a configuration directory."""

    valid: bool = True
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    summary: Dict[str, int] = Field(
        default_factory=lambda: {"skills": 0, "agents": 0, "hooks": 0}
    )


class AnalysisRecommendation(BaseModel):
    """One suggested change from the external analysis."""

    model_config = ConfigDict(extra="ignore")

    priority: str = "medium"
    action: str
    type: str
    name: str
    reason: str = ""
    details: str = ""


class AppliedRecommendation(AnalysisRecommendation):
    """A recommendation after an attempt to apply it."""

    applied: bool = False
    error: Optional[str] = None


class AnalysisResult(BaseModel):
    """Parsed output of the external analysis.

    When the response could not be parsed, ``parse_error`` is set and the
    text is kept in ``raw``.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    project_summary: str = Field(default="", alias="projectSummary")
    tech_stack: Dict[str, Any] = Field(default_factory=dict, alias="techStack")
    architecture: Dict[str, Any] = Field(default_factory=dict)
    existing_config: Dict[str, Any] = Field(default_factory=dict, alias="existingConfig")
    code_patterns: Dict[str, Any] = Field(default_factory=dict, alias="codePatterns")
    recommendations: List[AnalysisRecommendation] = Field(default_factory=list)
    custom_component_suggestions: List[Dict[str, Any]] = Field(
        default_factory=list, alias="customComponentSuggestions"
    )
    raw: Optional[str] = None
    parse_error: bool = False
    error: Optional[str] = None


class AuditIssue(BaseModel):
    """A problem found by the offline audit."""

    type: Literal["error", "warning", "info"]
    message: str


class AuditReport(BaseModel):
    """Result of the offline audit of a configuration directory."""

    exists: bool = False
    issues: List[AuditIssue] = Field(default_factory=list)

    @property
    def summary(self) -> Dict[str, int]:
        return {
            level: sum(1 for issue in self.issues if issue.type == level)
            for level in ("error", "warning", "info")
        }
