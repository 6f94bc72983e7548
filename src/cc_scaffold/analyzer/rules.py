"""Recommendation rules and option vocabularies."""

from ..models import ContextModel, RecommendationRule

PROJECT_TYPES = (
    "dotnet-clean-arch",
    "angular-frontend",
    "react-nextjs",
    "api-service",
    "cli-tool",
    "monorepo",
    "general",
)

TECH_STACK_OPTIONS = (
    "dotnet",
    "ef-core",
    "angular",
    "react",
    "nextjs",
    "typescript",
    "python",
    "nodejs",
    "sql",
    "nosql",
    "docker",
    "kubernetes",
)

ARCHITECTURE_OPTIONS = (
    "clean-architecture",
    "vertical-slice",
    "cqrs",
    "event-sourcing",
    "repository-pattern",
    "microservices",
    "modular-monolith",
)

CONCERN_OPTIONS = (
    "data-integrity",
    "security",
    "performance",
    "accessibility",
    "user-experience",
    "test-coverage",
    "documentation",
)

TARGET_USER_OPTIONS = ("developers", "non-technical", "mixed")

ENFORCEMENT_LEVELS = ("strict", "suggested", "available")


def _stack(*tags: str):
    return lambda ctx: any(tag in ctx.tech_stack for tag in tags)


def _arch(tag: str):
    return lambda ctx: tag in ctx.architecture


def _concern(tag: str):
    return lambda ctx: tag in ctx.concerns


RECOMMENDATION_RULES: tuple[RecommendationRule, ...] = (
    RecommendationRule(
        condition=_arch("clean-architecture"),
        skills=("refactoring-advisor", "naming-conventions", "code-reviewer"),
        agents=("architect", "refactorer"),
        hooks=("layer-violation-blocker",),
        reason="Clean Architecture requires strict layer boundaries and naming conventions",
    ),
    RecommendationRule(
        condition=_arch("vertical-slice"),
        skills=("refactoring-advisor", "code-reviewer"),
        agents=("architect",),
        reason="Vertical Slice Architecture benefits from feature-focused organization",
    ),
    RecommendationRule(
        condition=_arch("cqrs"),
        skills=("code-reviewer", "naming-conventions"),
        agents=("architect",),
        reason="CQRS pattern requires clear separation of commands and queries",
    ),
    RecommendationRule(
        condition=_arch("microservices"),
        skills=("api-design-reviewer", "logging-standards", "error-handling-patterns"),
        agents=("architect", "debugger"),
        reason="Microservices require robust API design and observability",
    ),
    RecommendationRule(
        condition=_concern("data-integrity"),
        skills=("database-reviewer", "test-writer", "error-handling-patterns"),
        agents=("test-runner", "migrator"),
        hooks=("quality-gate",),
        reason="Data integrity requires comprehensive testing and safe migrations",
    ),
    RecommendationRule(
        condition=_concern("security"),
        skills=("security-auditor", "dependency-auditor", "error-handling-patterns"),
        agents=("security-auditor",),
        hooks=("secrets-scanner", "quality-gate"),
        reason="Security concerns require proactive vulnerability scanning",
    ),
    RecommendationRule(
        condition=_concern("performance"),
        skills=("performance-analyzer", "database-reviewer"),
        agents=("debugger",),
        reason="Performance optimization needs systematic analysis",
    ),
    RecommendationRule(
        condition=_concern("accessibility"),
        skills=("accessibility-auditor", "ux-reviewer"),
        reason="Accessibility requires WCAG compliance validation",
    ),
    RecommendationRule(
        condition=_concern("user-experience"),
        skills=("ux-reviewer", "accessibility-auditor"),
        reason="Great UX requires usability heuristic evaluation",
    ),
    RecommendationRule(
        condition=_concern("test-coverage"),
        skills=("test-writer", "code-reviewer"),
        agents=("test-runner",),
        hooks=("quality-gate",),
        reason="High test coverage requires systematic test writing",
    ),
    RecommendationRule(
        condition=_concern("documentation"),
        skills=("doc-generator", "commit-msg-generator"),
        agents=("doc-engineer", "onboarder"),
        hooks=("changelog-reminder",),
        reason="Good documentation needs consistent generation and updates",
    ),
    RecommendationRule(
        condition=lambda ctx: ctx.target_users == "non-technical",
        skills=("accessibility-auditor", "ux-reviewer"),
        reason="Non-technical users need accessible, intuitive interfaces",
    ),
    RecommendationRule(
        condition=_stack("angular", "react", "nextjs"),
        skills=("accessibility-auditor", "ux-reviewer", "performance-analyzer", "test-writer"),
        agents=("test-runner",),
        hooks=("post-edit-format",),
        reason="Frontend frameworks benefit from UX validation and formatting",
    ),
    RecommendationRule(
        condition=_stack("angular"),
        skills=("naming-conventions", "test-writer"),
        agents=("test-runner",),
        hooks=("pre-commit-lint",),
        reason="Angular projects need strict conventions and testing",
    ),
    RecommendationRule(
        condition=_stack("react", "nextjs"),
        skills=("performance-analyzer", "test-writer"),
        agents=("test-runner",),
        hooks=("pre-commit-lint",),
        reason="React projects benefit from performance optimization",
    ),
    RecommendationRule(
        condition=_stack("dotnet"),
        skills=("naming-conventions", "code-reviewer", "test-writer"),
        agents=("architect", "test-runner"),
        hooks=("pre-commit-lint", "post-edit-format"),
        reason=".NET projects need consistent conventions and architecture",
    ),
    RecommendationRule(
        condition=_stack("ef-core", "sql"),
        skills=("database-reviewer",),
        agents=("migrator",),
        reason="Database work needs migration safety and query optimization",
    ),
    RecommendationRule(
        condition=_stack("nodejs"),
        skills=("logging-standards", "error-handling-patterns", "dependency-auditor"),
        agents=("debugger",),
        hooks=("pre-commit-lint", "post-edit-format"),
        reason="Node.js projects need good error handling and dependency management",
    ),
    RecommendationRule(
        condition=_stack("typescript"),
        skills=("naming-conventions", "code-reviewer"),
        hooks=("pre-commit-lint",),
        reason="TypeScript benefits from strict naming and type checking",
    ),
    RecommendationRule(
        condition=_stack("python"),
        skills=("naming-conventions", "test-writer", "doc-generator"),
        agents=("test-runner",),
        hooks=("pre-commit-lint", "post-edit-format"),
        reason="Python projects need PEP8 compliance and documentation",
    ),
    RecommendationRule(
        condition=_stack("docker", "kubernetes"),
        skills=("security-auditor",),
        agents=("architect",),
        hooks=("secrets-scanner",),
        reason="Container environments need security hardening",
    ),
    RecommendationRule(
        condition=lambda ctx: ctx.has_api,
        skills=("api-design-reviewer", "doc-generator", "security-auditor"),
        agents=("doc-engineer",),
        reason="APIs benefit from design validation and documentation",
    ),
    RecommendationRule(
        condition=lambda ctx: ctx.project_type == "cli-tool",
        skills=("doc-generator", "error-handling-patterns"),
        agents=("doc-engineer",),
        reason="CLI tools need good documentation and error handling",
    ),
    RecommendationRule(
        condition=lambda ctx: ctx.project_type == "monorepo",
        skills=("naming-conventions", "git-workflow"),
        agents=("architect",),
        hooks=("branch-protection",),
        reason="Monorepos need consistent conventions across packages",
    ),
    RecommendationRule(
        condition=lambda ctx: True,
        skills=("code-reviewer", "commit-msg-generator", "git-workflow"),
        agents=("code-reviewer",),
        hooks=("session-context-loader",),
        reason="Essential skills for any software project",
        always=True,
    ),
)


# Always available regardless of recommendations
DEFAULTS: dict[str, tuple[str, ...]] = {
    "skills": ("code-reviewer", "test-writer", "commit-msg-generator", "git-workflow"),
    "agents": ("code-reviewer", "debugger"),
    "hooks": ("session-context-loader",),
}

OFFICIAL_SKILLS: tuple[tuple[str, str], ...] = (
    ("docx", "Process Microsoft Word documents"),
    ("pdf", "Process PDF documents"),
    ("pptx", "Process PowerPoint presentations"),
    ("xlsx", "Process Excel spreadsheets"),
    ("skill-creator", "Help create new custom skills"),
    ("frontend-design", "Design frontend interfaces"),
)

COMPONENT_PRIORITIES: dict[str, int] = {
    "code-reviewer": 90,
    "test-writer": 85,
    "security-auditor": 80,
    "git-workflow": 75,
    "commit-msg-generator": 70,
    "doc-generator": 65,
    "quality-gate": 60,
    "session-context-loader": 55,
}
