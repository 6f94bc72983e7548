"""Quick file-based project detection.

Pattern matching only: nothing here invokes Claude, and nothing is written.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Callable, Iterable, List, Optional, Set

from pathspec import PathSpec
from pathspec.patterns.gitwildmatch import GitWildMatchPattern

from ..config import Config
from ..models import ComponentNames, ScanResult, dedupe

logger = logging.getLogger(__name__)

# Any of these inside a single probe means "feature absent"
PROBE_ERRORS = (OSError, ValueError, TypeError, AttributeError, KeyError)

MAX_CSPROJ_INSPECTED = 5

PYTHON_MANIFESTS = ("requirements.txt", "pyproject.toml", "setup.py", "Pipfile")

CONFIG_SUFFIXES = {".json", ".yaml", ".yml", ".env", ".config"}

# (database, tech stack tag, tokens found in config files)
DATABASE_SIGNATURES = (
    ("postgresql", "sql", ("postgres", "PostgreSQL", "5432")),
    ("sqlserver", "sql", ("SqlServer", "MSSQL", "1433")),
    ("mongodb", "nosql", ("mongodb", "MongoDB", "27017")),
    ("mysql", "sql", ("mysql", "MySQL", "3306")),
)


class ProjectScanner:
    """Infers project characteristics from manifests and folder layout.

    Detection runs in a fixed sequence. Later specific matches overwrite the
    ``project_type`` set by earlier ones: language frameworks first, then
    architecture folders, monorepo markers, and finally CLI markers.
    """

    def __init__(self, config: Optional[Config] = None):
        """Initialize scanner with configuration.

        Args:
            config: Application configuration with ignored_dirs and scan limits
        """
        self.config = config or Config()
        self.ignored_dirs: Set[str] = set(self.config.ignored_dirs)

    def scan(self, repo_path: Path) -> ScanResult:
        """Scan a project directory.

        Args:
            repo_path: Path to project root

        Returns:
            ScanResult with deduplicated list fields. Defaults are returned
            for anything that could not be detected.
        """
        repo_path = Path(repo_path)
        result = ScanResult(name=repo_path.resolve().name or str(repo_path))

        steps: List[Callable[[Path, ScanResult], None]] = [
            self._detect_node,
            self._detect_dotnet,
            self._detect_python,
            self._detect_go,
            self._detect_rust,
            self._detect_java,
            self._detect_architecture,
            self._detect_monorepo,
            self._detect_cli,
            self._detect_infrastructure,
            self._detect_databases,
            self._detect_existing_claude,
        ]

        for step in steps:
            try:
                step(repo_path, result)
            except PROBE_ERRORS as e:
                logger.debug("Scan step %s skipped: %s", step.__name__, e)

        result.languages = dedupe(result.languages)
        result.frameworks = dedupe(result.frameworks)
        result.databases = dedupe(result.databases)
        result.architecture = dedupe(result.architecture)
        result.tech_stack = dedupe(result.tech_stack)
        return result

    # ------------------------------------------------------------------
    # Languages and frameworks
    # ------------------------------------------------------------------

    def _detect_node(self, repo: Path, result: ScanResult) -> None:
        if not _file_exists(repo, "package.json"):
            return

        result.languages.append("javascript")
        result.tech_stack.append("nodejs")

        pkg = _read_json(repo, "package.json")
        if isinstance(pkg.get("name"), str) and pkg["name"]:
            result.name = pkg["name"]

        deps = _dependencies(pkg)

        if "@angular/core" in deps:
            result.frameworks.append("angular")
            result.tech_stack.append("angular")
            result.project_type = "angular-frontend"
        if "next" in deps:
            result.frameworks.append("nextjs")
            result.tech_stack.append("nextjs")
            result.project_type = "react-nextjs"
        if "react" in deps and "next" not in deps:
            result.frameworks.append("react")
            result.tech_stack.append("react")
            result.project_type = "react-nextjs"
        if "vue" in deps:
            result.frameworks.append("vue")
            result.tech_stack.append("vue")
            result.project_type = "general"
        if _any_in(deps, "express", "fastify", "koa", "hapi"):
            result.frameworks.append("node-api")
            result.project_type = "api-service"
            result.has_api = True
        if "typescript" in deps:
            result.languages.append("typescript")
            result.tech_stack.append("typescript")
        if "@nestjs/core" in deps:
            result.frameworks.append("nestjs")
            result.tech_stack.append("nestjs")
            result.project_type = "api-service"
            result.has_api = True

        if _any_in(deps, "jest", "mocha", "vitest", "ava"):
            result.has_tests = True

        if _any_in(deps, "pg", "postgres"):
            result.databases.append("postgresql")
            result.tech_stack.append("sql")
        if _any_in(deps, "mysql", "mysql2"):
            result.databases.append("mysql")
            result.tech_stack.append("sql")
        if _any_in(deps, "mongodb", "mongoose"):
            result.databases.append("mongodb")
            result.tech_stack.append("nosql")
        if _any_in(deps, "redis", "ioredis"):
            result.databases.append("redis")
        if _any_in(deps, "prisma", "@prisma/client"):
            result.frameworks.append("prisma")
        if "typeorm" in deps:
            result.frameworks.append("typeorm")
        if "sequelize" in deps:
            result.frameworks.append("sequelize")

    def _detect_dotnet(self, repo: Path, result: ScanResult) -> None:
        csproj_files = self._find_files(repo, ["*.csproj"])
        if not csproj_files:
            return

        result.languages.append("csharp")
        result.tech_stack.append("dotnet")

        for csproj in csproj_files[:MAX_CSPROJ_INSPECTED]:
            content = _read_text(csproj)
            if "Microsoft.EntityFrameworkCore" in content:
                result.frameworks.append("ef-core")
                result.tech_stack.append("ef-core")
            if "Microsoft.AspNetCore" in content and "aspnet" not in result.frameworks:
                result.frameworks.append("aspnet")
                result.project_type = "api-service"
                result.has_api = True
            if _any_substring(content, "xunit", "NUnit", "MSTest"):
                result.has_tests = True
            if "Blazor" in content:
                result.frameworks.append("blazor")

        solutions = [p for p in _list_dir(repo) if p.is_file() and p.suffix == ".sln"]
        if solutions and len(csproj_files) > 3:
            result.project_type = "dotnet-clean-arch"

    def _detect_python(self, repo: Path, result: ScanResult) -> None:
        if not any(_file_exists(repo, name) for name in PYTHON_MANIFESTS):
            return

        result.languages.append("python")
        result.tech_stack.append("python")

        combined = (
            _read_text(repo / "requirements.txt") + _read_text(repo / "pyproject.toml")
        ).lower()

        for framework in ("fastapi", "django", "flask"):
            if framework in combined:
                result.frameworks.append(framework)
                result.project_type = "api-service"
                result.has_api = True
        if "pytest" in combined:
            result.has_tests = True
        if "sqlalchemy" in combined:
            result.frameworks.append("sqlalchemy")

    def _detect_go(self, repo: Path, result: ScanResult) -> None:
        if not _file_exists(repo, "go.mod"):
            return

        result.languages.append("go")
        result.tech_stack.append("go")

        go_mod = _read_text(repo / "go.mod")
        for module, framework in (
            ("gin-gonic/gin", "gin"),
            ("labstack/echo", "echo"),
            ("gofiber/fiber", "fiber"),
        ):
            if module in go_mod:
                result.frameworks.append(framework)
                result.project_type = "api-service"
                result.has_api = True

    def _detect_rust(self, repo: Path, result: ScanResult) -> None:
        if not _file_exists(repo, "Cargo.toml"):
            return

        result.languages.append("rust")
        result.tech_stack.append("rust")

        cargo = _read_text(repo / "Cargo.toml")
        for crate, framework in (("actix-web", "actix"), ("axum", "axum")):
            if crate in cargo:
                result.frameworks.append(framework)
                result.project_type = "api-service"
                result.has_api = True

    def _detect_java(self, repo: Path, result: ScanResult) -> None:
        if not (_file_exists(repo, "pom.xml") or _file_exists(repo, "build.gradle")):
            return

        result.languages.append("java")
        result.tech_stack.append("java")

        combined = _read_text(repo / "pom.xml") + _read_text(repo / "build.gradle")
        if "spring-boot" in combined or "org.springframework.boot" in combined:
            result.frameworks.append("spring-boot")
            result.project_type = "api-service"
            result.has_api = True

    # ------------------------------------------------------------------
    # Architecture and project shape
    # ------------------------------------------------------------------

    def _detect_architecture(self, repo: Path, result: ScanResult) -> None:
        if (
            _dirs_exist(repo, "src/Domain", "src/Application")
            or _dirs_exist(repo, "Domain", "Application")
            or _dirs_exist(repo, "src/Core", "src/Infrastructure")
        ):
            result.architecture.append("clean-architecture")
            if "dotnet" in result.tech_stack:
                result.project_type = "dotnet-clean-arch"

        if _any_dir(repo, "src/Features", "Features"):
            result.architecture.append("vertical-slice")

        if _any_dir(
            repo, "src/Application/Commands", "src/Application/Queries", "Commands", "Queries"
        ):
            result.architecture.append("cqrs")

        if _any_dir(repo, "src/Repositories", "Repositories", "src/Infrastructure/Repositories"):
            result.architecture.append("repository-pattern")

        if _dir_exists(repo, "services") or _file_exists(repo, "docker-compose.yml"):
            compose = _read_text(repo / "docker-compose.yml")
            if compose.count("services:") > 3:
                result.architecture.append("microservices")

    def _detect_monorepo(self, repo: Path, result: ScanResult) -> None:
        if (
            _any_file(repo, "pnpm-workspace.yaml", "lerna.json", "nx.json")
            or _any_dir(repo, "packages", "apps")
        ):
            result.project_type = "monorepo"

    def _detect_cli(self, repo: Path, result: ScanResult) -> None:
        if not _file_exists(repo, "package.json"):
            return
        pkg = _read_json(repo, "package.json")
        keywords = pkg.get("keywords")
        if pkg.get("bin") or (isinstance(keywords, list) and "cli" in keywords):
            result.project_type = "cli-tool"

    # ------------------------------------------------------------------
    # Infrastructure and data stores
    # ------------------------------------------------------------------

    def _detect_infrastructure(self, repo: Path, result: ScanResult) -> None:
        if _any_file(repo, "Dockerfile", "docker-compose.yml", "docker-compose.yaml", ".dockerignore"):
            result.has_docker = True
            result.tech_stack.append("docker")

        if _any_dir(repo, "k8s", "kubernetes", "helm"):
            result.tech_stack.append("kubernetes")

        if _dir_exists(repo, ".github/workflows") or _any_file(
            repo, ".gitlab-ci.yml", "azure-pipelines.yml", "Jenkinsfile", ".circleci/config.yml"
        ):
            result.has_ci = True

    def _detect_databases(self, repo: Path, result: ScanResult) -> None:
        config_files = self._find_files(
            repo, _config_file_patterns(), limit=self.config.scan_file_limit
        )
        for path in config_files:
            content = _read_text(path)
            if not content:
                continue
            for database, tag, tokens in DATABASE_SIGNATURES:
                if _any_substring(content, *tokens):
                    result.databases.append(database)
                    result.tech_stack.append(tag)

    def _detect_existing_claude(self, repo: Path, result: ScanResult) -> None:
        claude_dir = repo / self.config.output_dir
        if not claude_dir.is_dir():
            return

        result.existing_claude = True
        result.existing_claude_components = ComponentNames(
            skills=[p.name for p in _list_dir(claude_dir / "skills") if p.is_dir()],
            agents=[p.stem for p in _list_dir(claude_dir / "agents") if p.suffix == ".md"],
            hooks=[p.stem for p in _list_dir(claude_dir / "hooks") if p.suffix == ".sh"],
        )

    # ------------------------------------------------------------------
    # File search
    # ------------------------------------------------------------------

    def _find_files(
        self, repo: Path, patterns: Iterable[str], limit: int = 100
    ) -> List[Path]:
        """Find files below ``repo`` matching gitwildmatch ``patterns``.

        Args:
            repo: Search root
            patterns: gitwildmatch patterns matched against relative paths
            limit: Maximum number of files returned

        Returns:
            Sorted-walk-order list of at most ``limit`` matching paths
        """
        if not repo.is_dir():
            return []

        spec = PathSpec.from_lines(GitWildMatchPattern, patterns)
        matches: List[Path] = []
        max_depth = self.config.scan_max_depth

        for root, dirs, filenames in os.walk(repo):
            root_path = Path(root)
            depth = len(root_path.relative_to(repo).parts)

            # Prune directories before descending further
            if depth >= max_depth:
                dirs[:] = []
            else:
                dirs[:] = sorted(d for d in dirs if d not in self.ignored_dirs)

            for filename in sorted(filenames):
                rel_path = (root_path / filename).relative_to(repo)
                if spec.match_file(rel_path.as_posix()):
                    matches.append(root_path / filename)
                    if len(matches) >= limit:
                        return matches

        return matches


def format_scan_results(scan: ScanResult) -> str:
    """Render a scan as plain text lines."""
    lines = [f"Project: {scan.name}", f"Type: {scan.project_type}"]

    if scan.languages:
        lines.append(f"Languages: {', '.join(scan.languages)}")
    if scan.frameworks:
        lines.append(f"Frameworks: {', '.join(scan.frameworks)}")
    if scan.databases:
        lines.append(f"Databases: {', '.join(scan.databases)}")
    if scan.architecture:
        lines.append(f"Architecture: {', '.join(scan.architecture)}")

    features = [
        label
        for label, present in (
            ("Tests", scan.has_tests),
            ("Docker", scan.has_docker),
            ("CI/CD", scan.has_ci),
            ("API", scan.has_api),
        )
        if present
    ]
    if features:
        lines.append(f"Features: {', '.join(features)}")

    if scan.existing_claude:
        components = scan.existing_claude_components
        lines.append("")
        lines.append("Existing .claude/ configuration:")
        if components.skills:
            lines.append(f"  Skills: {', '.join(components.skills)}")
        if components.agents:
            lines.append(f"  Agents: {', '.join(components.agents)}")
        if components.hooks:
            lines.append(f"  Hooks: {', '.join(components.hooks)}")

    return "\n".join(lines)


def _config_file_patterns() -> List[str]:
    return [f"*{suffix}" for suffix in sorted(CONFIG_SUFFIXES)] + [".env"]


def _file_exists(base: Path, relative: str) -> bool:
    return (base / relative).exists()


def _dir_exists(base: Path, relative: str) -> bool:
    return (base / relative).is_dir()


def _any_file(base: Path, *relatives: str) -> bool:
    return any(_file_exists(base, rel) for rel in relatives)


def _any_dir(base: Path, *relatives: str) -> bool:
    return any(_dir_exists(base, rel) for rel in relatives)


def _dirs_exist(base: Path, *relatives: str) -> bool:
    return all(_dir_exists(base, rel) for rel in relatives)


def _list_dir(path: Path) -> List[Path]:
    """Sorted directory entries, or an empty list if unreadable."""
    try:
        return sorted(path.iterdir(), key=lambda p: p.name)
    except OSError:
        return []


def _read_text(path: Path) -> str:
    """Read a file, returning an empty string when missing or unreadable."""
    try:
        return path.read_text(encoding="utf-8", errors="ignore")
    except OSError:
        return ""


def _read_json(base: Path, relative: str) -> dict:
    """Parse a JSON object, returning {} when missing, invalid, or not an object."""
    try:
        data = json.loads((base / relative).read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def _dependencies(pkg: dict) -> dict[str, Any]:
    deps: dict[str, Any] = {}
    for key in ("dependencies", "devDependencies"):
        section = pkg.get(key)
        if isinstance(section, dict):
            deps.update(section)
    return deps


def _any_in(mapping: dict, *keys: str) -> bool:
    return any(key in mapping for key in keys)


def _any_substring(content: str, *tokens: str) -> bool:
    return any(token in content for token in tokens)
