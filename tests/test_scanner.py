"""Tests for the project scanner."""

import json
from pathlib import Path

from cc_scaffold.config import Config
from cc_scaffold.scanner import ProjectScanner, format_scan_results


def _write_package(repo: Path, **fields) -> None:
    (repo / "package.json").write_text(json.dumps(fields))


def test_empty_directory_gives_defaults(tmp_path, config):
    """An empty directory yields the default ScanResult without raising."""
    result = ProjectScanner(config).scan(tmp_path)

    assert result.project_type == "general"
    assert result.languages == []
    assert result.frameworks == []
    assert result.databases == []
    assert result.architecture == []
    assert result.tech_stack == []
    assert not any(
        (result.has_tests, result.has_docker, result.has_ci, result.has_api, result.existing_claude)
    )


def test_missing_directory_does_not_raise(tmp_path, config):
    result = ProjectScanner(config).scan(tmp_path / "nope")

    assert result.project_type == "general"


def test_react_typescript_project(tmp_path, config):
    _write_package(
        tmp_path,
        name="web-app",
        dependencies={"react": "^18.0.0", "pg": "^8.0.0"},
        devDependencies={"typescript": "^5.0.0", "jest": "^29.0.0"},
    )

    result = ProjectScanner(config).scan(tmp_path)

    assert result.name == "web-app"
    assert result.project_type == "react-nextjs"
    assert result.languages == ["javascript", "typescript"]
    assert "react" in result.frameworks
    assert result.has_tests is True
    assert "postgresql" in result.databases
    assert result.tech_stack.count("sql") == 1


def test_malformed_package_json_keeps_node_detection(tmp_path, config):
    (tmp_path / "package.json").write_text("{not json")

    result = ProjectScanner(config).scan(tmp_path)

    assert result.languages == ["javascript"]
    assert result.project_type == "general"


def test_clean_architecture_dotnet_overrides_frontend(tmp_path, config):
    """Later specific matches win: .NET clean architecture beats React."""
    _write_package(tmp_path, dependencies={"react": "^18.0.0"})
    (tmp_path / "src" / "Domain").mkdir(parents=True)
    (tmp_path / "src" / "Application").mkdir(parents=True)
    (tmp_path / "src" / "Domain" / "Domain.csproj").write_text(
        '<PackageReference Include="Microsoft.EntityFrameworkCore" />'
    )

    result = ProjectScanner(config).scan(tmp_path)

    assert result.project_type == "dotnet-clean-arch"
    assert "clean-architecture" in result.architecture
    assert "ef-core" in result.tech_stack
    assert "react" in result.tech_stack


def test_react_package_with_bin_is_cli_tool(tmp_path, config):
    _write_package(tmp_path, dependencies={"react": "^18.0.0"}, bin={"tool": "cli.js"})

    assert ProjectScanner(config).scan(tmp_path).project_type == "cli-tool"


def test_monorepo_markers(tmp_path, config):
    (tmp_path / "packages").mkdir()

    assert ProjectScanner(config).scan(tmp_path).project_type == "monorepo"


def test_python_frameworks_are_case_insensitive(tmp_path, config):
    (tmp_path / "requirements.txt").write_text("FastAPI==0.110\npytest\nSQLAlchemy\n")

    result = ProjectScanner(config).scan(tmp_path)

    assert "python" in result.languages
    assert "fastapi" in result.frameworks
    assert "sqlalchemy" in result.frameworks
    assert result.project_type == "api-service"
    assert result.has_api and result.has_tests


def test_go_requires_exact_module_path(tmp_path, config):
    (tmp_path / "go.mod").write_text("module example.com/x\n\nrequire github.com/gin-gonic/gin v1.9.0\n")

    result = ProjectScanner(config).scan(tmp_path)

    assert result.frameworks == ["gin"]
    assert result.project_type == "api-service"


def test_polyglot_repo_unions_languages(tmp_path, config):
    _write_package(tmp_path, name="poly")
    (tmp_path / "pyproject.toml").write_text("[project]\nname = 'poly'\n")
    (tmp_path / "Cargo.toml").write_text("[package]\nname = 'poly'\n")

    result = ProjectScanner(config).scan(tmp_path)

    assert result.languages == ["javascript", "python", "rust"]


def test_infrastructure_flags(tmp_path, config):
    (tmp_path / "Dockerfile").write_text("FROM python:3.12\n")
    (tmp_path / ".github" / "workflows").mkdir(parents=True)
    (tmp_path / "k8s").mkdir()

    result = ProjectScanner(config).scan(tmp_path)

    assert result.has_docker and result.has_ci
    assert "docker" in result.tech_stack
    assert "kubernetes" in result.tech_stack


def test_databases_from_config_files(tmp_path, config):
    (tmp_path / "config").mkdir()
    (tmp_path / "config" / "app.yaml").write_text("url: mongodb://localhost:27017/app\n")
    (tmp_path / ".env").write_text("DATABASE_URL=postgres://localhost:5432/app\n")

    result = ProjectScanner(config).scan(tmp_path)

    assert set(result.databases) == {"mongodb", "postgresql"}
    assert "nosql" in result.tech_stack and "sql" in result.tech_stack


def test_ignored_dirs_are_not_searched(tmp_path):
    (tmp_path / "node_modules" / "pkg").mkdir(parents=True)
    (tmp_path / "node_modules" / "pkg" / "x.csproj").write_text("")

    result = ProjectScanner(Config()).scan(tmp_path)

    assert "csharp" not in result.languages


def test_depth_limit(tmp_path):
    deep = tmp_path / "a" / "b" / "c"
    deep.mkdir(parents=True)
    (deep / "App.csproj").write_text("")

    assert "csharp" not in ProjectScanner(Config(scan_max_depth=2)).scan(tmp_path).languages
    assert "csharp" in ProjectScanner(Config(scan_max_depth=6)).scan(tmp_path).languages


def test_existing_claude_components(existing_claude, config):
    result = ProjectScanner(config).scan(existing_claude)

    assert result.existing_claude is True
    assert result.existing_claude_components.skills == ["code-reviewer"]
    assert result.existing_claude_components.agents == ["architect"]
    assert result.existing_claude_components.hooks == ["my-hook"]


def test_to_context_and_format(tmp_path, config):
    (tmp_path / "requirements.txt").write_text("flask\n")

    result = ProjectScanner(config).scan(tmp_path)
    context = result.to_context()
    text = format_scan_results(result)

    assert context.has_api is True
    assert context.tech_stack == ["python"]
    assert "Frameworks: flask" in text
    assert "Features: API" in text
