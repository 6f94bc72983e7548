"""Main CLI entry point for CC Scaffold."""

import functools
import sys
from pathlib import Path
from typing import Optional

import click

from .analysis import ClaudeAnalyzer, apply_recommendations, quick_audit
from .analyzer import RecommendationEngine
from .analyzer.rules import (
    ARCHITECTURE_OPTIONS,
    CONCERN_OPTIONS,
    ENFORCEMENT_LEVELS,
    PROJECT_TYPES,
    TARGET_USER_OPTIONS,
)
from .config import Config
from .display import (
    console,
    print_analysis,
    print_applied,
    print_audit,
    print_backups,
    print_catalog,
    print_diff,
    print_generation_summary,
    print_prune,
    print_recommendations,
    print_scan,
    print_validation,
)
from .errors import ScaffoldError
from .generator import ConfigGenerator
from .logging_setup import configure_logging
from .models import ContextModel, MergeStrategy, ProjectConfig
from .scanner import ProjectScanner
from .store import BackupManager, diff, load_existing_config, merge

KINDS = ("skill", "agent", "hook")
STRATEGIES = [s.value for s in MergeStrategy]

project_argument = click.argument(
    "project_path",
    required=False,
    default=".",
    type=click.Path(file_okay=False, path_type=Path),
)


def handle_errors(func):
    """Report expected failures on stderr and exit with status 1."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (ScaffoldError, OSError, ValueError) as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)

    return wrapper


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool):
    """CC Scaffold - Generate Claude Code configuration for a project."""
    config = Config.from_env()
    configure_logging("DEBUG" if verbose else config.log_level)
    ctx.obj = config


@cli.command()
@click.argument("project_path", type=click.Path(file_okay=False, path_type=Path))
@click.option("--name", help="Project name (defaults to the directory name)")
@click.option("--description", default="", help="One-line project description")
@click.option("--type", "project_type", type=click.Choice(PROJECT_TYPES), help="Project type")
@click.option("--stack", multiple=True, help="Technology tag (repeatable)")
@click.option("--arch", multiple=True, type=click.Choice(ARCHITECTURE_OPTIONS), help="Architecture pattern (repeatable)")
@click.option("--concern", multiple=True, type=click.Choice(CONCERN_OPTIONS), help="Quality concern (repeatable)")
@click.option("--users", type=click.Choice(TARGET_USER_OPTIONS), help="Target users")
@click.option("--api/--no-api", default=None, help="Whether the project exposes an API")
@click.option("--scan", "use_scan", is_flag=True, help="Pre-fill the context by scanning the project")
@click.option("--skill", "skills", multiple=True, help="Skill to include instead of the recommendations")
@click.option("--agent", "agents", multiple=True, help="Agent to include instead of the recommendations")
@click.option("--hook", "hooks", multiple=True, help="Hook to include instead of the recommendations")
@click.option("--enforcement", type=click.Choice(ENFORCEMENT_LEVELS), default="strict", show_default=True)
@click.option("--strategy", type=click.Choice(STRATEGIES), help="How to handle an existing configuration")
@click.option("--yes", "-y", is_flag=True, help="Do not prompt")
@click.pass_obj
@handle_errors
def init(
    config: Config,
    project_path: Path,
    name: Optional[str],
    description: str,
    project_type: Optional[str],
    stack: tuple,
    arch: tuple,
    concern: tuple,
    users: Optional[str],
    api: Optional[bool],
    use_scan: bool,
    skills: tuple,
    agents: tuple,
    hooks: tuple,
    enforcement: str,
    strategy: Optional[str],
    yes: bool,
):
    """Generate a configuration for PROJECT_PATH.

    Examples:
        # Scan the project and accept the recommendations
        cc-scaffold init . --scan --yes

        # Describe the project explicitly
        cc-scaffold init ./api --type api --stack python --concern security
    """
    project_path = project_path.resolve()
    project_path.mkdir(parents=True, exist_ok=True)

    context = ContextModel()
    if use_scan:
        scan = ProjectScanner(config).scan(project_path)
        print_scan(scan)
        context = scan.to_context()
        name = name or scan.name

    context = ContextModel(
        project_type=project_type or context.project_type,
        tech_stack=[*context.tech_stack, *stack],
        architecture=[*context.architecture, *arch],
        concerns=list(concern),
        target_users=users,
        has_api=context.has_api if api is None else api,
    )

    recommendations = RecommendationEngine().evaluate(context)
    print_recommendations(recommendations)

    requested = ProjectConfig(
        project_name=name or project_path.name,
        description=description,
        output_dir=config.output_dir,
        project_type=context.project_type,
        tech_stack=context.tech_stack,
        architecture=context.architecture,
        skills=list(skills) or recommendations.skills,
        agents=list(agents) or recommendations.agents,
        hooks=list(hooks) or recommendations.hooks,
        enforcement_level=enforcement,
    )

    existing = load_existing_config(project_path, config.output_dir)
    if existing.exists:
        print_diff(diff(existing, requested))
        if strategy is None:
            strategy = (
                MergeStrategy.MERGE.value
                if yes
                else click.prompt(
                    f"Existing {config.output_dir}/ found. Strategy",
                    type=click.Choice(STRATEGIES),
                    default=MergeStrategy.MERGE.value,
                )
            )
    elif not yes and not click.confirm(f"Write configuration to {project_path}?", default=True):
        strategy = MergeStrategy.CANCEL.value

    resolved = merge(existing, requested, strategy or MergeStrategy.MERGE)
    if resolved is None:
        click.echo("Cancelled, nothing written.")
        return

    backups = BackupManager(project_path, config.output_dir)
    if resolved.strategy is MergeStrategy.BACKUP_REPLACE:
        snapshot = backups.snapshot()
        if snapshot is not None:
            click.echo(f"Backed up existing configuration to {snapshot.name}")

    summary = ConfigGenerator(project_path, config.output_dir).write(resolved)
    print_generation_summary(summary, project_path)

    if resolved.strategy is MergeStrategy.BACKUP_REPLACE:
        pruned = backups.prune(config.backup_keep)
        if pruned.removed or pruned.failures:
            print_prune(pruned)


@cli.command()
@project_argument
@click.pass_obj
@handle_errors
def scan(config: Config, project_path: Path):
    """Print the characteristics detected in PROJECT_PATH."""
    print_scan(ProjectScanner(config).scan(project_path.resolve()))


@cli.command()
@project_argument
@click.option("--concern", multiple=True, type=click.Choice(CONCERN_OPTIONS), help="Quality concern (repeatable)")
@click.pass_obj
@handle_errors
def recommend(config: Config, project_path: Path, concern: tuple):
    """Scan PROJECT_PATH and print recommended components."""
    result = ProjectScanner(config).scan(project_path.resolve())
    context = result.to_context().model_copy(update={"concerns": list(concern)})
    print_recommendations(RecommendationEngine().evaluate(context))


@cli.command()
@click.argument("kind", type=click.Choice(KINDS))
@click.argument("names", nargs=-1, required=True)
@click.option(
    "--project",
    "-p",
    "project_path",
    default=".",
    type=click.Path(file_okay=False, path_type=Path),
    help="Project directory",
)
@click.pass_obj
@handle_errors
def add(config: Config, kind: str, names: tuple, project_path: Path):
    """Add catalog components of KIND to an existing configuration."""
    project_path = project_path.resolve()
    if not (project_path / config.output_dir).is_dir():
        raise ScaffoldError(f"No {config.output_dir}/ in {project_path}; run init first")

    generator = ConfigGenerator(project_path, config.output_dir)
    added = generator.add_components(kind, names)
    for name in added:
        click.echo(f"Added {kind}: {name}")

    unknown = [n for n in names if n not in added]
    if unknown:
        raise ScaffoldError(f"Unknown {kind}: {', '.join(unknown)}")


@cli.command(name="list")
@click.argument("kind", type=click.Choice(KINDS), required=False)
def list_command(kind: Optional[str]):
    """List the built-in components, optionally of one KIND."""
    print_catalog([kind] if kind else KINDS)


@cli.command()
@project_argument
@click.pass_obj
@handle_errors
def validate(config: Config, project_path: Path):
    """Validate the configuration in PROJECT_PATH."""
    report = ConfigGenerator(project_path.resolve(), config.output_dir).validate()
    print_validation(report)
    if not report.valid:
        sys.exit(1)


@cli.command()
@project_argument
@click.pass_obj
@handle_errors
def audit(config: Config, project_path: Path):
    """Audit the configuration in PROJECT_PATH without calling Claude."""
    report = quick_audit(project_path.resolve(), config.output_dir)
    print_audit(report)
    if report.summary["error"]:
        sys.exit(1)


@cli.command()
@project_argument
@click.option("--apply", "apply_changes", is_flag=True, help="Apply the recommendations")
@click.option("--verbose", is_flag=True, help="Stream Claude's output")
@click.pass_obj
@handle_errors
def analyze(config: Config, project_path: Path, apply_changes: bool, verbose: bool):
    """Run a deep analysis of PROJECT_PATH with the Claude CLI."""
    project_path = project_path.resolve()
    analyzer = ClaudeAnalyzer(config)

    if verbose:
        result = analyzer.analyze(
            project_path, on_progress=lambda _count, text: click.echo(text, nl=False)
        )
    else:
        with console.status("[bold green]Claude is analyzing the project...", spinner="dots") as status:
            result = analyzer.analyze(
                project_path,
                on_progress=lambda count, _text: status.update(
                    f"[bold green]Claude is analyzing the project... {count} chars received"
                ),
            )

    print_analysis(result)

    if apply_changes:
        if not result.recommendations:
            click.echo("No recommendations to apply.")
            return
        print_applied(apply_recommendations(result.recommendations, project_path, config.output_dir))


@cli.group()
def backups():
    """Manage snapshots of the configuration directory."""


@backups.command(name="list")
@project_argument
@click.pass_obj
@handle_errors
def backups_list(config: Config, project_path: Path):
    """List snapshots in PROJECT_PATH, newest first."""
    print_backups(BackupManager(project_path.resolve(), config.output_dir).list())


@backups.command(name="restore")
@project_argument
@click.argument("backup", required=False)
@click.option("--yes", "-y", is_flag=True, help="Do not prompt")
@click.pass_obj
@handle_errors
def backups_restore(config: Config, project_path: Path, backup: Optional[str], yes: bool):
    """Restore BACKUP (name or list number, default newest)."""
    manager = BackupManager(project_path.resolve(), config.output_dir)
    available = manager.list()
    if not available:
        raise ScaffoldError("No backups found")

    if backup is None:
        chosen = available[0]
    elif backup.isdigit() and 1 <= int(backup) <= len(available):
        chosen = available[int(backup) - 1]
    else:
        matches = [b for b in available if b.name == backup or b.timestamp == backup]
        if not matches:
            raise ScaffoldError(f"Backup not found: {backup}")
        chosen = matches[0]

    if not yes:
        click.confirm(
            f"Replace {config.output_dir}/ with {chosen.name}?", default=False, abort=True
        )

    manager.restore(chosen.path)
    click.echo(f"Restored {chosen.name}")


@backups.command(name="prune")
@project_argument
@click.option("--keep", type=int, help="Snapshots to keep (default from CC_SCAFFOLD_BACKUP_KEEP)")
@click.pass_obj
@handle_errors
def backups_prune(config: Config, project_path: Path, keep: Optional[int]):
    """Remove all but the newest snapshots."""
    result = BackupManager(project_path.resolve(), config.output_dir).prune(
        config.backup_keep if keep is None else keep
    )
    print_prune(result)
    if result.failures:
        sys.exit(1)


if __name__ == "__main__":
    cli()
