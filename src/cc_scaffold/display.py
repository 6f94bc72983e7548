"""Rich output for the CLI."""

from typing import Iterable, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .generator.catalog import list_components
from .models import (
    AnalysisResult,
    AppliedRecommendation,
    AuditReport,
    Backup,
    GenerationSummary,
    MergeDiff,
    PruneResult,
    RecommendationResult,
    ValidationReport,
)
from .scanner.project import format_scan_results
from .store.merger import format_diff

console = Console()

ISSUE_STYLES = {"error": "red", "warning": "yellow", "info": "blue"}
PRIORITY_STYLES = {"high": "red", "medium": "yellow", "low": "green"}


def print_scan(scan, out: Optional[Console] = None) -> None:
    (out or console).print(Panel(escape(format_scan_results(scan)), title="Scan", border_style="cyan"))


def format_recommendation_table(result: RecommendationResult) -> Table:
    """
    Create a table of recommended components.

    Args:
        result: Output of the recommendation engine

    Returns:
        Rich Table with one row per component kind
    """
    table = Table(title="Recommended Components", show_header=True, header_style="bold cyan")
    table.add_column("Kind", style="cyan", no_wrap=True)
    table.add_column("Count", justify="right", style="green")
    table.add_column("Components")

    table.add_row("Skills", str(len(result.skills)), ", ".join(result.skills))
    table.add_row("Agents", str(len(result.agents)), ", ".join(result.agents))
    table.add_row("Hooks", str(len(result.hooks)), ", ".join(result.hooks))
    return table


def print_recommendations(result: RecommendationResult, out: Optional[Console] = None) -> None:
    out = out or console
    out.print(format_recommendation_table(result))
    if result.reasons:
        out.print("\n[bold]Why:[/bold]")
        for reason in result.reasons:
            out.print(f"  - {escape(reason)}")
    for failure in result.failed_rules:
        out.print(f"[yellow]Rule {failure.rule_index} failed: {failure.error}[/yellow]")


def print_diff(merge_diff: MergeDiff, out: Optional[Console] = None) -> None:
    text = format_diff(merge_diff) or "No component changes"
    (out or console).print(Panel(text, title="Changes", border_style="yellow"))


def print_generation_summary(
    summary: GenerationSummary, project_root, out: Optional[Console] = None
) -> None:
    out = out or console
    out.print(
        f"\n[bold green]✓ Configuration written[/bold green] "
        f"({summary.skills} skills, {summary.agents} agents, {summary.hooks} hooks)"
    )
    for path in summary.files:
        try:
            shown = path.relative_to(project_root)
        except ValueError:
            shown = path
        out.print(f"  {shown}")
    if summary.preserved:
        out.print(f"[cyan]Preserved custom sections:[/cyan] {', '.join(summary.preserved)}")
    if summary.skipped:
        out.print(f"[yellow]Skipped unknown components:[/yellow] {', '.join(summary.skipped)}")


def print_validation(report: ValidationReport, out: Optional[Console] = None) -> None:
    out = out or console
    for error in report.errors:
        out.print(f"[red]✗ {escape(error)}[/red]")
    for warning in report.warnings:
        out.print(f"[yellow]⚠ {escape(warning)}[/yellow]")

    counts = report.summary
    status = "[green]✓ Valid[/green]" if report.valid else "[red]✗ Invalid[/red]"
    out.print(
        f"{status} - {counts['skills']} skills, {counts['agents']} agents, {counts['hooks']} hooks"
    )


def print_audit(report: AuditReport, out: Optional[Console] = None) -> None:
    out = out or console
    if not report.issues:
        out.print("[green]✓ No issues found[/green]")
        return

    table = Table(title="Audit", show_header=True, header_style="bold cyan")
    table.add_column("Level", no_wrap=True)
    table.add_column("Issue")
    for issue in report.issues:
        style = ISSUE_STYLES[issue.type]
        table.add_row(f"[{style}]{issue.type}[/{style}]", escape(issue.message))
    out.print(table)

    counts = report.summary
    out.print(
        f"{counts['error']} errors, {counts['warning']} warnings, {counts['info']} info"
    )


def print_analysis(result: AnalysisResult, out: Optional[Console] = None) -> None:
    out = out or console
    if result.parse_error:
        out.print("[yellow]Could not parse the analysis as JSON; raw response follows.[/yellow]")
        out.print(result.raw or "", markup=False)
        return

    if result.project_summary:
        out.print(Panel(escape(result.project_summary), title="Project Summary", border_style="cyan"))

    for label, key in (
        ("Languages", "languages"),
        ("Frameworks", "frameworks"),
        ("Databases", "databases"),
        ("Tools", "tools"),
    ):
        values = result.tech_stack.get(key) or []
        if values:
            out.print(f"[bold]{label}:[/bold] {', '.join(map(str, values))}")

    pattern = result.architecture.get("pattern")
    if pattern:
        out.print(f"[bold]Architecture:[/bold] {pattern}")

    if not result.recommendations:
        out.print("\nNo recommendations.")
        return

    table = Table(title="Recommendations", show_header=True, header_style="bold cyan")
    table.add_column("Priority", no_wrap=True)
    table.add_column("Action", no_wrap=True)
    table.add_column("Component")
    table.add_column("Reason")
    for rec in result.recommendations:
        style = PRIORITY_STYLES.get(rec.priority, "white")
        table.add_row(
            f"[{style}]{rec.priority}[/{style}]",
            rec.action,
            escape(f"{rec.type}: {rec.name}"),
            escape(rec.reason),
        )
    out.print(table)


def print_applied(results: List[AppliedRecommendation], out: Optional[Console] = None) -> None:
    out = out or console
    for item in results:
        if item.applied:
            out.print(f"  [green]✓[/green] {item.action} {item.type}: {item.name}")
        else:
            out.print(
                f"  [red]✗[/red] {item.action} {item.type}: {item.name} "
                f"({escape(item.error or '')})"
            )


def print_backups(backups: Iterable[Backup], out: Optional[Console] = None) -> None:
    out = out or console
    backups = list(backups)
    if not backups:
        out.print("No backups found.")
        return

    table = Table(title="Backups", show_header=True, header_style="bold cyan")
    table.add_column("#", justify="right", style="cyan")
    table.add_column("Name")
    table.add_column("Created", style="green")
    for index, backup in enumerate(backups, 1):
        table.add_row(str(index), backup.name, backup.created.strftime("%Y-%m-%d %H:%M:%S UTC"))
    out.print(table)


def print_prune(result: PruneResult, out: Optional[Console] = None) -> None:
    out = out or console
    out.print(f"Removed {result.removed} backups, {result.kept} remaining")
    for failure in result.failures:
        out.print(f"[yellow]⚠ Could not remove {failure.path.name}: {failure.reason}[/yellow]")


def print_catalog(kinds: Iterable[str], out: Optional[Console] = None) -> None:
    out = out or console
    for kind in kinds:
        table = Table(title=f"{kind.capitalize()}s", show_header=True, header_style="bold cyan")
        table.add_column("Name", style="cyan", no_wrap=True)
        if kind == "hook":
            table.add_column("Event", no_wrap=True)
        table.add_column("Description")
        for item in list_components(kind):
            if kind == "hook":
                table.add_row(item["name"], item["event"], item["description"])
            else:
                table.add_row(item["name"], item["description"])
        out.print(table)
