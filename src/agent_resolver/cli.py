"""CLI entry point for the agent resolver."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from agent_resolver import __version__

if TYPE_CHECKING:
    from agent_resolver.models import AgentSelection, TaskContext
    from agent_resolver.registry import CapabilityRegistry
    from agent_resolver.resolver import AgentResolver

console = Console()

json_option = click.option("--json", "as_json", is_flag=True, help="Emit JSON instead of tables")


def task_options(func: Any) -> Any:
    """Options describing a task context, shared by resolve and analyze."""
    decorators = [
        click.argument("description", required=False, default=""),
        click.option("--file", "-f", "files", multiple=True, help="Affected file (repeatable)"),
        click.option("--dependency", "-d", "dependencies", multiple=True, help="Declared dependency"),
        click.option("--domain", "primary_domain", default=None, help="Force the primary domain"),
        click.option("--secondary", "secondary_domains", multiple=True, help="Secondary domain"),
        click.option(
            "--complexity",
            type=click.Choice(["low", "medium", "high"]),
            default=None,
            help="Override the computed complexity",
        ),
    ]
    for decorator in reversed(decorators):
        func = decorator(func)
    return func


@click.group()
@click.version_option(version=__version__, prog_name="agent-resolver")
@click.option(
    "--registry",
    "registry_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Agent registry JSON file (defaults to the bundled registry)",
)
@click.option("--verbose", "-v", is_flag=True, help="Log pipeline details to stderr")
@click.pass_context
def main(ctx: click.Context, registry_path: Path | None, verbose: bool) -> None:
    """Agent Resolver: pick the best-suited agent for a task."""
    ctx.ensure_object(dict)
    ctx.obj["registry_path"] = registry_path
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=False)],
        )


def _get_resolver(ctx: click.Context) -> AgentResolver:
    from agent_resolver.resolver import build_resolver

    return build_resolver(registry_path=ctx.obj.get("registry_path"))


def _task_context(
    description: str,
    files: tuple[str, ...],
    dependencies: tuple[str, ...],
    primary_domain: str | None,
    secondary_domains: tuple[str, ...],
    complexity: str | None,
) -> TaskContext:
    from agent_resolver.models import TaskContext

    return TaskContext(
        description=description,
        affected_files=list(files),
        dependencies=list(dependencies),
        complexity=complexity,  # type: ignore[arg-type]
        primary_domain=primary_domain,
        secondary_domains=list(secondary_domains),
    )


def _echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2))


@main.command()
@task_options
@json_option
@click.pass_context
def resolve(ctx: click.Context, as_json: bool, **task: Any) -> None:
    """Resolve the best agent for a task."""
    resolver = _get_resolver(ctx)
    selection = asyncio.run(resolver.resolve_agent(_task_context(**task)))

    if as_json:
        _echo_json(selection.to_dict())
        return
    _print_selection(selection)


@main.command()
@task_options
@json_option
@click.pass_context
def analyze(ctx: click.Context, as_json: bool, **task: Any) -> None:
    """Show every pipeline stage for a task."""
    from agent_resolver.errors import AgentResolverError

    resolver = _get_resolver(ctx)
    try:
        analysis = asyncio.run(resolver.get_detailed_analysis(_task_context(**task)))
    except AgentResolverError as exc:
        raise click.ClickException(str(exc)) from exc

    if as_json:
        _echo_json(analysis.to_dict())
        return

    classification = analysis.classification
    console.print(
        f"[bold]Domain:[/bold] {classification.primary_domain} "
        f"({classification.confidence:.0%} confidence, {classification.complexity} complexity)"
    )
    for reason in classification.reasons:
        console.print(f"  - {escape(reason)}")

    context = analysis.context
    console.print(f"[bold]File types:[/bold] {', '.join(context.affected_file_types) or '-'}")
    console.print(f"[bold]Imports:[/bold] {', '.join(context.import_patterns) or '-'}")
    console.print(f"[bold]Stack:[/bold] {', '.join(context.technology_stack) or '-'}")
    console.print(f"[bold]Infrastructure:[/bold] {', '.join(context.infrastructure_components) or '-'}")

    if analysis.scores:
        table = Table(title="Agent Scores")
        table.add_column("Agent", style="cyan")
        table.add_column("Score", style="bold")
        table.add_column("Reasons")
        for agent_score in analysis.scores:
            table.add_row(agent_score.role, f"{agent_score.score:.3f}", "; ".join(agent_score.reasons))
        console.print(table)

    _print_selection(analysis.selection)


@main.command()
@json_option
@click.pass_context
def validate(ctx: click.Context, as_json: bool) -> None:
    """Check that the agent registry loads."""
    resolver = _get_resolver(ctx)
    report = asyncio.run(resolver.validate_services())

    if as_json:
        _echo_json(report)
    elif report["valid"]:
        stats = report["stats"]
        console.print(
            f"[green]Services valid[/green]: {stats['registry_agents']} agents, "
            f"{stats['registry_domains']} domains"
        )
    else:
        console.print("[red]Services invalid:[/red]")
        for issue in report["issues"]:
            console.print(f"  - {escape(issue)}")

    if not report["valid"]:
        ctx.exit(1)


@main.command()
@json_option
@click.pass_context
def stats(ctx: click.Context, as_json: bool) -> None:
    """Show registry statistics and resolver thresholds."""
    resolver = _get_resolver(ctx)
    registry_stats = _load_registry(resolver).get_stats()
    data = {"resolver": resolver.get_stats(), "registry": registry_stats}

    if as_json:
        _echo_json(data)
        return

    thresholds = data["resolver"]["thresholds"]
    console.print(
        f"Agents: {registry_stats['total_agents']} | "
        f"Domains: {registry_stats['total_domains']} | "
        f"Criteria: {registry_stats['total_criteria']}"
    )
    console.print(f"Average criteria per agent: {registry_stats['average_criteria_per_agent']:.2f}")
    console.print(
        f"Thresholds: min {thresholds['min_confidence']} | high {thresholds['high_confidence']}"
    )

    table = Table(title="Agents by Domain")
    table.add_column("Domain", style="cyan")
    table.add_column("Agents")
    for domain, count in sorted(registry_stats["agents_by_domain"].items()):
        table.add_row(domain, str(count))
    console.print(table)


@main.command()
@click.option("--domain", default=None, help="Only agents covering this domain")
@json_option
@click.pass_context
def agents(ctx: click.Context, domain: str | None, as_json: bool) -> None:
    """List registered agents."""
    registry = _load_registry(_get_resolver(ctx))
    capabilities = registry.get_all_capabilities()
    roles = registry.find_agents_by_domain(domain) if domain else list(capabilities)

    if as_json:
        _echo_json([capabilities[role].to_dict() for role in roles])
        return

    if not roles:
        console.print("[dim]No agents registered.[/dim]")
        return

    table = Table(title="Registered Agents")
    table.add_column("Agent", style="cyan")
    table.add_column("Priority", style="green")
    table.add_column("Domains")
    table.add_column("Criteria")
    for role in roles:
        capability = capabilities[role]
        table.add_row(
            role,
            str(capability.priority),
            ", ".join(capability.domains),
            str(len(capability.selection_criteria)),
        )
    console.print(table)


@main.command()
@click.option("--domain", default=None, help="Only keywords for this domain")
@json_option
def keywords(domain: str | None, as_json: bool) -> None:
    """Show the domain keywords used for classification."""
    from agent_resolver.classification import KeywordRegistry

    registry = KeywordRegistry()
    if domain:
        data = {domain: registry.get_keywords(domain)}
    else:
        data = registry.get_all_keywords()

    if as_json:
        _echo_json(data)
        return

    for name, words in data.items():
        console.print(f"[bold cyan]{name}[/bold cyan] ({len(words)})")
        console.print(f"  {', '.join(words) or '-'}")


def _load_registry(resolver: AgentResolver) -> CapabilityRegistry:
    from agent_resolver.errors import AgentResolverError

    try:
        asyncio.run(resolver.registry.initialize())
    except AgentResolverError as exc:
        raise click.ClickException(str(exc)) from exc
    return resolver.registry


def _print_selection(selection: AgentSelection) -> None:
    """Print an agent selection summary."""
    from agent_resolver.resolver import HIGH_CONFIDENCE_THRESHOLD, MIN_CONFIDENCE_THRESHOLD

    if selection.confidence >= HIGH_CONFIDENCE_THRESHOLD:
        color = "green"
    elif selection.confidence >= MIN_CONFIDENCE_THRESHOLD:
        color = "yellow"
    else:
        color = "red"

    console.print(f"\n[bold]Selected agent:[/bold] {selection.selected_agent}")
    console.print(f"[{color}]Confidence: {selection.confidence:.3f}[/{color}]")
    console.print(f"Fallback agent: {selection.fallback_agent}")
    if selection.fallback:
        console.print("[yellow]Selected by fallback[/yellow]")

    for reason in selection.reasons:
        console.print(f"  - {escape(reason)}")

    if selection.alternatives:
        console.print("\n[dim]Alternatives:[/dim]")
        for alt in selection.alternatives[:3]:
            console.print(f"  {alt.role}: {alt.score:.3f}")
