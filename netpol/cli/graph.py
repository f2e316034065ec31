import json
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from netpol.config import get_settings
from netpol.graph.connections import check_connection
from netpol.policy.compile import NetworkPolicyCompiler, render_policy
from netpol.policy.generate import PolicyGenerator, explain_refusal
from netpol.validation.validator import GraphValidator
from .utils import handle_snapshot_errors, load_snapshot, print_issues

console = Console()


@click.command()
@click.argument('snapshot', type=click.Path(exists=True, dir_okay=False))
@click.option('--strict', is_flag=True, help='Treat warnings as failures.')
@click.option('--json', 'json_output', is_flag=True, help='Output issues in JSON format.')
@handle_snapshot_errors
def validate(snapshot: str, strict: bool, json_output: bool) -> None:
    """Validates a graph snapshot."""
    graph = load_snapshot(snapshot)
    strict_mode = strict or get_settings().STRICT_VALIDATION
    report = GraphValidator(strict_mode=strict_mode).validate_snapshot(graph)

    if json_output:
        click.echo(json.dumps([issue.model_dump(by_alias=True, mode="json") for issue in report.issues], indent=2))
    else:
        if report.issues:
            print_issues(report.issues)
        style = "green" if report.ok else "red"
        console.print(f"[{style}]{report.get_summary()}[/{style}]")

    if not report.ok:
        sys.exit(1)


@click.command()
@click.argument('snapshot', type=click.Path(exists=True, dir_okay=False))
@click.option('--target', '-t', 'target_id', required=True, help='ID of the PodGroup the policy applies to.')
@click.option('--output', '-o', type=click.Path(dir_okay=False), help='Write YAML to this file.')
@click.option('--force', is_flag=True, help='Compile even when validation reports errors.')
@handle_snapshot_errors
def generate(snapshot: str, target_id: str, output: Optional[str], force: bool) -> None:
    """Generates the NetworkPolicy YAML for one PodGroup."""
    graph = load_snapshot(snapshot)

    if force:
        policy = NetworkPolicyCompiler().compile(target_id, graph.nodes, graph.edges)
        if policy is None:
            console.print(f"[red]{explain_refusal(target_id, graph.nodes)}[/red]")
            sys.exit(1)
        text = render_policy(policy)
    else:
        result = PolicyGenerator().generate(target_id, graph.nodes, graph.edges)
        if not result.ok:
            click.echo(result.yaml)
            console.print(f"[red]Generation refused: {result.reason}[/red]")
            sys.exit(1)
        text = result.yaml

    if output:
        Path(output).write_text(text, encoding="utf-8")
        console.print(f"[green]Policy written to {output}[/green]")
    else:
        click.echo(text)


@click.command(name='check-connection')
@click.argument('snapshot', type=click.Path(exists=True, dir_okay=False))
@click.argument('source')
@click.argument('target')
@handle_snapshot_errors
def check_connection_cmd(snapshot: str, source: str, target: str) -> None:
    """Checks whether a rule edge from SOURCE to TARGET is allowed."""
    graph = load_snapshot(snapshot)
    check = check_connection(source, target, graph.nodes)
    if check.valid:
        console.print(f"[green]Allowed: {check.description}[/green]")
    else:
        console.print(f"[red]Not allowed: {check.message}[/red]")
        sys.exit(1)
