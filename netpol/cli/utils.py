import functools
import json
import sys
from pathlib import Path
from typing import Any, Sequence

import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from netpol.errors import SnapshotError, SnapshotProblem
from netpol.graph.models import GraphSnapshot
from netpol.validation.models import Issue, Severity

console = Console()

SEVERITY_STYLES = {Severity.ERROR: "red", Severity.WARNING: "yellow"}


def load_snapshot(path: str) -> GraphSnapshot:
    """
    Read a snapshot document ({nodes: [...], edges: [...]}) from JSON or YAML.

    Raises:
        SnapshotError: If the file cannot be read or does not match the schema
    """
    snapshot_path = Path(path)
    try:
        text = snapshot_path.read_text(encoding="utf-8")
    except OSError as e:
        raise SnapshotError(f"Cannot read snapshot {path}: {e}")

    try:
        if snapshot_path.suffix.lower() == ".json":
            data: Any = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise SnapshotError(f"Cannot parse snapshot {path}: {e}")

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise SnapshotError(
            f"Snapshot {path} must be a mapping with 'nodes' and 'edges'",
            [SnapshotProblem(path="/", message="Expected an object")],
        )

    try:
        return GraphSnapshot.model_validate(data)
    except ValidationError as e:
        problems = [
            SnapshotProblem(path="/" + "/".join(str(part) for part in error["loc"]), message=error["msg"])
            for error in e.errors()
        ]
        raise SnapshotError(f"Snapshot {path} does not match the graph schema", problems)


def print_issues(issues: Sequence[Issue]) -> None:
    table = Table(title="Validation Issues")
    table.add_column("Severity")
    table.add_column("Element", style="cyan")
    table.add_column("Field")
    table.add_column("Message")
    for issue in issues:
        style = SEVERITY_STYLES.get(issue.severity, "white")
        table.add_row(
            f"[{style}]{issue.severity.value}[/{style}]",
            issue.element_id or "-",
            issue.field_key or "-",
            issue.message,
        )
    console.print(table)


def handle_snapshot_errors(func):
    """Decorator turning SnapshotError into a readable message and exit code 2."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except SnapshotError as e:
            console.print(f"[red]Error: {e.message}[/red]")
            for problem in e.problems:
                console.print(f"  [red]{problem.path}[/red]: {problem.message}")
            sys.exit(2)
    return wrapper
