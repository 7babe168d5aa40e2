"""
Command Line Interface for Completion Contracts.
"""

from pathlib import Path
from typing import List, Optional

import typer
import yaml
from rich import print as rprint
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..config import settings
from ..contract.loader import load_contract
from ..contract.results import IntegrityIssue, RunVerdict
from ..engine.loop import ConvergenceEngine
from ..engine.report import write_run_report
from ..integrity.gate import IntegrityError, IntegrityOptions, check as check_contract
from ..logging_config import configure_logging
from ..runtime.context import ExecutionContext, ProvenanceSignals
from ..runtime.storage import (
    ArtifactStore,
    FileArtifactStore,
    InMemoryArtifactStore,
    create_artifact_store,
)
from ..validators.registry import build_default_registry

app = typer.Typer(help="Completion Contracts - check and evaluate completion contracts")
console = Console()

EXIT_INTEGRITY = 1
EXIT_FAILURE = 2

STATUS_EMOJI = {"pass": "✅", "fail": "❌", "skip": "⏭️"}


@app.callback()
def _setup(
    log_level: Optional[str] = typer.Option(None, help="Log level (default from config)"),
    log_format: Optional[str] = typer.Option(None, help="'json' or 'console'"),
):
    """Completion Contracts command line."""
    configure_logging(log_level, log_format)


def _read_contract(path: Path) -> dict:
    try:
        return load_contract(path)
    except (OSError, ValueError) as e:
        console.print(f"❌ Cannot load contract: {e}")
        raise typer.Exit(EXIT_INTEGRITY)


def _read_signals(path: Optional[Path]) -> Optional[ProvenanceSignals]:
    if path is None:
        return None
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        return ProvenanceSignals.model_validate(data)
    except (OSError, ValueError, yaml.YAMLError) as e:
        console.print(f"❌ Cannot load provenance signals: {e}")
        raise typer.Exit(EXIT_INTEGRITY)


def _issues_table(issues: List[IntegrityIssue]) -> Table:
    table = Table(title="Integrity Issues", show_header=True, header_style="bold magenta")
    table.add_column("Severity", style="cyan")
    table.add_column("Code", style="yellow")
    table.add_column("Path")
    table.add_column("Message")
    for issue in issues:
        table.add_row(
            "🔴 error" if issue.is_error else "🟡 warning",
            issue.code.value,
            issue.path,
            issue.message,
        )
    return table


def _verdict_table(verdict: RunVerdict) -> Table:
    table = Table(title="Acceptance Criteria", show_header=True, header_style="bold cyan")
    table.add_column("Criterion", style="yellow")
    table.add_column("Severity")
    table.add_column("Status")
    table.add_column("Validator", style="blue")
    table.add_column("Summary")
    for result in verdict.results:
        table.add_row(
            result.ac_id,
            result.severity.value,
            f"{STATUS_EMOJI.get(result.status.value, '❓')} {result.status.value}",
            result.validator_id or "-",
            result.summary,
        )
    return table


@app.command()
def check(
    contract: Path = typer.Argument(..., help="Contract document (JSON or YAML)"),
    root: Optional[Path] = typer.Option(None, help="Workspace root holding the artifacts"),
    no_defaults: bool = typer.Option(False, "--no-defaults", help="Do not inject universal defaults"),
    no_must_coverage: bool = typer.Option(
        False, "--no-must-coverage", help="Skip the MUST validator coverage proof"
    ),
):
    """Run the integrity pass over a contract."""
    raw = _read_contract(contract)
    store = FileArtifactStore(root) if root else InMemoryArtifactStore()
    context = ExecutionContext(artifacts=store, workspace_root=str(root) if root else None)
    options = IntegrityOptions(
        inject_universal_defaults=not no_defaults,
        require_must_coverage=not no_must_coverage,
    )

    try:
        result = check_contract(raw, context, build_default_registry(), options)
    except IntegrityError as e:
        console.print(_issues_table(e.issues))
        console.print(f"❌ Contract failed integrity pass: {len(e.errors)} error(s)")
        raise typer.Exit(EXIT_INTEGRITY)

    if result.issues:
        console.print(_issues_table(result.issues))
    console.print(
        f"✅ Contract {result.contract.id or contract.name} is usable: "
        f"{len(result.contract.acceptance)} criteria, {len(result.must_ids)} MUST, "
        f"{len(result.warnings)} warning(s)"
    )


@app.command()
def evaluate(
    contract: Path = typer.Argument(..., help="Contract document (JSON or YAML)"),
    root: Optional[Path] = typer.Option(
        None, help="Workspace root holding the artifacts (default: configured store URI)"
    ),
    signals: Optional[Path] = typer.Option(None, help="Provenance signals file (JSON or YAML)"),
    max_parallel: Optional[int] = typer.Option(None, help="Parallel validators per pass"),
    max_iterations: int = typer.Option(
        1, help="Passes when the contract sets no limit (no refiner is attached)"
    ),
    no_defaults: bool = typer.Option(False, "--no-defaults", help="Do not inject universal defaults"),
):
    """Evaluate a contract against the artifacts in the workspace and write a run report."""
    raw = _read_contract(contract)
    store: ArtifactStore = FileArtifactStore(root) if root else create_artifact_store(settings.store_uri)
    context = ExecutionContext(
        artifacts=store,
        provenance_signals=_read_signals(signals),
        workspace_root=str(root) if root else None,
    )
    registry = build_default_registry()
    options = IntegrityOptions(inject_universal_defaults=not no_defaults)

    try:
        integrity = check_contract(raw, context, registry, options)
    except IntegrityError as e:
        console.print(_issues_table(e.issues))
        console.print(f"❌ Contract failed integrity pass: {len(e.errors)} error(s)")
        raise typer.Exit(EXIT_INTEGRITY)

    engine = ConvergenceEngine(
        registry,
        max_workers=max_parallel,
        default_max_iterations=max_iterations,
    )
    verdict = engine.run(integrity.contract, context)
    location = write_run_report(verdict, store)

    console.print(_verdict_table(verdict))
    style = "bold green" if verdict.succeeded else "bold red"
    rprint(Panel.fit(
        f"{verdict.status.value.upper()} ({verdict.reason.value}) "
        f"after {verdict.iterations} iteration(s)\n"
        f"Failing MUST: {', '.join(verdict.failing_must) or 'none'}\n"
        f"Report: {store.get_uri()}/{location}",
        style=style,
    ))
    if not verdict.succeeded:
        raise typer.Exit(EXIT_FAILURE)


@app.command()
def version():
    """Show version information."""
    from .. import __version__
    rprint(Panel.fit(f"{settings.app_name} v{__version__}", style="bold green"))


def main():
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
