"""Main CLI interface using Typer."""

from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional

import typer
from rich.console import Console
from rich.table import Table

from ..config import ConfigError, Settings, load_settings
from ..core import FleetOrchestrator, NodeDispatcher
from ..exporters import CsvReportSink, sink_for
from ..host import PsutilHost
from ..mitigation import MitigationEngine
from ..model.export import ChannelKind, ReportFormat
from ..model.result import MitigationReport, NodeResult, NodeStatus
from ..remote import (
    DirectTopology,
    InventoryTopology,
    KubectlTopology,
    LocalChannel,
    RemoteChannel,
    SshChannel,
    TopologyProvider,
)
from ..utils.logger import configure_logging, get_logger
from .inputs import dedupe, read_cluster_names

# Create CLI app
app = typer.Typer(
    name="ama-mitigator",
    help="Stop and disable the defective AMA MetricsExtension across cluster nodes",
    add_completion=True,
)

console = Console()
logger = get_logger(__name__)


def _format_success(text: str) -> str:
    return f"[green]{text}[/green]"


def _format_skipped(text: str) -> str:
    return f"[yellow]{text}[/yellow]"


def _format_fail(text: str) -> str:
    return f"[red]{text}[/red]"


STATUS_FORMATTERS: Dict[NodeStatus, Callable[[str], str]] = {
    NodeStatus.SUCCESS: _format_success,
    NodeStatus.SKIPPED: _format_skipped,
    NodeStatus.FAIL: _format_fail,
}


def default_output_path(report_format: ReportFormat) -> Path:
    """Timestamped report name in the working directory."""
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return Path(f"AMAMitigation_{stamp}.{ReportFormat(report_format).value}")


def print_results_table(report: MitigationReport) -> None:
    """Print results in a formatted table."""
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Cluster", style="cyan")
    table.add_column("Node", style="blue")
    table.add_column("Status")
    table.add_column("Message", style="white")
    table.add_column("Version", style="dim")

    for result in report.results:
        formatter = STATUS_FORMATTERS[result.status]
        table.add_row(
            result.cluster_name,
            result.node_name,
            formatter(result.status.value),
            result.message,
            result.component_version,
        )

    console.print(table)


def print_summary(report: MitigationReport) -> None:
    summary = report.summary()
    console.print("\n[bold]Summary:[/bold]")
    for status in NodeStatus:
        formatter = STATUS_FORMATTERS[status]
        console.print(f"  {formatter(status.value)}: {summary[status.value]}")


def _print_progress(result: NodeResult) -> None:
    formatter = STATUS_FORMATTERS[result.status]
    console.print(
        f"[cyan]{result.cluster_name}[/cyan] / {result.node_name}: "
        f"{formatter(result.status.value)} - {result.message}"
    )


def build_topology(inventory: Optional[Path], use_kubectl: bool) -> TopologyProvider:
    if inventory and use_kubectl:
        raise typer.BadParameter("Use either --inventory or --kubectl, not both")
    if inventory:
        return InventoryTopology(inventory)
    if use_kubectl:
        return KubectlTopology()
    # Without a topology source every cluster name is a single host
    return DirectTopology()


def build_channel(kind: ChannelKind, settings: Settings) -> RemoteChannel:
    if kind == ChannelKind.LOCAL:
        return LocalChannel(PsutilHost)
    return SshChannel(settings.fleet)


@app.command()
def run(
    clusters: List[str] = typer.Option(
        [], "--cluster", "-c", help="Cluster to process (can be used multiple times)"
    ),
    clusters_file: Optional[Path] = typer.Option(
        None,
        "--clusters-file",
        "-f",
        help="CSV with a ClusterName column, or a text file with one cluster per line",
    ),
    inventory: Optional[Path] = typer.Option(
        None, "--inventory", "-i", help="YAML inventory mapping cluster names to node names"
    ),
    use_kubectl: bool = typer.Option(
        False, "--kubectl", help="Resolve nodes with kubectl, treating clusters as contexts"
    ),
    channel: ChannelKind = typer.Option(
        ChannelKind.SSH, "--channel", help="How to run the mitigation on each node"
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Report path (default: AMAMitigation_<timestamp>.<format>)"
    ),
    report_format: ReportFormat = typer.Option(ReportFormat.CSV, "--format", help="Report format"),
    workers: Optional[int] = typer.Option(
        None, "--workers", "-w", min=1, help="Nodes processed in parallel (1 = sequential)"
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", "-t", help="Per-node timeout in seconds"
    ),
    config: Optional[Path] = typer.Option(None, "--config", help="Settings YAML file"),
    username: Optional[str] = typer.Option(None, "--user", "-u", help="SSH username"),
    key_file: Optional[str] = typer.Option(None, "--key-file", help="SSH private key file"),
    ask_password: bool = typer.Option(
        False, "--ask-password", help="Prompt for the SSH password"
    ),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Also write logs to this file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
    fail_on_error: bool = typer.Option(
        False, "--fail-on-error", help="Exit with code 2 if any node failed"
    ),
):
    """Apply the mitigation to every node of the given clusters."""
    configure_logging("DEBUG" if verbose else "INFO", log_file)

    try:
        settings = load_settings(config)
    except ConfigError as e:
        console.print(f"[red]Error:[/red] {str(e)}")
        raise typer.Exit(1)

    names = list(clusters)
    if clusters_file:
        try:
            names.extend(read_cluster_names(clusters_file))
        except OSError as e:
            console.print(f"[red]Error:[/red] cannot read {clusters_file}: {e}")
            raise typer.Exit(1)
    unique = dedupe(name.strip() for name in names)
    if len(unique) < len(names):
        console.print(f"[yellow]Ignoring {len(names) - len(unique)} duplicate/blank cluster name(s)[/yellow]")

    if not unique:
        console.print("[red]Error:[/red] no clusters given (use --cluster or --clusters-file)")
        raise typer.Exit(1)

    if timeout is not None and timeout <= 0:
        console.print("[red]Error:[/red] --timeout must be greater than 0")
        raise typer.Exit(1)

    fleet = settings.fleet
    if workers is not None:
        fleet.max_workers = workers
    if timeout is not None:
        fleet.node_timeout = timeout
    if username:
        fleet.ssh_username = username
    if key_file:
        fleet.ssh_key_filename = key_file
    if ask_password:
        fleet.ssh_password = typer.prompt("SSH password", hide_input=True)

    try:
        topology = build_topology(inventory, use_kubectl)
    except (OSError, ValueError) as e:
        console.print(f"[red]Error:[/red] {str(e)}")
        raise typer.Exit(1)

    console.print(f"Clusters to process: [cyan]{', '.join(unique)}[/cyan]")
    if not yes:
        typer.confirm(f"Apply the mitigation to {len(unique)} cluster(s)?", abort=True)

    remote = build_channel(channel, settings)
    orchestrator = FleetOrchestrator(
        topology=topology,
        dispatcher=NodeDispatcher(remote, settings.engine),
        max_workers=fleet.max_workers,
        node_timeout=fleet.node_timeout,
        on_result=_print_progress,
    )
    try:
        report = orchestrator.run(unique)
    finally:
        remote.close()

    output = output or default_output_path(report_format)
    sink_for(report_format, output).write(report)

    console.print()
    print_results_table(report)
    print_summary(report)
    console.print(f"\nReport saved to: [cyan]{output}[/cyan]")

    if fail_on_error and report.has_failures():
        raise typer.Exit(2)


@app.command()
def check(
    config: Optional[Path] = typer.Option(None, "--config", help="Settings YAML file"),
    json_output: bool = typer.Option(False, "--json", help="Print the outcome as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Run the mitigation on this machine only."""
    configure_logging("DEBUG" if verbose else "INFO")
    try:
        settings = load_settings(config)
    except ConfigError as e:
        console.print(f"[red]Error:[/red] {str(e)}")
        raise typer.Exit(1)

    outcome = MitigationEngine(PsutilHost(), settings.engine).run()
    if json_output:
        typer.echo(outcome.model_dump_json())
        return

    formatter = STATUS_FORMATTERS[outcome.status]
    console.print(f"Status: {formatter(outcome.status.value)}")
    console.print(f"Message: {outcome.message}")
    console.print(f"Version: {outcome.component_version}")


@app.command()
def summarize(
    report_path: Path = typer.Argument(..., help="CSV report written by 'run'"),
):
    """Print a saved CSV report and its status counts."""
    try:
        report = CsvReportSink(report_path).read()
    except (OSError, ValueError, KeyError) as e:
        console.print(f"[red]Error:[/red] {str(e)}")
        raise typer.Exit(1)

    print_results_table(report)
    print_summary(report)


if __name__ == "__main__":
    app()
