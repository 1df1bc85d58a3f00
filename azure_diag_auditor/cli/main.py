#!/usr/bin/env python3
"""Command-line interface for Azure Diagnostic Settings Auditor"""

import sys
from typing import Optional

import typer
from azure.core.exceptions import AzureError
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from .. import __version__
from ..auth.manager import AzureSession
from ..core.aggregator import AuditAggregator
from ..core.exceptions import AuthenticationMissing, ExportFailure, SubscriptionNotFound
from ..core.models import AuditResult
from ..core.resolver import to_subscription
from ..export.csv_sink import CsvReportSink
from ..utils.config import ConfigurationLoader
from ..utils.logger import setup_logger

app = typer.Typer(
    name="azure-diag-auditor",
    help="🔍 Azure Diagnostic Settings Auditor",
    add_completion=False
)

console = Console()


def create_session() -> AzureSession:
    return AzureSession()


@app.command()
def audit(
    subscription_id: Optional[str] = typer.Option(
        None, "--subscription-id", "-s",
        help="Subscription ID to audit (if not specified, audits all visible subscriptions)"
    ),
    resource_group: Optional[str] = typer.Option(
        None, "--resource-group", "-g",
        help="Only audit resources in this resource group"
    ),
    resource_type: Optional[str] = typer.Option(
        None, "--resource-type", "-t",
        help="Only audit resources of this type, e.g. Microsoft.KeyVault/vaults"
    ),
    output_path: Optional[str] = typer.Option(
        None, "--output-path", "-o",
        help="Directory for the CSV report (defaults to the current directory)"
    ),
    parallel_workers: Optional[int] = typer.Option(
        None, "--workers",
        help="Number of parallel workers fetching diagnostic settings"
    ),
    config_file: Optional[str] = typer.Option(
        None, "--config", "-c",
        help="YAML configuration file"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v",
        help="Enable verbose logging"
    )
):
    """🔍 Audit diagnostic settings of Azure resources"""

    setup_logger("cli", "DEBUG" if verbose else "INFO")

    try:
        config = ConfigurationLoader().load_configuration(
            config_file,
            subscription_id=subscription_id,
            resource_group=resource_group,
            resource_type=resource_type,
            output_path=output_path,
            parallel_workers=parallel_workers,
            verbose=verbose or None
        )
    except ValueError as e:
        console.print(f"\n❌ Invalid configuration: {e}", style="red")
        sys.exit(1)

    if config.verbose:
        setup_logger("cli", "DEBUG")

    console.print("\n🚀 Starting Azure Diagnostic Settings Audit...\n")

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True
    ) as progress:
        task = progress.add_task("Resolving subscriptions...", total=None)
        aggregator = AuditAggregator(
            create_session(),
            config,
            progress_callback=lambda message: progress.update(task, description=message)
        )

        try:
            result = aggregator.run()
        except (AuthenticationMissing, SubscriptionNotFound) as e:
            progress.stop()
            console.print(f"\n❌ Audit failed: {e}", style="red")
            sys.exit(1)
        except KeyboardInterrupt:
            progress.stop()
            result = aggregator.partial_result()

    display_audit_summary(result)

    try:
        report_path = CsvReportSink(config).write(result.records, result.summary)
    except ExportFailure as e:
        console.print(f"\n❌ {e}", style="red")
        sys.exit(1)

    console.print(f"📁 Results exported to: {report_path}", style="green")

    if not result.completed:
        console.print("\n❌ Audit cancelled by user; partial results were exported.", style="red")
        sys.exit(130)

    if result.errors:
        console.print("\n⚠️  Audit completed with skipped subscriptions. Check logs for details.", style="yellow")
    else:
        console.print(f"\n✅ Audit completed successfully! {result.summary.total_records} records.", style="green")


@app.command()
def list_subscriptions():
    """📋 List Azure subscriptions visible to the current session"""

    session = create_session()
    if session.get_current_context() is None:
        console.print("❌ Not signed in to Azure. Run 'az login' first.", style="red")
        sys.exit(1)

    try:
        subscriptions = session.list_subscriptions()
    except AzureError as e:
        console.print(f"❌ Failed to list subscriptions: {e}", style="red")
        sys.exit(1)

    if not subscriptions:
        console.print("❌ No accessible subscriptions found.", style="red")
        sys.exit(1)

    table = Table(title="Visible Azure Subscriptions")
    table.add_column("Subscription ID", style="cyan")
    table.add_column("Name", style="blue")
    table.add_column("State", style="green")

    for raw in subscriptions:
        subscription = to_subscription(raw)
        state = getattr(raw, 'state', None)
        table.add_row(subscription.id, subscription.display_name, str(getattr(state, 'value', state) or ''))

    console.print(table)
    console.print(f"\n📊 Total: {len(subscriptions)} subscriptions")


@app.command()
def version():
    """📝 Show version information"""

    version_info = {
        "Azure Diagnostic Settings Auditor": __version__,
        "Python": sys.version.split()[0],
        "Platform": sys.platform
    }

    panel_content = "\n".join([f"{k}: {v}" for k, v in version_info.items()])
    console.print(Panel(panel_content, title="Version Information", expand=False))


def display_audit_summary(result: AuditResult):
    """Display audit results summary"""

    summary = result.summary
    summary_content = f"""
🔍 Audit ID: {result.audit_id}
⏱️  Duration: {result.duration_seconds:.2f} seconds
📦 Subscriptions Scanned: {summary.subscriptions_scanned}
📊 Total Records: {summary.total_records}
✅ Configured: {summary.configured_count}
❌ Not Configured: {summary.unconfigured_count}
📈 Coverage: {summary.coverage_percentage:.1f}%
"""

    if result.fetch_failures:
        summary_content += f"🔒 Settings Unavailable: {result.fetch_failures} resources\n"
    if result.errors:
        summary_content += f"⚠️  Skipped Subscriptions: {len(result.errors)}"

    console.print(Panel(summary_content, title="📋 Audit Summary", expand=False))

    if summary.workspace_destination_counts:
        table = Table(title="🎯 Log Analytics Destinations")
        table.add_column("Workspace", style="cyan")
        table.add_column("Settings", style="green", justify="right")

        for workspace, count in sorted(
            summary.workspace_destination_counts.items(),
            key=lambda item: (-item[1], item[0])
        ):
            table.add_row(workspace, str(count))

        console.print(table)

    if result.errors:
        console.print("\n⚠️  Errors encountered during audit:", style="yellow")
        for error in result.errors[:5]:
            console.print(f"  • {error}", style="red")
        if len(result.errors) > 5:
            console.print(f"  ... and {len(result.errors) - 5} more errors")


def main():
    """Main entry point"""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n❌ Interrupted by user.", style="red")
        sys.exit(130)


if __name__ == "__main__":
    main()
