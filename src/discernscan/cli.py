"""Command-line interface for DiscernScan."""

from __future__ import annotations

import asyncio
import signal
import sys
from pathlib import Path
from typing import Optional, Sequence

import click
import structlog
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from discernscan import __version__
from discernscan.config import Config, MonitoringConfig, load_config
from discernscan.container import DependencyContainer
from discernscan.criteria import DISCERN_CRITERIA
from discernscan.exceptions import ConfigurationError, NoSuccessfulAnalyses, SearchError
from discernscan.observability import configure_logging
from discernscan.protocols import AnalysisFailure, DiscernResult, ProgressEvent, SearchAnalysis
from discernscan.report import CsvExporter, TextReportExporter, category_score, quality_label

console = Console()
logger = structlog.get_logger(__name__)


@click.group()
@click.version_option(version=__version__)
@click.option("--config", "-c", type=click.Path(exists=True, dir_okay=False), help="Configuration file path")
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Logging level (overrides the configuration file)",
)
@click.option("--log-file", type=click.Path(dir_okay=False), help="Write JSON logs to this file")
@click.pass_context
def cli(ctx: click.Context, config: Optional[str], log_level: Optional[str], log_file: Optional[str]) -> None:
    """DiscernScan - DISCERN quality scoring for health information on the web."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = Path(config) if config else None
    ctx.obj["log_level"] = log_level
    ctx.obj["log_file"] = log_file


def _load(ctx: click.Context) -> Config:
    config = load_config(ctx.obj.get("config_path"))
    overrides = {key: ctx.obj[key] for key in ("log_level", "log_file") if ctx.obj.get(key)}
    if overrides:
        config.monitoring = MonitoringConfig.model_validate({**config.monitoring.model_dump(), **overrides})
    configure_logging(config.monitoring)
    return config


@cli.command()
@click.argument("keyword")
@click.option("--quantity", "-n", default=10, show_default=True, type=click.IntRange(min=1), help="Results to analyze")
@click.option("--csv", "csv_path", type=click.Path(dir_okay=False), help="Write results as CSV")
@click.option("--report", "report_path", type=click.Path(dir_okay=False), help="Write a text report")
@click.option("--interval", type=click.FloatRange(min=0), help="Seconds between evaluator calls")
@click.pass_context
def analyze(
    ctx: click.Context,
    keyword: str,
    quantity: int,
    csv_path: Optional[str],
    report_path: Optional[str],
    interval: Optional[float],
) -> None:
    """Search for KEYWORD and score the top results with DISCERN."""
    config = _load(ctx)
    if interval is not None:
        config.pipeline.evaluation_interval_seconds = interval

    try:
        container = DependencyContainer(config, ctx.obj.get("config_path"))
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {escape(str(e))}")
        sys.exit(2)

    try:
        analysis = asyncio.run(run_analysis(container, keyword, quantity))
    except NoSuccessfulAnalyses as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        if e.failures:
            console.print(failures_table(e.failures))
        sys.exit(1)
    except (SearchError, ValueError) as e:
        console.print(f"[red]Search failed:[/red] {escape(str(e))}")
        sys.exit(1)

    report = analysis.report
    console.print(f"[dim]{escape(analysis.search.metadata.message)}[/dim]")
    console.print(results_table(report.results))
    if report.failures:
        console.print(failures_table(report.failures))
    if report.cancelled:
        console.print(f"[yellow]Cancelled; {len(report.skipped)} URLs were not analyzed.[/yellow]")

    if csv_path:
        CsvExporter().export(report.results, Path(csv_path))
        console.print(f"CSV written to {csv_path}")
    if report_path:
        TextReportExporter().export(report.results, Path(report_path), failures=report.failures)
        console.print(f"Report written to {report_path}")


async def run_analysis(container: DependencyContainer, keyword: str, quantity: int) -> SearchAnalysis:
    """Run one search-and-analyze pass with a live progress bar."""
    cancel_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    handler_installed = False
    try:
        loop.add_signal_handler(signal.SIGINT, cancel_event.set)
        handler_installed = True
    except (NotImplementedError, RuntimeError):
        logger.debug("Signal handlers unavailable; Ctrl-C will abort immediately")

    console.print(
        Panel.fit(
            f"[bold blue]DiscernScan[/bold blue]\nKeyword: {keyword}\nResults: {quantity}",
            title="Starting Analysis",
        )
    )
    progress = Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("{task.completed}/{task.total}"),
        TimeElapsedColumn(),
        console=console,
    )

    try:
        async with container.lifecycle():
            pipeline = await container.get_pipeline()
            with progress:
                task = progress.add_task("Searching", total=quantity)

                def on_progress(event: ProgressEvent) -> None:
                    progress.update(
                        task,
                        total=event.total,
                        description=f"[{event.index}/{event.total}] {event.state.value} {escape(event.url[:60])}",
                    )
                    if event.state.is_terminal:
                        progress.advance(task)

                return await pipeline.search_and_analyze(
                    keyword, quantity, on_progress=on_progress, cancel_event=cancel_event
                )
    finally:
        if handler_installed:
            loop.remove_signal_handler(signal.SIGINT)


def results_table(results: Sequence[DiscernResult]) -> Table:
    table = Table(title="DISCERN Results")
    table.add_column("#", justify="right")
    table.add_column("Title", style="cyan", overflow="fold")
    table.add_column("Type")
    table.add_column("Total", justify="right", style="magenta")
    table.add_column("Quality")
    table.add_column("Reliability", justify="right")
    table.add_column("Quality %", justify="right")
    table.add_column("Treatment", justify="right")
    for position, result in enumerate(results, start=1):
        table.add_row(
            str(position),
            escape(result.title),
            result.type,
            str(result.total_score),
            quality_label(result.total_score),
            f"{category_score(result, 'reliability')}%",
            f"{category_score(result, 'quality')}%",
            f"{category_score(result, 'treatment')}%",
        )
    return table


def failures_table(failures: Sequence[AnalysisFailure]) -> Table:
    table = Table(title="Rejected URLs")
    table.add_column("URL", overflow="fold")
    table.add_column("Stage")
    table.add_column("Error", style="red")
    table.add_column("Message", overflow="fold")
    for failure in failures:
        table.add_row(escape(failure.url), failure.stage.value, failure.error_kind, escape(failure.message))
    return table


@cli.command()
def criteria() -> None:
    """Print the 15 DISCERN criteria."""
    table = Table(title="DISCERN Criteria")
    table.add_column("ID", justify="right")
    table.add_column("Category", style="cyan")
    table.add_column("Question", overflow="fold")
    for criterion in DISCERN_CRITERIA:
        table.add_row(str(criterion.id), criterion.category.value, criterion.question)
    console.print(table)


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
