"""Main cli api for the streaming-ga package."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from .config.app_config import AppConfig
from .config.constants import CONFIG_FILE_DEFAULT
from .consumers.consumers import RichConsumer
from .engine import build_application, init_logging
from .errors import FatalLoopError

app = typer.Typer(
    help="Dynamic streaming multi-objective genetic algorithm",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
console = Console()
logger = logging.getLogger(__name__)

ConfigOption = Annotated[Path, typer.Option("--config", "-c", help="Path to a JSON configuration file.")]


@app.command()
def run(
    config: ConfigOption = CONFIG_FILE_DEFAULT,
    max_snapshots: Annotated[
        int | None,
        typer.Option("--max-snapshots", "-n", min=1, help="Stop after this many snapshots."),
    ] = None,
) -> None:
    """Run the dynamic GA until it is stopped or reaches its snapshot limit."""
    app_config = AppConfig.build(config)
    if max_snapshots is not None:
        app_config.runtime.max_snapshots = max_snapshots
    init_logging(app_config)
    console.print(f"[cyan]Initializing {app_config.problem.kind} run with {config.name}...[/cyan]")

    application = build_application(app_config)
    start_time = time.time()

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("Initializing...", total=app_config.runtime.max_snapshots)
        application.add_data_consumer(
            RichConsumer(progress=progress, task_id=task, max_snapshots=app_config.runtime.max_snapshots)
        )

        application.start()
        try:
            while application.is_running():
                time.sleep(0.2)
        except KeyboardInterrupt:
            console.print("[yellow]Stop requested, finishing the current cycle...[/yellow]")
            application.request_stop()

        try:
            application.join()
        except FatalLoopError as e:
            console.print(f"[red]Run failed in {e.component or 'unknown component'}: {e}[/red]")
            raise typer.Exit(code=1) from e

    ga = application.algorithm
    console.print("[bold green]Run Complete![/bold green]")
    console.print(f"Duration: {time.time() - start_time:.2f}s")
    console.print(f"Cycles: {ga.cycles}")
    console.print(f"Snapshots: {ga.snapshots_emitted}")
    console.print(f"Restarts: {sum(ga.restarts.values())}")


@app.command(name="show-config")
def show_config(config: ConfigOption = CONFIG_FILE_DEFAULT) -> None:
    """Validate a configuration file and print its settings."""
    app_config = AppConfig.build(config)

    table = Table(title=f"Configuration ({config.name})")
    table.add_column("Section", style="cyan", no_wrap=True)
    table.add_column("Setting", style="magenta")
    table.add_column("Value", justify="right")

    sections = {
        "algorithm": app_config.algorithm,
        "problem": app_config.problem,
        "restart.problem_change": app_config.restart.problem_change,
        "restart.parameter_change": app_config.restart.parameter_change,
        "exports": app_config.exports,
        "runtime": app_config.runtime,
        "logging": app_config.logging,
    }
    for section, model in sections.items():
        if model is None:
            table.add_row(section, "-", "[dim]same as problem_change[/dim]")
            continue
        for key, value in model.model_dump().items():
            table.add_row(section, key, str(value))

    for idx, source in enumerate(app_config.sources):
        table.add_row(f"sources[{idx}]", "kind / target", f"{source.kind} -> {source.target}")
        table.add_row(f"sources[{idx}]", "interval", str(source.interval))

    console.print(table)
