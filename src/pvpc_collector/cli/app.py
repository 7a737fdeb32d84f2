from __future__ import annotations

from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from pvpc_collector.core.config import Settings
from pvpc_collector.core.errors import CollectorError
from pvpc_collector.core.logging import configure_logging
from pvpc_collector.core.time_utils import local_now
from pvpc_collector.inputs.pvpc import PriceCollector
from pvpc_collector.sinks.accumulator import InMemoryAccumulator
from pvpc_collector.writer.atomic import AtomicParquetWriter

app = typer.Typer(help="Spanish electricity hourly price (PVPC) collector")
console = Console()


def _load_settings() -> Settings:
    try:
        settings = Settings()
    except ValidationError as exc:
        console.print(f"[red]Invalid configuration:[/red] {exc}")
        raise typer.Exit(code=2) from exc
    configure_logging(settings.log_level)
    return settings


@app.command("run-once")
def run_once(
    output: Path | None = typer.Option(default=None, help="Optional parquet file to write the samples to"),
    append: bool = typer.Option(default=False, help="Merge into an existing parquet file instead of replacing it"),
) -> None:
    settings = _load_settings()
    acc = InMemoryAccumulator(clock=local_now)

    collector = PriceCollector(settings=settings)
    try:
        count = collector.collect(acc)
    except CollectorError as exc:
        console.print(f"[red]Collection failed:[/red] {exc}")
        raise typer.Exit(code=1) from exc
    finally:
        collector.close()

    table = Table(title=f"{settings.measurement} ({count} samples)")
    table.add_column("timestamp")
    table.add_column("tags")
    table.add_column("price", justify="right")
    for sample in acc.samples:
        stamp = sample.timestamp.isoformat() if sample.timestamp is not None else "-"
        tags = ",".join(f"{key}={value}" for key, value in sorted(sample.tags.items()))
        table.add_row(stamp, tags or "-", f"{sample.fields['price']:.5f}")
    console.print(table)

    if output is not None:
        writer = AtomicParquetWriter(root_dir=Path.cwd())
        path = writer.write(acc.to_frame(), output, append=append)
        console.print(f"Samples written to [bold]{path}[/bold]")


@app.command("show-url")
def show_url() -> None:
    settings = _load_settings()
    collector = PriceCollector(settings=settings)
    try:
        console.print(collector.request_url(), soft_wrap=True)
    finally:
        collector.close()


@app.command("sample-config")
def sample_config() -> None:
    console.print(f"# {PriceCollector.description()}")
    console.print(PriceCollector.sample_config(), markup=False, highlight=False)


if __name__ == "__main__":
    app()
