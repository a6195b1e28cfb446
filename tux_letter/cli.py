"""
Command-line interface for Tux Letter.

Uses Typer to run the digest once, on a daily schedule, or to inspect and
reset the seen-links cache. Secrets are read from the environment, with
a .env file loaded first when present.
"""

from __future__ import annotations

from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console
import typer

from .config import AppConfig, load_config
from .core.cache import LinkCache
from .runner import clean_cache, run_pipeline
from .scheduler import DailyScheduler
from .utils.logging import setup_logging

app = typer.Typer(add_completion=False)
console = Console()

DEFAULT_CONFIG = Path("config.yaml")


def _prepare(config: Path | None, log_level: str | None = None) -> AppConfig:
    load_dotenv()
    if config is None and DEFAULT_CONFIG.exists():
        config = DEFAULT_CONFIG
    cfg = load_config(str(config) if config else None)
    if log_level:
        cfg.logging.level = log_level
    setup_logging(cfg.logging)
    return cfg


@app.command()
def run(
    config: Path | None = typer.Option(None, "--config", "-c", exists=True, readable=True),
    source: list[str] | None = typer.Option(
        None, "--source", "-s", help="Only scrape this source (repeatable)."
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
):
    """Scrape every source, synthesize the digest and email it."""
    cfg = _prepare(config, log_level)
    try:
        payload = run_pipeline(cfg, sources=source, console=console)
    except Exception as exc:  # noqa: BLE001
        console.print(f"[red]Run failed:[/red] {exc}")
        raise typer.Exit(code=1) from exc
    console.print(f"Digest sent: {payload.total_items} items, {len(payload.references)} references")


@app.command("clean-cache")
def clean_cache_command(
    config: Path | None = typer.Option(None, "--config", "-c", exists=True, readable=True),
):
    """Delete the seen-links cache so every link is processed again."""
    cfg = _prepare(config)
    before, after = clean_cache(cfg)
    console.print(f"Cache cleaned: {before.total_links} -> {after.total_links} links")


@app.command("cache-stats")
def cache_stats(
    config: Path | None = typer.Option(None, "--config", "-c", exists=True, readable=True),
):
    """Show how many links the cache holds."""
    cfg = _prepare(config)
    stats = LinkCache(cfg.cache.path).get_stats()
    state = "present" if stats.exists else "missing"
    console.print(f"{stats.total_links} links in {stats.path} ({state})")


@app.command()
def schedule(
    config: Path | None = typer.Option(None, "--config", "-c", exists=True, readable=True),
    run_now: bool = typer.Option(False, "--run-now", help="Run once before waiting."),
):
    """Run the digest every day at the configured time."""
    cfg = _prepare(config)
    scheduler = DailyScheduler(cfg.schedule, lambda: run_pipeline(cfg, console=console))
    if run_now:
        scheduler.run_now()
    console.print(
        f"Scheduled daily at {cfg.schedule.hour:02d}:{cfg.schedule.minute:02d} ({cfg.schedule.timezone})"
    )
    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        scheduler.stop()


if __name__ == "__main__":
    app()
