"""Typer CLI entrypoint for patchwatch."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import httpx
import typer
from rich import box
from rich.console import Console
from rich.table import Table

from .bot import CommandBot
from .config import AppConfig, ConfigRepository
from .engine import Fetcher, PatchStore, build_extractor, build_notifier
from .infra import ExclusiveSection, SQLiteManager
from .logging_conf import configure_logging, tail_log
from .orchestrator import CycleSummary, ScrapeCoordinator
from .query import QueryFacade
from .scheduler import APSchedulerAdapter

app = typer.Typer(
    help="patchwatch command line tool",
    no_args_is_help=True,
    rich_markup_mode=None,
)
log_app = typer.Typer(
    name="log",
    help="Log viewing commands",
    no_args_is_help=True,
    rich_markup_mode=None,
)

console = Console()


@dataclass
class AppState:
    config: AppConfig
    repository: ConfigRepository
    storage: SQLiteManager
    store: PatchStore
    coordinator: ScrapeCoordinator
    facade: QueryFacade
    scheduler: APSchedulerAdapter
    bot: CommandBot

    def close(self) -> None:
        """Stop the scheduler, then release HTTP clients and database connections."""

        self.scheduler.shutdown(wait=True)
        self.coordinator.fetcher.close()
        self.coordinator.notifier.close()
        self.storage.close_all()


def build_state(verbose: bool) -> AppState:
    repository = ConfigRepository()
    configure_logging(verbose=verbose, log_dir=repository.locator.logs_dir)
    config = repository.load()
    storage = SQLiteManager()
    store = PatchStore(
        storage,
        repository.database_path(config),
        default_limit=config.store.default_limit,
    )
    section = ExclusiveSection()
    coordinator = ScrapeCoordinator(
        fetcher=Fetcher(config.source),
        extractor=build_extractor(config.source.mode),
        store=store,
        notifier=build_notifier(config.notifier),
        section=section,
    )
    facade = QueryFacade(store, section, config.source.resolved_link_base())
    bot = CommandBot(facade, coordinator.run_cycle, reply_limit=config.server.reply_limit)
    return AppState(
        config=config,
        repository=repository,
        storage=storage,
        store=store,
        coordinator=coordinator,
        facade=facade,
        scheduler=APSchedulerAdapter(),
        bot=bot,
    )


def _get_state(ctx: typer.Context) -> AppState:
    state = ctx.obj
    if state is None:
        state = build_state(verbose=False)
        ctx.obj = state
    return state


def _render_summary(summary: CycleSummary) -> Table:
    table = Table(title="Scrape cycle", box=box.SIMPLE_HEAD)
    table.add_column("Fetched", style="cyan")
    table.add_column("Candidates", justify="right")
    table.add_column("Inserted", style="green", justify="right")
    table.add_column("Duplicates", style="yellow", justify="right")
    table.add_column("Failed", style="red", justify="right")
    table.add_column("Notified", style="magenta", justify="right")
    table.add_row(
        "yes" if summary.fetched else "no",
        str(summary.candidates),
        str(summary.inserted),
        str(summary.duplicates),
        str(summary.failed),
        str(summary.notified),
    )
    return table


app.add_typer(log_app, name="log", help="Inspect log files")


@app.callback()
def main(
    ctx: typer.Context, verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging")
) -> None:
    ctx.obj = build_state(verbose)


@app.command("pull", help="Run one scrape cycle now.")
def pull(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    summary = state.coordinator.run_cycle()
    console.print(_render_summary(summary))
    if not summary.fetched:
        console.print(f"Could not fetch {state.config.source.url}", style="red")
        raise typer.Exit(code=1)


@app.command("recent", help="Show the most recently stored patches.")
def recent(
    ctx: typer.Context,
    count: Optional[int] = typer.Option(None, "--count", "-n", help="Number of patches to show."),
) -> None:
    state = _get_state(ctx)
    items = state.facade.recent(count)
    if not items:
        console.print("No patches stored yet.", style="dim")
        return
    table = Table(title=f"Latest {len(items)} patches", box=box.SIMPLE_HEAD)
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Title", overflow="fold")
    table.add_column("Stored at", style="green")
    for item in items:
        table.add_row(item.id, item.description, item.created.isoformat(timespec="seconds"))
    console.print(table)


@app.command("init-db", help="Create the patches table if it does not exist.")
def init_db(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    path = state.repository.database_path(state.config)
    if state.storage.ensure_schema(state.storage.connect(path)):
        console.print(f"Schema ready at {path}", style="green")
    else:
        console.print(f"Schema creation failed at {path}", style="red")
        raise typer.Exit(code=1)


@app.command("serve", help="Serve feeds and run the periodic scraper.")
def serve(
    ctx: typer.Context,
    host: Optional[str] = typer.Option(None, "--host", help="Listen address."),
    port: Optional[int] = typer.Option(None, "--port", help="Listen port."),
) -> None:
    from .web import create_app

    state = _get_state(ctx)
    server = state.config.server
    http_client = httpx.Client(follow_redirects=True, timeout=state.config.source.timeout)
    web_app = create_app(
        state.config, state.facade, state.coordinator.run_cycle, state.bot, http_client=http_client
    )
    state.scheduler.schedule_scrape(state.config.schedule, state.coordinator.run_cycle)
    state.scheduler.start()
    console.print("listening...", style="cyan")
    try:
        web_app.run(host=host or server.host, port=port or server.port, threaded=True)
    finally:
        http_client.close()
        state.close()


@log_app.command("show", help="Show the tail of the application or error log.")
def log_show(
    ctx: typer.Context,
    tail: int = typer.Option(100, "--tail", help="Show the last N lines."),
    errors: bool = typer.Option(False, "--errors", help="Show the error log instead."),
) -> None:
    state = _get_state(ctx)
    logs_dir = state.repository.locator.logs_dir
    path = logs_dir / ("error.log" if errors else "patchwatch.log")
    lines = tail_log(path, tail)
    if not lines:
        console.print("No log output yet.", style="dim")
        return
    console.print(f"{path.name} · last {len(lines)} lines", style="cyan")
    console.print("".join(lines))


def cli() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    cli()
