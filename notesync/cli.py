"""notesync CLI - replay recorded update streams and fetch note content.

Commands:
    notesync replay FILE            run a JSONL message log through the sync core
    notesync fetch NOTE_ID          fetch a note's rendered HTML from the notes API
"""

import asyncio
from collections.abc import AsyncIterator
from pathlib import Path

import click

from notesync.config import Config
from notesync.core.state_store import StateStore
from notesync.services.notes_api import NotesApiClient
from notesync.services.sync_session import SyncSession
from notesync.utils.exceptions import ConfigurationError, ContentFetchError
from notesync.utils.logger import setup_logging

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _load_cfg(config_path: str | None) -> Config:
    try:
        cfg = Config.load(yaml_path=config_path)
    except (ConfigurationError, FileNotFoundError) as exc:
        raise click.ClickException(str(exc)) from exc
    setup_logging(**cfg.logging.model_dump())
    return cfg


async def _read_lines(path: Path) -> AsyncIterator[str]:
    with open(path, encoding="utf-8") as f:
        for line in f:
            if line.strip():
                yield line


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="notesync")
@click.option("--config", "config_path", default=None, help="Path to YAML config")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None) -> None:
    """notesync - client-side sync core for a linked notes viewer."""
    ctx.obj = _load_cfg(config_path)


# ---------------------------------------------------------------------------
# notesync replay
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("log_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--note", "note_ids", multiple=True, help="Show links and backlinks of a note")
@click.pass_obj
def replay(cfg: Config, log_file: Path, note_ids: tuple[str, ...]) -> None:
    """Replay a newline-delimited JSON message log.

    \b
    notesync replay updates.jsonl
    notesync replay updates.jsonl --note a --note b
    """
    focused: list[str] = []
    session = SyncSession(store=StateStore(options=cfg.store), on_focus=focused.append)
    stats = asyncio.run(session.run(_read_lines(log_file)))

    state = session.state
    click.echo(f"messages: {stats.messages}  applied: {stats.applied}  faults: {stats.fault_count}")
    for kind, count in sorted(stats.faults.items()):
        click.echo(f"  {kind}: {count}")
    click.echo(
        f"notes: {len(state.titles)}  graph nodes: {state.graph.node_count}"
        f"  edges: {state.graph.edge_count}"
    )
    if state.default_note_id:
        click.echo(f"default note: {state.default_note_id}")
    if focused:
        click.echo(f"last focus: {focused[-1]}")

    for note_id in note_ids:
        view = state.view(note_id)
        if view is None:
            click.echo(f"\n[{note_id}] not found")
            continue
        click.echo(f"\n[{view.id}] {view.title or ''}")
        for link in view.links:
            click.echo(f"  -> {link}")
        for backlink in view.backlinks:
            click.echo(f"  <- {backlink}")


# ---------------------------------------------------------------------------
# notesync fetch
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("note_id")
@click.pass_obj
def fetch(cfg: Config, note_id: str) -> None:
    """Print the rendered HTML of a note."""

    async def _fetch() -> str:
        async with NotesApiClient.from_config(cfg.api) as client:
            return await client.get_note_content(note_id)

    try:
        html = asyncio.run(_fetch())
    except ContentFetchError as exc:
        raise click.ClickException(exc.message) from exc
    click.echo(html)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
