"""CLI interface for the digital garden."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from garden.config import GardenConfig, load_config, merge_cli_overrides
from garden.errors import GardenError
from garden.layout import init_garden
from garden.lifecycle import candidates, parse_list, plant, transition
from garden.models import Post, Stage
from garden.render import format_date
from garden.store import load_posts, posts_in_stage
from garden.sync import sync as run_sync

app = typer.Typer(
    name="garden",
    help="Plant, grow, harvest and abandon posts in a static digital garden.",
)

console = Console()

MENU = """\
=== Digital Garden Admin CLI ===
1) Add new seed
2) Grow a seed
3) Harvest a growing post
4) Abandon a seed or growing post
5) Exit"""


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from garden import __version__

        console.print(f"garden {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(show_path=False, markup=False)],
        force=True,
    )


def _config(ctx: typer.Context) -> GardenConfig:
    return ctx.ensure_object(dict)["config"]


def _ask(label: str) -> str:
    return typer.prompt(label, default="", show_default=False)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    root: Annotated[
        Optional[Path],
        typer.Option("--root", "-r", help="Garden root directory (holds posts.json)."),
    ] = None,
    store: Annotated[
        Optional[Path],
        typer.Option("--store", help="Post store file, relative to the root."),
    ] = None,
    templates: Annotated[
        Optional[Path],
        typer.Option("--templates", help="Templates directory, relative to the root."),
    ] = None,
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to a .garden.toml file."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Log debug output."),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """Digital Garden - run with no command for the interactive menu."""
    _configure_logging(verbose)
    config = merge_cli_overrides(
        load_config(config_path), root=root, store=store, templates=templates
    )
    ctx.ensure_object(dict)["config"] = config

    if ctx.invoked_subcommand is None:
        menu(config)


def menu(config: GardenConfig) -> None:
    """Show the admin menu and run one command."""
    console.print(MENU, highlight=False)
    choice = _ask("Choose an option").strip()

    actions = {
        "1": _add_seed,
        "2": lambda c: _move(c, Stage.GROWING),
        "3": lambda c: _move(c, Stage.HARVESTED),
        "4": lambda c: _move(c, Stage.ABANDONED),
    }
    if choice == "5":
        return
    if choice not in actions:
        console.print("Invalid choice")
        return

    try:
        actions[choice](config)
    except GardenError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(1) from exc


def _add_seed(config: GardenConfig) -> None:
    title = _ask("Title")
    content = _ask("Content")
    tags = parse_list(_ask("Tags (comma separated)"))
    links = parse_list(_ask("Links (comma separated)"))

    post = plant(config, title, content, tags, links)
    console.print(f"[green]✅ Seed post created at {escape(post.link)}[/green]")


# Target -> (heading for the numbered list, message when nothing qualifies)
SELECTION_PROMPTS: dict[Stage, tuple[str, str]] = {
    Stage.GROWING: ("Available seed posts:", 'No posts in stage "seed"'),
    Stage.HARVESTED: ("Available growing posts:", 'No posts in stage "growing"'),
    Stage.ABANDONED: (
        "Available posts to abandon (Seed or Growing):",
        "No posts available to abandon.",
    ),
}


def _select(posts: list[Post], target: Stage) -> Post | None:
    """Prompt for one post from a numbered list; None on an invalid pick."""
    heading, empty = SELECTION_PROMPTS[target]
    if not posts:
        console.print(empty, highlight=False)
        return None

    show_stage = target == Stage.ABANDONED
    console.print()
    console.print(heading, highlight=False)
    for i, post in enumerate(posts, start=1):
        prefix = f"[{post.stage}] " if show_stage else ""
        console.print(escape(f"{i}) {prefix}{post.title}"), highlight=False)

    raw = _ask("Enter the number of the post").strip()
    try:
        index = int(raw) - 1
    except ValueError:
        index = -1
    if not 0 <= index < len(posts):
        console.print("Invalid choice.")
        return None
    return posts[index]


def _move(config: GardenConfig, target: Stage) -> None:
    posts = load_posts(config.store_path)
    post = _select(candidates(posts, target), target)
    if post is None:
        return
    transition(config, post, target)
    console.print(
        f"[green]✅ Post \"{escape(post.title_text)}\" moved to {target} stage: "
        f"{escape(post.link)}[/green]"
    )


@app.command()
def sync(ctx: typer.Context) -> None:
    """Read edited HTML content back into posts.json."""
    config = _config(ctx)
    try:
        report = run_sync(config)
    except GardenError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(1) from exc

    for title in report.synced:
        console.print(f"✅ Synced content for: {escape(title)}", highlight=False)

    if report.has_skips:
        table = Table(title="Skipped files")
        table.add_column("File")
        table.add_column("Title")
        table.add_column("Reason")
        for skip in report.skipped:
            table.add_row(escape(skip.path), escape(skip.title), skip.reason)
        console.print(table)

    console.print(
        f"[green]✨ {config.garden.store} updated: {len(report.synced)} synced, "
        f"{len(report.skipped)} skipped[/green]"
    )


@app.command("list")
def list_cmd(
    ctx: typer.Context,
    stage: Annotated[
        Optional[Stage],
        typer.Option("--stage", "-s", help="Only show posts in this stage."),
    ] = None,
) -> None:
    """List posts in the store."""
    config = _config(ctx)
    try:
        posts = load_posts(config.store_path)
    except GardenError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(1) from exc

    if stage is not None:
        posts = posts_in_stage(posts, stage)
    if not posts:
        console.print("[yellow]No posts found.[/yellow]")
        return

    table = Table()
    table.add_column("#", justify="right")
    table.add_column("Title")
    table.add_column("Stage")
    table.add_column("Last Updated")
    table.add_column("Link")
    for i, post in enumerate(posts, start=1):
        updated = format_date(post.dates.lastUpdated)
        table.add_row(
            str(i), escape(post.title_text), str(post.stage), updated, escape(str(post.link or ""))
        )
    console.print(table)


@app.command()
def init(
    ctx: typer.Context,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite existing templates."),
    ] = False,
) -> None:
    """Create stage directories and default templates."""
    config = _config(ctx)
    created = init_garden(config, overwrite=force)
    if not created:
        console.print("Garden already initialized.")
        return
    for path in created:
        console.print(f"Created {escape(str(path))}", highlight=False)
