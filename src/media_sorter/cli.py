"""Command-line interface for media-sorter."""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from media_sorter import __version__
from media_sorter.core.classifier import Classifier
from media_sorter.core.detector import DuplicateDetector
from media_sorter.core.models import ShortcutConfig
from media_sorter.core.renamer import batch_reorder, reorder_directory
from media_sorter.core.scanner import MediaScanner
from media_sorter.core.trash import SoftDeleter
from media_sorter.errors import MediaSorterError, ValidationError
from media_sorter.ui.review import ReviewUI
from media_sorter.utils.config import Config
from media_sorter.utils.logger import set_level, setup_logger

console = Console()
logger = setup_logger(__name__)

DIRECTORY = click.Path(exists=True, file_okay=False, dir_okay=True, path_type=Path)
FILE = click.Path(exists=True, file_okay=True, dir_okay=False, path_type=Path)

# Keys the classify prompt handles itself
QUIT_KEY = "q"
NEXT_KEY = "n"
UNDO_KEY = "u"
RESERVED_KEYS = {QUIT_KEY, NEXT_KEY, UNDO_KEY}


def _fail(message: str, error: Exception) -> None:
    console.print(f"[red]✗ {message}:[/red] {error}")
    sys.exit(1)


def _deleter(config: Config) -> SoftDeleter:
    return SoftDeleter(max_try=int(config.get("moves.max_rename_tries", 100)))


@click.group()
@click.version_option(version=__version__, prog_name="media-sorter")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Configuration file (default: ~/.media-sorter/config.json)",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_file: Optional[Path]) -> None:
    """
    Media Sorter - find identical images and keep folders tidy.

    Detects duplicate images with perceptual hashing, renumbers folders by
    modification time and sorts files into categories with undo.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config"] = Config(config_file)

    if verbose:
        set_level(logging.DEBUG)


@cli.command()
@click.argument("directory", type=DIRECTORY)
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    help="Output file for the duplicate report (JSON)",
)
@click.option(
    "--remove",
    is_flag=True,
    help="Move every copy except the recommended one to .delete",
)
@click.option(
    "--show-progress/--no-progress",
    default=True,
    help="Show progress bars",
)
@click.pass_context
def similar(
    ctx: click.Context,
    directory: Path,
    output: Optional[Path],
    remove: bool,
    show_progress: bool,
) -> None:
    """
    Find groups of identical images in DIRECTORY.

    Example:
        media-sorter similar ~/Pictures/2024 --output duplicates.json
    """
    config = ctx.obj["config"]
    detector = DuplicateDetector(config, show_progress=show_progress)

    console.print(f"[yellow]Analyzing:[/yellow] {directory}")
    try:
        groups = detector.find_duplicates(directory)
    except (MediaSorterError, OSError) as e:
        _fail("Error during duplicate detection", e)
        return

    if not groups:
        console.print("[green]✓ No duplicates found![/green]")
        return

    review_ui = ReviewUI(console)
    review_ui.show_groups(groups, limit=10)

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        with open(output, "w", encoding="utf-8") as f:
            json.dump([group.to_dict() for group in groups], f, indent=2)
        console.print(f"[green]✓ Results saved to:[/green] {output}")

    if remove:
        to_remove = review_ui.recommend_removals(groups)
        review_ui.show_removal_summary(to_remove)
        removed = 0
        for path in to_remove:
            try:
                detector.remove_duplicate(path)
                removed += 1
            except (MediaSorterError, OSError) as e:
                console.print(f"[red]Failed to remove {path}:[/red] {e}")
        console.print(f"[bold green]✓ {removed} files moved to .delete[/bold green]")


@cli.command()
@click.argument("directory", type=DIRECTORY)
@click.option("--width", "-w", type=int, help="Digits in the sequence numbers")
@click.pass_context
def reorder(ctx: click.Context, directory: Path, width: Optional[int]) -> None:
    """
    Rename the files of DIRECTORY to 00001.ext, 00002.ext, ... oldest first.
    """
    config = ctx.obj["config"]
    width = width or int(config.get("reorder.digit_width", 5))

    try:
        result = reorder_directory(directory, width)
    except (MediaSorterError, OSError) as e:
        _fail("Reorder failed", e)
        return

    console.print(
        f"[green]✓ {result.total} files ordered[/green] "
        f"({len(result.renamed)} renamed, {len(result.skipped)} already in place)"
    )


@cli.command(name="batch-reorder")
@click.argument("directory", type=DIRECTORY)
@click.option("--width", "-w", type=int, help="Digits in the sequence numbers")
@click.option("--jobs", "-j", type=int, help="Subdirectories processed at once")
@click.pass_context
def batch_reorder_command(
    ctx: click.Context, directory: Path, width: Optional[int], jobs: Optional[int]
) -> None:
    """
    Reorder every subdirectory of DIRECTORY.
    """
    config = ctx.obj["config"]
    width = width or int(config.get("reorder.digit_width", 5))
    jobs = jobs or int(config.get("reorder.max_jobs", 5))

    outcomes = batch_reorder(directory, width, max_jobs=jobs)
    if not outcomes:
        console.print("[yellow]No subdirectories found.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Folder")
    table.add_column("Result")
    for subdir in sorted(outcomes):
        error = outcomes[subdir]
        table.add_row(subdir.name, "[green]ok[/green]" if error is None else f"[red]{error}[/red]")
    console.print(table)

    if any(error is not None for error in outcomes.values()):
        sys.exit(1)


@cli.command(name="list")
@click.argument("directory", type=DIRECTORY)
@click.pass_context
def list_media(ctx: click.Context, directory: Path) -> None:
    """
    List images and videos in DIRECTORY, newest first.
    """
    medias = MediaScanner().list_media(directory)
    if not medias:
        console.print("[yellow]No media files found.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("File")
    table.add_column("Modified", justify="right")
    for meta in medias:
        table.add_row(
            str(meta.full_path.relative_to(directory.absolute())),
            meta.mod_time.strftime("%Y-%m-%d %H:%M"),
        )
    console.print(table)
    console.print(f"[dim]{len(medias)} files[/dim]")


@cli.command()
@click.pass_context
def shortcuts(ctx: click.Context) -> None:
    """
    Show the configured classification shortcuts.
    """
    config = ctx.obj["config"]

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Key")
    table.add_column("Label")
    table.add_column("Target")
    for shortcut in config.get_shortcuts():
        table.add_row(shortcut.key, shortcut.label, shortcut.target_dir or "[dim](not set)[/dim]")
    console.print(table)


@cli.command(name="set-shortcut")
@click.argument("key")
@click.argument("target")
@click.option("--label", "-l", default="", help="Display name")
@click.pass_context
def set_shortcut(ctx: click.Context, key: str, target: str, label: str) -> None:
    """
    Bind KEY to the TARGET folder (absolute, or relative to each file).

    The keys q, n and u are reserved by the classify prompt.
    """
    config = ctx.obj["config"]
    if key.lower() in RESERVED_KEYS:
        _fail("Invalid shortcut", ValidationError(f"Key {key!r} is reserved by classify"))
        return
    try:
        shortcut = ShortcutConfig(key=key, target_dir=target, label=label or target)
    except ValueError as e:
        _fail("Invalid shortcut", e)
        return

    config.set_shortcut(shortcut)
    console.print(f"[green]✓ Shortcut {key} -> {target}[/green]")


@cli.command()
@click.argument("file_path", type=FILE)
@click.argument("key")
@click.pass_context
def move(ctx: click.Context, file_path: Path, key: str) -> None:
    """
    Move FILE_PATH to the folder bound to shortcut KEY.
    """
    classifier = Classifier(ctx.obj["config"])
    try:
        final = classifier.move_by_shortcut(file_path, key)
    except (MediaSorterError, OSError) as e:
        _fail("Move failed", e)
        return
    console.print(f"[green]✓ Moved to[/green] {final}")


@cli.command()
@click.argument("directory", type=DIRECTORY)
@click.pass_context
def classify(ctx: click.Context, directory: Path) -> None:
    """
    Walk through the media in DIRECTORY and sort it with shortcut keys.

    Press a shortcut key to move the current file, [u] to undo the last
    move, [n] to skip and [q] to quit.
    """
    classifier = Classifier(ctx.obj["config"])
    medias = MediaScanner().list_media(directory)
    if not medias:
        console.print("[yellow]No media files found.[/yellow]")
        return

    keys = ", ".join(
        f"[{s.key}] {s.label}" for s in classifier.shortcuts if s.target_dir
    )
    console.print(f"[dim]Shortcuts: {keys}; [u] undo, [n] next, [q] quit[/dim]")

    queue = [meta.full_path for meta in medias]
    index = 0
    while index < len(queue):
        current = queue[index]
        choice = click.prompt(
            f"{index + 1}/{len(queue)} {current.name}", default=NEXT_KEY, show_default=False
        ).strip()

        if choice == QUIT_KEY:
            break
        if choice == NEXT_KEY:
            index += 1
            continue
        if choice == UNDO_KEY:
            try:
                restored = classifier.undo_last_move()
            except (MediaSorterError, OSError) as e:
                console.print(f"[red]Undo failed:[/red] {e}")
                continue
            console.print(f"[green]↶ Restored[/green] {restored}")
            queue.insert(index, restored)
            continue

        try:
            final = classifier.move_by_shortcut(current, choice)
        except (MediaSorterError, OSError) as e:
            console.print(f"[red]{e}[/red]")
            continue
        console.print(f"[green]→[/green] {final}")
        index += 1

    console.print(f"[dim]{classifier.undo_count} moves can still be undone in this session.[/dim]")


@cli.command()
@click.argument("file_path", type=FILE)
@click.pass_context
def remove(ctx: click.Context, file_path: Path) -> None:
    """
    Move FILE_PATH into the .delete folder next to it.
    """
    try:
        target = _deleter(ctx.obj["config"]).soft_delete(file_path)
    except (MediaSorterError, OSError) as e:
        _fail("Remove failed", e)
        return
    console.print(f"[green]✓ Moved to[/green] {target}")


@cli.command()
@click.argument("directory", type=DIRECTORY)
@click.option(
    "--recycle-bin/--permanent",
    default=True,
    help="Move to recycle bin (default) or delete permanently",
)
@click.option(
    "--confirm",
    is_flag=True,
    help="Skip confirmation prompt (use with caution!)",
)
@click.pass_context
def purge(ctx: click.Context, directory: Path, recycle_bin: bool, confirm: bool) -> None:
    """
    Empty the .delete folder of DIRECTORY.
    """
    deleter = _deleter(ctx.obj["config"])
    pending = deleter.list_deleted(directory)
    if not pending:
        console.print("[yellow]Nothing to purge.[/yellow]")
        return

    action = "moved to recycle bin" if recycle_bin else "permanently deleted"
    if not confirm:
        console.print("[bold yellow]⚠ Warning:[/bold yellow]")
        console.print(f"  About to have {len(pending)} files {action}")
        confirm_input = click.prompt("\nType 'DELETE' to confirm", type=str, default="")
        if confirm_input.upper() != "DELETE":
            console.print("[yellow]Purge cancelled.[/yellow]")
            return

    count = deleter.purge(directory, use_recycle_bin=recycle_bin)
    console.print(f"[bold green]✓ {count} files {action}[/bold green]")


def main() -> None:
    """Main entry point for the CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
