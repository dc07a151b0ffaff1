"""
Review interface for groups of identical images.

Shows each group side by side with metadata and recommends which copy to keep.
"""

from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence

from PIL import Image
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from media_sorter.core.models import SimilarityGroup
from media_sorter.utils.logger import setup_logger

logger = setup_logger(__name__)


class ImageDetails:
    """Image metadata for comparison."""

    def __init__(self, path: Path):
        """
        Initialize details for an image.

        Args:
            path: Path to the image file
        """
        self.path = path
        self.size_bytes = 0
        self.modified: Optional[datetime] = None
        self.width: Optional[int] = None
        self.height: Optional[int] = None

        try:
            stat = path.stat()
            self.size_bytes = stat.st_size
            self.modified = datetime.fromtimestamp(stat.st_mtime)
        except OSError as e:
            logger.debug(f"Could not stat {path}: {e}")

        try:
            with Image.open(path) as img:
                self.width, self.height = img.size
        except (OSError, Image.DecompressionBombError) as e:
            logger.debug(f"Could not read image size for {path}: {e}")

    @property
    def size_mb(self) -> float:
        """File size in megabytes."""
        return self.size_bytes / (1024 * 1024)

    @property
    def resolution(self) -> Optional[str]:
        """Resolution as 'WIDTHxHEIGHT' or None."""
        if self.width and self.height:
            return f"{self.width}x{self.height}"
        return None

    def quality_score(self) -> float:
        """
        Quality score for comparison, higher is better.

        Resolution counts most, file size breaks near ties.
        """
        score = 0.0
        if self.width and self.height:
            score += (self.width * self.height) / 1_000_000 * 100
        score += self.size_mb * 10
        return score


class GroupReview:
    """A similarity group together with the details of its members."""

    def __init__(self, group: SimilarityGroup):
        self.group = group
        self.details = [ImageDetails(member) for member in group.members]

    def recommended_keep(self) -> Path:
        """
        Image to keep: highest quality, then oldest, then first by path.
        """
        best = min(
            self.details,
            key=lambda d: (
                -d.quality_score(),
                d.modified or datetime.max,
                str(d.path),
            ),
        )
        return best.path

    def recommended_removals(self) -> List[Path]:
        keep = self.recommended_keep()
        return [member for member in self.group.members if member != keep]


class ReviewUI:
    """Terminal review of duplicate groups using Rich."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def show_groups(self, groups: Sequence[SimilarityGroup], limit: Optional[int] = None) -> List[GroupReview]:
        """
        Print a summary and one table per group.

        Args:
            groups: Groups to show
            limit: Show at most this many group tables

        Returns:
            The reviews built for every group
        """
        reviews = [GroupReview(group) for group in groups]
        self._show_summary(reviews)

        shown = reviews if limit is None else reviews[:limit]
        for review in shown:
            self.console.print(self._group_table(review))
            self.console.print()

        if len(reviews) > len(shown):
            self.console.print(f"[dim]... and {len(reviews) - len(shown)} more groups[/dim]\n")
        return reviews

    def recommend_removals(self, groups: Sequence[SimilarityGroup]) -> List[Path]:
        """Every image except the recommended keep of its group."""
        removals: List[Path] = []
        for group in groups:
            removals.extend(GroupReview(group).recommended_removals())
        return removals

    def show_removal_summary(self, to_remove: Sequence[Path]) -> None:
        total_size = sum(p.stat().st_size for p in to_remove if p.exists())
        panel = Panel(
            f"[bold red]Move {len(to_remove)} files to .delete[/bold red]\n\n"
            f"[yellow]Space to recover: {total_size / (1024 * 1024):.1f} MB[/yellow]",
            title="Duplicate Removal",
            box=box.DOUBLE,
        )
        self.console.print(panel)

    def _show_summary(self, reviews: List[GroupReview]) -> None:
        duplicates = sum(len(r.group) - 1 for r in reviews)
        savings = sum(
            d.size_bytes
            for r in reviews
            for d in r.details
            if d.path != r.recommended_keep()
        )

        summary = Table(title="Duplicate Detection Summary", box=box.ROUNDED)
        summary.add_column("Metric", style="cyan")
        summary.add_column("Value", style="green")
        summary.add_row("Duplicate Groups", str(len(reviews)))
        summary.add_row("Redundant Copies", str(duplicates))
        summary.add_row("Potential Space Savings", f"{savings / (1024 * 1024):.1f} MB")

        self.console.print(summary)
        self.console.print()

    def _group_table(self, review: GroupReview) -> Table:
        table = Table(
            title=f"Group {review.group.group_id}",
            box=box.DOUBLE,
            show_header=True,
            header_style="bold magenta",
        )
        table.add_column("#", style="dim", width=3)
        table.add_column("File", style="cyan")
        table.add_column("Resolution", justify="right")
        table.add_column("Size", justify="right")
        table.add_column("Date Modified", justify="right")
        table.add_column("Action", justify="center")

        keep = review.recommended_keep()
        for idx, details in enumerate(review.details, 1):
            action = "[green]KEEP[/green]" if details.path == keep else "[red]REMOVE[/red]"
            table.add_row(
                str(idx),
                str(details.path),
                details.resolution or "N/A",
                f"{details.size_mb:.2f} MB",
                details.modified.strftime("%Y-%m-%d %H:%M") if details.modified else "N/A",
                action,
            )
        return table
