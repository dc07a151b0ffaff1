"""Renumbering of directory contents by modification time."""

import re
import uuid
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

from media_sorter.core.mover import rename_file
from media_sorter.core.scanner import MediaScanner, is_filtered_name
from media_sorter.errors import (
    InterruptedReorderError,
    NothingToReorderError,
    RenameError,
    SequenceWidthError,
    ValidationError,
)
from media_sorter.utils.logger import setup_logger

logger = setup_logger(__name__)

PathLike = Union[str, Path]

DEFAULT_MAX_JOBS = 5

# <name>.<8 hex digits>.tmp, written by the first phase of a reorder
TEMP_NAME_PATTERN = re.compile(r"^.+\.[0-9a-f]{8}\.tmp$")


def temporary_name(source: Path, token: str) -> Path:
    return source.with_name(f"{source.name}.{token}.tmp")


def is_temporary_name(name: str) -> bool:
    return TEMP_NAME_PATTERN.match(name) is not None


@dataclass
class RenamePlan:
    source: Path
    final: Path
    temp: Optional[Path] = None

    @property
    def in_place(self) -> bool:
        return self.source == self.final


@dataclass
class ReorderResult:
    """Outcome of a successful reorder."""

    directory: Path
    renamed: List[Path] = field(default_factory=list)
    skipped: List[Path] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.renamed) + len(self.skipped)


def plan_reorder(directory: PathLike, width: int) -> List[RenamePlan]:
    """
    Work out the final name of every file without touching the disk.

    Files are numbered from 1 in order of modification time, oldest first,
    with the file name as a tie-break.

    Raises:
        ValidationError: For an empty directory argument or a bad width
        InterruptedReorderError: If temporary files of an earlier run are
            still in the directory
        NothingToReorderError: If there are no eligible files
        SequenceWidthError: If ``width`` digits cannot number every file
    """
    if directory is None or str(directory) == "":
        raise ValidationError("Target directory must not be empty")
    if width <= 0:
        raise ValidationError(f"Sequence width must be greater than 0, got {width}")

    directory = Path(directory)
    metas = MediaScanner().scan_directory(directory)

    leftovers = sorted(meta.file_name for meta in metas if is_temporary_name(meta.file_name))
    if leftovers:
        raise InterruptedReorderError(
            f"{directory} holds temporary files of an interrupted reorder, "
            f"restore their names first: {', '.join(leftovers)}"
        )

    if not metas:
        raise NothingToReorderError(f"Nothing to reorder, no files in {directory}")

    needed = len(str(len(metas)))
    if needed > width:
        raise SequenceWidthError(
            f"Sequence width too small: {len(metas)} files need {needed} digits, "
            f"got {width}"
        )

    metas.sort(key=lambda meta: (meta.mod_time, meta.file_name))
    return [
        RenamePlan(
            source=meta.full_path,
            final=directory / f"{sequence:0{width}d}{meta.ext}",
        )
        for sequence, meta in enumerate(metas, 1)
    ]


def reorder_directory(directory: PathLike, width: int) -> ReorderResult:
    """
    Rename every file in a directory to a zero-padded sequence number.

    The oldest file becomes ``1``. Renaming happens in two phases: every
    file first moves to a temporary name unique to this run, then every
    temporary file moves to its final name, so old and new names never
    collide. Files already carrying their final name are left alone.

    A failure stops the run and leaves the files where they are; nothing is
    rolled back.

    Args:
        directory: Directory whose files are renamed (not recursive)
        width: Number of digits in the sequence numbers

    Returns:
        Which files were renamed and which already had the right name

    Raises:
        ValidationError: If the arguments or the file count are unusable
        FileNotFoundError: If directory doesn't exist
        NotADirectoryError: If the path is not a directory
        RenameError: If a rename failed; names the phase and the path
    """
    plans = plan_reorder(directory, width)
    result = ReorderResult(directory=Path(directory))

    pending = []
    for plan in plans:
        if plan.in_place:
            result.skipped.append(plan.final)
        else:
            pending.append(plan)

    token = uuid.uuid4().hex[:8]
    for plan in pending:
        plan.temp = temporary_name(plan.source, token)
        try:
            rename_file(plan.source, plan.temp, suffix=False)
        except OSError as e:
            logger.error(f"Temporary rename failed for {plan.source}: {e}")
            raise RenameError(
                f"Temporary rename failed {plan.source} -> {plan.temp}: {e}",
                path=plan.source,
                phase="temporary",
            ) from e

    for plan in pending:
        try:
            rename_file(plan.temp, plan.final, suffix=False)
        except OSError as e:
            logger.error(f"Final rename failed for {plan.temp}: {e}")
            raise RenameError(
                f"Final rename failed {plan.temp} -> {plan.final}: {e}",
                path=plan.temp,
                phase="final",
            ) from e
        logger.debug(f"Renamed {plan.source.name} -> {plan.final.name}")
        result.renamed.append(plan.final)

    logger.info(
        f"Reordered {result.total} files in {result.directory} "
        f"({len(result.renamed)} renamed, {len(result.skipped)} unchanged)"
    )
    return result


def batch_reorder(
    directory: PathLike,
    width: int,
    max_jobs: int = DEFAULT_MAX_JOBS,
) -> Dict[Path, Optional[Exception]]:
    """
    Reorder every subdirectory of a directory concurrently.

    Blocks until every subdirectory is done. One failing subdirectory does
    not stop the others.

    Args:
        directory: Parent directory
        width: Number of digits in the sequence numbers
        max_jobs: Subdirectories processed at the same time

    Returns:
        The error raised for each subdirectory, or None where it succeeded
    """
    if directory is None or str(directory) == "":
        raise ValidationError("Target directory must not be empty")
    directory = Path(directory)
    if not directory.exists():
        raise FileNotFoundError(f"Directory not found: {directory}")
    if not directory.is_dir():
        raise NotADirectoryError(f"Not a directory: {directory}")

    subdirs = sorted(
        entry for entry in directory.iterdir()
        if entry.is_dir() and not is_filtered_name(entry.name)
    )
    logger.info(f"Reordering {len(subdirs)} subdirectories of {directory}")

    outcomes: Dict[Path, Optional[Exception]] = {}
    if not subdirs:
        return outcomes

    with ThreadPoolExecutor(max_workers=max(1, max_jobs)) as executor:
        futures = {
            executor.submit(reorder_directory, subdir, width): subdir for subdir in subdirs
        }
        for future in as_completed(futures):
            subdir = futures[future]
            try:
                future.result()
                outcomes[subdir] = None
            except (OSError, ValueError) as e:
                logger.error(f"Failed to reorder {subdir}: {e}")
                outcomes[subdir] = e

    failed = sum(1 for error in outcomes.values() if error is not None)
    logger.info(f"Batch reorder finished: {len(subdirs) - failed} ok, {failed} failed")
    return outcomes
