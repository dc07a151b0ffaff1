"""Collision-free renaming and moving of single files."""

import shutil
import time
from pathlib import Path
from typing import Union

from media_sorter.errors import ConflictError, ConflictExhaustedError
from media_sorter.utils.logger import setup_logger

logger = setup_logger(__name__)

PathLike = Union[str, Path]

DEFAULT_MAX_ATTEMPTS = 1000
DEFAULT_MAX_TRY = 100


def resolve_conflict(path: PathLike, max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> Path:
    """
    Find a destination path that does not exist yet.

    Returns ``path`` itself when it is free, otherwise the first free one of
    ``name_1.ext`` .. ``name_<max_attempts>.ext``. When all of those are
    taken a nanosecond timestamp suffix is used without further checks.

    The result is only free at the moment of the check.
    """
    path = Path(path)
    if not path.exists():
        return path

    stem, ext = path.stem, path.suffix
    for attempt in range(1, max_attempts + 1):
        candidate = path.with_name(f"{stem}_{attempt}{ext}")
        if not candidate.exists():
            return candidate

    fallback = path.with_name(f"{stem}_{time.time_ns()}{ext}")
    logger.warning(f"No free name after {max_attempts} attempts, using {fallback.name}")
    return fallback


def final_target_path(path: PathLike, suffix: bool, max_try: int) -> Path:
    """
    Pick the path a rename will write to.

    Args:
        path: Desired target
        suffix: Append ``_1``, ``_2``, ... when the target exists
        max_try: Highest suffix number to try

    Raises:
        ConflictError: If the target exists and suffixing is off
        ConflictExhaustedError: If every suffixed candidate is taken
    """
    path = Path(path)
    if not suffix:
        if path.exists():
            raise ConflictError(f"Target already exists: {path}")
        return path

    stem, ext = path.stem, path.suffix
    candidate = path
    attempt = 1
    while candidate.exists():
        if attempt > max_try:
            raise ConflictExhaustedError(
                f"No free name for {path} after {max_try} attempts"
            )
        candidate = path.with_name(f"{stem}_{attempt}{ext}")
        attempt += 1
    return candidate


def rename_file(
    old_path: PathLike,
    new_path: PathLike,
    suffix: bool = True,
    max_try: int = DEFAULT_MAX_TRY,
) -> Path:
    """
    Move a file without ever overwriting another one.

    Args:
        old_path: File to move
        new_path: Desired destination
        suffix: Resolve an occupied destination with a numeric suffix
        max_try: Highest suffix number to try

    Returns:
        The path the file ended up at

    Raises:
        FileNotFoundError: If the source doesn't exist
        IsADirectoryError: If the source is a directory
        ConflictError: If no usable destination was found
    """
    old_path = Path(old_path)
    if not old_path.exists():
        raise FileNotFoundError(f"Source file not found: {old_path}")
    if old_path.is_dir():
        raise IsADirectoryError(f"Source is a directory, not renaming: {old_path}")

    target = final_target_path(new_path, suffix, max_try)
    shutil.move(str(old_path), str(target))
    logger.debug(f"Renamed: {old_path} -> {target}")
    return target
