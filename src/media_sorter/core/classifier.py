"""Classification of files into folders via keyboard shortcuts."""

import threading
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

from media_sorter.core.models import MoveRecord, ShortcutConfig
from media_sorter.core.mover import (
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_MAX_TRY,
    rename_file,
    resolve_conflict,
)
from media_sorter.core.undo import DEFAULT_MAX_SIZE, UndoLedger
from media_sorter.errors import ShortcutNotFoundError, ValidationError
from media_sorter.utils.config import Config
from media_sorter.utils.logger import setup_logger

logger = setup_logger(__name__)

PathLike = Union[str, Path]


def resolve_target_dir(source_path: PathLike, target_dir: PathLike) -> Path:
    """Absolute targets are used as is, relative ones sit next to the source file."""
    target = Path(target_dir)
    if target.is_absolute():
        return target
    return Path(source_path).parent / target


class Classifier:
    """Moves files by shortcut and keeps the moves undoable."""

    def __init__(self, config: Config, ledger: Optional[UndoLedger] = None):
        """
        Initialize the classifier.

        Args:
            config: Configuration instance (shortcuts and limits)
            ledger: Undo ledger to record moves in (created from config if None)
        """
        self.config = config
        self.max_conflict_attempts = int(
            config.get("moves.max_conflict_attempts", DEFAULT_MAX_ATTEMPTS)
        )
        self.max_rename_tries = int(config.get("moves.max_rename_tries", DEFAULT_MAX_TRY))
        self.ledger = ledger or UndoLedger(
            max_size=int(config.get("undo.max_size", DEFAULT_MAX_SIZE)),
            max_try=self.max_rename_tries,
        )
        self._lock = threading.Lock()

    @property
    def shortcuts(self) -> List[ShortcutConfig]:
        return self.config.get_shortcuts()

    def find_shortcut(self, key: str) -> ShortcutConfig:
        """
        Look up the shortcut bound to a key (case-insensitive).

        Raises:
            ShortcutNotFoundError: If no shortcut uses the key
        """
        for shortcut in self.shortcuts:
            if shortcut.matches(key):
                return shortcut
        raise ShortcutNotFoundError(f"No shortcut configured for key {key!r}")

    def move_file(
        self,
        source: PathLike,
        destination_dir: PathLike,
        rename_on_conflict: bool = True,
    ) -> Path:
        """
        Move a file into a folder and record the move for undo.

        Args:
            source: File to move
            destination_dir: Folder to move it into (created if missing)
            rename_on_conflict: Pick a suffixed name when the file name is
                taken; otherwise an occupied name is an error

        Returns:
            Final path of the moved file

        Raises:
            FileNotFoundError: If the source doesn't exist
            ConflictError: If the name is taken and renaming is off
        """
        source = Path(source)
        destination_dir = Path(destination_dir)

        with self._lock:
            if not source.exists():
                logger.error(f"Source file not found: {source}")
                raise FileNotFoundError(f"File not found: {source}")

            destination_dir.mkdir(parents=True, exist_ok=True)

            target = destination_dir / source.name
            if rename_on_conflict:
                target = resolve_conflict(target, self.max_conflict_attempts)

            try:
                final = rename_file(
                    source, target, suffix=rename_on_conflict, max_try=self.max_rename_tries
                )
            except OSError as e:
                logger.error(f"Failed to move {source} -> {target}: {e}")
                raise

            self.ledger.record(
                MoveRecord(source_path=source, target_path=final, timestamp=datetime.now())
            )

        logger.info(f"Moved: {source} -> {final}")
        return final

    def move_by_shortcut(self, file_path: PathLike, key: str) -> Path:
        """
        Move a file to the folder bound to a shortcut key.

        Raises:
            ShortcutNotFoundError: If the key is not bound
            ValidationError: If the shortcut has no target folder
            FileNotFoundError: If the file doesn't exist
        """
        shortcut = self.find_shortcut(key)
        if not shortcut.target_dir:
            raise ValidationError(f"Shortcut {key!r} has no target folder configured")

        target_dir = resolve_target_dir(file_path, shortcut.target_dir)
        final = self.move_file(file_path, target_dir)
        logger.info(f"Classified {Path(file_path).name} as '{shortcut.label}' ({key})")
        return final

    def undo_last_move(self) -> Path:
        """Reverse the latest move. See ``UndoLedger.undo``."""
        return self.ledger.undo()

    @property
    def undo_count(self) -> int:
        return self.ledger.count()
