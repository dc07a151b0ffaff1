"""Bounded history of reversible moves."""

import threading
from collections import deque
from pathlib import Path
from typing import Deque, List, Optional

from media_sorter.core.models import MoveRecord
from media_sorter.core.mover import DEFAULT_MAX_TRY, rename_file
from media_sorter.errors import NothingToUndoError, UndoTargetMissingError
from media_sorter.utils.logger import setup_logger

logger = setup_logger(__name__)

DEFAULT_MAX_SIZE = 50


class UndoLedger:
    """
    Stack of the most recent moves.

    Holds at most ``max_size`` records: recording past that drops the
    oldest one, and undo always reverses the newest one.
    """

    def __init__(self, max_size: int = DEFAULT_MAX_SIZE, max_try: int = DEFAULT_MAX_TRY):
        if max_size <= 0:
            raise ValueError(f"max_size must be positive, got {max_size}")
        self.max_size = max_size
        self.max_try = max_try
        self._records: Deque[MoveRecord] = deque(maxlen=max_size)
        self._lock = threading.Lock()

    def record(self, move: MoveRecord) -> None:
        with self._lock:
            if len(self._records) == self.max_size:
                logger.debug(f"Undo history full, dropping {self._records[0].source_path}")
            self._records.append(move)

    def undo(self) -> Path:
        """
        Move the most recently moved file back.

        The record is consumed even when the reverse move fails.

        Returns:
            The path the file was restored to (suffixed if the original
            location has been taken in the meantime)

        Raises:
            NothingToUndoError: If there is no recorded move
            UndoTargetMissingError: If the moved file no longer exists
            OSError: If the reverse move fails
        """
        with self._lock:
            if not self._records:
                raise NothingToUndoError("Nothing to undo")
            move = self._records.pop()

            if not move.target_path.exists():
                logger.error(f"Undo failed, file is gone: {move.target_path}")
                raise UndoTargetMissingError(
                    f"File was deleted or moved: {move.target_path}"
                )

            move.source_path.parent.mkdir(parents=True, exist_ok=True)
            try:
                restored = rename_file(
                    move.target_path, move.source_path, suffix=True, max_try=self.max_try
                )
            except OSError as e:
                logger.error(
                    f"Undo failed moving {move.target_path} -> {move.source_path}: {e}"
                )
                raise

        logger.info(f"Undid move: {move.target_path} -> {restored}")
        return restored

    def count(self) -> int:
        with self._lock:
            return len(self._records)

    def __len__(self) -> int:
        return self.count()

    def clear(self) -> None:
        with self._lock:
            self._records.clear()
        logger.info("Undo history cleared")

    def last_record(self) -> Optional[MoveRecord]:
        with self._lock:
            return self._records[-1] if self._records else None

    def records(self) -> List[MoveRecord]:
        """Snapshot of the history, oldest first."""
        with self._lock:
            return list(self._records)
