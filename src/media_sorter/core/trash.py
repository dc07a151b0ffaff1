"""Soft deletion into a per-directory ``.delete`` folder."""

import shutil
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

from send2trash import send2trash

from media_sorter.core.models import MoveRecord
from media_sorter.core.mover import DEFAULT_MAX_TRY, rename_file
from media_sorter.core.undo import UndoLedger
from media_sorter.utils.logger import setup_logger

logger = setup_logger(__name__)

PathLike = Union[str, Path]

DELETE_DIR_NAME = ".delete"


class SoftDeleter:
    """Moves files aside instead of deleting them, with optional undo."""

    def __init__(self, ledger: Optional[UndoLedger] = None, max_try: int = DEFAULT_MAX_TRY):
        """
        Initialize the soft deleter.

        Args:
            ledger: Undo ledger that records each soft delete, if given
            max_try: Highest numeric suffix tried on a name clash
        """
        self.ledger = ledger
        self.max_try = max_try

    def soft_delete(self, file_path: PathLike) -> Path:
        """
        Move a file into the ``.delete`` folder next to it.

        Args:
            file_path: File to remove

        Returns:
            Where the file now lives

        Raises:
            FileNotFoundError: If the file doesn't exist
            ConflictError: If no free name was found in the folder
        """
        file_path = Path(file_path)
        if not file_path.exists():
            logger.error(f"File not found: {file_path}")
            raise FileNotFoundError(f"File not found: {file_path}")

        delete_dir = file_path.parent / DELETE_DIR_NAME
        delete_dir.mkdir(parents=True, exist_ok=True)

        target = rename_file(
            file_path, delete_dir / file_path.name, suffix=True, max_try=self.max_try
        )
        if self.ledger is not None:
            self.ledger.record(
                MoveRecord(source_path=file_path, target_path=target, timestamp=datetime.now())
            )

        logger.info(f"Soft deleted: {file_path}")
        return target

    def list_deleted(self, directory: PathLike) -> List[Path]:
        """List the files waiting in a directory's ``.delete`` folder."""
        delete_dir = Path(directory) / DELETE_DIR_NAME
        if not delete_dir.is_dir():
            return []
        return sorted(entry for entry in delete_dir.iterdir() if entry.is_file())

    def purge(self, directory: PathLike, use_recycle_bin: bool = True) -> int:
        """
        Empty a directory's ``.delete`` folder.

        Args:
            directory: Directory owning the ``.delete`` folder
            use_recycle_bin: Move to recycle bin instead of permanent deletion

        Returns:
            Number of files removed
        """
        delete_dir = Path(directory) / DELETE_DIR_NAME
        if not delete_dir.is_dir():
            logger.info(f"Nothing to purge in {directory}")
            return 0

        deleted_count = 0
        for entry in sorted(delete_dir.iterdir()):
            try:
                if use_recycle_bin:
                    send2trash(str(entry))
                    logger.debug(f"Moved to recycle bin: {entry}")
                elif entry.is_dir():
                    shutil.rmtree(entry)
                    logger.debug(f"Permanently deleted: {entry}")
                else:
                    entry.unlink()
                    logger.debug(f"Permanently deleted: {entry}")
                deleted_count += 1
            except OSError as e:
                logger.error(f"Failed to delete {entry}: {e}")
                continue

        if not any(delete_dir.iterdir()):
            delete_dir.rmdir()

        logger.info(
            f"Purged {deleted_count} files from {delete_dir} "
            f"({'recycle bin' if use_recycle_bin else 'permanent'})"
        )
        return deleted_count
