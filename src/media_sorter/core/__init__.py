"""Core functionality for duplicate detection and file reorganization."""

from media_sorter.core.classifier import Classifier
from media_sorter.core.detector import DuplicateDetector
from media_sorter.core.grouper import group_duplicates
from media_sorter.core.hasher import FingerprintComputer
from media_sorter.core.mover import rename_file, resolve_conflict
from media_sorter.core.renamer import batch_reorder, reorder_directory
from media_sorter.core.scanner import MediaScanner
from media_sorter.core.trash import SoftDeleter
from media_sorter.core.undo import UndoLedger

__all__ = [
    "Classifier",
    "DuplicateDetector",
    "FingerprintComputer",
    "MediaScanner",
    "SoftDeleter",
    "UndoLedger",
    "batch_reorder",
    "group_duplicates",
    "rename_file",
    "reorder_directory",
    "resolve_conflict",
]
