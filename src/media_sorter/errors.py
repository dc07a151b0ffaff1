"""Exception hierarchy for media-sorter."""

from pathlib import Path
from typing import Optional


class MediaSorterError(Exception):
    """Base error for the project."""


class ValidationError(MediaSorterError, ValueError):
    """Invalid arguments, reported before anything on disk is touched."""


class NothingToReorderError(ValidationError):
    """The directory holds no eligible files."""


class SequenceWidthError(ValidationError):
    """The sequence width cannot hold the number of files."""


class InterruptedReorderError(ValidationError):
    """Temporary files left by a failed reorder are still in the directory."""


class ConflictError(MediaSorterError, FileExistsError):
    """The destination path is already taken."""


class ConflictExhaustedError(ConflictError):
    """No free suffixed name was found within the allowed attempts."""


class RenameError(MediaSorterError, OSError):
    """A rename batch stopped part way through."""

    def __init__(self, message: str, path: Optional[Path] = None, phase: str = ""):
        super().__init__(message)
        self.path = path
        self.phase = phase

    def __str__(self) -> str:
        return self.args[0] if self.args else ""


class UndoError(MediaSorterError):
    """An undo request could not be carried out."""


class NothingToUndoError(UndoError):
    pass


class UndoTargetMissingError(UndoError):
    """The moved file is no longer where the move left it."""


class ShortcutNotFoundError(MediaSorterError, KeyError):
    """No shortcut is bound to the requested key."""

    def __str__(self) -> str:
        return self.args[0] if self.args else ""
