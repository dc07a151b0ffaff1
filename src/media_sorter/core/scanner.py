"""Directory scanning and file metadata."""

import os
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Union

from tqdm import tqdm

from media_sorter.core.models import FileMeta, MediaType
from media_sorter.errors import ValidationError
from media_sorter.utils.logger import setup_logger

logger = setup_logger(__name__)

PathLike = Union[str, Path]

EXTENSION_TYPES: Dict[str, MediaType] = {
    # Videos
    ".mp4": MediaType.VIDEO,
    ".mov": MediaType.VIDEO,
    ".avi": MediaType.VIDEO,
    ".mkv": MediaType.VIDEO,
    ".flv": MediaType.VIDEO,
    ".wmv": MediaType.VIDEO,
    ".webm": MediaType.VIDEO,
    # Images
    ".jpg": MediaType.IMAGE,
    ".jpeg": MediaType.IMAGE,
    ".png": MediaType.IMAGE,
    ".gif": MediaType.IMAGE,
    ".bmp": MediaType.IMAGE,
    ".webp": MediaType.IMAGE,
    ".tiff": MediaType.IMAGE,
    # Documents
    ".txt": MediaType.DOCUMENT,
    ".pdf": MediaType.DOCUMENT,
    ".docx": MediaType.DOCUMENT,
    ".xlsx": MediaType.DOCUMENT,
    ".pptx": MediaType.DOCUMENT,
    # Audio
    ".mp3": MediaType.AUDIO,
    ".wav": MediaType.AUDIO,
    ".flac": MediaType.AUDIO,
    ".aac": MediaType.AUDIO,
}

# Only JPEG files are decoded for fingerprinting
HASHABLE_EXTENSIONS = {".jpg", ".jpeg"}

SYSTEM_FILES = {".DS_Store", ".Trash", "Thumbs.db", ".deleted", "desktop.ini"}


def media_type_for(path: PathLike) -> MediaType:
    """Classify a path by its (case-insensitive) extension."""
    return EXTENSION_TYPES.get(Path(path).suffix.lower(), MediaType.UNKNOWN)


def is_filtered_name(name: str) -> bool:
    """True for hidden entries and operating-system clutter."""
    return name in SYSTEM_FILES or name.startswith(".")


def get_file_meta(path: PathLike) -> FileMeta:
    """
    Read the metadata of a single file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        IsADirectoryError: If the path is a directory
    """
    path = Path(path)
    stat = path.stat()
    if path.is_dir():
        raise IsADirectoryError(f"Path is a directory: {path}")

    return FileMeta(
        full_path=path,
        file_name=path.name,
        ext=path.suffix.lower(),
        mod_time=datetime.fromtimestamp(stat.st_mtime),
    )


class MediaScanner:
    """Lists the files of a directory the way the organizer operations see them."""

    def __init__(self, show_progress: bool = False):
        """
        Initialize the scanner.

        Args:
            show_progress: Show a progress bar while collecting metadata
        """
        self.show_progress = show_progress

    def scan_directory(self, directory: PathLike) -> List[FileMeta]:
        """
        Collect metadata for the files directly inside a directory.

        Subdirectories, hidden files and system files are skipped.

        Args:
            directory: Directory path to scan

        Returns:
            List of file metadata in directory listing order

        Raises:
            ValidationError: If no directory was given
            FileNotFoundError: If directory doesn't exist
            NotADirectoryError: If the path is not a directory
        """
        directory = self._validate_directory(directory)

        entries = sorted(directory.iterdir())
        if self.show_progress:
            entries = tqdm(entries, desc="Reading metadata", unit="file")

        metas: List[FileMeta] = []
        for entry in entries:
            if not self._is_eligible_file(entry):
                continue
            metas.append(get_file_meta(entry))

        logger.debug(f"Found {len(metas)} files in {directory}")
        return metas

    def count_files(self, directory: PathLike) -> int:
        """Count the eligible files directly inside a directory."""
        directory = self._validate_directory(directory)
        return sum(1 for entry in directory.iterdir() if self._is_eligible_file(entry))

    def collect_hash_candidates(self, directory: PathLike) -> List[Path]:
        """
        Find the images that can be fingerprinted.

        Walks the directory tree, skipping hidden directories (which keeps
        the ``.delete`` folder out) and hidden files.

        Args:
            directory: Root directory

        Returns:
            Sorted list of JPEG file paths
        """
        directory = self._validate_directory(directory)

        candidates: List[Path] = []
        for root, dirs, filenames in os.walk(directory):
            root_path = Path(root)
            dirs[:] = [
                d for d in dirs
                if not is_filtered_name(d) and not (root_path / d).is_symlink()
            ]

            for filename in filenames:
                if is_filtered_name(filename):
                    continue
                if Path(filename).suffix.lower() not in HASHABLE_EXTENSIONS:
                    continue
                candidates.append(root_path / filename)

        candidates.sort()
        logger.info(f"Found {len(candidates)} images to fingerprint in {directory}")
        return candidates

    def list_media(self, directory: PathLike) -> List[FileMeta]:
        """
        List images and videos below a directory, newest first.

        Args:
            directory: Root directory

        Returns:
            File metadata sorted by modification time, most recent first
        """
        directory = self._validate_directory(directory)

        medias: List[FileMeta] = []
        for root, dirs, filenames in os.walk(directory):
            root_path = Path(root)
            dirs[:] = [d for d in dirs if not is_filtered_name(d)]

            for filename in filenames:
                if is_filtered_name(filename):
                    continue
                path = root_path / filename
                if media_type_for(path) not in (MediaType.IMAGE, MediaType.VIDEO):
                    logger.debug(f"Not an image or video, skipping: {path}")
                    continue
                try:
                    medias.append(get_file_meta(path.absolute()))
                except OSError as e:
                    logger.error(f"Failed to read file info for {path}: {e}")

        logger.info(f"Found {len(medias)} media files in {directory}")
        medias.sort(key=lambda meta: meta.mod_time, reverse=True)
        return medias

    def _validate_directory(self, directory: PathLike) -> Path:
        if directory is None or str(directory) == "":
            raise ValidationError("Directory must not be empty")

        directory = Path(directory)
        if not directory.exists():
            raise FileNotFoundError(f"Directory not found: {directory}")
        if not directory.is_dir():
            raise NotADirectoryError(f"Not a directory: {directory}")
        return directory

    def _is_eligible_file(self, path: Path) -> bool:
        if is_filtered_name(path.name) or self._is_hidden_windows(path):
            return False
        return path.is_file()

    def _is_hidden_windows(self, path: Path) -> bool:
        """
        Check if a path is hidden on Windows.

        Args:
            path: Path to check

        Returns:
            True if path is hidden on Windows
        """
        if os.name != "nt":
            return False

        try:
            import ctypes

            FILE_ATTRIBUTE_HIDDEN = 0x02
            attrs = ctypes.windll.kernel32.GetFileAttributesW(str(path))
            return attrs != -1 and bool(attrs & FILE_ATTRIBUTE_HIDDEN)
        except (AttributeError, OSError):
            return False
