"""Duplicate image detection: scan, fingerprint, group."""

from contextlib import ExitStack
from pathlib import Path
from typing import BinaryIO, Dict, List, Optional, Union

import imagehash

from media_sorter.core.grouper import group_duplicates
from media_sorter.core.hasher import FingerprintComputer
from media_sorter.core.models import SimilarityGroup
from media_sorter.core.scanner import MediaScanner
from media_sorter.core.trash import SoftDeleter
from media_sorter.utils.config import Config
from media_sorter.utils.logger import setup_logger

logger = setup_logger(__name__)

PathLike = Union[str, Path]


class DuplicateDetector:
    """Finds images with identical perceptual fingerprints."""

    def __init__(
        self,
        config: Config,
        show_progress: bool = True,
        deleter: Optional[SoftDeleter] = None,
    ):
        """
        Initialize the duplicate detector.

        Args:
            config: Configuration instance
            show_progress: Show progress during hashing
            deleter: Soft deleter used to remove duplicates
        """
        self.config = config
        self.show_progress = show_progress
        self.scanner = MediaScanner()
        self.computer = FingerprintComputer(config, show_progress=show_progress)
        self.deleter = deleter or SoftDeleter(
            max_try=int(config.get("moves.max_rename_tries", 100))
        )

    def compute_hashes(self, image_paths: List[Path]) -> Dict[Path, Optional[imagehash.ImageHash]]:
        """
        Open and fingerprint a list of images.

        Every file handle opened here is closed before returning, whether
        hashing succeeded or not. A file that cannot be opened gets None.

        Args:
            image_paths: Image paths

        Returns:
            Fingerprint or None for every path
        """
        with ExitStack() as stack:
            handles: Dict[Path, BinaryIO] = {}
            for path in image_paths:
                try:
                    handles[path] = stack.enter_context(open(path, "rb"))
                except OSError as e:
                    logger.error(f"Cannot open {path}: {e}")

            return self.computer.compute_fingerprints(image_paths, handles)

    def find_duplicates(self, directory: PathLike) -> List[SimilarityGroup]:
        """
        Find groups of identical images below a directory.

        Args:
            directory: Directory to analyze

        Returns:
            Groups of two or more images, ordered by their first path
        """
        image_paths = self.scanner.collect_hash_candidates(directory)
        if not image_paths:
            logger.warning(f"No images to analyze in {directory}")
            return []

        fingerprints = self.compute_hashes(image_paths)
        valid = {
            path: fingerprint
            for path, fingerprint in fingerprints.items()
            if fingerprint is not None
        }
        logger.info(f"{len(valid)} valid images, comparing fingerprints")

        if not valid:
            return []

        groups = group_duplicates(valid)
        for group in groups:
            logger.info(f"Group {group.group_id}: {len(group)} identical images")
        return groups

    def remove_duplicate(self, path: PathLike) -> Path:
        """
        Soft delete one image of a group into its ``.delete`` folder.

        Returns:
            Where the file now lives
        """
        return self.deleter.soft_delete(path)
