"""Concurrent perceptual fingerprinting of JPEG images."""

from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import BinaryIO, Dict, List, Mapping, Optional, Sequence, Tuple

import imagehash
from PIL import Image
from tqdm import tqdm

from media_sorter.utils.config import Config
from media_sorter.utils.logger import setup_logger

logger = setup_logger(__name__)

DEFAULT_CHUNK_SIZE = 200
DEFAULT_MAX_WORKERS = 8
HASH_SIZE = 8  # 8x8 grid, 64-bit fingerprint

HashResult = Tuple[Path, Optional[imagehash.ImageHash]]


def split_chunks(paths: Sequence[Path], chunk_size: int) -> List[List[Path]]:
    """
    Split paths into consecutive chunks of at most ``chunk_size`` items.

    A non-positive chunk size falls back to the default.
    """
    if chunk_size <= 0:
        chunk_size = DEFAULT_CHUNK_SIZE
    return [list(paths[start:start + chunk_size]) for start in range(0, len(paths), chunk_size)]


def compute_fingerprint(handle: BinaryIO) -> imagehash.ImageHash:
    """
    Decode a JPEG from an open binary handle and compute its average hash.

    Raises:
        PIL.UnidentifiedImageError: If the data is not a decodable JPEG
        OSError: If reading or decoding fails part way
        PIL.Image.DecompressionBombError: If the image exceeds the pixel limit
    """
    with Image.open(handle, formats=["JPEG"]) as img:
        return imagehash.average_hash(img, hash_size=HASH_SIZE)


class FingerprintComputer:
    """Computes fingerprints for batches of images on a bounded thread pool."""

    def __init__(self, config: Optional[Config] = None, show_progress: bool = False):
        """
        Initialize the fingerprint computer.

        Args:
            config: Configuration instance (chunk size and worker count)
            show_progress: Show a progress bar while hashing
        """
        self.show_progress = show_progress
        if config is not None:
            self.chunk_size = int(config.get("hashing.chunk_size", DEFAULT_CHUNK_SIZE))
            self.max_workers = int(config.get("hashing.max_workers", DEFAULT_MAX_WORKERS))
        else:
            self.chunk_size = DEFAULT_CHUNK_SIZE
            self.max_workers = DEFAULT_MAX_WORKERS
        self.max_workers = max(1, self.max_workers)

    def compute_fingerprints(
        self,
        paths: Sequence[Path],
        handles: Mapping[Path, BinaryIO],
    ) -> Dict[Path, Optional[imagehash.ImageHash]]:
        """
        Fingerprint every path using its already-open handle.

        The caller owns the handles and closes them. Each chunk of paths is
        hashed sequentially by one worker; chunks complete in any order.

        Args:
            paths: Image paths in caller order
            handles: Open binary handles keyed by path

        Returns:
            Mapping with one entry per input path: the fingerprint, or None
            when the file could not be decoded or hashed
        """
        if not paths:
            return {}

        chunks = split_chunks(paths, self.chunk_size)
        workers = min(self.max_workers, len(chunks))
        logger.info(
            f"Hashing {len(paths)} images in {len(chunks)} chunks "
            f"of up to {self.chunk_size} ({workers} workers)"
        )

        results: Dict[Path, Optional[imagehash.ImageHash]] = {}
        progress = tqdm(
            total=len(paths),
            desc="Hashing images",
            unit="img",
            disable=not self.show_progress,
        )
        try:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = [
                    executor.submit(self._hash_chunk, chunk, handles) for chunk in chunks
                ]
                for future in as_completed(futures):
                    chunk_results = future.result()
                    for path, fingerprint in chunk_results:
                        results[path] = fingerprint
                    progress.update(len(chunk_results))
        finally:
            progress.close()

        failed = sum(1 for fingerprint in results.values() if fingerprint is None)
        if failed:
            logger.warning(f"{failed} of {len(results)} images could not be fingerprinted")
        return results

    def _hash_chunk(
        self, chunk: List[Path], handles: Mapping[Path, BinaryIO]
    ) -> List[HashResult]:
        chunk_results: List[HashResult] = []
        for path in chunk:
            handle = handles.get(path)
            if handle is None:
                logger.error(f"No open handle for {path}")
                chunk_results.append((path, None))
                continue

            try:
                fingerprint = compute_fingerprint(handle)
            except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as e:
                # PIL raises SyntaxError for some malformed headers
                logger.error(f"Failed to fingerprint {path}: {e}")
                chunk_results.append((path, None))
                continue

            chunk_results.append((path, fingerprint))
        return chunk_results
