"""Test the media scanner module."""

import os
from pathlib import Path

import pytest

from media_sorter.core.models import MediaType
from media_sorter.core.scanner import (
    MediaScanner,
    get_file_meta,
    is_filtered_name,
    media_type_for,
)
from media_sorter.errors import ValidationError


@pytest.fixture
def temp_media_dir(tmp_path):
    """Create a temporary directory with test files."""
    root = tmp_path / "media"
    root.mkdir()

    (root / "image1.jpg").touch()
    (root / "image2.PNG").touch()
    (root / "clip.mp4").touch()
    (root / "document.txt").touch()
    (root / ".hidden.jpg").touch()
    (root / "Thumbs.db").touch()

    subdir = root / "subdir"
    subdir.mkdir()
    (subdir / "image3.JPG").touch()

    trash = root / ".delete"
    trash.mkdir()
    (trash / "removed.jpg").touch()

    yield root


def test_scan_directory_lists_files_only(temp_media_dir):
    """Test that only visible regular files in the top level are returned."""
    metas = MediaScanner().scan_directory(temp_media_dir)

    names = {meta.file_name for meta in metas}
    assert names == {"image1.jpg", "image2.PNG", "clip.mp4", "document.txt"}


def test_scan_directory_metadata(temp_media_dir):
    """Test the metadata captured for each file."""
    os.utime(temp_media_dir / "image2.PNG", (1_600_000_000, 1_600_000_000))

    metas = {m.file_name: m for m in MediaScanner().scan_directory(temp_media_dir)}
    meta = metas["image2.PNG"]

    assert meta.full_path == temp_media_dir / "image2.PNG"
    assert meta.ext == ".png"
    assert meta.mod_time.timestamp() == pytest.approx(1_600_000_000)


def test_scan_directory_errors(tmp_path):
    """Test validation of the scanned path."""
    scanner = MediaScanner()

    with pytest.raises(FileNotFoundError):
        scanner.scan_directory(tmp_path / "missing")

    not_a_dir = tmp_path / "file.jpg"
    not_a_dir.touch()
    with pytest.raises(NotADirectoryError):
        scanner.scan_directory(not_a_dir)

    with pytest.raises(ValidationError):
        scanner.scan_directory("")


def test_count_files(temp_media_dir):
    assert MediaScanner().count_files(temp_media_dir) == 4


def test_collect_hash_candidates(temp_media_dir):
    """Test that only visible JPEG files are collected, recursively."""
    candidates = MediaScanner().collect_hash_candidates(temp_media_dir)

    assert candidates == sorted(
        [temp_media_dir / "image1.jpg", temp_media_dir / "subdir" / "image3.JPG"]
    )


def test_list_media_newest_first(temp_media_dir):
    """Test that media are listed recursively, most recent first."""
    os.utime(temp_media_dir / "image1.jpg", (1_000, 1_000))
    os.utime(temp_media_dir / "clip.mp4", (3_000, 3_000))
    os.utime(temp_media_dir / "image2.PNG", (2_000, 2_000))
    os.utime(temp_media_dir / "subdir" / "image3.JPG", (4_000, 4_000))

    medias = MediaScanner().list_media(temp_media_dir)

    assert [m.file_name for m in medias] == [
        "image3.JPG",
        "clip.mp4",
        "image2.PNG",
        "image1.jpg",
    ]
    assert all(m.full_path.is_absolute() for m in medias)


def test_get_file_meta_rejects_directory(tmp_path):
    with pytest.raises(IsADirectoryError):
        get_file_meta(tmp_path)


@pytest.mark.parametrize(
    "name, expected",
    [
        ("a.jpg", MediaType.IMAGE),
        ("a.JPEG", MediaType.IMAGE),
        ("movie.MOV", MediaType.VIDEO),
        ("song.flac", MediaType.AUDIO),
        ("report.pdf", MediaType.DOCUMENT),
        ("archive.zip", MediaType.UNKNOWN),
        ("no_extension", MediaType.UNKNOWN),
    ],
)
def test_media_type_for(name, expected):
    assert media_type_for(Path(name)) is expected


def test_is_filtered_name():
    assert is_filtered_name(".DS_Store")
    assert is_filtered_name("Thumbs.db")
    assert is_filtered_name(".delete")
    assert not is_filtered_name("photo.jpg")
