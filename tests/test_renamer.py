"""Tests for two-phase directory renumbering."""

import os
import re

import pytest

from media_sorter.core import renamer
from media_sorter.core.renamer import batch_reorder, plan_reorder, reorder_directory
from media_sorter.errors import (
    InterruptedReorderError,
    NothingToReorderError,
    RenameError,
    SequenceWidthError,
    ValidationError,
)


def _write(path, content, mtime):
    path.write_text(content)
    os.utime(path, (mtime, mtime))
    return path


def _visible(directory):
    return sorted(p.name for p in directory.iterdir() if not p.name.startswith("."))


@pytest.fixture
def album(tmp_path):
    """Five files whose names do not follow their age."""
    root = tmp_path / "album"
    root.mkdir()
    _write(root / "zebra.jpg", "oldest", 1_000)
    _write(root / "apple.PNG", "second", 2_000)
    _write(root / "movie.mp4", "third", 3_000)
    _write(root / "0001.jpg", "fourth", 4_000)
    _write(root / "mango.jpg", "newest", 5_000)
    _write(root / ".DS_Store", "system", 500)
    return root


def test_reorder_directory_numbers_by_age(album):
    result = reorder_directory(album, 4)

    assert _visible(album) == ["0001.jpg", "0002.png", "0003.mp4", "0004.jpg", "0005.jpg"]
    assert (album / "0001.jpg").read_text() == "oldest"
    assert (album / "0002.png").read_text() == "second"
    assert (album / "0003.mp4").read_text() == "third"
    assert (album / "0004.jpg").read_text() == "fourth"
    assert (album / "0005.jpg").read_text() == "newest"
    assert result.total == 5
    assert len(result.renamed) == 5


def test_reorder_leaves_no_temporary_files(album):
    reorder_directory(album, 3)

    names = [p.name for p in album.iterdir()]
    assert not any(name.endswith(".tmp") for name in names)
    assert all(re.fullmatch(r"\d{3}\.\w+", n) for n in names if n != ".DS_Store")
    assert (album / ".DS_Store").read_text() == "system"


def test_reorder_is_idempotent(album):
    reorder_directory(album, 4)
    before = {p.name: p.read_text() for p in album.iterdir()}

    result = reorder_directory(album, 4)

    assert result.renamed == []
    assert len(result.skipped) == 5
    assert {p.name: p.read_text() for p in album.iterdir()} == before


def test_reorder_swaps_overlapping_names(tmp_path):
    root = tmp_path / "swap"
    root.mkdir()
    _write(root / "2.jpg", "older", 100)
    _write(root / "1.jpg", "newer", 200)

    reorder_directory(root, 1)

    assert (root / "1.jpg").read_text() == "older"
    assert (root / "2.jpg").read_text() == "newer"


def test_equal_mtimes_ordered_by_name(tmp_path):
    root = tmp_path / "same"
    root.mkdir()
    _write(root / "b.jpg", "b", 100)
    _write(root / "a.jpg", "a", 100)

    reorder_directory(root, 2)

    assert (root / "01.jpg").read_text() == "a"
    assert (root / "02.jpg").read_text() == "b"


def test_sizing_guard_renames_nothing(tmp_path):
    root = tmp_path / "big"
    root.mkdir()
    for i in range(150):
        _write(root / f"img_{i}.jpg", str(i), 1_000 + i)
    before = _visible(root)

    with pytest.raises(SequenceWidthError):
        reorder_directory(root, 2)

    assert _visible(root) == before


def test_empty_directory_is_an_error(tmp_path):
    root = tmp_path / "empty"
    root.mkdir()
    (root / ".hidden").write_text("x")
    (root / "sub").mkdir()

    with pytest.raises(NothingToReorderError):
        reorder_directory(root, 4)


@pytest.mark.parametrize("width", [0, -3])
def test_invalid_width(album, width):
    with pytest.raises(ValidationError):
        reorder_directory(album, width)


def test_invalid_directory(tmp_path):
    with pytest.raises(ValidationError):
        reorder_directory("", 4)
    with pytest.raises(FileNotFoundError):
        reorder_directory(tmp_path / "missing", 4)


def test_plan_does_not_touch_disk(album):
    before = _visible(album)

    plans = plan_reorder(album, 4)

    assert _visible(album) == before
    assert [plan.final.name for plan in plans][0] == "0001.jpg"
    assert (plans[3].source.name, plans[3].final.name) == ("0001.jpg", "0004.jpg")
    assert not any(plan.in_place for plan in plans)


def test_failure_reports_path_and_phase(album, monkeypatch):
    real_rename = renamer.rename_file
    calls = []

    def flaky_rename(old, new, suffix=True, max_try=100):
        calls.append(old)
        if len(calls) == 7:
            raise PermissionError("denied")
        return real_rename(old, new, suffix=suffix, max_try=max_try)

    monkeypatch.setattr(renamer, "rename_file", flaky_rename)

    with pytest.raises(RenameError) as excinfo:
        reorder_directory(album, 4)

    assert excinfo.value.phase == "final"
    assert excinfo.value.path == calls[-1]
    assert "denied" in str(excinfo.value)


def test_rerun_after_crash_refuses_temporary_files(tmp_path, monkeypatch):
    root = tmp_path / "crashed"
    root.mkdir()
    for i, name in enumerate(["a.jpg", "b.jpg", "c.jpg"]):
        _write(root / name, name, 1_000 + i)

    real_rename = renamer.rename_file
    calls = []

    def crash_in_final_phase(old, new, suffix=True, max_try=100):
        calls.append(old)
        if len(calls) == 4:
            raise OSError("disk gone")
        return real_rename(old, new, suffix=suffix, max_try=max_try)

    monkeypatch.setattr(renamer, "rename_file", crash_in_final_phase)
    with pytest.raises(RenameError):
        reorder_directory(root, 2)
    monkeypatch.setattr(renamer, "rename_file", real_rename)

    leftovers = _visible(root)
    assert all(name.endswith(".tmp") for name in leftovers)

    with pytest.raises(InterruptedReorderError) as excinfo:
        reorder_directory(root, 2)

    assert isinstance(excinfo.value, ValidationError)
    assert all(name in str(excinfo.value) for name in leftovers)
    assert _visible(root) == leftovers


def test_temporary_name_pattern():
    assert renamer.is_temporary_name("a.jpg.6fc6c9b8.tmp")
    assert not renamer.is_temporary_name("notes.tmp")
    assert not renamer.is_temporary_name("a.jpg")


class TestBatchReorder:
    """Test reordering several subdirectories at once."""

    def test_batch_reorders_each_subdirectory(self, tmp_path):
        root = tmp_path / "batch"
        for name in ["trip", "party", "work"]:
            sub = root / name
            sub.mkdir(parents=True)
            _write(sub / "late.jpg", f"{name}-late", 2_000)
            _write(sub / "early.jpg", f"{name}-early", 1_000)
        (root / "empty").mkdir()
        (root / ".delete").mkdir()
        _write(root / "loose.jpg", "top level", 1)

        outcomes = batch_reorder(root, 3, max_jobs=2)

        assert set(outcomes) == {root / "trip", root / "party", root / "work", root / "empty"}
        assert isinstance(outcomes[root / "empty"], NothingToReorderError)
        for name in ["trip", "party", "work"]:
            assert outcomes[root / name] is None
            assert (root / name / "001.jpg").read_text() == f"{name}-early"
            assert (root / name / "002.jpg").read_text() == f"{name}-late"
        assert (root / "loose.jpg").exists()

    def test_batch_without_subdirectories(self, tmp_path):
        assert batch_reorder(tmp_path, 3) == {}
