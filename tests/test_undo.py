"""Tests for the undo ledger."""

from datetime import datetime
from pathlib import Path

import pytest

from media_sorter.core import undo
from media_sorter.core.classifier import Classifier
from media_sorter.core.models import MoveRecord
from media_sorter.core.undo import UndoLedger
from media_sorter.errors import NothingToUndoError, UndoTargetMissingError


def _record(i):
    return MoveRecord(Path(f"/src/{i}.jpg"), Path(f"/dst/{i}.jpg"), datetime.now())


def test_ledger_is_bounded():
    ledger = UndoLedger(max_size=3)

    for i in range(4):
        ledger.record(_record(i))

    assert ledger.count() == 3
    assert [r.source_path.name for r in ledger.records()] == ["1.jpg", "2.jpg", "3.jpg"]
    assert ledger.last_record().source_path.name == "3.jpg"


def test_invalid_size():
    with pytest.raises(ValueError):
        UndoLedger(max_size=0)


def test_nothing_to_undo():
    with pytest.raises(NothingToUndoError):
        UndoLedger().undo()


def test_undo_round_trip(tmp_path, config):
    x = tmp_path / "x"
    y = tmp_path / "y"
    x.mkdir()
    (x / "a.jpg").write_text("a")
    classifier = Classifier(config)

    moved = classifier.move_file(x / "a.jpg", y)
    assert moved == y / "a.jpg"
    assert classifier.undo_count == 1

    restored = classifier.undo_last_move()

    assert restored == x / "a.jpg"
    assert (x / "a.jpg").read_text() == "a"
    assert not moved.exists()
    assert classifier.undo_count == 0


def test_undo_is_last_in_first_out(tmp_path):
    ledger = UndoLedger()
    for name in ["first", "second"]:
        source = tmp_path / f"{name}.jpg"
        target = tmp_path / "moved" / f"{name}.jpg"
        target.parent.mkdir(exist_ok=True)
        target.write_text(name)
        ledger.record(MoveRecord(source, target))

    assert ledger.undo() == tmp_path / "second.jpg"
    assert ledger.undo() == tmp_path / "first.jpg"


def test_missing_target_consumes_record(tmp_path):
    ledger = UndoLedger()
    ledger.record(MoveRecord(tmp_path / "a.jpg", tmp_path / "gone.jpg"))

    with pytest.raises(UndoTargetMissingError):
        ledger.undo()

    assert ledger.count() == 0
    with pytest.raises(NothingToUndoError):
        ledger.undo()


def test_failed_reverse_move_consumes_record(tmp_path, monkeypatch):
    target = tmp_path / "moved.jpg"
    target.write_text("moved")
    ledger = UndoLedger()
    ledger.record(MoveRecord(tmp_path / "older.jpg", tmp_path / "older_target.jpg"))
    ledger.record(MoveRecord(tmp_path / "a.jpg", target))

    def failing_rename(old, new, suffix=True, max_try=100):
        raise PermissionError("read-only volume")

    monkeypatch.setattr(undo, "rename_file", failing_rename)

    with pytest.raises(PermissionError):
        ledger.undo()

    assert ledger.count() == 1
    assert ledger.last_record().source_path == tmp_path / "older.jpg"
    assert target.read_text() == "moved"


def test_undo_recreates_source_directory(tmp_path):
    target = tmp_path / "sorted" / "a.jpg"
    target.parent.mkdir()
    target.write_text("a")
    source = tmp_path / "removed" / "folder" / "a.jpg"
    ledger = UndoLedger()
    ledger.record(MoveRecord(source, target))

    assert ledger.undo() == source
    assert source.read_text() == "a"


def test_undo_into_occupied_source(tmp_path):
    target = tmp_path / "sorted" / "a.jpg"
    target.parent.mkdir()
    target.write_text("moved")
    source = tmp_path / "a.jpg"
    source.write_text("newcomer")
    ledger = UndoLedger()
    ledger.record(MoveRecord(source, target))

    restored = ledger.undo()

    assert restored == tmp_path / "a_1.jpg"
    assert restored.read_text() == "moved"
    assert source.read_text() == "newcomer"


def test_clear():
    ledger = UndoLedger()
    ledger.record(_record(1))
    ledger.clear()
    assert ledger.count() == 0
    assert ledger.last_record() is None
