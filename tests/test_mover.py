"""
Tests for relocating files.
"""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from cabinete.classifier import TargetLocation
from cabinete.exceptions import DirectoryCreateError
from cabinete.mover import MoveStatus, ensure_directory, move_file


def test_move_file(tmp_path):
    """The file ends up in the new folder under its own name."""
    source = tmp_path / "a.jpg"
    source.write_text("a")
    target = TargetLocation(directory_path=tmp_path / "2024" / "03 - March", file_name="a.jpg")

    outcome = move_file(source, target)

    assert outcome.status is MoveStatus.MOVED
    assert outcome.ok
    assert outcome.destination == target.path
    assert target.path.read_text() == "a"
    assert not source.exists()


def test_ensure_directory_is_idempotent(tmp_path):
    """Creating an existing folder is not an error and leaves its content alone."""
    folder = tmp_path / "2024" / "07"
    ensure_directory(folder)
    (folder / "kept.txt").write_text("x")
    ensure_directory(folder)

    assert folder.is_dir()
    assert [p.name for p in folder.iterdir()] == ["kept.txt"]


def test_existing_destination_is_a_failure(tmp_path):
    """A name collision is reported and neither file is touched."""
    source = tmp_path / "a.jpg"
    source.write_text("new")
    folder = tmp_path / "2024"
    folder.mkdir()
    (folder / "a.jpg").write_text("old")

    outcome = move_file(source, TargetLocation(directory_path=folder, file_name="a.jpg"))

    assert outcome.status is MoveStatus.FAILED
    assert not outcome.ok
    assert "exists" in outcome.error
    assert source.read_text() == "new"
    assert (folder / "a.jpg").read_text() == "old"


def test_rename_failure_is_reported(tmp_path):
    """An OSError from rename becomes a failed outcome instead of an exception."""
    source = tmp_path / "a.jpg"
    source.write_text("a")
    target = TargetLocation(directory_path=tmp_path / "2024", file_name="a.jpg")

    with patch("cabinete.mover.os.rename", side_effect=PermissionError(13, "Permission denied")):
        outcome = move_file(source, target)

    assert outcome.status is MoveStatus.FAILED
    assert outcome.error == "Permission denied"
    assert source.exists()
    assert not target.path.exists()


def test_directory_failure_raises(tmp_path):
    """Without a destination folder the move cannot go on."""
    source = tmp_path / "a.jpg"
    source.write_text("a")
    blocker = tmp_path / "2024"
    blocker.write_text("a file where a folder should be")
    target = TargetLocation(directory_path=blocker / "03 - March", file_name="a.jpg")

    with pytest.raises(DirectoryCreateError) as excinfo:
        move_file(source, target)

    assert excinfo.value.path == blocker / "03 - March"
    assert source.exists()


def test_dry_run_touches_nothing(tmp_path):
    source = tmp_path / "a.jpg"
    source.write_text("a")
    target = TargetLocation(directory_path=tmp_path / "2024", file_name="a.jpg")

    outcome = move_file(source, target, dry_run=True)

    assert outcome.status is MoveStatus.PLANNED
    assert source.exists()
    assert not (tmp_path / "2024").exists()


def test_file_already_in_place(tmp_path):
    folder = tmp_path / "2024"
    folder.mkdir()
    source = folder / "a.jpg"
    source.write_text("a")

    with patch("cabinete.mover.os.rename") as rename:
        outcome = move_file(source, TargetLocation(directory_path=folder, file_name="a.jpg"))

    assert outcome.status is MoveStatus.IN_PLACE
    rename.assert_not_called()
    assert source.exists()
