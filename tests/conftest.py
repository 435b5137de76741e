"""
Shared fixtures for the cabinete tests.
"""

import os
import time
from datetime import datetime
from pathlib import Path

import pytest


def make_file(path: Path, when: datetime, content: str = "data") -> Path:
    """Create a file with a given modification time."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    stamp = time.mktime(when.timetuple())
    os.utime(path, (stamp, stamp))
    return path


@pytest.fixture
def source_tree(tmp_path):
    """A small unorganized folder: three files from two months, one nested."""
    root = tmp_path / "photos"
    make_file(root / "a.jpg", datetime(2024, 3, 7, 12, 0))
    make_file(root / "b.jpg", datetime(2024, 3, 7, 18, 30))
    make_file(root / "trip" / "c.jpg", datetime(2023, 12, 25, 9, 15))
    return root
