"""
Map file timestamps to destination folders.
"""

import os
from datetime import datetime
from pathlib import Path
from typing import Tuple

from pydantic import BaseModel, ConfigDict

from .config import GranularityPolicy

# Fixed English names so the folder layout does not depend on the locale.
MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def file_timestamp(path: Path) -> datetime:
    """Return the timestamp a file is organized by.

    Creation time is not portable (Linux rarely exposes it, macOS and Windows
    report it differently), so the modification time stands in for it.
    Callers that talk about a file's "date" mean this value. Symbolic links
    are dated by the link itself, not by what they point to.
    """
    return datetime.fromtimestamp(os.lstat(path).st_mtime)


class FileRecord(BaseModel):
    """A file discovered during the walk."""
    model_config = ConfigDict(frozen=True)

    source_path: Path
    name: str
    mod_time: datetime

    @classmethod
    def from_path(cls, path: Path) -> "FileRecord":
        return cls(source_path=path, name=path.name, mod_time=file_timestamp(path))


class TargetLocation(BaseModel):
    """Where a file should end up."""
    model_config = ConfigDict(frozen=True)

    directory_path: Path
    file_name: str

    @property
    def path(self) -> Path:
        return self.directory_path / self.file_name


def day_segment(mod_time: datetime) -> str:
    return f"{mod_time.day:02d}"


def month_segment(mod_time: datetime) -> str:
    return f"{mod_time.month:02d} - {MONTH_NAMES[mod_time.month - 1]}"


def year_segment(mod_time: datetime) -> str:
    return f"{mod_time.year:04d}"


def segments(mod_time: datetime, policy: GranularityPolicy) -> Tuple[str, ...]:
    """Directory segments below the root for a timestamp under a policy."""
    if policy is GranularityPolicy.DAY:
        return (day_segment(mod_time),)
    if policy is GranularityPolicy.YEAR:
        return (year_segment(mod_time),)
    if policy is GranularityPolicy.MONTH_WITHIN_YEAR:
        return (year_segment(mod_time), month_segment(mod_time))
    return (year_segment(mod_time), month_segment(mod_time), day_segment(mod_time))


def classify(mod_time: datetime, policy: GranularityPolicy, root: Path, file_name: str) -> TargetLocation:
    """Compute the destination of a file.

    Args:
        mod_time: Timestamp of the file (see file_timestamp)
        policy: Granularity policy
        root: Directory the hierarchy is built under
        file_name: Name the file keeps at its destination

    Returns:
        The target directory and file name
    """
    return TargetLocation(
        directory_path=Path(root).joinpath(*segments(mod_time, policy)),
        file_name=file_name,
    )


def bucket_key(mod_time: datetime, policy: GranularityPolicy) -> Tuple[str, ...]:
    """Key a processed file is counted under.

    Month-within-year counts are two-level (year, month). The default
    year/month/day layout is counted per leaf folder, keyed by its relative path.
    """
    parts = segments(mod_time, policy)
    if policy is GranularityPolicy.MONTH:
        return ("/".join(parts),)
    return parts
