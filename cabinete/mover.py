"""
Relocate files into their date folders.
"""

import logging
import os
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict

from .classifier import TargetLocation
from .exceptions import DirectoryCreateError, MoveError

logger = logging.getLogger(__name__)


class MoveStatus(str, Enum):
    MOVED = "moved"
    IN_PLACE = "in place"
    PLANNED = "planned"
    FAILED = "failed"


class MoveOutcome(BaseModel):
    """Result of relocating one file."""
    model_config = ConfigDict(frozen=True)

    source: Path
    destination: Path
    status: MoveStatus
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is not MoveStatus.FAILED


def ensure_directory(path: Path) -> None:
    """Create a directory and its parents; an existing directory is fine."""
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise DirectoryCreateError(path, e) from e


def _relocate(source: Path, destination: Path) -> None:
    # os.rename would silently replace an existing file on POSIX
    if os.path.lexists(destination):
        raise MoveError(source, destination, "destination already exists")
    try:
        os.rename(source, destination)
    except OSError as e:
        raise MoveError(source, destination, e.strerror or str(e)) from e


def move_file(source: Path, target: TargetLocation, dry_run: bool = False) -> MoveOutcome:
    """Move a file into its target directory under its original name.

    The rename is a single system call, so the file is always either at its
    old path or at the new one. Rename failures (collision, permissions,
    cross-device) are reported in the outcome; only a failure to create the
    destination directory raises.

    Args:
        source: Current path of the file
        target: Destination computed by the classifier
        dry_run: Compute the outcome without touching the filesystem

    Returns:
        The outcome of the move

    Raises:
        DirectoryCreateError: If the destination directory cannot be created
    """
    destination = target.path

    if source == destination:
        return MoveOutcome(source=source, destination=destination, status=MoveStatus.IN_PLACE)

    if dry_run:
        logger.info(f"Would move {source} -> {destination}")
        return MoveOutcome(source=source, destination=destination, status=MoveStatus.PLANNED)

    ensure_directory(target.directory_path)

    try:
        _relocate(source, destination)
    except MoveError as e:
        logger.warning(str(e))
        return MoveOutcome(
            source=source,
            destination=destination,
            status=MoveStatus.FAILED,
            error=e.reason,
        )

    logger.info(f"Moved {source} -> {destination}")
    return MoveOutcome(source=source, destination=destination, status=MoveStatus.MOVED)
