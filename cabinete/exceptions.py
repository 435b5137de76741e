"""
Exceptions raised by the organizer pipeline.
"""

from pathlib import Path
from typing import Optional


class CabineteError(Exception):
    """Base class for all organizer errors."""


class StructuralWalkError(CabineteError):
    """The directory walk failed while files were being moved."""

    def __init__(self, path: Path, cause: Optional[BaseException] = None):
        self.path = path
        self.cause = cause
        super().__init__(f"Walk failed at {path}: {cause}")


class DirectoryCreateError(CabineteError):
    """A destination directory could not be created."""

    def __init__(self, path: Path, cause: Optional[BaseException] = None):
        self.path = path
        self.cause = cause
        super().__init__(f"Could not create directory {path}: {cause}")


class MoveError(CabineteError):
    """A single file could not be relocated."""

    def __init__(self, source: Path, destination: Path, reason: str):
        self.source = source
        self.destination = destination
        self.reason = reason
        super().__init__(f"Failed to move {source} -> {destination}: {reason}")


class DisplayStartError(CabineteError):
    """The live progress display could not be started."""
