"""
Core file organization logic.
"""

import fnmatch
import logging
import os
import threading
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Set, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .classifier import FileRecord, bucket_key, classify
from .config import GranularityPolicy, OrganizerConfig
from .exceptions import StructuralWalkError
from .mover import MoveOutcome, MoveStatus, move_file
from .render import RenderJob
from .state import AggregateState, BucketKey

logger = logging.getLogger(__name__)

Submit = Callable[[RenderJob], None]


class OrganizeReport(BaseModel):
    """Summary of a finished organize pass."""
    model_config = ConfigDict(frozen=True)

    total: int = 0
    moved: int = 0
    in_place: int = 0
    planned: int = 0
    failed: int = 0
    failures: List[MoveOutcome] = Field(default_factory=list)

    @property
    def processed(self) -> int:
        return self.moved + self.in_place + self.planned


class FileOrganizer:
    """Walks a source tree and files everything into date folders.

    The tree is walked twice: once to count eligible files so the display
    can show a pending total, and once to classify and move them.
    """

    def __init__(self, config: OrganizerConfig, source: Path,
                 granularity: Optional[GranularityPolicy] = None,
                 dry_run: bool = False,
                 state: Optional[AggregateState] = None):
        """Initialize the organizer.

        Args:
            config: The organizer configuration
            source: Directory to organize in place
            granularity: Policy override (defaults to config.granularity)
            dry_run: Classify files without moving them
            state: Shared counters (a fresh one is created if omitted)
        """
        self.config = config
        self.source = Path(source)
        self.policy = granularity or config.granularity
        self.dry_run = dry_run
        self.state = state or AggregateState()
        self._placed: Set[Path] = set()
        self._cancelled = threading.Event()

    def cancel(self) -> None:
        """Ask a running organize() to stop before the next file. Thread-safe."""
        self._cancelled.set()

    def is_eligible(self, path: Path) -> bool:
        """Check whether a file takes part in the run."""
        name = path.name
        if self.config.skip_hidden and name.startswith("."):
            return False
        return not any(fnmatch.fnmatch(name, pattern) for pattern in self.config.exclude_patterns)

    def iter_files(self, on_error: Callable[[OSError], None]) -> Iterator[Path]:
        """Yield eligible files below the source, in a stable order.

        Symbolic links are entries in their own right: a link to a directory
        is yielded like a file and never descended into.
        """
        for dirpath, dirnames, filenames in os.walk(self.source, onerror=on_error):
            links = [name for name in dirnames if os.path.islink(os.path.join(dirpath, name))]
            dirnames[:] = sorted(name for name in dirnames if name not in links)
            for filename in sorted(filenames + links):
                path = Path(dirpath) / filename
                if self.is_eligible(path):
                    yield path

    def count_files(self) -> int:
        """First pass: count eligible files. Unreadable directories are skipped."""
        def skip(error: OSError) -> None:
            logger.debug(f"Skipping unreadable entry while counting: {error}")

        total = sum(1 for _ in self.iter_files(skip))
        self.state.set_total(total)
        logger.info(f"Found {total} files to organize in {self.source}")
        return total

    def _walk_error(self, error: OSError) -> None:
        raise StructuralWalkError(Path(error.filename or self.source), error) from error

    def process_file(self, path: Path) -> Tuple[MoveOutcome, RenderJob]:
        """Classify and move one file, update the counters and describe the result.

        Raises:
            DirectoryCreateError: If the destination directory cannot be created
        """
        try:
            record = FileRecord.from_path(path)
        except OSError as e:
            # Vanished or became unreadable since it was counted
            logger.warning(f"Cannot read {path}: {e}")
            outcome = MoveOutcome(source=path, destination=path, status=MoveStatus.FAILED,
                                  error=e.strerror or str(e))
            return outcome, self._record(outcome, None)

        target = classify(record.mod_time, self.policy, self.source, record.name)
        outcome = move_file(record.source_path, target, dry_run=self.dry_run)
        if outcome.status is MoveStatus.MOVED:
            self._placed.add(outcome.destination)
        return outcome, self._record(outcome, bucket_key(record.mod_time, self.policy))

    def _record(self, outcome: MoveOutcome, bucket: Optional[BucketKey]) -> RenderJob:
        if outcome.ok:
            count, snapshot = self.state.record_moved(bucket)
        else:
            count, bucket = None, None
            snapshot = self.state.record_failed()

        return RenderJob(
            file_name=outcome.source.name,
            status=outcome.status,
            bucket=bucket,
            bucket_count=count,
            error=outcome.error,
            snapshot=snapshot,
        )

    def organize(self, submit: Submit) -> OrganizeReport:
        """Second pass: move every eligible file and submit one render job per file.

        Args:
            submit: Receives the render job of each file, in walk order

        Returns:
            Report of what happened to each file

        Raises:
            StructuralWalkError: If the walk itself fails
            DirectoryCreateError: If a destination directory cannot be created
        """
        counts = {status: 0 for status in MoveStatus}
        failures: List[MoveOutcome] = []

        for path in self.iter_files(self._walk_error):
            if self._cancelled.is_set():
                logger.warning("Organizing cancelled; remaining files were left in place")
                break

            # Files moved earlier in this run into a folder visited later
            if path in self._placed:
                continue

            outcome, job = self.process_file(path)
            counts[outcome.status] += 1
            if not outcome.ok:
                failures.append(outcome)
            submit(job)

        report = OrganizeReport(
            total=self.state.snapshot().total_files,
            moved=counts[MoveStatus.MOVED],
            in_place=counts[MoveStatus.IN_PLACE],
            planned=counts[MoveStatus.PLANNED],
            failed=counts[MoveStatus.FAILED],
            failures=failures,
        )
        logger.info(f"Processed {report.processed} files, {report.failed} failed")
        return report

    def run(self, submit: Optional[Submit] = None) -> OrganizeReport:
        """Run both passes on the calling thread."""
        self.count_files()
        return self.organize(submit or (lambda job: None))
