"""
Live progress display driven by a single render thread.

The organizer never touches the display. It builds immutable RenderJob
snapshots and hands them to a RenderQueue; the thread running the queue is
the only one that updates the ProgressView or redraws the screen.
"""

import logging
import queue
import time
from collections import deque
from pathlib import Path
from typing import Callable, Deque, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from rich.console import Console, Group
from rich.errors import LiveError
from rich.live import Live
from rich.table import Table
from rich.text import Text

from .config import GranularityPolicy
from .exceptions import DisplayStartError
from .mover import MoveStatus
from .state import BucketKey, StateSnapshot

logger = logging.getLogger(__name__)

MAX_FAILURES_SHOWN = 5


class RenderJob(BaseModel):
    """Everything the display needs to reflect one processed file."""
    model_config = ConfigDict(frozen=True)

    file_name: str
    status: MoveStatus
    bucket: Optional[BucketKey] = None
    bucket_count: Optional[int] = None
    error: Optional[str] = None
    snapshot: StateSnapshot = Field(default_factory=StateSnapshot)


class ProgressView:
    """Display state: a bucket table, recent failures and a status line."""

    def __init__(self, policy: GranularityPolicy, root: Optional[Path] = None,
                 max_failures: int = MAX_FAILURES_SHOWN):
        self.policy = policy
        self.root = root
        self.bucket_counts: Dict[BucketKey, int] = {}
        self.failures: Deque[Tuple[str, str]] = deque(maxlen=max_failures)
        self.snapshot = StateSnapshot()
        self.last_file: Optional[str] = None

    def apply(self, job: RenderJob) -> None:
        """Update the view from a job snapshot."""
        if job.bucket is not None and job.bucket_count is not None:
            self.bucket_counts[job.bucket] = job.bucket_count
        if job.status is MoveStatus.FAILED:
            self.failures.append((job.file_name, job.error or "unknown error"))
        self.snapshot = job.snapshot
        self.last_file = job.file_name

    def _year_rows(self) -> Dict[str, Dict[str, int]]:
        years: Dict[str, Dict[str, int]] = {}
        for key, count in self.bucket_counts.items():
            year = key[0]
            month = key[1] if len(key) > 1 else ""
            months = years.setdefault(year, {})
            months[month] = months.get(month, 0) + count
        return years

    def build_table(self) -> Table:
        title = f"Organizing {self.root}" if self.root else None
        table = Table(title=title, show_header=True, header_style="bold yellow")
        table.add_column("Directory", style="green")
        table.add_column("Total Files", justify="center")

        if self.policy in (GranularityPolicy.YEAR, GranularityPolicy.MONTH_WITHIN_YEAR):
            for year, months in sorted(self._year_rows().items()):
                table.add_row(f"Year: {year}", str(sum(months.values())))
                if self.policy is GranularityPolicy.MONTH_WITHIN_YEAR:
                    for month, count in sorted(months.items()):
                        table.add_row(Text(f"  {month}", style="blue"), str(count))
        else:
            for key, count in sorted(self.bucket_counts.items()):
                table.add_row("/".join(key), str(count))

        return table

    def build_failures(self) -> Table:
        table = Table(title="Failed moves", show_header=True, header_style="bold red")
        table.add_column("File", style="red", overflow="fold")
        table.add_column("Error", style="dim", overflow="fold")
        for name, error in self.failures:
            table.add_row(name, error)
        return table

    def status_line(self) -> Text:
        return Text.from_markup(
            f"[green]Processed:[/green] {self.snapshot.processed_files} / "
            f"[red]Pending:[/red] {self.snapshot.pending_files} / "
            f"[yellow]Failed:[/yellow] {self.snapshot.failed_files}"
        )

    def __rich__(self):
        parts = [self.build_table()]
        if self.failures:
            parts.append(self.build_failures())
        parts.append(self.status_line())
        return Group(*parts)


_STOP = object()


class RenderQueue:
    """FIFO executor of render jobs that owns the live display.

    enqueue() and stop() may be called from any thread. run() must be called
    from the thread that is to own the display; it executes jobs one at a time
    in submission order until stop() is processed. Jobs enqueued before stop()
    always run first.
    """

    def __init__(self, view: ProgressView, console: Optional[Console] = None,
                 refresh_per_second: float = 10.0):
        self.view = view
        self.console = console or Console()
        self._jobs: "queue.Queue[object]" = queue.Queue()
        self._min_interval = 1.0 / refresh_per_second
        self._running = False
        self.jobs_executed = 0

    @property
    def running(self) -> bool:
        return self._running

    def enqueue(self, job: RenderJob) -> None:
        self._jobs.put(job)

    def stop(self) -> None:
        self._jobs.put(_STOP)

    def run(self,
            on_start: Optional[Callable[[], None]] = None,
            on_job_done: Optional[Callable[[RenderJob], None]] = None) -> None:
        """Run the display loop until stopped.

        Args:
            on_start: Called on this thread once the display is up
            on_job_done: Called after each job has been applied

        Raises:
            DisplayStartError: If the live display cannot be started
        """
        live = Live(self.view, console=self.console, auto_refresh=False)
        try:
            live.start(refresh=True)
        except (LiveError, OSError) as e:
            raise DisplayStartError(f"Error starting the display: {e}") from e

        self._running = True
        logger.debug("Render loop started")
        try:
            if on_start:
                on_start()

            last_refresh = time.monotonic()
            while True:
                job = self._jobs.get()
                if job is _STOP:
                    break
                try:
                    self.view.apply(job)
                    self.jobs_executed += 1
                finally:
                    if on_job_done:
                        on_job_done(job)

                now = time.monotonic()
                if self._jobs.empty() or now - last_refresh >= self._min_interval:
                    live.refresh()
                    last_refresh = now
        finally:
            self._running = False
            live.refresh()
            live.stop()
            logger.debug(f"Render loop stopped after {self.jobs_executed} jobs")
