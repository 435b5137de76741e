"""
Couples the organizer thread to the render loop.

The render loop runs on the calling thread. Once the display is up, a
producer thread counts and moves files, submitting one render job per file.
A CompletionSynchronizer tracks outstanding jobs and stops the render loop
only after the producer has finished and every submitted job has executed.
"""

import logging
import threading
from enum import Enum
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict

from .core import FileOrganizer, OrganizeReport
from .render import RenderJob, RenderQueue

logger = logging.getLogger(__name__)


class SyncState(str, Enum):
    RUNNING = "running"
    DRAINING = "draining"
    STOPPED = "stopped"


class CompletionSynchronizer:
    """Running -> Draining -> Stopped.

    Draining starts when the producer reports completion; Stopped is reached
    once no submitted job is outstanding, at which point `stop` is called
    exactly once.
    """

    def __init__(self, stop: Callable[[], None]):
        self._stop = stop
        self._cond = threading.Condition()
        self._outstanding = 0
        self._state = SyncState.RUNNING
        self.error: Optional[BaseException] = None

    @property
    def state(self) -> SyncState:
        with self._cond:
            return self._state

    @property
    def outstanding(self) -> int:
        with self._cond:
            return self._outstanding

    def job_submitted(self) -> None:
        with self._cond:
            if self._state is not SyncState.RUNNING:
                raise RuntimeError("Cannot submit render jobs after the producer finished")
            self._outstanding += 1

    def job_done(self) -> None:
        with self._cond:
            self._outstanding -= 1
            stop = self._maybe_stop()
        if stop:
            self._stop()

    def producer_finished(self, error: Optional[BaseException] = None) -> None:
        with self._cond:
            if self._state is not SyncState.RUNNING:
                return
            self.error = error
            self._state = SyncState.DRAINING
            logger.debug(f"Producer finished, {self._outstanding} render jobs outstanding")
            stop = self._maybe_stop()
        if stop:
            self._stop()

    def _maybe_stop(self) -> bool:
        # Caller holds the condition
        if self._state is SyncState.DRAINING and self._outstanding == 0:
            self._state = SyncState.STOPPED
            self._cond.notify_all()
            return True
        return False

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until Stopped; returns False on timeout."""
        with self._cond:
            return self._cond.wait_for(lambda: self._state is SyncState.STOPPED, timeout)


class PipelineResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    report: OrganizeReport
    jobs_executed: int


def run_pipeline(organizer: FileOrganizer, render_queue: RenderQueue) -> PipelineResult:
    """Organize files on a worker thread while the caller's thread renders progress.

    Returns once every render job has been executed and the display stopped.

    Raises:
        DisplayStartError: If the display cannot be started (no file is touched)
        StructuralWalkError: If the walk failed
        DirectoryCreateError: If a destination directory could not be created
    """
    sync = CompletionSynchronizer(render_queue.stop)
    outcome = {}

    def submit(job: RenderJob) -> None:
        sync.job_submitted()
        render_queue.enqueue(job)

    def produce() -> None:
        error = None
        try:
            organizer.count_files()
            outcome["report"] = organizer.organize(submit)
        except Exception as e:
            error = e
        finally:
            sync.producer_finished(error)

    worker = threading.Thread(target=produce, name="cabinete-organizer", daemon=True)

    try:
        render_queue.run(on_start=worker.start, on_job_done=lambda job: sync.job_done())
    except BaseException:
        # The display is gone; do not keep moving files behind it
        organizer.cancel()
        raise
    finally:
        if worker.is_alive():
            worker.join()

    if sync.error is not None:
        raise sync.error

    return PipelineResult(report=outcome["report"], jobs_executed=render_queue.jobs_executed)
