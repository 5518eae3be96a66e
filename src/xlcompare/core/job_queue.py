"""
In-process job queue for comparisons.

Jobs run on a thread pool and are kept in memory, together with the
cancellation token the engine polls while the job runs.
"""
import logging
import shutil
import threading
import uuid
from concurrent.futures import Future, ThreadPoolExecutor, wait as wait_futures
from datetime import datetime, timedelta, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from xlcompare.core.config import get_settings
from xlcompare.core.errors import CancelledError, ComparisonError
from xlcompare.core.options import ComparisonOptions
from xlcompare.core.progress import CancellationToken
from xlcompare.engine.differ.compare import WorkbookComparer
from xlcompare.engine.differ.models import ComparisonResult, filter_diffs, summarize_by_sheet

logger = logging.getLogger(__name__)


class JobStatus(str, Enum):
    """Job status enum."""
    QUEUED = "queued"
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_finished(self) -> bool:
        return self in (JobStatus.SUCCESS, JobStatus.FAILED, JobStatus.CANCELLED)


class Job:
    """Job data structure."""

    def __init__(
        self,
        job_id: str,
        options: ComparisonOptions,
        status: JobStatus = JobStatus.QUEUED,
        cleanup_dir: Optional[Path] = None,
    ):
        self.job_id = job_id
        self.options = options
        self.status = status
        self.progress = 0
        self.message = "Queued"
        self.result: Optional[ComparisonResult] = None
        self.error: Optional[str] = None
        self.created_at = datetime.now(timezone.utc)
        self.started_at: Optional[datetime] = None
        self.completed_at: Optional[datetime] = None
        self.cancel_token = CancellationToken()
        self.future: Optional[Future] = None
        self.cleanup_dir = cleanup_dir

    def to_dict(self, filter_query: Optional[str] = None) -> Dict[str, Any]:
        """
        Convert job to dictionary.

        Args:
            filter_query: Optional text filter applied to the result's diffs
        """
        result = None
        if self.result is not None:
            diffs = filter_diffs(self.result.diffs, filter_query)
            result = {
                "total": len(diffs),
                "diffs": [d.to_dict() for d in diffs],
                "summary": [s.to_dict() for s in summarize_by_sheet(diffs)],
            }

        return {
            "job_id": self.job_id,
            "status": self.status.value,
            "progress": self.progress,
            "message": self.message,
            "result": result,
            "error": self.error,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }


class JobQueue:
    """
    Thread-based comparison queue.

    Job records live in memory and are guarded by a lock; workers update
    them through the engine's progress callback.
    """

    def __init__(self, max_workers: int = 4, comparer: Optional[WorkbookComparer] = None):
        self.max_workers = max_workers
        self.executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="xlcompare-job")
        self.comparer = comparer or WorkbookComparer()
        self._jobs: Dict[str, Job] = {}
        self._lock = threading.Lock()
        logger.info(f"JobQueue initialised with {max_workers} thread workers")

    def _update(self, job: Job, **changes: Any) -> None:
        with self._lock:
            for key, value in changes.items():
                setattr(job, key, value)

    def _finish(self, job: Job, status: JobStatus, **changes: Any) -> None:
        self._update(job, status=status, completed_at=datetime.now(timezone.utc), **changes)
        self._remove_cleanup_dir(job)

    def _remove_cleanup_dir(self, job: Job) -> None:
        if job.cleanup_dir is None:
            return
        try:
            shutil.rmtree(job.cleanup_dir)
            logger.debug(f"Removed job directory {job.cleanup_dir}")
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove job directory {job.cleanup_dir}: {e}")

    def _task_wrapper(self, job_id: str, path_a: Path, path_b: Path) -> None:
        """
        Run one comparison and record its outcome on the job.
        This runs in a worker thread.
        """
        job = self._jobs[job_id]
        logger.info(f"Job {job_id} started")
        self._update(job, status=JobStatus.RUNNING, started_at=datetime.now(timezone.utc), message="Starting...")

        def on_progress(percent: int, message: str) -> None:
            self._update(job, progress=percent, message=message)

        try:
            result = self.comparer.compare(
                path_a, path_b,
                options=job.options,
                progress=on_progress,
                cancel_token=job.cancel_token,
            )
        except CancelledError as e:
            self._finish(job, JobStatus.CANCELLED, message=str(e))
            logger.info(f"Job {job_id} cancelled")
        except ComparisonError as e:
            self._finish(job, JobStatus.FAILED, error=str(e), message="Failed")
            logger.error(f"Job {job_id} failed: {e}")
        except Exception as e:
            logger.exception(f"Job {job_id} failed unexpectedly: {e}")
            self._finish(job, JobStatus.FAILED, error=f"Unexpected error: {e}", message="Failed")
        else:
            self._finish(job, JobStatus.SUCCESS, result=result, progress=100, message="Done.")
            logger.info(f"Job {job_id} completed with {len(result)} difference(s)")

    def submit_compare(
        self,
        path_a: Path,
        path_b: Path,
        options: Optional[ComparisonOptions] = None,
        cleanup_dir: Optional[Path] = None,
    ) -> str:
        """
        Queue a comparison of two workbooks.

        Args:
            path_a: "Before" workbook
            path_b: "After" workbook
            options: Comparison options (defaults if None)
            cleanup_dir: Directory removed once the job has finished

        Returns:
            job_id: Unique job identifier
        """
        job_id = str(uuid.uuid4())
        job = Job(job_id=job_id, options=options or ComparisonOptions(), cleanup_dir=cleanup_dir)

        with self._lock:
            self._jobs[job_id] = job

        job.future = self.executor.submit(self._task_wrapper, job_id, Path(path_a), Path(path_b))
        logger.info(f"Job {job_id} submitted ({Path(path_a).name} vs {Path(path_b).name})")
        return job_id

    def get_job(self, job_id: str) -> Optional[Job]:
        with self._lock:
            return self._jobs.get(job_id)

    def cancel_job(self, job_id: str) -> bool:
        """
        Request cancellation of a job.

        Returns:
            True if cancellation was requested, False if the job is unknown
            or already finished
        """
        job = self.get_job(job_id)
        if job is None or job.status.is_finished:
            return False

        job.cancel_token.cancel()
        logger.info(f"Cancellation requested for job {job_id}")

        # A job that never started will not run its wrapper
        if job.future is not None and job.future.cancel():
            self._finish(job, JobStatus.CANCELLED, message="Comparison cancelled")

        return True

    def wait(self, job_id: str, timeout: Optional[float] = None) -> Optional[Job]:
        """
        Block until a job finishes or the timeout expires.

        Returns:
            The job (check its status), or None if unknown
        """
        job = self.get_job(job_id)
        if job is None:
            return None
        if job.future is not None:
            wait_futures([job.future], timeout=timeout)
        return job

    def cleanup_old_jobs(self, ttl_seconds: int) -> int:
        """
        Forget finished jobs that completed more than ttl_seconds ago.

        Returns:
            Number of jobs cleaned up
        """
        cutoff = datetime.now(timezone.utc) - timedelta(seconds=ttl_seconds)

        with self._lock:
            expired = [
                job_id for job_id, job in self._jobs.items()
                if job.status.is_finished and job.completed_at is not None and job.completed_at < cutoff
            ]
            for job_id in expired:
                del self._jobs[job_id]

        logger.info(f"Cleaned up {len(expired)} old jobs")
        return len(expired)

    def shutdown(self, wait: bool = True) -> None:
        self.executor.shutdown(wait=wait)


_queue_instance: Optional[JobQueue] = None


def get_job_queue() -> JobQueue:
    """
    Get the process-wide job queue (singleton).

    Returns:
        JobQueue sized by WORKER_CONCURRENCY
    """
    global _queue_instance

    if _queue_instance is None:
        settings = get_settings()
        _queue_instance = JobQueue(max_workers=settings.WORKER_CONCURRENCY)

    return _queue_instance
