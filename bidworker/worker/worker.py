import time

from bidworker.config.settings import Settings
from bidworker.database.connection import get_connection
from bidworker.database.models import JobRecord
from bidworker.database.repositories.job_repository import JobRepository
from bidworker.logging.logger import Log
from bidworker.worker.job_runner import JobRunner


class Worker:
    """Poll loop: claim -> dispatch, sleeping while the queue is empty."""

    def __init__(
        self,
        job_repo: JobRepository,
        job_runner: JobRunner,
        settings: Settings,
    ) -> None:
        self._job_repo = job_repo
        self._job_runner = job_runner
        self._poll_interval = settings.job_poll_interval_seconds

    def run(self, max_jobs: int | None = None) -> int:
        """Poll until interrupted, or until ``max_jobs`` jobs have run.

        Returns:
            Number of jobs dispatched.
        """
        Log.info("Worker started, polling for bid extraction jobs")
        jobs_done = 0
        try:
            while max_jobs is None or jobs_done < max_jobs:
                job = self._try_claim_job()
                if job is None:
                    Log.debug("No jobs available, sleeping")
                    time.sleep(self._poll_interval)
                    continue
                self._job_runner.run(job)
                jobs_done += 1
        except KeyboardInterrupt:
            Log.info("Worker shutting down gracefully")
        return jobs_done

    def _try_claim_job(self) -> JobRecord | None:
        """Claim the next pending job; database errors mean "try again later"."""
        try:
            with get_connection() as conn:
                return self._job_repo.claim_next_job(conn)
        except Exception as exc:
            Log.warning(f"Database error, will retry: {exc}")
            return None
