from bidworker.config.settings import Settings
from bidworker.database.models import JobRecord
from bidworker.database.repositories.job_repository import JobRepository
from bidworker.logging.logger import Log
from bidworker.processor.processor import Processor


class JobRunner:
    """Run one extraction job and apply the retry policy.

    A job fails only on infrastructure errors. An extraction that comes back
    with success=False has still been stored on the bid and counts as done.
    """

    def __init__(
        self,
        processor: Processor,
        job_repo: JobRepository,
        settings: Settings,
    ) -> None:
        self._processor = processor
        self._job_repo = job_repo
        self._max_attempts = settings.max_job_attempts

    def run(self, job: JobRecord) -> None:
        attempt = job.attempts + 1
        Log.info(f"Running job {job.id} for bid {job.bid_id} (attempt {attempt})")
        try:
            result = self._processor.process(job.bid_id, job.id)
        except Exception as exc:
            self._handle_failure(job, exc)
            return
        self._job_repo.mark_done(job.id)
        Log.info(f"Job {job.id} done ({result.method}, {result.total_items} items)")

    def _handle_failure(self, job: JobRecord, exc: Exception) -> None:
        attempt = job.attempts + 1
        Log.error(f"Job {job.id} failed on attempt {attempt}: {exc}")
        if attempt >= self._max_attempts:
            self._job_repo.mark_failed(job.id, str(exc))
            Log.error(f"Job {job.id} permanently failed after {attempt} attempts")
        else:
            self._job_repo.increment_attempts(job.id)
            Log.warning(f"Job {job.id} returned to the queue")
