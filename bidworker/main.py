from bidworker.config.settings import Settings
from bidworker.database.connection import close_pool, init_pool
from bidworker.database.repositories.job_repository import JobRepository
from bidworker.logging.logger import Log
from bidworker.processor.processor import build_processor
from bidworker.worker.job_runner import JobRunner
from bidworker.worker.worker import Worker


def main() -> None:
    """Entry point: build dependencies -> open pool -> start worker loop."""
    settings = Settings()
    Log.configure(settings.log_level)
    processor = build_processor(settings)
    init_pool(settings)

    try:
        job_repo = JobRepository(settings.max_job_attempts)
        job_runner = JobRunner(processor, job_repo, settings)
        worker = Worker(job_repo, job_runner, settings)
        worker.run()
    finally:
        close_pool()


if __name__ == "__main__":
    main()
