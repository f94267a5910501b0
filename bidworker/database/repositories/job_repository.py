from typing import Any

import psycopg
from psycopg.rows import dict_row

from bidworker.database.connection import get_connection
from bidworker.database.models import JobRecord


class JobRepository:
    """Database operations for the bid_extraction_jobs table."""

    def __init__(self, max_attempts: int) -> None:
        self._max_attempts = max_attempts

    def claim_next_job(self, conn: psycopg.Connection[Any]) -> JobRecord | None:
        """Claim the oldest pending job using SELECT FOR UPDATE SKIP LOCKED."""
        with conn.cursor(row_factory=dict_row) as cur:
            cur.execute(
                """
                SELECT id, bid_id, attempts
                FROM bid_extraction_jobs
                WHERE status = 'pending'
                  AND attempts < %s
                ORDER BY created_at
                LIMIT 1
                FOR UPDATE SKIP LOCKED
                """,
                (self._max_attempts,),
            )
            row = cur.fetchone()

        if row is None:
            conn.rollback()
            return None

        conn.execute(
            """
            UPDATE bid_extraction_jobs
            SET status = 'processing', locked_at = NOW(), updated_at = NOW()
            WHERE id = %s
            """,
            (row["id"],),
        )
        conn.commit()

        return JobRecord(
            id=row["id"],
            bid_id=row["bid_id"],
            status="processing",
            attempts=row["attempts"],
        )

    def mark_done(self, job_id: int) -> None:
        self._set_status(job_id, "done")

    def mark_failed(self, job_id: int, error: str) -> None:
        """Mark a job as permanently failed, keeping the last error."""
        self._set_status(job_id, "failed", error)

    def increment_attempts(self, job_id: int) -> None:
        """Count a failed attempt and return the job to the queue."""
        with get_connection() as conn:
            conn.execute(
                """
                UPDATE bid_extraction_jobs
                SET attempts = attempts + 1, status = 'pending',
                    locked_at = NULL, updated_at = NOW()
                WHERE id = %s
                """,
                (job_id,),
            )
            conn.commit()

    def find_by_id(self, job_id: int) -> JobRecord | None:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, bid_id, status, attempts,
                           error_message, locked_at, created_at, updated_at
                    FROM bid_extraction_jobs
                    WHERE id = %s
                    """,
                    (job_id,),
                )
                row = cur.fetchone()

        if row is None:
            return None
        return JobRecord(**row)

    def _set_status(self, job_id: int, status: str, error: str | None = None) -> None:
        with get_connection() as conn:
            conn.execute(
                """
                UPDATE bid_extraction_jobs
                SET status = %s, error_message = COALESCE(%s, error_message),
                    updated_at = NOW()
                WHERE id = %s
                """,
                (status, error, job_id),
            )
            conn.commit()
