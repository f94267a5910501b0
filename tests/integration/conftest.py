import os
import uuid
from collections.abc import Generator
from pathlib import Path
from typing import Any

import psycopg
import pytest
from psycopg.rows import dict_row

from bidworker.config.settings import Settings
from bidworker.database.connection import close_pool, get_connection, init_pool
from bidworker.database.models import JobRecord

# Child tables first.
_CLEANUP_ORDER = ("bid_extraction_jobs", "price_catalog_items", "bids")


def _test_settings() -> Settings:
    return Settings(
        db_database=os.environ.get("DB_DATABASE", "bids_test"),
        llm_provider=os.environ.get("LLM_PROVIDER", "example"),
    )


def _choose_existing_owner_id(db_conn: psycopg.Connection[Any]) -> int:
    with db_conn.cursor() as cur:
        cur.execute("SELECT id FROM users ORDER BY id LIMIT 1")
        row = cur.fetchone()
    if row is None:
        pytest.skip("No users rows in DB for integration test setup")
    return int(row[0])


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
    except Exception as e:
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to run.")
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def integration_cleanup(
    integration_pool: None,
) -> Generator[list[tuple[str, int]], None, None]:
    cleanup: list[tuple[str, int]] = []
    yield cleanup
    if not cleanup:
        return
    with get_connection() as conn:
        with conn.cursor() as cur:
            for table in _CLEANUP_ORDER:
                for cleanup_table, row_id in cleanup:
                    if cleanup_table == table:
                        cur.execute(f"DELETE FROM {table} WHERE id = %s", (row_id,))
        conn.commit()


@pytest.fixture
def owner_id(db_conn: psycopg.Connection[Any]) -> int:
    return _choose_existing_owner_id(db_conn)


@pytest.fixture
def seed_bid(
    db_conn: psycopg.Connection[Any],
    integration_cleanup: list[tuple[str, int]],
    owner_id: int,
) -> tuple[int, str]:
    bid_uuid = str(uuid.uuid4())
    with db_conn.cursor() as cur:
        cur.execute(
            """
            INSERT INTO bids
            (owner_id, document_uuid, document_filename, document_mime_type, storage_disk)
            VALUES (%s, %s::uuid, %s, %s, %s)
            RETURNING id
            """,
            (owner_id, bid_uuid, "proposal.pdf", "application/pdf", "local"),
        )
        row = cur.fetchone()
        assert row is not None
        bid_id = row[0]
    db_conn.commit()
    integration_cleanup.append(("bids", bid_id))
    return (bid_id, bid_uuid)


@pytest.fixture
def seed_job(
    db_conn: psycopg.Connection[Any],
    integration_cleanup: list[tuple[str, int]],
    seed_bid: tuple[int, str],
) -> JobRecord:
    bid_id = seed_bid[0]
    with db_conn.cursor(row_factory=dict_row) as cur:
        cur.execute(
            """
            INSERT INTO bid_extraction_jobs (bid_id, status, attempts)
            VALUES (%s, 'pending', 0)
            RETURNING id
            """,
            (bid_id,),
        )
        row = cur.fetchone()
        assert row is not None
        job_id = row["id"]
    db_conn.commit()
    integration_cleanup.append(("bid_extraction_jobs", job_id))
    return JobRecord(id=job_id, bid_id=bid_id, status="pending", attempts=0)


@pytest.fixture
def seed_catalog_item(
    db_conn: psycopg.Connection[Any],
    integration_cleanup: list[tuple[str, int]],
    owner_id: int,
) -> int:
    with db_conn.cursor() as cur:
        cur.execute(
            """
            INSERT INTO price_catalog_items (owner_id, name, price, category)
            VALUES (%s, %s, %s, %s)
            RETURNING id
            """,
            (owner_id, "Drywall removal", "2.50", "wall"),
        )
        row = cur.fetchone()
        assert row is not None
        item_id = row[0]
    db_conn.commit()
    integration_cleanup.append(("price_catalog_items", item_id))
    return int(item_id)


@pytest.fixture
def files_root(tmp_path: Path) -> Path:
    return tmp_path


@pytest.fixture
def sample_pdf_on_disk(
    seed_bid: tuple[int, str],
    owner_id: int,
    files_root: Path,
    sample_pdf_bytes: bytes,
) -> tuple[int, str, Path]:
    bid_id, bid_uuid = seed_bid
    path = files_root / str(owner_id) / f"{bid_uuid}.pdf"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(sample_pdf_bytes)
    return (bid_id, bid_uuid, files_root)
