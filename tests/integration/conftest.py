import os
import uuid
from collections.abc import Generator
from typing import Any

import psycopg
import pytest

from customs_worker.config.settings import Settings
from customs_worker.database.connection import close_pool, get_connection, init_pool
from customs_worker.database.repositories.queue_job_repository import QueueJobRepository

SCHEMA = """
CREATE TABLE IF NOT EXISTS queue_jobs (
    id text PRIMARY KEY,
    type text NOT NULL,
    status text NOT NULL DEFAULT 'pending',
    document_id bigint,
    payload jsonb,
    attempts integer NOT NULL DEFAULT 0,
    error_message text,
    duration_ms integer,
    started_at timestamptz,
    completed_at timestamptz,
    created_at timestamptz NOT NULL DEFAULT NOW(),
    updated_at timestamptz NOT NULL DEFAULT NOW()
);
CREATE TABLE IF NOT EXISTS reference_data (
    id bigserial PRIMARY KEY,
    data_type text NOT NULL,
    title text,
    content text
);
"""


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "customs_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        with get_connection() as conn:
            conn.execute(SCHEMA)
            conn.commit()
    except Exception as e:
        close_pool()
        pytest.skip(
            f"PostgreSQL test DB not available: {e}. "
            "Set DB_* env to point at a disposable database"
        )
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
) -> Generator[list[tuple[str, str]], None, None]:
    cleanup: list[tuple[str, str]] = []
    yield cleanup
    if not cleanup:
        return
    with get_connection() as conn:
        with conn.cursor() as cur:
            for table, row_id in cleanup:
                if table == "queue_jobs":
                    cur.execute("DELETE FROM queue_jobs WHERE id = %s", (row_id,))
                elif table == "reference_data":
                    cur.execute("DELETE FROM reference_data WHERE id = %s", (int(row_id),))
        conn.commit()


@pytest.fixture
def seed_queue_job(integration_cleanup: list[tuple[str, str]]) -> str:
    job_id = str(uuid.uuid4())
    QueueJobRepository().record_queue_job_start(
        job_id=job_id,
        document_id=42,
        job_type="ocr",
        payload={"documentId": 42, "fileName": "1234.pdf"},
    )
    integration_cleanup.append(("queue_jobs", job_id))
    return job_id
