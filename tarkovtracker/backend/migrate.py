"""Create the documents table used by the PostgreSQL document store."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from tarkovtracker.backend.config import load_settings

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).with_name("db_schema.sql")
DOCUMENTS_TABLE = "documents"
DOCUMENT_COLUMNS = frozenset({"collection", "id", "data", "created_at", "updated_at"})


def apply_schema(conn: Any) -> None:
    """Run db_schema.sql and confirm the documents table has every column the store reads or writes.

    Nothing is committed when columns are missing, e.g. an older table that
    ``CREATE TABLE IF NOT EXISTS`` left in place.
    """
    schema_sql = SCHEMA_PATH.read_text(encoding="utf-8")
    with conn.cursor() as cur:
        cur.execute(schema_sql)
        cur.execute(
            """
            SELECT column_name
            FROM information_schema.columns
            WHERE table_name = %s
            """,
            (DOCUMENTS_TABLE,),
        )
        columns = {row[0] for row in cur.fetchall()}

    missing = sorted(DOCUMENT_COLUMNS - columns)
    if missing:
        raise RuntimeError(f"Table {DOCUMENTS_TABLE} is missing columns: {', '.join(missing)}")
    conn.commit()


def main() -> None:
    settings = load_settings()
    if not settings.database_url:
        raise RuntimeError("TARKOVTRACKER_DATABASE_URL is required for migration")

    import psycopg

    with psycopg.connect(settings.database_url) as conn:
        apply_schema(conn)
    logger.info("Table %s is ready", DOCUMENTS_TABLE)


if __name__ == "__main__":
    main()
