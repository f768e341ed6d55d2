from __future__ import annotations

import logging

from sqlalchemy import text
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

# Columns added after the first schema shipped; older SQLite files lack them.
LATE_COLUMNS = (
    ("users", "is_active", "is_active BOOLEAN NOT NULL DEFAULT 1"),
    ("jobs", "resume_id", "resume_id INTEGER REFERENCES resumes(id) ON DELETE SET NULL"),
    ("jobs", "additional_info", "additional_info TEXT"),
    ("jobs", "experience_level", "experience_level VARCHAR(50)"),
    ("jobs", "remote", "remote VARCHAR(50)"),
    ("resumes", "file_url", "file_url VARCHAR(1000)"),
    ("resumes", "download_count", "download_count INTEGER NOT NULL DEFAULT 0"),
    ("resumes", "raw_text", "raw_text TEXT"),
    ("resumes", "keywords", "keywords JSON"),
)


def _column_exists(conn, table_name: str, column_name: str) -> bool:
    rows = conn.execute(text(f"PRAGMA table_info('{table_name}')")).fetchall()
    return any(row[1] == column_name for row in rows)


def _add_column_if_missing(conn, table_name: str, column_name: str, column_sql: str) -> bool:
    if _column_exists(conn, table_name, column_name):
        return False
    conn.execute(text(f"ALTER TABLE {table_name} ADD COLUMN {column_sql}"))
    return True


def run_runtime_migrations(engine: Engine) -> list[str]:
    if engine.dialect.name != "sqlite":
        return []

    added: list[str] = []
    with engine.begin() as conn:
        for table_name, column_name, column_sql in LATE_COLUMNS:
            if _add_column_if_missing(conn, table_name, column_name, column_sql):
                added.append(f"{table_name}.{column_name}")

        conn.execute(text("UPDATE jobs SET priority = 'medium' WHERE priority IS NULL OR priority = ''"))
        conn.execute(text("UPDATE jobs SET status = NULL WHERE status = ''"))
        conn.execute(text("UPDATE resumes SET resume_type = 'general' WHERE resume_type IS NULL"))

    if added:
        logger.info("Added missing columns: %s", ", ".join(added))
    return added
