"""
SQLite access for the persisted chunk-hash and chunk-vector tables.
"""

import sqlite3
from contextlib import contextmanager
from typing import Generator


@contextmanager
def get_db(db_path: str) -> Generator[sqlite3.Connection, None, None]:
    """Get a SQLite database connection."""
    conn = sqlite3.connect(db_path)
    try:
        yield conn
    finally:
        conn.close()


def init_db(db_path: str):
    """Initialize the database with required tables."""
    with get_db(db_path) as conn:
        cursor = conn.cursor()

        # One live row per (doc_id, chunk_title)
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS chunk_hashes (
                doc_id TEXT NOT NULL,
                chunk_title TEXT NOT NULL,
                content_hash TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                PRIMARY KEY (doc_id, chunk_title)
            )
        ''')

        # Embeddings keyed by namespace and content hash, vector stored as JSON
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS chunk_vectors (
                namespace TEXT NOT NULL,
                record_id TEXT NOT NULL,
                vector TEXT NOT NULL,
                metadata TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                PRIMARY KEY (namespace, record_id)
            )
        ''')

        conn.commit()


def health_check(db_path: str) -> bool:
    """Check database health."""
    try:
        with get_db(db_path) as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT name FROM sqlite_master WHERE type='table';")
            table_names = [table[0] for table in cursor.fetchall()]
            return {'chunk_hashes', 'chunk_vectors'}.issubset(table_names)
    except sqlite3.Error:
        return False
