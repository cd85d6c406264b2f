"""
Prior chunk state: the durable map of (document_id, chunk_title) -> content hash.

A save replaces every row of one document and leaves other documents alone.
Read failures are reported as "no prior state"; write failures are logged
and swallowed so the run still completes.
"""

import sqlite3
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Dict, List

from .db import get_db, init_db
from .schema import PersistedHashEntry
from ..util.logging import logger


class IHashStore(ABC):
    """Abstract interface for the persisted chunk-hash table."""

    @abstractmethod
    def load_hashes(self, document_id: str) -> Dict[str, str]:
        """Return {chunk_title: content_hash} for a document; empty when unknown."""
        pass

    @abstractmethod
    def save_hashes(self, document_id: str, hashes: Dict[str, str]) -> None:
        """Replace the stored hashes of one document with the given map."""
        pass

    @abstractmethod
    def list_entries(self, document_id: str) -> List[PersistedHashEntry]:
        """List the stored rows of one document."""
        pass

    @abstractmethod
    def clear(self, document_id: str) -> None:
        """Remove all stored rows of one document."""
        pass


class InMemoryHashStore(IHashStore):
    """Dictionary-backed store for tests and throwaway runs."""

    def __init__(self):
        self._entries: Dict[str, Dict[str, PersistedHashEntry]] = {}

    def load_hashes(self, document_id: str) -> Dict[str, str]:
        rows = self._entries.get(document_id, {})
        return {title: entry.content_hash for title, entry in rows.items()}

    def save_hashes(self, document_id: str, hashes: Dict[str, str]) -> None:
        now = datetime.now(timezone.utc)
        self._entries[document_id] = {
            title: PersistedHashEntry(document_id, title, content_hash, now)
            for title, content_hash in hashes.items()
        }

    def list_entries(self, document_id: str) -> List[PersistedHashEntry]:
        return list(self._entries.get(document_id, {}).values())

    def clear(self, document_id: str) -> None:
        self._entries.pop(document_id, None)


class SqliteHashStore(IHashStore):
    """SQLite-backed store; one table shared by every document."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        init_db(db_path)

    def load_hashes(self, document_id: str) -> Dict[str, str]:
        try:
            with get_db(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute(
                    "SELECT chunk_title, content_hash FROM chunk_hashes WHERE doc_id = ?",
                    (document_id,)
                )
                hashes = {title: content_hash for title, content_hash in cursor.fetchall() if title}
        except sqlite3.Error as e:
            logger.log_provider_call("hash_store", "load", "failed",
                                     {"document_id": document_id, "error": str(e)})
            return {}

        logger.log_provider_call("hash_store", "load", "success",
                                 {"document_id": document_id, "count": len(hashes)})
        return hashes

    def save_hashes(self, document_id: str, hashes: Dict[str, str]) -> None:
        timestamp = datetime.now(timezone.utc).isoformat()
        rows = [(document_id, title, content_hash, timestamp) for title, content_hash in hashes.items()]

        try:
            with get_db(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute("DELETE FROM chunk_hashes WHERE doc_id = ?", (document_id,))
                cursor.executemany(
                    "INSERT INTO chunk_hashes (doc_id, chunk_title, content_hash, updated_at) VALUES (?, ?, ?, ?)",
                    rows
                )
                conn.commit()
        except sqlite3.Error as e:
            # Next run will re-process chunks against stale hashes
            logger.log_provider_call("hash_store", "save", "failed",
                                     {"document_id": document_id, "error": str(e)})
            return

        logger.log_provider_call("hash_store", "save", "success",
                                 {"document_id": document_id, "count": len(rows)})

    def list_entries(self, document_id: str) -> List[PersistedHashEntry]:
        try:
            with get_db(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute(
                    "SELECT doc_id, chunk_title, content_hash, updated_at FROM chunk_hashes "
                    "WHERE doc_id = ? ORDER BY chunk_title",
                    (document_id,)
                )
                rows = cursor.fetchall()
        except sqlite3.Error as e:
            logger.error(f"Failed to list hashes for document '{document_id}': {e}")
            return []

        return [
            PersistedHashEntry(
                document_id=doc_id,
                chunk_title=title,
                content_hash=content_hash,
                timestamp=datetime.fromisoformat(updated_at)
            )
            for doc_id, title, content_hash, updated_at in rows
        ]

    def clear(self, document_id: str) -> None:
        try:
            with get_db(self.db_path) as conn:
                conn.execute("DELETE FROM chunk_hashes WHERE doc_id = ?", (document_id,))
                conn.commit()
        except sqlite3.Error as e:
            logger.error(f"Failed to clear hashes for document '{document_id}': {e}")
