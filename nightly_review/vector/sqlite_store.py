"""
SQLite-persisted vector storage.

VectorTable is the durable copy of every namespace; SqliteVectorIndex and
the FAISS index keep it as the source of truth and rebuild their in-memory
overlay from it the first time a namespace is touched in a process. This
is what lets a later run fetch the embedding a previous run stored.
"""

import json
import sqlite3
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from .index import SimpleInMemoryVectorIndex
from .types import QueryResult, VectorRecord
from ..core.db import get_db, init_db
from ..util.logging import logger


class VectorTable:
    """Rows of the chunk_vectors table, one per (namespace, record id)."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        init_db(db_path)

    def save(self, namespace: str, record: VectorRecord) -> bool:
        row = (
            namespace,
            record.id,
            json.dumps([float(value) for value in record.vector]),
            json.dumps(record.metadata, default=str),
            datetime.now(timezone.utc).isoformat(),
        )
        try:
            with get_db(self.db_path) as conn:
                conn.execute(
                    "INSERT OR REPLACE INTO chunk_vectors (namespace, record_id, vector, metadata, updated_at) "
                    "VALUES (?, ?, ?, ?, ?)",
                    row
                )
                conn.commit()
        except sqlite3.Error as e:
            logger.log_vector_operation("persist", record.id, {"namespace": namespace, "error": str(e)},
                                        status="failed")
            return False
        return True

    def load(self, namespace: str) -> List[VectorRecord]:
        try:
            with get_db(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute(
                    "SELECT record_id, vector, metadata FROM chunk_vectors WHERE namespace = ? ORDER BY rowid",
                    (namespace,)
                )
                rows = cursor.fetchall()
        except sqlite3.Error as e:
            logger.log_vector_operation("load", namespace, {"error": str(e)}, status="failed")
            return []

        return [
            VectorRecord(id=record_id, vector=json.loads(vector), metadata=json.loads(metadata))
            for record_id, vector, metadata in rows
        ]

    def delete(self, namespace: str) -> None:
        try:
            with get_db(self.db_path) as conn:
                conn.execute("DELETE FROM chunk_vectors WHERE namespace = ?", (namespace,))
                conn.commit()
        except sqlite3.Error as e:
            logger.error(f"Failed to delete vectors for namespace '{namespace}': {e}")


class SqliteVectorIndex(SimpleInMemoryVectorIndex):
    """Cosine-similarity index whose records survive across processes."""

    def __init__(self, db_path: str):
        super().__init__()
        self.table = VectorTable(db_path)
        self._loaded = set()

    def _ensure_loaded(self, namespace: str) -> None:
        if namespace in self._loaded:
            return
        self._loaded.add(namespace)
        for record in self.table.load(namespace):
            super().upsert(namespace, record)

    def upsert(self, namespace: str, record: VectorRecord) -> bool:
        if record.vector is None or len(record.vector) == 0:
            return False
        self._ensure_loaded(namespace)
        if not self.table.save(namespace, record):
            return False
        return super().upsert(namespace, record)

    def query(self, namespace: str, vector: Sequence[float], top_k: int = 5,
              min_score: float = 0.0) -> List[QueryResult]:
        self._ensure_loaded(namespace)
        return super().query(namespace, vector, top_k=top_k, min_score=min_score)

    def fetch(self, namespace: str, record_id: str) -> Optional[List[float]]:
        self._ensure_loaded(namespace)
        return super().fetch(namespace, record_id)

    def delete_namespace(self, namespace: str) -> None:
        self.table.delete(namespace)
        super().delete_namespace(namespace)
        self._loaded.add(namespace)
