"""
FAISS-backed vector index.
One flat inner-product index per namespace over normalized vectors. Raw
vectors are kept alongside so fetch() can return the exact stored embedding.
With a db_path the records are written through to SQLite and each namespace
is rebuilt from there on first use, so the index survives across runs.
"""

from typing import Dict, List, Optional, Sequence, Set
import numpy as np

from .types import VectorRecord, QueryResult
from .index import IVectorIndex
from .sqlite_store import VectorTable
from ..util.logging import logger


class FaissVectorIndex(IVectorIndex):
    """FAISS-backed implementation of IVectorIndex."""

    def __init__(self, dimension: int = 384, db_path: Optional[str] = None):
        """
        Initialize FAISS vector index.

        Args:
            dimension: Dimension of the vectors (default: 384 for hash embeddings)
            db_path: SQLite file to persist records in; in-memory only when None
        """
        try:
            import faiss
        except ImportError as e:
            raise ImportError("FAISS not installed. Please install the faiss-cpu package.") from e

        self.faiss = faiss
        self.dimension = dimension
        self._records: Dict[str, Dict[str, VectorRecord]] = {}  # namespace -> id -> record
        self._indexes: Dict[str, object] = {}                   # namespace -> faiss index
        self._positions: Dict[str, List[str]] = {}              # namespace -> ids in index order
        self._loaded: Set[str] = set()
        self.table = VectorTable(db_path) if db_path is not None else None

    def _normalized(self, vector: Sequence[float]) -> Optional[np.ndarray]:
        array = np.asarray(vector, dtype=np.float32)
        norm = np.linalg.norm(array)
        if norm == 0:  # Zero vectors cannot be ranked by cosine similarity
            return None
        return (array / norm).reshape(1, -1)

    def _rebuild(self, namespace: str) -> None:
        index = self.faiss.IndexFlatIP(self.dimension)
        positions = []
        for record_id, record in self._records.get(namespace, {}).items():
            normalized = self._normalized(record.vector)
            if normalized is None:
                continue
            index.add(normalized)
            positions.append(record_id)
        self._indexes[namespace] = index
        self._positions[namespace] = positions

    def _ensure_loaded(self, namespace: str) -> None:
        if self.table is None or namespace in self._loaded:
            return
        self._loaded.add(namespace)
        stored = [record for record in self.table.load(namespace) if len(record.vector) == self.dimension]
        if stored:
            records = self._records.setdefault(namespace, {})
            for record in stored:
                records.setdefault(record.id, record)
            self._rebuild(namespace)

    def upsert(self, namespace: str, record: VectorRecord) -> bool:
        if record.vector is None or len(record.vector) == 0:
            return False

        if len(record.vector) != self.dimension:
            logger.log_vector_operation("upsert", record.id, {
                "namespace": namespace,
                "error": f"dimension {len(record.vector)} != {self.dimension}"
            }, status="failed")
            return False

        self._ensure_loaded(namespace)
        if self.table is not None and not self.table.save(namespace, record):
            return False

        records = self._records.setdefault(namespace, {})
        existed = record.id in records
        records[record.id] = record

        if existed or namespace not in self._indexes:
            # Flat indexes have no in-place update, rebuild the namespace
            self._rebuild(namespace)
            return True

        normalized = self._normalized(record.vector)
        if normalized is not None:
            self._indexes[namespace].add(normalized)
            self._positions[namespace].append(record.id)
        return True

    def query(self, namespace: str, vector: Sequence[float], top_k: int = 5,
              min_score: float = 0.0) -> List[QueryResult]:
        self._ensure_loaded(namespace)
        index = self._indexes.get(namespace)
        if index is None or not index.ntotal:
            return []

        query_array = self._normalized(vector)
        if query_array is None or query_array.shape[1] != self.dimension:
            return []

        scores, indices = index.search(query_array, min(top_k, index.ntotal))

        query_results = []
        for score, position in zip(scores[0], indices[0]):
            if position < 0 or float(score) <= min_score:
                continue
            record_id = self._positions[namespace][position]
            record = self._records[namespace][record_id]
            query_results.append(QueryResult(id=record_id, score=float(score), metadata=record.metadata))

        return query_results

    def fetch(self, namespace: str, record_id: str) -> Optional[List[float]]:
        self._ensure_loaded(namespace)
        record = self._records.get(namespace, {}).get(record_id)
        if record is None or record.vector is None:
            return None
        return list(record.vector)

    def delete_namespace(self, namespace: str) -> None:
        if self.table is not None:
            self.table.delete(namespace)
            self._loaded.add(namespace)
        self._records.pop(namespace, None)
        self._indexes.pop(namespace, None)
        self._positions.pop(namespace, None)
