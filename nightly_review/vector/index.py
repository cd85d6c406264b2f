"""
Namespaced vector index interface and its in-memory implementation.
Each document owns one namespace; ids inside a namespace are content hashes.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence
import numpy as np

from .types import VectorRecord, QueryResult


class IVectorIndex(ABC):
    """Abstract interface for namespaced vector storage operations."""

    @abstractmethod
    def upsert(self, namespace: str, record: VectorRecord) -> bool:
        """Insert or replace a record; returns False when the write failed."""
        pass

    @abstractmethod
    def query(self, namespace: str, vector: Sequence[float], top_k: int = 5,
              min_score: float = 0.0) -> List[QueryResult]:
        """Return up to top_k records scoring strictly above min_score, best first."""
        pass

    @abstractmethod
    def fetch(self, namespace: str, record_id: str) -> Optional[List[float]]:
        """Return the stored vector for an id, or None when absent."""
        pass

    @abstractmethod
    def delete_namespace(self, namespace: str) -> None:
        """Drop every record of a namespace."""
        pass


class SimpleInMemoryVectorIndex(IVectorIndex):
    """Simple in-memory implementation of IVectorIndex using cosine similarity."""

    def __init__(self):
        self._vectors: Dict[str, Dict[str, VectorRecord]] = {}  # namespace -> id -> record
        self._index: Dict[str, Dict[str, np.ndarray]] = {}      # namespace -> id -> normalized vector

    def upsert(self, namespace: str, record: VectorRecord) -> bool:
        if record.vector is None or len(record.vector) == 0:
            return False

        vector = np.asarray(record.vector, dtype=float)
        self._vectors.setdefault(namespace, {})[record.id] = record

        # Store normalized vector for similarity calculations
        norm = np.linalg.norm(vector)
        self._index.setdefault(namespace, {})[record.id] = vector / norm if norm > 0 else vector
        return True

    def query(self, namespace: str, vector: Sequence[float], top_k: int = 5,
              min_score: float = 0.0) -> List[QueryResult]:
        index = self._index.get(namespace)
        if not index:
            return []

        query_vector = np.asarray(vector, dtype=float)
        norm = np.linalg.norm(query_vector)
        if norm == 0:
            # Return empty results if query vector is zero
            return []
        normalized_query = query_vector / norm

        similarities = {}
        for record_id, stored_vector in index.items():
            if stored_vector.shape != normalized_query.shape:
                continue
            similarities[record_id] = float(np.dot(normalized_query, stored_vector))

        sorted_results = sorted(similarities.items(), key=lambda x: x[1], reverse=True)

        query_results = []
        for record_id, score in sorted_results:
            if score <= min_score:
                continue
            original_record = self._vectors[namespace][record_id]
            query_results.append(QueryResult(id=record_id, score=score, metadata=original_record.metadata))
            if len(query_results) >= top_k:
                break

        return query_results

    def fetch(self, namespace: str, record_id: str) -> Optional[List[float]]:
        record = self._vectors.get(namespace, {}).get(record_id)
        if record is None or record.vector is None:
            return None
        return list(record.vector)

    def delete_namespace(self, namespace: str) -> None:
        self._vectors.pop(namespace, None)
        self._index.pop(namespace, None)
