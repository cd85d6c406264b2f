"""
Pinecone REST adapter for the vector index.
Every failure is logged and reported through the return value.
"""

from typing import List, Optional, Sequence

from .index import IVectorIndex
from .types import VectorRecord, QueryResult
from ..core.config import PineconeSettings
from ..core.errors import ConfigError, ParseError, RetrievalError
from ..util.http import dig, request_json
from ..util.logging import logger


class PineconeVectorIndex(IVectorIndex):
    """Pinecone data-plane client: upsert, query and fetch by id."""

    def __init__(self, settings: PineconeSettings, timeout: float = 30.0):
        self.settings = settings
        self.timeout = timeout

    def _endpoint(self, path: str) -> str:
        if not self.settings.index_host or not self.settings.api_key:
            raise ConfigError("PINECONE_INDEX_HOST or PINECONE_API_KEY is missing")
        return f"https://{self.settings.index_host}{path}"

    def _headers(self):
        return {"Api-Key": self.settings.api_key, "Content-Type": "application/json"}

    def upsert(self, namespace: str, record: VectorRecord) -> bool:
        if record.vector is None or len(record.vector) == 0:
            logger.log_vector_operation("upsert", record.id, {"namespace": namespace, "error": "no vector"},
                                        status="skipped")
            return False

        payload = {
            "namespace": namespace,
            "vectors": [{"id": record.id, "values": list(record.vector), "metadata": record.metadata}],
        }
        try:
            status, data = request_json("POST", self._endpoint("/vectors/upsert"), self._headers(),
                                        payload, timeout=self.timeout)
        except (ConfigError, RetrievalError, ParseError) as e:
            logger.log_vector_operation("upsert", record.id, {"namespace": namespace, "error": str(e)},
                                        status="failed")
            return False

        if status != 200 or dig(data, "upsertedCount") != 1:
            logger.log_vector_operation("upsert", record.id, {"namespace": namespace, "code": status,
                                                              "response": data}, status="failed")
            return False

        logger.log_vector_operation("upsert", record.id, {"namespace": namespace})
        return True

    def query(self, namespace: str, vector: Sequence[float], top_k: int = 5,
              min_score: float = 0.0) -> List[QueryResult]:
        payload = {
            "namespace": namespace,
            "vector": list(vector),
            "topK": top_k,
            "includeMetadata": True,
        }
        try:
            status, data = request_json("POST", self._endpoint("/query"), self._headers(),
                                        payload, timeout=self.timeout)
        except (ConfigError, RetrievalError, ParseError) as e:
            logger.log_vector_operation("query", namespace, {"error": str(e)}, status="failed")
            return []

        matches = dig(data, "matches")
        if status != 200 or not isinstance(matches, list):
            logger.log_vector_operation("query", namespace, {"code": status, "response": data}, status="failed")
            return []

        results = []
        for match in matches:
            score = match.get("score")
            if not isinstance(score, (int, float)) or score <= min_score:
                continue
            results.append(QueryResult(id=str(match.get("id")), score=float(score),
                                       metadata=match.get("metadata") or {}))
        results.sort(key=lambda r: r.score, reverse=True)
        return results[:top_k]

    def fetch(self, namespace: str, record_id: str) -> Optional[List[float]]:
        if not record_id:
            return None

        try:
            status, data = request_json("GET", self._endpoint("/vectors/fetch"), self._headers(),
                                        params={"namespace": namespace, "ids": record_id},
                                        timeout=self.timeout)
        except (ConfigError, RetrievalError, ParseError) as e:
            logger.log_vector_operation("fetch", record_id, {"namespace": namespace, "error": str(e)},
                                        status="failed")
            return None

        if status != 200:
            logger.log_vector_operation("fetch", record_id, {"namespace": namespace, "code": status},
                                        status="failed")
            return None

        values = dig(data, "vectors", record_id, "values")
        if not values:
            logger.log_vector_operation("fetch", record_id, {"namespace": namespace}, status="missing")
            return None

        logger.log_vector_operation("fetch", record_id, {"namespace": namespace})
        return list(values)

    def delete_namespace(self, namespace: str) -> None:
        try:
            status, data = request_json("POST", self._endpoint("/vectors/delete"), self._headers(),
                                        {"namespace": namespace, "deleteAll": True}, timeout=self.timeout)
        except (ConfigError, RetrievalError, ParseError) as e:
            logger.log_vector_operation("delete_namespace", namespace, {"error": str(e)}, status="failed")
            return

        if status != 200:
            logger.log_vector_operation("delete_namespace", namespace, {"code": status, "response": data},
                                        status="failed")
