"""
Embedding providers.
embed_text() never raises: empty or over-budget text and provider failures
all come back as None.
"""

import hashlib
import math
from abc import ABC, abstractmethod
from typing import List, Optional

from ..util.logging import logger

DEFAULT_MAX_TOKENS = 8192


def estimate_tokens(text: str) -> int:
    """Rough token estimate: one token per four characters."""
    return math.ceil(len(text or "") / 4)


class IEmbeddingProvider(ABC):
    """Abstract interface for embedding providers."""

    name = "embedding"

    def __init__(self, max_tokens: int = DEFAULT_MAX_TOKENS):
        self.max_tokens = max_tokens

    def embed_text(self, text: str) -> Optional[List[float]]:
        """
        Generate an embedding vector for text.

        Args:
            text: Content to embed

        Returns:
            The vector, or None when the text is empty, exceeds the token
            ceiling, or the provider failed
        """
        approx_tokens = estimate_tokens(text)
        if not text or approx_tokens == 0:
            logger.log_provider_call(self.name, "embed", "skipped", {"reason": "empty text"})
            return None
        if approx_tokens > self.max_tokens:
            logger.log_provider_call(self.name, "embed", "skipped", {
                "reason": "chunk too large",
                "preview": text[:30] + "...",
                "approx_tokens": approx_tokens,
                "max_tokens": self.max_tokens
            })
            return None

        try:
            vector = self._embed(text)
        except Exception as e:
            logger.log_provider_call(self.name, "embed", "failed", {"error": str(e)})
            return None

        if vector is None or len(vector) == 0:
            logger.log_provider_call(self.name, "embed", "failed", {"error": "empty vector"})
            return None
        return [float(v) for v in vector]

    @abstractmethod
    def _embed(self, text: str) -> Optional[List[float]]:
        """Provider-specific embedding call."""
        pass

    @abstractmethod
    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        pass


class DeterministicHashEmbedding(IEmbeddingProvider):
    """Deterministic hash-based embedding provider for offline runs and tests.

    Identical text always maps to the same vector. Different text maps to
    unrelated vectors, so any edit counts as a meaningful change.
    """

    name = "hash_embedding"

    def __init__(self, dimension: int = 384, max_tokens: int = DEFAULT_MAX_TOKENS):
        super().__init__(max_tokens)
        self.dimension = dimension

    def _embed(self, text: str) -> List[float]:
        vector = []
        counter = 0
        while len(vector) < self.dimension:
            digest = hashlib.sha256(f"{counter}:{text}".encode("utf-8")).hexdigest()
            for i in range(0, len(digest), 8):
                value = int(digest[i:i + 8], 16)
                # Map to [-1, 1] for cosine similarity
                vector.append((value / 0xFFFFFFFF) * 2 - 1)
            counter += 1

        return vector[:self.dimension]

    def get_dimension(self) -> int:
        return self.dimension


class SentenceTransformerEmbedding(IEmbeddingProvider):
    """Sentence transformers embedding provider using pre-trained models."""

    name = "sentence_transformers"

    def __init__(self, model_name: str = "all-MiniLM-L6-v2", max_tokens: int = DEFAULT_MAX_TOKENS):
        super().__init__(max_tokens)
        self.model_name = model_name
        self._model = None
        self._dimension = None

    @property
    def model(self):
        if self._model is None:
            from sentence_transformers import SentenceTransformer
            self._model = SentenceTransformer(self.model_name)
        return self._model

    def _embed(self, text: str) -> List[float]:
        embedding = self.model.encode(text, convert_to_tensor=False)
        return embedding.tolist()

    def get_dimension(self) -> int:
        if self._dimension is None:
            self._dimension = self.model.get_sentence_embedding_dimension()
        return self._dimension
