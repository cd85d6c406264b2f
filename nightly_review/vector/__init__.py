"""
Vector layer: embeddings, the namespaced index and the semantic change test.
"""

# Package initialization for vector module
from .index import IVectorIndex, SimpleInMemoryVectorIndex
from .types import VectorRecord, QueryResult
from .embeddings import IEmbeddingProvider, DeterministicHashEmbedding, SentenceTransformerEmbedding
from .diff import are_meaningfully_different, cosine_similarity

__all__ = [
    'IVectorIndex',
    'SimpleInMemoryVectorIndex',
    'VectorRecord',
    'QueryResult',
    'IEmbeddingProvider',
    'DeterministicHashEmbedding',
    'SentenceTransformerEmbedding',
    'are_meaningfully_different',
    'cosine_similarity'
]
