"""
Embedding provider tests.
"""

import pytest
from unittest.mock import MagicMock, patch

from nightly_review.vector.embeddings import (
    DeterministicHashEmbedding, IEmbeddingProvider, SentenceTransformerEmbedding, estimate_tokens
)


def test_embedding_interface():
    """Test that the embedding provider implements the interface correctly."""
    embedder = DeterministicHashEmbedding(dimension=384)

    assert isinstance(embedder, IEmbeddingProvider)
    assert embedder.get_dimension() == 384


def test_deterministic_embedding():
    """Test that the same input always produces the same output."""
    embedder = DeterministicHashEmbedding(dimension=384)

    vector1 = embedder.embed_text("Hello, world!")
    vector2 = DeterministicHashEmbedding(dimension=384).embed_text("Hello, world!")

    assert vector1 == vector2
    assert len(vector1) == 384
    assert all(-1.0 <= value <= 1.0 for value in vector1)


def test_different_inputs_produce_different_vectors():
    embedder = DeterministicHashEmbedding(dimension=384)
    assert embedder.embed_text("Hello, world!") != embedder.embed_text("Goodbye, world!")


@pytest.mark.parametrize("dimension", [8, 64, 100, 1536])
def test_embedding_with_different_dimensions(dimension):
    embedder = DeterministicHashEmbedding(dimension=dimension)
    assert len(embedder.embed_text("dimension test")) == dimension


def test_estimate_tokens():
    assert estimate_tokens("") == 0
    assert estimate_tokens("abcd") == 1
    assert estimate_tokens("abcde") == 2


def test_empty_text_is_rejected():
    embedder = DeterministicHashEmbedding(dimension=16)
    assert embedder.embed_text("") is None
    assert embedder.embed_text(None) is None


def test_text_over_token_ceiling_is_rejected():
    embedder = DeterministicHashEmbedding(dimension=16, max_tokens=10)
    assert embedder.embed_text("x" * 40) is not None  # exactly 10 tokens
    assert embedder.embed_text("x" * 41) is None


def test_provider_exception_returns_none():
    embedder = DeterministicHashEmbedding(dimension=16)
    with patch.object(embedder, "_embed", side_effect=RuntimeError("boom")):
        assert embedder.embed_text("hello") is None


def test_sentence_transformer_uses_model():
    embedder = SentenceTransformerEmbedding("all-MiniLM-L6-v2")
    mock_model = MagicMock()
    mock_model.encode.return_value = MagicMock(tolist=lambda: [0.1, 0.2, 0.3])
    mock_model.get_sentence_embedding_dimension.return_value = 3
    embedder._model = mock_model

    assert embedder.embed_text("hello") == [0.1, 0.2, 0.3]
    assert embedder.get_dimension() == 3
    mock_model.encode.assert_called_once_with("hello", convert_to_tensor=False)
