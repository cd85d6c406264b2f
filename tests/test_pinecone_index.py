"""
Pinecone adapter tests; HTTP is patched out.
"""

import pytest
import requests
from unittest.mock import MagicMock, patch

from nightly_review.core.config import PineconeSettings
from nightly_review.vector.pinecone_store import PineconeVectorIndex
from nightly_review.vector.types import VectorRecord


def response(status=200, body=None):
    mock_response = MagicMock(status_code=status)
    mock_response.json.return_value = body if body is not None else {}
    return mock_response


@pytest.fixture
def index():
    return PineconeVectorIndex(PineconeSettings(api_key="pc-key", index_host="https://idx.svc.pinecone.io/"))


def test_host_scheme_is_stripped():
    assert PineconeSettings(index_host="https://idx.pinecone.io/").index_host == "idx.pinecone.io"
    assert PineconeSettings(index_host="idx.pinecone.io").index_host == "idx.pinecone.io"


def test_upsert_success(index):
    with patch("nightly_review.util.http.requests.request",
               return_value=response(200, {"upsertedCount": 1})) as mock_request:
        ok = index.upsert("doc-1", VectorRecord(id="h2", vector=[0.1, 0.2], metadata={"title": "Status"}))

    assert ok is True
    args, kwargs = mock_request.call_args
    assert args == ("POST", "https://idx.svc.pinecone.io/vectors/upsert")
    assert kwargs["headers"]["Api-Key"] == "pc-key"
    assert kwargs["json"] == {
        "namespace": "doc-1",
        "vectors": [{"id": "h2", "values": [0.1, 0.2], "metadata": {"title": "Status"}}],
    }


def test_upsert_requires_upserted_count_one(index):
    with patch("nightly_review.util.http.requests.request", return_value=response(200, {"upsertedCount": 0})):
        assert index.upsert("doc-1", VectorRecord(id="h2", vector=[0.1])) is False
    with patch("nightly_review.util.http.requests.request", return_value=response(500, {"message": "err"})):
        assert index.upsert("doc-1", VectorRecord(id="h2", vector=[0.1])) is False


def test_query_filters_and_sorts(index):
    body = {"matches": [
        {"id": "a", "score": 0.75, "metadata": {"title": "A"}},
        {"id": "b", "score": 0.95, "metadata": {"title": "B"}},
        {"id": "c", "score": 0.7, "metadata": {"title": "C"}},
    ]}
    with patch("nightly_review.util.http.requests.request", return_value=response(200, body)) as mock_request:
        results = index.query("doc-1", [0.1, 0.2], top_k=5, min_score=0.7)

    assert [result.id for result in results] == ["b", "a"]
    assert results[0].metadata == {"title": "B"}
    assert mock_request.call_args.kwargs["json"]["topK"] == 5
    assert mock_request.call_args.kwargs["json"]["includeMetadata"] is True


def test_fetch_returns_values(index):
    body = {"vectors": {"h1": {"id": "h1", "values": [0.5, 0.5]}}}
    with patch("nightly_review.util.http.requests.request", return_value=response(200, body)) as mock_request:
        assert index.fetch("doc-1", "h1") == [0.5, 0.5]

    args, kwargs = mock_request.call_args
    assert args == ("GET", "https://idx.svc.pinecone.io/vectors/fetch")
    assert kwargs["params"] == {"namespace": "doc-1", "ids": "h1"}


def test_fetch_missing_vector(index):
    with patch("nightly_review.util.http.requests.request", return_value=response(200, {"vectors": {}})):
        assert index.fetch("doc-1", "h1") is None


def test_transport_error_is_not_raised(index):
    with patch("nightly_review.util.http.requests.request",
               side_effect=requests.ConnectionError("down")):
        assert index.fetch("doc-1", "h1") is None
        assert index.query("doc-1", [0.1]) == []
        assert index.upsert("doc-1", VectorRecord(id="h1", vector=[0.1])) is False


def test_invalid_json_is_not_raised(index):
    bad = MagicMock(status_code=200)
    bad.json.side_effect = ValueError("not json")
    with patch("nightly_review.util.http.requests.request", return_value=bad):
        assert index.fetch("doc-1", "h1") is None


def test_missing_config_returns_sentinels():
    index = PineconeVectorIndex(PineconeSettings())
    with patch("nightly_review.util.http.requests.request") as mock_request:
        assert index.fetch("doc-1", "h1") is None
        assert index.query("doc-1", [0.1]) == []
        assert index.upsert("doc-1", VectorRecord(id="h1", vector=[0.1])) is False
        mock_request.assert_not_called()
