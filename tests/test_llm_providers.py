"""
Completion and remote embedding provider tests; network calls are patched.
"""

import pytest
import requests
from unittest.mock import MagicMock, patch

import httpx
import ollama

from nightly_review.core.config import OpenAISettings
from nightly_review.llm.completion import ICompletionProvider, MockCompletionProvider
from nightly_review.llm.ollama_client import OllamaCompletionProvider, check_ollama_health
from nightly_review.llm.openai_client import OpenAICompletionProvider, OpenAIEmbeddingProvider
from nightly_review.core.response_parser import parse_ai_response


def response(status=200, body=None):
    mock_response = MagicMock(status_code=status)
    mock_response.json.return_value = body if body is not None else {}
    return mock_response


class TestMockCompletionProvider:
    def test_default_response_is_parseable(self):
        provider = MockCompletionProvider()
        text = provider.complete("...\nNew Content:\nShipped v2\n---")

        assert isinstance(provider, ICompletionProvider)
        parsed = parse_ai_response(text)
        assert parsed["summary"] == "- Updated: Shipped v2"
        assert parsed["actions"] == "No action items."

    def test_fixed_response_and_call_log(self):
        provider = MockCompletionProvider(response="Summary of Changes:\n- x")
        assert provider.complete("prompt", system_message="sys", temperature=0.1) == "Summary of Changes:\n- x"
        assert provider.calls == [("prompt", "sys", 0.1)]


class TestOpenAICompletionProvider:
    def test_success(self):
        provider = OpenAICompletionProvider(OpenAISettings(api_key="sk-test"))
        body = {"choices": [{"message": {"content": "Summary of Changes:\n- ok"}}]}
        with patch("nightly_review.util.http.requests.request", return_value=response(200, body)) as mock_request:
            result = provider.complete("prompt", system_message="sys")

        assert result == "Summary of Changes:\n- ok"
        args, kwargs = mock_request.call_args
        assert args == ("POST", "https://api.openai.com/v1/chat/completions")
        assert kwargs["headers"]["Authorization"] == "Bearer sk-test"
        assert kwargs["json"]["model"] == "gpt-3.5-turbo"
        assert kwargs["json"]["temperature"] == 0.3
        assert kwargs["json"]["messages"] == [
            {"role": "system", "content": "sys"},
            {"role": "user", "content": "prompt"},
        ]

    def test_missing_key_returns_none_without_request(self):
        provider = OpenAICompletionProvider(OpenAISettings())
        with patch("nightly_review.util.http.requests.request") as mock_request:
            assert provider.complete("prompt") is None
            mock_request.assert_not_called()

    @pytest.mark.parametrize("status,body", [
        (500, {"error": {"message": "server"}}),
        (200, {"error": {"message": "quota"}}),
        (200, {"choices": []}),
        (200, {"choices": [{"message": {"content": "  "}}]}),
    ])
    def test_failures_return_none(self, status, body):
        provider = OpenAICompletionProvider(OpenAISettings(api_key="sk-test"))
        with patch("nightly_review.util.http.requests.request", return_value=response(status, body)):
            assert provider.complete("prompt") is None

    def test_timeout_returns_none(self):
        provider = OpenAICompletionProvider(OpenAISettings(api_key="sk-test"), timeout=1.0)
        with patch("nightly_review.util.http.requests.request", side_effect=requests.Timeout("slow")):
            assert provider.complete("prompt") is None


class TestOpenAIEmbeddingProvider:
    def test_success(self):
        provider = OpenAIEmbeddingProvider(OpenAISettings(api_key="sk-test"))
        body = {"data": [{"embedding": [0.1, 0.2, 0.3]}]}
        with patch("nightly_review.util.http.requests.request", return_value=response(200, body)) as mock_request:
            assert provider.embed_text("hello") == [0.1, 0.2, 0.3]

        assert mock_request.call_args.kwargs["json"] == {"model": "text-embedding-3-small", "input": "hello"}
        assert provider.get_dimension() == 3

    def test_over_budget_is_rejected_without_request(self):
        provider = OpenAIEmbeddingProvider(OpenAISettings(api_key="sk-test"), max_tokens=2)
        with patch("nightly_review.util.http.requests.request") as mock_request:
            assert provider.embed_text("x" * 9) is None
            mock_request.assert_not_called()

    @pytest.mark.parametrize("status,body", [
        (401, {"error": "bad key"}),
        (200, {"data": []}),
        (200, {"unexpected": True}),
    ])
    def test_failures_return_none(self, status, body):
        provider = OpenAIEmbeddingProvider(OpenAISettings(api_key="sk-test"))
        with patch("nightly_review.util.http.requests.request", return_value=response(status, body)):
            assert provider.embed_text("hello") is None

    def test_missing_key_returns_none(self):
        assert OpenAIEmbeddingProvider(OpenAISettings()).embed_text("hello") is None


class TestOllamaCompletionProvider:
    def test_success(self):
        provider = OllamaCompletionProvider("llama3")
        with patch("nightly_review.llm.ollama_client.ollama.chat",
                   return_value={"message": {"content": "Summary of Changes:\n- ok"}}) as mock_chat:
            assert provider.complete("prompt", system_message="sys", temperature=0.2) == "Summary of Changes:\n- ok"

        kwargs = mock_chat.call_args.kwargs
        assert kwargs["model"] == "llama3"
        assert kwargs["messages"] == [{"role": "system", "content": "sys"}, {"role": "user", "content": "prompt"}]
        assert kwargs["options"] == {"temperature": 0.2}

    def test_response_error_returns_none(self):
        provider = OllamaCompletionProvider("llama3")
        with patch("nightly_review.llm.ollama_client.ollama.chat",
                   side_effect=ollama.ResponseError("model not found")):
            assert provider.complete("prompt") is None

    def test_empty_content_returns_none(self):
        provider = OllamaCompletionProvider("llama3")
        with patch("nightly_review.llm.ollama_client.ollama.chat", return_value={"message": {"content": ""}}):
            assert provider.complete("prompt") is None

    @pytest.mark.parametrize("error", [
        ConnectionError("Failed to connect to Ollama"),
        httpx.ReadTimeout("timed out"),
    ])
    def test_transport_errors_return_none(self, error):
        provider = OllamaCompletionProvider("llama3")
        with patch("nightly_review.llm.ollama_client.ollama.chat", side_effect=error):
            assert provider.complete("prompt") is None

    def test_programming_errors_propagate(self):
        provider = OllamaCompletionProvider("llama3")
        with patch("nightly_review.llm.ollama_client.ollama.chat", side_effect=TypeError("bad argument")):
            with pytest.raises(TypeError):
                provider.complete("prompt")


def test_ollama_health_check():
    with patch("nightly_review.llm.ollama_client.ollama.list", return_value={"models": []}):
        assert check_ollama_health() is True
    with patch("nightly_review.llm.ollama_client.ollama.list", side_effect=ConnectionError("refused")):
        assert check_ollama_health() is False
