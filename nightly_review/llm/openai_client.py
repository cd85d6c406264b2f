"""
OpenAI REST adapters: chat completions and embeddings.
Missing credentials, transport errors, non-200 statuses and unexpected
response shapes are all logged and reported as None.
"""

from typing import List, Optional

from .completion import ICompletionProvider, DEFAULT_SYSTEM_MESSAGE, DEFAULT_TEMPERATURE
from ..core.config import OpenAISettings
from ..core.errors import ConfigError, ParseError, RetrievalError
from ..util.http import dig, request_json
from ..util.logging import logger
from ..vector.embeddings import IEmbeddingProvider, DEFAULT_MAX_TOKENS

OPENAI_API_BASE = "https://api.openai.com/v1"


def _auth_headers(settings: OpenAISettings):
    if not settings.api_key:
        raise ConfigError("OPENAI_API_KEY is missing")
    return {"Authorization": f"Bearer {settings.api_key}", "Content-Type": "application/json"}


class OpenAICompletionProvider(ICompletionProvider):
    """Chat Completions API client."""

    def __init__(self, settings: OpenAISettings, timeout: float = 30.0):
        self.settings = settings
        self.timeout = timeout

    def complete(self, prompt: str, system_message: str = DEFAULT_SYSTEM_MESSAGE,
                 temperature: float = DEFAULT_TEMPERATURE) -> Optional[str]:
        payload = {
            "model": self.settings.model,
            "temperature": temperature,
            "messages": [
                {"role": "system", "content": system_message or DEFAULT_SYSTEM_MESSAGE},
                {"role": "user", "content": prompt},
            ],
        }

        try:
            headers = _auth_headers(self.settings)
            status, data = request_json("POST", f"{OPENAI_API_BASE}/chat/completions", headers,
                                        payload, timeout=self.timeout)
        except (ConfigError, RetrievalError, ParseError) as e:
            logger.log_provider_call("openai", "chat", "failed", {"error": str(e)})
            return None

        if status != 200 or not isinstance(data, dict) or data.get("error"):
            logger.log_provider_call("openai", "chat", "failed", {
                "code": status,
                "error": dig(data, "error") or "Non-200 response"
            })
            return None

        content = dig(data, "choices", 0, "message", "content")
        if not isinstance(content, str) or not content.strip():
            logger.log_provider_call("openai", "chat", "failed", {"error": "missing choices[0].message.content"})
            return None

        logger.log_provider_call("openai", "chat", "success", {"model": self.settings.model,
                                                                "response_length": len(content)})
        return content


class OpenAIEmbeddingProvider(IEmbeddingProvider):
    """Embeddings API client."""

    name = "openai_embedding"

    def __init__(self, settings: OpenAISettings, max_tokens: int = DEFAULT_MAX_TOKENS, timeout: float = 30.0):
        super().__init__(max_tokens)
        self.settings = settings
        self.timeout = timeout
        self._dimension = None

    def _embed(self, text: str) -> Optional[List[float]]:
        try:
            headers = _auth_headers(self.settings)
            status, data = request_json("POST", f"{OPENAI_API_BASE}/embeddings", headers,
                                        {"model": self.settings.embedding_model, "input": text},
                                        timeout=self.timeout)
        except (ConfigError, RetrievalError, ParseError) as e:
            logger.log_provider_call(self.name, "embed", "failed", {"error": str(e)})
            return None

        if status != 200:
            logger.log_provider_call(self.name, "embed", "failed", {"code": status, "response": data})
            return None

        embedding = dig(data, "data", 0, "embedding")
        if not isinstance(embedding, list) or not embedding:
            logger.log_provider_call(self.name, "embed", "failed", {"error": "unexpected response format"})
            return None

        self._dimension = len(embedding)
        logger.log_provider_call(self.name, "embed", "success", {"dimension": len(embedding)})
        return embedding

    def get_dimension(self) -> int:
        # text-embedding-3-small until the first response says otherwise
        return self._dimension or 1536
