"""
Ollama-based completion provider for local models.
"""

from datetime import datetime
from typing import Dict, List, Optional

import httpx
import ollama

from .completion import ICompletionProvider, DEFAULT_SYSTEM_MESSAGE, DEFAULT_TEMPERATURE
from ..util.logging import logger

# Model errors, plus the transport errors the client raises when the service is down
OLLAMA_ERRORS = (ollama.ResponseError, httpx.HTTPError, ConnectionError)


class OllamaCompletionProvider(ICompletionProvider):
    """Completion provider backed by a local Ollama instance."""

    def __init__(self, model_name: str):
        self.model_name = model_name

    def complete(self, prompt: str, system_message: str = DEFAULT_SYSTEM_MESSAGE,
                 temperature: float = DEFAULT_TEMPERATURE) -> Optional[str]:
        messages = self._build_ollama_messages(prompt, system_message)
        start_time = datetime.now()

        try:
            response = ollama.chat(
                model=self.model_name,
                messages=messages,
                options={'temperature': temperature}
            )
        except OLLAMA_ERRORS as e:
            logger.log_provider_call("ollama", "chat", "failed", {"model": self.model_name, "error": str(e)})
            return None

        processing_time = int((datetime.now() - start_time).total_seconds() * 1000)
        message = response.get('message') if hasattr(response, 'get') else getattr(response, 'message', None)
        content = (message.get('content') if hasattr(message, 'get') else getattr(message, 'content', None)) or ''

        if not content.strip():
            logger.log_provider_call("ollama", "chat", "failed", {"model": self.model_name, "error": "empty content"})
            return None

        logger.log_provider_call("ollama", "chat", "success", {
            "model": self.model_name,
            "processing_time_ms": processing_time,
            "response_length": len(content)
        })
        return content

    def _build_ollama_messages(self, prompt: str, system_message: str) -> List[Dict[str, str]]:
        messages = []
        if system_message:
            messages.append({'role': 'system', 'content': system_message})
        messages.append({'role': 'user', 'content': prompt})
        return messages


def check_ollama_health() -> bool:
    """Check that the Ollama service answers."""
    try:
        ollama.list()
        return True
    except OLLAMA_ERRORS as e:
        logger.log_provider_call("ollama", "list", "failed", {"error": str(e)})
        return False
