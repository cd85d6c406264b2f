"""
Completion provider interface and an offline mock.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

DEFAULT_SYSTEM_MESSAGE = "You are a helpful assistant."
DEFAULT_TEMPERATURE = 0.3


class ICompletionProvider(ABC):
    """Abstract interface for text completion providers."""

    @abstractmethod
    def complete(self, prompt: str, system_message: str = DEFAULT_SYSTEM_MESSAGE,
                 temperature: float = DEFAULT_TEMPERATURE) -> Optional[str]:
        """
        Generate text for a prompt.

        Returns:
            The response text, or None on any failure. Never raises.
        """
        pass


class MockCompletionProvider(ICompletionProvider):
    """
    Canned responses in the three-section summary format.
    Used for dry runs and development when no model is available.
    """

    def __init__(self, response: Optional[str] = None):
        self.response = response
        self.calls: List[Tuple[str, str, float]] = []

    def complete(self, prompt: str, system_message: str = DEFAULT_SYSTEM_MESSAGE,
                 temperature: float = DEFAULT_TEMPERATURE) -> Optional[str]:
        self.calls.append((prompt, system_message, temperature))
        if self.response is not None:
            return self.response
        return self._generate_mock_response(prompt)

    def _generate_mock_response(self, prompt: str) -> str:
        """Echo the first line of new content as the summary."""
        content = prompt.split("New Content:", 1)[-1]
        first_line = next((line.strip() for line in content.splitlines()
                           if line.strip() and line.strip() != "---"), "No content.")
        return (
            "Summary of Changes (with Context and Progress):\n"
            f"- Updated: {first_line[:120]}\n"
            "\n"
            "Outstanding Action Items:\n"
            "- No action items.\n"
        )
