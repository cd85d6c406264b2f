"""
Completion providers: mock, Ollama and OpenAI.
"""

from .completion import ICompletionProvider, MockCompletionProvider

__all__ = [
    'ICompletionProvider',
    'MockCompletionProvider'
]
